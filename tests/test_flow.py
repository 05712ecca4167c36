from __future__ import annotations

import random

import pytest

from quizwizard.store import ConfigStore
from quizwizard.wizard import StepFlowController, WizardStep
from quizwizard.wizard.state import LAST_INDEX, STEP_ORDER, coerce_step, step_index


class Recorder:
    def __init__(self) -> None:
        self.completed = 0
        self.scrolled = 0

    def complete(self) -> None:
        self.completed += 1

    def scroll(self) -> None:
        self.scrolled += 1


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def controller(store: ConfigStore, recorder: Recorder) -> StepFlowController:
    return StepFlowController(store, on_complete=recorder.complete, on_scroll_top=recorder.scroll)


def test_next_walks_canonical_order(controller: StepFlowController, recorder: Recorder) -> None:
    visited = [controller.current_step]
    for _ in range(LAST_INDEX):
        visited.append(controller.go_next())
    assert visited == list(STEP_ORDER)
    assert recorder.scrolled == LAST_INDEX
    assert recorder.completed == 0


def test_skip_flag_passes_over_rounds(store: ConfigStore, controller: StepFlowController) -> None:
    store.update_config({"skip_round_configuration": True})
    store.set_step(WizardStep.TEMPLATES)

    assert controller.go_next() == WizardStep.FUNDRAISING
    assert controller.go_back() == WizardStep.TEMPLATES


def test_without_skip_rounds_is_visited(store: ConfigStore, controller: StepFlowController) -> None:
    store.set_step(WizardStep.TEMPLATES)
    assert controller.go_next() == WizardStep.ROUNDS
    assert controller.go_next() == WizardStep.FUNDRAISING
    assert controller.go_back() == WizardStep.ROUNDS


@pytest.mark.parametrize("flag", ["true", 1, "yes", None])
def test_non_true_flag_means_no_skip(store: ConfigStore, controller: StepFlowController, flag) -> None:
    store.update_config({"skip_round_configuration": flag})
    store.set_step(WizardStep.TEMPLATES)
    assert controller.go_next() == WizardStep.ROUNDS


def test_review_next_completes_without_moving(
    store: ConfigStore,
    controller: StepFlowController,
    recorder: Recorder,
) -> None:
    store.set_step(WizardStep.REVIEW)
    assert controller.go_next() == WizardStep.REVIEW
    assert recorder.completed == 1
    assert recorder.scrolled == 0
    assert store.get_step() == WizardStep.REVIEW


def test_back_from_first_step_stays(controller: StepFlowController) -> None:
    assert controller.go_back() == WizardStep.SETUP
    assert controller.navigation().on_back is None


def test_reset_to_first(store: ConfigStore, controller: StepFlowController) -> None:
    store.update_config({"skip_round_configuration": True})
    store.set_step(WizardStep.PRIZES)
    assert controller.reset_to_first() == WizardStep.SETUP
    assert store.get_step() == WizardStep.SETUP


@pytest.mark.parametrize("skip", [False, True])
def test_back_after_next_returns_to_start(store: ConfigStore, controller: StepFlowController, skip: bool) -> None:
    store.update_config({"skip_round_configuration": skip})
    for step in controller.visible_steps()[:-1]:
        store.set_step(step)
        controller.go_next()
        controller.go_back()
        assert store.get_step() == step


def test_index_stays_in_bounds(store: ConfigStore, controller: StepFlowController) -> None:
    rng = random.Random(7)
    for _ in range(300):
        action = rng.choice(["next", "back", "flip"])
        if action == "next":
            controller.go_next()
        elif action == "back":
            controller.go_back()
        else:
            store.update_config({"skip_round_configuration": rng.choice([True, False])})
        assert 0 <= controller.current_index <= LAST_INDEX


def test_unknown_step_values_resolve_to_first() -> None:
    assert coerce_step("stepPrizes") == WizardStep.SETUP
    assert coerce_step(None) == WizardStep.SETUP
    assert coerce_step(["rounds"]) == WizardStep.SETUP
    assert step_index("review") == LAST_INDEX
