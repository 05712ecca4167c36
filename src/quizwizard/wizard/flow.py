"""Step flow controller and the interactive wizard loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from quizwizard.ui.render import render_gap
from quizwizard.wizard.state import (
    LAST_INDEX,
    STEP_ORDER,
    StepNavigation,
    WizardContext,
    WizardStep,
    step_at,
    step_index,
)
from quizwizard.wizard.steps import complete_setup, run_step

if TYPE_CHECKING:
    from quizwizard.store import ConfigStore

logger = logging.getLogger(__name__)


class StepFlowController:
    """Moves the store's current step forward and back over the canonical order.

    Steps hidden by the current config are passed over in both directions, so a
    back after a next lands on the step it started from. At the review step a
    forward move calls ``on_complete`` instead of advancing.
    """

    def __init__(
        self,
        store: "ConfigStore",
        on_complete: Callable[[], Any],
        on_scroll_top: Callable[[], Any] | None = None,
    ) -> None:
        self._store = store
        self._on_complete = on_complete
        self._on_scroll_top = on_scroll_top

    @property
    def current_step(self) -> WizardStep:
        return step_at(self.current_index)

    @property
    def current_index(self) -> int:
        return step_index(self._store.get_step())

    def hidden_steps(self) -> frozenset[WizardStep]:
        if self._store.get_config().get("skip_round_configuration") is True:
            return frozenset({WizardStep.ROUNDS})
        return frozenset()

    def visible_steps(self) -> list[WizardStep]:
        hidden = self.hidden_steps()
        return [step for step in STEP_ORDER if step not in hidden]

    def go_next(self) -> WizardStep:
        current = self.current_index
        if current >= LAST_INDEX:
            logger.debug("Completing wizard from step %s.", STEP_ORDER[current].value)
            self._on_complete()
            return STEP_ORDER[current]
        target = self._move(current, self._neighbor(current, 1))
        if self._on_scroll_top is not None:
            self._on_scroll_top()
        return target

    def go_back(self) -> WizardStep:
        current = self.current_index
        return self._move(current, self._neighbor(current, -1))

    def reset_to_first(self) -> WizardStep:
        return self._move(self.current_index, 0)

    def navigation(self) -> StepNavigation:
        return StepNavigation(
            on_next=self.go_next,
            on_back=self.go_back if self.current_index > 0 else None,
            on_reset_to_first=self.reset_to_first,
        )

    def _neighbor(self, index: int, direction: int) -> int:
        hidden = self.hidden_steps()
        candidate = index + direction
        while 0 <= candidate <= LAST_INDEX and STEP_ORDER[candidate] in hidden:
            candidate += direction
        return max(0, min(candidate, LAST_INDEX))

    def _move(self, current: int, target: int) -> WizardStep:
        step = STEP_ORDER[target]
        logger.debug("Step %s -> %s.", STEP_ORDER[current].value, step.value)
        self._store.set_step(step)
        return step


def run_wizard(
    context: WizardContext,
    *,
    on_complete: Callable[[WizardContext], bool] | None = None,
) -> WizardContext:
    """Drive the step views until the review step completes."""
    finish = on_complete or complete_setup

    def handle_complete() -> None:
        context.completed = finish(context)

    controller = StepFlowController(
        context.store,
        on_complete=handle_complete,
        on_scroll_top=lambda: render_gap(after_prompt=True),
    )
    while not context.completed:
        visible = controller.visible_steps()
        step = controller.current_step
        position = visible.index(step) + 1 if step in visible else None
        run_step(step, context, controller.navigation(), position=position, total=len(visible))
    return context
