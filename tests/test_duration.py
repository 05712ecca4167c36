from __future__ import annotations

import pytest

from conftest import make_template
from quizwizard.catalog import Catalog
from quizwizard.models import TemplateDifficulty, TemplateRound
from quizwizard.schedule import (
    BreakStrategy,
    break_positions,
    build_round_definitions,
    estimate_duration,
    estimate_setup,
    estimate_template,
    round_minutes,
)
from quizwizard.schedule.duration import FALLBACK_ROUND_MINUTES, round_half_up
from quizwizard.storage import MemoryStorage
from quizwizard.store import ConfigStore

FAMILY_TAGS = ("Audience: Family Friendly", "Topic: Mixed", "Duration: ≈60m")
ADULT_TAGS = ("Audience: Adults", "Topic: General")


def test_six_round_family_quiz_gets_one_midpoint_break(catalog: Catalog) -> None:
    template = make_template(["general_trivia"] * 6, tags=FAMILY_TAGS)
    estimate = estimate_template(template, catalog)

    assert estimate.display_round_minutes == [7.5] * 6
    assert estimate.break_positions == [3]
    assert estimate.break_minutes == 15
    assert estimate.total_minutes == 60


def test_time_boxed_and_per_question_minutes(catalog: Catalog) -> None:
    assert round_minutes(TemplateRound("speed_round", "Math", "easy"), catalog) == 5.0
    assert round_minutes(TemplateRound("wipeout", "History", "hard"), catalog) == pytest.approx(7.2)
    sprint = TemplateRound("speed_round", "Math", "easy", {"totalTimeSeconds": 20})
    assert round_minutes(sprint, catalog) == pytest.approx(20 * 4 / 60)


def test_unknown_round_type_counts_fallback_minutes(catalog: Catalog) -> None:
    assert round_minutes(TemplateRound("karaoke", None, None), catalog) == FALLBACK_ROUND_MINUTES


def test_demo_quiz_estimate(catalog: Catalog) -> None:
    estimate = estimate_template(catalog.get_template("demo-quiz"), catalog)
    assert estimate.display_round_minutes == [2.0, 1.3]
    assert estimate.break_positions == []
    assert estimate.total_minutes == 3


@pytest.mark.parametrize(
    ("count", "difficulty", "tags", "expected"),
    [
        (5, "Medium", ("Audience: Kids",), [3]),
        (6, "Hard", ("Audience: Teens",), [3]),
        (6, "Hard", ADULT_TAGS, [2, 4]),
        (7, "Easy", FAMILY_TAGS, [2, 4, 6]),
        (4, "Medium", FAMILY_TAGS, [3]),
        (6, "Medium", ADULT_TAGS, [3]),
        (3, "Medium", ADULT_TAGS, []),
        (1, "Hard", ADULT_TAGS, []),
    ],
)
def test_tag_aware_breaks(count: int, difficulty: str, tags: tuple[str, ...], expected: list[int]) -> None:
    assert break_positions(count, difficulty=difficulty, tags=tags) == expected


@pytest.mark.parametrize(("count", "expected"), [(2, []), (3, []), (4, [3]), (7, [3, 6]), (8, [3, 6])])
def test_legacy_breaks_ignore_tags(count: int, expected: list[int]) -> None:
    strategy = BreakStrategy.LEGACY_FIXED_INTERVAL
    assert break_positions(count, strategy=strategy, difficulty="Hard", tags=FAMILY_TAGS) == expected


@pytest.mark.parametrize("strategy", list(BreakStrategy))
@pytest.mark.parametrize("difficulty", list(TemplateDifficulty))
@pytest.mark.parametrize("tags", [FAMILY_TAGS, ADULT_TAGS, ()])
def test_total_never_drops_when_rounds_are_appended(
    catalog: Catalog,
    strategy: BreakStrategy,
    difficulty: TemplateDifficulty,
    tags: tuple[str, ...],
) -> None:
    pool = ["general_trivia", "speed_round", "wipeout", "speed_round", "general_trivia", "wipeout", "speed_round", "general_trivia"]
    rounds = build_round_definitions(make_template(pool), catalog)
    totals = [
        estimate_duration(rounds[:count], catalog, strategy=strategy, difficulty=difficulty, tags=tags).total_minutes_exact
        for count in range(len(rounds) + 1)
    ]
    assert totals == sorted(totals)


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(0.25, 1) == 0.3
    assert round_half_up(7.449, 1) == 7.4


def test_estimate_setup_uses_selected_template(store: ConfigStore, catalog: Catalog) -> None:
    store.set_template("family-fiesta-60", catalog)
    template = catalog.get_template("family-fiesta-60")

    from_setup = estimate_setup(store.get_config(), catalog)
    from_template = estimate_template(template, catalog)
    assert from_setup == from_template

    legacy = estimate_setup(store.get_config(), catalog, BreakStrategy.LEGACY_FIXED_INTERVAL)
    assert legacy.break_positions == [3]
    assert legacy.strategy == BreakStrategy.LEGACY_FIXED_INTERVAL


def test_empty_setup_has_no_rounds(catalog: Catalog) -> None:
    estimate = estimate_setup({}, catalog)
    assert estimate.round_minutes == []
    assert estimate.total_minutes == 0


def _saved_store(rounds: list[dict]) -> ConfigStore:
    snapshot = {
        "version": 3,
        "step": "review",
        "config": {"round_definitions": rounds},
        "session_ids": {"room_id": None, "host_id": None},
        "last_saved_at": None,
    }
    return ConfigStore.open(MemoryStorage(snapshot))


def test_saved_round_with_text_pacing_is_estimated(catalog: Catalog) -> None:
    store = _saved_store(
        [
            {"roundNumber": 1, "roundType": "general_trivia", "config": {"questionsPerRound": "6", "timePerQuestion": 25}},
            {"roundNumber": 2, "roundType": "wipeout", "config": {"questionsPerRound": 8, "timePerQuestion": "fast"}},
        ]
    )

    estimate = estimate_setup(store.get_config(), catalog)
    assert estimate.display_round_minutes == [7.5, 7.2]
    assert store.get_rounds()[0].config.questions_per_round == 6


@pytest.mark.parametrize(
    ("saved", "expected"),
    [
        ({"roundType": "general_trivia"}, 7.5),
        ({"roundType": "general_trivia", "config": {"questionsPerRound": 4}}, 5.0),
        ({"roundType": "speed_round", "config": {"totalTimeSeconds": 0}}, 5.0),
        ({"roundType": "wipeout", "config": {"timePerQuestion": -3}}, 7.2),
    ],
)
def test_saved_round_without_pacing_uses_type_defaults(catalog: Catalog, saved: dict, expected: float) -> None:
    estimate = estimate_setup(_saved_store([saved]).get_config(), catalog)
    assert estimate.display_round_minutes == [expected]
    assert estimate.total_minutes > 0


def test_legacy_round_without_config_keeps_its_minutes(catalog: Catalog) -> None:
    store = ConfigStore.open(
        MemoryStorage(
            {
                "currentStep": "review",
                "setupConfig": {"roundDefinitions": [{"roundNumber": 1, "roundType": "general_trivia"}]},
            }
        )
    )
    estimate = estimate_setup(store.get_config(), catalog)
    assert estimate.round_minutes == [7.5]
    assert estimate.total_minutes == 8
