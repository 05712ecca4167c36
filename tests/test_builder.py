from __future__ import annotations

from dataclasses import replace
import logging

import pytest

from conftest import make_template
from quizwizard.catalog import FALLBACK_ROUND_CONFIG, Catalog
from quizwizard.models import RoundOverride, TemplateRound
from quizwizard.schedule import (
    build_round_definitions,
    build_template_selection,
    create_round_definition,
    default_custom_rounds,
    renumber_rounds,
)


def test_custom_selection_is_empty_and_not_skipped(catalog: Catalog) -> None:
    selection = build_template_selection("custom", catalog)
    assert selection.rounds == []
    assert selection.skip_round_configuration is False
    assert selection.is_custom is True


def test_unknown_template_is_empty_and_logged(catalog: Catalog, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        selection = build_template_selection("no-such-template", catalog)
    assert selection.rounds == []
    assert selection.skip_round_configuration is False
    assert selection.is_custom is False
    assert "no-such-template" in caplog.text


def test_catalog_template_rounds_are_numbered(catalog: Catalog) -> None:
    selection = build_template_selection("pub-classic-75", catalog)
    template = catalog.get_template("pub-classic-75")

    assert selection.skip_round_configuration is True
    assert [round_def.round_number for round_def in selection.rounds] == list(range(1, len(template.rounds) + 1))
    for round_def, template_round in zip(selection.rounds, template.rounds):
        assert round_def.round_type == template_round.round_type
        assert round_def.category == template_round.category
        assert round_def.difficulty == template_round.difficulty
        assert round_def.enabled_extras == {}
        assert round_def.config == catalog.get_round_type_defaults(template_round.round_type)


def test_config_fragment_uses_serialized_rounds(catalog: Catalog) -> None:
    fragment = build_template_selection("kids-sprint-35", catalog).config_fragment()
    assert fragment["selected_template"] == "kids-sprint-35"
    assert fragment["skip_round_configuration"] is True
    assert fragment["round_definitions"][1]["roundType"] == "speed_round"
    assert fragment["round_definitions"][1]["config"]["totalTimeSeconds"] == 75


def test_round_override_changes_only_named_fields(catalog: Catalog) -> None:
    template = replace(
        make_template(["general_trivia"]),
        rounds=(TemplateRound("general_trivia", "History", "hard", {"timePerQuestion": 30}),),
    )
    (round_def,) = build_round_definitions(template, catalog)
    defaults = catalog.get_round_type_defaults("general_trivia")

    assert round_def.config.time_per_question == 30
    assert round_def.config.questions_per_round == defaults.questions_per_round
    assert round_def.config.points_per_difficulty == defaults.points_per_difficulty


def test_type_predicate_beats_index_rule(catalog: Catalog) -> None:
    overrides = (
        RoundOverride(config={"timePerQuestion": 40}, round_type="general_trivia"),
        RoundOverride(config={"timePerQuestion": 20, "questionsPerRound": 9}, round_index=1),
    )
    template = make_template(["general_trivia", "wipeout"], overrides=overrides)
    first, second = build_round_definitions(template, catalog)

    assert first.config.time_per_question == 40
    assert first.config.questions_per_round == 9
    assert second.config == catalog.get_round_type_defaults("wipeout")


def test_demo_template_replaces_wipeout_config(catalog: Catalog) -> None:
    wipeout, speed = build_template_selection("demo-quiz", catalog).rounds
    assert wipeout.config.questions_per_round == 4
    assert wipeout.config.time_per_question == 10
    assert wipeout.config.points_lost_per_unanswered == 3
    assert speed.config.total_time_seconds == 20
    assert speed.config.skip_allowed is True


def test_unknown_round_type_uses_fallback(catalog: Catalog, caplog: pytest.LogCaptureFixture) -> None:
    template = make_template(["karaoke"])
    with caplog.at_level(logging.WARNING):
        (round_def,) = build_round_definitions(template, catalog)
    assert round_def.config == FALLBACK_ROUND_CONFIG
    assert "karaoke" in caplog.text


def test_zeroed_pacing_gets_fallback_timing(catalog: Catalog) -> None:
    template = make_template(
        ["general_trivia"],
        overrides=(RoundOverride(config={"timePerQuestion": 0}, round_index=1),),
    )
    (round_def,) = build_round_definitions(template, catalog)
    assert round_def.config.time_per_question == FALLBACK_ROUND_CONFIG.time_per_question
    assert round_def.config.questions_per_round == 6


def test_create_round_definition_seeds_extras(catalog: Catalog) -> None:
    round_def = create_round_definition("general_trivia", 2, catalog)
    assert round_def.round_number == 2
    assert round_def.category == catalog.categories_for("general_trivia")[0]
    assert round_def.difficulty == "medium"
    assert round_def.enabled_extras == {"buyHint": False, "robPoints": False, "freezeOutTeam": False}

    speed = create_round_definition("speed_round", 1, catalog)
    assert speed.enabled_extras == {"robPoints": False}


def test_default_custom_rounds(catalog: Catalog) -> None:
    rounds = default_custom_rounds(catalog)
    assert [round_def.round_type for round_def in rounds] == ["general_trivia", "wipeout", "general_trivia"]
    assert [round_def.round_number for round_def in rounds] == [1, 2, 3]


def test_renumber_rounds(catalog: Catalog) -> None:
    rounds = [create_round_definition("wipeout", number, catalog) for number in (4, 9, 2)]
    assert [round_def.round_number for round_def in renumber_rounds(rounds)] == [1, 2, 3]
    assert [round_def.round_number for round_def in rounds] == [4, 9, 2]
