"""Materialize concrete round definitions from catalog templates."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Iterable, Sequence

from quizwizard.catalog import CUSTOM_TEMPLATE_ID, FALLBACK_ROUND_CONFIG, Catalog
from quizwizard.models import (
    Difficulty,
    QuizTemplate,
    RoundConfig,
    RoundDefinition,
    RoundOverride,
    RoundTypeId,
    TemplateRound,
)

logger = logging.getLogger(__name__)

MAX_ROUNDS = 8
MIN_ROUNDS = 1

DEFAULT_CUSTOM_ROUND_TYPES = (
    RoundTypeId.GENERAL_TRIVIA.value,
    RoundTypeId.WIPEOUT.value,
    RoundTypeId.GENERAL_TRIVIA.value,
)


@dataclass(frozen=True)
class TemplateSelection:
    template_id: str
    rounds: list[RoundDefinition]
    skip_round_configuration: bool
    is_custom: bool

    def config_fragment(self) -> dict:
        return {
            "selected_template": self.template_id,
            "is_custom_quiz": self.is_custom,
            "skip_round_configuration": self.skip_round_configuration,
            "round_definitions": [round_def.to_dict() for round_def in self.rounds],
        }


def build_template_selection(template_id: str, catalog: Catalog) -> TemplateSelection:
    if template_id == CUSTOM_TEMPLATE_ID:
        return TemplateSelection(
            template_id=CUSTOM_TEMPLATE_ID,
            rounds=[],
            skip_round_configuration=False,
            is_custom=True,
        )

    template = catalog.get_template(template_id)
    if template is None:
        logger.warning("Unknown template %r; rounds must be configured manually.", template_id)
        return TemplateSelection(
            template_id=template_id,
            rounds=[],
            skip_round_configuration=False,
            is_custom=False,
        )

    return TemplateSelection(
        template_id=template.id,
        rounds=build_round_definitions(template, catalog),
        skip_round_configuration=True,
        is_custom=False,
    )


def build_round_definitions(template: QuizTemplate, catalog: Catalog) -> list[RoundDefinition]:
    rounds: list[RoundDefinition] = []
    for round_number, template_round in enumerate(template.rounds, start=1):
        config = resolve_round_config(template_round, round_number, catalog, template.overrides)
        rounds.append(
            RoundDefinition(
                round_number=round_number,
                round_type=template_round.round_type,
                config=config,
                category=template_round.category,
                difficulty=template_round.difficulty,
                enabled_extras={},
            )
        )
    return rounds


def resolve_round_config(
    template_round: TemplateRound,
    round_number: int,
    catalog: Catalog,
    overrides: Sequence[RoundOverride] = (),
) -> RoundConfig:
    config = catalog.get_round_type_defaults(template_round.round_type).merged(template_round.custom_config)
    for override in _ordered_overrides(overrides, round_number, template_round.round_type):
        if override.replace:
            config = RoundConfig.from_dict(override.config)
        else:
            config = config.merged(override.config)
    if not config.has_positive_pacing():
        logger.warning(
            "Round %s (%s) resolved without positive pacing; applying fallback timing.",
            round_number,
            template_round.round_type,
        )
        config = replace(
            config,
            questions_per_round=config.questions_per_round or FALLBACK_ROUND_CONFIG.questions_per_round,
            time_per_question=FALLBACK_ROUND_CONFIG.time_per_question,
        )
    return config


def _ordered_overrides(
    overrides: Iterable[RoundOverride],
    round_number: int,
    round_type: str,
) -> list[RoundOverride]:
    # Index matches first, type predicates last so the predicate wins.
    matching = [override for override in overrides if override.matches(round_number, round_type)]
    return sorted(matching, key=lambda override: override.is_predicate)


def create_round_definition(round_type: str, round_number: int, catalog: Catalog) -> RoundDefinition:
    defaults = catalog.get_round_type_defaults(round_type)
    categories = catalog.categories_for(round_type)
    return RoundDefinition(
        round_number=round_number,
        round_type=round_type,
        config=defaults,
        category=categories[0] if categories else None,
        difficulty=Difficulty.MEDIUM.value,
        enabled_extras={extra.id: False for extra in catalog.list_extras(round_type)},
    )


def default_custom_rounds(catalog: Catalog) -> list[RoundDefinition]:
    return [
        create_round_definition(round_type, index, catalog)
        for index, round_type in enumerate(DEFAULT_CUSTOM_ROUND_TYPES, start=1)
    ]


def renumber_rounds(rounds: Iterable[RoundDefinition]) -> list[RoundDefinition]:
    return [replace(round_def, round_number=index) for index, round_def in enumerate(rounds, start=1)]
