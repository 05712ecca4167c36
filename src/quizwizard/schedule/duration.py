"""Duration model and break placement for quiz schedules.

Per-round minutes follow the round type's pacing model. Time-boxed rounds scale
their total time budget by ``TIME_BOXED_MULTIPLIER``; per-question rounds scale
``questions x seconds`` by ``PER_QUESTION_MULTIPLIER``. Both multipliers cover the
instructions, reveal and scoring around the raw answering window.

Breaks sit between rounds only. Positions are expressed as "after round N".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Any, Iterable, Mapping, Sequence, Union

from quizwizard.catalog import Catalog
from quizwizard.models import (
    AUDIENCE_PREFIX,
    PacingModel,
    QuizTemplate,
    RoundConfig,
    RoundDefinition,
    TemplateDifficulty,
    TemplateRound,
    parse_tag_value,
)
from quizwizard.schedule.builder import build_round_definitions

logger = logging.getLogger(__name__)

PER_QUESTION_MULTIPLIER = 3
TIME_BOXED_MULTIPLIER = 4
BREAK_MINUTES = 15
FALLBACK_ROUND_MINUTES = 10.0

LEGACY_BREAK_INTERVAL = 3
YOUNG_OR_MIXED_AUDIENCES = frozenset({"Family Friendly", "Kids", "Teens", "Mixed"})
_PACING_KEYS = frozenset({"questionsPerRound", "timePerQuestion", "totalTimeSeconds"})

RoundLike = Union[RoundDefinition, TemplateRound]


class BreakStrategy(str, Enum):
    TAG_AWARE = "tag-aware"
    LEGACY_FIXED_INTERVAL = "legacy"


@dataclass(frozen=True)
class DurationEstimate:
    round_minutes: list[float]
    break_positions: list[int]
    break_minutes: int
    total_minutes_exact: float
    total_minutes: int
    strategy: BreakStrategy

    @property
    def display_round_minutes(self) -> list[float]:
        return [round_half_up(value, 1) for value in self.round_minutes]

    def to_dict(self) -> dict:
        return {
            "round_minutes": self.display_round_minutes,
            "break_positions": self.break_positions,
            "break_minutes": self.break_minutes,
            "total_minutes": self.total_minutes,
            "strategy": self.strategy.value,
        }


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_minutes(round_like: RoundLike, catalog: Catalog) -> float:
    """Unrounded minutes for one round."""
    definition = catalog.get_round_type(round_like.round_type)
    if definition is None:
        logger.warning("Unknown round type %r; using %s fallback minutes.", round_like.round_type, FALLBACK_ROUND_MINUTES)
        return FALLBACK_ROUND_MINUTES

    config = _resolved_config(round_like, catalog)
    if definition.pacing == PacingModel.TIME_BOXED and config.total_time_seconds:
        return config.total_time_seconds * TIME_BOXED_MULTIPLIER / 60
    questions = config.questions_per_round or 0
    seconds = config.time_per_question or 0
    return questions * seconds * PER_QUESTION_MULTIPLIER / 60


def _resolved_config(round_like: RoundLike, catalog: Catalog) -> RoundConfig:
    defaults = catalog.get_round_type_defaults(round_like.round_type)
    if isinstance(round_like, TemplateRound):
        return defaults.merged(round_like.custom_config)
    # Missing or non-positive pacing falls back to the round type defaults.
    stored = {
        key: value
        for key, value in round_like.config.to_dict().items()
        if key not in _PACING_KEYS or value > 0
    }
    return defaults.merged(stored)


def has_young_or_mixed_audience(tags: Iterable[str]) -> bool:
    for tag in tags:
        if parse_tag_value(tag, AUDIENCE_PREFIX) in YOUNG_OR_MIXED_AUDIENCES:
            return True
    return False


def break_positions(
    round_count: int,
    *,
    strategy: BreakStrategy = BreakStrategy.TAG_AWARE,
    difficulty: TemplateDifficulty | str | None = None,
    tags: Sequence[str] = (),
) -> list[int]:
    if strategy == BreakStrategy.LEGACY_FIXED_INTERVAL:
        return _every(LEGACY_BREAK_INTERVAL, round_count)

    if 5 <= round_count <= 6 and has_young_or_mixed_audience(tags):
        return [int(round_half_up(round_count / 2))]
    if TemplateDifficulty.parse(difficulty) == TemplateDifficulty.HARD or round_count >= 7:
        return _every(2, round_count)
    return _every(3, round_count)


def _every(interval: int, round_count: int) -> list[int]:
    return list(range(interval, round_count, interval))


def estimate_duration(
    rounds: Sequence[RoundLike],
    catalog: Catalog,
    *,
    strategy: BreakStrategy = BreakStrategy.TAG_AWARE,
    difficulty: TemplateDifficulty | str | None = None,
    tags: Sequence[str] = (),
) -> DurationEstimate:
    minutes = [round_minutes(round_like, catalog) for round_like in rounds]
    positions = break_positions(len(rounds), strategy=strategy, difficulty=difficulty, tags=tags)
    break_total = len(positions) * BREAK_MINUTES
    exact = sum(minutes) + break_total
    return DurationEstimate(
        round_minutes=minutes,
        break_positions=positions,
        break_minutes=break_total,
        total_minutes_exact=exact,
        total_minutes=int(round_half_up(exact)),
        strategy=strategy,
    )


def estimate_template(
    template: QuizTemplate,
    catalog: Catalog,
    strategy: BreakStrategy = BreakStrategy.TAG_AWARE,
) -> DurationEstimate:
    return estimate_duration(
        build_round_definitions(template, catalog),
        catalog,
        strategy=strategy,
        difficulty=template.difficulty,
        tags=template.tags,
    )


def estimate_setup(
    config: Mapping[str, Any],
    catalog: Catalog,
    strategy: BreakStrategy = BreakStrategy.TAG_AWARE,
) -> DurationEstimate:
    """Estimate a persisted setup config; difficulty and tags come from its selected template."""
    raw_rounds = config.get("round_definitions") or []
    rounds = [
        RoundDefinition.from_dict(raw, fallback_number=index)
        for index, raw in enumerate(raw_rounds, start=1)
        if isinstance(raw, Mapping)
    ]
    selected = config.get("selected_template")
    template = catalog.get_template(selected) if isinstance(selected, str) else None
    return estimate_duration(
        rounds,
        catalog,
        strategy=strategy,
        difficulty=template.difficulty if template else None,
        tags=template.tags if template else (),
    )
