"""Shared data types for round catalogs, templates and round definitions."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping


class RoundTypeId(str, Enum):
    GENERAL_TRIVIA = "general_trivia"
    WIPEOUT = "wipeout"
    SPEED_ROUND = "speed_round"


class PacingModel(str, Enum):
    PER_QUESTION = "per_question"
    TIME_BOXED = "time_boxed"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TemplateDifficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: Any, default: "TemplateDifficulty | None" = None) -> "TemplateDifficulty | None":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return default


AUDIENCE_PREFIX = "Audience: "
TOPIC_PREFIX = "Topic: "
DURATION_PREFIX = "Duration: "

# Serialized (camelCase) key for each RoundConfig field.
_CONFIG_KEYS: dict[str, str] = {
    "questions_per_round": "questionsPerRound",
    "time_per_question": "timePerQuestion",
    "total_time_seconds": "totalTimeSeconds",
    "points_per_difficulty": "pointsPerDifficulty",
    "points_lost_per_wrong": "pointsLostPerWrong",
    "points_lost_per_unanswered": "pointsLostPerUnanswered",
    "skip_allowed": "skipAllowed",
}
_CONFIG_FIELDS: dict[str, str] = {value: key for key, value in _CONFIG_KEYS.items()}
INT_CONFIG_FIELDS = (
    "questions_per_round",
    "time_per_question",
    "total_time_seconds",
    "points_lost_per_wrong",
    "points_lost_per_unanswered",
)


def coerce_int(value: Any) -> int | None:
    """Whole numbers (including numeric strings) as int; anything else as None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_tag_value(tag: str, prefix: str) -> str | None:
    if not tag.startswith(prefix):
        return None
    return tag[len(prefix):].strip()


def normalize_config_overrides(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Map a partial config (camelCase or snake_case keys) onto RoundConfig field names.

    Unknown keys are dropped.
    """
    normalized: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        if key in _CONFIG_KEYS:
            normalized[key] = value
        elif key in _CONFIG_FIELDS:
            normalized[_CONFIG_FIELDS[key]] = value
    return normalized


@dataclass(frozen=True)
class RoundConfig:
    questions_per_round: int | None = None
    time_per_question: int | None = None
    total_time_seconds: int | None = None
    points_per_difficulty: dict[str, int] | None = None
    points_lost_per_wrong: int | None = None
    points_lost_per_unanswered: int | None = None
    skip_allowed: bool | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "RoundConfig":
        values = normalize_config_overrides(raw)
        for name in INT_CONFIG_FIELDS:
            if name in values:
                values[name] = coerce_int(values[name])
        if not isinstance(values.get("skip_allowed"), (bool, type(None))):
            values.pop("skip_allowed")
        points = values.get("points_per_difficulty")
        if isinstance(points, Mapping):
            values["points_per_difficulty"] = dict(points)
        elif points is not None:
            values.pop("points_per_difficulty")
        return cls(**values)

    def merged(self, overrides: Mapping[str, Any] | None) -> "RoundConfig":
        """Apply overrides field by field; fields not mentioned keep their value."""
        values = {item.name: getattr(self, item.name) for item in fields(self)}
        values.update(normalize_config_overrides(overrides))
        return RoundConfig.from_dict(values)

    def has_positive_pacing(self) -> bool:
        return (self.time_per_question or 0) > 0 or (self.total_time_seconds or 0) > 0

    def to_dict(self) -> dict:
        data: dict[str, Any] = {}
        for name, key in _CONFIG_KEYS.items():
            value = getattr(self, name)
            if value is None:
                continue
            data[key] = dict(value) if isinstance(value, dict) else value
        return data


@dataclass(frozen=True)
class RoundTypeDefinition:
    id: str
    name: str
    description: str
    pacing: PacingModel
    default_config: RoundConfig
    categories: tuple[str, ...] = ()
    is_default: bool = False


@dataclass(frozen=True)
class FundraisingExtraDefinition:
    id: str
    name: str
    description: str
    max_per_team: int
    applicable_to: tuple[str, ...] | str

    def applies_to(self, round_type: str) -> bool:
        if self.applicable_to == "global":
            return True
        return round_type in self.applicable_to


@dataclass(frozen=True)
class TemplateRound:
    round_type: str
    category: str | None
    difficulty: str | None
    custom_config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RoundOverride:
    """Second-layer config override for rounds matched by position or by type."""

    config: dict[str, Any]
    round_index: int | None = None
    round_type: str | None = None
    replace: bool = False

    @property
    def is_predicate(self) -> bool:
        return self.round_type is not None

    def matches(self, round_number: int, round_type: str) -> bool:
        if self.round_type is not None:
            return round_type == self.round_type
        return self.round_index == round_number


@dataclass(frozen=True)
class QuizTemplate:
    id: str
    name: str
    description: str
    difficulty: TemplateDifficulty
    rounds: tuple[TemplateRound, ...]
    tags: tuple[str, ...] = ()
    overrides: tuple[RoundOverride, ...] = ()

    def tag_values(self, prefix: str) -> list[str]:
        values = []
        for tag in self.tags:
            value = parse_tag_value(tag, prefix)
            if value:
                values.append(value)
        return values

    @property
    def audiences(self) -> list[str]:
        return self.tag_values(AUDIENCE_PREFIX)

    @property
    def topics(self) -> list[str]:
        return self.tag_values(TOPIC_PREFIX)

    @property
    def durations(self) -> list[str]:
        return self.tag_values(DURATION_PREFIX)


@dataclass
class RoundDefinition:
    round_number: int
    round_type: str
    config: RoundConfig
    category: str | None = None
    difficulty: str | None = None
    enabled_extras: dict[str, bool] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return bool(self.category) and bool(self.difficulty)

    def to_dict(self) -> dict:
        return {
            "roundNumber": self.round_number,
            "roundType": str(getattr(self.round_type, "value", self.round_type)),
            "category": self.category,
            "difficulty": self.difficulty,
            "config": self.config.to_dict(),
            "enabledExtras": dict(self.enabled_extras),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, fallback_number: int = 1) -> "RoundDefinition":
        number = raw.get("roundNumber", raw.get("round_number"))
        if not isinstance(number, int) or isinstance(number, bool):
            number = fallback_number
        extras = raw.get("enabledExtras", raw.get("enabled_extras")) or {}
        if not isinstance(extras, Mapping):
            extras = {}
        config = raw.get("config")
        return cls(
            round_number=number,
            round_type=str(raw.get("roundType", raw.get("round_type", "")) or ""),
            config=RoundConfig.from_dict(config if isinstance(config, Mapping) else None),
            category=raw.get("category"),
            difficulty=raw.get("difficulty"),
            enabled_extras={str(key): bool(value) for key, value in extras.items()},
        )
