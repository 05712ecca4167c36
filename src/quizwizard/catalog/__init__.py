"""Catalog loader for round types, fundraising extras and quiz templates."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any, Callable, TypeVar

from quizwizard.models import (
    INT_CONFIG_FIELDS,
    FundraisingExtraDefinition,
    PacingModel,
    QuizTemplate,
    RoundConfig,
    RoundOverride,
    RoundTypeDefinition,
    RoundTypeId,
    TemplateDifficulty,
    TemplateRound,
    coerce_int,
    normalize_config_overrides,
)

logger = logging.getLogger(__name__)

CUSTOM_TEMPLATE_ID = "custom"

# Used when a template references a round type the catalog does not know.
FALLBACK_ROUND_CONFIG = RoundConfig(questions_per_round=6, time_per_question=25)

T = TypeVar("T")


class CatalogError(ValueError):
    """Raised when catalog data is malformed."""


@dataclass(frozen=True)
class Catalog:
    round_types: dict[str, RoundTypeDefinition]
    templates: list[QuizTemplate]
    extras: list[FundraisingExtraDefinition] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def list_templates(self) -> list[QuizTemplate]:
        return list(self.templates)

    def get_template(self, template_id: str) -> QuizTemplate | None:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def list_round_types(self) -> list[RoundTypeDefinition]:
        return list(self.round_types.values())

    def get_round_type(self, round_type: str) -> RoundTypeDefinition | None:
        return self.round_types.get(str(getattr(round_type, "value", round_type)))

    def get_round_type_defaults(self, round_type: str) -> RoundConfig:
        definition = self.get_round_type(round_type)
        if definition is None:
            logger.warning("Unknown round type %r; using fallback round config.", round_type)
            return FALLBACK_ROUND_CONFIG
        return definition.default_config

    def categories_for(self, round_type: str) -> list[str]:
        definition = self.get_round_type(round_type)
        return list(definition.categories) if definition else []

    def list_extras(self, round_type: str | None = None) -> list[FundraisingExtraDefinition]:
        if round_type is None:
            return list(self.extras)
        return [extra for extra in self.extras if extra.applies_to(round_type)]


def load_catalog(
    *,
    round_types_path: Path | None = None,
    templates_path: Path | None = None,
    extras_path: Path | None = None,
) -> Catalog:
    """Load the catalog; explicit paths win over the QUIZWIZARD_*_PATH env vars."""
    round_types, round_note = _load_catalog(
        env_var="QUIZWIZARD_ROUND_TYPES_PATH",
        override=round_types_path,
        filename="round_types.json",
        parse=_parse_round_types,
    )
    templates, template_note = _load_catalog(
        env_var="QUIZWIZARD_TEMPLATES_PATH",
        override=templates_path,
        filename="templates.json",
        parse=_parse_templates,
    )
    extras, extras_note = _load_catalog(
        env_var="QUIZWIZARD_EXTRAS_PATH",
        override=extras_path,
        filename="extras.json",
        parse=_parse_extras,
    )
    notes = [note for note in (round_note, template_note, extras_note) if note]
    return Catalog(
        round_types={item.id: item for item in round_types},
        templates=templates,
        extras=extras,
        notes=notes,
    )


def _load_catalog(
    *,
    env_var: str,
    override: Path | None = None,
    filename: str,
    parse: Callable[[Any], list[T]],
) -> tuple[list[T], str | None]:
    if override is None and os.getenv(env_var):
        override = Path(os.environ[env_var])
    if override is not None:
        try:
            return parse(json.loads(override.read_text(encoding="utf-8"))), None
        except Exception as exc:  # noqa: BLE001
            logger.warning("Catalog override %s=%s failed: %s", env_var, override, exc)
            return _load_builtin(filename, parse), f"Catalog override failed ({env_var}). Using built-in catalog."
    return _load_builtin(filename, parse), None


def _load_builtin(filename: str, parse: Callable[[Any], list[T]]) -> list[T]:
    data = resources.files(__name__).joinpath(filename).read_text(encoding="utf-8")
    return parse(json.loads(data))


def _require_list(data: Any, label: str) -> list[Any]:
    if not isinstance(data, list):
        raise CatalogError(f"{label} catalog must be a list of items.")
    if not data:
        raise CatalogError(f"{label} catalog is empty.")
    return data


def _require_text(raw: dict, key: str, label: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise CatalogError(f"{label} missing '{key}'.")
    return value.strip()


def _optional_text(raw: dict, key: str, default: str = "") -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        return default
    return value.strip()


def _optional_int(raw: dict, key: str, default: int, label: str) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise CatalogError(f"{label} '{key}' must be an integer.")
    return value


def _parse_config(raw: Any, label: str) -> RoundConfig:
    if not isinstance(raw, dict):
        raise CatalogError(f"{label} must be an object.")
    for name, value in normalize_config_overrides(raw).items():
        if name in INT_CONFIG_FIELDS and value is not None and coerce_int(value) != value:
            raise CatalogError(f"{label} field '{name}' must be an integer.")
    return RoundConfig.from_dict(raw)


def _parse_round_types(data: Any) -> list[RoundTypeDefinition]:
    items: list[RoundTypeDefinition] = []
    for idx, raw in enumerate(_require_list(data, "Round type")):
        if not isinstance(raw, dict):
            raise CatalogError(f"Round type {idx} must be an object.")
        type_id = _require_text(raw, "id", f"Round type {idx}")
        try:
            type_id = RoundTypeId(type_id).value
        except ValueError as exc:
            raise CatalogError(f"Round type {idx} has unsupported id '{type_id}'.") from exc
        try:
            pacing = PacingModel(raw.get("pacing", PacingModel.PER_QUESTION.value))
        except ValueError as exc:
            raise CatalogError(f"Round type {type_id} has unsupported pacing.") from exc
        default_config = _parse_config(raw.get("defaultConfig") or {}, f"Round type {type_id} default config")
        if not default_config.has_positive_pacing():
            raise CatalogError(f"Round type {type_id} default config has no positive pacing.")
        categories = raw.get("categories") or []
        items.append(
            RoundTypeDefinition(
                id=type_id,
                name=_optional_text(raw, "name", type_id) or type_id,
                description=_optional_text(raw, "description"),
                pacing=pacing,
                default_config=default_config,
                categories=tuple(str(item) for item in categories if isinstance(item, str)),
                is_default=bool(raw.get("default", False)),
            )
        )
    return items


def _parse_extras(data: Any) -> list[FundraisingExtraDefinition]:
    items: list[FundraisingExtraDefinition] = []
    for idx, raw in enumerate(_require_list(data, "Extras")):
        if not isinstance(raw, dict):
            raise CatalogError(f"Extra {idx} must be an object.")
        extra_id = _require_text(raw, "id", f"Extra {idx}")
        applicable = raw.get("applicableTo", "global")
        if isinstance(applicable, list):
            applicable_to: tuple[str, ...] | str = tuple(str(item) for item in applicable)
        elif applicable == "global":
            applicable_to = "global"
        else:
            raise CatalogError(f"Extra {extra_id} has invalid 'applicableTo'.")
        items.append(
            FundraisingExtraDefinition(
                id=extra_id,
                name=_optional_text(raw, "name", extra_id) or extra_id,
                description=_optional_text(raw, "description"),
                max_per_team=_optional_int(raw, "maxPerTeam", 1, f"Extra {extra_id}"),
                applicable_to=applicable_to,
            )
        )
    return items


def _parse_templates(data: Any) -> list[QuizTemplate]:
    items: list[QuizTemplate] = []
    seen: set[str] = set()
    for idx, raw in enumerate(_require_list(data, "Template")):
        if not isinstance(raw, dict):
            raise CatalogError(f"Template {idx} must be an object.")
        template_id = _require_text(raw, "id", f"Template {idx}")
        if template_id == CUSTOM_TEMPLATE_ID:
            raise CatalogError(f"Template id '{CUSTOM_TEMPLATE_ID}' is reserved.")
        if template_id in seen:
            raise CatalogError(f"Duplicate template id '{template_id}'.")
        seen.add(template_id)

        rounds_raw = raw.get("rounds")
        if not isinstance(rounds_raw, list) or not rounds_raw:
            raise CatalogError(f"Template {template_id} must define rounds.")
        rounds = []
        for round_idx, round_raw in enumerate(rounds_raw, start=1):
            if not isinstance(round_raw, dict):
                raise CatalogError(f"Template {template_id} round {round_idx} must be an object.")
            custom = round_raw.get("customConfig") or {}
            rounds.append(
                TemplateRound(
                    round_type=_require_text(round_raw, "type", f"Template {template_id} round {round_idx}"),
                    category=round_raw.get("category"),
                    difficulty=round_raw.get("difficulty"),
                    custom_config=dict(custom) if isinstance(custom, dict) else {},
                )
            )

        overrides = []
        for override_raw in raw.get("overrides") or []:
            if not isinstance(override_raw, dict):
                raise CatalogError(f"Template {template_id} override must be an object.")
            round_index = override_raw.get("roundIndex")
            round_type = override_raw.get("roundType")
            if round_index is None and round_type is None:
                raise CatalogError(f"Template {template_id} override needs 'roundIndex' or 'roundType'.")
            overrides.append(
                RoundOverride(
                    config=dict(override_raw.get("config") or {}),
                    round_index=int(round_index) if round_index is not None else None,
                    round_type=str(round_type) if round_type is not None else None,
                    replace=bool(override_raw.get("replace", False)),
                )
            )

        tags = raw.get("tags") or []
        items.append(
            QuizTemplate(
                id=template_id,
                name=_optional_text(raw, "name", template_id) or template_id,
                description=_optional_text(raw, "description"),
                difficulty=TemplateDifficulty.parse(raw.get("difficulty"), TemplateDifficulty.MEDIUM),
                rounds=tuple(rounds),
                tags=tuple(str(tag) for tag in tags if isinstance(tag, str)),
                overrides=tuple(overrides),
            )
        )
    return items
