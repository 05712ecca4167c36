"""Wizard steps, their canonical order and the per-run wizard context."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from quizwizard.schedule.duration import BreakStrategy

if TYPE_CHECKING:
    from quizwizard.catalog import Catalog
    from quizwizard.store import ConfigStore


class WizardStep(str, Enum):
    SETUP = "setup"
    TEMPLATES = "templates"
    ROUNDS = "rounds"
    FUNDRAISING = "fundraising"
    PRIZES = "prizes"
    REVIEW = "review"


STEP_ORDER: tuple[WizardStep, ...] = (
    WizardStep.SETUP,
    WizardStep.TEMPLATES,
    WizardStep.ROUNDS,
    WizardStep.FUNDRAISING,
    WizardStep.PRIZES,
    WizardStep.REVIEW,
)
FIRST_STEP = STEP_ORDER[0]
LAST_INDEX = len(STEP_ORDER) - 1


def coerce_step(value: Any) -> WizardStep:
    """Resolve a step value, treating anything unrecognized as the first step."""
    if isinstance(value, WizardStep):
        return value
    try:
        return WizardStep(value)
    except (ValueError, TypeError):
        return FIRST_STEP


def step_index(value: Any) -> int:
    return STEP_ORDER.index(coerce_step(value))


def step_at(index: int) -> WizardStep:
    return STEP_ORDER[max(0, min(index, LAST_INDEX))]


@dataclass(frozen=True)
class StepNavigation:
    on_next: Callable[[], Any]
    on_back: Callable[[], Any] | None = None
    on_reset_to_first: Callable[[], Any] | None = None


@dataclass
class WizardContext:
    store: "ConfigStore"
    catalog: "Catalog"
    break_strategy: BreakStrategy = BreakStrategy.TAG_AWARE
    output_path: Path = field(default_factory=lambda: Path("quiz.config.json"))
    completed: bool = False
    exported_config: dict | None = None
