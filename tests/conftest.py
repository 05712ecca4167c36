from __future__ import annotations

import pytest

from quizwizard.catalog import Catalog, load_catalog
from quizwizard.models import QuizTemplate, TemplateDifficulty, TemplateRound
from quizwizard.storage import MemoryStorage
from quizwizard.store import ConfigStore

_ENV_KEYS = (
    "QUIZWIZARD_STATE_PATH",
    "QUIZWIZARD_ROUND_TYPES_PATH",
    "QUIZWIZARD_TEMPLATES_PATH",
    "QUIZWIZARD_EXTRAS_PATH",
    "QUIZWIZARD_BREAK_STRATEGY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        # setenv records the prior value, or its absence, for undo.
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def catalog() -> Catalog:
    return load_catalog()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> ConfigStore:
    return ConfigStore(storage, clock=lambda: 1_700_000_000.0)


def make_template(
    round_types: list[str],
    *,
    template_id: str = "test-template",
    difficulty: TemplateDifficulty = TemplateDifficulty.MEDIUM,
    tags: tuple[str, ...] = (),
    overrides: tuple = (),
) -> QuizTemplate:
    return QuizTemplate(
        id=template_id,
        name="Test template",
        description="",
        difficulty=difficulty,
        rounds=tuple(TemplateRound(round_type, "General Knowledge", "medium") for round_type in round_types),
        tags=tags,
        overrides=overrides,
    )
