"""Environment-driven settings and a minimal .env loader."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Mapping, MutableMapping

from quizwizard.schedule.duration import BreakStrategy

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path(".quizwizard") / "setup-state.json"


def load_dotenv(path: str | Path = ".env", environ: MutableMapping[str, str] | None = None) -> list[str]:
    """Copy KEY=value lines from a .env file into the environment.

    Values already present win. Returns the keys that were set.
    """
    target = os.environ if environ is None else environ
    env_path = Path(path)
    try:
        text = env_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        logger.warning("Could not read %s: %s", env_path, exc)
        return []

    loaded: list[str] = []
    for number, line in enumerate(text.splitlines(), start=1):
        entry = line.strip()
        if entry.startswith("export "):
            entry = entry[len("export "):].lstrip()
        if not entry or entry.startswith("#"):
            continue
        key, sep, value = entry.partition("=")
        key, value = key.strip(), value.strip()
        if not sep or not key:
            logger.debug("Skipping %s line %d: not KEY=value.", env_path, number)
            continue
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        if not value or key in target:
            continue
        target[key] = value
        loaded.append(key)
    if loaded:
        logger.debug("Loaded %s from %s.", ", ".join(loaded), env_path)
    return loaded


@dataclass(frozen=True)
class Settings:
    state_path: Path = DEFAULT_STATE_PATH
    break_strategy: BreakStrategy = BreakStrategy.TAG_AWARE
    round_types_path: Path | None = None
    templates_path: Path | None = None
    extras_path: Path | None = None
    notes: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        notes: list[str] = []

        strategy_raw = env.get("QUIZWIZARD_BREAK_STRATEGY", "").strip().lower()
        strategy = BreakStrategy.TAG_AWARE
        if strategy_raw:
            try:
                strategy = BreakStrategy(strategy_raw)
            except ValueError:
                notes.append(f"Unknown QUIZWIZARD_BREAK_STRATEGY '{strategy_raw}'. Using tag-aware breaks.")

        state_path = env.get("QUIZWIZARD_STATE_PATH", "").strip()
        return cls(
            state_path=Path(state_path).expanduser() if state_path else DEFAULT_STATE_PATH,
            break_strategy=strategy,
            round_types_path=_optional_path(env, "QUIZWIZARD_ROUND_TYPES_PATH"),
            templates_path=_optional_path(env, "QUIZWIZARD_TEMPLATES_PATH"),
            extras_path=_optional_path(env, "QUIZWIZARD_EXTRAS_PATH"),
            notes=notes,
        )


def _optional_path(env: Mapping[str, str], key: str) -> Path | None:
    value = env.get(key, "").strip()
    return Path(value).expanduser() if value else None
