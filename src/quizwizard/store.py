"""Persisted, versioned container for the in-progress setup configuration."""

from __future__ import annotations

import copy
import logging
import time
from typing import Any, Callable, Mapping

from quizwizard.catalog import Catalog
from quizwizard.models import RoundDefinition
from quizwizard.schedule.builder import MAX_ROUNDS, MIN_ROUNDS, TemplateSelection, build_template_selection, renumber_rounds
from quizwizard.storage import MemoryStorage, SnapshotStorage
from quizwizard.wizard.state import FIRST_STEP, WizardStep, coerce_step

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 3
ROUND_DEFINITIONS_KEY = "round_definitions"
SKIP_ROUNDS_KEY = "skip_round_configuration"

_LEGACY_STEP_NAMES = {"stepPrizes": WizardStep.PRIZES.value}
_LEGACY_CONFIG_KEYS = {
    "selectedTemplate": "selected_template",
    "isCustomQuiz": "is_custom_quiz",
    "skipRoundConfiguration": SKIP_ROUNDS_KEY,
    "roundDefinitions": ROUND_DEFINITIONS_KEY,
    "hostName": "host_name",
    "entryFee": "entry_fee",
    "currencySymbol": "currency_symbol",
    "paymentMethod": "payment_method",
    "eventDateTime": "event_date_time",
    "fundraisingOptions": "fundraising_options",
    "fundraisingPrices": "fundraising_prices",
}


def default_setup_config() -> dict[str, Any]:
    return {
        "selected_template": None,
        "is_custom_quiz": False,
        SKIP_ROUNDS_KEY: False,
        ROUND_DEFINITIONS_KEY: [],
        "host_name": None,
        "entry_fee": None,
        "currency_symbol": None,
        "payment_method": None,
        "event_date_time": None,
        "fundraising_options": {},
        "fundraising_prices": {},
        "prizes": [],
    }


def empty_session_ids() -> dict[str, str | None]:
    return {"room_id": None, "host_id": None}


def empty_snapshot() -> dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "step": FIRST_STEP.value,
        "config": {},
        "session_ids": empty_session_ids(),
        "last_saved_at": None,
    }


def deep_merge(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Merge mappings key by key; any non-mapping value (lists included) replaces outright."""
    merged = dict(base)
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def migrate_snapshot(raw: Any) -> dict[str, Any]:
    """Reshape any persisted snapshot into the current version. Never raises."""
    try:
        return _migrate(raw)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Discarding unreadable setup snapshot: %s", exc)
        return empty_snapshot()


def _migrate(raw: Any) -> dict[str, Any]:
    if raw is None:
        return empty_snapshot()
    if not isinstance(raw, dict):
        raise ValueError("snapshot must be an object")
    version = raw.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        version = 1
    if version > SNAPSHOT_VERSION:
        logger.warning("Snapshot version %s is newer than %s; reading it as current.", version, SNAPSHOT_VERSION)

    payload = raw
    if version < 2:
        payload = _migrate_v1_to_v2(payload)
    if version < 3:
        payload = _migrate_v2_to_v3(payload)
    return _normalize(payload)


def _state_block(raw: dict) -> dict:
    state = raw.get("state")
    if isinstance(state, dict):
        return state
    return raw


def _migrate_v1_to_v2(raw: dict) -> dict:
    state = _state_block(raw)
    return {
        "version": 2,
        "state": {
            "flow": state.get("flow") or "web2",
            "currentStep": state.get("currentStep") or FIRST_STEP.value,
            "setupConfig": state.get("setupConfig") or {},
            "roomId": state.get("roomId"),
            "hostId": state.get("hostId"),
            "lastSavedAt": None,
        },
    }


def _migrate_v2_to_v3(raw: dict) -> dict:
    state = _state_block(raw)
    config = state.get("setupConfig")
    if not isinstance(config, dict):
        config = {}
    step = state.get("currentStep")
    last_saved_at = state.get("lastSavedAt")
    if isinstance(last_saved_at, (int, float)) and last_saved_at > 1e11:
        last_saved_at = last_saved_at / 1000
    return {
        "version": 3,
        "step": _LEGACY_STEP_NAMES.get(step, step),
        "config": deep_merge(
            default_setup_config(),
            {_LEGACY_CONFIG_KEYS.get(key, key): value for key, value in config.items()},
        ),
        "session_ids": {"room_id": state.get("roomId"), "host_id": state.get("hostId")},
        "last_saved_at": last_saved_at,
    }


def _normalize(payload: dict) -> dict[str, Any]:
    config = payload.get("config")
    if not isinstance(config, dict):
        config = {}
    if ROUND_DEFINITIONS_KEY in config:
        rounds = config[ROUND_DEFINITIONS_KEY]
        if not isinstance(rounds, list):
            rounds = []
        config[ROUND_DEFINITIONS_KEY] = [item for item in rounds if isinstance(item, dict)]
    if SKIP_ROUNDS_KEY in config:
        config[SKIP_ROUNDS_KEY] = config[SKIP_ROUNDS_KEY] is True

    session_raw = payload.get("session_ids")
    session_ids = empty_session_ids()
    if isinstance(session_raw, dict):
        for key in session_ids:
            value = session_raw.get(key)
            session_ids[key] = value if isinstance(value, str) else None

    last_saved_at = payload.get("last_saved_at")
    if not isinstance(last_saved_at, (int, float)) or isinstance(last_saved_at, bool):
        last_saved_at = None

    return {
        "version": SNAPSHOT_VERSION,
        "step": coerce_step(payload.get("step")).value,
        "config": config,
        "session_ids": session_ids,
        "last_saved_at": last_saved_at,
    }


class ConfigStore:
    """Setup configuration, current wizard step and session ids, persisted on every write.

    Writes are best effort: a failed save is logged and the in-memory state still
    advances. The next successful save re-synchronizes storage.
    """

    def __init__(
        self,
        storage: SnapshotStorage | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage: SnapshotStorage = storage if storage is not None else MemoryStorage()
        self._clock = clock
        self._config: dict[str, Any] = {}
        self._step = FIRST_STEP
        self._session_ids = empty_session_ids()
        self.last_saved_at: float | None = None

    @classmethod
    def open(cls, storage: SnapshotStorage, **kwargs: Any) -> "ConfigStore":
        store = cls(storage, **kwargs)
        store.load()
        return store

    def load(self) -> None:
        try:
            raw = self._storage.load()
        except (OSError, ValueError) as exc:
            logger.warning("Setup snapshot unavailable; starting empty: %s", exc)
            raw = None
        snapshot = migrate_snapshot(raw)
        self._config = snapshot["config"]
        self._step = coerce_step(snapshot["step"])
        self._session_ids = snapshot["session_ids"]
        self.last_saved_at = snapshot["last_saved_at"]

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "step": self._step.value,
            "config": copy.deepcopy(self._config),
            "session_ids": dict(self._session_ids),
            "last_saved_at": self.last_saved_at,
        }

    def _persist(self) -> None:
        self.last_saved_at = self._clock()
        try:
            self._storage.save(self.to_snapshot())
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Setup snapshot not persisted: %s", exc)

    def get_config(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def get_step(self) -> WizardStep:
        return self._step

    def get_session_ids(self) -> dict[str, str | None]:
        return dict(self._session_ids)

    def set_config(self, full: Mapping[str, Any]) -> None:
        self._config = copy.deepcopy(dict(full))
        self._persist()

    def update_config(self, partial: Mapping[str, Any]) -> None:
        for key, value in partial.items():
            if isinstance(value, Mapping) and isinstance(self._config.get(key), Mapping):
                self._merge_field(key, value)
            else:
                self._replace_field(key, value)
        self._persist()

    def merge_field(self, key: str, value: Mapping[str, Any]) -> None:
        if not isinstance(value, Mapping):
            raise TypeError(f"merge_field expects a mapping for '{key}', got {type(value).__name__}.")
        self._merge_field(key, value)
        self._persist()

    def replace_field(self, key: str, value: Any) -> None:
        self._replace_field(key, value)
        self._persist()

    def _merge_field(self, key: str, value: Mapping[str, Any]) -> None:
        current = self._config.get(key)
        if not isinstance(current, Mapping):
            current = {}
        self._config[key] = deep_merge(current, value)

    def _replace_field(self, key: str, value: Any) -> None:
        self._config[key] = copy.deepcopy(value)

    def set_step(self, step: WizardStep | str) -> None:
        self._step = coerce_step(step)
        self._persist()

    def set_session_ids(self, room_id: str, host_id: str) -> None:
        self._session_ids = {"room_id": room_id, "host_id": host_id}
        self._persist()

    def clear_session_ids(self) -> None:
        self._session_ids = empty_session_ids()
        self._persist()

    def reset_config(self, keep_session_ids: bool = False) -> None:
        self._reset_memory(keep_session_ids)
        self._persist()

    def purge(self, keep_session_ids: bool = False) -> None:
        try:
            self._storage.clear()
        except OSError as exc:
            logger.warning("Could not clear persisted setup snapshot: %s", exc)
        self._reset_memory(keep_session_ids)
        self.last_saved_at = None

    def _reset_memory(self, keep_session_ids: bool) -> None:
        self._config = {}
        self._step = FIRST_STEP
        if not keep_session_ids:
            self._session_ids = empty_session_ids()

    def skip_round_configuration(self) -> bool:
        return self._config.get(SKIP_ROUNDS_KEY) is True

    def set_template(self, template_id: str, catalog: Catalog) -> TemplateSelection:
        selection = build_template_selection(template_id, catalog)
        self.update_config(selection.config_fragment())
        return selection

    def get_rounds(self) -> list[RoundDefinition]:
        raw_rounds = self._config.get(ROUND_DEFINITIONS_KEY) or []
        return [
            RoundDefinition.from_dict(raw, fallback_number=index)
            for index, raw in enumerate(raw_rounds, start=1)
            if isinstance(raw, Mapping)
        ]

    def replace_rounds(self, rounds: list[RoundDefinition]) -> None:
        self.replace_field(ROUND_DEFINITIONS_KEY, [round_def.to_dict() for round_def in rounds])

    def add_round(self, round_def: RoundDefinition) -> bool:
        rounds = self.get_rounds()
        if len(rounds) >= MAX_ROUNDS:
            return False
        self.replace_rounds(renumber_rounds([*rounds, round_def]))
        return True

    def update_round(self, index: int, **changes: Any) -> bool:
        """Edit one round in place (category, difficulty, extras, config) without renumbering."""
        rounds = self.get_rounds()
        if not 0 <= index < len(rounds):
            return False
        target = rounds[index]
        for name in ("category", "difficulty", "enabled_extras", "config"):
            if name in changes:
                setattr(target, name, changes[name])
        self.replace_rounds(rounds)
        return True

    def remove_round(self, index: int) -> bool:
        rounds = self.get_rounds()
        if len(rounds) <= MIN_ROUNDS or not 0 <= index < len(rounds):
            return False
        del rounds[index]
        self.replace_rounds(renumber_rounds(rounds))
        return True

    def toggle_extra(self, key: str) -> bool:
        options = self._config.get("fundraising_options") or {}
        enabled = not bool(options.get(key))
        self.merge_field("fundraising_options", {key: enabled})
        return enabled

    def set_extra_price(self, key: str, price: float | None) -> None:
        prices = dict(self._config.get("fundraising_prices") or {})
        if price is not None and price > 0:
            prices[key] = price
        else:
            prices.pop(key, None)
        self.replace_field("fundraising_prices", prices)
