"""Storage helpers for setup snapshots and exported configs."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Protocol


def write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)
    tmp_path = path.with_name(f"{path.name}.tmp")
    tmp_path.write_text(f"{data}\n", encoding="utf-8")
    tmp_path.replace(path)


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def remove_file(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return


class SnapshotStorage(Protocol):
    def load(self) -> Any:
        """Return the raw persisted snapshot, or None when nothing is stored."""

    def save(self, snapshot: dict) -> None:
        ...

    def clear(self) -> None:
        ...


class JsonFileStorage:
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Any:
        if not self.path.exists():
            return None
        return read_json(self.path)

    def save(self, snapshot: dict) -> None:
        write_json(self.path, snapshot)

    def clear(self) -> None:
        remove_file(self.path)


class MemoryStorage:
    def __init__(self, snapshot: Any = None) -> None:
        self.snapshot = copy.deepcopy(snapshot)
        self.saves = 0

    def load(self) -> Any:
        return copy.deepcopy(self.snapshot)

    def save(self, snapshot: dict) -> None:
        self.snapshot = copy.deepcopy(snapshot)
        self.saves += 1

    def clear(self) -> None:
        self.snapshot = None
