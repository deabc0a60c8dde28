"""Key-value persistence for dashboard state (JSON files with file locking)."""
from __future__ import annotations

import copy
import fcntl
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from visahub.log import get_logger

log = get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Stored value could not be read."""


class KeyValueStore(ABC):
    @abstractmethod
    def load(self, key: str) -> Any | None:
        """Stored value for *key*, or None when nothing was saved."""

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        pass


class MemoryStore(KeyValueStore):
    """In-process store; values are copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        log.debug("Advisory lock unavailable for %s", getattr(f, "name", f))


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        log.debug("Advisory unlock failed for %s", getattr(f, "name", f))


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key under *directory*."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                try:
                    raw = f.read()
                finally:
                    _unlock(f)
        except OSError as exc:
            raise StorageError(f"Cannot read {path.name}: {exc}") from exc

        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"{path.name} is not valid JSON: {exc}") from exc

    def save(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(value, ensure_ascii=False, indent=2)
        with open(path, "w", encoding="utf-8") as f:
            _lock(f)
            try:
                f.write(payload)
                f.flush()
            finally:
                _unlock(f)
        log.debug("Saved %s (%d bytes)", path.name, len(payload))
