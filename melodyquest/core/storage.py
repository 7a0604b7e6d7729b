from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from melodyquest.core.errors import PersistenceUnavailable

logger = logging.getLogger(__name__)


def default_state_path() -> Path:
    override = os.environ.get("MELODYQUEST_STATE")
    if override:
        return Path(override)
    return Path.home() / ".melodyquest" / "state.json"


class KeyValueStore:
    """String-keyed, string-valued storage port used by the controller.

    Backends load in ``open()`` and flush in ``close()``. ``set`` and ``remove``
    raise :class:`PersistenceUnavailable` when a write cannot reach the backing
    medium; the in-memory view is updated either way.
    """

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)
        self._flush()

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._flush()

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of every stored pair."""
        return dict(self._values)

    def _flush(self) -> None:
        pass

    def __enter__(self) -> "KeyValueStore":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class MemoryStore(KeyValueStore):
    """Store that lives only as long as the process."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        super().__init__()
        if initial:
            self._values.update({str(k): str(v) for k, v in initial.items()})


class JsonFileStore(KeyValueStore):
    """Stores every pair in a single JSON object on disk.

    File: ``~/.melodyquest/state.json`` unless a path is given. Each change is
    written through immediately so a crash loses nothing already shown.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        super().__init__()
        self._file_path = Path(file_path) if file_path is not None else default_state_path()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def open(self) -> None:
        self._values = self._load()

    def close(self) -> None:
        try:
            self._flush()
        except PersistenceUnavailable as e:
            logger.warning("Could not save state on close: %s", e)

    def _load(self) -> Dict[str, str]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load state from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring state file %s: expected a JSON object", self._file_path)
            return {}
        return {str(key): str(value) for key, value in payload.items() if value is not None}

    def _flush(self) -> None:
        tmp_path = self._file_path.with_suffix(".tmp")
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self._file_path)
        except OSError as e:
            raise PersistenceUnavailable(f"Could not save state to {self._file_path}: {e}") from e


def write_through(store: KeyValueStore, key: str, value: Optional[str]) -> bool:
    """Set (or remove, when ``value`` is None) a key, logging instead of raising.

    Returns False when the backend reported the write as lost.
    """
    try:
        if value is None:
            store.remove(key)
        else:
            store.set(key, value)
    except PersistenceUnavailable as e:
        logger.warning("%s; continuing in memory", e)
        return False
    return True


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "default_state_path",
    "write_through",
]
