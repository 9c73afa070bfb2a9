"""Key-value persistence used for policy and edit-state flags."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


class KeyValueStore(Protocol):
    """Minimal persisted mapping; callers serialize access through a ``WriterThread``."""

    def get(self, key: str) -> Any | None:
        """Return the stored value or ``None`` when the key is absent."""

    def set(self, key: str, value: Any) -> None:
        """Persist ``value`` under ``key``."""


class MemoryKeyValueStore:
    """Process-local store, handy for tests."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)


class JsonFileKeyValueStore:
    """Stores every key in a single JSON document, rewritten atomically on each ``set``."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._values = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        updated = dict(self._values)
        updated[key] = value
        self._write(updated)
        self._values = updated

    def _load(self) -> dict[str, Any]:
        path = self._path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Failed to read key-value store (%s): %s", path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring key-value store with non-object payload: %s", path)
            return {}
        return data

    def _write(self, values: dict[str, Any]) -> None:
        path = self._path
        path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(values, ensure_ascii=False, indent=2, sort_keys=True)
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", delete=False, dir=str(path.parent)
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(data)
            tmp_path.replace(path)
        except OSError:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise
        if os.name != "nt":
            os.chmod(path, 0o600)


__all__ = ["JsonFileKeyValueStore", "KeyValueStore", "MemoryKeyValueStore"]
