"""Key-value backends for the card and session repositories.

Each collection lives under one key as a JSON-encoded array string.
``JsonFileStore`` keeps all keys in a single JSON object file inside the
user data directory; ``MemoryStore`` is the in-process stand-in used by
tests and throwaway runs.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..platform_paths import ensure_dir, get_storage_path

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        """Stored string for ``key`` or None."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    def remove(self, key: str) -> None:
        """Drop ``key``; missing keys are ignored."""


class MemoryStore:
    """Dictionary-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore:
    """Single JSON object file mapping key -> string.

    The file is re-read on every access, so two processes writing the same
    file are last-write-wins with no merge.

    Raises:
        OSError / ValueError: on unreadable or malformed files; repositories
            catch these and degrade to empty collections.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else get_storage_path()
        logger.debug(f"[storage] Using {self.path}")

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        ensure_dir(self.path.parent)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
