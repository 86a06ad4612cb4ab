"""Key-value storage for browse UI state such as expanded folders."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set

LOGGER = logging.getLogger(__name__)

EXPANDED_FOLDERS_KEY = "browse-expanded-folders"


class KeyValueStore(ABC):
    """Minimal string-keyed store for JSON-serializable values."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key`` or ``default``."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def serialize(self) -> str:
        """Return every stored value as a JSON document."""


class MemoryKeyValueStore(KeyValueStore):
    """In-process store, mainly for tests and one-off sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def serialize(self) -> str:
        return json.dumps(self._data, sort_keys=True)


class JsonFileKeyValueStore(MemoryKeyValueStore):
    """Store persisted to a JSON file after every write.

    An unreadable or malformed file is treated as empty so stale UI state never
    blocks browsing.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        super().__init__(self._read())

    @property
    def path(self) -> Path:
        """Return the backing file path."""
        return self._path

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self.serialize(), encoding="utf-8")

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable browse state %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}


class ExpandedFolders:
    """The set of expanded folder paths in the folder tree, backed by a store."""

    def __init__(self, store: KeyValueStore, key: str = EXPANDED_FOLDERS_KEY) -> None:
        self._store = store
        self._key = key

    def paths(self) -> Set[str]:
        """Return the expanded folder paths."""
        stored = self._store.get(self._key, [])
        return {str(item) for item in stored} if isinstance(stored, list) else set()

    def is_expanded(self, path: str) -> bool:
        """Return True when ``path`` is expanded."""
        return path in self.paths()

    def toggle(self, path: str) -> bool:
        """Flip the expansion state of ``path`` and return the new state."""
        paths = self.paths()
        expanded = path not in paths
        if expanded:
            paths.add(path)
        else:
            paths.discard(path)
        self._save(paths)
        return expanded

    def expand(self, paths: Iterable[str]) -> None:
        """Mark every path in ``paths`` expanded."""
        self._save(self.paths() | set(paths))

    def collapse(self, paths: Iterable[str]) -> None:
        """Mark every path in ``paths`` collapsed."""
        self._save(self.paths() - set(paths))

    def collapse_all(self) -> None:
        """Clear every expanded path."""
        self._save(set())

    def _save(self, paths: Set[str]) -> None:
        self._store.set(self._key, sorted(paths))


__all__ = [
    "EXPANDED_FOLDERS_KEY",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "ExpandedFolders",
]
