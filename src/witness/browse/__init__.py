"""Browse-page state: selections, URL parameters, and persisted folder expansion."""

from .session import BrowseParams, BrowseSession
from .state import (
    EXPANDED_FOLDERS_KEY,
    ExpandedFolders,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)

__all__ = [
    "BrowseParams",
    "BrowseSession",
    "EXPANDED_FOLDERS_KEY",
    "ExpandedFolders",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
