"""Raw archive manifest models, errors, and document sources."""

from .errors import ManifestError, ManifestFetchError, ManifestParseError, StoreError
from .models import (
    ArchiveManifest,
    ArchiveMetadata,
    CategoryInfo,
    Confidence,
    DateInfo,
    DateRange,
    DocumentMetadata,
    FolderNode,
)

__all__ = [
    "ArchiveManifest",
    "ArchiveMetadata",
    "CategoryInfo",
    "Confidence",
    "DateInfo",
    "DateRange",
    "DocumentMetadata",
    "FolderNode",
    "ManifestError",
    "ManifestFetchError",
    "ManifestParseError",
    "StoreError",
]
