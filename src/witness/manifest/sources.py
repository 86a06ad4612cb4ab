"""Document sources that load the archive collection.

Two interchangeable providers exist: a static JSON manifest (served over HTTP or
read from disk) and the SQLite document store populated by ``witness publish``.
:func:`build_source` picks one from configuration at startup so call sites only
ever see the :class:`DocumentSource` interface.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import requests
from pydantic import ValidationError

from witness.archive.urls import archive_url, is_remote
from witness.catalog.models import DocumentCollection
from witness.catalog.normalize import DEFAULT_ROOT_PREFIX, ensure_unique_paths, flatten_manifest
from witness.config.models import WitnessConfig

from .errors import ManifestFetchError, ManifestParseError, StoreError
from .models import ArchiveManifest
from .store import DocumentStore

LOGGER = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class DocumentSource(ABC):
    """Capability interface for loading the document collection."""

    @abstractmethod
    def load(self) -> DocumentCollection:
        """Load and normalize the full collection.

        Raises:
            ManifestError: If the collection cannot be loaded in full.
        """


class StaticManifestSource(DocumentSource):
    """Load a JSON manifest from an HTTP(S) URL or a local file."""

    def __init__(
        self,
        location: str | Path,
        *,
        root_prefix: str = DEFAULT_ROOT_PREFIX,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.location = str(location)
        self.root_prefix = root_prefix
        self.timeout = timeout
        self._session = session

    def __repr__(self) -> str:
        return f"StaticManifestSource({self.location!r})"

    def load(self) -> DocumentCollection:
        manifest = self.fetch_manifest()
        return DocumentCollection(
            documents=flatten_manifest(manifest, root_prefix=self.root_prefix)
        )

    def fetch_manifest(self) -> ArchiveManifest:
        """Retrieve and validate the raw manifest.

        Raises:
            ManifestFetchError: If the manifest cannot be retrieved.
            ManifestParseError: If the payload is not a valid manifest.
        """
        payload = self._fetch_remote() if is_remote(self.location) else self._read_local()
        try:
            return ArchiveManifest.model_validate(payload)
        except ValidationError as exc:
            raise ManifestParseError(f"Invalid manifest at {self.location}: {exc}") from exc

    def _fetch_remote(self) -> Any:
        getter = self._session.get if self._session is not None else requests.get
        try:
            response = getter(self.location, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise ManifestFetchError(
                f"Failed to fetch archive manifest from {self.location}: {exc}"
            ) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ManifestParseError(f"Manifest at {self.location} is not JSON: {exc}") from exc

    def _read_local(self) -> Any:
        path = Path(self.location).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestFetchError(f"Failed to read archive manifest {path}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestParseError(f"Manifest {path} is not JSON: {exc}") from exc


class DocumentStoreSource(DocumentSource):
    """Load the flattened documents and statistics record from the document store."""

    def __init__(self, db_path: str | Path) -> None:
        self.store = DocumentStore(db_path)

    def __repr__(self) -> str:
        return f"DocumentStoreSource({str(self.store.db_path)!r})"

    def load(self) -> DocumentCollection:
        try:
            documents = tuple(self.store.read_documents())
            stats = self.store.read_stats()
        except StoreError as exc:
            raise ManifestFetchError(str(exc)) from exc
        ensure_unique_paths(documents)
        return DocumentCollection(documents=documents, stats=stats)


def default_manifest_location(config: WitnessConfig) -> str:
    """Return the manifest location implied by ``config``."""
    if config.source.manifest:
        return config.source.manifest
    return archive_url(
        MANIFEST_FILENAME,
        base_url=config.archive.base_url,
        storage_bucket=config.archive.storage_bucket,
    )


def build_source(config: WitnessConfig) -> DocumentSource:
    """Construct the document source selected by ``config.source.provider``."""
    if config.source.provider == "store":
        source: DocumentSource = DocumentStoreSource(config.source.store_path)
    else:
        source = StaticManifestSource(
            default_manifest_location(config),
            root_prefix=config.archive.root_prefix,
            timeout=config.source.timeout_seconds,
        )
    LOGGER.debug("Using document source %r.", source)
    return source


__all__ = [
    "MANIFEST_FILENAME",
    "DocumentSource",
    "StaticManifestSource",
    "DocumentStoreSource",
    "default_manifest_location",
    "build_source",
]
