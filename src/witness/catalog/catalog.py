"""In-memory catalog snapshot with lazily derived views."""

from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING, List, Optional, Tuple

from .filters import filter_documents, find_document
from .index import build_folder_tree, compute_stats, tag_frequencies, type_frequencies
from .models import (
    ArchiveStats,
    DocumentCollection,
    FolderTreeNode,
    NormalizedDocument,
    SearchCriteria,
    TagCount,
    TypeCount,
)
from .related import DEFAULT_RELATED_LIMIT, find_related_documents

if TYPE_CHECKING:
    from witness.manifest.sources import DocumentSource

LOGGER = logging.getLogger(__name__)


class ArchiveCatalog:
    """One snapshot of the document collection and the views derived from it.

    Derived views are computed on first access and cached for the lifetime of the
    snapshot. Reloading builds a new catalog rather than mutating this one.
    """

    def __init__(self, collection: DocumentCollection, *, top_tags_limit: int = 20) -> None:
        self._collection = collection
        self._top_tags_limit = top_tags_limit

    @classmethod
    def load(cls, source: DocumentSource, *, top_tags_limit: int = 20) -> "ArchiveCatalog":
        """Load a fresh snapshot from ``source``.

        Raises:
            ManifestError: Propagated from the source; no partial snapshot is built.
        """
        collection = source.load()
        LOGGER.debug("Loaded %d documents from %s.", len(collection.documents), source)
        return cls(collection, top_tags_limit=top_tags_limit)

    @property
    def documents(self) -> Tuple[NormalizedDocument, ...]:
        """Return the normalized documents in source order."""
        return self._collection.documents

    @cached_property
    def stats(self) -> ArchiveStats:
        """Return statistics recomputed from the documents."""
        return compute_stats(self.documents)

    @property
    def source_stats(self) -> Optional[ArchiveStats]:
        """Return statistics shipped by the source, if any."""
        return self._collection.stats

    @cached_property
    def folder_tree(self) -> List[FolderTreeNode]:
        """Return the top-level folder tree nodes."""
        return build_folder_tree(self.documents)

    @cached_property
    def all_tags(self) -> List[TagCount]:
        """Return every merged tag, most frequent first."""
        return tag_frequencies(self.documents)

    @property
    def top_tags(self) -> List[TagCount]:
        """Return the configured number of most frequent tags."""
        return self.all_tags[: self._top_tags_limit]

    @cached_property
    def document_types(self) -> List[TypeCount]:
        """Return document types, most frequent first."""
        return type_frequencies(self.documents)

    def get(self, path: str) -> Optional[NormalizedDocument]:
        """Return the document stored at ``path``."""
        return find_document(self.documents, path)

    def search(self, criteria: SearchCriteria) -> List[NormalizedDocument]:
        """Filter the snapshot with ``criteria``."""
        return filter_documents(self.documents, criteria)

    def related(
        self, document: NormalizedDocument, limit: int = DEFAULT_RELATED_LIMIT
    ) -> List[NormalizedDocument]:
        """Return documents related to ``document`` by shared tags."""
        return find_related_documents(document, self.documents, limit)


__all__ = ["ArchiveCatalog"]
