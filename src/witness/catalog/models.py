"""Catalog data models derived from the raw manifest."""

from __future__ import annotations

from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from witness.manifest.models import Confidence, DocumentMetadata

TagMatch = Literal["any", "all"]


class CatalogModel(BaseModel):
    """Shared configuration for catalog models; instances are never mutated."""

    model_config = ConfigDict(frozen=True)


class NormalizedDocument(CatalogModel):
    """Uniform in-memory representation of one archived document.

    Attributes:
        metadata: Raw record the document was derived from.
        filename: Display file name.
        path: Archive-relative path with the ingestion-root prefix removed.
        folder_path: Containing folder path.
        date: Raw date value, if any.
        year: Four-digit year extracted from ``date``.
        date_confidence: Certainty of the date extraction.
        date_source: Where the date was found.
        time_period: Optional coarse period label.
        tags: Category tags in manifest order.
        type: Primary document type.
        type_confidence: Certainty of the categorization.
        summary: Free-text summary.
        text_path: Archive path of the plain-text file.
        analysis_path: Archive path of the analysis JSON file.
    """

    metadata: DocumentMetadata
    filename: str
    path: str
    folder_path: str
    date: Optional[str] = None
    year: Optional[int] = None
    date_confidence: Confidence = "none"
    date_source: str = ""
    time_period: Optional[str] = None
    tags: Tuple[str, ...] = ()
    type: str = "unknown"
    type_confidence: Confidence = "low"
    summary: str = ""
    text_path: str = ""
    analysis_path: str = ""


class FolderTreeNode(CatalogModel):
    """One folder path segment in the navigation tree.

    ``document_count`` counts only documents whose folder path equals ``path``;
    use :meth:`total_count` for the subtree sum.
    """

    name: str
    path: str
    children: Tuple["FolderTreeNode", ...] = ()
    document_count: int = 0

    def total_count(self) -> int:
        """Return the number of documents in this folder and all descendants."""
        return self.document_count + sum(child.total_count() for child in self.children)

    def iter_paths(self):
        """Yield this node's path followed by every descendant path, depth first."""
        yield self.path
        for child in self.children:
            yield from child.iter_paths()


class TagCount(CatalogModel):
    """A tag label and the number of occurrences merged under it."""

    tag: str
    count: int


class TypeCount(CatalogModel):
    """A document type and how many documents carry it."""

    type: str
    count: int


class DateCoverage(CatalogModel):
    """Year range and date coverage across a document collection."""

    earliest: int = 0
    latest: int = 0
    documents_with_dates: int = 0
    coverage_percentage: float = 0.0


class ArchiveStats(CatalogModel):
    """Aggregate statistics for a document collection."""

    total_documents: int = 0
    total_folders: int = 0
    document_types: Dict[str, int] = Field(default_factory=dict)
    top_tags: Tuple[TagCount, ...] = ()
    date_range: DateCoverage = Field(default_factory=DateCoverage)
    documents_per_folder: Dict[str, int] = Field(default_factory=dict)


class SearchCriteria(CatalogModel):
    """Filter criteria applied by :func:`witness.catalog.filters.filter_documents`.

    Unset or empty criteria are skipped. ``tag_match`` names the tag predicate:
    ``any`` keeps documents carrying at least one of ``tags``, ``all`` requires
    every tag.
    """

    query: Optional[str] = None
    tags: Tuple[str, ...] = ()
    types: Tuple[str, ...] = ()
    date_start: Optional[str] = None
    date_end: Optional[str] = None
    min_confidence: Optional[Confidence] = None
    folder_path: Optional[str] = None
    tag_match: TagMatch = "any"


class DocumentCollection(CatalogModel):
    """One loaded snapshot of normalized documents.

    Attributes:
        documents: Normalized documents in source order.
        stats: Pre-computed statistics shipped by the source, when available.
    """

    documents: Tuple[NormalizedDocument, ...] = ()
    stats: Optional[ArchiveStats] = None


FolderTreeNode.model_rebuild()

__all__ = [
    "TagMatch",
    "NormalizedDocument",
    "FolderTreeNode",
    "TagCount",
    "TypeCount",
    "DateCoverage",
    "ArchiveStats",
    "SearchCriteria",
    "DocumentCollection",
]
