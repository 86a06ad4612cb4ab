"""Normalized document catalog: normalization, aggregation, filtering, relatedness."""

from .catalog import ArchiveCatalog
from .filters import (
    documents_by_year,
    filter_documents,
    find_document,
    has_all_tags,
    has_any_tag,
)
from .index import (
    breadcrumbs,
    build_folder_tree,
    compute_stats,
    merge_tag_counts,
    tag_frequencies,
    type_frequencies,
)
from .models import (
    ArchiveStats,
    DocumentCollection,
    FolderTreeNode,
    NormalizedDocument,
    SearchCriteria,
    TagCount,
    TypeCount,
)
from .normalize import clean_path, extract_year, flatten_manifest, normalize_document
from .related import find_related_documents, next_document, previous_document

__all__ = [
    "ArchiveCatalog",
    "ArchiveStats",
    "DocumentCollection",
    "FolderTreeNode",
    "NormalizedDocument",
    "SearchCriteria",
    "TagCount",
    "TypeCount",
    "breadcrumbs",
    "build_folder_tree",
    "clean_path",
    "compute_stats",
    "documents_by_year",
    "extract_year",
    "filter_documents",
    "find_document",
    "find_related_documents",
    "flatten_manifest",
    "has_all_tags",
    "has_any_tag",
    "merge_tag_counts",
    "next_document",
    "normalize_document",
    "previous_document",
    "tag_frequencies",
    "type_frequencies",
]
