"""Predicates and filters over normalized documents."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import NormalizedDocument, SearchCriteria

CONFIDENCE_LEVELS: Mapping[str, int] = {"none": 0, "low": 1, "medium": 2, "high": 3}


def confidence_level(value: Optional[str]) -> int:
    """Return the ordinal for a confidence label; unknown labels rank as ``none``."""
    return CONFIDENCE_LEVELS.get(value or "none", 0)


def matches_query(document: NormalizedDocument, query: str) -> bool:
    """Case-insensitive substring match against summary, filename, or path."""
    needle = query.lower()
    return (
        needle in document.summary.lower()
        or needle in document.filename.lower()
        or needle in document.path.lower()
    )


def has_any_tag(document: NormalizedDocument, tags: Iterable[str]) -> bool:
    """Return True when ``document`` carries at least one of ``tags`` (exact match)."""
    return any(tag in document.tags for tag in tags)


def has_all_tags(document: NormalizedDocument, tags: Iterable[str]) -> bool:
    """Return True when ``document`` carries every one of ``tags``, ignoring case."""
    own = {tag.lower() for tag in document.tags}
    return all(tag.lower() in own for tag in tags)


def matches_types(document: NormalizedDocument, types: Iterable[str]) -> bool:
    """Return True when the document's type is one of ``types``."""
    return document.type in set(types)


def in_date_range(
    document: NormalizedDocument, start: Optional[str], end: Optional[str]
) -> bool:
    """Lexically compare the raw date with the range bounds.

    Documents without a date always pass; the bounds are compared as strings, so
    callers should use the same format as the manifest (``YYYYMMDD``).
    """
    if not document.date:
        return True
    if start and document.date < start:
        return False
    if end and document.date > end:
        return False
    return True


def meets_confidence(document: NormalizedDocument, minimum: Optional[str]) -> bool:
    """Return True when the date confidence meets or exceeds ``minimum``."""
    if not minimum:
        return True
    return confidence_level(document.date_confidence) >= confidence_level(minimum)


def in_folder(document: NormalizedDocument, prefix: str) -> bool:
    """Plain string-prefix test on the folder path (not segment-aware)."""
    return document.folder_path.startswith(prefix)


def filter_documents(
    documents: Sequence[NormalizedDocument], criteria: SearchCriteria
) -> List[NormalizedDocument]:
    """Return documents matching every supplied criterion, in collection order.

    Args:
        documents: Collection to filter; never modified.
        criteria: Criteria to apply; unset or empty criteria are skipped.

    Returns:
        List[NormalizedDocument]: Matching documents.
    """
    tag_predicate = has_all_tags if criteria.tag_match == "all" else has_any_tag

    def _keep(document: NormalizedDocument) -> bool:
        if criteria.query and not matches_query(document, criteria.query):
            return False
        if criteria.tags and not tag_predicate(document, criteria.tags):
            return False
        if criteria.types and not matches_types(document, criteria.types):
            return False
        if not in_date_range(document, criteria.date_start, criteria.date_end):
            return False
        if not meets_confidence(document, criteria.min_confidence):
            return False
        if criteria.folder_path and not in_folder(document, criteria.folder_path):
            return False
        return True

    return [document for document in documents if _keep(document)]


def find_document(
    documents: Iterable[NormalizedDocument], path: Optional[str]
) -> Optional[NormalizedDocument]:
    """Return the document whose cleaned path equals ``path``."""
    if not path:
        return None
    return next((document for document in documents if document.path == path), None)


def documents_in_folder(
    documents: Iterable[NormalizedDocument], folder_path: Optional[str]
) -> List[NormalizedDocument]:
    """Return documents directly inside ``folder_path``; all documents when unset."""
    if not folder_path:
        return list(documents)
    return [document for document in documents if document.folder_path == folder_path]


def documents_with_tag(
    documents: Iterable[NormalizedDocument], tag: Optional[str]
) -> List[NormalizedDocument]:
    """Return documents carrying ``tag`` exactly; nothing when unset."""
    if not tag:
        return []
    return [document for document in documents if tag in document.tags]


def documents_for_year(
    documents: Iterable[NormalizedDocument], year: Optional[int]
) -> List[NormalizedDocument]:
    """Return documents whose extracted year equals ``year``."""
    if not year:
        return []
    return [document for document in documents if document.year == year]


def dated_documents(documents: Iterable[NormalizedDocument]) -> List[NormalizedDocument]:
    """Return documents that carry a raw date value."""
    return [document for document in documents if document.date is not None]


def documents_by_year(
    documents: Iterable[NormalizedDocument],
) -> Dict[int, List[NormalizedDocument]]:
    """Group documents with an extracted year by that year, oldest first."""
    grouped: Dict[int, List[NormalizedDocument]] = defaultdict(list)
    for document in documents:
        if document.year is not None:
            grouped[document.year].append(document)
    return {year: grouped[year] for year in sorted(grouped)}


__all__ = [
    "CONFIDENCE_LEVELS",
    "confidence_level",
    "matches_query",
    "has_any_tag",
    "has_all_tags",
    "matches_types",
    "in_date_range",
    "meets_confidence",
    "in_folder",
    "filter_documents",
    "find_document",
    "documents_in_folder",
    "documents_with_tag",
    "documents_for_year",
    "dated_documents",
    "documents_by_year",
]
