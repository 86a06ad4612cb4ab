"""Related-document scoring and in-folder navigation."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .index import natural_key
from .models import NormalizedDocument

DEFAULT_RELATED_LIMIT = 5


def shared_tag_count(first: NormalizedDocument, second: NormalizedDocument) -> int:
    """Return how many of ``second``'s tags also appear on ``first``."""
    own = set(first.tags)
    return sum(1 for tag in second.tags if tag in own)


def find_related_documents(
    document: NormalizedDocument,
    documents: Sequence[NormalizedDocument],
    limit: int = DEFAULT_RELATED_LIMIT,
) -> List[NormalizedDocument]:
    """Rank documents by the number of tags they share with ``document``.

    The document itself and documents sharing no tags are excluded. Equal scores
    keep collection order.

    Args:
        document: Document to find relations for.
        documents: Full collection.
        limit: Maximum number of results.

    Returns:
        List[NormalizedDocument]: Up to ``limit`` related documents.
    """
    if limit <= 0:
        return []
    scored = [
        (shared_tag_count(document, candidate), candidate)
        for candidate in documents
        if candidate.path != document.path
    ]
    ranked = sorted((item for item in scored if item[0] > 0), key=lambda item: -item[0])
    return [candidate for _, candidate in ranked[:limit]]


def _folder_siblings(
    document: NormalizedDocument, documents: Sequence[NormalizedDocument]
) -> List[NormalizedDocument]:
    siblings = [item for item in documents if item.folder_path == document.folder_path]
    return sorted(siblings, key=lambda item: natural_key(item.filename))


def next_document(
    document: NormalizedDocument, documents: Sequence[NormalizedDocument]
) -> Optional[NormalizedDocument]:
    """Return the document after ``document`` in its folder, ordered by filename."""
    siblings = _folder_siblings(document, documents)
    paths = [item.path for item in siblings]
    if document.path not in paths:
        return None
    index = paths.index(document.path)
    return siblings[index + 1] if index + 1 < len(siblings) else None


def previous_document(
    document: NormalizedDocument, documents: Sequence[NormalizedDocument]
) -> Optional[NormalizedDocument]:
    """Return the document before ``document`` in its folder, ordered by filename."""
    siblings = _folder_siblings(document, documents)
    paths = [item.path for item in siblings]
    if document.path not in paths:
        return None
    index = paths.index(document.path)
    return siblings[index - 1] if index > 0 else None


__all__ = [
    "DEFAULT_RELATED_LIMIT",
    "shared_tag_count",
    "find_related_documents",
    "next_document",
    "previous_document",
]
