"""Aggregations over a normalized document collection.

Frequency tables, date coverage, per-folder counts, and the navigation folder
tree are all derived here. Every function is a pure computation over its input
so callers can rebuild derived state wholesale whenever the snapshot changes.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from witness.manifest.models import ArchiveManifest

from .models import (
    ArchiveStats,
    DateCoverage,
    FolderTreeNode,
    NormalizedDocument,
    TagCount,
    TypeCount,
)

PATH_SEPARATOR = "/"
_DIGIT_RUNS = re.compile(r"(\d+)")


def natural_key(value: str) -> Tuple[object, ...]:
    """Return a case-insensitive sort key that orders digit runs numerically.

    ``box-2`` sorts before ``box-10``; the original string breaks remaining ties so
    ordering stays total.
    """
    parts = _DIGIT_RUNS.split(value)
    key = tuple(int(part) if index % 2 else part.casefold() for index, part in enumerate(parts))
    return key + (value,)


def merge_tag_counts(pairs: Iterable[Tuple[str, int]]) -> List[TagCount]:
    """Merge tag counts case-insensitively.

    The displayed label for each merged group is the variant with the most
    uppercase letters; on a tie the variant seen first is kept. Entries are sorted
    by descending count, ties keeping first-encounter order.

    Args:
        pairs: ``(label, count)`` pairs in encounter order.

    Returns:
        List[TagCount]: Merged entries.
    """
    labels: Dict[str, str] = {}
    totals: Dict[str, int] = {}
    for label, count in pairs:
        key = label.lower()
        if key not in labels:
            labels[key] = label
            totals[key] = count
            continue
        if _uppercase_count(label) > _uppercase_count(labels[key]):
            labels[key] = label
        totals[key] += count
    entries = [TagCount(tag=labels[key], count=totals[key]) for key in labels]
    return sorted(entries, key=lambda item: -item.count)


def tag_frequencies(
    documents: Iterable[NormalizedDocument], limit: Optional[int] = None
) -> List[TagCount]:
    """Count tag occurrences across ``documents`` with case-insensitive merging."""
    entries = merge_tag_counts((tag, 1) for document in documents for tag in document.tags)
    return entries[:limit] if limit is not None else entries


def manifest_tag_frequencies(
    manifest: ArchiveManifest, limit: Optional[int] = None
) -> List[TagCount]:
    """Merge the manifest's pre-aggregated tag table."""
    entries = merge_tag_counts(manifest.metadata.all_tags.items())
    return entries[:limit] if limit is not None else entries


def type_frequencies(documents: Iterable[NormalizedDocument]) -> List[TypeCount]:
    """Count documents per primary type, most common first."""
    counts = Counter(document.type for document in documents)
    return _sorted_types(counts.items())


def manifest_type_frequencies(manifest: ArchiveManifest) -> List[TypeCount]:
    """Return the manifest's pre-aggregated type table, most common first."""
    return _sorted_types(manifest.metadata.document_types.items())


def date_coverage(documents: Sequence[NormalizedDocument]) -> float:
    """Return the percentage of documents with an extracted year."""
    if not documents:
        return 0.0
    dated = sum(1 for document in documents if document.year is not None)
    return dated / len(documents) * 100


def compute_stats(documents: Sequence[NormalizedDocument]) -> ArchiveStats:
    """Compute aggregate statistics for ``documents``."""
    folder_counts: Dict[str, int] = {}
    years = [document.year for document in documents if document.year is not None]
    for document in documents:
        folder_counts[document.folder_path] = folder_counts.get(document.folder_path, 0) + 1

    return ArchiveStats(
        total_documents=len(documents),
        total_folders=len(folder_counts),
        document_types={entry.type: entry.count for entry in type_frequencies(documents)},
        top_tags=tuple(tag_frequencies(documents)),
        date_range=DateCoverage(
            earliest=min(years) if years else 0,
            latest=max(years) if years else 0,
            documents_with_dates=len(years),
            coverage_percentage=date_coverage(documents),
        ),
        documents_per_folder=folder_counts,
    )


def build_folder_tree(documents: Iterable[NormalizedDocument]) -> List[FolderTreeNode]:
    """Build the folder navigation tree for ``documents``.

    Every prefix of every folder path gets a node; intermediate folders without
    documents of their own carry a count of 0. Children and roots are sorted with
    :func:`natural_key`.

    Returns:
        List[FolderTreeNode]: Top-level nodes.
    """
    counts: Dict[str, int] = {}
    names: Dict[str, str] = {}
    children: Dict[str, List[str]] = {}
    roots: List[str] = []

    for document in documents:
        folder = document.folder_path
        if not folder:
            continue
        segments = folder.split(PATH_SEPARATOR)
        parent: Optional[str] = None
        for length in range(1, len(segments) + 1):
            path = PATH_SEPARATOR.join(segments[:length])
            if path not in names:
                names[path] = segments[length - 1]
                counts[path] = 0
                children[path] = []
                if parent is None:
                    roots.append(path)
                else:
                    children[parent].append(path)
            parent = path
        counts[folder] += 1

    def _freeze(path: str) -> FolderTreeNode:
        ordered = sorted(children[path], key=lambda child: natural_key(names[child]))
        return FolderTreeNode(
            name=names[path],
            path=path,
            children=tuple(_freeze(child) for child in ordered),
            document_count=counts[path],
        )

    return [_freeze(path) for path in sorted(roots, key=lambda root: natural_key(names[root]))]


def find_folder(nodes: Iterable[FolderTreeNode], path: str) -> Optional[FolderTreeNode]:
    """Return the node at ``path`` within ``nodes``, searching depth first."""
    for node in nodes:
        if node.path == path:
            return node
        if path.startswith(node.path + PATH_SEPARATOR):
            found = find_folder(node.children, path)
            if found is not None:
                return found
    return None


def breadcrumbs(folder_path: str) -> List[Tuple[str, str]]:
    """Split ``folder_path`` into ``(name, path)`` pairs from the root down."""
    if not folder_path:
        return []
    segments = folder_path.split(PATH_SEPARATOR)
    return [
        (segment, PATH_SEPARATOR.join(segments[: index + 1]))
        for index, segment in enumerate(segments)
    ]


def _uppercase_count(label: str) -> int:
    return sum(1 for char in label if char.isupper())


def _sorted_types(items: Iterable[Tuple[str, int]]) -> List[TypeCount]:
    entries = [TypeCount(type=label, count=count) for label, count in items]
    return sorted(entries, key=lambda item: -item.count)


__all__ = [
    "PATH_SEPARATOR",
    "natural_key",
    "merge_tag_counts",
    "tag_frequencies",
    "manifest_tag_frequencies",
    "type_frequencies",
    "manifest_type_frequencies",
    "date_coverage",
    "compute_stats",
    "build_folder_tree",
    "find_folder",
    "breadcrumbs",
]
