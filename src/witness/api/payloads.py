"""JSON payload builders shared by the API and the CLI ``--json`` output."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set

from witness.catalog.index import breadcrumbs
from witness.catalog.models import ArchiveStats, FolderTreeNode, NormalizedDocument


def document_payload(document: NormalizedDocument, *, full: bool = False) -> Dict[str, Any]:
    """Return the listing view of ``document``; ``full`` adds the raw record and paths."""
    payload: Dict[str, Any] = {
        "path": document.path,
        "filename": document.filename,
        "folder_path": document.folder_path,
        "date": document.date,
        "year": document.year,
        "date_confidence": document.date_confidence,
        "type": document.type,
        "tags": list(document.tags),
        "summary": document.summary,
    }
    if full:
        payload.update(
            {
                "date_source": document.date_source,
                "time_period": document.time_period,
                "type_confidence": document.type_confidence,
                "text_path": document.text_path,
                "analysis_path": document.analysis_path,
                "metadata": document.metadata.model_dump(mode="json"),
            }
        )
    return payload


def documents_payload(documents: Iterable[NormalizedDocument]) -> List[Dict[str, Any]]:
    """Return listing views for ``documents``."""
    return [document_payload(document) for document in documents]


def tree_payload(
    node: FolderTreeNode, expanded: Optional[Set[str]] = None
) -> Dict[str, Any]:
    """Return ``node`` and its descendants as nested mappings.

    When ``expanded`` is given each node also carries an ``expanded`` flag.
    """
    payload: Dict[str, Any] = {
        "name": node.name,
        "path": node.path,
        "document_count": node.document_count,
        "total_count": node.total_count(),
        "children": [tree_payload(child, expanded) for child in node.children],
    }
    if expanded is not None:
        payload["expanded"] = node.path in expanded
    return payload


def stats_payload(stats: ArchiveStats) -> Dict[str, Any]:
    """Return ``stats`` as a JSON-compatible mapping."""
    return stats.model_dump(mode="json")


def breadcrumbs_payload(folder_path: str) -> List[Dict[str, str]]:
    """Return the breadcrumb trail for ``folder_path``."""
    return [{"name": name, "path": path} for name, path in breadcrumbs(folder_path)]


def neighbor_payload(document: Optional[NormalizedDocument]) -> Optional[Dict[str, str]]:
    """Return the compact form used for previous/next links."""
    if document is None:
        return None
    return {"path": document.path, "filename": document.filename}


__all__ = [
    "document_payload",
    "documents_payload",
    "tree_payload",
    "stats_payload",
    "breadcrumbs_payload",
    "neighbor_payload",
]
