"""JSON metadata API blueprint."""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, abort, current_app, jsonify, request
from pydantic import ValidationError

from witness.archive.fetch import DocumentFetchError
from witness.browse.session import BrowseParams, BrowseSession
from witness.catalog.filters import documents_by_year
from witness.catalog.models import SearchCriteria
from witness.catalog.related import next_document, previous_document
from witness.render.text import process_text

from .payloads import (
    breadcrumbs_payload,
    document_payload,
    documents_payload,
    neighbor_payload,
    stats_payload,
    tree_payload,
)
from .state import ApiState

bp = Blueprint("api", __name__, url_prefix="/api")
LOGGER = logging.getLogger(__name__)

COLLECTION_ERROR_MESSAGE = "The archive catalog is currently unavailable."


def _state() -> ApiState:
    return current_app.extensions["witness"]


def _catalog():
    state = _state()
    if state.catalog is None:
        abort(503, description=COLLECTION_ERROR_MESSAGE)
    return state.catalog


def criteria_from_args(args) -> SearchCriteria:
    """Build search criteria from request query arguments.

    Raises:
        ValidationError: If ``min_confidence`` or ``match`` hold unknown values.
    """
    return SearchCriteria(
        query=args.get("q") or None,
        tags=tuple(args.getlist("tag")),
        types=tuple(args.getlist("type")),
        date_start=args.get("start") or None,
        date_end=args.get("end") or None,
        min_confidence=args.get("min_confidence") or None,
        folder_path=args.get("folder") or None,
        tag_match=args.get("match") or "any",
    )


@bp.route("/health")
def health():
    """Report service health and whether the catalog loaded."""
    state = _state()
    return jsonify(
        {
            "status": "ok" if state.catalog is not None else "degraded",
            "documents": len(state.catalog.documents) if state.catalog is not None else 0,
        }
    )


@bp.route("/stats")
def stats():
    return jsonify(stats_payload(_catalog().stats))


@bp.route("/tags")
def tags():
    catalog = _catalog()
    limit = request.args.get("limit", type=int)
    entries = catalog.all_tags if limit is None else catalog.all_tags[: max(limit, 0)]
    return jsonify([entry.model_dump() for entry in entries])


@bp.route("/types")
def types():
    return jsonify([entry.model_dump() for entry in _catalog().document_types])


@bp.route("/folders")
def folders():
    return jsonify([tree_payload(node) for node in _catalog().folder_tree])


@bp.route("/timeline")
def timeline():
    grouped = documents_by_year(_catalog().documents)
    return jsonify(
        [{"year": year, "documents": documents_payload(items)} for year, items in grouped.items()]
    )


@bp.route("/documents")
def documents():
    """List documents matching the query-string filters."""
    catalog = _catalog()
    try:
        criteria = criteria_from_args(request.args)
    except ValidationError as exc:
        abort(400, description=f"Invalid search parameters: {exc.errors()[0]['msg']}")

    matches = catalog.search(criteria)
    limit = request.args.get("limit", type=int)
    shown = matches if limit is None else matches[: max(limit, 0)]
    return jsonify(
        {
            "counts": {"total": len(catalog.documents), "matches": len(matches)},
            "results": documents_payload(shown),
        }
    )


@bp.route("/browse")
def browse():
    """Return browse-page results for ``q``, ``tag`` and ``type``.

    Repeated ``tag`` values must all match. Each top tag carries the number of
    current results that also have it.
    """
    catalog = _catalog()
    params = BrowseParams.from_query_string(request.query_string.decode("utf-8"))
    session = BrowseSession.from_params(catalog.documents, params)
    for tag in request.args.getlist("tag")[1:]:
        if tag not in session.selected_tags:
            session.toggle_tag(tag)

    results = session.results()
    return jsonify(
        {
            "params": session.params().to_query_string(),
            "active": session.has_active_filters,
            "selected": {"tags": session.selected_tags, "types": session.selected_types},
            "counts": {"total": len(catalog.documents), "matches": len(results)},
            "results": documents_payload(results),
            "tags": [
                {
                    "tag": entry.tag,
                    "count": entry.count,
                    "preview": session.tag_preview_count(entry.tag),
                }
                for entry in catalog.top_tags
            ],
        }
    )


@bp.route("/documents/<path:doc_path>")
def document_detail(doc_path: str):
    """Return one document with related documents and navigation links."""
    catalog = _catalog()
    document = catalog.get(doc_path)
    if document is None:
        abort(404, description=f"No document at {doc_path}")

    payload: Dict[str, Any] = {
        "document": document_payload(document, full=True),
        "related": documents_payload(catalog.related(document, _state().related_limit)),
        "previous": neighbor_payload(previous_document(document, catalog.documents)),
        "next": neighbor_payload(next_document(document, catalog.documents)),
        "breadcrumbs": breadcrumbs_payload(document.folder_path),
    }
    return jsonify(payload)


@bp.route("/text/<path:doc_path>")
def document_text(doc_path: str):
    """Return the rendered text of one document."""
    state = _state()
    document = _catalog().get(doc_path)
    if document is None:
        abort(404, description=f"No document at {doc_path}")
    try:
        raw = state.fetcher.fetch(document.text_path)
    except DocumentFetchError as exc:
        LOGGER.warning("Text fetch failed for %s: %s", doc_path, exc)
        abort(502, description=f"Could not load document text for {doc_path}")

    raw_requested = request.args.get("raw", "").lower() in ("1", "true", "yes")
    return jsonify(
        {
            "path": document.path,
            "text": raw if raw_requested else process_text(raw, state.render_options),
        }
    )


__all__ = ["bp", "criteria_from_args", "COLLECTION_ERROR_MESSAGE"]
