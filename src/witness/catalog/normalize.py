"""Convert raw manifest records into normalized documents."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable, Optional, Tuple

from witness.manifest.errors import ManifestError
from witness.manifest.models import ArchiveManifest, DocumentMetadata

from .models import NormalizedDocument

LOGGER = logging.getLogger(__name__)

DEFAULT_ROOT_PREFIX = "input/"
MIN_YEAR = 1900
MAX_YEAR = 2100

_EIGHT_DIGITS = re.compile(r"[0-9]{8}")
_FOUR_DIGITS = re.compile(r"[0-9]{4}")
_TWO_DIGITS = re.compile(r"[0-9]{2}")

# Written date formats accepted by the calendar fallback, tried in order.
_CALENDAR_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%Y-%m",
    "%B %Y",
    "%b %Y",
)


def clean_path(path: str, prefix: str = DEFAULT_ROOT_PREFIX) -> str:
    """Strip exactly one leading ingestion-root ``prefix`` from ``path``."""
    if prefix and path.startswith(prefix):
        return path[len(prefix) :]
    return path


def extract_year(raw: object) -> Optional[int]:
    """Extract a four-digit year from a raw manifest date value.

    Branches are tried in order and the first that applies decides:

    * ``YYYYMMDD``: the leading four digits, if within [1900, 2100].
    * ``YYYY``: the value itself, same bounds.
    * ``YY``: ``00``-``30`` map to the 2000s, ``31``-``99`` to the 1900s. No bounds
      check is applied on this branch.
    * anything else: parsed as a calendar date (ISO-8601 or a common written form).

    Args:
        raw: Raw ``document_date`` value; numbers are treated as their digits.

    Returns:
        Optional[int]: The year, or ``None`` when the value cannot be interpreted.
    """
    if raw is None or raw == "":
        return None
    value = str(raw)

    if _EIGHT_DIGITS.fullmatch(value):
        return _bounded(int(value[:4]))
    if _FOUR_DIGITS.fullmatch(value):
        return _bounded(int(value))
    if _TWO_DIGITS.fullmatch(value):
        year = int(value)
        return 2000 + year if year <= 30 else 1900 + year

    parsed = _parse_calendar_date(value.strip())
    return parsed.year if parsed is not None else None


def normalize_document(
    record: DocumentMetadata,
    folder_path: str,
    *,
    root_prefix: str = DEFAULT_ROOT_PREFIX,
) -> NormalizedDocument:
    """Build the normalized form of one raw record.

    Args:
        record: Raw manifest record.
        folder_path: Cleaned path of the containing folder.
        root_prefix: Ingestion-root prefix stripped from ``record.file_path``.

    Returns:
        NormalizedDocument: Normalized document carrying derived fields.
    """
    path = clean_path(record.file_path, root_prefix)
    return NormalizedDocument(
        metadata=record,
        filename=record.file_name,
        path=path,
        folder_path=folder_path,
        date=record.date.document_date,
        year=extract_year(record.date.document_date),
        date_confidence=record.date.confidence,
        date_source=record.date.date_source,
        time_period=record.date.time_period,
        tags=record.category.tags,
        type=record.category.primary_type,
        type_confidence=record.category.confidence,
        summary=record.summary,
        text_path=path,
        analysis_path=path.replace(".txt", "_analysis.json", 1),
    )


def flatten_manifest(
    manifest: ArchiveManifest,
    *,
    root_prefix: str = DEFAULT_ROOT_PREFIX,
) -> Tuple[NormalizedDocument, ...]:
    """Normalize every record of ``manifest`` in manifest order.

    Raises:
        ManifestError: If two records resolve to the same cleaned path.
    """
    documents = tuple(
        normalize_document(record, clean_path(folder_path, root_prefix), root_prefix=root_prefix)
        for folder_path, record in manifest.iter_records()
    )
    ensure_unique_paths(documents)
    LOGGER.debug(
        "Normalized %d documents from %d folders.", len(documents), len(manifest.folders)
    )
    return documents


def ensure_unique_paths(documents: Iterable[NormalizedDocument]) -> None:
    """Raise :class:`ManifestError` when two documents share a cleaned path."""
    seen: set[str] = set()
    for document in documents:
        if document.path in seen:
            raise ManifestError(f"Duplicate document path in manifest: {document.path}")
        seen.add(document.path)


def _bounded(year: int) -> Optional[int]:
    return year if MIN_YEAR <= year <= MAX_YEAR else None


def _parse_calendar_date(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _CALENDAR_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


__all__ = [
    "DEFAULT_ROOT_PREFIX",
    "clean_path",
    "extract_year",
    "normalize_document",
    "flatten_manifest",
    "ensure_unique_paths",
]
