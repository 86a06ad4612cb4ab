"""Display helpers for dates, sizes, and hints found in document bodies."""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, Field

from witness.catalog.normalize import extract_year

_MONTHS = "jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec"
_BODY_DATE_PATTERNS = (
    re.compile(rf"\b\d{{1,2}}\s+(?:{_MONTHS})[a-z]*\s+\d{{4}}", re.IGNORECASE),
    re.compile(rf"\b(?:{_MONTHS})[a-z]*\s+\d{{1,2}},?\s+\d{{4}}", re.IGNORECASE),
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{2,4}"),
)
_SALUTATION = re.compile(r"Dear\s+([^,]+),", re.IGNORECASE)


class TextMetadata(BaseModel):
    """Hints extracted from a document body.

    Attributes:
        has_date: Whether any date-like phrase was found.
        dates: Date-like phrases in pattern order.
        possible_recipients: Names following a ``Dear ...,`` salutation.
    """

    has_date: bool = False
    dates: List[str] = Field(default_factory=list)
    possible_recipients: List[str] = Field(default_factory=list)


def extract_text_metadata(text: str) -> TextMetadata:
    """Scan ``text`` for written dates and a letter salutation."""
    dates: List[str] = []
    for pattern in _BODY_DATE_PATTERNS:
        dates.extend(match.group(0) for match in pattern.finditer(text))

    recipients: List[str] = []
    salutation = _SALUTATION.search(text)
    if salutation:
        recipients.append(salutation.group(1).strip())

    return TextMetadata(has_date=bool(dates), dates=dates, possible_recipients=recipients)


def format_document_date(value: Optional[str]) -> str:
    """Format a raw manifest date for display.

    ``YYYYMMDD`` becomes ``MM/DD/YYYY``; ``YYYY`` and ``YY`` render as a four-digit
    year; other values are shown as given.
    """
    if not value:
        return "Unknown date"
    if re.fullmatch(r"[0-9]{8}", value):
        return f"{value[4:6]}/{value[6:8]}/{value[:4]}"
    if re.fullmatch(r"[0-9]{4}", value):
        return value
    if re.fullmatch(r"[0-9]{2}", value):
        return str(extract_year(value))
    return value


def format_file_size(size: int) -> str:
    """Format a byte count as ``B``, ``KB``, or ``MB``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


__all__ = ["TextMetadata", "extract_text_metadata", "format_document_date", "format_file_size"]
