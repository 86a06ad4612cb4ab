"""Per-application state shared by the API routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from witness.archive.fetch import DocumentTextFetcher
from witness.catalog.catalog import ArchiveCatalog
from witness.render.text import RenderOptions


@dataclass
class ApiState:
    """Loaded catalog (or the load error) plus the collaborators routes need.

    Attributes:
        catalog: Loaded catalog snapshot; ``None`` when loading failed.
        error: Load error message when ``catalog`` is ``None``.
        fetcher: Document text fetcher.
        render_options: Options applied when rendering document text.
        related_limit: Number of related documents returned per document.
    """

    catalog: Optional[ArchiveCatalog]
    error: Optional[str]
    fetcher: DocumentTextFetcher
    render_options: RenderOptions
    related_limit: int = 5
