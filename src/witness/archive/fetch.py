"""Per-document text retrieval and the document view state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import requests

from witness.config.models import WitnessConfig
from witness.render.text import RenderOptions, process_text

from .urls import archive_url, is_remote

LOGGER = logging.getLogger(__name__)


class DocumentFetchError(Exception):
    """Raised when the text of a single document cannot be retrieved."""


class DocumentTextFetcher:
    """Retrieve the raw text of archive documents over HTTP or from disk."""

    def __init__(
        self,
        *,
        base_url: str = "archive",
        storage_bucket: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.storage_bucket = storage_bucket
        self.timeout = timeout
        self._session = session

    @classmethod
    def from_config(cls, config: WitnessConfig) -> "DocumentTextFetcher":
        """Build a fetcher from the ``archive`` and ``source`` configuration sections."""
        return cls(
            base_url=config.archive.base_url,
            storage_bucket=config.archive.storage_bucket,
            timeout=config.source.timeout_seconds,
        )

    def url_for(self, path: str) -> str:
        """Return the URL or file path the text of ``path`` is read from."""
        return archive_url(path, base_url=self.base_url, storage_bucket=self.storage_bucket)

    def fetch(self, path: str) -> str:
        """Return the raw text stored for the document at ``path``.

        Raises:
            DocumentFetchError: If the text cannot be retrieved.
        """
        location = self.url_for(path)
        if is_remote(location):
            return self._fetch_remote(location)
        try:
            return Path(location).expanduser().read_bytes().decode("utf-8", errors="replace")
        except OSError as exc:
            raise DocumentFetchError(f"Failed to read {location}: {exc}") from exc

    def _fetch_remote(self, url: str) -> str:
        getter = self._session.get if self._session is not None else requests.get
        try:
            response = getter(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise DocumentFetchError(f"Failed to fetch {url}: {exc}") from exc
        return response.text


class FetchStatus(str, Enum):
    """Lifecycle of one document fetch."""

    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one fetch started by :meth:`DocumentViewer.begin`."""

    path: str
    generation: int


@dataclass(frozen=True)
class DocumentView:
    """What the viewer currently shows.

    Attributes:
        path: Document path being viewed.
        status: Fetch status for that document.
        content: Raw text once loaded.
        error: Error message when the fetch failed.
    """

    path: str
    status: FetchStatus
    content: Optional[str] = None
    error: Optional[str] = None


class DocumentViewer:
    """Track the document being viewed and discard stale fetch results.

    Each navigation starts a new fetch and invalidates the previous one; a result
    that arrives for an invalidated ticket is dropped instead of replacing the
    current view. Failures only affect the view they belong to.
    """

    def __init__(
        self,
        fetcher: DocumentTextFetcher,
        render_options: Optional[RenderOptions] = None,
    ) -> None:
        self._fetcher = fetcher
        self._render_options = render_options or RenderOptions()
        self._generation = 0
        self._view: Optional[DocumentView] = None

    @property
    def view(self) -> Optional[DocumentView]:
        """Return the current view, if any document has been opened."""
        return self._view

    def begin(self, path: str) -> FetchTicket:
        """Start viewing ``path``; earlier tickets become stale."""
        self._generation += 1
        self._view = DocumentView(path=path, status=FetchStatus.PENDING)
        return FetchTicket(path=path, generation=self._generation)

    def complete(
        self,
        ticket: FetchTicket,
        *,
        content: Optional[str] = None,
        error: Optional[str] = None,
    ) -> FetchStatus:
        """Apply a fetch result if ``ticket`` is still current.

        Returns:
            FetchStatus: ``SUPERSEDED`` when the result was discarded, otherwise the
            status now recorded on the view.
        """
        if ticket.generation != self._generation:
            LOGGER.debug("Discarding stale result for %s.", ticket.path)
            return FetchStatus.SUPERSEDED
        view = self._finished_view(ticket.path, content=content, error=error)
        self._view = view
        return view.status

    def open(self, path: str) -> DocumentView:
        """Fetch ``path`` and make it the current view."""
        self.begin(path)
        try:
            content = self._fetcher.fetch(path)
        except DocumentFetchError as exc:
            view = self._finished_view(path, error=str(exc))
        else:
            view = self._finished_view(path, content=content)
        self._view = view
        return view

    def _finished_view(
        self, path: str, *, content: Optional[str] = None, error: Optional[str] = None
    ) -> DocumentView:
        if error is not None:
            LOGGER.warning("Could not load %s: %s", path, error)
            return DocumentView(path=path, status=FetchStatus.FAILED, error=error)
        return DocumentView(path=path, status=FetchStatus.LOADED, content=content or "")

    def rendered(self) -> Optional[str]:
        """Return the current content rendered for display, once loaded."""
        if self._view is None or self._view.status is not FetchStatus.LOADED:
            return None
        return process_text(self._view.content or "", self._render_options)


__all__ = [
    "DocumentFetchError",
    "DocumentTextFetcher",
    "DocumentView",
    "DocumentViewer",
    "FetchStatus",
    "FetchTicket",
]
