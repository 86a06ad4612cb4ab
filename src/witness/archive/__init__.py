"""Access to the archived document files."""

from .fetch import (
    DocumentFetchError,
    DocumentTextFetcher,
    DocumentView,
    DocumentViewer,
    FetchStatus,
    FetchTicket,
)
from .urls import archive_url, is_remote

__all__ = [
    "DocumentFetchError",
    "DocumentTextFetcher",
    "DocumentView",
    "DocumentViewer",
    "FetchStatus",
    "FetchTicket",
    "archive_url",
    "is_remote",
]
