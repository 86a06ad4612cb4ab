"""Archive file URL construction."""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

STORAGE_ENDPOINT = "https://firebasestorage.googleapis.com/v0/b"
# Characters left unescaped per segment, matching encodeURIComponent.
_SEGMENT_SAFE = "!~*'()"


def archive_url(
    file_path: str,
    *,
    base_url: str = "archive",
    storage_bucket: Optional[str] = None,
) -> str:
    """Return the location of an archive file.

    With a storage bucket the path is rewritten for the object-storage REST
    endpoint: each segment is percent-encoded and the separating slashes become
    ``%2F``. Otherwise the path is appended to ``base_url``.

    Args:
        file_path: Archive-relative path such as ``box-3/journal/2jan1989.txt``.
        base_url: Base URL or directory for plain archive access.
        storage_bucket: Object-storage bucket name.

    Returns:
        str: URL or filesystem path of the file.
    """
    if storage_bucket:
        encoded = "%2F".join(quote(segment, safe=_SEGMENT_SAFE) for segment in file_path.split("/"))
        return f"{STORAGE_ENDPOINT}/{storage_bucket}/o/{encoded}?alt=media"
    return f"{base_url.rstrip('/')}/{file_path.lstrip('/')}"


def is_remote(location: str) -> bool:
    """Return True when ``location`` should be fetched over HTTP."""
    return location.startswith(("http://", "https://"))


__all__ = ["STORAGE_ENDPOINT", "archive_url", "is_remote"]
