"""Manifest loading errors."""


class ManifestError(Exception):
    """Base exception for manifest and document-source operations."""


class ManifestFetchError(ManifestError):
    """Raised when the manifest cannot be retrieved."""


class ManifestParseError(ManifestError):
    """Raised when retrieved manifest data is not a valid manifest."""


class StoreError(ManifestError):
    """Raised when the document store cannot be read or written."""
