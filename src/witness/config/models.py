"""Configuration models describing Witness settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WitnessBaseModel(BaseModel):
    """Shared configuration for Witness settings models."""

    model_config = ConfigDict(extra="forbid")


class SourceSettings(WitnessBaseModel):
    """Where the document collection is loaded from.

    Attributes:
        provider: ``static`` reads a JSON manifest, ``store`` queries the document store.
        manifest: Manifest location (URL or path); defaults to ``manifest.json`` under
            the archive base URL when unset.
        store_path: SQLite document store used by the ``store`` provider.
        timeout_seconds: Timeout applied to HTTP requests.
    """

    provider: Literal["static", "store"] = "static"
    manifest: Optional[str] = None
    store_path: str = "~/.witness/archive.db"
    timeout_seconds: float = 10.0


class ArchiveSettings(WitnessBaseModel):
    """Location of the per-document text files.

    Attributes:
        base_url: Base URL or directory holding the archive text files.
        storage_bucket: Cloud storage bucket; when set, file URLs are rewritten for it.
        root_prefix: Ingestion-root prefix stripped from manifest paths.
    """

    base_url: str = "archive"
    storage_bucket: Optional[str] = None
    root_prefix: str = "input/"


class RenderSettings(WitnessBaseModel):
    """Defaults applied when rendering legacy document text.

    Attributes:
        strip_headers: Drop leading formatting-directive lines.
        decode_chars: Translate inline formatting codes into markup.
        wrap_lines: Wrap long lines at word boundaries.
        max_line_length: Maximum line length used when wrapping.
    """

    strip_headers: bool = True
    decode_chars: bool = True
    wrap_lines: bool = False
    max_line_length: int = Field(default=80, ge=10)


class BrowseSettings(WitnessBaseModel):
    """Browsing defaults.

    Attributes:
        top_tags_limit: Number of tags surfaced in tag listings.
        related_limit: Number of related documents returned per document.
        state_path: JSON file persisting browse state such as expanded folders.
    """

    top_tags_limit: int = Field(default=20, ge=1)
    related_limit: int = Field(default=5, ge=0)
    state_path: str = "~/.witness/browse-state.json"


class ServerSettings(WitnessBaseModel):
    """JSON API server options."""

    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False


class LoggingSettings(WitnessBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CLIOptions(WitnessBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class WitnessConfig(WitnessBaseModel):
    """Top-level configuration struct for Witness."""

    source: SourceSettings = Field(default_factory=SourceSettings)
    archive: ArchiveSettings = Field(default_factory=ArchiveSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    browse: BrowseSettings = Field(default_factory=BrowseSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "WitnessBaseModel",
    "SourceSettings",
    "ArchiveSettings",
    "RenderSettings",
    "BrowseSettings",
    "ServerSettings",
    "LoggingSettings",
    "CLIOptions",
    "WitnessConfig",
]
