"""Data models describing the archive manifest as ingested."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

Confidence = Literal["high", "medium", "low", "none"]


class ManifestModel(BaseModel):
    """Shared configuration for manifest models; records are immutable after load."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class DateInfo(ManifestModel):
    """Date information extracted for a document.

    Attributes:
        document_date: Raw date value (``19970821``, ``1997``, ``97``, or free text).
        date_source: Where the date was found (filename, content, ...).
        confidence: Extraction certainty.
        time_period: Optional coarse period label.
    """

    document_date: Optional[str] = None
    date_source: str = ""
    confidence: Confidence = "none"
    time_period: Optional[str] = None

    @field_validator("document_date", mode="before")
    @classmethod
    def _stringify_date(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value


class CategoryInfo(ManifestModel):
    """Tags and document type assigned to a document."""

    tags: Tuple[str, ...] = ()
    primary_type: str = "unknown"
    confidence: Confidence = "low"


class DocumentMetadata(ManifestModel):
    """Raw per-file metadata record as it appears in the manifest."""

    file_path: str
    file_name: str
    date: DateInfo = Field(default_factory=DateInfo)
    category: CategoryInfo = Field(default_factory=CategoryInfo)
    summary: str = ""


class FolderNode(ManifestModel):
    """One manifest folder and the documents it holds."""

    path: str = ""
    documents: Tuple[DocumentMetadata, ...] = ()
    document_count: int = 0


class DateRange(ManifestModel):
    """Date coverage statistics."""

    earliest: int = 0
    latest: int = 0
    documents_with_dates: int = 0
    coverage_percentage: float = 0.0


class ArchiveMetadata(ManifestModel):
    """Aggregate statistics shipped alongside the manifest folders."""

    generated_at: str = ""
    total_documents: int = 0
    total_folders: int = 0
    date_range: DateRange = Field(default_factory=DateRange)
    all_tags: Dict[str, int] = Field(default_factory=dict)
    document_types: Dict[str, int] = Field(default_factory=dict)


class ArchiveManifest(ManifestModel):
    """Top-level manifest: metadata plus folder path to folder mapping."""

    metadata: ArchiveMetadata = Field(default_factory=ArchiveMetadata)
    folders: Dict[str, FolderNode] = Field(default_factory=dict)

    def iter_records(self) -> List[Tuple[str, DocumentMetadata]]:
        """Return ``(folder_path, record)`` pairs in manifest order."""
        return [
            (folder_path, record)
            for folder_path, folder in self.folders.items()
            for record in folder.documents
        ]


__all__ = [
    "Confidence",
    "DateInfo",
    "CategoryInfo",
    "DocumentMetadata",
    "FolderNode",
    "DateRange",
    "ArchiveMetadata",
    "ArchiveManifest",
]
