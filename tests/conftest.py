"""Shared fixtures: a small archive manifest and fake HTTP plumbing."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Optional

import pytest
import requests

from witness.catalog.models import NormalizedDocument
from witness.catalog.normalize import flatten_manifest, normalize_document
from witness.manifest.models import ArchiveManifest, DocumentMetadata


def make_record(
    file_path: str,
    *,
    date: Optional[str] = None,
    confidence: str = "none",
    tags: Iterable[str] = (),
    doc_type: str = "letter",
    summary: str = "",
) -> dict[str, Any]:
    """Return a raw manifest record as it appears in manifest.json."""
    return {
        "file_path": file_path,
        "file_name": file_path.rsplit("/", 1)[-1],
        "date": {"document_date": date, "date_source": "filename", "confidence": confidence},
        "category": {"tags": list(tags), "primary_type": doc_type, "confidence": "high"},
        "summary": summary,
    }


def make_manifest(folders: dict[str, list[dict[str, Any]]]) -> dict[str, Any]:
    """Wrap raw records into a manifest payload keyed by folder path."""
    return {
        "metadata": {"generated_at": "2024-01-01T00:00:00Z"},
        "folders": {
            path: {"path": path, "documents": records, "document_count": len(records)}
            for path, records in folders.items()
        },
    }


def make_document(
    path: str,
    *,
    folder: Optional[str] = None,
    date: Optional[str] = None,
    confidence: str = "none",
    tags: Iterable[str] = (),
    doc_type: str = "letter",
    summary: str = "",
) -> NormalizedDocument:
    """Build a normalized document directly, bypassing manifest parsing."""
    record = DocumentMetadata.model_validate(
        make_record(
            path,
            date=date,
            confidence=confidence,
            tags=tags,
            doc_type=doc_type,
            summary=summary,
        )
    )
    if folder is None:
        folder = path.rsplit("/", 1)[0] if "/" in path else ""
    return normalize_document(record, folder, root_prefix="")


@pytest.fixture
def sample_manifest() -> dict[str, Any]:
    return make_manifest(
        {
            "input/box-1/letters": [
                make_record(
                    "input/box-1/letters/letter2.txt",
                    date="19970821",
                    confidence="high",
                    tags=["faith", "Family"],
                    summary="A letter about the family reunion",
                ),
                make_record(
                    "input/box-1/letters/letter10.txt",
                    date="1997",
                    confidence="medium",
                    tags=["faith"],
                    summary="Notes on Sunday service",
                ),
                make_record(
                    "input/box-1/letters/letter1.txt",
                    tags=["travel"],
                    summary="Undated postcard",
                ),
            ],
            "input/box-2": [
                make_record(
                    "input/box-2/journal.txt",
                    date="85",
                    confidence="low",
                    tags=["family", "travel"],
                    doc_type="journal",
                    summary="Trip to Utah",
                ),
            ],
        }
    )


@pytest.fixture
def manifest_file(tmp_path: Path, sample_manifest: dict[str, Any]) -> Path:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(sample_manifest), encoding="utf-8")
    return path


@pytest.fixture
def documents(sample_manifest: dict[str, Any]) -> tuple[NormalizedDocument, ...]:
    return flatten_manifest(ArchiveManifest.model_validate(sample_manifest))


@pytest.fixture
def archive_dir(tmp_path: Path) -> Path:
    """Directory holding the text files referenced by ``sample_manifest``."""
    root = tmp_path / "archive"
    (root / "box-1" / "letters").mkdir(parents=True)
    (root / "box-2").mkdir()
    (root / "box-1" / "letters" / "letter2.txt").write_text(
        "*lm12:rm75\n*vp4\n\nDear Ann,\n04Important20 news about the reunion.\n",
        encoding="utf-8",
    )
    (root / "box-2" / "journal.txt").write_text("Drove to Utah today.\n", encoding="utf-8")
    return root


class FakeResponse:
    """Stand-in for :class:`requests.Response` with the attributes the code reads."""

    def __init__(
        self, *, status_code: int = 200, payload: Any = None, text: str = ""
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Serve canned responses (or raise canned errors) keyed by URL."""

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, Optional[float]]] = []

    def get(self, url: str, timeout: Optional[float] = None) -> FakeResponse:
        self.calls.append((url, timeout))
        outcome = self.responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
