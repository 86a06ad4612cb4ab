"""SQLite document store holding one row per document plus aggregate statistics."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from pydantic import ValidationError

from witness.catalog.index import compute_stats
from witness.catalog.models import ArchiveStats, NormalizedDocument

from .errors import StoreError
from .models import CategoryInfo, DateInfo, DocumentMetadata

LOGGER = logging.getLogger(__name__)

STATS_KEY = "stats"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    path TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    file_name TEXT NOT NULL,
    folder_path TEXT NOT NULL,
    date TEXT,
    year INTEGER,
    date_confidence TEXT NOT NULL,
    date_source TEXT NOT NULL,
    time_period TEXT,
    tags TEXT NOT NULL,
    type TEXT NOT NULL,
    type_confidence TEXT NOT NULL,
    summary TEXT NOT NULL,
    storage_ref TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS archive_stats (
    id TEXT PRIMARY KEY,
    payload TEXT NOT NULL
);
"""


class DocumentStore:
    """Read and replace the contents of a SQLite document store."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path).expanduser()

    @property
    def db_path(self) -> Path:
        """Return the database file path."""
        return self._db_path

    def exists(self) -> bool:
        """Return True when the database file is present."""
        return self._db_path.exists()

    def publish(
        self,
        documents: Sequence[NormalizedDocument],
        stats: Optional[ArchiveStats] = None,
    ) -> int:
        """Replace the stored documents and statistics in a single transaction.

        Args:
            documents: Normalized documents to store, in display order.
            stats: Statistics record; computed from ``documents`` when omitted.

        Returns:
            int: Number of documents written.

        Raises:
            StoreError: If the database cannot be written or paths collide.
        """
        stats = stats or compute_stats(documents)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with closing(self._connect()) as conn, conn:
                conn.executescript(_SCHEMA)
                conn.execute("DELETE FROM documents")
                conn.execute("DELETE FROM archive_stats")
                conn.executemany(
                    "INSERT INTO documents VALUES "
                    "(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (_to_row(position, document) for position, document in enumerate(documents)),
                )
                conn.execute(
                    "INSERT INTO archive_stats (id, payload) VALUES (?, ?)",
                    (STATS_KEY, stats.model_dump_json()),
                )
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to publish documents to {self._db_path}: {exc}") from exc

        LOGGER.info("Published %d documents to %s.", len(documents), self._db_path)
        return len(documents)

    def read_documents(self) -> List[NormalizedDocument]:
        """Return every stored document in publish order.

        Raises:
            StoreError: If the store is missing or unreadable.
        """
        rows = self._query("SELECT * FROM documents ORDER BY position")
        try:
            return [_from_row(row) for row in rows]
        except (ValidationError, ValueError) as exc:
            raise StoreError(f"Invalid document row in {self._db_path}: {exc}") from exc

    def read_stats(self) -> Optional[ArchiveStats]:
        """Return the stored statistics record, if present."""
        rows = self._query("SELECT payload FROM archive_stats WHERE id = ?", (STATS_KEY,))
        if not rows:
            return None
        try:
            return ArchiveStats.model_validate_json(rows[0]["payload"])
        except ValidationError as exc:
            raise StoreError(f"Invalid statistics record in {self._db_path}: {exc}") from exc

    def _query(self, sql: str, params: Iterable[object] = ()) -> List[sqlite3.Row]:
        if not self.exists():
            raise StoreError(f"No document store found at {self._db_path}")
        try:
            with closing(self._connect()) as conn:
                return conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to query {self._db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn


def _to_row(position: int, document: NormalizedDocument) -> tuple:
    return (
        document.path,
        position,
        document.filename,
        document.folder_path,
        document.date,
        document.year,
        document.date_confidence,
        document.date_source,
        document.time_period,
        json.dumps(list(document.tags)),
        document.type,
        document.type_confidence,
        document.summary,
        document.text_path,
    )


def _from_row(row: sqlite3.Row) -> NormalizedDocument:
    tags = tuple(json.loads(row["tags"]))
    metadata = DocumentMetadata(
        file_path=row["path"],
        file_name=row["file_name"],
        date=DateInfo(
            document_date=row["date"],
            date_source=row["date_source"],
            confidence=row["date_confidence"],
            time_period=row["time_period"],
        ),
        category=CategoryInfo(
            tags=tags,
            primary_type=row["type"],
            confidence=row["type_confidence"],
        ),
        summary=row["summary"],
    )
    storage_ref = row["storage_ref"]
    return NormalizedDocument(
        metadata=metadata,
        filename=row["file_name"],
        path=row["path"],
        folder_path=row["folder_path"],
        date=row["date"],
        year=row["year"],
        date_confidence=row["date_confidence"],
        date_source=row["date_source"],
        time_period=row["time_period"],
        tags=tags,
        type=row["type"],
        type_confidence=row["type_confidence"],
        summary=row["summary"],
        text_path=storage_ref,
        analysis_path=storage_ref.replace(".txt", "_analysis.json", 1),
    )


__all__ = ["DocumentStore", "STATS_KEY"]
