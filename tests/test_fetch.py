"""Tests for archive URLs, text fetching, and the document viewer."""

from pathlib import Path

import pytest
import requests

from conftest import FakeResponse, FakeSession
from witness.archive.fetch import (
    DocumentFetchError,
    DocumentTextFetcher,
    DocumentViewer,
    FetchStatus,
)
from witness.archive.urls import archive_url, is_remote
from witness.config.models import WitnessConfig


def test_archive_url_encodes_each_segment_for_storage_bucket() -> None:
    url = archive_url("box 3/journal/2jan1989.txt", storage_bucket="family.appspot.com")

    assert url == (
        "https://firebasestorage.googleapis.com/v0/b/family.appspot.com"
        "/o/box%203%2Fjournal%2F2jan1989.txt?alt=media"
    )
    assert "%27" not in archive_url("it's/(x).txt", storage_bucket="b")


def test_archive_url_joins_base_url() -> None:
    assert archive_url("/a/b.txt", base_url="https://host/archive/") == (
        "https://host/archive/a/b.txt"
    )
    assert archive_url("a/b.txt") == "archive/a/b.txt"
    assert is_remote("https://host/a")
    assert not is_remote("/srv/archive/a")


def test_fetcher_reads_local_files(archive_dir: Path) -> None:
    fetcher = DocumentTextFetcher(base_url=str(archive_dir))

    assert fetcher.fetch("box-2/journal.txt") == "Drove to Utah today.\n"


def test_fetcher_replaces_undecodable_bytes(tmp_path: Path) -> None:
    (tmp_path / "legacy.txt").write_bytes(b"caf\xe9")

    text = DocumentTextFetcher(base_url=str(tmp_path)).fetch("legacy.txt")

    assert text == "caf�"


def test_fetcher_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(DocumentFetchError):
        DocumentTextFetcher(base_url=str(tmp_path)).fetch("missing.txt")


def test_fetcher_remote_uses_storage_url() -> None:
    url = archive_url("a/b.txt", storage_bucket="bucket")
    forbidden = archive_url("a/c.txt", storage_bucket="bucket")
    session = FakeSession(
        {url: FakeResponse(text="remote text"), forbidden: FakeResponse(status_code=403)}
    )
    fetcher = DocumentTextFetcher(storage_bucket="bucket", timeout=2.5, session=session)

    assert fetcher.fetch("a/b.txt") == "remote text"
    assert session.calls == [(url, 2.5)]
    with pytest.raises(DocumentFetchError):
        fetcher.fetch("a/c.txt")


def test_fetcher_wraps_connection_errors() -> None:
    url = "https://host/archive/a.txt"
    session = FakeSession({url: requests.ConnectionError("down")})
    fetcher = DocumentTextFetcher(base_url="https://host/archive", session=session)

    with pytest.raises(DocumentFetchError):
        fetcher.fetch("a.txt")


def test_fetcher_from_config() -> None:
    config = WitnessConfig.model_validate(
        {"archive": {"storage_bucket": "bucket"}, "source": {"timeout_seconds": 4}}
    )

    fetcher = DocumentTextFetcher.from_config(config)

    assert fetcher.timeout == 4
    assert fetcher.url_for("x.txt").endswith("/o/x.txt?alt=media")


def test_viewer_discards_stale_results() -> None:
    viewer = DocumentViewer(DocumentTextFetcher())
    first = viewer.begin("a.txt")
    second = viewer.begin("b.txt")

    assert viewer.complete(first, content="old text") is FetchStatus.SUPERSEDED
    assert viewer.view.path == "b.txt"
    assert viewer.view.status is FetchStatus.PENDING

    assert viewer.complete(second, content="04new20") is FetchStatus.LOADED
    assert viewer.view.content == "04new20"
    assert viewer.rendered() == "<strong>new</strong>"


def test_viewer_failure_is_scoped_to_one_document(archive_dir: Path) -> None:
    viewer = DocumentViewer(DocumentTextFetcher(base_url=str(archive_dir)))

    failed = viewer.open("box-9/missing.txt")
    assert failed.status is FetchStatus.FAILED
    assert failed.error
    assert viewer.rendered() is None

    loaded = viewer.open("box-1/letters/letter2.txt")
    assert loaded.status is FetchStatus.LOADED
    assert loaded.error is None
    assert viewer.rendered() == (
        "Dear Ann,\n<strong>Important</strong> news about the reunion."
    )


def test_stale_failure_does_not_replace_current_view() -> None:
    viewer = DocumentViewer(DocumentTextFetcher())
    stale = viewer.begin("a.txt")
    current = viewer.begin("b.txt")
    viewer.complete(current, content="kept")

    assert viewer.complete(stale, error="timeout") is FetchStatus.SUPERSEDED
    assert viewer.view.status is FetchStatus.LOADED
    assert viewer.view.content == "kept"


def test_open_returns_the_current_view(archive_dir: Path) -> None:
    viewer = DocumentViewer(DocumentTextFetcher(base_url=str(archive_dir)))

    view = viewer.open("box-2/journal.txt")

    assert view is viewer.view
    assert view.status is FetchStatus.LOADED
    assert view.content == "Drove to Utah today.\n"
