"""Tests for browse URL state, selections, and persisted folder expansion."""

import json
from pathlib import Path

from witness.browse.session import BrowseParams, BrowseSession
from witness.browse.state import (
    EXPANDED_FOLDERS_KEY,
    ExpandedFolders,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
)


def test_params_round_trip_through_query_string() -> None:
    params = BrowseParams(query="reunion trip", tag="Family", type="letter")

    encoded = params.to_query_string()

    assert encoded == "q=reunion+trip&tag=Family&type=letter"
    assert BrowseParams.from_query_string(encoded) == params
    assert BrowseParams.from_query_string("?" + encoded) == params


def test_empty_params_produce_empty_query_string() -> None:
    assert BrowseParams().to_query_string() == ""
    assert BrowseParams.from_query_string("") == BrowseParams()


def test_session_without_filters_returns_nothing(documents) -> None:
    session = BrowseSession(documents)

    assert not session.has_active_filters
    assert session.results() == []


def test_session_tags_must_all_match(documents) -> None:
    session = BrowseSession(documents)
    session.toggle_tag("faith")

    assert [doc.path for doc in session.results()] == [
        "box-1/letters/letter2.txt",
        "box-1/letters/letter10.txt",
    ]

    session.toggle_tag("family")
    assert [doc.path for doc in session.results()] == ["box-1/letters/letter2.txt"]

    session.toggle_tag("faith")
    assert [doc.path for doc in session.results()] == [
        "box-1/letters/letter2.txt",
        "box-2/journal.txt",
    ]


def test_session_types_match_any(documents) -> None:
    session = BrowseSession(documents, selected_types=["journal", "letter"])

    assert len(session.results()) == 4


def test_tag_preview_counts_refinement(documents) -> None:
    session = BrowseSession(documents, selected_tags=["faith"])

    assert session.tag_preview_count("family") == 1
    assert session.tag_preview_count("travel") == 0
    assert session.tag_preview_count("faith") == 0


def test_session_params_and_clear(documents) -> None:
    session = BrowseSession.from_params(documents, BrowseParams(query="utah", tag="travel"))

    assert session.has_active_filters
    assert [doc.path for doc in session.results()] == ["box-2/journal.txt"]
    assert session.params() == BrowseParams(query="utah", tag="travel")

    session.clear()
    assert session.params() == BrowseParams()
    assert session.results() == []


def test_expanded_folders_toggle_and_collapse() -> None:
    store = MemoryKeyValueStore()
    folders = ExpandedFolders(store)

    assert folders.toggle("box-1") is True
    assert folders.toggle("box-1/letters") is True
    assert folders.toggle("box-1") is False
    assert folders.paths() == {"box-1/letters"}
    assert store.get(EXPANDED_FOLDERS_KEY) == ["box-1/letters"]

    folders.expand(["a", "b"])
    assert folders.is_expanded("a")
    folders.collapse(["a", "missing"])
    assert folders.paths() == {"b", "box-1/letters"}
    folders.collapse_all()
    assert folders.paths() == set()


def test_expanded_folders_persist_to_json_file(tmp_path: Path) -> None:
    path = tmp_path / "state" / "browse.json"
    ExpandedFolders(JsonFileKeyValueStore(path)).expand(["box-2", "box-1"])

    assert json.loads(path.read_text(encoding="utf-8")) == {
        EXPANDED_FOLDERS_KEY: ["box-1", "box-2"]
    }
    reloaded = ExpandedFolders(JsonFileKeyValueStore(path))
    assert reloaded.paths() == {"box-1", "box-2"}


def test_corrupt_state_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "browse.json"
    path.write_text("{broken", encoding="utf-8")

    folders = ExpandedFolders(JsonFileKeyValueStore(path))

    assert folders.paths() == set()
    folders.toggle("box-1")
    assert json.loads(path.read_text(encoding="utf-8"))[EXPANDED_FOLDERS_KEY] == ["box-1"]


def test_non_list_value_reads_as_no_expanded_folders() -> None:
    store = MemoryKeyValueStore({EXPANDED_FOLDERS_KEY: "box-1"})

    assert ExpandedFolders(store).paths() == set()
