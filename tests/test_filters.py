"""Tests for catalog filtering."""

from conftest import make_document
from witness.catalog.filters import (
    confidence_level,
    dated_documents,
    documents_by_year,
    documents_for_year,
    documents_in_folder,
    documents_with_tag,
    filter_documents,
    find_document,
    in_date_range,
)
from witness.catalog.models import SearchCriteria


def _paths(documents) -> list[str]:
    return [document.path for document in documents]


def test_empty_criteria_returns_everything_in_order(documents) -> None:
    assert _paths(filter_documents(documents, SearchCriteria())) == _paths(documents)


def test_filtering_is_idempotent(documents) -> None:
    criteria = SearchCriteria(tags=("faith", "travel"), min_confidence="low")

    once = filter_documents(documents, criteria)
    twice = filter_documents(once, criteria)

    assert _paths(once) == _paths(twice)


def test_query_matches_summary_filename_or_path(documents) -> None:
    assert _paths(filter_documents(documents, SearchCriteria(query="REUNION"))) == [
        "box-1/letters/letter2.txt"
    ]
    assert _paths(filter_documents(documents, SearchCriteria(query="journal.txt"))) == [
        "box-2/journal.txt"
    ]
    assert len(filter_documents(documents, SearchCriteria(query="box-1/"))) == 3


def test_any_tag_match_is_exact(documents) -> None:
    matches = filter_documents(documents, SearchCriteria(tags=("Family", "travel")))

    assert _paths(matches) == [
        "box-1/letters/letter2.txt",
        "box-1/letters/letter1.txt",
        "box-2/journal.txt",
    ]
    assert filter_documents(documents, SearchCriteria(tags=("FAITH",))) == []


def test_all_tag_match_ignores_case(documents) -> None:
    criteria = SearchCriteria(tags=("FAITH", "family"), tag_match="all")

    assert _paths(filter_documents(documents, criteria)) == ["box-1/letters/letter2.txt"]


def test_type_filter(documents) -> None:
    matches = filter_documents(documents, SearchCriteria(types=("journal", "photo")))

    assert _paths(matches) == ["box-2/journal.txt"]


def test_date_range_is_lexical_and_keeps_undated(documents) -> None:
    criteria = SearchCriteria(date_start="1990", date_end="19991231")

    assert _paths(filter_documents(documents, criteria)) == [
        "box-1/letters/letter2.txt",
        "box-1/letters/letter10.txt",
        "box-1/letters/letter1.txt",
    ]
    # "85" sorts after "1990" lexically, so two-digit dates survive a start bound.
    assert in_date_range(documents[3], "1990", None)
    assert not in_date_range(documents[3], None, "19991231")


def test_min_confidence_uses_date_confidence(documents) -> None:
    matches = filter_documents(documents, SearchCriteria(min_confidence="medium"))

    assert _paths(matches) == ["box-1/letters/letter2.txt", "box-1/letters/letter10.txt"]
    assert confidence_level("unknown") == 0
    assert confidence_level(None) == 0


def test_folder_filter_is_a_plain_prefix() -> None:
    documents = [
        make_document("box-1/a.txt"),
        make_document("box-10/b.txt"),
        make_document("box-2/c.txt"),
    ]

    matches = filter_documents(documents, SearchCriteria(folder_path="box-1"))

    assert _paths(matches) == ["box-1/a.txt", "box-10/b.txt"]


def test_criteria_combine_with_and(documents) -> None:
    criteria = SearchCriteria(query="letter", tags=("faith",), min_confidence="high")

    assert _paths(filter_documents(documents, criteria)) == ["box-1/letters/letter2.txt"]


def test_filtering_does_not_modify_input(documents) -> None:
    before = list(documents)

    filter_documents(documents, SearchCriteria(tags=("travel",)))

    assert list(documents) == before


def test_lookup_helpers(documents) -> None:
    assert find_document(documents, "box-2/journal.txt") is documents[3]
    assert find_document(documents, "nope.txt") is None
    assert find_document(documents, None) is None
    assert len(documents_in_folder(documents, "box-1/letters")) == 3
    assert len(documents_in_folder(documents, None)) == 4
    assert _paths(documents_with_tag(documents, "Family")) == ["box-1/letters/letter2.txt"]
    assert documents_with_tag(documents, None) == []
    assert _paths(documents_for_year(documents, 1985)) == ["box-2/journal.txt"]
    assert len(dated_documents(documents)) == 3


def test_documents_by_year_sorted_oldest_first(documents) -> None:
    grouped = documents_by_year(documents)

    assert list(grouped) == [1985, 1997]
    assert len(grouped[1997]) == 2
