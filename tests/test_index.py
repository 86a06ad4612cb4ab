"""Tests for catalog aggregations: tag merging, statistics, and the folder tree."""

import pytest

from conftest import make_document
from witness.catalog.index import (
    breadcrumbs,
    build_folder_tree,
    compute_stats,
    date_coverage,
    find_folder,
    manifest_tag_frequencies,
    merge_tag_counts,
    natural_key,
    tag_frequencies,
    type_frequencies,
)
from witness.manifest.models import ArchiveManifest


def test_merge_tag_counts_prefers_most_uppercase_variant() -> None:
    merged = merge_tag_counts([("lds", 2), ("LDS", 3)])

    assert [(entry.tag, entry.count) for entry in merged] == [("LDS", 5)]
    reversed_order = merge_tag_counts([("LDS", 3), ("lds", 2)])
    assert [(entry.tag, entry.count) for entry in reversed_order] == [("LDS", 5)]


def test_merge_tag_counts_uppercase_wins_and_first_variant_breaks_ties() -> None:
    merged = merge_tag_counts([("Mission", 1), ("mISSION", 0), ("mission", 2), ("Lds", 1)])

    # "mISSION" has more uppercase letters than "Mission" so it wins.
    assert [(entry.tag, entry.count) for entry in merged] == [("mISSION", 3), ("Lds", 1)]

    tied = merge_tag_counts([("Utah", 1), ("uTah", 1)])
    assert [(entry.tag, entry.count) for entry in tied] == [("Utah", 2)]


def test_merge_tag_counts_orders_by_count_then_encounter() -> None:
    merged = merge_tag_counts([("b", 1), ("a", 2), ("c", 1), ("d", 2)])

    assert [entry.tag for entry in merged] == ["a", "d", "b", "c"]


def test_tag_frequencies_counts_each_occurrence() -> None:
    documents = [
        make_document("a/1.txt", tags=["LDS", "family"]),
        make_document("a/2.txt", tags=["lds"]),
        make_document("a/3.txt", tags=["Family", "lds"]),
    ]

    entries = tag_frequencies(documents)

    assert [(entry.tag, entry.count) for entry in entries] == [("LDS", 3), ("Family", 2)]
    assert len(tag_frequencies(documents, limit=1)) == 1


def test_manifest_tag_frequencies_merges_table() -> None:
    manifest = ArchiveManifest.model_validate(
        {"metadata": {"all_tags": {"lds": 2, "LDS": 3, "Travel": 1}}}
    )

    entries = manifest_tag_frequencies(manifest)

    assert [(entry.tag, entry.count) for entry in entries] == [("LDS", 5), ("Travel", 1)]


def test_type_frequencies_most_common_first(documents) -> None:
    entries = type_frequencies(documents)

    assert [(entry.type, entry.count) for entry in entries] == [("letter", 3), ("journal", 1)]


def test_compute_stats(documents) -> None:
    stats = compute_stats(documents)

    assert stats.total_documents == 4
    assert stats.total_folders == 2
    assert stats.document_types == {"letter": 3, "journal": 1}
    assert stats.documents_per_folder == {"box-1/letters": 3, "box-2": 1}
    assert stats.date_range.earliest == 1985
    assert stats.date_range.latest == 1997
    assert stats.date_range.documents_with_dates == 3
    assert stats.date_range.coverage_percentage == pytest.approx(75.0)


def test_stats_for_empty_collection() -> None:
    stats = compute_stats([])

    assert stats.total_documents == 0
    assert stats.date_range.coverage_percentage == 0.0
    assert date_coverage([]) == 0.0


def test_natural_key_orders_digit_runs_numerically() -> None:
    names = ["box-10", "Box-2", "box-1", "box-2"]

    assert sorted(names, key=natural_key) == ["box-1", "Box-2", "box-2", "box-10"]


def test_build_folder_tree_creates_every_prefix() -> None:
    documents = [
        make_document("a/b/one.txt"),
        make_document("a/b/two.txt"),
        make_document("a/c/d/three.txt"),
        make_document("box-10/x.txt"),
        make_document("box-2/y.txt"),
    ]

    roots = build_folder_tree(documents)

    assert [node.name for node in roots] == ["a", "box-2", "box-10"]
    top = roots[0]
    assert top.path == "a"
    assert top.document_count == 0
    assert top.total_count() == 3
    assert [child.path for child in top.children] == ["a/b", "a/c"]
    assert top.children[0].document_count == 2
    deep = find_folder(roots, "a/c/d")
    assert deep is not None
    assert deep.document_count == 1
    assert find_folder(roots, "a/c").document_count == 0
    assert list(top.iter_paths()) == ["a", "a/b", "a/c", "a/c/d"]
    assert find_folder(roots, "missing") is None


def test_build_folder_tree_skips_documents_without_folder() -> None:
    documents = [make_document("loose.txt", folder=""), make_document("a/in.txt")]

    roots = build_folder_tree(documents)

    assert [node.path for node in roots] == ["a"]


def test_breadcrumbs() -> None:
    assert breadcrumbs("box-3/journal/1989") == [
        ("box-3", "box-3"),
        ("journal", "box-3/journal"),
        ("1989", "box-3/journal/1989"),
    ]
    assert breadcrumbs("") == []
