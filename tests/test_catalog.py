"""End-to-end tests for the catalog snapshot."""

import json
from pathlib import Path

from conftest import make_manifest, make_record
from witness.catalog.catalog import ArchiveCatalog
from witness.catalog.index import PATH_SEPARATOR
from witness.catalog.models import DocumentCollection, SearchCriteria
from witness.manifest.sources import StaticManifestSource
from witness.render.text import process_text


def _load(tmp_path: Path, payload: dict) -> ArchiveCatalog:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return ArchiveCatalog.load(StaticManifestSource(path))


def test_three_documents_in_one_folder(tmp_path: Path) -> None:
    catalog = _load(
        tmp_path,
        make_manifest(
            {
                "input/a/b": [
                    make_record("input/a/b/1.txt", tags=["faith"]),
                    make_record("input/a/b/2.txt", tags=["faith", "family"]),
                    make_record("input/a/b/3.txt", tags=["travel"]),
                ]
            }
        ),
    )

    assert [(entry.tag, entry.count) for entry in catalog.all_tags] == [
        ("faith", 2),
        ("family", 1),
        ("travel", 1),
    ]

    (root,) = catalog.folder_tree
    assert root.path == "a"
    (child,) = root.children
    assert child.path == "a/b"
    assert child.document_count == 3

    matches = catalog.search(SearchCriteria(tags=("faith",)))
    assert [document.path for document in matches] == ["a/b/1.txt", "a/b/2.txt"]


def test_every_folder_prefix_has_a_node(manifest_file: Path) -> None:
    catalog = ArchiveCatalog.load(StaticManifestSource(manifest_file))
    tree_paths = {path for node in catalog.folder_tree for path in node.iter_paths()}

    for document in catalog.documents:
        segments = document.folder_path.split(PATH_SEPARATOR)
        for length in range(1, len(segments) + 1):
            assert PATH_SEPARATOR.join(segments[:length]) in tree_paths


def test_paths_are_unique_and_lookup_works(manifest_file: Path) -> None:
    catalog = ArchiveCatalog.load(StaticManifestSource(manifest_file))
    paths = [document.path for document in catalog.documents]

    assert len(paths) == len(set(paths))
    assert catalog.get("box-2/journal.txt").type == "journal"
    assert catalog.get("missing.txt") is None


def test_related_is_irreflexive(manifest_file: Path) -> None:
    catalog = ArchiveCatalog.load(StaticManifestSource(manifest_file))

    for document in catalog.documents:
        assert document.path not in {item.path for item in catalog.related(document)}


def test_top_tags_respect_limit(documents) -> None:
    catalog = ArchiveCatalog(DocumentCollection(documents=documents), top_tags_limit=2)

    assert len(catalog.all_tags) == 3
    assert [entry.tag for entry in catalog.top_tags] == ["faith", "Family"]
    assert catalog.stats.total_documents == 4
    assert catalog.source_stats is None
    assert [entry.type for entry in catalog.document_types] == ["letter", "journal"]


def test_plain_text_renders_unchanged_apart_from_trimming() -> None:
    text = "  Dear Ann,\n\nWe drove to Provo on Tuesday.\nLove, Mom  \n"

    assert process_text(text) == "Dear Ann,\n\nWe drove to Provo on Tuesday.\nLove, Mom"
