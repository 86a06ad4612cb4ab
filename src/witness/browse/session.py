"""Interactive browse state: URL parameters and tag/type selections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from urllib.parse import parse_qs, urlencode

from witness.catalog.filters import filter_documents, has_all_tags
from witness.catalog.models import NormalizedDocument, SearchCriteria


@dataclass(frozen=True)
class BrowseParams:
    """Browse filters reflected in the address bar (``q``, ``tag``, ``type``)."""

    query: str = ""
    tag: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_query_string(cls, query_string: str) -> "BrowseParams":
        """Parse ``q``, ``tag`` and ``type`` from a URL query string."""
        values = parse_qs(query_string.lstrip("?"))

        def _first(name: str) -> Optional[str]:
            items = values.get(name)
            return items[0] if items else None

        return cls(query=_first("q") or "", tag=_first("tag"), type=_first("type"))

    def to_query_string(self) -> str:
        """Render the non-empty parameters as a URL query string."""
        pairs = [
            (name, value)
            for name, value in (("q", self.query), ("tag", self.tag), ("type", self.type))
            if value
        ]
        return urlencode(pairs)


@dataclass
class BrowseSession:
    """Selections made on the browse page.

    Selected tags must all be present on a document; selected types match when the
    document has any one of them. With no active filter the result list is empty
    and the folder tree is browsed instead.
    """

    documents: Sequence[NormalizedDocument]
    query: str = ""
    selected_tags: List[str] = field(default_factory=list)
    selected_types: List[str] = field(default_factory=list)

    @classmethod
    def from_params(
        cls, documents: Sequence[NormalizedDocument], params: BrowseParams
    ) -> "BrowseSession":
        """Restore a session from URL parameters."""
        return cls(
            documents=documents,
            query=params.query,
            selected_tags=[params.tag] if params.tag else [],
            selected_types=[params.type] if params.type else [],
        )

    @property
    def has_active_filters(self) -> bool:
        """Return True when any query, tag, or type is selected."""
        return bool(self.query or self.selected_tags or self.selected_types)

    def params(self) -> BrowseParams:
        """Return the URL parameters for the current selections."""
        return BrowseParams(
            query=self.query,
            tag=self.selected_tags[0] if self.selected_tags else None,
            type=self.selected_types[0] if self.selected_types else None,
        )

    def toggle_tag(self, tag: str) -> None:
        """Select ``tag`` or deselect it if already selected."""
        if tag in self.selected_tags:
            self.selected_tags.remove(tag)
        else:
            self.selected_tags.append(tag)

    def toggle_type(self, doc_type: str) -> None:
        """Select ``doc_type`` or deselect it if already selected."""
        if doc_type in self.selected_types:
            self.selected_types.remove(doc_type)
        else:
            self.selected_types.append(doc_type)

    def clear(self) -> None:
        """Drop every selection."""
        self.query = ""
        self.selected_tags.clear()
        self.selected_types.clear()

    def results(self) -> List[NormalizedDocument]:
        """Return the documents matching every active selection."""
        if not self.has_active_filters:
            return []
        criteria = SearchCriteria(
            query=self.query or None,
            tags=tuple(self.selected_tags),
            types=tuple(self.selected_types),
            tag_match="all",
        )
        return filter_documents(self.documents, criteria)

    def tag_preview_count(self, tag: str) -> int:
        """Return how many current results also carry ``tag``; 0 if already selected."""
        if tag in self.selected_tags:
            return 0
        return sum(1 for document in self.results() if has_all_tags(document, [tag]))


__all__ = ["BrowseParams", "BrowseSession"]
