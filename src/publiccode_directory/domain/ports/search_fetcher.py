"""Port: code-search page fetcher."""

from __future__ import annotations

from typing import Protocol

from publiccode_directory.domain.entities import SearchPage, SortSpec


class SearchPageFetcher(Protocol):
    """Fetches exactly one page of code-search results."""

    async def search_code(
        self, query: str, page_index: int, page_size: int, sort: SortSpec
    ) -> SearchPage:
        """Return hits and the server-reported total; raise ``FetchError`` on failure."""
        ...
