"""Build-page use case — the search aggregation and enrichment pipeline.

One code-search call per page, then a bounded scatter-gather of repository
detail lookups, merged back in search order and sorted on request.  Search
failures abort the page; detail failures are absorbed.
"""

from __future__ import annotations

import asyncio
import logging

from publiccode_directory.domain.entities import (
    EnrichedRecord,
    PageWindow,
    RepoDetail,
    SearchHit,
    SortSpec,
)
from publiccode_directory.domain.exceptions import FetchError, InvalidRequestError
from publiccode_directory.domain.ports.search_fetcher import SearchPageFetcher
from publiccode_directory.domain.value_objects import PageRequest
from publiccode_directory.services.filter_sort import sort_records
from publiccode_directory.services.repo_detail_resolver import RepoDetailResolver

logger = logging.getLogger(__name__)


class BuildPageUseCase:
    """Orchestrates search → enrichment → ordering for one page.

    Parameters
    ----------
    search_fetcher:
        Adapter that returns one page of code-search hits.
    detail_resolver:
        Best-effort resolver for per-repository star / fork counts.
    max_concurrency:
        Ceiling on simultaneous detail lookups.  Defaults to the page size.
    """

    def __init__(
        self,
        search_fetcher: SearchPageFetcher,
        detail_resolver: RepoDetailResolver,
        max_concurrency: int | None = None,
    ) -> None:
        self._search = search_fetcher
        self._resolver = detail_resolver
        self._max_concurrency = max_concurrency

    async def execute(
        self,
        query: str,
        page_index: int,
        page_size: int,
        sort: SortSpec | None = None,
    ) -> PageWindow:
        """Return the enriched, ordered page; raises ``FetchError`` if search fails."""
        request = PageRequest(page_index=page_index, page_size=page_size)
        sort = sort or SortSpec()
        if not query.strip():
            raise InvalidRequestError("Search query must not be empty.")

        # 1. Single search call; a rate limit aborts before any detail lookup
        try:
            page = await self._search.search_code(
                query, request.page_index, request.page_size, sort
            )
        except FetchError as exc:
            logger.warning(
                "Search failed for page %d (%s): %s", request.page_index, exc.kind.value, exc
            )
            raise

        hits = page.hits[: request.page_size]

        # 2. Scatter-gather over detail lookups
        details = await self._resolve_details(hits, request.page_size)

        # 3. Left join in search order
        records = [EnrichedRecord(hit=hit, detail=details.get(hit.repository_id)) for hit in hits]
        absorbed = sum(1 for record in records if not record.has_detail)
        logger.info(
            "Built page %d (%d hits, %d without details, total %d)",
            request.page_index,
            len(records),
            absorbed,
            page.total_count,
        )

        # 4. Requested ordering
        return PageWindow(
            items=sort_records(records, sort),
            total_count=page.total_count,
            page_index=request.page_index,
            page_size=request.page_size,
            incomplete_results=page.incomplete_results,
        )

    async def _resolve_details(
        self, hits: list[SearchHit], page_size: int
    ) -> dict[str, RepoDetail | None]:
        """Resolve every distinct repository once, with bounded concurrency."""
        repository_ids = list(dict.fromkeys(hit.repository_id for hit in hits))
        if not repository_ids:
            return {}

        sem = asyncio.Semaphore(self._max_concurrency or page_size)

        async def _resolve_one(repository_id: str) -> RepoDetail | None:
            async with sem:
                return await self._resolver.resolve(repository_id)

        results = await asyncio.gather(*(_resolve_one(rid) for rid in repository_ids))
        return dict(zip(repository_ids, results))
