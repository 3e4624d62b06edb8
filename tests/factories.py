"""Builders for domain objects used across the test suite."""

from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, Mock

from publiccode_directory.domain.entities import (
    EnrichedRecord,
    RepoDetail,
    SearchHit,
    SearchPage,
)


def make_hit(repository_id: str = "acme/foo", path: str = "publiccode.yml", score: float = 1.0) -> SearchHit:
    owner = repository_id.split("/", 1)[0]
    return SearchHit(
        repository_id=repository_id,
        path=path,
        file_url=f"https://github.com/{repository_id}/blob/main/{path}",
        relevance_score=score,
        repository_url=f"https://github.com/{repository_id}",
        owner_login=owner,
    )


def make_detail(
    repository_id: str = "acme/foo",
    stars: int = 0,
    forks: int = 0,
    branch: str = "main",
    updated_at: datetime | None = None,
) -> RepoDetail:
    return RepoDetail(
        repository_id=repository_id,
        star_count=stars,
        fork_count=forks,
        default_branch=branch,
        owner_login=repository_id.split("/", 1)[0],
        updated_at=updated_at,
    )


def make_record(
    repository_id: str, path: str = "publiccode.yml", stars: int | None = None, forks: int = 0
) -> EnrichedRecord:
    detail = None if stars is None else make_detail(repository_id, stars=stars, forks=forks)
    return EnrichedRecord(hit=make_hit(repository_id, path), detail=detail)


def make_search(hits: list[SearchHit], total_count: int | None = None) -> Mock:
    """Mock SearchPageFetcher returning a fixed page."""
    search = Mock()
    search.search_code = AsyncMock(
        return_value=SearchPage(
            hits=hits,
            total_count=len(hits) if total_count is None else total_count,
        )
    )
    return search


def make_resolver(details: dict[str, RepoDetail]) -> Mock:
    """Mock RepoDetailResolver; ids missing from *details* resolve to ``None``."""
    resolver = Mock()
    resolver.resolve = AsyncMock(side_effect=lambda repository_id: details.get(repository_id))
    return resolver


class ConcurrencyTracker:
    """Resolver fake that records the peak number of simultaneous lookups."""

    def __init__(self, delay: float = 0.01) -> None:
        self.delay = delay
        self.active = 0
        self.peak = 0

    async def resolve(self, repository_id: str) -> RepoDetail | None:
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            return make_detail(repository_id, stars=1)
        finally:
            self.active -= 1
