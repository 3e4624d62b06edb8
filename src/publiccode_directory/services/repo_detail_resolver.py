"""Best-effort repository detail lookup.

A missing detail degrades the record (zero stars / forks) instead of failing
the page, so every failure is converted to ``None`` here.
"""

from __future__ import annotations

import asyncio
import logging

from publiccode_directory.domain.entities import RepoDetail
from publiccode_directory.domain.exceptions import FetchError, InvalidRequestError
from publiccode_directory.domain.ports.repo_fetcher import RepoFetcher
from publiccode_directory.domain.value_objects import RepositoryId

logger = logging.getLogger(__name__)


class RepoDetailResolver:
    """Resolves star / fork counts and default branch for one repository."""

    def __init__(self, repo_fetcher: RepoFetcher, timeout_seconds: float = 10.0) -> None:
        self._fetcher = repo_fetcher
        self._timeout = timeout_seconds

    async def resolve(self, repository_id: str) -> RepoDetail | None:
        """Return the repository detail, or ``None`` if it cannot be fetched in time."""
        try:
            rid = RepositoryId.from_string(repository_id)
        except InvalidRequestError:
            logger.debug("Skipping detail lookup for malformed id %r", repository_id)
            return None

        try:
            return await asyncio.wait_for(
                self._fetcher.fetch_repo_detail(rid), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.debug("Detail lookup for %s timed out after %.1fs", rid, self._timeout)
        except FetchError as exc:
            logger.debug("Detail lookup for %s failed (%s): %s", rid, exc.kind.value, exc)
        except Exception:
            logger.exception("Unexpected error resolving %s, using defaults", rid)
        return None
