"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from publiccode_directory.domain.entities import RepoDetail
from publiccode_directory.domain.value_objects import RepositoryId


class RepoFetcher(Protocol):
    """Abstract contract for fetching per-repository data from GitHub."""

    async def fetch_repo_detail(self, repository_id: RepositoryId) -> RepoDetail:
        """Return normalized repository metadata; raise ``FetchError`` on failure."""
        ...

    async def fetch_raw_file(self, repository_id: RepositoryId, branch: str, path: str) -> str:
        """Return the text of one file on *branch*; raise ``NotFoundError`` on 404."""
        ...
