"""GitHub REST API adapter — implements the SearchPageFetcher and RepoFetcher ports."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from publiccode_directory.domain.entities import (
    RepoDetail,
    SearchHit,
    SearchPage,
    SortKey,
    SortSpec,
)
from publiccode_directory.domain.exceptions import (
    FetchError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    UpstreamError,
)
from publiccode_directory.domain.value_objects import MAX_PAGE_SIZE, RepositoryId
from publiccode_directory.infrastructure.config import GitHubConfig

logger = logging.getLogger(__name__)


class GitHubRestAdapter:
    """Concrete fetcher backed by the GitHub v3 REST API.

    Every API call carries the configured bearer credential and the standard
    content-negotiation headers; raw file downloads go to the raw-content host
    without credentials.
    """

    def __init__(self, client: httpx.AsyncClient, config: GitHubConfig) -> None:
        self._client = client
        self._config = config
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": config.user_agent,
            "X-GitHub-Api-Version": config.api_version,
        }
        if config.token:
            self._api_headers["Authorization"] = f"Bearer {config.token}"

    @property
    def authenticated(self) -> bool:
        return "Authorization" in self._api_headers

    async def search_code(
        self, query: str, page_index: int, page_size: int, sort: SortSpec
    ) -> SearchPage:
        """GET /search/code → SearchPage."""
        params = {
            "q": query,
            "page": str(page_index),
            "per_page": str(min(page_size, MAX_PAGE_SIZE)),
        }
        # Relevance is the upstream default ("best match") and has no order.
        if sort.key is not SortKey.RELEVANCE:
            params["sort"] = sort.key.value
            params["order"] = sort.order.value

        data = await self._api_get_json("/search/code", params=params)
        try:
            total_count = int(data["total_count"])
            hits = [_parse_hit(item) for item in data["items"]]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise UpstreamError(f"Malformed code-search response: {exc!r}") from exc

        return SearchPage(
            hits=hits,
            total_count=total_count,
            incomplete_results=bool(data.get("incomplete_results", False)),
        )

    async def fetch_repo_detail(self, repository_id: RepositoryId) -> RepoDetail:
        """GET /repos/{owner}/{repo} → RepoDetail."""
        data = await self._api_get_json(f"/repos/{repository_id.owner}/{repository_id.name}")
        try:
            owner = data.get("owner") or {}
            return RepoDetail(
                repository_id=data.get("full_name") or repository_id.full_name,
                star_count=max(0, int(data["stargazers_count"])),
                fork_count=max(0, int(data["forks_count"])),
                default_branch=data.get("default_branch") or "main",
                owner_login=owner.get("login") or repository_id.owner,
                description=data.get("description"),
                html_url=data.get("html_url") or "",
                updated_at=_parse_timestamp(data.get("updated_at")),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise UpstreamError(
                f"Malformed repository response for {repository_id}: {exc!r}"
            ) from exc

    async def fetch_raw_file(self, repository_id: RepositoryId, branch: str, path: str) -> str:
        """Fetch raw file content via the raw-content host."""
        raw_url = f"{self._config.raw_base}/{repository_id.full_name}/{branch}/{path}"
        try:
            resp = await self._client.get(raw_url, headers={"User-Agent": self._config.user_agent})
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error fetching {raw_url}: {exc}") from exc

        if resp.status_code == 200:
            return resp.text
        if resp.status_code == 404:
            raise NotFoundError(f"File not found: {repository_id}@{branch}:{path}")
        raise UpstreamError(f"Raw content host returned HTTP {resp.status_code} for {path}")

    async def _api_get_json(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        resp = await self._api_get(endpoint, params=params)
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(f"GitHub API returned invalid JSON for {endpoint}") from exc
        if not isinstance(data, dict):
            raise UpstreamError(f"GitHub API returned an unexpected payload for {endpoint}")
        return data

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{self._config.api_base}{endpoint}"
        try:
            resp = await self._client.get(url, headers=self._api_headers, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            logger.debug(
                "GitHub rate limit: %s/%s remaining",
                resp.headers.get("x-ratelimit-remaining", "?"),
                resp.headers.get("x-ratelimit-limit", "?"),
            )
            return resp

        raise _translate_error(resp, url)


def _parse_hit(item: dict[str, Any]) -> SearchHit:
    repository = item["repository"]
    full_name = repository["full_name"]
    owner = repository.get("owner") or {}
    return SearchHit(
        repository_id=full_name,
        path=item["path"],
        file_url=item.get("html_url") or "",
        relevance_score=float(item.get("score") or 0.0),
        repository_url=repository.get("html_url") or "",
        owner_login=owner.get("login") or full_name.split("/", 1)[0],
    )


def _translate_error(resp: httpx.Response, url: str) -> FetchError:
    message = _upstream_message(resp)
    status = resp.status_code

    if status == 429 or (status == 403 and _is_rate_limited(resp, message)):
        retry_after = _retry_after(resp)
        when = f" Retry in {int(retry_after)}s." if retry_after is not None else ""
        return RateLimitedError(
            f"GitHub API rate limit exceeded.{when} "
            "Set the GITHUB_TOKEN environment variable to increase the limit.",
            retry_after=retry_after,
        )

    if status in (401, 403):
        return UnauthorizedError(
            f"GitHub rejected the credential (HTTP {status}: {message}). "
            "Check that GITHUB_TOKEN is valid."
        )

    if status == 404:
        return NotFoundError(f"Not found: {url}")

    return UpstreamError(f"GitHub API returned HTTP {status} for {url}: {message}")


def _upstream_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.reason_phrase or "no details"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.reason_phrase or "no details"


def _is_rate_limited(resp: httpx.Response, message: str) -> bool:
    if resp.headers.get("x-ratelimit-remaining", "") == "0":
        return True
    if "retry-after" in resp.headers:
        return True
    return "rate limit" in message.lower()


def _retry_after(resp: httpx.Response) -> float | None:
    """Seconds until the quota refreshes, from ``Retry-After`` or ``x-ratelimit-reset``."""
    retry_raw = resp.headers.get("retry-after")
    if retry_raw:
        try:
            return max(0.0, float(retry_raw))
        except ValueError:
            pass

    reset_raw = resp.headers.get("x-ratelimit-reset")
    if reset_raw:
        try:
            reset_at = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc)
        except (ValueError, OSError, OverflowError):
            return None
        return max(0.0, (reset_at - datetime.now(timezone.utc)).total_seconds())

    return None


def _parse_timestamp(raw: Any) -> datetime | None:
    """ISO-8601 timestamp as GitHub sends it (``...Z``); ``None`` when absent or unparseable."""
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
