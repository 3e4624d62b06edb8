"""FastAPI dependency injection wiring."""

from __future__ import annotations

import logging

import httpx
from fastapi import Depends

from publiccode_directory.domain.exceptions import SummaryUnavailableError
from publiccode_directory.infrastructure.config import Settings, get_settings
from publiccode_directory.infrastructure.github_rest_adapter import GitHubRestAdapter
from publiccode_directory.infrastructure.openai_adapter import OpenAIAdapter
from publiccode_directory.services.build_page import BuildPageUseCase
from publiccode_directory.services.repo_detail_resolver import RepoDetailResolver
from publiccode_directory.services.summarize_readme import SummarizeReadmeUseCase
from publiccode_directory.services.summary_session import SummarySession

logger = logging.getLogger(__name__)

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None
_summary_session: SummarySession | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter, _summary_session  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))

    github = settings.github_config()
    if not github.token:
        logger.warning(
            "GITHUB_TOKEN is not set; code search runs against the unauthenticated rate limit."
        )

    if settings.openai_api_key:
        _openai_adapter = OpenAIAdapter(
            api_key=settings.openai_api_key.get_secret_value(),
            model=settings.openai_model,
        )
        adapter = GitHubRestAdapter(client=_http_client, config=github)
        _summary_session = SummarySession(
            SummarizeReadmeUseCase(
                repo_fetcher=adapter,
                detail_resolver=RepoDetailResolver(adapter, settings.detail_timeout_seconds),
                llm_gateway=_openai_adapter,
                language=settings.summary_language,
                max_readme_tokens=settings.summary_max_readme_tokens,
            ),
            max_entries=settings.summary_cache_size,
        )
    else:
        logger.info("OPENAI_API_KEY is not set; README summaries are disabled.")


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter, _summary_session  # noqa: PLW0603

    if _summary_session:
        await _summary_session.aclose()
        _summary_session = None
    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None


def get_github_adapter(settings: Settings = Depends(get_settings)) -> GitHubRestAdapter:
    assert _http_client is not None, "startup() was not called"
    return GitHubRestAdapter(client=_http_client, config=settings.github_config())


def get_detail_resolver(
    adapter: GitHubRestAdapter = Depends(get_github_adapter),
    settings: Settings = Depends(get_settings),
) -> RepoDetailResolver:
    return RepoDetailResolver(adapter, timeout_seconds=settings.detail_timeout_seconds)


def get_build_page(
    adapter: GitHubRestAdapter = Depends(get_github_adapter),
    resolver: RepoDetailResolver = Depends(get_detail_resolver),
    settings: Settings = Depends(get_settings),
) -> BuildPageUseCase:
    """Build the page use case with injected adapters."""
    return BuildPageUseCase(
        search_fetcher=adapter,
        detail_resolver=resolver,
        max_concurrency=settings.max_detail_concurrency,
    )


def get_summary_session() -> SummarySession:
    if _summary_session is None:
        raise SummaryUnavailableError(
            "README summaries are disabled. Set OPENAI_API_KEY to enable them."
        )
    return _summary_session
