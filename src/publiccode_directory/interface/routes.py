"""API routes — thin controllers that delegate to the use cases."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from publiccode_directory.domain.entities import SortKey, SortOrder, SortSpec
from publiccode_directory.domain.exceptions import RepositoryNotFoundError
from publiccode_directory.domain.value_objects import MAX_PAGE_SIZE, RepositoryId
from publiccode_directory.infrastructure.config import Settings, get_settings
from publiccode_directory.interface.dependencies import (
    get_build_page,
    get_detail_resolver,
    get_summary_session,
)
from publiccode_directory.interface.schemas import (
    ErrorResponse,
    ProjectPageResponse,
    RepoDetailResponse,
    SummaryResponse,
)
from publiccode_directory.services.build_page import BuildPageUseCase
from publiccode_directory.services.filter_sort import apply_text_filter
from publiccode_directory.services.repo_detail_resolver import RepoDetailResolver
from publiccode_directory.services.summary_session import SummarySession

router = APIRouter()

_GITHUB_ERRORS = {
    401: {"model": ErrorResponse, "description": "GitHub credential rejected"},
    429: {"model": ErrorResponse, "description": "GitHub API rate limit exceeded"},
    502: {"model": ErrorResponse, "description": "GitHub API failure"},
}


@router.get("/projects", response_model=ProjectPageResponse, responses=_GITHUB_ERRORS)
async def list_projects(
    q: str | None = Query(None, description="Code-search query; defaults to publiccode.yml files"),
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1, le=MAX_PAGE_SIZE),
    sort: SortKey = SortKey.RELEVANCE,
    order: SortOrder = SortOrder.DESC,
    filter_text: str = Query("", alias="filter", description="Substring of repository or path"),
    use_case: BuildPageUseCase = Depends(get_build_page),
    settings: Settings = Depends(get_settings),
) -> ProjectPageResponse:
    """One page of ``publiccode.yml`` hits enriched with stars and forks."""
    window = await use_case.execute(
        q or settings.search_query,
        page,
        per_page or settings.default_page_size,
        SortSpec(key=sort, order=order),
    )
    return ProjectPageResponse.from_window(window, apply_text_filter(window.items, filter_text))


@router.get(
    "/repos/{owner}/{repo}",
    response_model=RepoDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Details unavailable"}},
)
async def repo_detail(
    owner: str,
    repo: str,
    resolver: RepoDetailResolver = Depends(get_detail_resolver),
) -> RepoDetailResponse:
    rid = RepositoryId.from_string(f"{owner}/{repo}")
    detail = await resolver.resolve(rid.full_name)
    if detail is None:
        raise RepositoryNotFoundError(f"Details for {rid} could not be fetched.")
    return RepoDetailResponse.from_detail(detail)


@router.get(
    "/projects/{owner}/{repo}/summary",
    response_model=SummaryResponse,
    responses={503: {"model": ErrorResponse, "description": "Summaries disabled"}},
)
async def project_summary(
    owner: str,
    repo: str,
    retry: bool = False,
    session: SummarySession = Depends(get_summary_session),
) -> SummaryResponse:
    """README summary; computed once per repository and then shared."""
    repository_id = f"{owner}/{repo}"
    if retry:
        session.retry(repository_id)
    outcome = await session.summary(repository_id)
    return SummaryResponse.from_outcome(outcome)
