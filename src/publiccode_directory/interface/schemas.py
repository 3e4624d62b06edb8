"""Pydantic response DTOs for the API boundary."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from publiccode_directory.domain.entities import (
    EnrichedRecord,
    PageWindow,
    RepoDetail,
    SummaryOutcome,
    SummaryStatus,
)


class ProjectRecord(BaseModel):
    """One ``publiccode.yml`` hit enriched with repository facts."""

    repository_id: str
    repository_url: str
    owner_login: str
    path: str
    file_url: str
    relevance_score: float
    star_count: int
    fork_count: int
    default_branch: str | None
    description: str | None
    updated_at: datetime | None
    has_detail: bool

    @classmethod
    def from_record(cls, record: EnrichedRecord) -> ProjectRecord:
        return cls(
            repository_id=record.repository_id,
            repository_url=record.hit.repository_url,
            owner_login=record.owner_login,
            path=record.path,
            file_url=record.hit.file_url,
            relevance_score=record.hit.relevance_score,
            star_count=record.star_count,
            fork_count=record.fork_count,
            default_branch=record.default_branch,
            description=record.description,
            updated_at=record.updated_at,
            has_detail=record.has_detail,
        )


class ProjectPageResponse(BaseModel):
    """Successful response from ``GET /projects``."""

    items: list[ProjectRecord]
    total_count: int
    page: int
    per_page: int
    last_page: int
    incomplete_results: bool

    @classmethod
    def from_window(
        cls, window: PageWindow, items: list[EnrichedRecord]
    ) -> ProjectPageResponse:
        return cls(
            items=[ProjectRecord.from_record(record) for record in items],
            total_count=window.total_count,
            page=window.page_index,
            per_page=window.page_size,
            last_page=window.last_page,
            incomplete_results=window.incomplete_results,
        )


class RepoDetailResponse(BaseModel):
    """Successful response from ``GET /repos/{owner}/{repo}``."""

    repository_id: str
    star_count: int
    fork_count: int
    default_branch: str
    owner_login: str
    description: str | None
    html_url: str
    updated_at: datetime | None

    @classmethod
    def from_detail(cls, detail: RepoDetail) -> RepoDetailResponse:
        return cls(
            repository_id=detail.repository_id,
            star_count=detail.star_count,
            fork_count=detail.fork_count,
            default_branch=detail.default_branch,
            owner_login=detail.owner_login,
            description=detail.description,
            html_url=detail.html_url,
            updated_at=detail.updated_at,
        )


class SummaryResponse(BaseModel):
    """Response from ``GET /projects/{owner}/{repo}/summary``."""

    repository_id: str
    status: SummaryStatus
    summary: str
    branch: str | None = None

    @classmethod
    def from_outcome(cls, outcome: SummaryOutcome) -> SummaryResponse:
        return cls(
            repository_id=outcome.repository_id,
            status=outcome.status,
            summary=outcome.text,
            branch=outcome.branch,
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    kind: str
    message: str
