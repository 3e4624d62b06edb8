"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# GitHub search never returns more than this many results for one query.
SEARCH_RESULT_CEILING = 1000


class SortKey(str, Enum):
    """Ordering requested by the caller."""

    RELEVANCE = "relevance"
    STARS = "stars"
    FORKS = "forks"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Active sort for one page request."""

    key: SortKey = SortKey.RELEVANCE
    order: SortOrder = SortOrder.DESC

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DESC


@dataclass(frozen=True, slots=True)
class SearchHit:
    """One ``publiccode.yml`` file matched by code search."""

    repository_id: str  # owner/name
    path: str
    file_url: str
    relevance_score: float = 0.0
    repository_url: str = ""
    owner_login: str = ""


@dataclass(frozen=True, slots=True)
class SearchPage:
    """One page of raw code-search results."""

    hits: list[SearchHit]
    total_count: int
    incomplete_results: bool = False


@dataclass(frozen=True, slots=True)
class RepoDetail:
    """Repository-level facts fetched separately from the search hit."""

    repository_id: str
    star_count: int
    fork_count: int
    default_branch: str
    owner_login: str
    description: str | None = None
    html_url: str = ""
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class EnrichedRecord:
    """A search hit left-joined with its repository detail."""

    hit: SearchHit
    detail: RepoDetail | None = None

    @property
    def repository_id(self) -> str:
        return self.hit.repository_id

    @property
    def path(self) -> str:
        return self.hit.path

    @property
    def star_count(self) -> int:
        return self.detail.star_count if self.detail else 0

    @property
    def fork_count(self) -> int:
        return self.detail.fork_count if self.detail else 0

    @property
    def default_branch(self) -> str | None:
        return self.detail.default_branch if self.detail else None

    @property
    def owner_login(self) -> str:
        if self.detail and self.detail.owner_login:
            return self.detail.owner_login
        return self.hit.owner_login

    @property
    def description(self) -> str | None:
        return self.detail.description if self.detail else None

    @property
    def updated_at(self) -> datetime | None:
        return self.detail.updated_at if self.detail else None

    @property
    def has_detail(self) -> bool:
        return self.detail is not None


@dataclass(frozen=True, slots=True)
class PageWindow:
    """The finished, ordered page handed to the presentation layer.

    ``page_index * page_size`` may exceed ``total_count``; consumers clamp.
    """

    items: list[EnrichedRecord] = field(default_factory=list)
    total_count: int = 0
    page_index: int = 1
    page_size: int = 10
    incomplete_results: bool = False

    @property
    def last_page(self) -> int:
        """Highest page index that can still return results."""
        reachable = min(self.total_count, SEARCH_RESULT_CEILING)
        if reachable <= 0:
            return 1
        return -(-reachable // self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page_index < self.last_page


class SummaryStatus(str, Enum):
    """Lifecycle of a README summary lookup."""

    PENDING = "pending"
    READY = "ready"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class SummaryOutcome:
    """Result of summarising one repository's README."""

    repository_id: str
    status: SummaryStatus
    text: str
    branch: str | None = None
