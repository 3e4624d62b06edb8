"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from publiccode_directory.domain.exceptions import InvalidRequestError

MAX_PAGE_SIZE = 100

_REPOSITORY_ID_RE = re.compile(
    r"^(?P<owner>[A-Za-z0-9\-_.]+)/(?P<name>[A-Za-z0-9\-_.]+)$"
)


@dataclass(frozen=True, slots=True)
class RepositoryId:
    """Validated ``owner/name`` repository identifier."""

    owner: str
    name: str

    @classmethod
    def from_string(cls, value: str) -> RepositoryId:
        """Parse and validate an ``owner/name`` string."""
        value = value.strip()
        match = _REPOSITORY_ID_RE.match(value)
        if not match or match["name"] in (".", ".."):
            raise InvalidRequestError(
                f"Invalid repository identifier: '{value}'. Expected format: <owner>/<name>"
            )
        return cls(owner=match["owner"], name=match["name"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True, slots=True)
class PageRequest:
    """A validated 1-based page index and page size (≤ 100, the search API maximum)."""

    page_index: int
    page_size: int

    def __post_init__(self) -> None:
        if self.page_index < 1:
            raise InvalidRequestError(f"page must be >= 1, got {self.page_index}.")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise InvalidRequestError(
                f"per_page must be between 1 and {MAX_PAGE_SIZE}, got {self.page_size}."
            )
