"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations

from enum import Enum


class PubliccodeDirectoryError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRequestError(PubliccodeDirectoryError):
    """Page parameters or repository identifier are malformed."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class ErrorKind(str, Enum):
    """How a failed upstream call should be acted upon by the user."""

    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    UPSTREAM = "upstream"


class FetchError(PubliccodeDirectoryError):
    """A GitHub call failed; ``kind`` tells the caller what to do next."""

    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.retry_after = retry_after


class RateLimitedError(FetchError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit signal)."""

    kind = ErrorKind.RATE_LIMITED


class UnauthorizedError(FetchError):
    """The credential was rejected or lacks access (401 / 403)."""

    kind = ErrorKind.UNAUTHORIZED


class UpstreamError(FetchError):
    """5xx, network failure, or a payload that could not be understood."""

    kind = ErrorKind.UPSTREAM


class NotFoundError(UpstreamError):
    """The requested resource does not exist upstream (404)."""


class RepositoryNotFoundError(PubliccodeDirectoryError):
    """Repository details could not be resolved."""


# ── Summary errors ──────────────────────────────────────────────────────────


class LlmError(PubliccodeDirectoryError):
    """Any error originating from the LLM provider."""


class SummaryUnavailableError(PubliccodeDirectoryError):
    """README summaries are disabled (no LLM credential configured)."""
