"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code and the
standard ``{"status": "error", "kind": "...", "message": "..."}`` envelope.
"""

from __future__ import annotations

import logging
import math

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from publiccode_directory.domain.exceptions import (
    ErrorKind,
    FetchError,
    InvalidRequestError,
    LlmError,
    PubliccodeDirectoryError,
    RepositoryNotFoundError,
    SummaryUnavailableError,
)

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: list[tuple[type[PubliccodeDirectoryError], int, str]] = [
    (InvalidRequestError, 422, "invalid_request"),
    (RepositoryNotFoundError, 404, "not_found"),
    (LlmError, 502, "llm"),
    (SummaryUnavailableError, 503, "unavailable"),
]

_FETCH_STATUS: dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.UPSTREAM: 502,
}

# What the user should do about each kind of search failure.
_FETCH_ADVICE: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMITED: "Please wait before trying again.",
    ErrorKind.UNAUTHORIZED: "Please check the configured GitHub access token.",
    ErrorKind.UPSTREAM: "GitHub could not be reached. Please try again.",
}


def _error_json(
    status_code: int, kind: str, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "kind": kind, "message": message},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, code, kind in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int,
            kind_name: str,
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> JSONResponse:
                logger.warning("%s: %s", type(exc).__name__, exc)
                return _error_json(status_code, kind_name, str(exc))

            return handler

        app.add_exception_handler(exc_type, _make_handler(code, kind))

    # ── GitHub fetch failures ───────────────────────────────────────────

    @app.exception_handler(FetchError)
    async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
        logger.warning("%s (%s): %s", type(exc).__name__, exc.kind.value, exc)
        headers = None
        if exc.kind is ErrorKind.RATE_LIMITED and exc.retry_after is not None:
            headers = {"Retry-After": str(math.ceil(exc.retry_after))}
        message = f"{exc.message} {_FETCH_ADVICE[exc.kind]}"
        return _error_json(_FETCH_STATUS[exc.kind], exc.kind.value, message, headers)

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return _error_json(422, "invalid_request", "; ".join(messages))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(
            500, "internal", "An unexpected error occurred. Please try again later."
        )
