"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from publiccode_directory.interface.dependencies import shutdown, startup
from publiccode_directory.interface.error_handlers import register_error_handlers
from publiccode_directory.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup / shutdown of shared resources."""
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    app = FastAPI(
        title="publiccode.yml Directory",
        version="1.0.0",
        description=(
            "Lists repositories that publish a publiccode.yml file, found "
            "through GitHub code search and enriched with star and fork counts."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
