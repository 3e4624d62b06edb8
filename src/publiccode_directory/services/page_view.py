"""Latest-wins page requests for a single view."""

from __future__ import annotations

import asyncio
import logging

from publiccode_directory.domain.entities import PageWindow, SortSpec
from publiccode_directory.domain.exceptions import PubliccodeDirectoryError
from publiccode_directory.services.build_page import BuildPageUseCase

logger = logging.getLogger(__name__)


class PageView:
    """Wraps :class:`BuildPageUseCase` so only the newest request is applied.

    Starting a request cancels the one still in flight for the same view.
    A superseded request resolves to ``None`` instead of its window or error.
    """

    def __init__(self, use_case: BuildPageUseCase) -> None:
        self._use_case = use_case
        self._current: asyncio.Task[PageWindow] | None = None

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    async def request(
        self,
        query: str,
        page_index: int,
        page_size: int,
        sort: SortSpec | None = None,
    ) -> PageWindow | None:
        previous = self._current
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.create_task(self._use_case.execute(query, page_index, page_size, sort))
        self._current = task

        try:
            window = await task
        except asyncio.CancelledError:
            if self._current is task:
                raise
            logger.debug("Discarded cancelled page %d request", page_index)
            return None
        except PubliccodeDirectoryError:
            if self._current is task:
                raise
            logger.debug("Discarded failed stale page %d request", page_index)
            return None

        if self._current is not task:
            logger.debug("Discarded stale page %d result", page_index)
            return None
        return window

    async def aclose(self) -> None:
        current, self._current = self._current, None
        if current is not None and not current.done():
            current.cancel()
            await asyncio.gather(current, return_exceptions=True)
