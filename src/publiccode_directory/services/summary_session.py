"""Per-session, single-shot summary lookups keyed by repository."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict

from publiccode_directory.domain.entities import SummaryOutcome, SummaryStatus
from publiccode_directory.domain.exceptions import FetchError
from publiccode_directory.domain.value_objects import RepositoryId
from publiccode_directory.services.summarize_readme import SummarizeReadmeUseCase

logger = logging.getLogger(__name__)


class SummarySession:
    """Starts at most one summary task per repository and shares its result.

    A lookup is lazy (started by the first :meth:`get_summary` call) and is
    not restarted for the same repository unless the caller asks for a
    :meth:`retry` after an error.
    """

    def __init__(self, use_case: SummarizeReadmeUseCase, max_entries: int = 256) -> None:
        self._use_case = use_case
        self._max_entries = max_entries
        self._tasks: OrderedDict[str, asyncio.Task[SummaryOutcome]] = OrderedDict()

    def get_summary(self, repository_id: str) -> asyncio.Task[SummaryOutcome]:
        """Return the (possibly already finished) task for *repository_id*."""
        rid = RepositoryId.from_string(repository_id)
        key = rid.full_name.lower()

        task = self._tasks.get(key)
        if task is not None:
            self._tasks.move_to_end(key)
            return task

        task = asyncio.create_task(self._run(rid.full_name), name=f"summary:{key}")
        self._tasks[key] = task
        self._evict()
        return task

    async def summary(self, repository_id: str) -> SummaryOutcome:
        """Await the shared lookup without letting one waiter cancel it for others."""
        return await asyncio.shield(self.get_summary(repository_id))

    def peek(self, repository_id: str) -> SummaryOutcome | None:
        """Current state without starting a lookup; ``None`` if never requested."""
        task = self._tasks.get(RepositoryId.from_string(repository_id).full_name.lower())
        if task is None or task.cancelled():
            return None
        if not task.done():
            return SummaryOutcome(
                repository_id=repository_id, status=SummaryStatus.PENDING, text=""
            )
        if task.exception() is not None:
            return SummaryOutcome(
                repository_id=repository_id,
                status=SummaryStatus.ERROR,
                text=str(task.exception()),
            )
        return task.result()

    def retry(self, repository_id: str) -> bool:
        """Forget a finished, errored lookup so the next request starts afresh."""
        key = RepositoryId.from_string(repository_id).full_name.lower()
        task = self._tasks.get(key)
        if task is None or not task.done():
            return False
        if task.cancelled():
            return False
        if task.exception() is None and task.result().status is not SummaryStatus.ERROR:
            return False
        del self._tasks[key]
        return True

    async def aclose(self) -> None:
        """Cancel lookups still in flight."""
        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()

    async def _run(self, repository_id: str) -> SummaryOutcome:
        try:
            return await self._use_case.execute(repository_id)
        except FetchError as exc:
            logger.warning("Summary lookup for %s failed: %s", repository_id, exc)
            return SummaryOutcome(
                repository_id=repository_id, status=SummaryStatus.ERROR, text=str(exc)
            )
        except Exception as exc:
            logger.error("Summary lookup for %s crashed", repository_id, exc_info=True)
            return SummaryOutcome(
                repository_id=repository_id,
                status=SummaryStatus.ERROR,
                text=f"Summary could not be produced: {exc}",
            )

    def _evict(self) -> None:
        while len(self._tasks) > self._max_entries:
            key, task = next(iter(self._tasks.items()))
            if not task.done():
                break
            del self._tasks[key]
