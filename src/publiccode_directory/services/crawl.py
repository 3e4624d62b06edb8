"""Multi-page driver layered on top of :class:`BuildPageUseCase`.

``BuildPageUseCase`` always fetches exactly one page; walking the whole result
set is done here by calling it repeatedly.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from publiccode_directory.domain.entities import EnrichedRecord, PageWindow, SortSpec
from publiccode_directory.domain.value_objects import MAX_PAGE_SIZE
from publiccode_directory.services.build_page import BuildPageUseCase
from publiccode_directory.services.filter_sort import sort_records

logger = logging.getLogger(__name__)


async def iter_pages(
    use_case: BuildPageUseCase,
    query: str,
    sort: SortSpec | None = None,
    page_size: int = MAX_PAGE_SIZE,
    max_pages: int | None = None,
) -> AsyncIterator[PageWindow]:
    """Yield successive pages until the results (or *max_pages*) run out.

    Errors from any page propagate; pages already yielded stay with the caller.
    """
    page_index = 1
    while True:
        window = await use_case.execute(query, page_index, page_size, sort)
        yield window
        if not window.items or not window.has_next:
            return
        if max_pages is not None and page_index >= max_pages:
            return
        page_index += 1


async def collect_all(
    use_case: BuildPageUseCase,
    query: str,
    sort: SortSpec | None = None,
    page_size: int = MAX_PAGE_SIZE,
    max_pages: int | None = None,
) -> list[EnrichedRecord]:
    """Gather every page into one list, de-duplicated and sorted across pages."""
    seen: set[tuple[str, str]] = set()
    records: list[EnrichedRecord] = []
    pages = 0

    async for window in iter_pages(use_case, query, sort, page_size, max_pages):
        pages += 1
        for record in window.items:
            key = (record.repository_id, record.path)
            if key in seen:
                continue
            seen.add(key)
            records.append(record)

    logger.info("Collected %d records from %d page(s)", len(records), pages)
    return sort_records(records, sort or SortSpec())
