"""Local ordering and text filtering over an already-fetched window."""

from __future__ import annotations

from typing import Callable, Sequence

from publiccode_directory.domain.entities import EnrichedRecord, SortKey, SortSpec

_SORT_FIELDS: dict[SortKey, Callable[[EnrichedRecord], int]] = {
    SortKey.STARS: lambda record: record.star_count,
    SortKey.FORKS: lambda record: record.fork_count,
}


def sort_records(records: Sequence[EnrichedRecord], sort: SortSpec) -> list[EnrichedRecord]:
    """Return *records* ordered by *sort*.

    Star and fork sorts are stable, so ties keep their search-ranking order.
    Relevance keeps the upstream order untouched: GitHub exposes no reversible
    relevance ranking, so ``sort.order`` has no effect for that key.
    """
    key = _SORT_FIELDS.get(sort.key)
    if key is None:
        return list(records)
    return sorted(records, key=key, reverse=sort.descending)


def apply_text_filter(records: Sequence[EnrichedRecord], needle: str) -> list[EnrichedRecord]:
    """Keep records whose repository id or file path contains *needle* (case-insensitive)."""
    needle = needle.strip().casefold()
    if not needle:
        return list(records)
    return [
        record
        for record in records
        if needle in record.repository_id.casefold() or needle in record.path.casefold()
    ]
