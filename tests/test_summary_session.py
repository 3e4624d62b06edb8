"""Unit tests for SummarySession: lazy, single-shot lookups per repository."""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from publiccode_directory.domain.entities import SummaryOutcome, SummaryStatus
from publiccode_directory.domain.exceptions import InvalidRequestError, UpstreamError
from publiccode_directory.services.summary_session import SummarySession


def _outcome(repository_id: str, status=SummaryStatus.READY, text="A summary.") -> SummaryOutcome:
    return SummaryOutcome(repository_id=repository_id, status=status, text=text)


def _use_case(side_effect) -> Mock:
    use_case = Mock()
    use_case.execute = AsyncMock(side_effect=side_effect)
    return use_case


class TestSummarySession:

    @pytest.mark.asyncio
    async def test_same_repository_is_computed_once(self):
        use_case = _use_case(lambda rid: _outcome(rid))
        session = SummarySession(use_case)

        first = await session.summary("acme/foo")
        second = await session.summary("ACME/foo")

        assert first is second
        use_case.execute.assert_awaited_once_with("acme/foo")

    @pytest.mark.asyncio
    async def test_distinct_repositories_run_independently(self):
        use_case = _use_case(lambda rid: _outcome(rid))
        session = SummarySession(use_case)

        results = await asyncio.gather(session.summary("acme/foo"), session.summary("gov/bar"))

        assert [r.repository_id for r in results] == ["acme/foo", "gov/bar"]
        assert use_case.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_lookup_is_lazy(self):
        use_case = _use_case(lambda rid: _outcome(rid))
        session = SummarySession(use_case)

        assert session.peek("acme/foo") is None
        use_case.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_peek_reports_pending(self):
        release = asyncio.Event()

        async def slow(rid):
            await release.wait()
            return _outcome(rid)

        session = SummarySession(_use_case(slow))
        task = session.get_summary("acme/foo")
        await asyncio.sleep(0)

        assert session.peek("acme/foo").status is SummaryStatus.PENDING

        release.set()
        await task
        assert session.peek("acme/foo").status is SummaryStatus.READY

    @pytest.mark.asyncio
    async def test_fetch_error_becomes_error_outcome(self):
        session = SummarySession(_use_case(UpstreamError("HTTP 500")))

        outcome = await session.summary("acme/foo")

        assert outcome.status is SummaryStatus.ERROR
        assert "HTTP 500" in outcome.text

    @pytest.mark.asyncio
    async def test_retry_restarts_only_errored_lookups(self):
        replies = iter([
            _outcome("acme/foo", SummaryStatus.ERROR, "temporary"),
            _outcome("acme/foo"),
        ])
        use_case = _use_case(lambda rid: next(replies))
        session = SummarySession(use_case)

        assert (await session.summary("acme/foo")).status is SummaryStatus.ERROR
        assert session.retry("acme/foo") is True
        assert (await session.summary("acme/foo")).status is SummaryStatus.READY
        assert session.retry("acme/foo") is False
        assert use_case.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_retryable_error(self):
        use_case = _use_case([RuntimeError("encoder download failed"), _outcome("acme/foo")])
        session = SummarySession(use_case)

        outcome = await session.summary("acme/foo")

        assert outcome.status is SummaryStatus.ERROR
        assert "encoder download failed" in outcome.text
        assert session.peek("acme/foo").status is SummaryStatus.ERROR
        assert session.retry("acme/foo") is True
        assert (await session.summary("acme/foo")).status is SummaryStatus.READY
        assert use_case.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_invalid_identifier_raises_synchronously(self):
        session = SummarySession(_use_case(lambda rid: _outcome(rid)))

        with pytest.raises(InvalidRequestError):
            session.get_summary("not a repo")

    @pytest.mark.asyncio
    async def test_finished_entries_are_evicted_beyond_capacity(self):
        use_case = _use_case(lambda rid: _outcome(rid))
        session = SummarySession(use_case, max_entries=1)

        await session.summary("acme/foo")
        await session.summary("gov/bar")
        await session.summary("acme/foo")

        assert use_case.execute.await_count == 3

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending(self):
        async def never(rid):
            await asyncio.Event().wait()

        session = SummarySession(_use_case(never))
        task = session.get_summary("acme/foo")
        await asyncio.sleep(0)

        await session.aclose()

        assert task.cancelled()
