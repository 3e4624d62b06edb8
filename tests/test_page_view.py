"""Unit tests for PageView: only the newest request for a view is applied."""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from publiccode_directory.domain.entities import PageWindow
from publiccode_directory.domain.exceptions import UpstreamError
from publiccode_directory.services.page_view import PageView


def _window(page_index: int) -> PageWindow:
    return PageWindow(items=[], total_count=100, page_index=page_index, page_size=10)


def _use_case(side_effect) -> Mock:
    use_case = Mock()
    use_case.execute = AsyncMock(side_effect=side_effect)
    return use_case


class TestPageView:

    @pytest.mark.asyncio
    async def test_single_request_returns_window(self):
        view = PageView(_use_case(lambda q, page, size, sort: _window(page)))

        window = await view.request("q", 2, 10)

        assert window == _window(2)
        assert view.in_flight is False

    @pytest.mark.asyncio
    async def test_superseded_request_is_discarded(self):
        started = asyncio.Event()

        async def execute(query, page_index, page_size, sort):
            if page_index == 1:
                started.set()
                await asyncio.Event().wait()
            return _window(page_index)

        view = PageView(_use_case(execute))
        stale = asyncio.create_task(view.request("q", 1, 10))
        await started.wait()

        fresh = await view.request("q", 2, 10)

        assert fresh == _window(2)
        assert await stale is None

    @pytest.mark.asyncio
    async def test_error_of_current_request_propagates(self):
        view = PageView(_use_case(UpstreamError("HTTP 500")))

        with pytest.raises(UpstreamError):
            await view.request("q", 1, 10)

    @pytest.mark.asyncio
    async def test_cancelling_the_caller_cancels_the_request(self):
        started = asyncio.Event()

        async def execute(query, page_index, page_size, sort):
            started.set()
            await asyncio.Event().wait()

        view = PageView(_use_case(execute))
        caller = asyncio.create_task(view.request("q", 1, 10))
        await started.wait()

        caller.cancel()

        with pytest.raises(asyncio.CancelledError):
            await caller
        assert view.in_flight is False

    @pytest.mark.asyncio
    async def test_aclose_cancels_in_flight(self):
        started = asyncio.Event()

        async def execute(query, page_index, page_size, sort):
            started.set()
            await asyncio.Event().wait()

        view = PageView(_use_case(execute))
        caller = asyncio.create_task(view.request("q", 1, 10))
        await started.wait()

        await view.aclose()

        assert await caller is None
