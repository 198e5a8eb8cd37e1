"""Tests for dudu._lifecycle — stop-aware waits and the first-error cell."""

from __future__ import annotations

import asyncio

import pytest

from dudu._errors import ServerError, WatchError
from dudu._lifecycle import FirstError, next_or_stop


class TestNextOrStop:
    """next_or_stop() — the stop signal wins ties."""

    @pytest.mark.asyncio
    async def test_returns_value(self) -> None:
        queue: asyncio.Queue[str] = asyncio.Queue()
        queue.put_nowait("item")
        assert await next_or_stop(queue.get(), asyncio.Event()) == "item"

    @pytest.mark.asyncio
    async def test_stop_already_set(self) -> None:
        queue: asyncio.Queue[str] = asyncio.Queue()
        queue.put_nowait("item")
        stop = asyncio.Event()
        stop.set()

        assert await next_or_stop(queue.get(), stop) is None
        assert queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_stop_while_waiting(self) -> None:
        queue: asyncio.Queue[str] = asyncio.Queue()
        stop = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, stop.set)
        assert await asyncio.wait_for(next_or_stop(queue.get(), stop), timeout=2) is None

    @pytest.mark.asyncio
    async def test_item_arrives_first(self) -> None:
        queue: asyncio.Queue[int] = asyncio.Queue()
        stop = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, queue.put_nowait, 7)
        assert await asyncio.wait_for(next_or_stop(queue.get(), stop), timeout=2) == 7

    @pytest.mark.asyncio
    async def test_tie_hands_result_to_discard(self) -> None:
        stop = asyncio.Event()
        discarded: list[str] = []

        async def arrives_with_stop() -> str:
            stop.set()
            return "item"

        assert await next_or_stop(arrives_with_stop(), stop, discarded.append) is None
        assert discarded == ["item"]

    @pytest.mark.asyncio
    async def test_discard_not_called_without_result(self) -> None:
        queue: asyncio.Queue[str] = asyncio.Queue()
        stop = asyncio.Event()
        discarded: list[str] = []
        asyncio.get_running_loop().call_later(0.01, stop.set)

        assert await next_or_stop(queue.get(), stop, discarded.append) is None
        assert discarded == []


class TestFirstError:
    """FirstError — set once, later writes dropped."""

    def test_empty(self) -> None:
        cell = FirstError()
        assert cell.error is None
        assert not cell.is_set()

    def test_first_write_wins(self, capsys: pytest.CaptureFixture[str]) -> None:
        cell = FirstError()
        first = WatchError("watch died")
        assert cell.set(first) is True
        assert cell.set(ServerError("bind failed")) is False

        assert cell.error is first
        assert cell.is_set()
        assert "bind failed" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_wait_returns_error(self) -> None:
        cell = FirstError()
        error = ServerError("boom")
        asyncio.get_running_loop().call_soon(cell.set, error)
        assert await asyncio.wait_for(cell.wait(), timeout=2) is error
