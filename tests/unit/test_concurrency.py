"""Unit tests for throttled_gather and with_timeout."""

from __future__ import annotations

import asyncio

import pytest

from clausefinder.utils.concurrency import throttled_gather, with_timeout


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_limit_bounds_concurrency(self) -> None:
        running = 0
        peak = 0

        async def work(value: int) -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return value * 2

        results = await throttled_gather([work(i) for i in range(8)], limit=3)

        assert results == [0, 2, 4, 6, 8, 10, 12, 14]
        assert peak <= 3

    @pytest.mark.asyncio
    async def test_return_exceptions(self) -> None:
        async def fail() -> None:
            raise RuntimeError("boom")

        async def ok() -> str:
            return "ok"

        results = await throttled_gather([ok(), fail()], limit=0, return_exceptions=True)
        assert results[0] == "ok"
        assert isinstance(results[1], RuntimeError)


class TestWithTimeout:
    @pytest.mark.asyncio
    async def test_deadline_exceeded(self) -> None:
        with pytest.raises(asyncio.TimeoutError):
            await with_timeout(asyncio.sleep(1), 0.01)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timeout", [None, 0])
    async def test_disabled_deadline(self, timeout: float | None) -> None:
        async def value() -> int:
            await asyncio.sleep(0.01)
            return 7

        assert await with_timeout(value(), timeout) == 7
