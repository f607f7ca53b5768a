"""Shared concurrency primitives for ingestion and search fan-out.

Two patterns are exposed:

1. **throttled_gather** -- A drop-in replacement for ``asyncio.gather`` that
   wraps each awaitable in a semaphore acquire/release.  The ingestion
   pipeline uses it to process files with a bounded worker count.

2. **with_timeout** -- Runs one backend call under ``asyncio.wait_for`` when a
   timeout is configured.  A ``None`` or non-positive timeout disables the
   deadline so tests and local backends can run unbounded.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    limit: int = 4,
    return_exceptions: bool = False,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with at most *limit* in flight.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    limit:
        Maximum number of awaitables executing at once.  Values below 1 are
        treated as 1 so a misconfigured worker count cannot deadlock.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def with_timeout(coro: Awaitable[_T], timeout: float | None) -> _T:
    """Await *coro*, raising ``asyncio.TimeoutError`` after *timeout* seconds."""
    if timeout is None or timeout <= 0:
        return await coro
    return await asyncio.wait_for(coro, timeout=timeout)
