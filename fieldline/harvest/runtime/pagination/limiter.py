"""Bounded-parallelism primitive for parallel batch dispatch."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

R = TypeVar("R")


class ConcurrencyLimiter:
    """Runs coroutines with at most ``limit`` in flight.

    ``active`` and ``peak`` are only touched between awaits, so no lock is
    needed beyond the semaphore itself.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self.active = 0
        self.peak = 0

    async def run(self, fn: Callable[[], Awaitable[R]]) -> R:
        async with self._semaphore:
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                return await fn()
            finally:
                self.active -= 1
