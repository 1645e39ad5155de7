"""Batch execution for both dispatch modes.

This module provides the BatchExecutor class that walks a source page by
page (sequential) or dispatches precomputed offsets through a concurrency
limiter (parallel), handing every batch to a delivery callback.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from ...core.types import BatchPage
from .limiter import ConcurrencyLimiter
from .planners import needs_delay
from .telemetry import log_batch_completed, log_batch_failed

FetchPage = Callable[[int, int], Awaitable[BatchPage[Any]]]
Deliver = Callable[[int, int, list[Any]], Awaitable[None]]
OnArrival = Callable[[int, int, list[Any]], None]


class BatchExecutor:
    """Executes batch fetches and delivers results in order.

    The executor never buffers records itself; ``deliver`` decides what to
    do with each batch. Delivery is always in offset order.
    """

    def __init__(
        self,
        *,
        batch_size: int,
        max_batches: int,
        delay_ms: float = 0,
        delay_every: int = 1,
        source: str = "unknown",
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize batch executor.

        Args:
            batch_size: Records requested per batch
            max_batches: Hard bound on batches fetched
            delay_ms: Rate-limit pause before every ``delay_every``-th batch
            delay_every: Batch interval for the pause
            source: Label used in telemetry
            sleep: Awaitable sleep taking seconds, defaults to asyncio.sleep
        """
        self._batch_size = batch_size
        self._max_batches = max_batches
        self._delay_ms = delay_ms
        self._delay_every = delay_every
        self._source = source
        self._sleep = sleep
        self.batches_fetched = 0

    async def _throttle(self, batch_num: int) -> None:
        if needs_delay(batch_num, self._delay_ms, self._delay_every):
            await (self._sleep or asyncio.sleep)(self._delay_ms / 1000.0)

    async def _fetch(self, fetch_page: FetchPage, batch_num: int, offset: int) -> BatchPage[Any]:
        await self._throttle(batch_num)
        start = perf_counter()
        try:
            page = await fetch_page(offset, self._batch_size)
        except Exception as e:
            log_batch_failed(
                source=self._source,
                batch_num=batch_num,
                offset=offset,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        self.batches_fetched += 1
        log_batch_completed(
            source=self._source,
            batch_num=batch_num,
            offset=offset,
            rows=len(page.features),
            has_more=page.has_more,
            latency_ms=(perf_counter() - start) * 1000.0,
        )
        return page

    async def run_sequential(self, fetch_page: FetchPage, deliver: Deliver) -> None:
        """Fetch one batch at a time until the source runs dry.

        Stops on an empty batch, on ``has_more`` false, or at ``max_batches``.
        The next offset advances by the number of records actually received,
        never by the requested batch size. The next batch is not requested
        until ``deliver`` for the current one has returned.
        """
        offset = 0
        batch_num = 0
        while batch_num < self._max_batches:
            page = await self._fetch(fetch_page, batch_num, offset)
            if not page.features:
                break

            await deliver(batch_num, offset, page.features)

            if not page.has_more:
                break

            offset += len(page.features)
            batch_num += 1

    async def run_parallel(
        self,
        offsets: list[int],
        fetch_page: FetchPage,
        deliver: Deliver,
        limiter: ConcurrencyLimiter,
        on_arrival: OnArrival | None = None,
    ) -> None:
        """Fetch all offsets concurrently, then deliver in offset order.

        Each result slot is indexed by the batch's position in ``offsets``,
        so delivery order does not depend on completion order. The first
        failure cancels the remaining batches and propagates.
        """
        slots: list[list[Any] | None] = [None] * len(offsets)

        async def run_one(batch_num: int, offset: int) -> None:
            page = await self._fetch(fetch_page, batch_num, offset)
            slots[batch_num] = page.features
            if on_arrival is not None:
                on_arrival(batch_num, offset, page.features)

        tasks = [
            asyncio.create_task(
                limiter.run(lambda b=batch_num, o=offset: run_one(b, o))
            )
            for batch_num, offset in enumerate(offsets)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for batch_num, (offset, features) in enumerate(zip(offsets, slots)):
            await deliver(batch_num, offset, features or [])
