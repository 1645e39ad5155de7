"""Fetch orchestrator: the main entry point of the engine.

Ties an adapter, the retry executor, the pagination strategist and the
concurrency limiter together for one source.

Flow:
    1. Probe the total count (a failing probe downgrades to sequential mode)
    2. Choose SEQUENTIAL or PARALLEL dispatch
    3. Run the batch loop, feeding every batch through the output sink
       (streaming callback first, then the in-memory buffer) and emitting a
       FetchProgress snapshot
    4. Return the buffered records and the exact number of records received

Any batch that exhausts its retry budget aborts the whole call. A short
result is never a signal of completeness; only a normal return is.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from ..adapters import AdapterDescriptor, CustomAdapter, fetch_batch, get_count
from ..config import FetchOptions
from ..core.types import BatchPage, FetchMode, FetchProgress, FetchResult
from ..utils.http import HTTPClient
from .pagination import BatchExecutor, ConcurrencyLimiter, PaginationStrategist
from .pagination.telemetry import log_fetch_complete, log_mode_selected
from .sinks import build_sink

logger = logging.getLogger(__name__)


def source_label(adapter: AdapterDescriptor) -> str:
    """Human-readable label for logs."""
    if isinstance(adapter, CustomAdapter):
        return "custom"
    return adapter.url


class FetchOrchestrator:
    """Runs one paginated fetch against a single source.

    Instances are single-use: build one per call.
    """

    def __init__(
        self,
        adapter: AdapterDescriptor,
        options: FetchOptions,
        client: HTTPClient,
        *,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.adapter = adapter
        self.options = options
        self.client = client
        self._sleep = sleep
        self._source = source_label(adapter)
        self._strategist = PaginationStrategist(
            concurrency=options.concurrency,
            batch_size=options.batch_size,
            max_batches=options.max_batches,
        )

    async def resolve_total(self) -> int | None:
        """Total record count, or None when unknown.

        A failing count probe is logged and swallowed; it only costs the
        fetch its parallelism.
        """
        try:
            total = await get_count(self.adapter, client=self.client, retry=self.options.retry)
        except Exception as e:
            logger.warning(f"Count probe failed for {self._source}, fetching sequentially: {e}")
            return None
        if total is not None:
            logger.info(f"Total records: {total:,}")
        return total

    async def _fetch_page(self, offset: int, batch_size: int) -> BatchPage[Any]:
        return await fetch_batch(
            self.adapter, offset, batch_size, client=self.client, retry=self.options.retry
        )

    def _emit(self, progress: FetchProgress) -> None:
        if self.options.on_progress is not None:
            self.options.on_progress(progress)

    async def run(self) -> FetchResult[Any]:
        opts = self.options
        started = perf_counter()

        total = await self.resolve_total()
        mode = self._strategist.choose_mode(total=total, streaming=opts.streaming)
        sink, buffer = build_sink(on_features=opts.on_features, skip_buffer=opts.skip_buffer)
        executor = BatchExecutor(
            batch_size=opts.batch_size,
            max_batches=opts.max_batches,
            delay_ms=opts.delay_ms,
            delay_every=opts.delay_every,
            source=self._source,
            sleep=self._sleep,
        )

        fetched = 0

        if mode is FetchMode.SEQUENTIAL:
            log_mode_selected(source=self._source, mode=mode, total=total, concurrency=1)

            async def deliver(batch_num: int, offset: int, features: list[Any]) -> None:
                nonlocal fetched
                await sink.accept(features)
                fetched += len(features)
                self._emit(
                    FetchProgress(
                        fetched=fetched,
                        total=total,
                        batch_num=batch_num,
                        message=f"Batch {batch_num}: {len(features)} features (total: {fetched})",
                    )
                )

            await executor.run_sequential(self._fetch_page, deliver)
        else:
            assert total is not None
            offsets = self._strategist.plan_offsets(total)
            log_mode_selected(
                source=self._source,
                mode=mode,
                total=total,
                planned_batches=len(offsets),
                concurrency=opts.concurrency,
            )

            def on_arrival(batch_num: int, offset: int, features: list[Any]) -> None:
                self._emit(
                    FetchProgress(
                        fetched=offset + len(features),
                        total=total,
                        batch_num=batch_num,
                        message=f"Batch {batch_num}: {len(features)} features",
                    )
                )

            async def deliver(batch_num: int, offset: int, features: list[Any]) -> None:
                nonlocal fetched
                await sink.accept(features)
                fetched += len(features)

            await executor.run_parallel(
                offsets,
                self._fetch_page,
                deliver,
                ConcurrencyLimiter(opts.concurrency),
                on_arrival=on_arrival,
            )

        log_fetch_complete(
            source=self._source,
            mode=mode,
            batches=executor.batches_fetched,
            total_fetched=fetched,
            latency_ms=(perf_counter() - started) * 1000.0,
        )
        return FetchResult(
            features=buffer.features if buffer is not None else [],
            total_fetched=fetched,
            from_cache=False,
        )


async def parallel_fetch(
    adapter: AdapterDescriptor,
    options: FetchOptions | None = None,
    *,
    client: HTTPClient | None = None,
    **overrides: Any,
) -> FetchResult[Any]:
    """Fetch every page of one source.

    Args:
        adapter: Adapter descriptor for the source
        options: Fetch options (defaults apply when omitted)
        client: Shared HTTP client; a private one is opened and closed
            around the call when omitted
        **overrides: Individual FetchOptions fields, e.g. ``batch_size=500``

    Returns:
        FetchResult with buffered records and ``total_fetched``

    Raises:
        Exception: The last error of any batch that exhausted its retries
    """
    if options is None:
        opts = FetchOptions(**overrides)
    else:
        opts = options.merged(**overrides)

    if client is not None:
        return await FetchOrchestrator(adapter, opts, client).run()

    async with HTTPClient() as http:
        return await FetchOrchestrator(adapter, opts, http).run()
