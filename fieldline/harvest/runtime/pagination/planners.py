"""Pagination strategy: sequential vs. parallel dispatch.

Pure decision logic, no I/O. Parallel dispatch needs the total up front to
compute offsets, and is never used with a streaming sink because completion
order would reorder the stream.
"""

from __future__ import annotations

import math

from ...core.types import FetchMode


class PaginationStrategist:
    """Decides the dispatch mode and plans batch offsets.

    Attributes:
        concurrency: Maximum batches in flight
        batch_size: Records requested per batch
        max_batches: Hard bound on the number of batches
    """

    def __init__(self, *, concurrency: int, batch_size: int, max_batches: int) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.concurrency = concurrency
        self.batch_size = batch_size
        self.max_batches = max_batches

    def choose_mode(self, *, total: int | None, streaming: bool) -> FetchMode:
        """SEQUENTIAL when streaming, concurrency <= 1 or total unknown."""
        if streaming or self.concurrency <= 1 or total is None:
            return FetchMode.SEQUENTIAL
        return FetchMode.PARALLEL

    def plan_offsets(self, total: int) -> list[int]:
        """Offsets for parallel mode, bounded by ``max_batches``."""
        if total < 0:
            raise ValueError("total must be >= 0")
        num_batches = min(math.ceil(total / self.batch_size), self.max_batches)
        return [i * self.batch_size for i in range(num_batches)]


def needs_delay(batch_num: int, delay_ms: float, delay_every: int) -> bool:
    """Whether the rate-limit pause applies before ``batch_num``.

    The first batch is never delayed; after that every ``delay_every``-th
    batch waits ``delay_ms``.
    """
    return delay_ms > 0 and delay_every > 0 and batch_num > 0 and batch_num % delay_every == 0
