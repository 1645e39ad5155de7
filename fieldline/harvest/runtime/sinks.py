"""Output sinks for fetched batches.

Buffering in memory and streaming to a caller callback are two sinks behind
one protocol; the orchestrator composes them instead of branching on flags.

Sinks:
    - BufferSink: appends every batch to an in-memory list
    - CallbackSink: forwards every batch to a sync or async callable
    - FanOutSink: feeds several sinks in order, awaiting each before the next
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class BatchSink(Protocol):
    """Protocol for batch consumers.

    ``accept`` is awaited before the next batch is fetched in sequential
    mode, which is the only backpressure mechanism of the engine.
    """

    async def accept(self, features: list[Any]) -> None:
        ...


class BufferSink:
    """Accumulates records in arrival order."""

    def __init__(self) -> None:
        self.features: list[Any] = []

    async def accept(self, features: list[Any]) -> None:
        self.features.extend(features)

    def __len__(self) -> int:
        return len(self.features)


class CallbackSink:
    """Forwards each batch to ``callback``, awaiting it when it returns an awaitable."""

    def __init__(self, callback: Callable[[list[Any]], Awaitable[None] | None]) -> None:
        self._callback = callback

    async def accept(self, features: list[Any]) -> None:
        result = self._callback(features)
        if inspect.isawaitable(result):
            await result


class FanOutSink:
    """Feeds every batch to each sink in registration order."""

    def __init__(self, *sinks: BatchSink) -> None:
        self._sinks = list(sinks)

    async def accept(self, features: list[Any]) -> None:
        for sink in self._sinks:
            await sink.accept(features)


def build_sink(
    *,
    on_features: Callable[[list[Any]], Awaitable[None] | None] | None,
    skip_buffer: bool,
) -> tuple[BatchSink, BufferSink | None]:
    """Compose the sink for one fetch.

    The callback (when set) runs before buffering. Returns the composed sink
    and the buffer, or None when buffering is skipped.
    """
    sinks: list[BatchSink] = []
    if on_features is not None:
        sinks.append(CallbackSink(on_features))
    buffer = None if skip_buffer else BufferSink()
    if buffer is not None:
        sinks.append(buffer)
    if len(sinks) == 1:
        return sinks[0], buffer
    return FanOutSink(*sinks), buffer
