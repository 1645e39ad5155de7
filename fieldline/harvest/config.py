"""Fetch engine defaults and per-call options.

This module centralizes the defaults used by the adapters and orchestrators
so callers configuring a pipeline only override what they need.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .core.types import FetchProgress, RetryPolicy

DEFAULT_CONCURRENCY = 4
DEFAULT_BATCH_SIZE = 2000
DEFAULT_MAX_BATCHES = 100
DEFAULT_RETRY = RetryPolicy(max_retries=3, base_delay_ms=1000, max_delay_ms=30000)

# Request timeout in seconds for a single page
DEFAULT_TIMEOUT = 60.0

# ArcGIS query defaults
DEFAULT_WHERE = "1=1"
DEFAULT_OUT_SR = "4326"

ProgressCallback = Callable[[FetchProgress], None]
FeaturesCallback = Callable[[list[Any]], Awaitable[None] | None]


class FetchOptions(BaseModel):
    """Options for a single ``parallel_fetch`` call.

    Attributes:
        concurrency: Maximum batches in flight in parallel mode
        batch_size: Records requested per page
        max_batches: Hard bound on the number of pages fetched
        retry: Retry policy applied to every network call
        on_progress: Called with a FetchProgress after every batch
        on_features: Streaming sink, awaited per batch; forces sequential mode
        skip_buffer: Do not accumulate records in memory
        delay_ms: Fixed pause inserted before every ``delay_every``-th batch
        delay_every: Batch interval for ``delay_ms``
    """

    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    max_batches: int = Field(default=DEFAULT_MAX_BATCHES, ge=0)
    retry: RetryPolicy = DEFAULT_RETRY
    on_progress: ProgressCallback | None = None
    on_features: FeaturesCallback | None = None
    skip_buffer: bool = False
    delay_ms: float = Field(default=0, ge=0)
    delay_every: int = Field(default=1, ge=0)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def streaming(self) -> bool:
        return self.on_features is not None

    def merged(self, **overrides: Any) -> FetchOptions:
        """Return a validated copy with the given fields replaced."""
        if not overrides:
            return self
        return type(self)(**{**dict(self), **overrides})
