"""Request-scoped value types shared across the fetch engine.

Architecture:
    Every type here lives only for the duration of one fetch call. Nothing
    is persisted by the core; caching is left to a FeatureCache collaborator.

Design Decisions:
    - Frozen dataclasses for configuration and snapshots (RetryPolicy,
      FetchProgress, BatchPage)
    - Mutable result containers (FetchResult, MultiEndpointResult) since the
      orchestrators fill them incrementally
    - String enums for modes so they log and compare cleanly
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .exceptions import EndpointFailure

if TYPE_CHECKING:
    from ..adapters import AdapterDescriptor

T = TypeVar("T")


class FetchMode(str, Enum):
    """Batch dispatch mode chosen by the pagination strategist."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class MergeMode(str, Enum):
    """How results of several endpoints are combined."""

    CONCAT = "concat"
    DEDUPE = "dedupe"


@dataclass(frozen=True)
class RetryPolicy:
    """Capped exponential backoff configuration.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        base_delay_ms: Delay before the first retry
        max_delay_ms: Upper bound for any single delay
    """

    max_retries: int = 3
    base_delay_ms: float = 1000
    max_delay_ms: float = 30000

    def __post_init__(self) -> None:
        """Validate retry policy configuration."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class FetchProgress:
    """Snapshot emitted after every batch."""

    fetched: int
    total: int | None
    batch_num: int
    message: str


@dataclass(frozen=True)
class BatchPage(Generic[T]):
    """One page of records plus the adapter's more-data verdict."""

    features: list[T]
    has_more: bool

    def __len__(self) -> int:
        return len(self.features)


@dataclass
class FetchResult(Generic[T]):
    """Result of a single-source fetch.

    Attributes:
        features: Buffered records (empty when buffering was skipped)
        total_fetched: Sum of all batch lengths received
        from_cache: Always False from the fetch engine itself
    """

    features: list[T] = field(default_factory=list)
    total_fetched: int = 0
    from_cache: bool = False


@dataclass
class EndpointStats:
    """Per-endpoint outcome of a multi-endpoint fetch."""

    fetched: int = 0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class MultiEndpointResult(Generic[T]):
    """Merged result of several endpoints.

    ``total_fetched`` is the post-merge count while ``per_endpoint_stats``
    keeps the raw per-endpoint contribution. ``failures`` holds the
    skipped optional endpoints with their original errors.
    """

    features: list[T] = field(default_factory=list)
    total_fetched: int = 0
    per_endpoint_stats: dict[str, EndpointStats] = field(default_factory=dict)
    failures: list[EndpointFailure] = field(default_factory=list)


@dataclass(frozen=True)
class EndpointDescriptor:
    """One named endpoint of a multi-endpoint fetch.

    Attributes:
        id: Unique endpoint identifier
        adapter: Adapter descriptor used to page through the endpoint
        optional: Failure is recorded and skipped instead of aborting
        metadata: Properties stamped onto every record from this endpoint
    """

    id: str
    adapter: AdapterDescriptor
    optional: bool = False
    metadata: Mapping[str, Any] = field(default_factory=dict)
