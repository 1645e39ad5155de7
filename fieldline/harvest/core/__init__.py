"""Core components."""

from .exceptions import (
    EndpointFailure,
    HarvestError,
    HttpStatusError,
    ResponseFormatError,
    TransientNetworkError,
)
from .types import (
    BatchPage,
    EndpointDescriptor,
    EndpointStats,
    FetchMode,
    FetchProgress,
    FetchResult,
    MergeMode,
    MultiEndpointResult,
    RetryPolicy,
)

__all__ = [
    "BatchPage",
    "EndpointDescriptor",
    "EndpointFailure",
    "EndpointStats",
    "FetchMode",
    "FetchProgress",
    "FetchResult",
    "HarvestError",
    "HttpStatusError",
    "MergeMode",
    "MultiEndpointResult",
    "ResponseFormatError",
    "RetryPolicy",
    "TransientNetworkError",
]
