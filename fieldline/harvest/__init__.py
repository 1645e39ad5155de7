"""Fieldline Harvest - paginated REST dataset harvesting.

Pages through count-capable offset APIs (ArcGIS feature servers),
offset-only APIs (Socrata/SODA) and arbitrary custom APIs with bounded
retries and concurrency, then optionally merges several endpoints into one
dataset.
"""

from .adapters import (
    AdapterDescriptor,
    CustomAdapter,
    OffsetAdapter,
    PagedAdapter,
    offset_adapter,
    paged_adapter,
)
from .cache import FeatureCache, SQLiteFeatureCache, SourceMetadata, geojson_feature_id
from .config import FetchOptions
from .core import (
    BatchPage,
    EndpointDescriptor,
    EndpointFailure,
    EndpointStats,
    FetchMode,
    FetchProgress,
    FetchResult,
    HarvestError,
    HttpStatusError,
    MergeMode,
    MultiEndpointResult,
    ResponseFormatError,
    RetryPolicy,
    TransientNetworkError,
)
from .runtime import FetchOrchestrator, fetch_multi_endpoint, parallel_fetch
from .utils import HTTPClient, RetryExecutor, retry_async

__all__ = [
    # Adapters
    "AdapterDescriptor",
    "CustomAdapter",
    "OffsetAdapter",
    "PagedAdapter",
    "offset_adapter",
    "paged_adapter",
    # Entry points
    "FetchOptions",
    "FetchOrchestrator",
    "fetch_multi_endpoint",
    "parallel_fetch",
    # Types
    "BatchPage",
    "EndpointDescriptor",
    "EndpointStats",
    "FetchMode",
    "FetchProgress",
    "FetchResult",
    "MergeMode",
    "MultiEndpointResult",
    "RetryPolicy",
    # Errors
    "EndpointFailure",
    "HarvestError",
    "HttpStatusError",
    "ResponseFormatError",
    "TransientNetworkError",
    # Infrastructure
    "FeatureCache",
    "HTTPClient",
    "RetryExecutor",
    "SQLiteFeatureCache",
    "SourceMetadata",
    "geojson_feature_id",
    "retry_async",
]
