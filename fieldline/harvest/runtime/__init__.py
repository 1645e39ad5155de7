"""Runtime: fetch orchestration, pagination and output sinks."""

from .fetcher import FetchOrchestrator, parallel_fetch
from .multi_endpoint import dedupe_features, fetch_multi_endpoint, stamp_metadata
from .sinks import BatchSink, BufferSink, CallbackSink, FanOutSink, build_sink

__all__ = [
    "BatchSink",
    "BufferSink",
    "CallbackSink",
    "FanOutSink",
    "FetchOrchestrator",
    "build_sink",
    "dedupe_features",
    "fetch_multi_endpoint",
    "parallel_fetch",
    "stamp_metadata",
]
