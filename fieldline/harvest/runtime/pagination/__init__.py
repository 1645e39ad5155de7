"""Pagination layer: dispatch strategy, concurrency limit and batch execution.

Architecture:
    The pagination layer consists of:
    - planners.py: PaginationStrategist (mode decision, offset planning)
    - limiter.py: ConcurrencyLimiter (bounded parallelism)
    - executors.py: BatchExecutor (sequential and parallel batch loops)
    - telemetry.py: Structured logging

Usage:
    The fetch orchestrator resolves the total count, asks the strategist for
    a mode, then runs the matching executor loop with a delivery callback
    that feeds the output sinks.
"""

from __future__ import annotations

from .executors import BatchExecutor
from .limiter import ConcurrencyLimiter
from .planners import PaginationStrategist, needs_delay

__all__ = [
    "BatchExecutor",
    "ConcurrencyLimiter",
    "PaginationStrategist",
    "needs_delay",
]
