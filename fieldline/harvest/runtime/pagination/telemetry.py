"""Structured logging for pagination.

This module provides telemetry hooks for batch fetching, emitting
structured log records that carry their payload in ``extra``.
"""

from __future__ import annotations

import logging

from ...core.types import FetchMode

logger = logging.getLogger(__name__)


def log_mode_selected(
    *,
    source: str,
    mode: FetchMode,
    total: int | None,
    planned_batches: int | None = None,
    concurrency: int | None = None,
) -> None:
    """Log the dispatch mode chosen for a fetch.

    Args:
        source: Source label (usually the endpoint URL)
        mode: Chosen dispatch mode
        total: Total record count, None when unknown
        planned_batches: Number of batches planned (parallel mode only)
        concurrency: Concurrency limit in effect
    """
    logger.info(
        "fetch_mode_selected",
        extra={
            "source": source,
            "mode": mode.value,
            "total": total,
            "planned_batches": planned_batches,
            "concurrency": concurrency,
        },
    )


def log_batch_completed(
    *,
    source: str,
    batch_num: int,
    offset: int,
    rows: int,
    has_more: bool | None = None,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a single batch."""
    logger.debug(
        "batch_completed",
        extra={
            "source": source,
            "batch_num": batch_num,
            "offset": offset,
            "rows": rows,
            "has_more": has_more,
            "latency_ms": latency_ms,
        },
    )


def log_batch_failed(
    *,
    source: str,
    batch_num: int,
    offset: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a batch that exhausted its retry budget."""
    logger.error(
        "batch_failed",
        extra={
            "source": source,
            "batch_num": batch_num,
            "offset": offset,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_fetch_complete(
    *,
    source: str,
    mode: FetchMode,
    batches: int,
    total_fetched: int,
    latency_ms: float | None = None,
) -> None:
    """Log the end of a fetch."""
    logger.info(
        "fetch_complete",
        extra={
            "source": source,
            "mode": mode.value,
            "batches": batches,
            "total_fetched": total_fetched,
            "latency_ms": latency_ms,
        },
    )
