"""Bounded exponential-backoff retry for async operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..core.types import RetryPolicy

logger = logging.getLogger(__name__)

R = TypeVar("R")

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """Delay in milliseconds before retry ``attempt`` (1-based).

    ``min(base_delay_ms * 2 ** (attempt - 1), max_delay_ms)``, no jitter.
    """
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    return min(policy.base_delay_ms * 2 ** (attempt - 1), policy.max_delay_ms)


async def retry_async(
    operation: Callable[[], Awaitable[R]],
    policy: RetryPolicy,
    *,
    description: str | None = None,
    sleep: Sleep | None = None,
) -> R:
    """Await ``operation`` with up to ``policy.max_retries`` retries.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Retry policy
        description: Label used in retry warnings (e.g. the request URL)
        sleep: Awaitable sleep taking seconds, defaults to asyncio.sleep

    Returns:
        The operation's result

    Raises:
        Exception: The last error raised by ``operation``, unchanged, once
            the retry budget is spent
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            attempt += 1
            if attempt > policy.max_retries:
                raise
            delay_ms = backoff_delay(attempt, policy)
            logger.warning(
                f"Fetch failed (attempt {attempt}/{policy.max_attempts}"
                f"{f' for {description}' if description else ''}): {e}. "
                f"Retrying in {delay_ms:.0f}ms..."
            )
            await (sleep or asyncio.sleep)(delay_ms / 1000.0)


class RetryExecutor:
    """Object form of :func:`retry_async` bound to one policy."""

    def __init__(self, policy: RetryPolicy, *, sleep: Sleep | None = None) -> None:
        self.policy = policy
        self._sleep = sleep

    async def execute(
        self, operation: Callable[[], Awaitable[R]], *, description: str | None = None
    ) -> R:
        return await retry_async(
            operation, self.policy, description=description, sleep=self._sleep
        )
