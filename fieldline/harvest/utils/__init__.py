"""Utility functions."""

from .http import HTTPClient
from .retry import RetryExecutor, backoff_delay, retry_async

__all__ = ["HTTPClient", "RetryExecutor", "backoff_delay", "retry_async"]
