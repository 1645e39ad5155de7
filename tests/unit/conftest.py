"""Shared fixtures for unit tests."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import pytest

from fieldline.harvest import RetryPolicy


class ScriptedClient:
    """Stand-in for HTTPClient answering from a responder function.

    The responder receives ``(url, params)`` and returns a JSON body, an
    awaitable resolving to one, or an exception instance to raise.
    """

    def __init__(self, responder: Callable[[str, dict[str, Any]], Any]) -> None:
        self._responder = responder
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def get_json(self, url, params=None, headers=None):
        params = dict(params or {})
        self.calls.append((url, params))
        result = self._responder(url, params)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    async def close(self) -> None:
        pass


@pytest.fixture
def scripted_client():
    """Factory building a ScriptedClient from a responder."""
    return ScriptedClient


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Retry policy with millisecond delays."""
    return RetryPolicy(max_retries=2, base_delay_ms=1, max_delay_ms=2)


@pytest.fixture
def no_retry() -> RetryPolicy:
    """Single-attempt policy."""
    return RetryPolicy(max_retries=0, base_delay_ms=1, max_delay_ms=1)


def make_features(count: int, start: int = 0, prefix: str = "f") -> list[dict[str, Any]]:
    """GeoJSON-like features with sequential ids."""
    return [
        {"type": "Feature", "properties": {"id": f"{prefix}{start + i}"}, "geometry": None}
        for i in range(count)
    ]


@pytest.fixture
def features_factory():
    """Factory for GeoJSON-like feature lists."""
    return make_features
