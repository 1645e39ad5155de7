"""Custom adapter: caller-defined pagination for arbitrary APIs."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from ..core.types import BatchPage, RetryPolicy
from ..utils.http import HTTPClient
from ..utils.retry import retry_async


@dataclass(frozen=True)
class CustomAdapter:
    """Descriptor for an arbitrary paginated protocol.

    Attributes:
        build_url: ``(offset, batch_size) -> url`` for one page
        extract_features: Pulls the record list out of a decoded response
        has_more: ``(response, features, offset) -> bool`` more-data verdict
        get_count: Optional sync or async callable returning the total or None
    """

    build_url: Callable[[int, int], str]
    extract_features: Callable[[Any], list[Any]]
    has_more: Callable[[Any, list[Any], int], bool]
    get_count: Callable[[], Awaitable[int | None] | int | None] | None = None
    kind: Literal["custom"] = "custom"


async def get_count(adapter: CustomAdapter) -> int | None:
    if adapter.get_count is None:
        return None
    total = adapter.get_count()
    if inspect.isawaitable(total):
        total = await total
    return total


async def fetch_batch(
    adapter: CustomAdapter,
    offset: int,
    batch_size: int,
    *,
    client: HTTPClient,
    retry: RetryPolicy,
) -> BatchPage[Any]:
    url = adapter.build_url(offset, batch_size)

    async def load() -> tuple[Any, list[Any]]:
        response = await client.get_json(url)
        return response, list(adapter.extract_features(response))

    response, features = await retry_async(load, retry, description=url)
    return BatchPage(features=features, has_more=adapter.has_more(response, features, offset))
