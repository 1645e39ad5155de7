"""Offset-only adapter (Socrata / SODA-style APIs).

Batch call:
    GET {url}?$select=<csv>&$limit=<size>&$offset=<n>[&$where=<predicate>]
    -> JSON array of records

There is no count endpoint, so fetches through this adapter always run
sequentially. A short page signals end-of-data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from ..core.exceptions import ResponseFormatError
from ..core.types import BatchPage, RetryPolicy
from ..utils.http import HTTPClient
from ..utils.retry import retry_async


@dataclass(frozen=True)
class OffsetAdapter:
    """Descriptor for an offset-only API."""

    url: str
    fields: tuple[str, ...]
    where: str | None = None
    kind: Literal["offset"] = "offset"

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


def batch_params(adapter: OffsetAdapter, offset: int, batch_size: int) -> dict[str, str]:
    params = {
        "$select": ",".join(adapter.fields),
        "$limit": str(batch_size),
        "$offset": str(offset),
    }
    if adapter.where:
        params["$where"] = adapter.where
    return params


async def fetch_batch(
    adapter: OffsetAdapter,
    offset: int,
    batch_size: int,
    *,
    client: HTTPClient,
    retry: RetryPolicy,
) -> BatchPage[Any]:
    params = batch_params(adapter, offset, batch_size)

    async def load() -> list[Any]:
        records = await client.get_json(adapter.url, params=params)
        if not isinstance(records, list):
            raise ResponseFormatError(
                f"Expected a JSON array from {adapter.url}, got {type(records).__name__}"
            )
        return records

    records = await retry_async(load, retry, description=f"{adapter.url} @ {offset}")
    return BatchPage(features=records, has_more=len(records) == batch_size)
