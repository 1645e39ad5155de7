"""Source adapters: how to page through one specific API shape.

Architecture:
    ``AdapterDescriptor`` is a closed union of three frozen descriptors.
    Each variant lives in its own module with plain functions for its wire
    format; this module dispatches on the variant with an exhaustive
    ``match``. The variants share no base class.

Variants:
    - PagedAdapter: count-capable offset API, server-reported more-data flag
    - OffsetAdapter: offset-only API, short page means end-of-data
    - CustomAdapter: caller-supplied URL builder and response interpretation

Usage:
    >>> adapter = paged_adapter("https://host/FeatureServer/0/query", ["APN"])
    >>> total = await get_count(adapter, client=client, retry=policy)
    >>> page = await fetch_batch(adapter, 0, 2000, client=client, retry=policy)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..config import DEFAULT_OUT_SR, DEFAULT_WHERE
from ..core.types import BatchPage, RetryPolicy
from ..utils.http import HTTPClient
from . import custom, offset, paged
from .custom import CustomAdapter
from .offset import OffsetAdapter
from .paged import PagedAdapter

AdapterDescriptor = PagedAdapter | OffsetAdapter | CustomAdapter


async def get_count(
    adapter: AdapterDescriptor, *, client: HTTPClient, retry: RetryPolicy
) -> int | None:
    """Ask the source for its total record count.

    Returns None for variants without count capability. Errors propagate;
    the orchestrator decides whether to swallow them.
    """
    match adapter:
        case PagedAdapter():
            return await paged.get_count(adapter, client=client, retry=retry)
        case OffsetAdapter():
            return None
        case CustomAdapter():
            return await custom.get_count(adapter)
        case _:
            raise TypeError(f"Unsupported adapter descriptor: {type(adapter).__name__}")


async def fetch_batch(
    adapter: AdapterDescriptor,
    offset_: int,
    batch_size: int,
    *,
    client: HTTPClient,
    retry: RetryPolicy,
) -> BatchPage[Any]:
    """Fetch one page starting at ``offset_``."""
    match adapter:
        case PagedAdapter():
            return await paged.fetch_batch(adapter, offset_, batch_size, client=client, retry=retry)
        case OffsetAdapter():
            return await offset.fetch_batch(adapter, offset_, batch_size, client=client, retry=retry)
        case CustomAdapter():
            return await custom.fetch_batch(adapter, offset_, batch_size, client=client, retry=retry)
        case _:
            raise TypeError(f"Unsupported adapter descriptor: {type(adapter).__name__}")


def paged_adapter(
    url: str,
    out_fields: Iterable[str],
    where: str = DEFAULT_WHERE,
    out_sr: str = DEFAULT_OUT_SR,
) -> PagedAdapter:
    """Build a descriptor for an ArcGIS-style feature-server query endpoint."""
    return PagedAdapter(url=url, out_fields=tuple(out_fields), where=where, out_sr=out_sr)


def offset_adapter(url: str, fields: Iterable[str], where: str | None = None) -> OffsetAdapter:
    """Build a descriptor for a Socrata-style offset-only endpoint."""
    return OffsetAdapter(url=url, fields=tuple(fields), where=where)


__all__ = [
    "AdapterDescriptor",
    "CustomAdapter",
    "OffsetAdapter",
    "PagedAdapter",
    "fetch_batch",
    "get_count",
    "offset_adapter",
    "paged_adapter",
]
