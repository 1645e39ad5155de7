"""Count-capable paged adapter (ArcGIS feature-server query API).

Count call:
    GET {url}?where=<predicate>&returnCountOnly=true&f=json -> {"count": int}

Batch call:
    GET {url}?where=<predicate>&outFields=<csv>&returnGeometry=true
        &outSR=<srid>&f=geojson&resultOffset=<n>&resultRecordCount=<size>
    -> {"type": "FeatureCollection", "features": [...],
        "exceededTransferLimit": bool?}

``exceededTransferLimit`` is authoritative: servers cap page size on their
own, so a full page does not prove more data and a short page does not
prove the end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError

from ..config import DEFAULT_OUT_SR, DEFAULT_WHERE
from ..core.exceptions import ResponseFormatError
from ..core.types import BatchPage, RetryPolicy
from ..models import FeatureCollectionResponse, FeatureCountResponse
from ..utils.http import HTTPClient
from ..utils.retry import retry_async


@dataclass(frozen=True)
class PagedAdapter:
    """Descriptor for a count-capable offset API."""

    url: str
    out_fields: tuple[str, ...]
    where: str = DEFAULT_WHERE
    out_sr: str = DEFAULT_OUT_SR
    kind: Literal["paged"] = "paged"

    def __post_init__(self) -> None:
        # Accept any iterable of field names, store as a tuple
        object.__setattr__(self, "out_fields", tuple(self.out_fields))


def count_params(adapter: PagedAdapter) -> dict[str, str]:
    return {
        "where": adapter.where or DEFAULT_WHERE,
        "returnCountOnly": "true",
        "f": "json",
    }


def batch_params(adapter: PagedAdapter, offset: int, batch_size: int) -> dict[str, str]:
    return {
        "where": adapter.where or DEFAULT_WHERE,
        "outFields": ",".join(adapter.out_fields),
        "returnGeometry": "true",
        "outSR": adapter.out_sr or DEFAULT_OUT_SR,
        "f": "geojson",
        "resultOffset": str(offset),
        "resultRecordCount": str(batch_size),
    }


async def get_count(adapter: PagedAdapter, *, client: HTTPClient, retry: RetryPolicy) -> int | None:
    """Total record count, or None when the server reports none (or zero)."""
    params = count_params(adapter)

    async def load() -> FeatureCountResponse:
        data = await client.get_json(adapter.url, params=params)
        try:
            return FeatureCountResponse.model_validate(data)
        except ValidationError as e:
            raise ResponseFormatError(f"Unexpected count response from {adapter.url}: {e}") from e

    parsed = await retry_async(load, retry, description=adapter.url)
    return parsed.count or None


async def fetch_batch(
    adapter: PagedAdapter,
    offset: int,
    batch_size: int,
    *,
    client: HTTPClient,
    retry: RetryPolicy,
) -> BatchPage[Any]:
    params = batch_params(adapter, offset, batch_size)

    async def load() -> FeatureCollectionResponse:
        data = await client.get_json(adapter.url, params=params)
        try:
            return FeatureCollectionResponse.model_validate(data)
        except ValidationError as e:
            raise ResponseFormatError(f"Unexpected page from {adapter.url}: {e}") from e

    page = await retry_async(load, retry, description=f"{adapter.url} @ {offset}")
    return BatchPage(features=page.features, has_more=page.has_more(batch_size))
