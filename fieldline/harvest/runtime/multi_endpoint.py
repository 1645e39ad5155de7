"""Multi-endpoint orchestrator: several sources merged into one dataset.

Endpoints are fetched strictly one after another; each one is internally
paged by the fetch orchestrator (and may run in parallel mode). Running one
endpoint at a time bounds total resource use and keeps failure attribution
unambiguous.

Merge modes:
    - concat: records in endpoint order, then arrival/offset order
    - dedupe: first record (in endpoint order) to introduce an id wins;
      records without an id are always kept
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from typing import Any

from ..config import FetchOptions
from ..core.exceptions import EndpointFailure
from ..core.types import (
    EndpointDescriptor,
    EndpointStats,
    FetchResult,
    MergeMode,
    MultiEndpointResult,
)
from ..utils.http import HTTPClient
from .fetcher import parallel_fetch

logger = logging.getLogger(__name__)


def stamp_metadata(features: Iterable[Any], metadata: Mapping[str, Any]) -> None:
    """Merge ``metadata`` into every record, in place.

    GeoJSON features get the metadata in their ``properties``; flat mapping
    records get it at the top level. Non-mapping records are left alone.
    """
    if not metadata:
        return
    for feature in features:
        if not isinstance(feature, MutableMapping):
            continue
        if "properties" in feature:
            if feature["properties"] is None:
                feature["properties"] = {}
            if isinstance(feature["properties"], MutableMapping):
                feature["properties"].update(metadata)
        else:
            feature.update(metadata)


def record_id(feature: Any, id_property: str) -> Any:
    """Value at ``id_property``, or None when the record has none."""
    if not isinstance(feature, Mapping):
        return None
    if "properties" in feature:
        properties = feature["properties"]
        if isinstance(properties, Mapping):
            return properties.get(id_property)
        return None
    return feature.get(id_property)


def dedupe_features(features: Iterable[Any], id_property: str) -> list[Any]:
    """Drop records whose id was already seen, keeping the first occurrence.

    Ids are compared by their string form. Records lacking the id, or whose
    id is None, are kept and never treated as duplicates of each other; a
    None id is not collapsed to the string "None".
    """
    seen: set[str] = set()
    kept: list[Any] = []
    for feature in features:
        value = record_id(feature, id_property)
        if value is None:
            kept.append(feature)
            continue
        key = str(value)
        if key in seen:
            continue
        seen.add(key)
        kept.append(feature)
    return kept


def _validate(
    endpoints: Sequence[EndpointDescriptor], merge: MergeMode, id_property: str | None
) -> None:
    ids = [endpoint.id for endpoint in endpoints]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate endpoint ids: {', '.join(duplicates)}")
    if merge is MergeMode.DEDUPE and not id_property:
        raise ValueError("id_property is required when merge is 'dedupe'")


async def _fetch_endpoint(
    endpoint: EndpointDescriptor, options: FetchOptions, client: HTTPClient
) -> FetchResult[Any]:
    caller_sink = options.on_features

    if caller_sink is None:
        result = await parallel_fetch(endpoint.adapter, options, client=client, skip_buffer=False)
        stamp_metadata(result.features, endpoint.metadata)
        return result

    # Stamp before the caller's sink sees the batch
    async def on_features(features: list[Any]) -> None:
        stamp_metadata(features, endpoint.metadata)
        outcome = caller_sink(features)
        if inspect.isawaitable(outcome):
            await outcome

    return await parallel_fetch(
        endpoint.adapter, options, client=client, on_features=on_features, skip_buffer=False
    )


async def fetch_multi_endpoint(
    endpoints: Sequence[EndpointDescriptor],
    merge: MergeMode | str = MergeMode.CONCAT,
    id_property: str | None = None,
    options: FetchOptions | None = None,
    *,
    client: HTTPClient | None = None,
) -> MultiEndpointResult[Any]:
    """Fetch several endpoints one at a time and merge their records.

    Args:
        endpoints: Endpoints in priority order (first wins on dedupe)
        merge: "concat" or "dedupe"
        id_property: Record property holding the id (required for dedupe)
        options: Fetch options applied to every endpoint; buffering is
            always on since the merge needs the records
        client: Shared HTTP client; a private one is used when omitted

    Returns:
        MultiEndpointResult with post-merge ``total_fetched`` and pre-merge
        per-endpoint counts

    Raises:
        ValueError: Duplicate endpoint ids, or dedupe without id_property
        Exception: The original error of the first failing required endpoint
    """
    merge = MergeMode(merge)
    _validate(endpoints, merge, id_property)
    opts = options or FetchOptions()

    if client is None:
        async with HTTPClient() as http:
            return await _run(endpoints, merge, id_property, opts, http)
    return await _run(endpoints, merge, id_property, opts, client)


async def _run(
    endpoints: Sequence[EndpointDescriptor],
    merge: MergeMode,
    id_property: str | None,
    options: FetchOptions,
    client: HTTPClient,
) -> MultiEndpointResult[Any]:
    result: MultiEndpointResult[Any] = MultiEndpointResult()
    collected: list[Any] = []

    for endpoint in endpoints:
        logger.info(f"=== Fetching {endpoint.id} ===")
        try:
            fetched = await _fetch_endpoint(endpoint, options, client)
        except Exception as e:
            result.per_endpoint_stats[endpoint.id] = EndpointStats(fetched=0, error=str(e))
            if not endpoint.optional:
                raise
            result.failures.append(EndpointFailure(endpoint.id, e))
            logger.warning(f"  {endpoint.id}: SKIPPED ({e})")
            continue

        collected.extend(fetched.features)
        result.per_endpoint_stats[endpoint.id] = EndpointStats(fetched=fetched.total_fetched)
        logger.info(f"  {endpoint.id}: {fetched.total_fetched} features")

    if merge is MergeMode.DEDUPE:
        assert id_property is not None
        merged = dedupe_features(collected, id_property)
        logger.info(f"Deduplication: {len(collected)} -> {len(merged)} features")
    else:
        merged = collected

    result.features = merged
    result.total_fetched = len(merged)
    return result
