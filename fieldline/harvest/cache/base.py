"""Feature cache interface consumed by fetch pipelines.

Typical caller pattern::

    if cache.needs_refresh(source_id, max_age_hours=24):
        result = await parallel_fetch(adapter, options)
        cache.upsert_features(source_id, result.features, geojson_feature_id)
        cache.update_source_metadata(source_id, record_count=result.total_fetched)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

FeatureIdFn = Callable[[Any, int], str]


class SourceMetadata(BaseModel):
    """Bookkeeping for one cached source."""

    source_id: str = Field(..., min_length=1)
    etag: str | None = None
    last_modified: str | None = None
    last_fetched: datetime
    record_count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class CacheStats(BaseModel):
    """Whole-cache statistics."""

    source_count: int
    feature_count: int
    size_bytes: int

    model_config = ConfigDict(frozen=True)


class FeatureCache(Protocol):
    """Interface of the on-disk feature cache."""

    def get_source_metadata(self, source_id: str) -> SourceMetadata | None:
        ...

    def upsert_features(
        self, source_id: str, features: Sequence[Any], id_fn: FeatureIdFn
    ) -> None:
        ...

    def update_source_metadata(
        self,
        source_id: str,
        *,
        record_count: int,
        etag: str | None = None,
        last_modified: str | None = None,
    ) -> None:
        ...

    def needs_refresh(self, source_id: str, max_age_hours: float = 24) -> bool:
        ...


def age_hours(last_fetched: datetime, now: datetime | None = None) -> float:
    """Hours elapsed since ``last_fetched``; naive datetimes are taken as UTC."""
    if last_fetched.tzinfo is None:
        last_fetched = last_fetched.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    return (now - last_fetched).total_seconds() / 3600.0


def geojson_feature_id(feature: Any, index: int, id_property: str | None = None) -> str:
    """Cache id for a GeoJSON feature.

    Uses ``properties[id_property]`` when present and truthy, otherwise
    falls back to the feature's position.
    """
    if id_property:
        properties = feature.get("properties") if isinstance(feature, dict) else None
        if properties and properties.get(id_property):
            return str(properties[id_property])
    return f"feature_{index}"
