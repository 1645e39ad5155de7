"""Feature cache collaborator: interface plus a SQLite implementation."""

from .base import (
    CacheStats,
    FeatureCache,
    FeatureIdFn,
    SourceMetadata,
    age_hours,
    geojson_feature_id,
)
from .sqlite import SQLiteFeatureCache

__all__ = [
    "CacheStats",
    "FeatureCache",
    "FeatureIdFn",
    "SQLiteFeatureCache",
    "SourceMetadata",
    "age_hours",
    "geojson_feature_id",
]
