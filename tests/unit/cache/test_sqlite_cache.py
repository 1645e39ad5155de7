"""Unit tests for the SQLite feature cache."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import partial

import pytest

from fieldline.harvest.cache import (
    SQLiteFeatureCache,
    SourceMetadata,
    age_hours,
    geojson_feature_id,
)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def cache(tmp_path, clock):
    with SQLiteFeatureCache(tmp_path / "cache" / "features.db", clock=clock) as c:
        yield c


def feature(fid, value=0):
    return {"type": "Feature", "properties": {"OBJECTID": fid, "value": value}, "geometry": None}


class TestSourceMetadata:
    """Test source bookkeeping."""

    def test_unknown_source(self, cache):
        assert cache.get_source_metadata("parcels") is None

    def test_update_and_read(self, cache, clock):
        cache.update_source_metadata(
            "parcels", record_count=10, etag='"abc"', last_modified="Fri, 01 Mar 2024 10:00:00 GMT"
        )

        meta = cache.get_source_metadata("parcels")

        assert isinstance(meta, SourceMetadata)
        assert meta.record_count == 10
        assert meta.etag == '"abc"'
        assert meta.last_fetched == clock.now

    def test_update_overwrites(self, cache, clock):
        cache.update_source_metadata("parcels", record_count=10, etag="v1")
        clock.advance(hours=1)
        cache.update_source_metadata("parcels", record_count=12)

        meta = cache.get_source_metadata("parcels")

        assert meta.record_count == 12
        assert meta.etag is None
        assert meta.last_fetched == clock.now


class TestFeatures:
    """Test feature storage."""

    def test_upsert_replaces_by_id(self, cache):
        id_fn = partial(geojson_feature_id, id_property="OBJECTID")

        cache.upsert_features("parcels", [feature(1), feature(2)], id_fn)
        cache.upsert_features("parcels", [feature(2, value=99), feature(3)], id_fn)

        stored = {f["properties"]["OBJECTID"]: f for f in cache.get_features("parcels")}
        assert sorted(stored) == [1, 2, 3]
        assert stored[2]["properties"]["value"] == 99
        assert cache.get_feature_count("parcels") == 3

    def test_upsert_creates_source_row(self, cache):
        cache.upsert_features("roads", [feature(1)], geojson_feature_id)

        assert cache.get_source_metadata("roads").record_count == 0

    def test_clear_source(self, cache):
        cache.upsert_features("parcels", [feature(1)], geojson_feature_id)
        cache.upsert_features("roads", [feature(1)], geojson_feature_id)

        cache.clear_source("parcels")

        assert cache.get_features("parcels") == []
        assert cache.get_source_metadata("parcels") is None
        assert cache.get_feature_count("roads") == 1

    def test_stats(self, cache):
        cache.upsert_features("parcels", [feature(1), feature(2)], geojson_feature_id)

        stats = cache.get_stats()

        assert stats.source_count == 1
        assert stats.feature_count == 2
        assert stats.size_bytes > 0


class TestNeedsRefresh:
    """Test staleness decisions."""

    def test_never_fetched(self, cache):
        assert cache.needs_refresh("parcels") is True

    def test_fresh_and_stale(self, cache, clock):
        cache.update_source_metadata("parcels", record_count=1)

        clock.advance(hours=23)
        assert cache.needs_refresh("parcels") is False

        clock.advance(hours=2)
        assert cache.needs_refresh("parcels") is True

    def test_custom_max_age(self, cache, clock):
        cache.update_source_metadata("parcels", record_count=1)
        clock.advance(hours=2)

        assert cache.needs_refresh("parcels", max_age_hours=1) is True


class TestHelpers:
    """Test module-level helpers."""

    def test_feature_id_from_property(self):
        assert geojson_feature_id(feature(42), 0, "OBJECTID") == "42"

    def test_feature_id_falls_back_to_index(self):
        assert geojson_feature_id(feature(None), 7, "OBJECTID") == "feature_7"
        assert geojson_feature_id(feature(42), 3) == "feature_3"
        assert geojson_feature_id("not a feature", 1, "OBJECTID") == "feature_1"

    def test_age_hours_treats_naive_as_utc(self):
        now = datetime(2024, 3, 2, 12, 0, tzinfo=UTC)
        assert age_hours(datetime(2024, 3, 1, 12, 0), now) == pytest.approx(24.0)
