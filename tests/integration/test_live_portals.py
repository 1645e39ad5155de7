"""Integration tests against public ArcGIS and Socrata portals."""

import os

import pytest

from fieldline.harvest import (
    EndpointDescriptor,
    FetchOptions,
    HTTPClient,
    RetryPolicy,
    fetch_multi_endpoint,
    offset_adapter,
    paged_adapter,
    parallel_fetch,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.environ.get("RUN_FIELDLINE_NETWORK_TESTS") != "1",
        reason="Requires network access to public data portals",
    ),
]

# Esri sample server: US cities layer
ARCGIS_CITIES = "https://sampleserver6.arcgisonline.com/arcgis/rest/services/USA/MapServer/0/query"
# NYC open data: 311 service requests
SODA_311 = "https://data.cityofnewyork.us/resource/erm2-nwe9.json"

RETRY = RetryPolicy(max_retries=2, base_delay_ms=500, max_delay_ms=2000)


class TestLivePortals:
    """Fetch small slices from live portals."""

    @pytest.mark.asyncio
    async def test_arcgis_parallel_fetch(self):
        adapter = paged_adapter(ARCGIS_CITIES, ["objectid", "areaname"], where="pop2000 > 500000")

        async with HTTPClient() as client:
            result = await parallel_fetch(
                adapter, client=client, batch_size=10, concurrency=3, retry=RETRY
            )

        assert result.total_fetched == len(result.features)
        assert result.total_fetched > 0
        assert all(f["type"] == "Feature" for f in result.features)

    @pytest.mark.asyncio
    async def test_socrata_sequential_fetch(self):
        adapter = offset_adapter(SODA_311, ["unique_key", "complaint_type"])

        result = await parallel_fetch(adapter, batch_size=50, max_batches=2, retry=RETRY)

        assert result.total_fetched == 100
        assert all("unique_key" in row for row in result.features)

    @pytest.mark.asyncio
    async def test_multi_endpoint_dedupe(self):
        big = paged_adapter(ARCGIS_CITIES, ["objectid"], where="pop2000 > 1000000")
        all_large = paged_adapter(ARCGIS_CITIES, ["objectid"], where="pop2000 > 500000")

        result = await fetch_multi_endpoint(
            [
                EndpointDescriptor(id="big", adapter=big, metadata={"tier": "big"}),
                EndpointDescriptor(id="large", adapter=all_large, metadata={"tier": "large"}),
            ],
            merge="dedupe",
            id_property="objectid",
            options=FetchOptions(batch_size=20, retry=RETRY),
        )

        stats = result.per_endpoint_stats
        assert result.total_fetched == stats["large"].fetched
        assert sum(f["properties"]["tier"] == "big" for f in result.features) == stats["big"].fetched
