#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from functools import partial
from pathlib import Path

from fieldline.harvest import (
    FetchProgress,
    SQLiteFeatureCache,
    geojson_feature_id,
    paged_adapter,
    parallel_fetch,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch every feature of an ArcGIS layer")
    p.add_argument("url", help="Layer query URL, e.g. .../FeatureServer/0/query")
    p.add_argument("--fields", default="*", help="Comma-separated outFields")
    p.add_argument("--where", default="1=1")
    p.add_argument("--batch-size", type=int, default=2000)
    p.add_argument("--concurrency", type=int, default=4)
    p.add_argument("--id-property", default="OBJECTID")
    p.add_argument("--cache", type=Path, help="SQLite cache file; skips the fetch when fresh")
    p.add_argument("--max-age-hours", type=float, default=24)
    p.add_argument("--out", type=Path, help="Write a GeoJSON FeatureCollection here")
    return p.parse_args()


def on_progress(progress: FetchProgress) -> None:
    total = f"{progress.total:,}" if progress.total is not None else "?"
    print(f"  {progress.message} [{progress.fetched:,}/{total}]")


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    adapter = paged_adapter(args.url, args.fields.split(","), where=args.where)
    cache = SQLiteFeatureCache(args.cache) if args.cache else None
    try:
        if cache is not None and not cache.needs_refresh(args.url, args.max_age_hours):
            features = cache.get_features(args.url)
            print(f"Cache is fresh: {len(features):,} features")
        else:
            result = await parallel_fetch(
                adapter,
                batch_size=args.batch_size,
                concurrency=args.concurrency,
                on_progress=on_progress,
            )
            features = result.features
            print(f"Fetched {result.total_fetched:,} features")
            if cache is not None:
                cache.upsert_features(
                    args.url, features, partial(geojson_feature_id, id_property=args.id_property)
                )
                cache.update_source_metadata(args.url, record_count=result.total_fetched)
    finally:
        if cache is not None:
            cache.close()

    if args.out:
        args.out.write_text(json.dumps({"type": "FeatureCollection", "features": features}))
        print(f"Wrote {args.out}")


if __name__ == "__main__":
    asyncio.run(main())
