#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from fieldline.harvest import (
    EndpointDescriptor,
    FetchOptions,
    HTTPClient,
    fetch_multi_endpoint,
    paged_adapter,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Merge several ArcGIS layers into one dataset, first layer wins on duplicates"
    )
    p.add_argument("urls", nargs="+", help="Layer query URLs in priority order")
    p.add_argument("--id-property", default="OBJECTID")
    p.add_argument("--optional", action="store_true", help="Skip failing layers instead of aborting")
    p.add_argument("--concat", action="store_true", help="Keep duplicates")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    endpoints = [
        EndpointDescriptor(
            id=f"layer{i}",
            adapter=paged_adapter(url, ["*"]),
            optional=args.optional,
            metadata={"source_layer": f"layer{i}"},
        )
        for i, url in enumerate(args.urls)
    ]

    async with HTTPClient() as client:
        result = await fetch_multi_endpoint(
            endpoints,
            merge="concat" if args.concat else "dedupe",
            id_property=args.id_property,
            options=FetchOptions(batch_size=1000, concurrency=4),
            client=client,
        )

    print(f"{'Endpoint':10} | {'Fetched':>8} | Error")
    print("-" * 40)
    for endpoint_id, stats in result.per_endpoint_stats.items():
        print(f"{endpoint_id:10} | {stats.fetched:>8,} | {stats.error or ''}")
    print(f"Merged: {result.total_fetched:,} features")


if __name__ == "__main__":
    asyncio.run(main())
