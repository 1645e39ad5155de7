"""Unit tests for the concurrency limiter."""

from __future__ import annotations

import asyncio

import pytest

from fieldline.harvest.runtime.pagination import ConcurrencyLimiter


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        ConcurrencyLimiter(0)


@pytest.mark.asyncio
async def test_never_exceeds_limit():
    limiter = ConcurrencyLimiter(3)
    in_flight = 0
    observed = []

    async def job():
        nonlocal in_flight
        in_flight += 1
        observed.append(in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return "done"

    results = await asyncio.gather(*(limiter.run(job) for _ in range(10)))

    assert results == ["done"] * 10
    assert max(observed) == 3
    assert limiter.peak == 3
    assert limiter.active == 0


@pytest.mark.asyncio
async def test_releases_slot_on_failure():
    limiter = ConcurrencyLimiter(1)

    async def boom():
        raise RuntimeError("boom")

    async def ok():
        return 1

    with pytest.raises(RuntimeError):
        await limiter.run(boom)

    assert limiter.active == 0
    assert await asyncio.wait_for(limiter.run(ok), timeout=1) == 1
