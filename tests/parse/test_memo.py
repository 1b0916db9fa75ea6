"""Tests for :mod:`tscomponents.parse.memo`."""

from __future__ import annotations

import asyncio

import pytest

from tscomponents.parse.memo import InFlightCache


class CycleError(RuntimeError):
    pass


def _cache(maxsize: int = 8) -> InFlightCache[str, object]:
    return InFlightCache(maxsize, on_cycle=lambda key: CycleError(key))


async def test_sequential_callers_share_the_result() -> None:
    cache = _cache()
    calls = 0

    async def factory() -> object:
        nonlocal calls
        calls += 1
        return object()

    first = await cache.get_or_compute("a", factory)
    second = await cache.get_or_compute("a", factory)

    assert first is second
    assert calls == 1
    assert "a" in cache and len(cache) == 1


async def test_concurrent_callers_await_the_same_computation() -> None:
    cache = _cache()
    release = asyncio.Event()
    calls = 0

    async def factory() -> object:
        nonlocal calls
        calls += 1
        await release.wait()
        return object()

    first = asyncio.create_task(cache.get_or_compute("a", factory))
    second = asyncio.create_task(cache.get_or_compute("a", factory))
    await asyncio.sleep(0)
    release.set()

    assert (await first) is (await second)
    assert calls == 1


async def test_failures_are_not_cached() -> None:
    cache = _cache()
    attempts = 0

    async def factory() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise ValueError("boom")
        return "ok"

    with pytest.raises(ValueError):
        await cache.get_or_compute("a", factory)
    assert "a" not in cache

    assert await cache.get_or_compute("a", factory) == "ok"
    assert attempts == 2


async def test_least_recently_used_entries_are_evicted() -> None:
    cache = _cache(maxsize=2)

    async def value() -> str:
        return "v"

    await cache.get_or_compute("a", value)
    await cache.get_or_compute("b", value)
    await cache.get_or_compute("a", value)
    await cache.get_or_compute("c", value)

    assert "b" not in cache
    assert "a" in cache and "c" in cache

    cache.clear()
    assert len(cache) == 0


async def test_self_reentry_raises_cycle_error() -> None:
    cache = _cache()

    async def factory() -> object:
        return await cache.get_or_compute("a", factory)

    with pytest.raises(CycleError):
        await cache.get_or_compute("a", factory)
    assert "a" not in cache


async def test_cross_task_cycle_is_detected() -> None:
    cache = _cache()
    a_started = asyncio.Event()
    b_waiting = asyncio.Event()

    async def compute_a() -> object:
        a_started.set()
        await b_waiting.wait()
        return await cache.get_or_compute("b", compute_b)

    async def compute_b() -> object:
        await a_started.wait()
        b_waiting.set()
        return await cache.get_or_compute("a", compute_a)

    results = await asyncio.gather(
        cache.get_or_compute("a", compute_a),
        cache.get_or_compute("b", compute_b),
        return_exceptions=True,
    )

    assert all(isinstance(result, CycleError) for result in results)


def test_maxsize_must_be_positive() -> None:
    with pytest.raises(ValueError):
        _cache(maxsize=0)
