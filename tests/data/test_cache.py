"""Tests for the in-process and HTTP cache tiers."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from f1replay.data.cache import CacheEntry, HttpCache, MemoryCache
from f1replay.data.errors import CacheError

CACHE_URL = "http://localhost:3001"


class _MsClock:
    def __init__(self) -> None:
        self.now = 1_000_000.0

    def __call__(self) -> float:
        return self.now


class TestCacheEntry:
    def test_expiry_is_strictly_after_ttl(self):
        entry = CacheEntry(value=[1], ttl_ms=1000, written_at_ms=0)
        assert not entry.expired(1000)
        assert entry.expired(1001)


class TestMemoryCache:
    @pytest.mark.asyncio
    async def test_set_get(self):
        cache = MemoryCache()
        await cache.set("laps_9161_1", [{"lap_number": 1}])
        assert await cache.get("laps_9161_1") == [{"lap_number": 1}]

    @pytest.mark.asyncio
    async def test_missing_key(self):
        assert await MemoryCache().get("nope") is None

    @pytest.mark.asyncio
    async def test_expired_entry_evicted_on_read(self):
        clock = _MsClock()
        cache = MemoryCache(clock_ms=clock)
        await cache.set("k", [1], ttl_ms=500)

        clock.now += 500
        assert await cache.get("k") == [1]
        clock.now += 1
        assert await cache.get("k") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_overwrite_refreshes_ttl(self):
        clock = _MsClock()
        cache = MemoryCache(clock_ms=clock)
        await cache.set("k", [1], ttl_ms=100)
        clock.now += 90
        await cache.set("k", [2], ttl_ms=100)
        clock.now += 90
        assert await cache.get("k") == [2]

    @pytest.mark.asyncio
    async def test_delete(self):
        cache = MemoryCache()
        await cache.set("k", [1])
        await cache.delete("k")
        await cache.delete("k")
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_trims_oldest_when_full(self):
        clock = _MsClock()
        cache = MemoryCache(max_entries=10, clock_ms=clock)
        for i in range(11):
            clock.now += 1
            await cache.set(f"k{i}", [i])

        assert len(cache) == 10
        assert await cache.get("k0") is None
        assert await cache.get("k10") == [10]


class TestHttpCache:
    @respx.mock
    @pytest.mark.asyncio
    async def test_get_hit(self):
        respx.get(f"{CACHE_URL}/cache/laps_9161_1").mock(
            return_value=httpx.Response(200, json={"data": [{"lap_number": 1}]})
        )
        cache = HttpCache()
        assert await cache.get("laps_9161_1") == [{"lap_number": 1}]
        await cache.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_miss(self):
        respx.get(f"{CACHE_URL}/cache/laps_9161_1").mock(
            return_value=httpx.Response(200, json={"data": None})
        )
        cache = HttpCache()
        assert await cache.get("laps_9161_1") is None
        await cache.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_set_posts_ttl(self):
        route = respx.post(f"{CACHE_URL}/cache").mock(return_value=httpx.Response(200, json={}))
        cache = HttpCache()
        await cache.set("drivers_9161", [{"driver_number": 1}], 5000)

        body = json.loads(route.calls.last.request.content)
        assert body == {"key": "drivers_9161", "data": [{"driver_number": 1}], "expiresIn": 5000}
        await cache.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_delete(self):
        route = respx.delete(f"{CACHE_URL}/cache/radio_9161_1").mock(
            return_value=httpx.Response(200, json={})
        )
        cache = HttpCache()
        await cache.delete("radio_9161_1")
        assert route.called
        await cache.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_server_error_raises_cache_error(self):
        respx.get(f"{CACHE_URL}/cache/k").mock(return_value=httpx.Response(500))
        cache = HttpCache()
        with pytest.raises(CacheError):
            await cache.get("k")
        await cache.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_unreachable_raises_cache_error(self):
        respx.post(f"{CACHE_URL}/cache").mock(side_effect=httpx.ConnectError("refused"))
        cache = HttpCache()
        with pytest.raises(CacheError):
            await cache.set("k", [1])
        await cache.close()

    @respx.mock
    @pytest.mark.asyncio
    async def test_non_object_body_raises_cache_error(self):
        respx.get(f"{CACHE_URL}/cache/k").mock(return_value=httpx.Response(200, json=[1, 2]))
        cache = HttpCache()
        with pytest.raises(CacheError):
            await cache.get("k")
        await cache.close()
