"""
Tests for the cache-aside store (poketerminal/cache/store.py).

Covers:
- Hit short-circuits compute
- Miss computes, returns immediately and writes in the background
- Backend outage on read and write degrades to recompute
- Compute failures propagate and nothing is cached
- Maintenance helpers: delete, scan_keys, ping, close
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from poketerminal.cache.store import CacheStore


def _failing_compute() -> AsyncMock:
    return AsyncMock(side_effect=AssertionError("compute must not run on a hit"))


# ---------------------------------------------------------------------------
# Cache-aside
# ---------------------------------------------------------------------------


class TestGetOrSet:

    @pytest.mark.asyncio
    async def test_hit_returns_cached_value_without_compute(self, cache_store, redis_backend) -> None:
        redis_backend.data["k"] = json.dumps({"data": [1, 2]})
        compute = _failing_compute()

        result = await cache_store.get_or_set("k", 60, compute)

        assert result == {"data": [1, 2]}
        compute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_miss_computes_and_writes_with_ttl(self, cache_store, redis_backend) -> None:
        compute = AsyncMock(return_value={"data": "fresh"})

        result = await cache_store.get_or_set("k", 3600, compute)
        await cache_store.drain()

        assert result == {"data": "fresh"}
        compute.assert_awaited_once()
        assert json.loads(redis_backend.data["k"]) == {"data": "fresh"}
        assert redis_backend.ttls["k"] == 3600

    @pytest.mark.asyncio
    async def test_second_call_is_a_hit(self, cache_store) -> None:
        compute = AsyncMock(return_value={"n": 1})

        await cache_store.get_or_set("k", 60, compute)
        await cache_store.drain()
        await cache_store.get_or_set("k", 60, compute)

        compute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_write_is_not_awaited_by_caller(self, cache_store, redis_backend) -> None:
        """The value is returned before the background write lands."""
        release = asyncio.Event()
        real_set = redis_backend.set

        async def slow_set(key, value, ex=None):
            await release.wait()
            return await real_set(key, value, ex=ex)

        redis_backend.set = slow_set

        result = await cache_store.get_or_set("k", 60, AsyncMock(return_value=[1]))

        assert result == [1]
        assert "k" not in redis_backend.data
        assert cache_store.pending_writes == 1

        release.set()
        await cache_store.drain()
        assert "k" in redis_backend.data
        assert cache_store.pending_writes == 0

    @pytest.mark.asyncio
    async def test_compute_failure_propagates_and_nothing_cached(self, cache_store, redis_backend) -> None:
        compute = AsyncMock(side_effect=RuntimeError("vendor down"))

        with pytest.raises(RuntimeError, match="vendor down"):
            await cache_store.get_or_set("k", 60, compute)
        await cache_store.drain()

        assert redis_backend.data == {}

    @pytest.mark.asyncio
    async def test_null_cached_value_is_a_miss(self, cache_store, redis_backend) -> None:
        redis_backend.data["k"] = "null"
        compute = AsyncMock(return_value={"data": 1})

        assert await cache_store.get_or_set("k", 60, compute) == {"data": 1}
        compute.assert_awaited_once()


# ---------------------------------------------------------------------------
# Fail-open behaviour
# ---------------------------------------------------------------------------


class TestBackendOutage:

    @pytest.mark.asyncio
    async def test_total_outage_degrades_to_recompute(self) -> None:
        backend = AsyncMock()
        backend.get.side_effect = RedisConnectionError("refused")
        backend.set.side_effect = RedisConnectionError("refused")
        store = CacheStore(backend)
        compute = AsyncMock(return_value={"data": "fresh"})

        first = await store.get_or_set("k", 60, compute)
        second = await store.get_or_set("k", 60, compute)
        await store.drain()

        assert first == second == {"data": "fresh"}
        assert compute.await_count == 2

    @pytest.mark.asyncio
    async def test_read_timeout_is_a_miss(self) -> None:
        backend = AsyncMock()
        backend.get.side_effect = asyncio.TimeoutError()
        store = CacheStore(backend)

        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_corrupt_payload_is_a_miss(self, cache_store, redis_backend) -> None:
        redis_backend.data["k"] = "{not json"
        compute = AsyncMock(return_value={"ok": True})

        assert await cache_store.get_or_set("k", 60, compute) == {"ok": True}
        compute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self) -> None:
        backend = AsyncMock()
        backend.get.return_value = None
        backend.set.side_effect = OSError("broken pipe")
        store = CacheStore(backend)

        result = await store.get_or_set("k", 60, AsyncMock(return_value=[1]))
        await store.drain()

        assert result == [1]
        backend.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_set_reports_failure(self) -> None:
        backend = AsyncMock()
        backend.set.side_effect = RedisConnectionError("refused")
        store = CacheStore(backend)

        assert await store.set("k", {"a": 1}, 60) is False

    @pytest.mark.asyncio
    async def test_unserializable_value_reports_failure(self, cache_store) -> None:
        assert await cache_store.set("k", {"a": object()}, 60) is False


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


class TestMaintenance:

    @pytest.mark.asyncio
    async def test_scan_and_delete(self, cache_store, redis_backend) -> None:
        for key in ("ppt:cards:a", "ppt:cards:b", "ppt:set:x"):
            redis_backend.data[key] = "1"

        keys = await cache_store.scan_keys("ppt:cards:*")
        assert sorted(keys) == ["ppt:cards:a", "ppt:cards:b"]

        assert await cache_store.delete(*keys) == 2
        assert list(redis_backend.data) == ["ppt:set:x"]

    @pytest.mark.asyncio
    async def test_delete_nothing(self, cache_store) -> None:
        assert await cache_store.delete() == 0

    @pytest.mark.asyncio
    async def test_ping(self, cache_store) -> None:
        assert await cache_store.ping() is True

    @pytest.mark.asyncio
    async def test_ping_failure(self) -> None:
        backend = AsyncMock()
        backend.ping.side_effect = RedisConnectionError("refused")
        assert await CacheStore(backend).ping() is False

    @pytest.mark.asyncio
    async def test_close_drains_then_closes(self, cache_store, redis_backend) -> None:
        await cache_store.get_or_set("k", 60, AsyncMock(return_value=1))
        await cache_store.close()

        assert redis_backend.data["k"] == "1"
        assert redis_backend.closed is True
