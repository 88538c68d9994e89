"""
Poke Terminal: Cache-Aside Store

Wraps an async Redis client with a get-or-populate operation:

    value = await store.get_or_set(key, CacheTTL.CARDS, compute)

1. Read the key. A decoded, non-null value is returned and compute() is
   never called.
2. A backend failure on read (connection, timeout, undecodable payload)
   is treated as a miss.
3. compute() runs. Its failure propagates unchanged and nothing is cached.
4. The write is scheduled as a background task and not awaited. A failed
   write is logged and dropped.

A failing cache must never become a failing request: total backend outage
degrades to "always recompute".

Concurrent misses on the same key may both compute and both write; the last
write wins. There is no single-flight coalescing.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from poketerminal.config import settings

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Errors that mean "the backend is unhealthy", never "the request failed"
BACKEND_ERRORS: tuple[type[BaseException], ...] = (
    RedisError,
    OSError,
    asyncio.TimeoutError,
    ValueError,     # includes json.JSONDecodeError and UnicodeDecodeError
    TypeError,      # value not JSON-serializable
)


def create_redis_client(url: str | None = None) -> aioredis.Redis:
    """
    Create the shared async Redis client.

    No connection is opened until the first command, so an unreachable
    backend never blocks application startup.
    """
    return aioredis.from_url(
        url or settings.REDIS_URL,
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
    )


class CacheStore:
    """
    Cache-aside store over a key-value backend.

    The backend only needs the async redis-py surface used here:
    get, set(ex=...), delete, scan_iter, ping and aclose.

    Usage:
        store = CacheStore(create_redis_client())
        data = await store.get_or_set("ppt:card:123", 86400, fetch_card)
    """

    def __init__(self, backend: Any):
        self._backend = backend
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_writes(self) -> int:
        """Number of background writes not yet finished."""
        return len(self._pending)

    # -----------------------------------------------------------------------
    # Cache-aside
    # -----------------------------------------------------------------------

    async def get_or_set(
        self,
        key: str,
        ttl_seconds: int,
        compute: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return the cached value for key, or compute, schedule a write and
        return the computed value.

        Args:
            key: Cache key (see cache.keys.build_key).
            ttl_seconds: Expiry applied at write time.
            compute: Zero-arg coroutine factory producing a JSON-serializable
                     value. Exceptions from it propagate to the caller.

        Returns:
            Cached or freshly computed value.
        """
        cached = await self.get(key)
        if cached is not None:
            logger.info("cache_hit", key=key)
            return cached

        logger.info("cache_miss", key=key)
        value = await compute()

        self._schedule_write(key, value, ttl_seconds)
        return value

    async def get(self, key: str) -> Any | None:
        """Read and decode key. Any backend failure reads as a miss."""
        try:
            raw = await self._backend.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except BACKEND_ERRORS as e:
            logger.warning(
                "cache_read_failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """
        Awaited write used by tooling.

        Returns:
            True when the backend accepted the write, False otherwise.
        """
        try:
            payload = json.dumps(value)
            await self._backend.set(key, payload, ex=ttl_seconds)
            return True
        except BACKEND_ERRORS as e:
            logger.warning(
                "cache_write_failed",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    def _schedule_write(self, key: str, value: Any, ttl_seconds: int) -> None:
        """
        Launch the write as a detached task.

        The caller's response is complete before the write is durable.
        The task is held in _pending so it is not garbage collected mid-flight.
        """
        task = asyncio.create_task(self.set(key, value, ttl_seconds))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every scheduled background write to finish."""
        if not self._pending:
            return
        logger.debug("cache_drain", pending=len(self._pending))
        await asyncio.gather(*list(self._pending), return_exceptions=True)

    # -----------------------------------------------------------------------
    # Maintenance
    # -----------------------------------------------------------------------

    async def delete(self, *keys: str) -> int:
        """Delete keys. Returns the number removed (0 on backend failure)."""
        if not keys:
            return 0
        try:
            return int(await self._backend.delete(*keys))
        except BACKEND_ERRORS as e:
            logger.warning("cache_delete_failed", count=len(keys), error=str(e))
            return 0

    async def scan_keys(self, pattern: str = "*") -> list[str]:
        """
        List keys matching pattern using SCAN (never KEYS).

        Unlike the request-path operations this raises on backend failure:
        maintenance tooling must not report an empty cache when the
        backend is simply down.
        """
        return [key async for key in self._backend.scan_iter(match=pattern)]

    async def ping(self) -> bool:
        """True when the backend answers PING."""
        try:
            return bool(await self._backend.ping())
        except BACKEND_ERRORS as e:
            logger.warning("cache_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Drain pending writes, then release the backend connection pool."""
        await self.drain()
        try:
            await self._backend.aclose()
        except BACKEND_ERRORS as e:
            logger.warning("cache_close_failed", error=str(e))
