"""Key/value cache with TTL and hash counters.

Redis is used when configured. Any backend failure is logged and the same
operation is served from an in-process store, so callers never see cache
errors. The in-process store evicts expired entries lazily on read and
sweeps the whole map on writes at most once per sweep interval. Both
backends hold JSON text, so a read always returns a fresh copy.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from kobi_gateway.config import settings
from kobi_gateway.domain.exceptions import CacheBackendError
from kobi_gateway.infrastructure.observability.metrics import cache_backend_failures_counter

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (RedisError, OSError)


@dataclass
class CacheEntry:
    payload: str  # JSON text, same encoding as the Redis path
    expires_at: float


async def backend_call(operation: str, key: str, awaitable: Awaitable) -> Any:
    """
    Await a shared-backend operation.

    Raises:
        CacheBackendError: Connection, timeout or protocol failure
    """
    try:
        return await awaitable
    except BACKEND_ERRORS as e:
        cache_backend_failures_counter.labels(operation=operation).inc()
        raise CacheBackendError(f"Cache backend {operation} failed for {key}: {e}") from e


def create_redis_client(url: str | None) -> Optional[aioredis.Redis]:
    """Build a Redis client from a URL; no URL means in-process mode"""
    if not url:
        return None
    return aioredis.Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=2.0,
        socket_connect_timeout=2.0,
    )


class CacheStore:
    """Cache for score results and usage analytics"""

    def __init__(
        self,
        redis_client: Optional[aioredis.Redis] = None,
        default_ttl: int | None = None,
        analytics_ttl: int | None = None,
        sweep_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._redis = redis_client
        self.default_ttl = default_ttl or settings.score_cache_ttl_seconds
        self.analytics_ttl = analytics_ttl or settings.analytics_ttl_seconds
        self.sweep_interval = (
            sweep_interval if sweep_interval is not None else settings.cache_sweep_interval_seconds
        )
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def backend(self) -> str:
        return "redis" if self._redis is not None else "in-memory"

    async def get(self, key: str) -> Any:
        """Return the cached value, or None when absent or expired"""
        if self._redis is not None:
            try:
                raw = await backend_call("get", key, self._redis.get(key))
            except CacheBackendError as e:
                logger.warning(f"{e}, using in-process fallback")
            else:
                if raw is None:
                    return None
                try:
                    return json.loads(raw)
                except ValueError as e:
                    logger.warning(f"Ignoring undecodable cache value for {key}: {e}")
                    return None

        return self._memory_get(key)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a JSON-serialisable value for ttl_seconds (default: score cache TTL)"""
        ttl = ttl_seconds or self.default_ttl
        payload = json.dumps(value)

        if self._redis is not None:
            try:
                await backend_call("set", key, self._redis.set(key, payload, ex=ttl))
                return
            except CacheBackendError as e:
                logger.warning(f"{e}, using in-process fallback")

        self._memory_set(key, payload, ttl)

    async def delete(self, key: str) -> None:
        if self._redis is not None:
            try:
                await backend_call("delete", key, self._redis.delete(key))
            except CacheBackendError as e:
                logger.warning(f"{e}, using in-process fallback")

        # Also drop any copy written while the backend was down
        with self._lock:
            self._entries.pop(key, None)

    async def increment_field(self, bucket: str, field: str, delta: int = 1) -> int:
        """Atomically add delta to a hash field and return the new total"""
        if self._redis is not None:
            try:
                return int(await backend_call("increment", bucket, self._redis.hincrby(bucket, field, delta)))
            except CacheBackendError as e:
                logger.warning(f"{e}, using in-process fallback")

        composite_key = f"{bucket}:{field}"
        with self._lock:
            now = self._clock()
            entry = self._entries.get(composite_key)
            current = json.loads(entry.payload) if entry is not None and now <= entry.expires_at else 0
            total = current + delta
            self._entries[composite_key] = CacheEntry(payload=json.dumps(total), expires_at=now + self.analytics_ttl)
        return total

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._entries)
        return {"backend": self.backend, "size": size}

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()

    def _memory_get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            payload = entry.payload
        return json.loads(payload)

    def _memory_set(self, key: str, payload: str, ttl: int) -> None:
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(payload=payload, expires_at=now + ttl)
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep(now)

    def _sweep(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
