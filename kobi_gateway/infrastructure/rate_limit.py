"""Fixed-window rate limiter keyed by caller identity"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis.asyncio as aioredis

from kobi_gateway.domain.exceptions import CacheBackendError
from kobi_gateway.domain.models import RateLimitResult
from kobi_gateway.infrastructure.cache import backend_call

logger = logging.getLogger(__name__)


@dataclass
class RateWindow:
    count: int
    reset_at: float  # epoch seconds


class RateLimiter:
    """
    Admit or reject requests per identity within a fixed time window.

    The first request of a window opens it with count 1; each later request
    increments the count and is rejected once the count exceeds the limit.
    A request at or after reset_at opens a new window. Redis is tried first
    (SET NX EX + INCR in one transaction); on backend failure the in-process
    map applies the same rules.
    """

    def __init__(
        self,
        redis_client: Optional[aioredis.Redis] = None,
        sweep_interval: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self._redis = redis_client
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    async def allow(self, identity: str, limit: int, window_seconds: int) -> RateLimitResult:
        if self._redis is not None:
            try:
                return await backend_call("rate_limit", identity, self._redis_allow(identity, limit, window_seconds))
            except CacheBackendError as e:
                logger.warning(f"{e}, using in-process fallback")

        return self._memory_allow(identity, limit, window_seconds)

    async def _redis_allow(self, identity: str, limit: int, window_seconds: int) -> RateLimitResult:
        key = f"ratelimit:{identity}"
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, ex=window_seconds, nx=True)
            pipe.incr(key)
            pipe.ttl(key)
            _, count, ttl = await pipe.execute()

        reset_at = self._clock() + (ttl if ttl and ttl > 0 else window_seconds)
        return self._result(int(count), limit, reset_at)

    def _memory_allow(self, identity: str, limit: int, window_seconds: int) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            window = self._windows.get(identity)

            if window is None or now >= window.reset_at:
                window = RateWindow(count=1, reset_at=now + window_seconds)
                self._windows[identity] = window
                if now - self._last_sweep >= self.sweep_interval:
                    self._sweep(now)
            else:
                window.count += 1

            return self._result(window.count, limit, window.reset_at)

    def _sweep(self, now: float) -> None:
        stale = [k for k, w in self._windows.items() if now >= w.reset_at]
        for key in stale:
            del self._windows[key]
        self._last_sweep = now

    @staticmethod
    def _result(count: int, limit: int, reset_at: float) -> RateLimitResult:
        return RateLimitResult(
            allowed=count <= limit,
            limit=limit,
            remaining=max(0, limit - count),
            reset_at=reset_at,
        )
