from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol

import structlog
from redis import Redis
from redis.exceptions import RedisError

logger = structlog.get_logger()

# Above this many buckets, expired ones are dropped on the next check.
MAX_TRACKED_KEYS = 10_000


def parse_rate(rate: str) -> tuple[int, int]:
    """
    Parse formats like:
      - "30/minute"
      - "120/hour"
      - "10/second"
    Returns: (limit, window_seconds)
    """
    raw = rate.strip().lower()
    if "/" not in raw:
        raise ValueError(f"Invalid rate format: {rate}")

    limit_str, window_str = raw.split("/", 1)
    limit = int(limit_str)
    if limit < 1:
        raise ValueError(f"Invalid rate limit: {limit}")

    window_str = window_str.strip()
    if window_str in {"sec", "second", "seconds"}:
        return limit, 1
    if window_str in {"min", "minute", "minutes"}:
        return limit, 60
    if window_str in {"hour", "hours"}:
        return limit, 3600
    if window_str in {"day", "days"}:
        return limit, 86400

    raise ValueError(f"Invalid rate window: {window_str}")


class RateLimiter(Protocol):
    limit: int
    window_seconds: int

    def check(self, key: str) -> bool:
        """Record a request for ``key`` and return whether it is allowed."""
        ...


class InMemoryRateLimiter:
    """Per-key fixed window anchored at the bucket's first request.

    A bucket admits ``limit`` requests; the count starts over once a request
    arrives a full window after the bucket's first recorded request.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            if len(self._buckets) > MAX_TRACKED_KEYS:
                self._prune(now)

            bucket = self._buckets.get(key)
            if bucket is None or now - bucket[0] >= self.window_seconds:
                self._buckets[key] = (now, 1)
                return True

            started, count = bucket
            if count >= self.limit:
                return False

            self._buckets[key] = (started, count + 1)
            return True

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, (started, _) in self._buckets.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._buckets[key]

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


class RedisRateLimiter:
    """Same window semantics shared across processes via SET NX EX + INCR."""

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        redis_factory: Callable[[], Redis],
        prefix: str = "rl:chat",
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._redis_factory = redis_factory
        self._prefix = prefix

    def check(self, key: str) -> bool:
        redis_key = f"{self._prefix}:{key}"
        try:
            pipe = self._redis_factory().pipeline()
            # The first hit anchors the window; INCR keeps the TTL.
            pipe.set(redis_key, 0, ex=self.window_seconds, nx=True)
            pipe.incr(redis_key)
            _, count = pipe.execute()
        except RedisError:
            # Fail open if Redis is unavailable (don't take down the relay)
            logger.warning("rate_limit_backend_unavailable", key=key)
            return True
        return int(count) <= self.limit


def build_rate_limiter(rate: str, backend: str = "memory") -> RateLimiter:
    limit, window_seconds = parse_rate(rate)
    selected = backend.strip().lower()
    if selected == "memory":
        return InMemoryRateLimiter(limit, window_seconds)
    if selected == "redis":
        from volunteer_hub.redis_client import get_redis

        return RedisRateLimiter(limit, window_seconds, get_redis)
    raise ValueError(f"unsupported rate limit backend: {backend}")
