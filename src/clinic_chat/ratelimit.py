from __future__ import annotations
from dataclasses import dataclass
import logging
import time

from redis.exceptions import RedisError

from .config import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset: float  # epoch seconds when the current window closes


class RateLimiter:
    name = "base"

    async def consume(self, key: str) -> RateLimitResult:
        raise NotImplementedError


class NoopRateLimiter(RateLimiter):
    """Used when no Redis is configured: every request is let through."""

    name = "noop"

    def __init__(self, limit: int = 20, window_seconds: int = 60):
        self.limit = limit
        self.window_seconds = window_seconds

    async def consume(self, key: str) -> RateLimitResult:
        return RateLimitResult(
            success=True,
            limit=self.limit,
            remaining=self.limit,
            reset=time.time() + self.window_seconds,
        )


class RedisRateLimiter(RateLimiter):
    """
    Fixed-window limiter: one counter per key and window, created with its TTL
    and INCR'd per request in a single MULTI/EXEC.

    Redis errors fail open: the request is allowed and a warning is logged.
    """

    name = "redis"

    def __init__(self, client, limit: int = 20, window_seconds: int = 60, prefix: str = "chat-kanai", clock=time.time):
        self.client = client
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix
        self.clock = clock

    def _key(self, key: str, window: int) -> str:
        return f"{self.prefix}:{key}:{window}"

    async def consume(self, key: str) -> RateLimitResult:
        now = self.clock()
        window = int(now // self.window_seconds)
        reset = (window + 1) * self.window_seconds
        redis_key = self._key(key, window)

        try:
            # SET NX creates the counter with its TTL; INCR keeps the TTL
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.set(redis_key, 0, ex=self.window_seconds, nx=True)
                pipe.incr(redis_key)
                _, count = await pipe.execute()
        except RedisError as e:
            logger.warning(f"Rate limiter store unavailable, allowing request: {e}")
            return RateLimitResult(success=True, limit=self.limit, remaining=self.limit, reset=reset)

        return RateLimitResult(
            success=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset=reset,
        )


def get_rate_limiter() -> RateLimiter:
    if settings.redis_url:
        import redis.asyncio as redis  # lazy import
        client = redis.from_url(settings.redis_url, decode_responses=True)
        logger.info("⏱️ Rate limiting backed by Redis")
        return RedisRateLimiter(
            client,
            limit=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
            prefix=settings.rate_limit_prefix,
        )
    logger.warning("REDIS_URL not set - rate limiting disabled (fail-open)")
    return NoopRateLimiter(limit=settings.rate_limit_max, window_seconds=settings.rate_limit_window_seconds)
