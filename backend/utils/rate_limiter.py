"""
Sliding-window rate limiting for mutating endpoints.
Uses Redis when REDIS_URL is configured, in-process memory otherwise.
"""
import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

import redis.asyncio as redis
from fastapi import HTTPException, Request

from . import client_ip
from .config import RATE_LIMIT_WINDOW, REDIS_URL

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Rate limiter keyed by an arbitrary string (client IP + endpoint).
    Falls back to memory for a request if Redis errors.
    """

    def __init__(self, redis_url: Optional[str] = None, window: int = RATE_LIMIT_WINDOW):
        self._window = window
        self._memory_store: Dict[str, List[float]] = defaultdict(list)
        self._redis_client: Optional[redis.Redis] = None
        if redis_url:
            self._redis_client = redis.from_url(
                redis_url,
                encoding='utf-8',
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            logger.info("Rate limiter using Redis")

    @property
    def is_redis_enabled(self) -> bool:
        return self._redis_client is not None

    async def check(self, key: str, max_requests: int, window: Optional[int] = None) -> bool:
        """
        Record a request for ``key``.

        Returns:
            True if the request is allowed, False if the window is full
        """
        window = window or self._window
        if self._redis_client is not None:
            try:
                return await self._check_redis(key, max_requests, window)
            except redis.RedisError as exc:
                logger.warning("Redis rate limit check failed, using memory: %s", exc)
        return self._check_memory(key, max_requests, window)

    async def _check_redis(self, key: str, max_requests: int, window: int) -> bool:
        now = time.time()
        redis_key = f"ratelimit:{key}"

        await self._redis_client.zremrangebyscore(redis_key, 0, now - window)
        if await self._redis_client.zcard(redis_key) >= max_requests:
            return False

        await self._redis_client.zadd(redis_key, {str(now): now})
        await self._redis_client.expire(redis_key, window + 1)
        return True

    def _check_memory(self, key: str, max_requests: int, window: int) -> bool:
        now = time.time()
        hits = [t for t in self._memory_store[key] if now - t < window]
        if len(hits) >= max_requests:
            self._memory_store[key] = hits
            return False
        hits.append(now)
        self._memory_store[key] = hits
        return True

    async def reset(self, key: Optional[str] = None):
        """Forget recorded requests for one key, or for all keys"""
        if self._redis_client is not None:
            if key:
                await self._redis_client.delete(f"ratelimit:{key}")
            else:
                async for redis_key in self._redis_client.scan_iter(match="ratelimit:*"):
                    await self._redis_client.delete(redis_key)
        if key:
            self._memory_store.pop(key, None)
        else:
            self._memory_store.clear()


# Global rate limiter instance
rate_limiter = RateLimiter(REDIS_URL)


def rate_limit(scope: str, max_requests: int):
    """Build a FastAPI dependency enforcing ``max_requests`` per window for ``scope``"""

    async def dependency(request: Request):
        key = f"{client_ip(request)}:{scope}"
        if not await rate_limiter.check(key, max_requests):
            logger.warning("Rate limit exceeded for %s", key)
            raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")

    return dependency
