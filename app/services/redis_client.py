# app/services/redis_client.py
"""Cache stores for upstream responses.

``RedisCacheStore`` wraps redis.asyncio and is shared by every request for the
lifetime of the process. ``InMemoryCacheStore`` offers the same contract
without a server, for local runs without REDIS_URL and for tests.
"""
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.errors import CacheStoreError

logger = structlog.get_logger(__name__)


class CacheStore(Protocol):
    """Key-value store with per-entry expiry enforced by the store itself."""
    async def start(self) -> None: ...
    async def close(self) -> None: ...
    async def get(self, key: str) -> Optional[str]: ...
    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...


class RedisCacheStore:
    def __init__(self, url: str):
        if not url:
            raise ValueError("REDIS_URL is not set in the environment")
        self._redis = Redis.from_url(url, decode_responses=True)

    async def start(self) -> None:
        try:
            await self._redis.ping()
            logger.info("redis_connected")
        except RedisError as e:
            # Keep serving: reads degrade to cache misses until Redis is back.
            logger.error("redis_connect_failed", error=str(e))

    async def close(self) -> None:
        await self._redis.aclose()
        logger.info("redis_closed")

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise CacheStoreError(f"Redis GET failed for {key}: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            raise CacheStoreError(f"Redis SET failed for {key}: {e}") from e


class InMemoryCacheStore:
    """Process-local store. Expired entries are dropped when read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, str]] = {}

    async def start(self) -> None:
        logger.warning("cache_in_memory", detail="REDIS_URL not set, cache is process-local")

    async def close(self) -> None:
        self._entries.clear()

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left before ``key`` expires, or None when absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return max(0.0, entry[0] - self._clock())


def create_cache_store(redis_url: Optional[str]) -> CacheStore:
    if redis_url:
        return RedisCacheStore(redis_url)
    return InMemoryCacheStore()
