import logging
from typing import Optional

from app.core.config import Settings
from app.services.cache_aside import WeatherCacheService
from app.services.redis_client import CacheStore, create_cache_store
from app.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)


class ServiceContext:
    """
    Process-wide handles shared by all requests: one cache connection, one
    HTTP client and the cache-aside service built on them.

    Created once at startup (``start``) and drained at shutdown (``close``).
    """

    def __init__(
        self,
        settings: Settings,
        cache: Optional[CacheStore] = None,
        upstream: Optional[UpstreamClient] = None,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else create_cache_store(settings.REDIS_URL)
        self.upstream = upstream if upstream is not None else UpstreamClient.create(settings.UPSTREAM_TIMEOUT)
        self.weather = WeatherCacheService(settings, self.cache, self.upstream)

    async def start(self) -> None:
        logger.info("Opening cache connection")
        await self.cache.start()

    async def close(self) -> None:
        logger.info("Closing HTTP client and cache connection")
        await self.upstream.close()
        await self.cache.close()
