# app/services/cache_aside.py
"""Cache-aside resolution of weather and geocoding queries.

For each query: validate parameters, look the derived key up in the cache,
and only on a miss call the upstream provider, validate and normalize the
payload, then populate the cache with the TTL of the query kind.

A cache hit is returned as stored: entries may be up to one TTL old, the
store's own expiry is the only freshness control.
"""

import asyncio
import json
import math
from typing import Any, Dict, Optional

import structlog

from app.core.config import Settings
from app.core.errors import BadRequest, CacheStoreError, InvalidPayload
from app.models.dto import Query, QueryKind
from app.services.cache_keys import derive_key, required_params
from app.services.geocoding import GeocodingBackend, get_backend, normalize_geocode
from app.services.redis_client import CacheStore
from app.services.upstream import UpstreamClient
from app.services.weather import build_one_call_request, has_required_field

logger = structlog.get_logger(__name__)

COORDINATE_PARAMS = ("lat", "lon")


class WeatherCacheService:
    def __init__(
        self,
        settings: Settings,
        cache: CacheStore,
        upstream: UpstreamClient,
        geocoder: Optional[GeocodingBackend] = None,
    ):
        self.settings = settings
        self.cache = cache
        self.upstream = upstream
        self.geocoder = geocoder or get_backend(settings)
        self._in_flight: Dict[str, "asyncio.Future[Any]"] = {}

    def ttl_for(self, kind: QueryKind) -> int:
        if kind == QueryKind.CURRENT:
            return self.settings.CACHE_TTL_CURRENT
        return self.settings.CACHE_TTL_FORECAST

    async def resolve(self, query: Query) -> Any:
        """
        Returns the payload for ``query``, from cache when possible.

        Weather kinds return the provider's One Call JSON untouched;
        geocoding kinds return a list of LocationRecord dicts.

        Raises:
            BadRequest: a required parameter is missing or not a number.
            UpstreamError: or one of its subclasses, when the provider call
                fails or its payload does not validate. Nothing is cached then.
        """
        params = self._validate(query)
        key = derive_key(query.kind, params)

        cached = await self._read(key)
        if cached is not None:
            logger.info("cache_hit", key=key)
            return cached

        logger.info("cache_miss", key=key)
        if self.settings.CACHE_SINGLE_FLIGHT:
            return await self._single_flight(key, query.kind, params)
        return await self._fetch_and_populate(key, query.kind, params)

    @staticmethod
    def _validate(query: Query) -> Dict[str, str]:
        params = {}
        for name in required_params(query.kind):
            value = getattr(query, name)
            if value is None or not value.strip():
                if name == "city":
                    raise BadRequest("Please provide the city as a query parameter.")
                raise BadRequest("Please provide lat and lon as query parameters.")
            if name in COORDINATE_PARAMS:
                try:
                    number = float(value)
                except ValueError:
                    raise BadRequest(f"Query parameter {name} must be a number.")
                if not math.isfinite(number):
                    raise BadRequest(f"Query parameter {name} must be a finite number.")
            params[name] = value
        return params

    async def _single_flight(self, key: str, kind: QueryKind, params: Dict[str, str]) -> Any:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_populate(key, kind, params))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.info("single_flight_join", key=key)
        # A cancelled caller must not cancel the fetch other callers share.
        return await asyncio.shield(task)

    def _forget(self, key: str, task: "asyncio.Future[Any]") -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the outcome retrieved even if every waiter was cancelled.
        if not task.cancelled():
            task.exception()

    async def _fetch_and_populate(self, key: str, kind: QueryKind, params: Dict[str, str]) -> Any:
        payload = await self._fetch(kind, params)
        await self._write(key, payload, self.ttl_for(kind))
        return payload

    async def _fetch(self, kind: QueryKind, params: Dict[str, str]) -> Any:
        if kind.is_geocoding:
            return await self._geocode(kind, params)

        url, query_params = build_one_call_request(kind, params["lat"], params["lon"], self.settings)
        payload = await self.upstream.fetch(url, params=query_params)
        if not has_required_field(kind, payload):
            logger.error("invalid_payload", kind=kind.value)
            raise InvalidPayload("Upstream weather data is invalid.")
        return payload

    async def _geocode(self, kind: QueryKind, params: Dict[str, str]) -> Any:
        if kind == QueryKind.GEOCODE_FORWARD:
            url, query_params, headers = self.geocoder.forward_request(params["city"])
            raw = await self.upstream.fetch(url, params=query_params, headers=headers)
            records = normalize_geocode(raw, self.geocoder.provider)
        else:
            url, query_params, headers = self.geocoder.reverse_request(params["lat"], params["lon"])
            raw = await self.upstream.fetch(url, params=query_params, headers=headers)
            fallback = (float(params["lat"]), float(params["lon"]))
            records = normalize_geocode(raw, self.geocoder.provider, reverse=True, fallback=fallback)
        return [record.model_dump() for record in records]

    async def _read(self, key: str) -> Optional[Any]:
        try:
            raw = await self.cache.get(key)
        except CacheStoreError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache_entry_corrupt", key=key)
            return None

    async def _write(self, key: str, payload: Any, ttl: int) -> None:
        try:
            await self.cache.set(key, json.dumps(payload), ttl)
        except CacheStoreError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return
        logger.info("cache_populated", key=key, ttl=ttl)
