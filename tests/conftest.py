"""Shared pytest fixtures: settings, fake providers and an in-memory cache."""

import copy
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from app.core.config import Settings
from app.services.cache_aside import WeatherCacheService
from app.services.redis_client import InMemoryCacheStore
from app.services.upstream import UpstreamClient


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    """Scripted upstream: one canned reply per URL path, every request recorded."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._replies: Dict[str, Tuple[int, Any, Optional[Exception]]] = {}

    def reply(self, path: str, json: Any = None, status_code: int = 200) -> None:
        self._replies[path] = (status_code, json, None)

    def fail(self, path: str, exc: Exception) -> None:
        self._replies[path] = (0, None, exc)

    def calls(self, path: Optional[str] = None) -> int:
        return len([r for r in self.requests if path is None or r.url.path == path])

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path not in self._replies:
            return httpx.Response(404, json={"message": "not scripted"})
        status_code, body, exc = self._replies[request.url.path]
        if exc is not None:
            raise exc
        return httpx.Response(status_code, json=copy.deepcopy(body))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENV="test",
        REDIS_URL=None,
        WEATHER_API_KEY="weather-key",
        GEOCODING_API_KEY="geo-key",
        GEOCODING_PROVIDER="nominatim",
        CACHE_TTL_CURRENT=300,
        CACHE_TTL_FORECAST=3600,
        CACHE_SINGLE_FLIGHT=False,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def upstream(provider):
    return UpstreamClient(httpx.AsyncClient(transport=provider.transport()))


@pytest.fixture
def service(settings, cache, upstream):
    return WeatherCacheService(settings, cache, upstream)
