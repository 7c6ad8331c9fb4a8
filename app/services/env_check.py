# app/services/env_check.py
# Pre-start checks: configuration present, Redis reachable, provider keys accepted.

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import Settings

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {"your_openweather_api_key_here", "your_geocoding_api_key_here"}

# Paris, used as a known-good sample location.
SAMPLE_LAT, SAMPLE_LON = "48.8566", "2.3522"


@dataclass
class CheckReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    passed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _key_is_set(value: Optional[str]) -> bool:
    return bool(value) and value not in PLACEHOLDER_KEYS


def check_variables(settings: Settings, report: CheckReport) -> None:
    for name in ("WEATHER_API_KEY", "GEOCODING_API_KEY"):
        if _key_is_set(getattr(settings, name)):
            report.passed.append(f"{name}: set")
        else:
            report.errors.append(f"{name} is not set or is a placeholder")
    if settings.REDIS_URL:
        report.passed.append("REDIS_URL: set")
    else:
        report.errors.append("REDIS_URL is not set")


async def check_redis(settings: Settings, report: CheckReport) -> None:
    if not settings.REDIS_URL:
        return
    try:
        client = Redis.from_url(settings.REDIS_URL)
    except ValueError as e:
        report.errors.append(f"Redis connection: FAILED - invalid REDIS_URL ({e})")
        return
    try:
        await client.ping()
        report.passed.append("Redis connection: OK")
    except RedisError as e:
        report.errors.append(f"Redis connection: FAILED - {e}")
    finally:
        await client.aclose()


async def check_weather_api(settings: Settings, http: httpx.AsyncClient, report: CheckReport) -> None:
    params = {
        "lat": SAMPLE_LAT,
        "lon": SAMPLE_LON,
        "exclude": "minutely,hourly,daily,alerts",
        "appid": settings.WEATHER_API_KEY,
        "units": settings.WEATHER_UNITS,
    }
    try:
        response = await http.get(settings.OPENWEATHER_ONECALL_URL, params=params)
    except httpx.TransportError as e:
        report.errors.append(f"OpenWeatherMap API: FAILED - {e!r}")
        return
    if response.is_success:
        report.passed.append("OpenWeatherMap API: OK")
    elif response.status_code == 401:
        report.errors.append("OpenWeatherMap API: invalid API key")
    elif response.status_code == 429:
        report.warnings.append("OpenWeatherMap API: request limit reached")
    else:
        report.errors.append(f"OpenWeatherMap API: error {response.status_code}")


async def check_geocoding_api(settings: Settings, http: httpx.AsyncClient, report: CheckReport) -> None:
    params = {"q": "Paris", "limit": 1, "appid": settings.GEOCODING_API_KEY}
    try:
        response = await http.get(f"{settings.OPENWEATHER_GEO_URL}/direct", params=params)
    except httpx.TransportError as e:
        report.errors.append(f"Geocoding API: FAILED - {e!r}")
        return
    if response.is_success:
        try:
            body = response.json()
        except ValueError:
            report.errors.append("Geocoding API: response is not valid JSON")
            return
        if body:
            report.passed.append("Geocoding API: OK")
        else:
            report.warnings.append("Geocoding API: no result returned")
    elif response.status_code == 401:
        report.errors.append("Geocoding API: invalid API key")
    elif response.status_code == 429:
        report.warnings.append("Geocoding API: request limit reached")
    else:
        report.errors.append(f"Geocoding API: error {response.status_code}")


async def run_checks(settings: Settings, http: Optional[httpx.AsyncClient] = None) -> CheckReport:
    report = CheckReport()
    check_variables(settings, report)
    await check_redis(settings, report)

    owns_client = http is None
    http = http or httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT)
    try:
        await check_weather_api(settings, http, report)
        await check_geocoding_api(settings, http, report)
    finally:
        if owns_client:
            await http.aclose()
    return report
