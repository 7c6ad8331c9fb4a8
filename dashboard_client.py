"""Client side of the proxy, as used by the weather dashboard.

Every call is bounded by a 15 second timeout; a timed-out call is treated
like an unreachable backend. Reverse geocoding never fails: it degrades to a
"48.86°, 2.35°" style label so the dashboard always has something to show.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15.0


class DashboardError(Exception):
    """User-facing failure of a dashboard request."""


def coordinates_label(lat: float, lon: float) -> str:
    return f"{lat:.2f}°, {lon:.2f}°"


class WeatherDashboardClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "WeatherDashboardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: Dict[str, Any]) -> httpx.Response:
        try:
            return await self._http.get(path, params=params)
        except httpx.TimeoutException as e:
            raise DashboardError("The request timed out. Please check your internet connection.") from e
        except httpx.TransportError as e:
            raise DashboardError("Unable to reach the server. Check that the backend is running.") from e

    async def _get_weather(self, path: str, lat: float, lon: float, not_found: str) -> Any:
        response = await self._get(path, {"lat": lat, "lon": lon})
        if response.status_code == 404:
            raise DashboardError(not_found)
        if response.status_code == 500:
            raise DashboardError("Server error. Please try again later.")
        if not response.is_success:
            raise DashboardError(f"Error {response.status_code}: {response.reason_phrase}")
        return response.json()

    async def get_current_weather(self, lat: float, lon: float) -> Any:
        return await self._get_weather("/weather/current", lat, lon, "No weather data for this location.")

    async def get_hourly_forecast(self, lat: float, lon: float) -> Any:
        return await self._get_weather("/weather/hourly", lat, lon, "Hourly forecast not found.")

    async def get_daily_forecast(self, lat: float, lon: float) -> Any:
        return await self._get_weather("/weather/daily", lat, lon, "Daily forecast not found.")

    async def search_city(self, city_name: str) -> Dict[str, Any]:
        """Returns lat, lon, name, country and state of the best match."""
        if not city_name or not city_name.strip():
            raise DashboardError("Please enter a city name.")

        response = await self._get("/geocoding", {"city": city_name})
        if response.status_code == 400:
            raise DashboardError("Invalid request. Check the city name.")
        if response.status_code == 404:
            raise DashboardError(f'City "{city_name}" not found.')
        if response.status_code == 500:
            raise DashboardError("Server error. Please try again later.")
        if not response.is_success:
            raise DashboardError(f"Error {response.status_code}: {response.reason_phrase}")

        data = response.json()
        if not data:
            raise DashboardError(f'City "{city_name}" not found. Check the spelling.')
        location = data[0]
        return {key: location.get(key) for key in ("lat", "lon", "name", "country", "state")}

    async def get_city_name(self, lat: float, lon: float) -> str:
        """Label such as "Paris, Ile-de-France, FR", or a coordinate label."""
        fallback = coordinates_label(lat, lon)
        try:
            response = await self._get("/geocoding/reverse", {"lat": lat, "lon": lon})
            if not response.is_success:
                logger.warning(f"Reverse geocoding error {response.status_code}, using coordinates")
                return fallback
            data = response.json()
        except (DashboardError, ValueError) as e:
            logger.warning(f"Reverse geocoding failed ({e}), using coordinates")
            return fallback

        if not data:
            return fallback
        location = data[0]
        parts = [location.get(key) for key in ("name", "state", "country")]
        return ", ".join(part for part in parts if part) or fallback

    async def get_all_weather_data(self, lat: float, lon: float) -> Dict[str, Any]:
        current, hourly, daily = await asyncio.gather(
            self.get_current_weather(lat, lon),
            self.get_hourly_forecast(lat, lon),
            self.get_daily_forecast(lat, lon),
        )
        return {
            "current": current,
            "hourly": hourly,
            "daily": daily,
            "coordinates": {"lat": lat, "lon": lon},
        }


async def main(city: str, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    async with WeatherDashboardClient(base_url, transport=transport) as client:
        try:
            location = await client.search_city(city)
            data = await client.get_all_weather_data(location["lat"], location["lon"])
        except DashboardError as e:
            print(f"Error: {e}")
            return 1
        label = await client.get_city_name(location["lat"], location["lon"])

    current = data["current"].get("current", {})
    weather = current.get("weather") or [{}]
    print(f"{label}: {current.get('temp')}° {weather[0].get('description', '')}")
    print(f"Hourly entries: {len(data['hourly'].get('hourly', []))}")
    print(f"Daily entries: {len(data['daily'].get('daily', []))}")
    return 0


if __name__ == "__main__":
    import sys

    city_arg = sys.argv[1] if len(sys.argv) > 1 else "Paris"
    url_arg = sys.argv[2] if len(sys.argv) > 2 else "http://localhost:5000"
    sys.exit(asyncio.run(main(city_arg, url_arg)))
