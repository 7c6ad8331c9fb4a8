# app/services/geocoding.py
# Forward (city -> coordinates) and reverse (coordinates -> place) geocoding
# against Nominatim or the OpenWeatherMap Geocoding API. Both providers are
# normalized to the LocationRecord shape the dashboard consumes.

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.core.config import Settings
from app.core.errors import InvalidPayload
from app.models.dto import LocationRecord

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown location"

# Administrative name fields, most specific first.
ADMIN_NAME_FIELDS = ("city", "town", "village", "municipality")

Request = Tuple[str, Dict[str, Any], Dict[str, str]]


class GeocodingProvider(str, Enum):
    NOMINATIM = "nominatim"
    OPENWEATHER = "openweather"


def _first_present(source: Mapping[str, Any], fields) -> str:
    for field in fields:
        value = source.get(field)
        if value:
            return str(value)
    return ""


def _coordinate(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidPayload("Geocoding result without usable coordinates.")


def _entries(payload: Any) -> List[Mapping[str, Any]]:
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise InvalidPayload("Geocoding lookup did not return a list of places.")
    return payload


def _mapping(item: Mapping[str, Any], field: str) -> Mapping[str, Any]:
    value = item.get(field) or {}
    if not isinstance(value, dict):
        raise InvalidPayload(f"Geocoding result field {field!r} is not an object.")
    return value


def _unknown(fallback: Optional[Tuple[float, float]]) -> LocationRecord:
    lat, lon = fallback if fallback else (0.0, 0.0)
    return LocationRecord(name=UNKNOWN_LOCATION, lat=lat, lon=lon)


class GeocodingBackend:
    """Request building and payload normalization for one provider."""

    provider: GeocodingProvider

    def __init__(self, settings: Settings):
        self.settings = settings

    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.settings.GEOCODING_USER_AGENT}

    def forward_request(self, city: str) -> Request:
        raise NotImplementedError

    def reverse_request(self, lat: str, lon: str) -> Request:
        raise NotImplementedError

    @classmethod
    def normalize_forward(cls, payload: Any) -> List[LocationRecord]:
        raise NotImplementedError

    @classmethod
    def normalize_reverse(cls, payload: Any, fallback: Optional[Tuple[float, float]] = None) -> List[LocationRecord]:
        raise NotImplementedError


class NominatimBackend(GeocodingBackend):
    """OpenStreetMap Nominatim, keyless but requires a descriptive User-Agent."""

    provider = GeocodingProvider.NOMINATIM

    def forward_request(self, city: str) -> Request:
        params = {"q": city, "format": "json", "limit": 1, "addressdetails": 1, "namedetails": 1}
        return f"{self.settings.NOMINATIM_URL}/search", params, self.headers()

    def reverse_request(self, lat: str, lon: str) -> Request:
        params = {"format": "json", "lat": lat, "lon": lon, "zoom": 10, "addressdetails": 1}
        return f"{self.settings.NOMINATIM_URL}/reverse", params, self.headers()

    @staticmethod
    def _local_names(item: Mapping[str, Any]) -> Dict[str, str]:
        # namedetails: {"name": "Paris", "name:de": "Paris", "name:ru": "Париж", ...}
        details = _mapping(item, "namedetails")
        return {
            key.split(":", 1)[1]: str(value)
            for key, value in details.items()
            if key.startswith("name:") and value
        }

    @staticmethod
    def _record(item: Mapping[str, Any], name: str) -> LocationRecord:
        address = _mapping(item, "address")
        return LocationRecord(
            name=name,
            local_names=NominatimBackend._local_names(item),
            lat=_coordinate(item.get("lat")),
            lon=_coordinate(item.get("lon")),
            country=str(address.get("country_code") or "").upper(),
            state=_first_present(address, ("state", "region")),
        )

    @classmethod
    def normalize_forward(cls, payload: Any) -> List[LocationRecord]:
        records = []
        for item in _entries(payload):
            address = _mapping(item, "address")
            name = _first_present(address, ADMIN_NAME_FIELDS) or item.get("name") or ""
            if not name and item.get("display_name"):
                name = item["display_name"].split(",")[0].strip()
            records.append(cls._record(item, name))
        return records

    @classmethod
    def normalize_reverse(cls, payload: Any, fallback: Optional[Tuple[float, float]] = None) -> List[LocationRecord]:
        if not isinstance(payload, dict):
            raise InvalidPayload("Reverse geocoding did not return an object.")
        # Nominatim answers 200 {"error": "Unable to geocode"} over oceans and the like.
        if "error" in payload:
            logger.info(f"Reverse geocoding unresolved: {payload['error']}")
            return [_unknown(fallback)]
        address = _mapping(payload, "address")
        name = _first_present(address, ADMIN_NAME_FIELDS) or UNKNOWN_LOCATION
        return [cls._record(payload, name)]


class OpenWeatherGeoBackend(GeocodingBackend):
    """OpenWeatherMap Geocoding API 1.0, keyed by GEOCODING_API_KEY."""

    provider = GeocodingProvider.OPENWEATHER

    def forward_request(self, city: str) -> Request:
        params = {"q": city, "limit": 1, "appid": self.settings.GEOCODING_API_KEY}
        return f"{self.settings.OPENWEATHER_GEO_URL}/direct", params, self.headers()

    def reverse_request(self, lat: str, lon: str) -> Request:
        params = {"lat": lat, "lon": lon, "limit": 1, "appid": self.settings.GEOCODING_API_KEY}
        return f"{self.settings.OPENWEATHER_GEO_URL}/reverse", params, self.headers()

    @staticmethod
    def _record(item: Mapping[str, Any], name: str) -> LocationRecord:
        local_names = _mapping(item, "local_names")
        return LocationRecord(
            name=name,
            local_names={k: v for k, v in local_names.items() if isinstance(v, str)},
            lat=_coordinate(item.get("lat")),
            lon=_coordinate(item.get("lon")),
            country=str(item.get("country") or "").upper(),
            state=str(item.get("state") or ""),
        )

    @classmethod
    def normalize_forward(cls, payload: Any) -> List[LocationRecord]:
        return [
            cls._record(item, _first_present(item, ADMIN_NAME_FIELDS + ("name",)))
            for item in _entries(payload)
        ]

    @classmethod
    def normalize_reverse(cls, payload: Any, fallback: Optional[Tuple[float, float]] = None) -> List[LocationRecord]:
        entries = _entries(payload)
        if not entries:
            return [_unknown(fallback)]
        # The `name` field here is already the locality the point falls in.
        records = []
        for item in entries:
            name = _first_present(item, ADMIN_NAME_FIELDS + ("name",)) or UNKNOWN_LOCATION
            records.append(cls._record(item, name))
        return records


BACKENDS = {
    GeocodingProvider.NOMINATIM: NominatimBackend,
    GeocodingProvider.OPENWEATHER: OpenWeatherGeoBackend,
}


def get_backend(settings: Settings) -> GeocodingBackend:
    try:
        provider = GeocodingProvider(settings.GEOCODING_PROVIDER.lower())
    except ValueError:
        raise ValueError(f"Unknown GEOCODING_PROVIDER: {settings.GEOCODING_PROVIDER!r}")
    return BACKENDS[provider](settings)


def normalize_geocode(
    payload: Any,
    provider: GeocodingProvider,
    reverse: bool = False,
    fallback: Optional[Tuple[float, float]] = None,
) -> List[LocationRecord]:
    """
    Converts a raw provider payload into canonical location records.

    Args:
        payload: Decoded JSON body returned by the provider.
        provider: Which provider produced ``payload``.
        reverse: True for coordinates -> place lookups.
        fallback: Queried (lat, lon), used for the "unknown" record when a
            reverse lookup resolves nothing.

    Returns:
        Possibly empty list for forward lookups; exactly one record per
        provider result for reverse lookups, never empty.

    Raises:
        InvalidPayload: The payload does not have the provider's shape.
    """
    backend = BACKENDS[GeocodingProvider(provider)]
    if not reverse:
        return backend.normalize_forward(payload)
    return backend.normalize_reverse(payload, fallback)
