# app/services/weather.py
# OpenWeatherMap One Call 3.0: one endpoint, sections selected through `exclude`.

from typing import Any, Dict, Optional, Tuple

from app.core.config import Settings
from app.models.dto import QueryKind

ONE_CALL_SECTIONS = ("current", "minutely", "hourly", "daily", "alerts")

# Section kept for each weather query; everything else is excluded.
KEPT_SECTION: Dict[QueryKind, str] = {
    QueryKind.CURRENT: "current",
    QueryKind.HOURLY: "hourly",
    QueryKind.DAILY: "daily",
    QueryKind.ALERTS: "alerts",
}

# Top-level field a payload must carry before it is trusted. The provider
# leaves out `alerts` entirely when nothing is active, so alerts have none.
REQUIRED_FIELD: Dict[QueryKind, Optional[str]] = {
    QueryKind.CURRENT: "current",
    QueryKind.HOURLY: "hourly",
    QueryKind.DAILY: "daily",
    QueryKind.ALERTS: None,
}


def exclusions(kind: QueryKind) -> str:
    kept = KEPT_SECTION[kind]
    return ",".join(s for s in ONE_CALL_SECTIONS if s != kept)


def build_one_call_request(kind: QueryKind, lat: str, lon: str, settings: Settings) -> Tuple[str, Dict[str, Any]]:
    """Returns (url, params) for a One Call request restricted to ``kind``."""
    params = {
        "lat": lat,
        "lon": lon,
        "exclude": exclusions(kind),
        "appid": settings.WEATHER_API_KEY,
        "units": settings.WEATHER_UNITS,
        "lang": settings.WEATHER_LANG,
    }
    return settings.OPENWEATHER_ONECALL_URL, params


def has_required_field(kind: QueryKind, payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    field = REQUIRED_FIELD[kind]
    return field is None or payload.get(field) is not None
