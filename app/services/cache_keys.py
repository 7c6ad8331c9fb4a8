from typing import Dict, Mapping, Tuple

from app.models.dto import QueryKind

# Namespace prefix and ordered parameter names per query kind.
KEY_LAYOUT: Dict[QueryKind, Tuple[str, Tuple[str, ...]]] = {
    QueryKind.CURRENT: ("weather:current", ("lat", "lon")),
    QueryKind.HOURLY: ("weather:hourly", ("lat", "lon")),
    QueryKind.DAILY: ("weather:daily", ("lat", "lon")),
    QueryKind.ALERTS: ("weather:alerts", ("lat", "lon")),
    QueryKind.GEOCODE_FORWARD: ("geocoding:forward", ("city",)),
    QueryKind.GEOCODE_REVERSE: ("geocoding:reverse", ("lat", "lon")),
}


def required_params(kind: QueryKind) -> Tuple[str, ...]:
    return KEY_LAYOUT[kind][1]


def derive_key(kind: QueryKind, params: Mapping[str, str]) -> str:
    """
    Builds the cache key for a query, e.g. ``weather:current:48.8566:2.3522``.

    Values are used verbatim: ``48.8566`` and ``48.85660`` yield different
    keys, so callers must send coordinates in a consistent textual form to
    get cache hits.
    """
    prefix, names = KEY_LAYOUT[kind]
    return ":".join([prefix] + [str(params[name]) for name in names])
