from app.models.dto import QueryKind
from app.services.cache_keys import derive_key, required_params


def test_coordinate_keys_are_namespaced_by_kind():
    params = {"lat": "48.8566", "lon": "2.3522"}
    assert derive_key(QueryKind.CURRENT, params) == "weather:current:48.8566:2.3522"
    assert derive_key(QueryKind.HOURLY, params) == "weather:hourly:48.8566:2.3522"
    assert derive_key(QueryKind.DAILY, params) == "weather:daily:48.8566:2.3522"
    assert derive_key(QueryKind.ALERTS, params) == "weather:alerts:48.8566:2.3522"
    assert derive_key(QueryKind.GEOCODE_REVERSE, params) == "geocoding:reverse:48.8566:2.3522"


def test_keys_never_collide_across_kinds():
    params = {"lat": "1", "lon": "2", "city": "reverse:1:2"}
    keys = {derive_key(kind, params) for kind in QueryKind}
    assert len(keys) == len(QueryKind)


def test_forward_key_uses_city_verbatim():
    assert derive_key(QueryKind.GEOCODE_FORWARD, {"city": "Saint-Étienne"}) == "geocoding:forward:Saint-Étienne"


def test_same_inputs_same_key_and_no_numeric_canonicalization():
    a = derive_key(QueryKind.CURRENT, {"lat": "48.8566", "lon": "2.3522"})
    b = derive_key(QueryKind.CURRENT, {"lat": "48.8566", "lon": "2.3522"})
    c = derive_key(QueryKind.CURRENT, {"lat": "48.85660", "lon": "2.3522"})
    assert a == b
    assert a != c


def test_extra_params_are_ignored():
    key = derive_key(QueryKind.DAILY, {"lat": "1", "lon": "2", "units": "imperial"})
    assert key == "weather:daily:1:2"


def test_required_params():
    assert required_params(QueryKind.GEOCODE_FORWARD) == ("city",)
    assert required_params(QueryKind.CURRENT) == ("lat", "lon")
