"""Canned provider payloads, trimmed copies of real OpenWeatherMap and Nominatim answers."""

ONE_CALL_CURRENT = {
    "lat": 48.8566,
    "lon": 2.3522,
    "timezone": "Europe/Paris",
    "timezone_offset": 7200,
    "current": {
        "dt": 1760868000,
        "temp": 14.3,
        "feels_like": 13.8,
        "humidity": 77,
        "weather": [{"id": 803, "main": "Clouds", "description": "nuageux", "icon": "04d"}],
    },
}

ONE_CALL_DAILY = {
    "lat": 48.8566,
    "lon": 2.3522,
    "timezone": "Europe/Paris",
    "timezone_offset": 7200,
    "daily": [
        {"dt": 1760868000, "temp": {"min": 9.1, "max": 16.4}, "pop": 0.2},
        {"dt": 1760954400, "temp": {"min": 8.4, "max": 15.0}, "pop": 0.6},
    ],
}

NOMINATIM_SEARCH_PARIS = [
    {
        "place_id": 88066702,
        "lat": "48.8534951",
        "lon": "2.3483915",
        "name": "Paris",
        "display_name": "Paris, Île-de-France, France métropolitaine, France",
        "address": {
            "city": "Paris",
            "state": "Île-de-France",
            "region": "France métropolitaine",
            "country": "France",
            "country_code": "fr",
        },
        "namedetails": {"name": "Paris", "name:en": "Paris", "name:ru": "Париж"},
    }
]

OPENWEATHER_DIRECT_PARIS = [
    {
        "name": "Paris",
        "local_names": {"fr": "Paris", "en": "Paris", "ru": "Париж"},
        "lat": 48.8588897,
        "lon": 2.3200410217200766,
        "country": "FR",
        "state": "Ile-de-France",
    }
]

NOMINATIM_REVERSE_PARIS = {
    "place_id": 88066702,
    "lat": "48.8566",
    "lon": "2.3522",
    "display_name": "Paris, Île-de-France, France métropolitaine, France",
    "address": {"city": "Paris", "state": "Île-de-France", "country": "France", "country_code": "fr"},
}


