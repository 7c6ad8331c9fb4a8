"""
Tests for the HTTP surface of the proxy.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.context import ServiceContext
from app.main import create_app
from app.api.routes import WEBSOCKET_GREETING
from app.models.dto import ErrorEnvelope
from app.services.redis_client import InMemoryCacheStore

from payloads import ONE_CALL_CURRENT, ONE_CALL_DAILY, NOMINATIM_REVERSE_PARIS, NOMINATIM_SEARCH_PARIS

ONE_CALL = "/data/3.0/onecall"
PARIS = {"lat": "48.8566", "lon": "2.3522"}


@pytest.fixture
def client(settings, cache, upstream):
    context = ServiceContext(settings, cache=cache, upstream=upstream)
    with TestClient(create_app(settings, context=context)) as client:
        yield client


class TestMisc:
    def test_ping(self, client):
        response = client.get("/ping")
        assert response.status_code == 200
        assert response.json() == {"message": "pong"}

    def test_request_id_header(self, client):
        response = client.get("/ping", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
        assert client.get("/ping").headers["X-Request-ID"]

    def test_websocket_greeting(self, client):
        with client.websocket_connect("/") as websocket:
            assert websocket.receive_json() == WEBSOCKET_GREETING

    def test_cors_headers(self, client):
        response = client.get("/ping", headers={"Origin": "http://localhost:5173"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_default_context_lifecycle(self, settings):
        app = create_app(settings)
        with TestClient(app) as client:
            assert client.get("/ping").status_code == 200
            assert isinstance(app.state.context.cache, InMemoryCacheStore)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seconds", [15.0, 4.5])
    async def test_upstream_timeout_follows_configuration(self, settings, seconds):
        settings.UPSTREAM_TIMEOUT = seconds
        context = ServiceContext(settings)
        try:
            assert context.upstream._http.timeout == httpx.Timeout(seconds)
        finally:
            await context.close()

    def test_default_upstream_timeout(self):
        assert Settings.model_fields["UPSTREAM_TIMEOUT"].default == 15.0

    def test_error_schema_matches_error_body(self, client, provider):
        openapi = client.get("/openapi.json").json()
        schemas = openapi["components"]["schemas"]
        responses = openapi["paths"]["/weather/current"]["get"]["responses"]
        assert responses["502"]["content"]["application/json"]["schema"]["$ref"] == "#/components/schemas/ErrorEnvelope"
        assert schemas["ErrorEnvelope"]["required"] == ["detail"]

        body = client.get("/weather/current").json()
        assert ErrorEnvelope.model_validate(body).detail.error == "BAD_REQUEST"


class TestWeatherRoutes:
    @pytest.mark.parametrize(
        "path, payload",
        [("/weather/current", ONE_CALL_CURRENT), ("/weather/daily", ONE_CALL_DAILY)],
    )
    def test_weather_is_proxied_then_cached(self, client, provider, path, payload):
        provider.reply(ONE_CALL, payload)

        first = client.get(path, params=PARIS)
        second = client.get(path, params=PARIS)

        assert first.status_code == second.status_code == 200
        assert first.content == second.content
        assert first.json() == payload
        assert provider.calls() == 1

    def test_hourly_and_alerts_routes(self, client, provider):
        provider.reply(ONE_CALL, {"lat": 48.8566, "lon": 2.3522, "hourly": [{"dt": 1, "temp": 10.0}]})
        assert client.get("/weather/hourly", params=PARIS).status_code == 200
        assert client.get("/weather/alerts", params=PARIS).status_code == 200
        assert provider.requests[-1].url.params["exclude"] == "current,minutely,hourly,daily"

    @pytest.mark.parametrize("params", [{}, {"lat": "48.8566"}, {"lon": "2.3522"}, {"lat": "x", "lon": "2"}])
    def test_missing_coordinates(self, client, provider, params):
        response = client.get("/weather/current", params=params)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "BAD_REQUEST"
        assert provider.calls() == 0

    @pytest.mark.parametrize(
        "upstream_status, status_code, error",
        [
            (401, 500, "INTERNAL_ERROR"),
            (404, 404, "NOT_FOUND"),
            (429, 429, "RATE_LIMITED"),
            (500, 502, "UPSTREAM_ERROR"),
        ],
    )
    def test_upstream_error_mapping(self, client, provider, upstream_status, status_code, error):
        provider.reply(ONE_CALL, {"cod": upstream_status, "message": "Invalid API key"}, status_code=upstream_status)

        response = client.get("/weather/current", params=PARIS)

        assert response.status_code == status_code
        body = response.json()["detail"]
        assert body["error"] == error
        assert "API key" not in body["detail"]

    def test_unreachable_upstream(self, client, provider):
        provider.fail(ONE_CALL, httpx.ConnectTimeout("timed out"))
        response = client.get("/weather/current", params=PARIS)
        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "UPSTREAM_UNREACHABLE"

    def test_invalid_payload(self, client, provider):
        provider.reply(ONE_CALL, {"lat": 48.8566, "lon": 2.3522})
        response = client.get("/weather/current", params=PARIS)
        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "INVALID_PAYLOAD"


class TestGeocodingRoutes:
    def test_forward(self, client, provider):
        provider.reply("/search", NOMINATIM_SEARCH_PARIS)

        response = client.get("/geocoding", params={"city": "Paris"})

        assert response.status_code == 200
        location = response.json()[0]
        assert location["name"] == "Paris"
        assert location["country"] == "FR"
        assert location["state"] == "Île-de-France"

    def test_forward_requires_city(self, client):
        response = client.get("/geocoding")
        assert response.status_code == 400

    def test_forward_unknown_city(self, client, provider):
        provider.reply("/search", [])
        response = client.get("/geocoding", params={"city": "Atlantis"})
        assert response.status_code == 200
        assert response.json() == []

    def test_reverse(self, client, provider):
        provider.reply("/reverse", NOMINATIM_REVERSE_PARIS)
        response = client.get("/geocoding/reverse", params=PARIS)
        assert response.status_code == 200
        assert response.json()[0]["name"] == "Paris"

    def test_forward_malformed_namedetails(self, client, provider):
        provider.reply("/search", [{"lat": "48.85", "lon": "2.35", "name": "Paris", "namedetails": ["bad"]}])
        response = client.get("/geocoding", params={"city": "Paris"})
        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "INVALID_PAYLOAD"

    def test_reverse_rate_limited(self, client, provider):
        provider.reply("/reverse", {}, status_code=429)
        response = client.get("/geocoding/reverse", params=PARIS)
        assert response.status_code == 429
