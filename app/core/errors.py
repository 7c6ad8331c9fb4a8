"""
Error taxonomy shared by the cache-aside pipeline and the HTTP layer.

Every failure the proxy can report to a browser is a ``WeatherProxyError``
carrying a machine-readable code, a human-readable message and the HTTP
status it is served with.
"""

from typing import Optional

from fastapi import status

from app.models.dto import ErrorResponse


class WeatherProxyError(Exception):
    """Base exception for client-visible failures."""

    code = "WEATHER_PROXY_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unable to retrieve data from the upstream API."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.code, detail=self.message)


class BadRequest(WeatherProxyError):
    code = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing or invalid query parameters."


class UpstreamError(WeatherProxyError):
    """Upstream answered with a status we have no dedicated mapping for."""

    code = "UPSTREAM_ERROR"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream API error."

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message)


class UpstreamUnreachable(UpstreamError):
    code = "UPSTREAM_UNREACHABLE"
    default_message = "Upstream API is unreachable."


class NotFound(UpstreamError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No data found for this query."


class RateLimited(UpstreamError):
    code = "RATE_LIMITED"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Upstream API rate limit reached."


class AuthFailure(UpstreamError):
    # Served as a generic 500 so credential state never reaches the browser.
    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unable to retrieve data from the upstream API."


class InvalidPayload(UpstreamError):
    code = "INVALID_PAYLOAD"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream API returned invalid data."


class CacheStoreError(Exception):
    """Backing cache store is unreachable. Never shown to clients."""
