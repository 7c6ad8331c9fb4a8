import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from app.core.errors import (
    AuthFailure,
    InvalidPayload,
    NotFound,
    RateLimited,
    UpstreamError,
    UpstreamUnreachable,
)

logger = logging.getLogger(__name__)


class UpstreamClient:
    """
    Single outbound GET against a weather or geocoding provider.

    No retries: every failure is raised as the matching ``UpstreamError``
    subclass and the caller decides what to do with it.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._http = http_client

    @classmethod
    def create(cls, timeout: float) -> "UpstreamClient":
        return cls(httpx.AsyncClient(timeout=timeout))

    async def close(self) -> None:
        await self._http.aclose()

    async def fetch(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Returns the decoded JSON body of a 2xx response.

        Raises:
            UpstreamUnreachable: DNS, connect or timeout failure.
            AuthFailure: HTTP 401.
            NotFound: HTTP 404.
            RateLimited: HTTP 429.
            UpstreamError: any other non-2xx status.
            InvalidPayload: 2xx with a body that is not JSON.
        """
        # params carry the API key, only the bare URL is logged
        logger.info(f"API call: {url}")
        try:
            response = await self._http.get(url, params=params, headers=headers)
        except httpx.TransportError as e:
            logger.error(f"Upstream unreachable ({url}): {e!r}")
            raise UpstreamUnreachable() from e

        if not response.is_success:
            raise self._status_error(url, response)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Upstream returned non-JSON body ({url})")
            raise InvalidPayload() from e

    @staticmethod
    def _status_error(url: str, response: httpx.Response) -> UpstreamError:
        code = response.status_code
        logger.error(f"Upstream API error ({url}): {code} {response.reason_phrase}")
        if code == 401:
            return AuthFailure(upstream_status=code)
        if code == 404:
            return NotFound(upstream_status=code)
        if code == 429:
            return RateLimited(upstream_status=code)
        return UpstreamError(f"Upstream API error ({code}).", upstream_status=code)
