"""Geolocation client for ipapi.co."""

import ipaddress

import httpx
from pydantic import ValidationError

from ..errors import UpstreamError
from ..models import GeolocationResult
from ..utils.config import GeolocationConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)


class GeolocationClient:
    """
    Resolve an approximate city through the ipapi.co JSON endpoint.

    By default the endpoint is called without an address, so ipapi.co
    geolocates the caller, which is this server's egress IP rather than the
    visitor's. Set ``geolocation.use_client_ip`` to look up the visitor's
    public address instead.
    """

    def __init__(self, client: httpx.AsyncClient, config: GeolocationConfig) -> None:
        self._client = client
        self.config = config

    def _url_for(self, client_ip: str) -> str:
        if not self.config.use_client_ip or not client_ip:
            return self.config.url
        try:
            address = ipaddress.ip_address(client_ip)
        except ValueError:
            logger.warning("geolocation_invalid_client_ip", client_ip=client_ip)
            return self.config.url
        if not address.is_global:
            # Private and loopback addresses cannot be geolocated
            return self.config.url
        return self.config.client_ip_url.format(ip=address)

    async def lookup_city(self, client_ip: str = "") -> str:
        """
        Return the city name for the current lookup.

        Raises:
            UpstreamError: On transport failure, a non-2xx status, an
                undecodable body, or a payload without a city.
        """
        url = self._url_for(client_ip)
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("geolocation_http_error", status_code=e.response.status_code)
            raise UpstreamError(
                f"error getting IP info: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error("geolocation_request_error", error=str(e) or type(e).__name__)
            raise UpstreamError(f"error getting IP info: {str(e) or type(e).__name__}") from e

        try:
            result = GeolocationResult.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(f"error decoding IP info: {e}") from e

        if result.error:
            raise UpstreamError(f"error getting IP info: {result.reason or 'lookup failed'}")
        if not result.city:
            raise UpstreamError("error decoding IP info: response has no city")

        logger.debug("geolocation_resolved", city=result.city)
        return result.city
