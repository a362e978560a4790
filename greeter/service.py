"""Greeting service: one geolocation call, one weather call, one greeting."""

import httpx

from .clients import GeolocationClient, WeatherClient
from .greeting import format_greeting, resolve_visitor_name
from .models import ClientInfo
from .utils.config import Settings
from .utils.logging import get_logger

logger = get_logger(__name__)


class GreetingService:
    """
    Build the greeting payload for a visitor.

    Owns the shared ``httpx.AsyncClient`` unless one is passed in. The
    client is created on first use and closed by :meth:`shutdown`.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.http.timeout)
        return self._client

    async def shutdown(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def greet(self, client_ip: str, visitor_name: str | None = None) -> ClientInfo:
        """
        Resolve the city, fetch its temperature and build the greeting.

        The weather call depends on the city, so a geolocation failure ends
        the request before the weather API is contacted.
        """
        client = self._get_client()
        geolocation = GeolocationClient(client, self.settings.geolocation)
        weather = WeatherClient(client, self.settings.weather, self.settings.openweather_api_key)

        city = await geolocation.lookup_city(client_ip)
        temperature = await weather.current_temperature(city)

        name = resolve_visitor_name(visitor_name, self.settings.default_visitor_name)
        greeting = format_greeting(name, temperature, city)
        logger.info("greeting_built", city=city, temperature=temperature)
        return ClientInfo(client_ip=client_ip, location=city, greeting=greeting)
