"""Weather client for the OpenWeatherMap current-weather API."""

import httpx
from pydantic import ValidationError

from ..errors import ConfigError, UpstreamError
from ..models import WeatherResult
from ..utils.config import WeatherConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)


class WeatherClient:
    """Fetch the current temperature for a city name."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: WeatherConfig,
        api_key: str,
    ) -> None:
        self._client = client
        self.config = config
        self.api_key = api_key

    async def current_temperature(self, city: str) -> float:
        """
        Return the current temperature in Celsius for ``city``.

        Raises:
            ConfigError: If no API key is configured. Checked before any call.
            UpstreamError: On transport failure, a non-2xx status, an
                undecodable body, or a payload without ``main.temp``.
        """
        if not self.api_key:
            raise ConfigError("OPENWEATHER_API_KEY not set")

        try:
            resp = await self._client.get(
                self.config.url,
                params={"q": city, "appid": self.api_key, "units": self.config.units},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Response text and URL are left out, the URL carries the API key
            logger.error("weather_http_error", status_code=e.response.status_code, city=city)
            raise UpstreamError(
                f"error getting weather info: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error("weather_request_error", city=city, error=type(e).__name__)
            raise UpstreamError(f"error getting weather info: {type(e).__name__}") from e

        try:
            result = WeatherResult.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(f"error decoding weather info: {e}") from e

        temperature = result.temperature
        if temperature is None:
            raise UpstreamError("error decoding weather info: response has no main.temp")

        logger.debug("weather_resolved", city=city, temperature=temperature)
        return temperature
