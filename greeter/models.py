"""Request-scoped data models: the response payload and typed upstream views."""

from pydantic import BaseModel


class ClientInfo(BaseModel):
    """Response payload for /api/hello."""

    client_ip: str
    location: str
    greeting: str


class GeolocationResult(BaseModel):
    """The parts of an ipapi.co response we use. Other fields are ignored."""

    city: str | None = None
    # ipapi.co reports failed lookups in-band with HTTP 200
    error: bool = False
    reason: str | None = None


class WeatherMain(BaseModel):
    temp: float | None = None


class WeatherResult(BaseModel):
    """The parts of an OpenWeatherMap current-weather response we use."""

    main: WeatherMain | None = None

    @property
    def temperature(self) -> float | None:
        return self.main.temp if self.main else None
