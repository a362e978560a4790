"""Outbound API clients for Greeter."""

from .geolocation import GeolocationClient
from .weather import WeatherClient

__all__ = ["GeolocationClient", "WeatherClient"]
