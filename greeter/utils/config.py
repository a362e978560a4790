"""Configuration management for Greeter using pydantic-settings."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class HttpConfig(BaseModel):
    """Outbound HTTP client configuration."""

    timeout: float = 10.0


class GeolocationConfig(BaseModel):
    """Geolocation endpoint configuration (ipapi.co)."""

    url: str = "https://ipapi.co/json/"
    # Used only when use_client_ip is on; {ip} is replaced with the caller's address
    client_ip_url: str = "https://ipapi.co/{ip}/json/"
    # Off: the endpoint geolocates whoever calls it, i.e. this server's egress IP
    use_client_ip: bool = False


class WeatherConfig(BaseModel):
    """Weather endpoint configuration (OpenWeatherMap current weather)."""

    url: str = "https://api.openweathermap.org/data/2.5/weather"
    units: str = "metric"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"
    file: str = ""  # empty = stdout only
    max_size_mb: int = 10
    backup_count: int = 3


class Settings(BaseSettings):
    """Main settings class that loads from YAML and environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GREETER_",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = "0.0.0.0"
    port: int = Field(default=8000, alias="PORT")
    openweather_api_key: str = Field(default="", alias="OPENWEATHER_API_KEY")
    default_visitor_name: str = Field(default="", alias="NAME")

    http: HttpConfig = Field(default_factory=HttpConfig)
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: str | Path | None = None) -> "Settings":
        """Load settings from an optional YAML file, falling back to the environment."""
        if config_path is None:
            possible_paths = [
                Path("config/settings.yaml"),
                Path("config/settings.local.yaml"),
            ]
            for path in possible_paths:
                if path.exists():
                    config_path = path
                    break

        config_data: dict[str, Any] = {}
        if config_path and Path(config_path).exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

        config_data = cls._expand_env_vars(config_data)

        try:
            instance = cls(**config_data)
        except Exception as e:
            raise ValueError(f"Invalid config: {e}") from e
        instance.validate()
        return instance

    def validate(self) -> None:
        """Validate critical config. Raises ValueError on failure."""
        errors: list[str] = []
        if not 0 < self.port < 65536:
            errors.append(f"port must be between 1 and 65535, got {self.port}")
        if self.http.timeout <= 0:
            errors.append("http.timeout must be positive")
        if self.logging.format not in ("json", "text"):
            errors.append("logging.format must be 'json' or 'text'")
        if self.logging.level.upper() not in LOG_LEVELS:
            errors.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {self.logging.level!r}")
        if "{ip}" not in self.geolocation.client_ip_url:
            errors.append("geolocation.client_ip_url must contain an {ip} placeholder")
        if errors:
            raise ValueError("Config validation failed: " + "; ".join(errors))

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in config values."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            # Expand ${VAR} patterns
            if data.startswith("${") and data.endswith("}"):
                env_var = data[2:-1]
                return os.environ.get(env_var, "")
            return data
        return data


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_yaml()
