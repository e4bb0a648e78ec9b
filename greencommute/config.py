"""
Configuration module with strict environment variable validation.

Server settings are required. Provider API keys are optional: a provider
without a key is simply not configured and the planner falls back to its
synthetic data for that provider.

Tunables are centralized in config.yaml - modify there, not in code.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Any

import yaml


class ConfigurationError(Exception):
    """Raised when required configuration is missing."""
    pass


# Load YAML config once at module level
_CONFIG_PATH = Path(__file__).parent / "config.yaml"
_YAML_CONFIG: dict = {}


def _load_yaml_config() -> dict:
    """Load configuration from config.yaml file."""
    global _YAML_CONFIG
    if not _YAML_CONFIG:
        if _CONFIG_PATH.exists():
            with open(_CONFIG_PATH, "r") as f:
                _YAML_CONFIG = yaml.safe_load(f) or {}
        else:
            raise ConfigurationError(f"Configuration file not found: {_CONFIG_PATH}")
    return _YAML_CONFIG


def get_yaml_setting(*keys: str, default: Any = None) -> Any:
    """
    Get a setting from config.yaml using dot notation.

    Example: get_yaml_setting("planning", "hazard_radius_m") -> 500
    """
    config = _load_yaml_config()
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


# OpenWeatherMap unit systems
TEMPERATURE_LABELS = {
    "imperial": "°F",
    "metric": "°C",
    "standard": "K",
}


def weather_units() -> str:
    """Unit system used for weather readings (weather.units in config.yaml)."""
    return get_yaml_setting("weather", "units", default="imperial")


def temperature_label(units: Optional[str] = None) -> str:
    """Temperature suffix for a unit system, defaulting to the configured one."""
    return TEMPERATURE_LABELS.get(units or weather_units(), "°F")


def get_required_env(key: str) -> str:
    """Get a required environment variable. Raises if not set."""
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        raise ConfigurationError(
            f"Missing required environment variable: {key}\n"
            f"Please set {key} in your .env file or environment."
        )
    return value.strip()


def get_optional_env(key: str) -> Optional[str]:
    """Get an optional environment variable. Returns None if not set."""
    value = os.environ.get(key)
    if value is None or value.strip() == "":
        return None
    return value.strip()


@dataclass(frozen=True)
class Config:
    """Application configuration - immutable after creation."""

    # Server settings - REQUIRED
    backend_port: int
    backend_host: str

    # CORS settings - REQUIRED
    cors_origins: list[str]

    # Provider keys (graceful degradation if missing)
    google_maps_api_key: Optional[str]
    gemini_api_key: Optional[str]
    openweathermap_api_key: Optional[str]
    airnow_api_key: Optional[str]

    # Base URL of the service exposing camera hazards and community reports
    hazard_feed_url: Optional[str]

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""

        # Required settings
        backend_port = int(get_required_env("BACKEND_PORT"))
        backend_host = get_required_env("BACKEND_HOST")

        cors_origins_str = get_required_env("CORS_ORIGINS")
        cors_origins = [origin.strip() for origin in cors_origins_str.split(",")]

        return cls(
            backend_port=backend_port,
            backend_host=backend_host,
            cors_origins=cors_origins,
            google_maps_api_key=get_optional_env("GOOGLE_MAPS_API_KEY"),
            gemini_api_key=get_optional_env("GEMINI_API_KEY"),
            openweathermap_api_key=get_optional_env("OPENWEATHERMAP_API_KEY"),
            airnow_api_key=get_optional_env("AIRNOW_API_KEY"),
            hazard_feed_url=get_optional_env("HAZARD_FEED_URL"),
        )

    def validate_apis(self) -> dict[str, bool]:
        """Return which providers are configured."""
        return {
            "google_directions": bool(self.google_maps_api_key),
            "gemini": bool(self.gemini_api_key),
            "openweathermap": bool(self.openweathermap_api_key),
            "airnow": bool(self.airnow_api_key),
            "hazard_feed": bool(self.hazard_feed_url),
        }


def load_config() -> Config:
    """Load and validate configuration."""
    from dotenv import load_dotenv

    # Load .env file if present
    load_dotenv()

    return Config.from_env()
