"""API clients for external services."""

from .google_directions import GoogleDirectionsClient
from .openweathermap import OpenWeatherMapClient
from .airnow import AirNowClient
from .hazard_feed import HazardFeedClient
from .gemini import GeminiRouteAdvisor

__all__ = [
    "GoogleDirectionsClient",
    "OpenWeatherMapClient",
    "AirNowClient",
    "HazardFeedClient",
    "GeminiRouteAdvisor",
]
