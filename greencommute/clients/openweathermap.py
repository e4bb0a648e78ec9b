"""
OpenWeatherMap current weather client.
FREE TIER: 1,000 calls/day.
"""

import httpx
from pydantic import BaseModel, ValidationError

from ..exceptions import ProviderUnavailable
from ..models.commute import Coordinate
from ..models.providers import WeatherReading


class _Condition(BaseModel):
    main: str = ""
    description: str = ""


class _Main(BaseModel):
    temp: float
    humidity: float


class _WeatherResponse(BaseModel):
    weather: list[_Condition]
    main: _Main


class OpenWeatherMapClient:
    """Current conditions at a coordinate."""

    PROVIDER = "openweathermap"

    def __init__(self, api_key: str, units: str = "imperial", timeout: float = 10.0):
        if not api_key:
            raise ValueError("OpenWeatherMap API key is required")
        self.api_key = api_key
        self.units = units
        self.base_url = "https://api.openweathermap.org/data/2.5/weather"
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def test_connection(self) -> bool:
        """Test API connectivity."""
        try:
            await self.get_weather(Coordinate(lat=33.749, lng=-84.388))
            return True
        except Exception:
            return False

    async def get_weather(self, coordinate: Coordinate) -> WeatherReading:
        """
        Get current weather.

        Returns:
            Rounded temperature (in the configured units), title-cased
            condition and relative humidity
        """
        params = {
            "lat": coordinate.lat,
            "lon": coordinate.lng,
            "appid": self.api_key,
            "units": self.units,
        }

        try:
            response = await self._client.get(self.base_url, params=params)
            response.raise_for_status()
            data = _WeatherResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            raise ProviderUnavailable(self.PROVIDER, str(e)) from e

        description = data.weather[0].description if data.weather else "unknown"

        return WeatherReading(
            temperature=round(data.main.temp),
            weather_condition=" ".join(word.capitalize() for word in description.split()),
            humidity=data.main.humidity,
        )
