"""
AirNow current observations client (US EPA).
FREE: API key required, 500 requests/hour.
"""

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..exceptions import ProviderUnavailable
from ..models.commute import Coordinate
from ..models.providers import AirQualityReading


class _Category(BaseModel):
    number: int = Field(alias="Number")
    name: str = Field(alias="Name")


class _Observation(BaseModel):
    parameter_name: str = Field(default="", alias="ParameterName")
    aqi: float = Field(alias="AQI")
    category: _Category = Field(alias="Category")


_OBSERVATIONS = TypeAdapter(list[_Observation])

AQI_DESCRIPTIONS = {
    "Good": "Good - Air quality is satisfactory",
    "Moderate": "Moderate - Acceptable but may be a concern for sensitive groups",
    "Unhealthy for Sensitive Groups": "Unhealthy for Sensitive Groups - May affect sensitive individuals",
    "Unhealthy": "Unhealthy - Everyone may begin to experience health effects",
    "Very Unhealthy": "Very Unhealthy - Health alert; significant risk",
    "Hazardous": "Hazardous - Emergency conditions",
}


class AirNowClient:
    """Air quality index at a coordinate."""

    PROVIDER = "airnow"

    def __init__(self, api_key: str, search_distance_miles: int = 50, timeout: float = 10.0):
        if not api_key:
            raise ValueError("AirNow API key is required")
        self.api_key = api_key
        self.search_distance_miles = search_distance_miles
        self.base_url = "https://www.airnowapi.org/aq/observation/latLong/current/"
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def test_connection(self) -> bool:
        """Test API connectivity."""
        try:
            await self.get_air_quality(Coordinate(lat=33.749, lng=-84.388))
            return True
        except Exception:
            return False

    async def get_air_quality(self, coordinate: Coordinate) -> AirQualityReading:
        """
        Get the current AQI, taken from the worst pollutant reported.

        A station radius with no observations yields AQI 50 marked as
        temporarily unavailable rather than an error.
        """
        params = {
            "format": "application/json",
            "latitude": coordinate.lat,
            "longitude": coordinate.lng,
            "distance": self.search_distance_miles,
            "API_KEY": self.api_key,
        }

        try:
            response = await self._client.get(self.base_url, params=params)
            response.raise_for_status()
            observations = _OBSERVATIONS.validate_python(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            raise ProviderUnavailable(self.PROVIDER, str(e)) from e

        if not observations:
            return AirQualityReading(
                air_quality_index=50,
                air_quality_description="Data temporarily unavailable",
            )

        primary = max(observations, key=lambda obs: obs.aqi)
        name = primary.category.name

        return AirQualityReading(
            air_quality_index=primary.aqi,
            air_quality_description=AQI_DESCRIPTIONS.get(name, f"{name} (AQI: {primary.aqi:g})"),
        )
