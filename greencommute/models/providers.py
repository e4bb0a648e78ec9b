"""Validated shapes of external provider responses."""

from typing import Optional
from pydantic import BaseModel, Field


class DirectionsStep(BaseModel):
    """A turn-by-turn step as returned by the directions provider."""
    instruction_html: str = Field(description="Instruction text, may contain markup")
    distance_m: float = Field(ge=0)
    duration_s: float = Field(ge=0)


class DirectionsRoute(BaseModel):
    """One candidate path from the directions provider."""
    summary: str = Field(default="", description="Main road names, e.g. 'I-85 N'")
    distance_m: float = Field(ge=0)
    duration_s: float = Field(ge=0)
    encoded_path: str = Field(description="Overview polyline")
    steps: list[DirectionsStep] = Field(default_factory=list)


class WeatherReading(BaseModel):
    """Current weather at a coordinate."""
    temperature: float
    weather_condition: str
    humidity: float
    uv_index: Optional[float] = None


class AirQualityReading(BaseModel):
    """Current air quality at a coordinate."""
    air_quality_index: float
    air_quality_description: str
