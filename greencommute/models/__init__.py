"""Pydantic models for the commute planning pipeline."""

from .commute import (
    Coordinate,
    HazardOrigin,
    HazardPoint,
    ScoredHazard,
    RouteStep,
    RouteCandidate,
    EnvironmentalSnapshot,
    Recommendation,
    PlanningResult,
)
from .requests import PlanningRequest
from .providers import (
    DirectionsStep,
    DirectionsRoute,
    WeatherReading,
    AirQualityReading,
)

__all__ = [
    # Planning models
    "Coordinate",
    "HazardOrigin",
    "HazardPoint",
    "ScoredHazard",
    "RouteStep",
    "RouteCandidate",
    "EnvironmentalSnapshot",
    "Recommendation",
    "PlanningResult",
    "PlanningRequest",
    # Provider responses
    "DirectionsStep",
    "DirectionsRoute",
    "WeatherReading",
    "AirQualityReading",
]
