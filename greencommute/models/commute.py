"""Commute planning models - hazards, route candidates and the planning result."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the web client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinate(BaseModel):
    """Latitude/longitude pair in decimal degrees. Immutable."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(description="Latitude in decimal degrees")
    lng: float = Field(description="Longitude in decimal degrees")


class HazardOrigin(str, Enum):
    """Subsystem that reported a hazard."""
    SENSOR = "sensor"
    COMMUNITY_REPORT = "community-report"


class HazardPoint(CamelModel):
    """An active hazard from the sensor or community-report feeds."""
    id: str = Field(description="Stable per source + identity, e.g. cam-1234")
    lat: float
    lng: float
    category: str = Field(description="Free-form hazard type: Flood, Crash, pothole, ...")
    severity: int = Field(ge=0, le=10)
    description: str
    origin: HazardOrigin

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class ScoredHazard(HazardPoint):
    """A hazard annotated with its distance to one specific route."""
    distance_meters: float = Field(ge=0, description="Distance to the nearest sampled route point")

    def as_hazard_point(self) -> HazardPoint:
        return HazardPoint.model_validate(self.model_dump(exclude={"distance_meters"}))


class RouteStep(CamelModel):
    """One turn-by-turn instruction."""
    instruction: str
    distance_km: float
    duration_minutes: float


class RouteCandidate(CamelModel):
    """A route option offered to the commuter."""
    id: str
    name: str
    distance_km: float
    duration_minutes: float
    is_eco_variant: bool = False
    is_avoidance_variant: bool = False
    co2_kg: float = 0.0
    co2_saved_kg: float = Field(default=0.0, ge=0, description="Saved relative to the fastest candidate")
    hazard_exposure_score: int = Field(default=0, ge=0, le=100)
    nearby_hazards: list[ScoredHazard] = Field(default_factory=list)
    encoded_path: str
    steps: list[RouteStep] = Field(default_factory=list)


class EnvironmentalSnapshot(CamelModel):
    """Weather and air quality at the origin."""
    air_quality_index: float
    air_quality_description: str
    temperature: float
    weather_condition: str
    humidity: float
    uv_index: Optional[float] = None


class Recommendation(CamelModel):
    """Which route to take and why."""
    recommended_route_id: str
    reasoning: str
    health_advisory: Optional[str] = None
    safety_score: float = Field(ge=0, le=100)
    eco_score: float = Field(ge=0, le=100)


class PlanningResult(CamelModel):
    """Complete response for one planning request."""
    routes: list[RouteCandidate]
    environmental: EnvironmentalSnapshot
    hazards_near_any_route: list[HazardPoint] = Field(default_factory=list)
    recommendation: Recommendation
