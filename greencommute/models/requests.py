"""API request models."""

from typing import Optional
from pydantic import Field

from .commute import CamelModel, Coordinate


class PlanningRequest(CamelModel):
    """Request body for commute route planning."""
    origin: str = Field(description="Origin address or place text", min_length=1)
    destination: str = Field(description="Destination address or place text", min_length=1)
    origin_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    origin_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    dest_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    dest_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    prefer_eco: bool = Field(default=False, description="Favor lower-emission routes")
    avoid_hazards: bool = Field(default=True, description="Request hazard-avoiding variants")

    @property
    def origin_coordinate(self) -> Optional[Coordinate]:
        if self.origin_lat is None or self.origin_lng is None:
            return None
        return Coordinate(lat=self.origin_lat, lng=self.origin_lng)

    @property
    def destination_coordinate(self) -> Optional[Coordinate]:
        if self.dest_lat is None or self.dest_lng is None:
            return None
        return Coordinate(lat=self.dest_lat, lng=self.dest_lng)
