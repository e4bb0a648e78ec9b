"""
Google Maps Directions API client.

Requires enabling in Google Cloud Console:
- Directions API
"""

from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from ..exceptions import ProviderUnavailable
from ..models.commute import Coordinate
from ..models.providers import DirectionsRoute, DirectionsStep


class _TextValue(BaseModel):
    text: str = ""
    value: float


class _Polyline(BaseModel):
    points: str


class _Step(BaseModel):
    html_instructions: str = ""
    distance: _TextValue
    duration: _TextValue


class _Leg(BaseModel):
    distance: _TextValue
    duration: _TextValue
    steps: list[_Step] = []


class _Route(BaseModel):
    summary: str = ""
    legs: list[_Leg]
    overview_polyline: _Polyline


class _DirectionsResponse(BaseModel):
    status: str
    error_message: Optional[str] = None
    routes: list[_Route] = []


class GoogleDirectionsClient:
    """
    Client for the Google Maps Directions API.

    FREE TIER: $200/month credit covers approximately 40,000 requests.
    """

    PROVIDER = "google_directions"

    def __init__(self, api_key: str, timeout: float = 30.0):
        if not api_key:
            raise ValueError("Google Maps API key is required")
        self.api_key = api_key
        self.directions_url = "https://maps.googleapis.com/maps/api/directions/json"
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def test_connection(self) -> bool:
        """Test API connectivity with a short downtown Atlanta route."""
        try:
            routes = await self.get_routes("33.749,-84.388", "33.7845,-84.3835")
            return len(routes) > 0
        except Exception:
            return False

    async def get_routes(
        self,
        origin: str,
        destination: str,
        avoid_highways: bool = False,
        waypoints: Optional[list[Coordinate]] = None,
    ) -> list[DirectionsRoute]:
        """
        Get candidate driving routes.

        Args:
            origin: Address text or "lat,lng"
            destination: Address text or "lat,lng"
            avoid_highways: Prefer surface roads (eco variant)
            waypoints: Optional pass-through points; sent as via: so they
                do not split the trip into separate legs

        Returns:
            Candidate routes, best first. Alternatives are requested only
            when no waypoints are given.

        Raises:
            ProviderUnavailable: on HTTP errors, non-OK status or an
                unexpected response shape
        """
        params = {
            "origin": origin,
            "destination": destination,
            "units": "metric",
            "key": self.api_key,
        }
        if avoid_highways:
            params["avoid"] = "highways"
        if waypoints:
            params["waypoints"] = "|".join(f"via:{wp.lat},{wp.lng}" for wp in waypoints)
        else:
            params["alternatives"] = "true"

        try:
            response = await self._client.get(self.directions_url, params=params)
            response.raise_for_status()
            data = _DirectionsResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            raise ProviderUnavailable(self.PROVIDER, str(e)) from e

        if data.status != "OK":
            raise ProviderUnavailable(
                self.PROVIDER, f"{data.status} - {data.error_message or 'Unknown error'}"
            )

        return [self._to_directions_route(route) for route in data.routes if route.legs]

    @staticmethod
    def _to_directions_route(route: _Route) -> DirectionsRoute:
        return DirectionsRoute(
            summary=route.summary,
            distance_m=sum(leg.distance.value for leg in route.legs),
            duration_s=sum(leg.duration.value for leg in route.legs),
            encoded_path=route.overview_polyline.points,
            steps=[
                DirectionsStep(
                    instruction_html=step.html_instructions,
                    distance_m=step.distance.value,
                    duration_s=step.duration.value,
                )
                for leg in route.legs
                for step in leg.steps
            ],
        )
