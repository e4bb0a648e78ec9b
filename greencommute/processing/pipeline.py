"""
Hazard-aware commute route planning pipeline.

Integrates:
- Google Directions (fastest, eco and hazard-avoiding candidates)
- OpenWeatherMap + AirNow (environmental conditions)
- Camera + community report hazard feed
- Gemini (route recommendation)

Every provider is optional and may fail; each failure is replaced by a
named fallback so a request only fails when no route at all can be built.
"""

import asyncio
import html
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from ..config import Config, get_yaml_setting
from ..clients.airnow import AirNowClient
from ..clients.gemini import GeminiRouteAdvisor
from ..clients.google_directions import GoogleDirectionsClient
from ..clients.hazard_feed import HazardFeedClient
from ..clients.openweathermap import OpenWeatherMapClient
from ..exceptions import MalformedPathError, NoRoutesAvailable, ProviderUnavailable
from ..models.commute import (
    Coordinate,
    EnvironmentalSnapshot,
    HazardPoint,
    PlanningResult,
    Recommendation,
    RouteCandidate,
    RouteStep,
    ScoredHazard,
)
from ..models.providers import DirectionsRoute
from ..models.requests import PlanningRequest
from .avoidance import avoidance_waypoints
from .exposure import hazard_exposure_score
from .fallbacks import (
    default_coordinate,
    fallback_recommendation,
    mock_air_quality,
    mock_directions,
    mock_weather,
)
from .hazard_proximity import find_nearby_hazards
from .polyline_codec import decode_polyline

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")


@dataclass
class Outcome(Generic[T]):
    """Settled result of one provider call: a value or the captured failure."""
    provider: str
    value: Optional[T] = None
    error: Optional[ProviderUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def strip_markup(text: str) -> str:
    """Remove HTML tags and entities from a directions instruction."""
    return _SPACE_RE.sub(" ", html.unescape(_TAG_RE.sub(" ", text))).strip()


def score_path(
    path: list[Coordinate], hazards: list[HazardPoint], radius_m: float
) -> tuple[list[ScoredHazard], int]:
    """Nearby hazards (closest first) and the exposure score for a decoded path."""
    nearby = find_nearby_hazards(path, hazards, radius_m)
    return nearby, hazard_exposure_score(nearby)


class CommuteRoutePipeline:
    """
    Per-request route planning over injected provider clients.

    Holds no request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        directions: Optional[GoogleDirectionsClient] = None,
        weather: Optional[OpenWeatherMapClient] = None,
        air_quality: Optional[AirNowClient] = None,
        hazard_feed: Optional[HazardFeedClient] = None,
        advisor: Optional[GeminiRouteAdvisor] = None,
        provider_timeout: Optional[float] = None,
    ):
        self.directions = directions
        self.weather = weather
        self.air_quality = air_quality
        self.hazard_feed = hazard_feed
        self.advisor = advisor

        self.provider_timeout = provider_timeout or get_yaml_setting(
            "planning", "provider_timeout_seconds", default=15
        )
        self.hazard_radius_m = get_yaml_setting("planning", "hazard_radius_m", default=500)
        self.avoidance_offset_m = get_yaml_setting("planning", "avoidance_offset_m", default=1500)
        self.max_avoidance_waypoints = get_yaml_setting(
            "planning", "max_avoidance_waypoints", default=5
        )
        self.highway_co2_per_km = get_yaml_setting("emissions", "highway_kg_per_km", default=0.21)
        self.surface_co2_per_km = get_yaml_setting("emissions", "surface_kg_per_km", default=0.17)

    @classmethod
    def from_config(cls, config: Config) -> "CommuteRoutePipeline":
        """Build clients for every provider that has credentials."""
        return cls(
            directions=(
                GoogleDirectionsClient(config.google_maps_api_key)
                if config.google_maps_api_key
                else None
            ),
            weather=(
                OpenWeatherMapClient(
                    config.openweathermap_api_key,
                    units=get_yaml_setting("weather", "units", default="imperial"),
                )
                if config.openweathermap_api_key
                else None
            ),
            air_quality=(
                AirNowClient(
                    config.airnow_api_key,
                    search_distance_miles=get_yaml_setting(
                        "air_quality", "search_distance_miles", default=50
                    ),
                )
                if config.airnow_api_key
                else None
            ),
            hazard_feed=(
                HazardFeedClient(config.hazard_feed_url) if config.hazard_feed_url else None
            ),
            advisor=GeminiRouteAdvisor(config.gemini_api_key) if config.gemini_api_key else None,
        )

    def _http_clients(self) -> list:
        return [
            c for c in (self.directions, self.weather, self.air_quality, self.hazard_feed)
            if c is not None
        ]

    async def close(self):
        """Close all HTTP clients."""
        for client in self._http_clients():
            await client.close()

    async def test_all_apis(self) -> dict[str, bool]:
        """Test connectivity to all configured providers."""
        providers = {
            "google_directions": self.directions,
            "openweathermap": self.weather,
            "airnow": self.air_quality,
            "hazard_feed": self.hazard_feed,
            "gemini": self.advisor,
        }
        results = {}
        for name, client in providers.items():
            results[name] = await client.test_connection() if client else False
        return results

    # ------------------------------------------------------------------
    # Provider calls
    # ------------------------------------------------------------------

    async def _settle(
        self, provider: str, call: Optional[Callable[[], Awaitable[T]]]
    ) -> Outcome[T]:
        """Run one provider call under the timeout. Never raises (except on cancellation)."""
        if call is None:
            return Outcome(provider, error=ProviderUnavailable(provider, "not configured"))
        try:
            value = await asyncio.wait_for(call(), timeout=self.provider_timeout)
        except asyncio.TimeoutError:
            error = ProviderUnavailable(provider, f"timed out after {self.provider_timeout}s")
        except ProviderUnavailable as e:
            error = e
        except Exception as e:
            error = ProviderUnavailable(provider, str(e) or type(e).__name__)
        else:
            return Outcome(provider, value=value)

        logger.warning(f"{provider} failed: {error.reason}")
        return Outcome(provider, error=error)

    def _directions_call(
        self,
        request: PlanningRequest,
        avoid_highways: bool,
        waypoints: Optional[list[Coordinate]] = None,
    ) -> Optional[Callable[[], Awaitable[list[DirectionsRoute]]]]:
        if self.directions is None:
            return None
        return lambda: self.directions.get_routes(
            request.origin,
            request.destination,
            avoid_highways=avoid_highways,
            waypoints=waypoints,
        )

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def build_candidate(
        self,
        route: DirectionsRoute,
        candidate_id: str,
        eco: bool,
        avoidance: bool,
        fastest_distance_km: Optional[float] = None,
    ) -> RouteCandidate:
        """Convert a directions route into an unscored candidate with CO2 estimates."""
        distance_km = route.distance_m / 1000
        co2_per_km = self.surface_co2_per_km if eco else self.highway_co2_per_km
        route_co2 = distance_km * co2_per_km
        baseline_co2 = (fastest_distance_km or distance_km) * self.highway_co2_per_km
        co2_saved = max(0.0, round(baseline_co2 - route_co2, 2))

        if avoidance and eco:
            name = f"Safe Eco via {route.summary or 'local roads'}"
        elif avoidance:
            name = f"Safe Route via {route.summary or 'alternate roads'}"
        elif eco:
            name = f"Eco-Friendly via {route.summary or 'local roads'}"
        else:
            name = f"Fastest via {route.summary or 'highway'}"

        return RouteCandidate(
            id=candidate_id,
            name=name,
            distance_km=round(distance_km, 1),
            duration_minutes=round(route.duration_s / 60),
            is_eco_variant=eco,
            is_avoidance_variant=avoidance,
            co2_kg=round(route_co2, 2),
            co2_saved_kg=co2_saved,
            encoded_path=route.encoded_path,
            steps=[
                RouteStep(
                    instruction=strip_markup(step.instruction_html),
                    distance_km=round(step.distance_m / 1000, 2),
                    duration_minutes=round(step.duration_s / 60, 1),
                )
                for step in route.steps
            ],
        )

    def score_candidate(
        self, candidate: RouteCandidate, hazards: list[HazardPoint]
    ) -> RouteCandidate:
        """
        Attach nearby hazards and exposure score.

        Raises:
            MalformedPathError: if the candidate's path cannot be decoded
        """
        path = decode_polyline(candidate.encoded_path)
        nearby, score = score_path(path, hazards, self.hazard_radius_m)
        return candidate.model_copy(
            update={"nearby_hazards": nearby, "hazard_exposure_score": score}
        )

    def _score_all(
        self, candidates: list[RouteCandidate], hazards: list[HazardPoint]
    ) -> list[RouteCandidate]:
        scored = []
        for candidate in candidates:
            try:
                scored.append(self.score_candidate(candidate, hazards))
            except MalformedPathError as e:
                logger.warning(f"Dropping {candidate.id}: {e}")
        return scored

    def _base_candidates(
        self,
        fast: Outcome[list[DirectionsRoute]],
        eco: Outcome[list[DirectionsRoute]],
    ) -> tuple[list[RouteCandidate], Optional[float]]:
        candidates = []
        fastest_distance_km = None

        if fast.ok and fast.value:
            route = fast.value[0]
            fastest_distance_km = route.distance_m / 1000
            candidates.append(self.build_candidate(route, "route-fast-0", eco=False, avoidance=False))

        if eco.ok and eco.value:
            candidates.append(
                self.build_candidate(
                    eco.value[0], "route-eco-0", eco=True, avoidance=False,
                    fastest_distance_km=fastest_distance_km,
                )
            )

        return candidates, fastest_distance_km

    def _synthetic_candidates(
        self, request: PlanningRequest
    ) -> tuple[list[RouteCandidate], Optional[float]]:
        try:
            fast = mock_directions(
                request.origin, request.destination,
                request.origin_coordinate, request.destination_coordinate, eco=False,
            )
            eco = mock_directions(
                request.origin, request.destination,
                request.origin_coordinate, request.destination_coordinate, eco=True,
            )
            fastest_distance_km = fast.distance_m / 1000
            candidates = [
                self.build_candidate(fast, "route-fast-0", eco=False, avoidance=False),
                self.build_candidate(
                    eco, "route-eco-0", eco=True, avoidance=False,
                    fastest_distance_km=fastest_distance_km,
                ),
            ]
        except Exception as e:
            raise NoRoutesAvailable(f"Synthetic routes could not be built: {e}") from e
        return candidates, fastest_distance_km

    async def _avoidance_variant(
        self,
        request: PlanningRequest,
        source: RouteCandidate,
        hazards: list[HazardPoint],
        fastest_distance_km: Optional[float],
    ) -> Optional[RouteCandidate]:
        """Re-request source through avoidance waypoints; keep only a strict improvement."""
        path = decode_polyline(source.encoded_path)
        waypoints = avoidance_waypoints(path, source.nearby_hazards, self.avoidance_offset_m)
        waypoints = waypoints[: self.max_avoidance_waypoints]
        if not waypoints:
            return None

        logger.info(
            f"Route {source.id} has {len(source.nearby_hazards)} nearby hazard(s), "
            f"re-requesting through {len(waypoints)} waypoint(s)"
        )

        outcome = await self._settle(
            f"directions_avoid:{source.id}",
            self._directions_call(request, avoid_highways=source.is_eco_variant, waypoints=waypoints),
        )
        if not outcome.ok or not outcome.value:
            return None

        candidate = self.build_candidate(
            outcome.value[0],
            source.id.replace("route-", "route-avoid-", 1),
            eco=source.is_eco_variant,
            avoidance=True,
            fastest_distance_km=fastest_distance_km,
        )
        try:
            candidate = self.score_candidate(candidate, hazards)
        except MalformedPathError as e:
            logger.warning(f"Avoidance route for {source.id} dropped: {e}")
            return None

        if candidate.hazard_exposure_score < source.hazard_exposure_score:
            logger.info(
                f"Avoidance route added: exposure {candidate.hazard_exposure_score} "
                f"vs original {source.hazard_exposure_score}"
            )
            return candidate

        logger.info(
            f"Avoidance route not better: exposure {candidate.hazard_exposure_score} "
            f"vs original {source.hazard_exposure_score}"
        )
        return None

    # ------------------------------------------------------------------
    # Environment, hazards, recommendation
    # ------------------------------------------------------------------

    @staticmethod
    def _environmental(weather: Outcome, aqi: Outcome) -> EnvironmentalSnapshot:
        if not weather.ok:
            logger.warning("Using synthetic weather")
        if not aqi.ok:
            logger.warning("Using synthetic air quality")
        reading = weather.value if weather.ok else mock_weather()
        air = aqi.value if aqi.ok else mock_air_quality()

        return EnvironmentalSnapshot(
            air_quality_index=air.air_quality_index,
            air_quality_description=air.air_quality_description,
            temperature=reading.temperature,
            weather_condition=reading.weather_condition,
            humidity=reading.humidity,
            uv_index=reading.uv_index,
        )

    @staticmethod
    def hazards_near_any_route(routes: list[RouteCandidate]) -> list[HazardPoint]:
        """Unique hazards across all candidates, in first-seen order."""
        seen: set[str] = set()
        unique = []
        for route in routes:
            for hazard in route.nearby_hazards:
                if hazard.id not in seen:
                    seen.add(hazard.id)
                    unique.append(hazard.as_hazard_point())
        return unique

    async def _recommend(
        self,
        routes: list[RouteCandidate],
        environmental: EnvironmentalSnapshot,
        hazards: list[HazardPoint],
        prefer_eco: bool,
    ) -> Recommendation:
        if self.advisor is not None:
            try:
                recommendation = await asyncio.wait_for(
                    self.advisor.recommend(routes, environmental, hazards, prefer_eco),
                    timeout=self.provider_timeout,
                )
            except Exception as e:
                logger.error(f"Gemini recommendation failed, using fallback: {e}")
            else:
                valid_ids = {r.id for r in routes}
                if recommendation.recommended_route_id not in valid_ids:
                    recommendation = recommendation.model_copy(
                        update={"recommended_route_id": routes[0].id}
                    )
                return recommendation

        return fallback_recommendation(routes, environmental, hazards, prefer_eco)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def plan(self, request: PlanningRequest) -> PlanningResult:
        """
        Plan commute routes for one request.

        Returns:
            Scored candidates, environmental snapshot, hazards near any
            candidate and a recommendation

        Raises:
            NoRoutesAvailable: if not even synthetic routes could be built
        """
        logger.info(
            f"Planning route: {request.origin} -> {request.destination} "
            f"(eco: {request.prefer_eco}, avoidHazards: {request.avoid_hazards})"
        )
        location = request.origin_coordinate or default_coordinate("origin")

        # Step 1: fan out, every branch settles on its own
        fast, eco, weather, aqi, feed = await asyncio.gather(
            self._settle("directions_fast", self._directions_call(request, avoid_highways=False)),
            self._settle("directions_eco", self._directions_call(request, avoid_highways=True)),
            self._settle(
                "weather",
                (lambda: self.weather.get_weather(location)) if self.weather else None,
            ),
            self._settle(
                "air_quality",
                (lambda: self.air_quality.get_air_quality(location)) if self.air_quality else None,
            ),
            self._settle("hazard_feed", self.hazard_feed.get_active_hazards if self.hazard_feed else None),
        )

        hazards: list[HazardPoint] = feed.value if feed.ok else []
        logger.info(f"Found {len(hazards)} active hazard point(s)")

        # Steps 2-3: base candidates, scored
        candidates, fastest_distance_km = self._base_candidates(fast, eco)
        routes = self._score_all(candidates, hazards)
        if not routes:
            logger.warning("No usable directions, using synthetic routes")
            candidates, fastest_distance_km = self._synthetic_candidates(request)
            routes = self._score_all(candidates, hazards)
        if not routes:
            raise NoRoutesAvailable("No route candidates could be produced")

        # Step 4: hazard-avoiding variants
        if request.avoid_hazards and hazards:
            exposed = [r for r in routes if r.nearby_hazards]
            variants = await asyncio.gather(
                *(
                    self._avoidance_variant(request, route, hazards, fastest_distance_km)
                    for route in exposed
                )
            )
            routes.extend(v for v in variants if v is not None)

        # Steps 5-7
        environmental = self._environmental(weather, aqi)
        nearby = self.hazards_near_any_route(routes)
        recommendation = await self._recommend(routes, environmental, hazards, request.prefer_eco)

        logger.info(
            f"Route planned: {len(routes)} routes, {len(nearby)} hazards nearby, "
            f"AQI {environmental.air_quality_index:g}"
        )

        return PlanningResult(
            routes=routes,
            environmental=environmental,
            hazards_near_any_route=nearby,
            recommendation=recommendation,
        )
