"""
Synthetic data used when a provider is unavailable.

Every function here must succeed: they are the last line before an
incomplete response.
"""

import random
from typing import Optional

from ..config import get_yaml_setting, temperature_label, weather_units
from ..models.commute import (
    Coordinate,
    EnvironmentalSnapshot,
    HazardPoint,
    Recommendation,
    RouteCandidate,
)
from ..models.providers import (
    AirQualityReading,
    DirectionsRoute,
    DirectionsStep,
    WeatherReading,
)
from .polyline_codec import encode_polyline, path_length_m

MOCK_WEATHER_CONDITIONS = [
    WeatherReading(temperature=72, weather_condition="Clear Sky", humidity=45),
    WeatherReading(temperature=68, weather_condition="Partly Cloudy", humidity=55),
    WeatherReading(temperature=65, weather_condition="Scattered Clouds", humidity=60),
    WeatherReading(temperature=58, weather_condition="Light Rain", humidity=78),
    WeatherReading(temperature=62, weather_condition="Overcast", humidity=65),
]

MOCK_AQI_LEVELS = [
    AirQualityReading(air_quality_index=32, air_quality_description="Good - Air quality is satisfactory"),
    AirQualityReading(air_quality_index=48, air_quality_description="Good - Air quality is satisfactory"),
    AirQualityReading(air_quality_index=65, air_quality_description="Moderate - Acceptable but may affect sensitive groups"),
    AirQualityReading(air_quality_index=78, air_quality_description="Moderate - Acceptable but may affect sensitive groups"),
    AirQualityReading(air_quality_index=95, air_quality_description="Moderate - Acceptable but may affect sensitive groups"),
]

UNHEALTHY_AQI = 100


def _from_fahrenheit(value: float, units: str) -> float:
    if units == "metric":
        return round((value - 32) * 5 / 9)
    if units == "standard":
        return round((value - 32) * 5 / 9 + 273.15)
    return value


def mock_weather(units: Optional[str] = None) -> WeatherReading:
    """Plausible weather when the weather provider failed, in the configured units."""
    reading = random.choice(MOCK_WEATHER_CONDITIONS)
    temperature = _from_fahrenheit(reading.temperature, units or weather_units())
    return reading.model_copy(update={"temperature": temperature})


def mock_air_quality() -> AirQualityReading:
    """Plausible air quality when the AQI provider failed."""
    return random.choice(MOCK_AQI_LEVELS)


def default_coordinate(which: str) -> Coordinate:
    """Configured fallback origin or destination."""
    point = get_yaml_setting("defaults", which)
    return Coordinate(lat=point["lat"], lng=point["lng"])


def _straight_path(start: Coordinate, end: Coordinate, points: int) -> list[Coordinate]:
    points = max(2, points)
    return [
        Coordinate(
            lat=start.lat + (end.lat - start.lat) * i / (points - 1),
            lng=start.lng + (end.lng - start.lng) * i / (points - 1),
        )
        for i in range(points)
    ]


def _place_name(text: str) -> str:
    return text.split(",")[0].strip() or text


def mock_directions(
    origin: str,
    destination: str,
    origin_coordinate: Optional[Coordinate] = None,
    destination_coordinate: Optional[Coordinate] = None,
    eco: bool = False,
) -> DirectionsRoute:
    """
    Synthetic route along the straight line between the endpoints.

    Distance is the length of the synthetic path scaled by a detour factor,
    duration comes from a configured average speed.
    """
    start = origin_coordinate or default_coordinate("origin")
    end = destination_coordinate or default_coordinate("destination")
    variant = "eco" if eco else "fast"

    detour = get_yaml_setting("synthetic_routes", f"{variant}_detour_factor", default=1.2)
    speed_kmh = get_yaml_setting("synthetic_routes", f"{variant}_speed_kmh", default=40)
    path_points = get_yaml_setting("synthetic_routes", "path_points", default=20)

    path = _straight_path(start, end, path_points)
    distance_m = path_length_m(path) * detour
    duration_s = distance_m / (speed_kmh * 1000 / 3600)

    middle = "Continue on local roads" if eco else "Merge onto the highway"
    # Share of the trip covered by each of the four steps
    fractions = [0.05, 0.65, 0.2, 0.1]
    instructions = [
        f"Head toward {_place_name(destination)} from {_place_name(origin)}",
        middle,
        "Turn toward your destination",
        f"Arrive at {_place_name(destination)}",
    ]
    steps = [
        DirectionsStep(
            instruction_html=text,
            distance_m=distance_m * share,
            duration_s=duration_s * share,
        )
        for text, share in zip(instructions, fractions)
    ]

    return DirectionsRoute(
        summary="local roads" if eco else "highway",
        distance_m=distance_m,
        duration_s=duration_s,
        encoded_path=encode_polyline(path),
        steps=steps,
    )


def _health_advisory(environmental: EnvironmentalSnapshot) -> Optional[str]:
    if environmental.air_quality_index > UNHEALTHY_AQI:
        return "Air quality is unhealthy. Consider limiting outdoor exposure."
    return None


def fallback_recommendation(
    routes: list[RouteCandidate],
    environmental: EnvironmentalSnapshot,
    hazards: list[HazardPoint],
    prefer_eco: bool,
    units: Optional[str] = None,
) -> Recommendation:
    """
    Deterministic recommendation used without the AI advisor.

    Priority: safe-eco (when eco is preferred) > safe (when hazards exist)
    > eco (when eco is preferred) > fastest.
    """
    advisory = _health_advisory(environmental)
    degrees = temperature_label(units)

    if not routes:
        return Recommendation(
            recommended_route_id="unknown",
            reasoning="No routes available.",
            health_advisory=advisory,
            safety_score=0,
            eco_score=0,
        )

    safe_route = next((r for r in routes if r.is_avoidance_variant), None)
    eco_route = next(
        (r for r in routes if r.is_eco_variant and not r.is_avoidance_variant), None
    )
    safe_eco_route = next(
        (r for r in routes if r.is_eco_variant and r.is_avoidance_variant), None
    )
    fastest_route = next(
        (r for r in routes if not r.is_eco_variant and not r.is_avoidance_variant),
        routes[0],
    )
    active_hazards = len(hazards)

    if prefer_eco and safe_eco_route:
        return Recommendation(
            recommended_route_id=safe_eco_route.id,
            reasoning=(
                f"The safest eco-friendly route avoids {active_hazards} hazard(s) and saves "
                f"{safe_eco_route.co2_saved_kg}kg CO2. Estimated emissions: "
                f"{safe_eco_route.co2_kg}kg CO2. Current AQI: {environmental.air_quality_index:g}."
            ),
            health_advisory=advisory,
            safety_score=90,
            eco_score=92,
        )

    if active_hazards > 0 and safe_route:
        return Recommendation(
            recommended_route_id=safe_route.id,
            reasoning=(
                f"{active_hazards} hazard(s) detected near standard routes. This alternate "
                f"route avoids them with exposure score of {safe_route.hazard_exposure_score}/100. "
                f"Estimated emissions: {safe_route.co2_kg}kg CO2."
            ),
            health_advisory=advisory,
            safety_score=88,
            eco_score=85 if safe_route.is_eco_variant else 50,
        )

    if prefer_eco and eco_route:
        return Recommendation(
            recommended_route_id=eco_route.id,
            reasoning=(
                f"The eco-friendly route saves approximately {eco_route.co2_saved_kg}kg CO2 "
                f"({eco_route.co2_kg}kg total). Current conditions: "
                f"{environmental.weather_condition} at {environmental.temperature:g}{degrees} "
                f"with AQI {environmental.air_quality_index:g}."
            ),
            health_advisory=advisory,
            safety_score=max(0, 100 - eco_route.hazard_exposure_score),
            eco_score=92,
        )

    return Recommendation(
        recommended_route_id=fastest_route.id,
        reasoning=(
            f"The fastest route is recommended with {fastest_route.co2_kg}kg CO2 emissions. "
            f"Current conditions: {environmental.weather_condition} at "
            f"{environmental.temperature:g}{degrees}."
        ),
        health_advisory=advisory,
        safety_score=max(0, 100 - fastest_route.hazard_exposure_score),
        eco_score=45,
    )
