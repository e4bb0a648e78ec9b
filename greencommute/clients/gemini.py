"""
Gemini API client for commute route recommendations.

Model configuration is centralized in config.yaml
"""

import json

from google import genai
from google.genai import types
from pydantic import BaseModel, Field, ValidationError

from ..config import get_yaml_setting, temperature_label
from ..exceptions import RecommendationFailed
from ..models.commute import (
    EnvironmentalSnapshot,
    HazardPoint,
    Recommendation,
    RouteCandidate,
)


class AdvisorOutput(BaseModel):
    """Structured output requested from Gemini."""
    recommended_route_id: str = Field(description="id of the recommended route from the list")
    reasoning: str = Field(description="2-3 sentences referencing exposure scores, CO2 and AQI")
    health_advisory: str = Field(
        default="",
        description="Advisory if AQI > 100, exposure > 50 or extreme weather; empty otherwise",
    )
    safety_score: float = Field(description="0-100, inversely proportional to hazard exposure")
    eco_score: float = Field(default=50, description="0-100, based on relative CO2 and AQI")


def _clamp_score(value: float) -> float:
    return min(100.0, max(0.0, value))


class GeminiRouteAdvisor:
    """
    Gemini-powered route recommendation.

    FREE TIER: Google AI Studio provides free access.
    """

    SYSTEM_INSTRUCTION = """You are GreenCommute AI, an intelligent commute advisor.
Recommend the best route from the candidates you are given, weighing hazard
avoidance, air quality and carbon emissions.

Decision criteria (in priority order):
1. SAFETY: Strongly prefer routes with lower hazardExposureScore
2. AIR QUALITY: If AQI > 100, favor routes that reduce time spent outdoors in poor air
3. EMISSIONS: Prefer routes with lower co2Kg, especially if the user prefers eco
4. SPEED: Among equally safe and clean routes, prefer shorter duration

Only recommend a route id that appears in the candidate list."""

    def __init__(self, api_key: str):
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.api_key = api_key
        self.client = genai.Client(api_key=self.api_key)
        # Load model name from centralized config - no fallbacks
        self.model_name = get_yaml_setting("gemini", "recommendation_model")
        if not self.model_name:
            raise ValueError("Missing gemini.recommendation_model in config.yaml")
        self.temperature = get_yaml_setting("gemini", "temperature", default=0.2)
        self.max_output_tokens = get_yaml_setting("gemini", "max_output_tokens", default=1024)
        print(f"[GeminiRouteAdvisor] Using model: {self.model_name}")

    async def test_connection(self) -> bool:
        """Test API connectivity."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents="Say 'OK' if you can hear me.",
                config=types.GenerateContentConfig(max_output_tokens=10),
            )
            return bool(response.text)
        except Exception:
            return False

    @staticmethod
    def build_prompt(
        routes: list[RouteCandidate],
        environmental: EnvironmentalSnapshot,
        hazards: list[HazardPoint],
        prefer_eco: bool,
    ) -> str:
        """Summarize candidates, conditions and hazards for the model."""
        route_summary = [
            {
                "id": r.id,
                "name": r.name,
                "distanceKm": r.distance_km,
                "durationMinutes": r.duration_minutes,
                "isEcoVariant": r.is_eco_variant,
                "isAvoidanceVariant": r.is_avoidance_variant,
                "co2Kg": r.co2_kg,
                "co2SavedKg": r.co2_saved_kg,
                "hazardExposureScore": r.hazard_exposure_score,
                "nearbyHazardDetails": [
                    {
                        "category": h.category,
                        "severity": h.severity,
                        "distanceMeters": h.distance_meters,
                        "origin": h.origin.value,
                    }
                    for h in r.nearby_hazards
                ],
            }
            for r in routes
        ]
        hazard_summary = [
            {
                "category": h.category,
                "severity": h.severity,
                "description": h.description,
                "origin": h.origin.value,
            }
            for h in hazards
        ]
        preference = (
            "User prefers eco-friendly routes with lower emissions"
            if prefer_eco
            else "No specific preference (optimize for speed and safety)"
        )
        uv_line = f"- UV Index: {environmental.uv_index:g}\n" if environmental.uv_index else ""

        return f"""
<routes>
{json.dumps(route_summary, indent=2)}
</routes>

<metrics>
- co2Kg: total estimated CO2 emissions for the route
- co2SavedKg: CO2 saved compared to the fastest route
- hazardExposureScore: 0 = no nearby hazards, 100 = most exposed
- isAvoidanceVariant: route was re-requested to steer around known hazards
- nearbyHazardDetails: hazards within 500m of the route
</metrics>

<conditions>
- Air Quality Index: {environmental.air_quality_index:g} ({environmental.air_quality_description})
- Temperature: {environmental.temperature:g}{temperature_label()}
- Weather: {environmental.weather_condition}
- Humidity: {environmental.humidity:g}%
{uv_line}</conditions>

<hazards>
{json.dumps(hazard_summary, indent=2) if hazard_summary else "None currently detected"}
</hazards>

<preference>{preference}</preference>
"""

    async def recommend(
        self,
        routes: list[RouteCandidate],
        environmental: EnvironmentalSnapshot,
        hazards: list[HazardPoint],
        prefer_eco: bool,
    ) -> Recommendation:
        """
        Ask Gemini which route to take.

        An unknown route id is replaced by the first candidate and scores
        are clamped to 0-100.

        Raises:
            RecommendationFailed: if the call fails or the output cannot be parsed
        """
        if not routes:
            raise RecommendationFailed("No route candidates to recommend from")

        prompt = self.build_prompt(routes, environmental, hazards, prefer_eco)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=self.SYSTEM_INSTRUCTION,
                    response_mime_type="application/json",
                    response_schema=AdvisorOutput,
                    temperature=self.temperature,
                    max_output_tokens=self.max_output_tokens,
                ),
            )
            output = AdvisorOutput.model_validate_json(response.text or "")
        except ValidationError as e:
            raise RecommendationFailed(f"Unparseable Gemini output: {e}") from e
        except Exception as e:
            raise RecommendationFailed(f"Gemini request failed: {e}") from e

        valid_ids = {r.id for r in routes}
        recommended_id = (
            output.recommended_route_id
            if output.recommended_route_id in valid_ids
            else routes[0].id
        )

        return Recommendation(
            recommended_route_id=recommended_id,
            reasoning=output.reasoning or "Unable to generate detailed recommendation.",
            health_advisory=output.health_advisory or None,
            safety_score=_clamp_score(output.safety_score),
            eco_score=_clamp_score(output.eco_score),
        )
