"""Hazard exposure scoring (0 = safest, 100 = worst)."""

import math

from ..models.commute import ScoredHazard

# Distance at which a hazard stops contributing
EXPOSURE_RADIUS_M = 500
# Points contributed by one severity-10 hazard sitting on the route
MAX_POINTS_PER_HAZARD = 30
MAX_SCORE = 100


def hazard_contribution(hazard: ScoredHazard) -> float:
    """Points one hazard adds: closer and more severe weighs more."""
    proximity = min(1.0, max(0.0, 1 - hazard.distance_meters / EXPOSURE_RADIUS_M))
    severity = min(10, max(0, hazard.severity)) / 10
    return proximity * severity * MAX_POINTS_PER_HAZARD


def hazard_exposure_score(hazards: list[ScoredHazard]) -> int:
    """Sum of hazard contributions, capped at 100 and rounded half up."""
    if not hazards:
        return 0
    score = min(MAX_SCORE, sum(hazard_contribution(h) for h in hazards))
    return int(math.floor(score + 0.5))
