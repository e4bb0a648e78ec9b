"""Route geometry, hazard scoring and the planning pipeline."""

from .pipeline import CommuteRoutePipeline, Outcome, score_path, strip_markup
from .polyline_codec import decode_polyline, encode_polyline, haversine_m
from .hazard_proximity import find_nearby_hazards
from .exposure import hazard_exposure_score
from .avoidance import avoidance_waypoint, avoidance_waypoints

__all__ = [
    "CommuteRoutePipeline",
    "Outcome",
    "score_path",
    "strip_markup",
    "decode_polyline",
    "encode_polyline",
    "haversine_m",
    "find_nearby_hazards",
    "hazard_exposure_score",
    "avoidance_waypoint",
    "avoidance_waypoints",
]
