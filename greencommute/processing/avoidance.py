"""
Avoidance waypoint generation.

A waypoint is placed beside the route segment closest to a hazard, on the
side away from it, and the directions provider is asked to route through
it. Offsets are converted with a flat 111 km per degree, which is accurate
enough for steering a re-request.
"""

import math

from ..models.commute import Coordinate, ScoredHazard
from .polyline_codec import haversine_m

DEFAULT_OFFSET_M = 1500
METERS_PER_DEGREE = 111_000
# Used when the segment and the hazard all coincide
DEGENERATE_NUDGE_DEG = 0.01


def avoidance_waypoint(
    before: Coordinate,
    after: Coordinate,
    hazard: Coordinate,
    offset_m: float = DEFAULT_OFFSET_M,
) -> Coordinate:
    """
    Generate a waypoint that steers the route away from a hazard.

    Args:
        before: Route point preceding the point closest to the hazard
        after: Route point following the point closest to the hazard
        hazard: Hazard location
        offset_m: Distance of the waypoint from the segment midpoint

    Returns:
        Waypoint perpendicular to the segment, opposite the hazard
    """
    mid_lat = (before.lat + after.lat) / 2
    mid_lng = (before.lng + after.lng) / 2
    deg_offset = offset_m / METERS_PER_DEGREE

    # Perpendicular of the route direction (rotated 90 degrees)
    perp_lat = -(after.lng - before.lng)
    perp_lng = after.lat - before.lat
    perp_len = math.hypot(perp_lat, perp_lng)

    if perp_len == 0:
        # Zero-length segment: move straight away from the hazard
        away_lat = mid_lat - hazard.lat
        away_lng = mid_lng - hazard.lng
        away_len = math.hypot(away_lat, away_lng)
        if away_len == 0:
            return Coordinate(
                lat=mid_lat + DEGENERATE_NUDGE_DEG, lng=mid_lng + DEGENERATE_NUDGE_DEG
            )
        return Coordinate(
            lat=mid_lat + away_lat / away_len * deg_offset,
            lng=mid_lng + away_lng / away_len * deg_offset,
        )

    norm_lat = perp_lat / perp_len
    norm_lng = perp_lng / perp_len

    # Which side of the route the hazard sits on
    dot = (hazard.lat - mid_lat) * norm_lat + (hazard.lng - mid_lng) * norm_lng
    direction = -1 if dot >= 0 else 1

    return Coordinate(
        lat=mid_lat + direction * norm_lat * deg_offset,
        lng=mid_lng + direction * norm_lng * deg_offset,
    )


def nearest_point_index(path: list[Coordinate], target: Coordinate) -> int:
    """Index of the path point closest to target (full-resolution scan)."""
    best_idx = 0
    best_dist = math.inf
    for i, point in enumerate(path):
        dist = haversine_m(point, target)
        if dist < best_dist:
            best_dist = dist
            best_idx = i
    return best_idx


def avoidance_waypoints(
    path: list[Coordinate],
    hazards: list[ScoredHazard],
    offset_m: float = DEFAULT_OFFSET_M,
) -> list[Coordinate]:
    """One avoidance waypoint per hazard, in hazard order."""
    if not path:
        return []

    waypoints = []
    for hazard in hazards:
        idx = nearest_point_index(path, hazard.coordinate)
        before = path[max(0, idx - 1)]
        after = path[min(len(path) - 1, idx + 1)]
        waypoints.append(avoidance_waypoint(before, after, hazard.coordinate, offset_m))
    return waypoints
