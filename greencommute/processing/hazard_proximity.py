"""
Nearby-hazard detection along a decoded route.

Long paths are downsampled to roughly MAX_SAMPLES points before measuring.
Each hazard is measured against every sampled point in one vectorised pass,
so the reported distance is the exact minimum over the samples. The only
approximation is the sampling itself: with a sample spacing of S meters the
reported distance overstates the distance to the nearest path vertex by at
most S / 2. Google overview polylines on urban commutes rarely exceed a few
thousand vertices, which keeps S well under the 500 m search radius.
"""

import numpy as np

from ..models.commute import Coordinate, HazardPoint, ScoredHazard
from .polyline_codec import haversine_m_array

DEFAULT_RADIUS_M = 500
MAX_SAMPLES = 200


def sample_path(path: list[Coordinate], max_samples: int = MAX_SAMPLES) -> list[Coordinate]:
    """Every Nth point of the path, always keeping the final point."""
    if not path:
        return []
    stride = max(1, len(path) // max_samples)
    sampled = path[::stride]
    if (len(path) - 1) % stride != 0:
        sampled.append(path[-1])
    return sampled


def find_nearby_hazards(
    path: list[Coordinate],
    hazards: list[HazardPoint],
    radius_m: float = DEFAULT_RADIUS_M,
) -> list[ScoredHazard]:
    """
    Find all hazards within radius_m of the path.

    Args:
        path: Decoded route points
        hazards: Candidate hazards (ids may repeat across feeds)
        radius_m: Search radius in meters

    Returns:
        One ScoredHazard per hazard id, closest first
    """
    if not path or not hazards:
        return []

    sampled = sample_path(path)
    lats = np.array([p.lat for p in sampled])
    lngs = np.array([p.lng for p in sampled])

    nearby: dict[str, ScoredHazard] = {}
    for hazard in hazards:
        distance = float(np.min(haversine_m_array(hazard.coordinate, lats, lngs)))
        distance = float(round(distance))
        if distance > radius_m:
            continue

        existing = nearby.get(hazard.id)
        if existing is not None and existing.distance_meters <= distance:
            continue
        nearby[hazard.id] = ScoredHazard(
            **hazard.model_dump(exclude={"distance_meters"}), distance_meters=distance
        )

    # sorted() is stable, so ties keep feed order
    return sorted(nearby.values(), key=lambda h: h.distance_meters)
