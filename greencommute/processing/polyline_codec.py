"""
Encoded polyline codec and great-circle distance.

Paths use the Google encoded polyline format (1e-5 degree precision). The
polyline package does the decoding but accepts some malformed strings
silently, so input is checked here first.
"""

import math

import numpy as np
import polyline

from ..exceptions import MalformedPathError
from ..models.commute import Coordinate

EARTH_RADIUS_M = 6_371_000
PRECISION_DIGITS = 5

# Printable range of the encoding alphabet
_MIN_CHAR = 63
_MAX_CHAR = 126
_CONTINUATION = 0x20


def _validate(encoded: str):
    for index, char in enumerate(encoded):
        if not _MIN_CHAR <= ord(char) <= _MAX_CHAR:
            raise MalformedPathError(f"Invalid character {char!r} at position {index}")
    if ord(encoded[-1]) - _MIN_CHAR >= _CONTINUATION:
        raise MalformedPathError("Encoded path ends mid-codeword")


def decode_polyline(encoded: str) -> list[Coordinate]:
    """
    Decode an encoded path into coordinates.

    An empty string decodes to an empty list.

    Raises:
        MalformedPathError: if the string ends inside a codeword, has a
            latitude without a longitude or holds characters outside the
            encoding alphabet
    """
    if not encoded:
        return []
    _validate(encoded)

    try:
        points = polyline.decode(encoded, PRECISION_DIGITS)
    except IndexError as e:
        raise MalformedPathError("Encoded path has a latitude without a longitude") from e

    return [Coordinate(lat=lat, lng=lng) for lat, lng in points]


def encode_polyline(coordinates: list[Coordinate]) -> str:
    """Encode coordinates into a polyline string, rounding half away from zero."""
    if not coordinates:
        return ""
    return polyline.encode([(c.lat, c.lng) for c in coordinates], PRECISION_DIGITS)


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two coordinates."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lng - a.lng)
    h = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def haversine_m_array(origin: Coordinate, lats: np.ndarray, lngs: np.ndarray) -> np.ndarray:
    """Distances in meters from one coordinate to arrays of latitudes/longitudes."""
    phi1 = math.radians(origin.lat)
    phi2 = np.radians(lats)
    dphi = phi2 - phi1
    dlambda = np.radians(lngs) - math.radians(origin.lng)
    h = np.sin(dphi / 2) ** 2 + math.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.minimum(1.0, h)))


def path_length_m(path: list[Coordinate]) -> float:
    """Total length of a path in meters."""
    return sum(haversine_m(a, b) for a, b in zip(path, path[1:]))
