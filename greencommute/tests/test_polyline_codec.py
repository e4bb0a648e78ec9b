"""
Test encoded path decoding/encoding and great-circle distances.
"""

from ..exceptions import MalformedPathError
from ..models.commute import Coordinate
from ..processing.polyline_codec import (
    decode_polyline,
    encode_polyline,
    haversine_m,
    path_length_m,
)

# Reference example from the Google encoded polyline documentation
GOOGLE_EXAMPLE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
GOOGLE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_decode_reference_example():
    """Test decoding the documented example."""
    print("\n=== Testing Reference Decode ===")

    points = decode_polyline(GOOGLE_EXAMPLE)

    assert len(points) == 3
    for point, (lat, lng) in zip(points, GOOGLE_POINTS):
        assert abs(point.lat - lat) < 1e-9
        assert abs(point.lng - lng) < 1e-9

    print(f"✓ Decoded {len(points)} points")


def test_encode_reference_example():
    """Test encoding reproduces the documented string."""
    print("\n=== Testing Reference Encode ===")

    coords = [Coordinate(lat=lat, lng=lng) for lat, lng in GOOGLE_POINTS]
    assert encode_polyline(coords) == GOOGLE_EXAMPLE

    print("✓ Encoded string matches")


def test_decode_empty():
    """Empty string is an empty path, not an error."""
    print("\n=== Testing Empty Decode ===")

    assert decode_polyline("") == []
    assert encode_polyline([]) == ""

    print("✓ Empty path handled")


def test_round_trip_precision():
    """Test a realistic commute path survives to 5 decimal places."""
    print("\n=== Testing Round Trip Precision ===")

    path = [
        Coordinate(lat=33.74901, lng=-84.38798),
        Coordinate(lat=33.75512, lng=-84.38911),
        Coordinate(lat=33.76873, lng=-84.38655),
        Coordinate(lat=33.78452, lng=-84.38349),
    ]
    decoded = decode_polyline(encode_polyline(path))

    assert len(decoded) == len(path)
    for original, restored in zip(path, decoded):
        assert abs(original.lat - restored.lat) < 1e-5
        assert abs(original.lng - restored.lng) < 1e-5

    print("✓ Round trip within 1e-5 degrees")


def test_malformed_input():
    """Test truncated and out-of-alphabet strings are rejected."""
    print("\n=== Testing Malformed Input ===")

    cases = {
        "unterminated codeword": "_p~i",
        "latitude without longitude": "_p~iF",
        "invalid character": "_p~iF ps|U",
    }
    for label, encoded in cases.items():
        try:
            decode_polyline(encoded)
        except MalformedPathError as e:
            print(f"✓ Rejected {label}: {e}")
        else:
            raise AssertionError(f"Expected MalformedPathError for {label}")


def test_haversine():
    """Test great-circle distance properties."""
    print("\n=== Testing Haversine ===")

    a = Coordinate(lat=33.749, lng=-84.388)
    b = Coordinate(lat=33.7845, lng=-84.3835)

    assert haversine_m(a, a) == 0
    assert abs(haversine_m(a, b) - haversine_m(b, a)) < 1e-6

    # One degree of latitude on a 6,371 km sphere
    one_degree = haversine_m(Coordinate(lat=0, lng=0), Coordinate(lat=1, lng=0))
    assert abs(one_degree - 111_195) < 1

    # Downtown to Midtown Atlanta is just under 4 km
    assert 3_800 < haversine_m(a, b) < 4_100

    print(f"✓ Downtown -> Midtown: {haversine_m(a, b):.0f} m")


def test_path_length():
    """Path length is the sum of its segments."""
    print("\n=== Testing Path Length ===")

    a = Coordinate(lat=0, lng=0)
    b = Coordinate(lat=1, lng=0)
    c = Coordinate(lat=2, lng=0)

    assert path_length_m([]) == 0
    assert path_length_m([a]) == 0
    assert abs(path_length_m([a, b, c]) - 2 * haversine_m(a, b)) < 1e-6

    print("✓ Path length correct")


def run_all_tests():
    """Run all polyline codec tests."""
    print("\n" + "=" * 60)
    print("POLYLINE CODEC TESTS")
    print("=" * 60)

    test_decode_reference_example()
    test_encode_reference_example()
    test_decode_empty()
    test_round_trip_precision()
    test_malformed_input()
    test_haversine()
    test_path_length()

    print("\n" + "=" * 60)
    print("✅ ALL POLYLINE CODEC TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
