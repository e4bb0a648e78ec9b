"""
Test provider adapters against canned HTTP responses.
"""

import asyncio

import httpx

from ..clients.airnow import AirNowClient
from ..clients.google_directions import GoogleDirectionsClient
from ..clients.hazard_feed import HazardFeedClient
from ..clients.openweathermap import OpenWeatherMapClient
from ..exceptions import ProviderUnavailable
from ..models.commute import Coordinate, HazardOrigin

ATLANTA = Coordinate(lat=33.749, lng=-84.388)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _with_client(client, call):
    try:
        return await call()
    finally:
        await client.close()


def run(client, call):
    return asyncio.run(_with_client(client, call))


DIRECTIONS_OK = {
    "status": "OK",
    "routes": [
        {
            "summary": "I-75 N",
            "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC"},
            "legs": [
                {
                    "distance": {"text": "4.2 km", "value": 4200},
                    "duration": {"text": "9 mins", "value": 540},
                    "steps": [
                        {
                            "html_instructions": "Head <b>north</b>",
                            "distance": {"text": "4.2 km", "value": 4200},
                            "duration": {"text": "9 mins", "value": 540},
                        }
                    ],
                }
            ],
        }
    ],
}


def test_directions_parsing():
    """Test routes are parsed and waypoints are sent as via points."""
    print("\n=== Testing Directions Parsing ===")

    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return httpx.Response(200, json=DIRECTIONS_OK)

    client = GoogleDirectionsClient("test-key")
    client._client = mock_client(handler)

    routes = run(client, lambda: client.get_routes(
        "Five Points", "Midtown", avoid_highways=True,
        waypoints=[Coordinate(lat=33.76, lng=-84.39)],
    ))

    assert len(routes) == 1
    assert routes[0].summary == "I-75 N"
    assert routes[0].distance_m == 4200
    assert routes[0].duration_s == 540
    assert routes[0].steps[0].instruction_html == "Head <b>north</b>"

    params = seen[0]
    assert params["avoid"] == "highways"
    assert params["waypoints"] == "via:33.76,-84.39"
    assert "alternatives" not in params

    print("✓ Directions parsed")


def test_directions_error_status():
    """A non-OK directions status is a provider failure."""
    print("\n=== Testing Directions Error Status ===")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"})

    client = GoogleDirectionsClient("test-key")
    client._client = mock_client(handler)

    try:
        run(client, lambda: client.get_routes("A", "B"))
    except ProviderUnavailable as e:
        assert e.provider == "google_directions"
        assert "REQUEST_DENIED" in e.reason
        print(f"✓ Raised: {e}")
    else:
        raise AssertionError("Expected ProviderUnavailable")


def test_weather_parsing():
    """Test temperature rounding and condition title-casing."""
    print("\n=== Testing Weather Parsing ===")

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["units"] == "imperial"
        return httpx.Response(200, json={
            "weather": [{"main": "Clouds", "description": "broken clouds"}],
            "main": {"temp": 78.6, "humidity": 61},
        })

    client = OpenWeatherMapClient("test-key")
    client._client = mock_client(handler)
    reading = run(client, lambda: client.get_weather(ATLANTA))

    assert reading.temperature == 79
    assert reading.weather_condition == "Broken Clouds"
    assert reading.humidity == 61

    print(f"✓ {reading.weather_condition} at {reading.temperature:g}°F")


def test_air_quality_worst_pollutant():
    """Test the highest AQI across pollutants is reported."""
    print("\n=== Testing Air Quality Parsing ===")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[
            {"ParameterName": "O3", "AQI": 44, "Category": {"Number": 1, "Name": "Good"}},
            {"ParameterName": "PM2.5", "AQI": 112,
             "Category": {"Number": 3, "Name": "Unhealthy for Sensitive Groups"}},
        ])

    client = AirNowClient("test-key")
    client._client = mock_client(handler)
    reading = run(client, lambda: client.get_air_quality(ATLANTA))

    assert reading.air_quality_index == 112
    assert reading.air_quality_description.startswith("Unhealthy for Sensitive Groups")

    print(f"✓ AQI {reading.air_quality_index:g}")


def test_air_quality_no_observations():
    """No nearby station is a neutral reading, not a failure."""
    print("\n=== Testing Air Quality Without Observations ===")

    client = AirNowClient("test-key")
    client._client = mock_client(lambda request: httpx.Response(200, json=[]))
    reading = run(client, lambda: client.get_air_quality(ATLANTA))

    assert reading.air_quality_index == 50
    assert reading.air_quality_description == "Data temporarily unavailable"

    print("✓ Neutral reading returned")


CAMERAS = {
    "data": [
        {
            "camId": "GDOT-1042",
            "locationName": "I-20 at Moreland Ave",
            "lat": 33.7402,
            "lng": -84.3491,
            "currentStatus": {
                "hazard": True,
                "type": "Flood",
                "severity": 7.6,
                "geminiExplanation": "Water pooling in right lanes",
            },
        }
    ]
}

REPORTS = {
    "data": [
        {"reportId": "r1", "type": "pothole", "description": "Deep pothole",
         "lat": 33.77, "lng": -84.39, "status": "verified"},
        {"reportId": "r2", "type": "flooding", "lat": 33.78, "lng": -84.38, "status": "resolved"},
        {"reportId": "r3", "type": "sinkhole", "lat": 33.79, "lng": -84.37, "status": "pending"},
    ]
}


def test_hazard_feed_merge():
    """Test camera and report hazards are merged, resolved reports skipped."""
    print("\n=== Testing Hazard Feed Merge ===")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/cameras/hazards/active":
            return httpx.Response(200, json=CAMERAS)
        return httpx.Response(200, json=REPORTS)

    client = HazardFeedClient("http://feed.local/")
    client._client = mock_client(handler)
    hazards = run(client, client.get_active_hazards)

    assert [h.id for h in hazards] == ["cam-GDOT-1042", "report-r1", "report-r3"]

    camera = hazards[0]
    assert camera.origin == HazardOrigin.SENSOR
    assert camera.severity == 8
    assert camera.category == "Flood"
    assert "Moreland" in camera.description

    pothole, unknown = hazards[1], hazards[2]
    assert pothole.origin == HazardOrigin.COMMUNITY_REPORT
    assert pothole.severity == 5
    assert unknown.severity == 4
    assert unknown.description == "Community report: sinkhole"

    print(f"✓ Merged {len(hazards)} hazards")


def test_hazard_feed_partial_failure():
    """One failing sub-feed is skipped; both failing is an error."""
    print("\n=== Testing Hazard Feed Partial Failure ===")

    def cameras_down(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/cameras/hazards/active":
            return httpx.Response(503)
        return httpx.Response(200, json=REPORTS)

    client = HazardFeedClient("http://feed.local")
    client._client = mock_client(cameras_down)
    hazards = run(client, client.get_active_hazards)
    assert [h.id for h in hazards] == ["report-r1", "report-r3"]
    print("✓ Reports served while cameras are down")

    client = HazardFeedClient("http://feed.local")
    client._client = mock_client(lambda request: httpx.Response(500))
    try:
        run(client, client.get_active_hazards)
    except ProviderUnavailable as e:
        assert e.provider == "hazard_feed"
        print(f"✓ Raised: {e}")
    else:
        raise AssertionError("Expected ProviderUnavailable")


def test_hazard_feed_skips_invalid_records():
    """A malformed record is dropped without losing the rest of its feed."""
    print("\n=== Testing Hazard Feed Invalid Records ===")

    bad_camera = {
        "camId": "GDOT-2210",
        "lat": 33.76,
        "lng": -84.40,
        "currentStatus": {"hazard": True, "type": "Crash", "severity": 14},
    }
    no_position = {"camId": "GDOT-3001", "lng": -84.41,
                   "currentStatus": {"type": "Debris", "severity": 5}}
    cameras = {"data": [bad_camera, CAMERAS["data"][0], no_position]}
    reports = {"data": [{"reportId": "r9", "type": "pothole", "status": "pending"}] + REPORTS["data"]}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/cameras/hazards/active":
            return httpx.Response(200, json=cameras)
        return httpx.Response(200, json=reports)

    client = HazardFeedClient("http://feed.local")
    client._client = mock_client(handler)
    hazards = run(client, client.get_active_hazards)

    assert [h.id for h in hazards] == ["cam-GDOT-1042", "report-r1", "report-r3"]

    print("✓ Invalid records skipped")


def run_all_tests():
    """Run all client adapter tests."""
    print("\n" + "=" * 60)
    print("PROVIDER CLIENT TESTS")
    print("=" * 60)

    test_directions_parsing()
    test_directions_error_status()
    test_weather_parsing()
    test_air_quality_worst_pollutant()
    test_air_quality_no_observations()
    test_hazard_feed_merge()
    test_hazard_feed_partial_failure()
    test_hazard_feed_skips_invalid_records()

    print("\n" + "=" * 60)
    print("✅ ALL PROVIDER CLIENT TESTS PASSED")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
