import pytest
from fastapi.testclient import TestClient

from trucknav.api.routes import stops
from trucknav.config import settings
from trucknav.main import create_app
from trucknav.services.routing.models import SequencedWaypoint, SequenceResponse
from trucknav.services.routing.sequencer import NoSequenceFoundError

from test_here_provider import here_payload

ORIGIN = {"latitude": 36.1627, "longitude": -86.7816}
DESTINATION = {"latitude": 35.1495, "longitude": -90.049}


class DummyOracle:
    def __init__(self, error=None):
        self.error = error

    def find_sequence(self, start, destinations, end=None, profile=None):
        if self.error is not None:
            raise self.error
        waypoints = [SequencedWaypoint(tag="start", sequence=0)]
        for offset, index in enumerate(reversed(range(len(destinations)))):
            waypoints.append(SequencedWaypoint(tag=f"destination{index + 1}", sequence=offset + 1))
        return SequenceResponse(waypoints=tuple(waypoints), distance_m=4200, duration_s=360)


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def api_client(app, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(settings, "here_api_key", "here-secret")
    monkeypatch.setattr(settings, "routing_provider", "here")
    return TestClient(app)


def test_health_and_root(api_client):
    assert api_client.get("/api/health").json() == {"status": "ok"}
    root = api_client.get("/").json()
    assert root["health"] == "/api/health"
    providers = api_client.get("/api/health/providers").json()
    assert providers["here_configured"] is True


def test_route_request_returns_masked_query(api_client):
    response = api_client.post(
        "/api/routes/request",
        json={"origin": ORIGIN, "destination": DESTINATION, "via": [{"latitude": 35.6, "longitude": -88.8}]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["provider"] == "here"
    assert body["url"].endswith("/routes")
    assert ["truck[height]", "411"] in body["params"]
    assert ["via", "35.6,-88.8"] in body["params"]
    assert ["apiKey", "***"] in body["params"]


def test_route_request_for_tomtom(api_client, monkeypatch):
    monkeypatch.setattr(settings, "tomtom_api_key", "tt-secret")

    response = api_client.post(
        "/api/routes/request",
        json={"origin": ORIGIN, "destination": DESTINATION, "provider": "tomtom", "avoid": ["tolls"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["url"].endswith("36.1627,-86.7816:35.1495,-90.049/json")
    assert ["avoid", "tollRoads"] in body["params"]
    assert ["key", "***"] in body["params"]


def test_degenerate_route_is_bad_request(api_client):
    response = api_client.post("/api/routes/request", json={"origin": ORIGIN, "destination": ORIGIN})

    assert response.status_code == 400


def test_out_of_range_coordinate_is_rejected(api_client):
    response = api_client.post(
        "/api/routes/request",
        json={"origin": {"latitude": 95.0, "longitude": 0.0}, "destination": DESTINATION},
    )

    assert response.status_code == 422


def test_parse_endpoint(api_client):
    response = api_client.post("/api/routes/parse", json={"provider": "here", "payload": here_payload()})

    body = response.json()
    assert body["ok"] is True
    assert body["route"]["distance_m"] == 2100
    assert body["route"]["tolls"]["total"] == pytest.approx(6.75)
    assert len(body["route"]["geometry"]) == 5
    assert len(body["warnings"]) == 1
    assert body["route"]["instructions"][2]["offset_resolved"] is False


def test_parse_endpoint_reports_errors(api_client):
    response = api_client.post("/api/routes/parse", json={"provider": "tomtom", "payload": {"routes": []}})

    body = response.json()
    assert response.status_code == 200
    assert body["ok"] is False
    assert body["error_type"] == "NoRouteFoundError"


def test_polyline_endpoints(api_client):
    decoded = api_client.post("/api/polyline/decode", json={"encoded": "BFoz5xJ67i1B1B7P!zIhaxL7Y"}).json()
    assert decoded["points"] == [[50.10228, 8.69821], [50.10201, 8.69567]]
    assert decoded["partial"] is True
    assert decoded["third_dimension"] == "absent"

    encoded = api_client.post(
        "/api/polyline/encode",
        json={"points": [[50.10228, 8.69821], [50.10201, 8.69567], [50.10063, 8.6915], [50.09878, 8.68752]]},
    ).json()
    assert encoded["encoded"] == "BFoz5xJ67i1B1B7PzIhaxL7Y"

    reserved = api_client.post("/api/polyline/encode", json={"points": [[1.0, 2.0]], "third_dimension": 4})
    assert reserved.status_code == 400


def test_optimize_stops(app, api_client):
    app.dependency_overrides[stops.get_sequence_oracle] = lambda: DummyOracle()
    payload = {
        "start": ORIGIN,
        "stops": [
            {"id": "a", "name": "A", "location": {"latitude": 35.6, "longitude": -88.8}},
            {"id": "b", "name": "B", "location": {"latitude": 36.2, "longitude": -86.3}, "is_completed": True},
        ],
    }

    response = api_client.post("/api/stops/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert [stop["id"] for stop in body["stops"]] == ["b", "a"]
    assert body["stops"][0]["is_completed"] is True
    assert body["distance_m"] == 4200


def test_optimize_stops_errors(app, api_client):
    app.dependency_overrides[stops.get_sequence_oracle] = lambda: DummyOracle(NoSequenceFoundError("none"))
    payload = {"start": ORIGIN, "stops": [{"name": "A", "location": DESTINATION}]}

    assert api_client.post("/api/stops/optimize", json=payload).status_code == 502
    assert api_client.post("/api/stops/optimize", json={"start": ORIGIN, "stops": []}).status_code == 400


def test_hazard_evaluate(api_client):
    response = api_client.post(
        "/api/hazards/evaluate",
        json={
            "restriction": {"kind": "low_bridge", "location": ORIGIN, "limit": 13.0, "unit": "ft"},
            "distance_m": 1000,
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["violation"] is True
    assert body["margin"] == pytest.approx(0.5)
    assert body["title"] == "LOW BRIDGE AHEAD"
    assert body["distance_label"] == "in 3280 ft"


def test_hazard_evaluate_bad_unit(api_client):
    response = api_client.post(
        "/api/hazards/evaluate",
        json={"restriction": {"kind": "weight_limit", "location": ORIGIN, "limit": 20, "unit": "ft"}},
    )

    assert response.status_code == 400


def test_hazard_scan(api_client):
    response = api_client.post(
        "/api/hazards/scan",
        json={
            "polyline": "BFoz5xJ67i1B1B7PzIhaxL7Y",
            "restrictions": [
                {"kind": "steep_grade", "location": {"latitude": 50.10063, "longitude": 8.6915}, "limit": 6, "unit": "%"},
                {"kind": "low_bridge", "location": {"latitude": 50.10201, "longitude": 8.69567}, "limit": 4.0, "unit": "m"},
            ],
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert [alert["kind"] for alert in body["alerts"]] == ["low_bridge", "steep_grade"]
    assert body["critical_count"] == 1


def test_hazard_scan_requires_geometry(api_client):
    response = api_client.post("/api/hazards/scan", json={"restrictions": []})

    assert response.status_code == 400
