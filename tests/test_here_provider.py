from dataclasses import replace
from datetime import datetime, timezone

import pytest

from trucknav.models.domain import Avoidance, Coordinate, HazardousGoods
from trucknav.services.routing import polyline
from trucknav.services.routing.models import SequenceResponse
from trucknav.services.routing.providers import (
    HereRoutingProvider,
    HereWaypointSequenceOracle,
    MalformedResponseError,
    NoRouteFoundError,
    ProviderLimitError,
)
from trucknav.services.routing.request_builder import build_route_request
from trucknav.services.routing.sequencer import MalformedSequenceResponseError, NoSequenceFoundError

SECTION_ONE = "BFoz5xJ67i1B1B7PzIhaxL7Y"


def here_payload() -> dict:
    section_two = polyline.encode([(50.09878, 8.68752), (50.09, 8.68)])
    return {
        "routes": [
            {
                "id": "route-1",
                "sections": [
                    {
                        "id": "section-1",
                        "type": "vehicle",
                        "summary": {"duration": 600, "length": 1200},
                        "polyline": SECTION_ONE,
                        "actions": [
                            {"action": "depart", "instruction": "Head west", "offset": 0, "length": 400},
                            {"action": "turn", "instruction": "Turn left", "offset": 3, "direction": "left", "length": 800},
                            {"action": "continue", "instruction": "Continue", "offset": 7},
                        ],
                        "tolls": [
                            {"name": "Bridge", "countryCode": "USA", "fares": [{"price": {"value": 4.5, "currency": "USD"}}]},
                            {"name": "Pike", "fares": [{"price": 2.25}, {"price": 99.0}]},
                        ],
                    },
                    {
                        "id": "section-2",
                        "summary": {"duration": 300, "length": 900},
                        "polyline": section_two,
                        "actions": [{"action": "arrive", "instruction": "Arrive", "offset": 1}],
                        "tolls": [{"name": "Later", "fares": [{"price": {"value": 10.0, "currency": "EUR"}}]}],
                    },
                ],
            }
        ]
    }


@pytest.fixture
def provider() -> HereRoutingProvider:
    return HereRoutingProvider(api_key="here-key", base_url="https://router.example.com/v8")


def test_query_contains_truck_parameters(provider, semi_profile, nashville, memphis):
    via = [Coordinate(35.6145, -88.8139), Coordinate(35.9, -87.5)]
    request = build_route_request(nashville, memphis, via, profile=semi_profile)

    query = provider.build_query(request)
    params = dict(query.params)

    assert query.url == "https://router.example.com/v8/routes"
    assert params["transportMode"] == "truck"
    assert params["origin"] == "36.1627,-86.7816"
    assert params["destination"] == "35.1495,-90.049"
    assert params["return"] == "polyline,summary,actions,instructions,tolls"
    assert [value for name, value in query.params if name == "via"] == ["35.6145,-88.8139", "35.9,-87.5"]
    assert params["truck[grossWeight]"] == "36287"
    assert params["truck[height]"] == "411"
    assert params["truck[width]"] == "259"
    assert params["truck[length]"] == "2134"
    assert params["truck[axleCount]"] == "5"
    assert params["truck[trailerCount]"] == "1"
    assert params["truck[weightPerAxle]"] == "15422"
    assert params["avoid[features]"] == "dirtRoad"
    assert "alternatives" not in params
    assert query.params[-1] == ("apiKey", "here-key")
    assert ("apiKey", "***") in query.redacted_params()


def test_query_hazmat_avoidances_and_alternatives(provider, semi_profile, nashville, memphis):
    profile = replace(semi_profile, hazardous_goods=frozenset({HazardousGoods.GAS, HazardousGoods.EXPLOSIVE}))
    request = build_route_request(
        nashville,
        memphis,
        profile=profile,
        avoid=[Avoidance.TOLLS, Avoidance.TUNNELS, Avoidance.BORDER_CROSSINGS],
        alternates=True,
    )

    params = dict(provider.build_query(request).params)

    assert params["truck[shippedHazardousGoods]"] == "explosive,gas"
    assert params["avoid[features]"] == "tollRoad,tunnel"
    assert params["alternatives"] == "2"


def test_query_requires_api_key(monkeypatch, semi_profile, nashville, memphis):
    from trucknav.config import settings

    monkeypatch.setattr(settings, "here_api_key", None)
    provider = HereRoutingProvider()

    with pytest.raises(ValueError, match="API key"):
        provider.build_query(build_route_request(nashville, memphis, profile=semi_profile))


def test_too_many_via_points_rejected(provider, semi_profile, nashville, memphis):
    via = [Coordinate(35.0 + i * 0.001, -87.0) for i in range(201)]
    request = build_route_request(nashville, memphis, via, profile=semi_profile)

    with pytest.raises(ProviderLimitError):
        provider.build_query(request)


def test_parse_sections_instructions_and_tolls(provider):
    parsed = provider.parse_response(here_payload())
    route = parsed.route

    assert route.id == "route-1"
    assert route.provider == "here"
    assert route.distance_m == 2100
    assert route.duration_s == 900
    assert len(route.sections) == 2
    assert len(route.geometry) == 5  # junction point shared by both sections

    first, second = route.sections
    assert first.instructions[1].coordinate == first.geometry[3]
    assert first.instructions[1].direction == "left"
    assert second.instructions[0].coordinate == second.geometry[1]

    assert route.tolls.total == pytest.approx(6.75)
    assert route.tolls.currency == "USD"
    assert [detail.name for detail in route.tolls.details] == ["Bridge", "Pike"]
    assert second.tolls.currency == "EUR"


def test_out_of_range_offset_uses_sentinel_and_warns(provider):
    parsed = provider.parse_response(here_payload())
    unresolved = parsed.route.sections[0].instructions[2]

    assert unresolved.coordinate == Coordinate(0.0, 0.0)
    assert unresolved.offset == 7
    assert unresolved.offset_resolved is False
    assert len(parsed.warnings) == 1
    assert "offset 7" in parsed.warnings[0]


def test_empty_routes_raise_no_route(provider):
    with pytest.raises(NoRouteFoundError, match="Truck too heavy"):
        provider.parse_response({"routes": [], "notices": [{"title": "Truck too heavy", "code": "x"}]})


def test_missing_summary_is_malformed(provider):
    with pytest.raises(MalformedResponseError):
        provider.parse_response({"routes": [{"sections": [{"polyline": SECTION_ONE}]}]})


def test_sequence_query(nashville, three_stops, semi_profile):
    oracle = HereWaypointSequenceOracle(api_key="wps-key", base_url="https://wps.example.com/findsequence2")
    departure = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)

    query = oracle.build_query(nashville, [stop.coordinate for stop in three_stops], None, semi_profile, departure)
    params = dict(query.params)

    assert query.url == "https://wps.example.com/findsequence2"
    assert params["mode"] == "fastest;truck;traffic:enabled"
    assert params["improveFor"] == "time"
    assert params["departure"] == "2026-05-01T08:00:00+00:00"
    assert params["start"] == "36.1627,-86.7816"
    assert params["destination1"] == "35.6145,-88.8139"
    assert params["destination3"] == "36.077,-87.3878"
    assert "end" not in params
    assert params["height"] == "4.11"
    assert params["limitedWeight"] == "36.29"


def test_sequence_response_parsing():
    oracle = HereWaypointSequenceOracle(api_key="wps-key")
    body = (
        b'{"results": [{"distance": "120500", "time": "5400", "waypoints": ['
        b'{"id": "start", "lat": 36.16, "lng": -86.78, "sequence": 0},'
        b'{"id": "destination2", "lat": 36.2, "lng": -86.29, "sequence": 1, "estimatedArrival": "2026-05-01T09:00:00Z"},'
        b'{"id": "destination1", "lat": 35.6, "lng": -88.8, "sequence": 2, "estimatedArrival": "soon"}'
        b"]}]}"
    )

    response = oracle.parse_response(body)

    assert isinstance(response, SequenceResponse)
    assert response.distance_m == 120500
    assert response.duration_s == 5400
    assert [waypoint.tag for waypoint in response.waypoints] == ["start", "destination2", "destination1"]
    assert response.waypoints[1].estimated_arrival == datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
    assert response.waypoints[2].estimated_arrival is None


def test_sequence_response_errors():
    oracle = HereWaypointSequenceOracle(api_key="wps-key")

    with pytest.raises(MalformedSequenceResponseError):
        oracle.parse_response(b"<html>")
    with pytest.raises(NoSequenceFoundError):
        oracle.parse_response({"results": [], "errors": ["no route"]})
    with pytest.raises(MalformedSequenceResponseError):
        oracle.parse_response({"results": [{"waypoints": [{"id": "start"}]}]})
    with pytest.raises(MalformedSequenceResponseError, match="invalid waypoint"):
        oracle.parse_response({"results": [{"waypoints": [{"id": "start", "lat": 95.0, "lng": 1.0, "sequence": 0}]}]})
