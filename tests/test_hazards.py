import logging

import pytest

from trucknav.models.domain import (
    Coordinate,
    HazardKind,
    HazardRestriction,
    ImperialTruckProfile,
    Severity,
)
from trucknav.services.hazards import (
    HazardEvaluationError,
    describe_distance,
    evaluate,
    hazard_message,
    hazard_title,
    scan_route,
)
from trucknav.services.units import to_metric

HERE = Coordinate(36.0, -86.9)


def _restriction(kind: HazardKind, limit=None, unit=None, location: Coordinate = HERE) -> HazardRestriction:
    return HazardRestriction(kind=kind, location=location, limit=limit, unit=unit)


def test_truck_taller_than_bridge_is_a_violation(semi_profile):
    alert = evaluate(semi_profile, _restriction(HazardKind.LOW_BRIDGE, 13.0, "ft"), 800.0)

    assert alert.violation is True
    assert alert.margin == pytest.approx(0.5, abs=1e-9)
    assert alert.margin_unit == "ft"
    assert alert.severity is Severity.CRITICAL
    assert alert.distance_m == 800.0


def test_truck_under_bridge_has_negative_margin():
    profile = to_metric(ImperialTruckProfile(height_ft=12.0))

    alert = evaluate(profile, _restriction(HazardKind.LOW_BRIDGE, 13.0, "ft"), 0.0)

    assert alert.violation is False
    assert alert.margin == pytest.approx(-1.0, abs=1e-9)
    assert alert.is_critical


def test_exact_fit_is_not_a_violation():
    profile = to_metric(ImperialTruckProfile(gross_weight_lbs=80000.0))

    alert = evaluate(profile, _restriction(HazardKind.WEIGHT_LIMIT, 40.0, "ton"), 0.0)

    assert alert.margin == pytest.approx(0.0, abs=1e-9)
    assert alert.violation is False


def test_margin_reported_in_restriction_unit(semi_profile):
    weight = evaluate(semi_profile, _restriction(HazardKind.WEIGHT_LIMIT, 36.0, "t"), 0.0)
    width = evaluate(semi_profile, _restriction(HazardKind.WIDTH_LIMIT, 2.5, "m"), 0.0)
    length = evaluate(semi_profile, _restriction(HazardKind.LENGTH_LIMIT, 75.0, "ft"), 0.0)

    assert weight.margin == pytest.approx(0.28736)
    assert weight.violation
    assert width.margin == pytest.approx(0.0908)
    assert width.violation
    assert length.margin == pytest.approx(-5.0)
    assert not length.violation


def test_tunnel_and_grade_are_informational(semi_profile):
    tunnel = evaluate(semi_profile, _restriction(HazardKind.TUNNEL), 0.0)
    low_tunnel = evaluate(semi_profile, _restriction(HazardKind.TUNNEL, 4.0, "m"), 0.0)
    grade = evaluate(semi_profile, _restriction(HazardKind.STEEP_GRADE, 7.0, "%"), 0.0)

    assert tunnel.severity is Severity.INFORMATIONAL
    assert tunnel.margin is None
    assert low_tunnel.severity is Severity.INFORMATIONAL
    assert low_tunnel.margin == pytest.approx(0.1148)
    assert low_tunnel.violation
    assert grade.severity is Severity.INFORMATIONAL
    assert grade.margin is None
    assert grade.margin_unit is None
    assert grade.violation is False


@pytest.mark.parametrize(
    "restriction",
    [
        _restriction(HazardKind.LOW_BRIDGE, 13.0, "kg"),
        _restriction(HazardKind.WEIGHT_LIMIT, 40.0, "ft"),
        _restriction(HazardKind.WIDTH_LIMIT, None, "m"),
        _restriction(HazardKind.LENGTH_LIMIT, 20.0, None),
    ],
)
def test_unusable_restrictions_raise(semi_profile, restriction):
    with pytest.raises(HazardEvaluationError):
        evaluate(semi_profile, restriction, 0.0)


def test_evaluation_is_deterministic(semi_profile):
    restriction = _restriction(HazardKind.LOW_BRIDGE, 4.0, "m")

    assert evaluate(semi_profile, restriction, 10.0) == evaluate(semi_profile, restriction, 10.0)


def test_scan_orders_by_distance_and_skips_off_route(semi_profile, caplog):
    geometry = [Coordinate(36.0, -87.0), Coordinate(36.0, -86.9), Coordinate(36.0, -86.8)]
    restrictions = [
        _restriction(HazardKind.LOW_BRIDGE, 13.0, "ft", Coordinate(36.0001, -86.85)),
        _restriction(HazardKind.WEIGHT_LIMIT, 20.0, "t", Coordinate(36.0, -86.95)),
        _restriction(HazardKind.LOW_BRIDGE, 10.0, "ft", Coordinate(36.1, -86.9)),
        _restriction(HazardKind.WIDTH_LIMIT, 2.0, "kg", Coordinate(36.0, -86.9)),
    ]

    with caplog.at_level(logging.WARNING, logger="trucknav"):
        alerts = scan_route(semi_profile, geometry, restrictions, buffer_m=50.0)

    assert [alert.kind for alert in alerts] == [HazardKind.WEIGHT_LIMIT, HazardKind.LOW_BRIDGE]
    assert alerts[0].distance_m == pytest.approx(4500, rel=0.01)
    assert alerts[1].distance_m == pytest.approx(13500, rel=0.01)
    assert "Suppressed width_limit alert" in caplog.text


def test_scan_without_geometry_locates_nothing(semi_profile, caplog):
    with caplog.at_level(logging.WARNING, logger="trucknav"):
        alerts = scan_route(semi_profile, [], [_restriction(HazardKind.LOW_BRIDGE, 13.0, "ft")])

    assert alerts == []
    assert "no geometry" in caplog.text


def test_titles_and_messages(semi_profile):
    bridge = evaluate(semi_profile, _restriction(HazardKind.LOW_BRIDGE, 13.0, "ft"), 0.0)
    weight = evaluate(semi_profile, _restriction(HazardKind.WEIGHT_LIMIT, 40.0, "ton"), 0.0)
    grade = evaluate(semi_profile, _restriction(HazardKind.STEEP_GRADE, 7.0, "%"), 0.0)
    tunnel = evaluate(semi_profile, _restriction(HazardKind.TUNNEL), 0.0)

    assert hazard_title(HazardKind.LOW_BRIDGE) == "LOW BRIDGE AHEAD"
    assert hazard_title(HazardKind.WIDTH_LIMIT) == "WIDTH RESTRICTION AHEAD"
    assert hazard_message(bridge, semi_profile) == (
        "Bridge clearance: 13'\nYour truck height: 13'6\"\nNote: 6\" over clearance"
    )
    assert hazard_message(bridge) == "Bridge clearance: 13'"
    assert hazard_message(weight, semi_profile) == (
        "Weight limit: 80000 lbs\nYour truck weight: 80000 lbs\nWeight margin: 0 lbs"
    )
    assert hazard_message(grade) == "Steep grade: 7.0% - Use appropriate gear"
    assert hazard_message(tunnel).startswith("Tunnel restrictions apply")


@pytest.mark.parametrize(
    "meters, expected",
    [(50.0, "NOW"), (500.0, "in 1640 ft"), (3218.688, "in 2.0 mi")],
)
def test_describe_distance(meters, expected):
    assert describe_distance(meters) == expected
