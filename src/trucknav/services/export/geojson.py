"""GeoJSON export of routes, stops and hazard alerts for map rendering."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ...models.domain import Coordinate, HazardAlert, Severity, Stop, TruckProfile
from ..hazards.messages import describe_distance, hazard_message, hazard_title
from ..routing.models import Route
from ..units import describe_profile

SEVERITY_COLORS = {
    Severity.CRITICAL: "#e0003e",
    Severity.INFORMATIONAL: "#e0af00",
}
ROUTE_COLOR = "#0000c1"
STOP_COLORS = {True: "#38e000", False: "#13aae0"}


def _position(coordinate: Coordinate) -> List[float]:
    # GeoJSON uses lon,lat order (x,y)
    return [coordinate.longitude, coordinate.latitude]


def linestring_geometry(points: Sequence[Coordinate]) -> Dict[str, Any]:
    """Build a GeoJSON LineString geometry.

    Args:
        points: Route coordinates in travel order

    Returns:
        GeoJSON geometry object
    """
    if len(points) < 2:
        raise ValueError("LineString must have at least 2 coordinates")
    return {"type": "LineString", "coordinates": [_position(point) for point in points]}


def route_feature(route: Route) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "id": route.id,
        "geometry": linestring_geometry(route.geometry.points),
        "properties": {
            "kind": "route",
            "provider": route.provider,
            "distanceMeters": route.distance_m,
            "durationSeconds": route.duration_s,
            "sectionCount": len(route.sections),
            "tolls": (
                {"currency": route.tolls.currency, "total": route.tolls.total} if route.tolls else None
            ),
            "stroke": ROUTE_COLOR,
            "stroke-width": 4,
        },
    }


def stop_feature(stop: Stop, sequence: int) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "id": stop.id,
        "geometry": {"type": "Point", "coordinates": _position(stop.coordinate)},
        "properties": {
            "kind": "stop",
            "name": stop.name,
            "address": stop.address,
            "sequence": sequence,
            "completed": stop.is_completed,
            "estimatedArrival": stop.estimated_arrival.isoformat() if stop.estimated_arrival else None,
            "marker-color": STOP_COLORS[stop.is_completed],
        },
    }


def alert_feature(alert: HazardAlert, profile: Optional[TruckProfile] = None) -> Dict[str, Any]:
    restriction = alert.restriction
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": _position(restriction.location)},
        "properties": {
            "kind": "hazard",
            "hazard": restriction.kind.value,
            "name": restriction.name,
            "title": hazard_title(restriction.kind),
            "message": hazard_message(alert, profile),
            "distance": describe_distance(alert.distance_m),
            "distanceMeters": alert.distance_m,
            "severity": alert.severity.value,
            "violation": alert.violation,
            "margin": alert.margin,
            "marginUnit": alert.margin_unit,
            "marker-color": SEVERITY_COLORS[alert.severity],
        },
    }


def route_to_feature_collection(
    route: Route,
    alerts: Iterable[HazardAlert] = (),
    stops: Iterable[Stop] = (),
    profile: Optional[TruckProfile] = None,
) -> Dict[str, Any]:
    """Convert a route and its overlays to a GeoJSON FeatureCollection.

    Args:
        route: Parsed route with a decoded geometry
        alerts: Hazard alerts found along the route
        stops: Stops in visiting order
        profile: Truck profile shown on the route line and used to phrase alert messages

    Returns:
        FeatureCollection with the route line first, then stops, then alerts
    """
    features: List[Dict[str, Any]] = [route_feature(route)]
    if profile is not None:
        features[0]["properties"]["truck"] = describe_profile(profile)
    features.extend(stop_feature(stop, sequence) for sequence, stop in enumerate(stops, start=1))
    features.extend(alert_feature(alert, profile) for alert in alerts)
    return {"type": "FeatureCollection", "features": features}


def save_geojson(collection: Dict[str, Any], output_path: Path) -> None:
    """Save a FeatureCollection to disk.

    Args:
        collection: GeoJSON object
        output_path: Path to save JSON file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2, ensure_ascii=False)
