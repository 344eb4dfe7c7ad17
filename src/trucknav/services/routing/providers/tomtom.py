"""TomTom Routing API adapter."""

from __future__ import annotations

import logging
from bisect import bisect_right
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ValidationError

from ....config import settings
from ....models.domain import Avoidance, Coordinate, HazardousGoods
from ...units import kilograms_for_query, meters_for_query
from ..models import DecodedGeometry, Instruction, ParsedRoute, Route, RouteRequest, RouteSection
from .base import (
    MalformedResponseError,
    NoRouteFoundError,
    ProviderQuery,
    RoutingProvider,
    join_geometries,
    resolve_offset,
)

logger = logging.getLogger(__name__)

AVOID_VALUES: dict[Avoidance, str] = {
    Avoidance.TOLLS: "tollRoads",
    Avoidance.UNPAVED: "unpavedRoads",
    Avoidance.FERRIES: "ferries",
    Avoidance.TUNNELS: "tunnels",
    Avoidance.BORDER_CROSSINGS: "borderCrossings",
    Avoidance.MOTORWAYS: "motorways",
}

LOAD_TYPES: dict[HazardousGoods, str] = {
    HazardousGoods.EXPLOSIVE: "USHazmatClass1",
    HazardousGoods.GAS: "USHazmatClass2",
    HazardousGoods.FLAMMABLE: "USHazmatClass3",
    HazardousGoods.COMBUSTIBLE: "USHazmatClass4",
    HazardousGoods.ORGANIC: "USHazmatClass5",
    HazardousGoods.POISON: "USHazmatClass6",
    HazardousGoods.POISONOUS_INHALATION: "USHazmatClass6",
    HazardousGoods.RADIOACTIVE: "USHazmatClass7",
    HazardousGoods.CORROSIVE: "USHazmatClass8",
    HazardousGoods.OTHER: "USHazmatClass9",
    HazardousGoods.HARMFUL_TO_WATER: "otherHazmatHarmfulToWater",
}


class _TomTomPoint(BaseModel):
    latitude: float
    longitude: float


class _TomTomSummary(BaseModel):
    lengthInMeters: float
    travelTimeInSeconds: float
    trafficDelayInSeconds: Optional[float] = None


class _TomTomLeg(BaseModel):
    summary: _TomTomSummary
    points: List[_TomTomPoint] = []


class _TomTomInstruction(BaseModel):
    routeOffsetInMeters: Optional[float] = None
    pointIndex: Optional[int] = None
    maneuver: Optional[str] = None
    message: Optional[str] = None
    instruction: Optional[str] = None
    drivingSide: Optional[str] = None


class _TomTomGuidance(BaseModel):
    instructions: List[_TomTomInstruction] = []


class _TomTomRoute(BaseModel):
    summary: _TomTomSummary
    legs: List[_TomTomLeg]
    guidance: Optional[_TomTomGuidance] = None


class _TomTomResponse(BaseModel):
    routes: List[_TomTomRoute]


class TomTomRoutingProvider(RoutingProvider):
    """TomTom Routing API v1 (truck travel mode)."""

    name = "tomtom"
    max_via_points = 148

    def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
        self.api_key = api_key or settings.tomtom_api_key
        self.base_url = (base_url or settings.tomtom_routing_url).rstrip("/")

    def build_query(self, request: RouteRequest) -> ProviderQuery:
        self.check_limits(request)
        api_key = self.require_api_key()
        profile = request.profile
        locations = ":".join(point.as_query() for point in request.waypoints)
        params: list[tuple[str, str]] = [
            ("key", api_key),
            ("travelMode", "truck"),
            ("traffic", "true"),
            ("routeType", "fastest"),
            ("instructionsType", "text"),
            ("vehicleWeight", str(kilograms_for_query(profile.gross_weight_kg))),
        ]
        if profile.axle_weight_kg is not None:
            params.append(("vehicleAxleWeight", str(kilograms_for_query(profile.axle_weight_kg))))
        params.extend(
            [
                ("vehicleLength", f"{meters_for_query(profile.length_m):.2f}"),
                ("vehicleWidth", f"{meters_for_query(profile.width_m):.2f}"),
                ("vehicleHeight", f"{meters_for_query(profile.height_m):.2f}"),
                ("vehicleNumberOfAxles", str(profile.axle_count)),
                ("vehicleCommercial", "true" if profile.commercial else "false"),
            ]
        )
        if profile.hazardous_goods:
            load_types = sorted({LOAD_TYPES[item] for item in profile.hazardous_goods})
            params.append(("vehicleLoadType", ",".join(load_types)))
        params.extend(("avoid", AVOID_VALUES[item]) for item in Avoidance if item in request.avoid)
        if request.alternates:
            params.append(("maxAlternatives", str(settings.max_alternatives)))
        return ProviderQuery(url=f"{self.base_url}/{locations}/json", params=tuple(params))

    def parse_response(self, payload: Mapping[str, Any]) -> ParsedRoute:
        if not isinstance(payload, Mapping) or not isinstance(payload.get("routes"), list):
            raise MalformedResponseError("TomTom response has no 'routes' list.")
        if not payload["routes"]:
            raise NoRouteFoundError("TomTom returned no routes")
        try:
            response = _TomTomResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError(f"TomTom response failed validation: {exc.error_count()} errors") from exc

        first = response.routes[0]
        if not first.legs:
            raise MalformedResponseError("TomTom route has no legs.")

        # pointIndex refers to the raw concatenation of all leg points.
        raw_points: list[Coordinate] = []
        # Start index and leg number of each leg that has points.
        leg_starts: list[int] = []
        leg_numbers: list[int] = []
        leg_geometries: list[DecodedGeometry] = []
        for number, leg in enumerate(first.legs):
            if leg.points:
                leg_starts.append(len(raw_points))
                leg_numbers.append(number)
            points = tuple(Coordinate(point.latitude, point.longitude) for point in leg.points)
            raw_points.extend(points)
            leg_geometries.append(DecodedGeometry(points=points))

        warnings: list[str] = []
        leg_instructions: list[list[Instruction]] = [[] for _ in first.legs]
        guidance = first.guidance.instructions if first.guidance else []
        for position, item in enumerate(guidance):
            coordinate, index, resolved = resolve_offset(raw_points, item.pointIndex)
            if not resolved:
                warnings.append(
                    f"Instruction {position} point index {index} is outside the "
                    f"{len(raw_points)}-point route geometry; using (0, 0)."
                )
            distance = 0.0
            if position + 1 < len(guidance):
                current = item.routeOffsetInMeters or 0.0
                following = guidance[position + 1].routeOffsetInMeters
                if following is not None:
                    distance = max(following - current, 0.0)
            if resolved:
                leg = leg_numbers[bisect_right(leg_starts, index) - 1]
            else:
                leg = leg_numbers[0] if leg_numbers else 0
            leg_instructions[leg].append(
                Instruction(
                    text=item.message or item.instruction or "",
                    action=item.maneuver or "",
                    distance_m=distance,
                    coordinate=coordinate,
                    direction=item.drivingSide,
                    offset=index,
                    offset_resolved=resolved,
                )
            )

        sections = tuple(
            RouteSection(
                id=f"leg-{number}",
                distance_m=leg.summary.lengthInMeters,
                duration_s=leg.summary.travelTimeInSeconds,
                instructions=tuple(leg_instructions[number]),
                geometry=leg_geometries[number],
            )
            for number, leg in enumerate(first.legs)
        )
        route = Route(
            id="route-0",
            provider=self.name,
            sections=sections,
            distance_m=sum(section.distance_m for section in sections),
            duration_s=sum(section.duration_s for section in sections),
            geometry=join_geometries(leg_geometries),
            tolls=None,
        )
        logger.debug(f"Parsed TomTom route: {len(sections)} legs, {len(raw_points)} points")
        return ParsedRoute(route=route, warnings=warnings)
