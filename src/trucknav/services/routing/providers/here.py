"""HERE Routing v8 and Waypoints Sequence v8 adapters."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from ....config import settings
from ....models.domain import Avoidance, Coordinate, TruckProfile
from ...units import kilograms_for_query, meters_for_query, to_centimeters
from .. import polyline
from ..http_client import ProviderClient
from ..models import (
    Instruction,
    ParsedRoute,
    Route,
    RouteRequest,
    RouteSection,
    SequencedWaypoint,
    SequenceResponse,
    TollCosts,
    TollDetail,
)
from ..sequencer import (
    END_TAG,
    START_TAG,
    MalformedSequenceResponseError,
    NoSequenceFoundError,
    destination_tag,
)
from .base import (
    MalformedResponseError,
    NoRouteFoundError,
    ProviderQuery,
    RoutingProvider,
    join_geometries,
    resolve_offset,
)

logger = logging.getLogger(__name__)

RETURN_FIELDS = "polyline,summary,actions,instructions,tolls"

AVOID_FEATURES: dict[Avoidance, Optional[str]] = {
    Avoidance.TOLLS: "tollRoad",
    Avoidance.UNPAVED: "dirtRoad",
    Avoidance.FERRIES: "ferry",
    Avoidance.TUNNELS: "tunnel",
    Avoidance.MOTORWAYS: "controlledAccessHighway",
    Avoidance.BORDER_CROSSINGS: None,
}


class _HerePrice(BaseModel):
    value: Optional[float] = None
    currency: Optional[str] = None


class _HereFare(BaseModel):
    price: Union[float, _HerePrice, None] = None
    currencyCode: Optional[str] = None

    def amount(self) -> float:
        if isinstance(self.price, _HerePrice):
            return self.price.value or 0.0
        return self.price or 0.0

    def currency(self) -> Optional[str]:
        if isinstance(self.price, _HerePrice) and self.price.currency:
            return self.price.currency
        return self.currencyCode


class _HereToll(BaseModel):
    name: Optional[str] = None
    country: Optional[str] = None
    countryCode: Optional[str] = None
    fares: Optional[List[_HereFare]] = None


class _HereAction(BaseModel):
    action: Optional[str] = None
    duration: Optional[float] = None
    length: Optional[float] = None
    instruction: Optional[str] = None
    offset: Optional[float] = None
    direction: Optional[str] = None
    severity: Optional[str] = None


class _HereSummary(BaseModel):
    duration: float
    length: float
    baseDuration: Optional[float] = None


class _HereSection(BaseModel):
    id: str = ""
    type: Optional[str] = None
    summary: _HereSummary
    polyline: Optional[str] = None
    actions: Optional[List[_HereAction]] = None
    tolls: Optional[List[_HereToll]] = None


class _HereRoute(BaseModel):
    id: str = ""
    sections: List[_HereSection]


class _HereRoutingResponse(BaseModel):
    routes: List[_HereRoute]


def _toll_costs(tolls: Optional[List[_HereToll]]) -> Optional[TollCosts]:
    if not tolls:
        return None
    details = []
    currency = None
    for toll in tolls:
        fare = toll.fares[0] if toll.fares else None
        if currency is None and fare is not None:
            currency = fare.currency()
        details.append(
            TollDetail(
                name=toll.name or "Toll",
                cost=fare.amount() if fare is not None else 0.0,
                country=toll.country or toll.countryCode,
            )
        )
    return TollCosts(
        currency=currency or "USD",
        total=sum(detail.cost for detail in details),
        details=tuple(details),
    )


class HereRoutingProvider(RoutingProvider):
    """HERE Routing API v8 (truck transport mode)."""

    name = "here"
    max_via_points = 200

    def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
        self.api_key = api_key or settings.here_api_key
        self.base_url = (base_url or settings.here_routing_url).rstrip("/")

    def build_query(self, request: RouteRequest) -> ProviderQuery:
        self.check_limits(request)
        api_key = self.require_api_key()
        profile = request.profile
        params: list[tuple[str, str]] = [
            ("transportMode", "truck"),
            ("origin", request.origin.as_query()),
            ("destination", request.destination.as_query()),
            ("return", RETURN_FIELDS),
        ]
        params.extend(("via", point.as_query()) for point in request.via)

        # HERE expects dimensions in centimeters and weights in kilograms.
        params.extend(
            [
                ("truck[grossWeight]", str(kilograms_for_query(profile.gross_weight_kg))),
                ("truck[height]", str(to_centimeters(profile.height_m))),
                ("truck[width]", str(to_centimeters(profile.width_m))),
                ("truck[length]", str(to_centimeters(profile.length_m))),
                ("truck[axleCount]", str(profile.axle_count)),
                ("truck[trailerCount]", str(profile.trailer_count)),
            ]
        )
        if profile.axle_weight_kg is not None:
            params.append(("truck[weightPerAxle]", str(kilograms_for_query(profile.axle_weight_kg))))
        if profile.hazardous_goods:
            goods = sorted(item.value for item in profile.hazardous_goods)
            params.append(("truck[shippedHazardousGoods]", ",".join(goods)))

        features = []
        for avoidance in Avoidance:
            if avoidance not in request.avoid:
                continue
            feature = AVOID_FEATURES[avoidance]
            if feature is None:
                logger.info(f"HERE routing cannot avoid {avoidance.value}; ignoring")
                continue
            features.append(feature)
        if features:
            params.append(("avoid[features]", ",".join(features)))

        if request.alternates:
            params.append(("alternatives", str(settings.max_alternatives)))
        params.append(("apiKey", api_key))
        return ProviderQuery(url=f"{self.base_url}/routes", params=tuple(params))

    def parse_response(self, payload: Mapping[str, Any]) -> ParsedRoute:
        if not isinstance(payload, Mapping) or not isinstance(payload.get("routes"), list):
            raise MalformedResponseError("HERE response has no 'routes' list.")
        if not payload["routes"]:
            notices = payload.get("notices") or []
            titles = [str(notice.get("title", notice)) for notice in notices if isinstance(notice, Mapping)]
            detail = f": {'; '.join(titles)}" if titles else ""
            raise NoRouteFoundError(f"HERE returned no routes{detail}")
        try:
            response = _HereRoutingResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError(f"HERE response failed validation: {exc.error_count()} errors") from exc

        first = response.routes[0]
        if not first.sections:
            raise MalformedResponseError(f"HERE route '{first.id}' has no sections.")

        warnings: list[str] = []
        sections = tuple(self._parse_section(index, section, warnings) for index, section in enumerate(first.sections))
        route = Route(
            id=first.id,
            provider=self.name,
            sections=sections,
            distance_m=sum(section.distance_m for section in sections),
            duration_s=sum(section.duration_s for section in sections),
            geometry=join_geometries([section.geometry for section in sections]),
            tolls=sections[0].tolls,
        )
        return ParsedRoute(route=route, warnings=warnings)

    def _parse_section(self, index: int, section: _HereSection, warnings: list[str]) -> RouteSection:
        section_id = section.id or f"section-{index}"
        if not section.polyline:
            warnings.append(f"Section {section_id} has no polyline.")
        geometry = polyline.decode(section.polyline or "")
        if geometry.is_partial:
            warnings.append(f"Section {section_id} polyline decoded partially: {geometry.error}.")

        instructions = []
        for action in section.actions or []:
            coordinate, offset, resolved = resolve_offset(geometry, action.offset)
            if not resolved:
                warnings.append(
                    f"Section {section_id} action '{action.action}' offset {offset} is outside "
                    f"its {len(geometry)}-point geometry; using (0, 0)."
                )
            instructions.append(
                Instruction(
                    text=action.instruction or "",
                    action=action.action or "",
                    distance_m=action.length or 0.0,
                    coordinate=coordinate,
                    direction=action.direction,
                    offset=offset,
                    offset_resolved=resolved,
                )
            )

        return RouteSection(
            id=section_id,
            distance_m=section.summary.length,
            duration_s=section.summary.duration,
            instructions=tuple(instructions),
            geometry=geometry,
            tolls=_toll_costs(section.tolls),
            polyline=section.polyline,
        )


class _WaypointResult(BaseModel):
    id: str
    lat: float
    lng: float
    sequence: int
    estimatedArrival: Optional[str] = None
    estimatedDeparture: Optional[str] = None


class _SequenceResult(BaseModel):
    waypoints: Optional[List[_WaypointResult]] = None
    distance: Optional[str] = None
    time: Optional[str] = None
    description: Optional[str] = None


class _WaypointSequenceResponse(BaseModel):
    results: Optional[List[_SequenceResult]] = None
    errors: Optional[List[Any]] = None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable arrival estimate '{value}'")
        return None


def _as_int(value: Optional[str]) -> int:
    try:
        return int(float(value)) if value is not None else 0
    except ValueError:
        return 0


class HereWaypointSequenceOracle:
    """Sequence oracle backed by the HERE Waypoints Sequence v8 API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: ProviderClient | None = None,
    ) -> None:
        self.api_key = api_key or settings.here_api_key
        self.base_url = base_url or settings.here_waypoints_url
        self.client = client or ProviderClient()

    def build_query(
        self,
        start: Coordinate,
        destinations: Sequence[Coordinate],
        end: Optional[Coordinate] = None,
        profile: Optional[TruckProfile] = None,
        departure: Optional[datetime] = None,
    ) -> ProviderQuery:
        if not self.api_key:
            raise ValueError("HERE API key is not configured.")
        departure = departure or datetime.now(timezone.utc)
        params: list[tuple[str, str]] = [
            ("mode", "fastest;truck;traffic:enabled"),
            ("improveFor", "time"),
            ("departure", departure.isoformat(timespec="seconds")),
            (START_TAG, start.as_query()),
        ]
        params.extend((destination_tag(index), point.as_query()) for index, point in enumerate(destinations))
        if end is not None:
            params.append((END_TAG, end.as_query()))
        if profile is not None:
            params.extend(
                [
                    ("height", f"{meters_for_query(profile.height_m):.2f}"),
                    ("width", f"{meters_for_query(profile.width_m):.2f}"),
                    ("length", f"{meters_for_query(profile.length_m):.2f}"),
                    ("limitedWeight", f"{profile.gross_weight_kg / 1000.0:.2f}"),
                    ("trailersCount", str(profile.trailer_count)),
                ]
            )
            if profile.hazardous_goods:
                params.append(("hazardousGoods", ",".join(sorted(item.value for item in profile.hazardous_goods))))
        params.append(("apiKey", self.api_key))
        return ProviderQuery(url=self.base_url, params=tuple(params))

    def parse_response(self, body: bytes | str | Mapping[str, Any]) -> SequenceResponse:
        if isinstance(body, Mapping):
            payload = body
        else:
            try:
                payload = json.loads(body)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise MalformedSequenceResponseError(f"Waypoint sequence response is not JSON: {exc}") from exc
        try:
            response = _WaypointSequenceResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedSequenceResponseError(
                f"Waypoint sequence response failed validation: {exc.error_count()} errors"
            ) from exc

        if not response.results:
            detail = f": {response.errors}" if response.errors else ""
            raise NoSequenceFoundError(f"HERE found no waypoint sequence{detail}")
        result = response.results[0]
        if not result.waypoints:
            raise NoSequenceFoundError("HERE sequence result contains no waypoints.")

        try:
            waypoints = tuple(
                SequencedWaypoint(
                    tag=item.id,
                    sequence=item.sequence,
                    coordinate=Coordinate(item.lat, item.lng),
                    estimated_arrival=_parse_timestamp(item.estimatedArrival),
                )
                for item in result.waypoints
            )
        except ValueError as exc:
            raise MalformedSequenceResponseError(f"Waypoint sequence response has an invalid waypoint: {exc}") from exc
        return SequenceResponse(
            waypoints=waypoints,
            distance_m=_as_int(result.distance),
            duration_s=_as_int(result.time),
        )

    def find_sequence(
        self,
        start: Coordinate,
        destinations: Sequence[Coordinate],
        end: Optional[Coordinate] = None,
        profile: Optional[TruckProfile] = None,
    ) -> SequenceResponse:
        query = self.build_query(start, destinations, end, profile)
        return self.parse_response(self.client.fetch(query))
