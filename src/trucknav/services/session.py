"""Per-driver navigation state: stops, the active route and its alerts."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from ..models.domain import Coordinate, HazardAlert, HazardRestriction, Stop, TruckProfile
from .geospatial import haversine_m
from .hazards import scan_route
from .routing.models import OptimizedRoute, Route, RouteRequest
from .routing.parser import ParseResult
from .routing.request_builder import build_route_request
from .routing.sequencer import MultiStopSequencer, NoStopsError
from .routing.service import RoutingService

logger = logging.getLogger(__name__)


class NavigationSession:
    """Mutable navigation state owned by a single driver session.

    Services are injected; a session without a routing service or
    sequencer can still manage stops.
    """

    def __init__(
        self,
        profile: TruckProfile,
        routing_service: RoutingService | None = None,
        sequencer: MultiStopSequencer | None = None,
    ) -> None:
        self.profile = profile
        self.routing_service = routing_service
        self.sequencer = sequencer
        self.stops: list[Stop] = []
        self.active_route: Optional[Route] = None
        self.route_warnings: list[str] = []
        self.alerts: list[HazardAlert] = []
        self.estimated_arrivals: dict[str, datetime] = {}
        self.last_fetch_location: Optional[Coordinate] = None

    # Stop management

    def _index_of(self, stop_id: str) -> int:
        for index, stop in enumerate(self.stops):
            if stop.id == stop_id:
                return index
        raise ValueError(f"Unknown stop '{stop_id}'.")

    def add_stop(self, stop: Stop) -> Stop:
        if any(existing.id == stop.id for existing in self.stops):
            raise ValueError(f"Stop '{stop.id}' is already in this session.")
        self.stops.append(stop)
        logger.debug(f"Added stop {stop.id} ({stop.name}); {len(self.stops)} stops")
        return stop

    def remove_stop(self, stop_id: str) -> Stop:
        stop = self.stops.pop(self._index_of(stop_id))
        self.estimated_arrivals.pop(stop_id, None)
        if not self.stops:
            self.clear()
        return stop

    def mark_stop_completed(self, stop_id: str) -> Optional[Stop]:
        """Complete a stop and return the next stop to drive to, if any."""
        self.stops[self._index_of(stop_id)].is_completed = True
        upcoming = self.next_stop
        if upcoming is None:
            logger.info(f"All {len(self.stops)} stops completed")
        return upcoming

    @property
    def pending_stops(self) -> list[Stop]:
        return [stop for stop in self.stops if not stop.is_completed]

    @property
    def next_stop(self) -> Optional[Stop]:
        pending = self.pending_stops
        return pending[0] if pending else None

    # Routing

    def optimize_stops(self, current_location: Coordinate, end: Optional[Coordinate] = None) -> OptimizedRoute:
        """Reorder pending stops; completed stops keep their place in front."""
        if self.sequencer is None:
            raise ValueError("No sequencer is configured for this session.")
        pending = self.pending_stops
        optimized = self.sequencer.optimize(current_location, pending, end, self.profile)
        completed = [stop for stop in self.stops if stop.is_completed]
        self.stops = completed + optimized.stops
        self.estimated_arrivals.update(optimized.estimated_arrivals)
        return optimized

    def build_route_request(self, current_location: Coordinate, alternates: bool = False) -> RouteRequest:
        pending = self.pending_stops
        if not pending:
            raise NoStopsError("No pending stops to route to.")
        return build_route_request(
            current_location,
            pending[-1].coordinate,
            [stop.coordinate for stop in pending[:-1]],
            profile=self.profile,
            alternates=alternates,
        )

    def update_route(
        self,
        current_location: Coordinate,
        restrictions: Iterable[HazardRestriction] = (),
    ) -> ParseResult:
        """Fetch a route through the pending stops and rescan hazards."""
        if self.routing_service is None:
            raise ValueError("No routing service is configured for this session.")
        request = self.build_route_request(current_location)
        result = self.routing_service.calculate_route(
            request.origin, request.destination, request.via, profile=self.profile
        )
        if not result.ok:
            return result
        restrictions = list(restrictions)
        alerts = scan_route(self.profile, result.route.geometry, restrictions) if restrictions else []
        self.active_route = result.route
        self.route_warnings = list(result.warnings)
        self.last_fetch_location = current_location
        self.alerts = alerts
        return result

    def distance_since_last_fetch_m(self, current_location: Coordinate) -> Optional[float]:
        if self.last_fetch_location is None:
            return None
        return haversine_m(self.last_fetch_location, current_location)

    def clear(self) -> None:
        self.stops = []
        self.active_route = None
        self.route_warnings = []
        self.alerts = []
        self.estimated_arrivals = {}
        self.last_fetch_location = None
