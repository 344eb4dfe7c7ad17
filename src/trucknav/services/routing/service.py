"""Truck route orchestration: request assembly, provider call, parsing."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...models.domain import Avoidance, Coordinate, TruckProfile
from .http_client import ProviderClient
from .parser import ParseResult, parse_route_response
from .providers import RoutingProvider, get_provider
from .request_builder import build_route_request

logger = logging.getLogger(__name__)


class RoutingService:
    """Calculates truck routes through one provider adapter."""

    def __init__(self, provider: RoutingProvider, client: ProviderClient | None = None) -> None:
        self.provider = provider
        self.client = client or ProviderClient()

    def calculate_route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        via: Iterable[Coordinate] = (),
        *,
        profile: TruckProfile,
        avoid: Optional[Iterable[Avoidance]] = None,
        alternates: bool = False,
    ) -> ParseResult:
        """Return the parsed route for the given waypoints.

        Request errors (degenerate route, too many via points) and transport
        errors are raised; response problems come back in the result.
        """
        request = build_route_request(
            origin, destination, via, profile=profile, avoid=avoid, alternates=alternates
        )
        query = self.provider.build_query(request)
        body = self.client.fetch(query)
        result = parse_route_response(body, self.provider)
        if result.ok:
            route = result.route
            logger.info(
                f"{self.provider.name} route {route.id}: {route.distance_m:.0f}m, "
                f"{route.duration_s:.0f}s, {len(route.geometry)} points, {len(result.warnings)} warnings"
            )
        return result


def create_routing_service(provider_name: str | None = None, client: ProviderClient | None = None) -> RoutingService:
    return RoutingService(get_provider(provider_name), client=client)
