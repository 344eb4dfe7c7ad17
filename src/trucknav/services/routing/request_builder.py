"""Provider-agnostic truck route request assembly."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...config import settings
from ...models.domain import Avoidance, Coordinate, TruckProfile
from .models import RouteRequest

logger = logging.getLogger(__name__)


class DegenerateRouteError(ValueError):
    """Origin and destination are the same point."""


def build_route_request(
    origin: Coordinate,
    destination: Coordinate,
    via: Iterable[Coordinate] = (),
    *,
    profile: TruckProfile,
    avoid: Optional[Iterable[Avoidance]] = None,
    alternates: bool = False,
    epsilon: Optional[float] = None,
) -> RouteRequest:
    """Assemble an immutable route request.

    ``avoid=None`` falls back to the avoidances stored on the profile. The
    number of via points is not capped here; provider adapters reject
    requests they cannot serve.
    """
    epsilon = settings.coordinate_epsilon_degrees if epsilon is None else epsilon
    if origin.is_near(destination, epsilon):
        raise DegenerateRouteError(
            f"Origin {origin.as_query()} and destination {destination.as_query()} are the same location."
        )
    avoidances = profile.avoidances if avoid is None else frozenset(Avoidance(item) for item in avoid)
    request = RouteRequest(
        origin=origin,
        destination=destination,
        via=tuple(via),
        profile=profile,
        avoid=frozenset(avoidances),
        alternates=alternates,
    )
    logger.debug(
        f"Built route request {origin.as_query()} -> {destination.as_query()} "
        f"via {len(request.via)} points, avoid={sorted(a.value for a in request.avoid)}"
    )
    return request
