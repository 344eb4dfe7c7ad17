"""Multi-stop sequencing with identity-preserving reconciliation.

The combinatorial work is delegated to a sequence oracle (the HERE
waypoint sequencing service or the local OR-Tools solver). Oracles only
see coordinates and answer with positional tags: ``start``, ``end`` and
``destinationN`` (1-based, in the order the stops were submitted). This
module maps those tags back onto the caller's ``Stop`` objects.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol, Sequence

from ...models.domain import Coordinate, Stop, TruckProfile
from .models import OptimizedRoute, SequenceResponse

logger = logging.getLogger(__name__)

START_TAG = "start"
END_TAG = "end"
DESTINATION_PREFIX = "destination"
_DESTINATION_TAG = re.compile(rf"^{DESTINATION_PREFIX}(\d+)$")


class SequencingError(ValueError):
    """Base class for multi-stop sequencing failures."""


class NoStopsError(SequencingError):
    """Sequencing was requested without any stops."""


class NoSequenceFoundError(SequencingError):
    """The oracle answered but found no feasible sequence."""


class MalformedSequenceResponseError(SequencingError):
    """The oracle response could not be read."""


class TagResolutionError(MalformedSequenceResponseError):
    """A returned waypoint tag does not map back onto a submitted stop."""


class SequenceOracle(Protocol):
    def find_sequence(
        self,
        start: Coordinate,
        destinations: Sequence[Coordinate],
        end: Optional[Coordinate] = None,
        profile: Optional[TruckProfile] = None,
    ) -> SequenceResponse:
        ...


def destination_tag(index: int) -> str:
    """Tag of the stop at zero-based ``index``."""
    return f"{DESTINATION_PREFIX}{index + 1}"


def reconcile_sequence(
    response: SequenceResponse,
    stops: Sequence[Stop],
    *,
    has_end: bool,
) -> list[Stop]:
    """Return ``stops`` in the oracle's order, as the same objects.

    Raises ``TagResolutionError`` for unknown tags, out-of-range or repeated
    indices, an ``end`` tag without an end point, or a stop missing from
    the response.
    """
    ordered: list[Stop] = []
    seen: set[int] = set()
    for waypoint in sorted(response.waypoints, key=lambda item: item.sequence):
        tag = waypoint.tag.strip()
        if tag == START_TAG:
            continue
        if tag == END_TAG:
            if not has_end:
                raise TagResolutionError("Oracle returned an 'end' waypoint but no end point was submitted.")
            continue
        match = _DESTINATION_TAG.match(tag)
        if not match:
            raise TagResolutionError(f"Unrecognized waypoint tag '{waypoint.tag}'.")
        index = int(match.group(1)) - 1
        if not 0 <= index < len(stops):
            raise TagResolutionError(
                f"Waypoint tag '{waypoint.tag}' does not match any of the {len(stops)} submitted stops."
            )
        if index in seen:
            raise TagResolutionError(f"Waypoint tag '{waypoint.tag}' appears more than once.")
        seen.add(index)
        ordered.append(stops[index])

    missing = [destination_tag(index) for index in range(len(stops)) if index not in seen]
    if missing:
        raise TagResolutionError(f"Oracle response is missing stops: {', '.join(missing)}.")
    return ordered


class MultiStopSequencer:
    """Optimizes visiting order through an injected sequence oracle."""

    def __init__(self, oracle: SequenceOracle) -> None:
        self.oracle = oracle

    def optimize(
        self,
        start: Coordinate,
        stops: Sequence[Stop],
        end: Optional[Coordinate] = None,
        profile: Optional[TruckProfile] = None,
    ) -> OptimizedRoute:
        if not stops:
            raise NoStopsError("At least one stop is required to optimize a route.")

        response = self.oracle.find_sequence(start, [stop.coordinate for stop in stops], end, profile)
        ordered = reconcile_sequence(response, stops, has_end=end is not None)

        arrivals = {}
        for waypoint in response.waypoints:
            match = _DESTINATION_TAG.match(waypoint.tag.strip())
            if match and waypoint.estimated_arrival is not None:
                arrivals[stops[int(match.group(1)) - 1].id] = waypoint.estimated_arrival

        logger.info(
            f"Sequenced {len(ordered)} stops: {response.distance_m}m, {response.duration_s}s "
            f"order={[stop.id for stop in ordered]}"
        )
        return OptimizedRoute(
            start=start,
            stops=ordered,
            end=end,
            distance_m=response.distance_m,
            duration_s=response.duration_s,
            estimated_arrivals=arrivals,
        )
