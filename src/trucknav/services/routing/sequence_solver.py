"""OR-Tools waypoint sequencing over straight-line distances.

Offline stand-in for the HERE waypoint sequencing service. The start is
fixed; the end is fixed when given, otherwise the tour may finish at any
stop (a zero-cost dummy node absorbs the return leg).
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ortools.constraint_solver import pywrapcp, routing_enums_pb2

from ...config import settings
from ...models.domain import Coordinate, TruckProfile
from ..geospatial import haversine_m
from .models import SequencedWaypoint, SequenceResponse
from .sequencer import END_TAG, START_TAG, NoSequenceFoundError, destination_tag

logger = logging.getLogger(__name__)


def _distance_matrix(points: Sequence[Coordinate]) -> list[list[int]]:
    return [[int(round(haversine_m(a, b))) for b in points] for a in points]


class LocalSequenceOracle:
    """Solves the open or fixed-end TSP locally with OR-Tools."""

    def __init__(
        self,
        average_speed_kmh: float | None = None,
        time_limit_seconds: int | None = None,
    ) -> None:
        self.average_speed_kmh = average_speed_kmh or settings.local_average_speed_kmh
        self.time_limit_seconds = (
            time_limit_seconds if time_limit_seconds is not None else settings.solver_time_limit_seconds
        )

    def _search_parameters(self):
        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        search_parameters.first_solution_strategy = getattr(
            routing_enums_pb2.FirstSolutionStrategy, settings.solver_first_solution_strategy
        )
        search_parameters.local_search_metaheuristic = getattr(
            routing_enums_pb2.LocalSearchMetaheuristic, settings.solver_local_search_metaheuristic
        )
        if self.time_limit_seconds:
            search_parameters.time_limit.FromSeconds(self.time_limit_seconds)
        return search_parameters

    def find_sequence(
        self,
        start: Coordinate,
        destinations: Sequence[Coordinate],
        end: Optional[Coordinate] = None,
        profile: Optional[TruckProfile] = None,
    ) -> SequenceResponse:
        if not destinations:
            raise NoSequenceFoundError("No destinations to sequence.")

        points = [start, *destinations]
        matrix = _distance_matrix(points)
        end_node = len(points)
        if end is not None:
            points.append(end)
            matrix = _distance_matrix(points)
        else:
            # Dummy end node: free to reach from anywhere.
            for row in matrix:
                row.append(0)
            matrix.append([0] * (end_node + 1))

        manager = pywrapcp.RoutingIndexManager(len(matrix), 1, [0], [end_node])
        routing = pywrapcp.RoutingModel(manager)

        def distance_callback(from_index: int, to_index: int) -> int:
            return matrix[manager.IndexToNode(from_index)][manager.IndexToNode(to_index)]

        transit_callback_index = routing.RegisterTransitCallback(distance_callback)
        routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

        assignment = routing.SolveWithParameters(self._search_parameters())
        if not assignment:
            raise NoSequenceFoundError(f"OR-Tools found no sequence for {len(destinations)} destinations.")

        meters_per_second = self.average_speed_kmh / 3.6
        waypoints = [SequencedWaypoint(tag=START_TAG, sequence=0, coordinate=start)]
        total_distance = 0
        index = routing.Start(0)
        while not routing.IsEnd(index):
            previous = index
            index = assignment.Value(routing.NextVar(index))
            node = manager.IndexToNode(index)
            total_distance += matrix[manager.IndexToNode(previous)][node]
            if node == end_node:
                if end is not None:
                    waypoints.append(SequencedWaypoint(tag=END_TAG, sequence=len(waypoints), coordinate=end))
                continue
            waypoints.append(
                SequencedWaypoint(
                    tag=destination_tag(node - 1),
                    sequence=len(waypoints),
                    coordinate=destinations[node - 1],
                )
            )

        duration = int(round(total_distance / meters_per_second))
        logger.info(f"Local sequence for {len(destinations)} stops: {total_distance}m, ~{duration}s")
        return SequenceResponse(waypoints=tuple(waypoints), distance_m=total_distance, duration_s=duration)
