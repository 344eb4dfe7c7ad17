"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Iterator, Optional

from ...models.domain import Avoidance, Coordinate, Stop, TruckProfile


class ThirdDimension(IntEnum):
    """Meaning of the optional third value carried by each polyline point."""

    ABSENT = 0
    LEVEL = 1
    ALTITUDE = 2
    ELEVATION = 3
    RESERVED1 = 4
    RESERVED2 = 5
    CUSTOM1 = 6
    CUSTOM2 = 7


@dataclass(frozen=True, slots=True)
class DecodedGeometry:
    points: tuple[Coordinate, ...] = ()
    precision: Optional[int] = None
    third_dimension: ThirdDimension = ThirdDimension.ABSENT
    third_dimension_precision: int = 0
    third_dimension_values: tuple[float, ...] = ()
    error: Optional[str] = None

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.points)

    def __getitem__(self, index: int) -> Coordinate:
        return self.points[index]

    @property
    def is_partial(self) -> bool:
        return self.error is not None

    def as_tuples(self) -> list[tuple[float, float]]:
        return [point.as_tuple() for point in self.points]

    @classmethod
    def from_points(cls, points) -> DecodedGeometry:
        return cls(points=tuple(points))


@dataclass(frozen=True, slots=True)
class RouteRequest:
    origin: Coordinate
    destination: Coordinate
    via: tuple[Coordinate, ...]
    profile: TruckProfile
    avoid: frozenset[Avoidance]
    alternates: bool = False

    @property
    def waypoints(self) -> tuple[Coordinate, ...]:
        return (self.origin, *self.via, self.destination)


@dataclass(frozen=True, slots=True)
class Instruction:
    text: str
    action: str
    distance_m: float
    coordinate: Coordinate
    direction: Optional[str] = None
    offset: Optional[int] = None
    offset_resolved: bool = True


@dataclass(frozen=True, slots=True)
class TollDetail:
    name: str
    cost: float
    country: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TollCosts:
    currency: str
    total: float
    details: tuple[TollDetail, ...]


@dataclass(frozen=True, slots=True)
class RouteSection:
    id: str
    distance_m: float
    duration_s: float
    instructions: tuple[Instruction, ...]
    geometry: DecodedGeometry
    tolls: Optional[TollCosts] = None
    polyline: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Route:
    id: str
    provider: str
    sections: tuple[RouteSection, ...]
    distance_m: float
    duration_s: float
    geometry: DecodedGeometry
    tolls: Optional[TollCosts] = None

    @property
    def instructions(self) -> list[Instruction]:
        return [instruction for section in self.sections for instruction in section.instructions]


@dataclass(slots=True)
class ParsedRoute:
    """Provider adapter output: the route plus any data-quality warnings."""

    route: Route
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SequencedWaypoint:
    tag: str
    sequence: int
    coordinate: Optional[Coordinate] = None
    estimated_arrival: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class SequenceResponse:
    waypoints: tuple[SequencedWaypoint, ...]
    distance_m: int = 0
    duration_s: int = 0


@dataclass(slots=True)
class OptimizedRoute:
    start: Coordinate
    stops: list[Stop]
    end: Optional[Coordinate]
    distance_m: int
    duration_s: int
    estimated_arrivals: dict[str, datetime] = field(default_factory=dict)

    @property
    def stop_ids(self) -> list[str]:
        return [stop.id for stop in self.stops]
