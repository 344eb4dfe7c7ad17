"""Domain models for truck profiles, stops and route restrictions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Avoidance(str, Enum):
    """Road features a truck route may be asked to avoid."""

    TOLLS = "tolls"
    UNPAVED = "unpaved"
    FERRIES = "ferries"
    TUNNELS = "tunnels"
    BORDER_CROSSINGS = "border_crossings"
    MOTORWAYS = "motorways"


class HazardousGoods(str, Enum):
    """Hazardous cargo categories, named after the HERE v8 values."""

    EXPLOSIVE = "explosive"
    GAS = "gas"
    FLAMMABLE = "flammable"
    COMBUSTIBLE = "combustible"
    ORGANIC = "organic"
    POISON = "poison"
    RADIOACTIVE = "radioactive"
    CORROSIVE = "corrosive"
    POISONOUS_INHALATION = "poisonousInhalation"
    HARMFUL_TO_WATER = "harmfulToWater"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """WGS84 position in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude {self.latitude} is outside [-90, 90].")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude {self.longitude} is outside [-180, 180].")

    def as_query(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)

    def is_near(self, other: Coordinate, epsilon: float) -> bool:
        return (
            abs(self.latitude - other.latitude) <= epsilon
            and abs(self.longitude - other.longitude) <= epsilon
        )


@dataclass(frozen=True, slots=True)
class ImperialTruckProfile:
    """Truck dimensions as entered by a US driver (feet and pounds).

    Defaults describe a standard semi: 17 ft tractor plus 53 ft trailer,
    8'6" wide, 13'6" high at the federal 80,000 lbs gross limit.
    """

    height_ft: float = 13.5
    width_ft: float = 8.5
    length_ft: float = 70.0
    gross_weight_lbs: float = 80000.0
    axle_weight_lbs: Optional[float] = 34000.0
    axle_count: int = 5
    trailer_count: int = 1
    hazardous_goods: frozenset[HazardousGoods] = frozenset()
    avoidances: frozenset[Avoidance] = frozenset({Avoidance.UNPAVED})
    commercial: bool = True


@dataclass(frozen=True, slots=True)
class TruckProfile:
    """Canonical metric truck profile read by routing and hazard evaluation."""

    height_m: float
    width_m: float
    length_m: float
    gross_weight_kg: float
    axle_weight_kg: Optional[float] = None
    axle_count: int = 5
    trailer_count: int = 1
    hazardous_goods: frozenset[HazardousGoods] = frozenset()
    avoidances: frozenset[Avoidance] = frozenset()
    commercial: bool = True

    @property
    def is_hazmat(self) -> bool:
        return bool(self.hazardous_goods)


@dataclass(slots=True)
class Stop:
    """A caller-owned stop on a multi-stop route; ``id`` survives reordering."""

    name: str
    coordinate: Coordinate
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    address: Optional[str] = None
    is_completed: bool = False
    estimated_arrival: Optional[datetime] = None


class HazardKind(str, Enum):
    LOW_BRIDGE = "low_bridge"
    WEIGHT_LIMIT = "weight_limit"
    WIDTH_LIMIT = "width_limit"
    LENGTH_LIMIT = "length_limit"
    TUNNEL = "tunnel"
    STEEP_GRADE = "steep_grade"


class Severity(str, Enum):
    CRITICAL = "critical"
    INFORMATIONAL = "informational"


@dataclass(frozen=True, slots=True)
class HazardRestriction:
    """A legal or physical restriction located along a route.

    ``limit`` is expressed in ``unit``; steep grades carry a percentage and
    tunnels may omit the limit altogether.
    """

    kind: HazardKind
    location: Coordinate
    limit: Optional[float] = None
    unit: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class HazardAlert:
    restriction: HazardRestriction
    severity: Severity
    distance_m: float
    violation: bool
    margin: Optional[float] = None
    margin_unit: Optional[str] = None

    @property
    def kind(self) -> HazardKind:
        return self.restriction.kind

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL
