"""Routing, polyline and stop sequencing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Avoidance, Coordinate, HazardousGoods, ImperialTruckProfile, Stop, TruckProfile
from ..services.routing.models import DecodedGeometry, Instruction, OptimizedRoute, Route
from ..services.units import to_metric

ProviderName = Literal["here", "tomtom"]


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, coordinate: Coordinate) -> "CoordinateModel":
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)


class TruckProfileModel(BaseModel):
    """Truck profile as entered by the driver, in feet and pounds."""

    height_ft: float = Field(13.5, gt=0)
    width_ft: float = Field(8.5, gt=0)
    length_ft: float = Field(70.0, gt=0)
    gross_weight_lbs: float = Field(80000.0, gt=0)
    axle_weight_lbs: Optional[float] = Field(34000.0, gt=0)
    axle_count: int = Field(5, ge=2)
    trailer_count: int = Field(1, ge=0)
    hazardous_goods: List[HazardousGoods] = Field(default_factory=list)
    avoidances: List[Avoidance] = Field(default_factory=lambda: [Avoidance.UNPAVED])
    commercial: bool = True

    def to_metric(self) -> TruckProfile:
        return to_metric(
            ImperialTruckProfile(
                height_ft=self.height_ft,
                width_ft=self.width_ft,
                length_ft=self.length_ft,
                gross_weight_lbs=self.gross_weight_lbs,
                axle_weight_lbs=self.axle_weight_lbs,
                axle_count=self.axle_count,
                trailer_count=self.trailer_count,
                hazardous_goods=frozenset(self.hazardous_goods),
                avoidances=frozenset(self.avoidances),
                commercial=self.commercial,
            )
        )


class RouteRequestModel(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel
    via: List[CoordinateModel] = Field(default_factory=list)
    truck: TruckProfileModel = Field(default_factory=TruckProfileModel)
    avoid: Optional[List[Avoidance]] = Field(
        default=None,
        description="Overrides the truck profile's avoidances when given.",
    )
    alternates: bool = False
    provider: Optional[ProviderName] = Field(default=None, description="Defaults to the configured provider.")


class ProviderQueryModel(BaseModel):
    provider: str
    method: str
    url: str
    params: List[List[str]] = Field(..., description="Ordered query parameters; API keys are masked.")


class RouteParseRequest(BaseModel):
    provider: ProviderName
    payload: dict


class InstructionModel(BaseModel):
    text: str
    action: str
    distance_m: float
    location: CoordinateModel
    direction: Optional[str] = None
    offset: Optional[int] = None
    offset_resolved: bool

    @classmethod
    def from_domain(cls, instruction: Instruction) -> "InstructionModel":
        return cls(
            text=instruction.text,
            action=instruction.action,
            distance_m=instruction.distance_m,
            location=CoordinateModel.from_domain(instruction.coordinate),
            direction=instruction.direction,
            offset=instruction.offset,
            offset_resolved=instruction.offset_resolved,
        )


class TollDetailModel(BaseModel):
    name: str
    cost: float
    country: Optional[str] = None


class TollCostsModel(BaseModel):
    currency: str
    total: float
    details: List[TollDetailModel]


class RouteModel(BaseModel):
    id: str
    provider: str
    distance_m: float
    duration_s: float
    section_count: int
    geometry: List[CoordinateModel]
    instructions: List[InstructionModel]
    tolls: Optional[TollCostsModel] = None

    @classmethod
    def from_domain(cls, route: Route) -> "RouteModel":
        tolls = None
        if route.tolls is not None:
            tolls = TollCostsModel(
                currency=route.tolls.currency,
                total=route.tolls.total,
                details=[
                    TollDetailModel(name=detail.name, cost=detail.cost, country=detail.country)
                    for detail in route.tolls.details
                ],
            )
        return cls(
            id=route.id,
            provider=route.provider,
            distance_m=route.distance_m,
            duration_s=route.duration_s,
            section_count=len(route.sections),
            geometry=[CoordinateModel.from_domain(point) for point in route.geometry],
            instructions=[InstructionModel.from_domain(item) for item in route.instructions],
            tolls=tolls,
        )


class RouteParseResponse(BaseModel):
    ok: bool
    route: Optional[RouteModel] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class PolylineDecodeRequest(BaseModel):
    encoded: str


class PolylineDecodeResponse(BaseModel):
    points: List[List[float]]
    precision: Optional[int] = None
    third_dimension: str
    third_dimension_precision: int
    third_dimension_values: List[float]
    partial: bool
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, geometry: DecodedGeometry) -> "PolylineDecodeResponse":
        return cls(
            points=[list(point) for point in geometry.as_tuples()],
            precision=geometry.precision,
            third_dimension=geometry.third_dimension.name.lower(),
            third_dimension_precision=geometry.third_dimension_precision,
            third_dimension_values=list(geometry.third_dimension_values),
            partial=geometry.is_partial,
            error=geometry.error,
        )


class PolylineEncodeRequest(BaseModel):
    points: List[List[float]] = Field(..., description="[lat, lon] or [lat, lon, z] per point.")
    precision: Optional[int] = Field(default=None, ge=0, le=15)
    third_dimension: int = Field(default=0, ge=0, le=7)
    third_dimension_precision: int = Field(default=0, ge=0, le=15)


class PolylineEncodeResponse(BaseModel):
    encoded: str


class StopModel(BaseModel):
    id: Optional[str] = None
    name: str
    location: CoordinateModel
    address: Optional[str] = None
    is_completed: bool = False
    estimated_arrival: Optional[datetime] = None

    def to_domain(self) -> Stop:
        stop = Stop(
            name=self.name,
            coordinate=self.location.to_domain(),
            address=self.address,
            is_completed=self.is_completed,
            estimated_arrival=self.estimated_arrival,
        )
        if self.id:
            stop.id = self.id
        return stop

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        return cls(
            id=stop.id,
            name=stop.name,
            location=CoordinateModel.from_domain(stop.coordinate),
            address=stop.address,
            is_completed=stop.is_completed,
            estimated_arrival=stop.estimated_arrival,
        )


class OptimizeStopsRequest(BaseModel):
    start: CoordinateModel
    stops: List[StopModel]
    end: Optional[CoordinateModel] = None
    truck: Optional[TruckProfileModel] = None


class OptimizeStopsResponse(BaseModel):
    stops: List[StopModel]
    distance_m: int
    duration_s: int
    estimated_arrivals: Dict[str, datetime] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, optimized: OptimizedRoute) -> "OptimizeStopsResponse":
        return cls(
            stops=[StopModel.from_domain(stop) for stop in optimized.stops],
            distance_m=optimized.distance_m,
            duration_s=optimized.duration_s,
            estimated_arrivals=dict(optimized.estimated_arrivals),
        )
