"""Hazard evaluation request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import HazardAlert, HazardKind, HazardRestriction, Severity, TruckProfile
from ..services.hazards import describe_distance, hazard_message, hazard_title
from .routing import CoordinateModel, TruckProfileModel


class HazardRestrictionModel(BaseModel):
    kind: HazardKind
    location: CoordinateModel
    limit: Optional[float] = None
    unit: Optional[str] = Field(default=None, description="m, cm, ft, in, kg, lbs, t, ton or % for grades.")
    name: Optional[str] = None

    def to_domain(self) -> HazardRestriction:
        return HazardRestriction(
            kind=self.kind,
            location=self.location.to_domain(),
            limit=self.limit,
            unit=self.unit,
            name=self.name,
        )


class HazardAlertModel(BaseModel):
    kind: HazardKind
    severity: Severity
    violation: bool
    margin: Optional[float] = None
    margin_unit: Optional[str] = None
    distance_m: float
    distance_label: str
    title: str
    message: str
    location: CoordinateModel
    name: Optional[str] = None

    @classmethod
    def from_domain(cls, alert: HazardAlert, profile: Optional[TruckProfile] = None) -> "HazardAlertModel":
        return cls(
            kind=alert.kind,
            severity=alert.severity,
            violation=alert.violation,
            margin=alert.margin,
            margin_unit=alert.margin_unit,
            distance_m=alert.distance_m,
            distance_label=describe_distance(alert.distance_m),
            title=hazard_title(alert.kind),
            message=hazard_message(alert, profile),
            location=CoordinateModel.from_domain(alert.restriction.location),
            name=alert.restriction.name,
        )


class HazardEvaluateRequest(BaseModel):
    truck: TruckProfileModel = Field(default_factory=TruckProfileModel)
    restriction: HazardRestrictionModel
    distance_m: float = Field(0.0, ge=0)


class HazardScanRequest(BaseModel):
    truck: TruckProfileModel = Field(default_factory=TruckProfileModel)
    polyline: Optional[str] = Field(default=None, description="Flexible polyline of the route.")
    geometry: Optional[List[CoordinateModel]] = Field(default=None, description="Route points, if no polyline.")
    restrictions: List[HazardRestrictionModel]
    buffer_m: Optional[float] = Field(default=None, ge=0)


class HazardScanResponse(BaseModel):
    alerts: List[HazardAlertModel]
    critical_count: int
