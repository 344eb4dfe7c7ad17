"""Hazard evaluation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.hazards import (
    HazardAlertModel,
    HazardEvaluateRequest,
    HazardScanRequest,
    HazardScanResponse,
)
from ...services.hazards import evaluate, scan_route
from ...services.routing import polyline

router = APIRouter(prefix="/hazards", tags=["hazards"])


@router.post("/evaluate", response_model=HazardAlertModel, status_code=status.HTTP_200_OK)
def evaluate_hazard(payload: HazardEvaluateRequest) -> HazardAlertModel:
    profile = payload.truck.to_metric()
    try:
        alert = evaluate(profile, payload.restriction.to_domain(), payload.distance_m)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return HazardAlertModel.from_domain(alert, profile)


@router.post("/scan", response_model=HazardScanResponse, status_code=status.HTTP_200_OK)
def scan_hazards(payload: HazardScanRequest) -> HazardScanResponse:
    """Evaluate restrictions along a route, nearest first."""
    if payload.polyline:
        geometry = list(polyline.decode(payload.polyline))
    else:
        geometry = [point.to_domain() for point in payload.geometry or []]
    if not geometry:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A route polyline or geometry with at least one point is required.",
        )
    profile = payload.truck.to_metric()
    alerts = scan_route(
        profile,
        geometry,
        [restriction.to_domain() for restriction in payload.restrictions],
        buffer_m=payload.buffer_m,
    )
    return HazardScanResponse(
        alerts=[HazardAlertModel.from_domain(alert, profile) for alert in alerts],
        critical_count=sum(1 for alert in alerts if alert.is_critical),
    )
