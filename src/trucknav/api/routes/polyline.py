"""Flexible polyline endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...config import settings
from ...schemas.routing import (
    PolylineDecodeRequest,
    PolylineDecodeResponse,
    PolylineEncodeRequest,
    PolylineEncodeResponse,
)
from ...services.routing import polyline
from ...services.routing.models import ThirdDimension

router = APIRouter(prefix="/polyline", tags=["polyline"])


@router.post("/decode", response_model=PolylineDecodeResponse, status_code=status.HTTP_200_OK)
def decode_polyline(payload: PolylineDecodeRequest) -> PolylineDecodeResponse:
    """Decode leniently; a malformed tail is reported, not rejected."""
    return PolylineDecodeResponse.from_domain(polyline.decode(payload.encoded))


@router.post("/encode", response_model=PolylineEncodeResponse, status_code=status.HTTP_200_OK)
def encode_polyline(payload: PolylineEncodeRequest) -> PolylineEncodeResponse:
    precision = settings.default_polyline_precision if payload.precision is None else payload.precision
    try:
        encoded = polyline.encode(
            [tuple(point) for point in payload.points],
            precision=precision,
            third_dimension=ThirdDimension(payload.third_dimension),
            third_dimension_precision=payload.third_dimension_precision,
        )
    except (ValueError, IndexError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PolylineEncodeResponse(encoded=encoded)
