"""Multi-stop sequencing endpoints."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from ...config import settings
from ...schemas.routing import OptimizeStopsRequest, OptimizeStopsResponse
from ...services.routing.http_client import ProviderRequestError
from ...services.routing.providers import HereWaypointSequenceOracle
from ...services.routing.sequence_solver import LocalSequenceOracle
from ...services.routing.sequencer import (
    MalformedSequenceResponseError,
    MultiStopSequencer,
    NoSequenceFoundError,
    SequenceOracle,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stops", tags=["stops"])


def get_sequence_oracle() -> SequenceOracle:
    if settings.sequence_oracle == "local":
        return LocalSequenceOracle()
    return HereWaypointSequenceOracle()


@router.post("/optimize", response_model=OptimizeStopsResponse, status_code=status.HTTP_200_OK)
def optimize_stops(
    payload: OptimizeStopsRequest,
    oracle: SequenceOracle = Depends(get_sequence_oracle),
) -> OptimizeStopsResponse:
    """Reorder stops for the shortest drive from ``start``; stop ids are preserved."""
    sequencer = MultiStopSequencer(oracle)
    try:
        optimized = sequencer.optimize(
            payload.start.to_domain(),
            [stop.to_domain() for stop in payload.stops],
            payload.end.to_domain() if payload.end else None,
            payload.truck.to_metric() if payload.truck else None,
        )
    except (
        NoSequenceFoundError,
        MalformedSequenceResponseError,
        ProviderRequestError,
        ConnectionError,
        httpx.HTTPError,
    ) as exc:
        logger.warning(f"Stop sequencing failed: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return OptimizeStopsResponse.from_domain(optimized)
