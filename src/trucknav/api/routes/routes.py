"""Truck route endpoints: provider query assembly and response parsing."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import (
    ProviderQueryModel,
    RouteModel,
    RouteParseRequest,
    RouteParseResponse,
    RouteRequestModel,
)
from ...services.routing.parser import parse_route_response
from ...services.routing.providers import get_provider
from ...services.routing.request_builder import build_route_request

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/request", response_model=ProviderQueryModel, status_code=status.HTTP_200_OK)
def route_request(payload: RouteRequestModel) -> ProviderQueryModel:
    """Build the provider query for a truck route without sending it."""
    try:
        provider = get_provider(payload.provider)
        request = build_route_request(
            payload.origin.to_domain(),
            payload.destination.to_domain(),
            [point.to_domain() for point in payload.via],
            profile=payload.truck.to_metric(),
            avoid=payload.avoid,
            alternates=payload.alternates,
        )
        query = provider.build_query(request)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ProviderQueryModel(
        provider=provider.name,
        method=query.method,
        url=query.url,
        params=[[name, value] for name, value in query.redacted_params()],
    )


@router.post("/parse", response_model=RouteParseResponse, status_code=status.HTTP_200_OK)
def route_parse(payload: RouteParseRequest) -> RouteParseResponse:
    """Parse a raw provider response body into a normalized route."""
    try:
        provider = get_provider(payload.provider)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    result = parse_route_response(payload.payload, provider)
    if not result.ok:
        return RouteParseResponse(
            ok=False,
            error=str(result.error),
            error_type=type(result.error).__name__,
            warnings=result.warnings,
        )
    return RouteParseResponse(ok=True, route=RouteModel.from_domain(result.route), warnings=result.warnings)
