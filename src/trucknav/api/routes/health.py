"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't call any provider."""
    return {"status": "ok"}


@router.get("/health/providers", status_code=status.HTTP_200_OK)
def health_providers() -> dict:
    """Report which providers are selected and whether their keys are set."""
    return {
        "routing_provider": settings.routing_provider,
        "sequence_oracle": settings.sequence_oracle,
        "here_configured": bool(settings.here_api_key),
        "tomtom_configured": bool(settings.tomtom_api_key),
    }
