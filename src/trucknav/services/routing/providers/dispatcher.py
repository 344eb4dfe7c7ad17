"""Factory for routing provider adapters based on configuration."""

from __future__ import annotations

from typing import Any

from ....config import settings
from .base import RoutingProvider
from .here import HereRoutingProvider
from .tomtom import TomTomRoutingProvider


def get_provider(name: str | None = None, **kwargs: Any) -> RoutingProvider:
    match (name or settings.routing_provider).lower():
        case "here":
            return HereRoutingProvider(**kwargs)
        case "tomtom":
            return TomTomRoutingProvider(**kwargs)
        case other:
            raise ValueError(f"Unknown routing provider '{other}'.")
