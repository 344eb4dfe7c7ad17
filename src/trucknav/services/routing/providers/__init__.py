"""Routing provider adapters."""

from .base import (
    MalformedResponseError,
    NoRouteFoundError,
    ProviderLimitError,
    ProviderQuery,
    RouteParseError,
    RoutingProvider,
)
from .dispatcher import get_provider
from .here import HereRoutingProvider, HereWaypointSequenceOracle
from .tomtom import TomTomRoutingProvider

__all__ = [
    "RoutingProvider",
    "ProviderQuery",
    "RouteParseError",
    "NoRouteFoundError",
    "MalformedResponseError",
    "ProviderLimitError",
    "HereRoutingProvider",
    "HereWaypointSequenceOracle",
    "TomTomRoutingProvider",
    "get_provider",
]
