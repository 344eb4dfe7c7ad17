"""Route group exports."""

from . import hazards, health, polyline, routes, stops

__all__ = ["health", "routes", "polyline", "stops", "hazards"]
