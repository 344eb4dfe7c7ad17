"""Export services."""

from .geojson import route_to_feature_collection, save_geojson

__all__ = ["route_to_feature_collection", "save_geojson"]
