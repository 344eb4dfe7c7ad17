"""Hazard evaluation and messaging."""

from .evaluator import HazardEvaluationError, evaluate, scan_route
from .messages import describe_distance, hazard_message, hazard_title

__all__ = [
    "HazardEvaluationError",
    "evaluate",
    "scan_route",
    "hazard_title",
    "hazard_message",
    "describe_distance",
]
