"""Truck-versus-restriction clearance evaluation."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ...config import settings
from ...models.domain import (
    Coordinate,
    HazardAlert,
    HazardKind,
    HazardRestriction,
    Severity,
    TruckProfile,
)
from ..geospatial import distance_along_route_m
from ..units import (
    LENGTH_UNITS,
    WEIGHT_UNITS,
    kilograms_to_weight,
    length_to_meters,
    meters_to_length,
    weight_to_kilograms,
)

logger = logging.getLogger(__name__)

CRITICAL_KINDS = frozenset(
    {HazardKind.LOW_BRIDGE, HazardKind.WEIGHT_LIMIT, HazardKind.WIDTH_LIMIT, HazardKind.LENGTH_LIMIT}
)

_LENGTH_ATTRIBUTE = {
    HazardKind.LOW_BRIDGE: "height_m",
    HazardKind.TUNNEL: "height_m",
    HazardKind.WIDTH_LIMIT: "width_m",
    HazardKind.LENGTH_LIMIT: "length_m",
}


class HazardEvaluationError(ValueError):
    """A restriction cannot be compared against the truck profile."""


def _unit(restriction: HazardRestriction) -> str:
    return (restriction.unit or "").strip().lower()


def _length_margin(value_m: float, restriction: HazardRestriction) -> float:
    unit = _unit(restriction)
    if unit not in LENGTH_UNITS:
        raise HazardEvaluationError(
            f"{restriction.kind.value} limit needs a length unit, got '{restriction.unit}'."
        )
    return meters_to_length(value_m - length_to_meters(restriction.limit, unit), unit)


def _weight_margin(value_kg: float, restriction: HazardRestriction) -> float:
    unit = _unit(restriction)
    if unit not in WEIGHT_UNITS:
        raise HazardEvaluationError(f"Weight limit needs a weight unit, got '{restriction.unit}'.")
    return kilograms_to_weight(value_kg - weight_to_kilograms(restriction.limit, unit), unit)


def evaluate(profile: TruckProfile, restriction: HazardRestriction, distance_m: float) -> HazardAlert:
    """Compare the truck against one restriction.

    The margin is truck value minus limit, in the restriction's unit:
    positive means the truck exceeds the limit. Steep grades carry no
    margin; tunnels carry a height margin only when given a length limit.
    """
    kind = restriction.kind
    severity = Severity.CRITICAL if kind in CRITICAL_KINDS else Severity.INFORMATIONAL
    margin: Optional[float] = None

    if kind in CRITICAL_KINDS:
        if restriction.limit is None:
            raise HazardEvaluationError(f"{kind.value} restriction has no limit.")
        if kind is HazardKind.WEIGHT_LIMIT:
            margin = _weight_margin(profile.gross_weight_kg, restriction)
        else:
            margin = _length_margin(getattr(profile, _LENGTH_ATTRIBUTE[kind]), restriction)
    elif kind is HazardKind.TUNNEL:
        if restriction.limit is not None and _unit(restriction) in LENGTH_UNITS:
            margin = _length_margin(profile.height_m, restriction)
    elif kind is not HazardKind.STEEP_GRADE:
        raise HazardEvaluationError(f"Unsupported restriction kind '{kind}'.")

    return HazardAlert(
        restriction=restriction,
        severity=severity,
        distance_m=distance_m,
        violation=margin is not None and margin > 0,
        margin=margin,
        margin_unit=_unit(restriction) if margin is not None else None,
    )


def scan_route(
    profile: TruckProfile,
    geometry: Sequence[Coordinate],
    restrictions: Iterable[HazardRestriction],
    *,
    buffer_m: float | None = None,
) -> list[HazardAlert]:
    """Evaluate every restriction lying on the route, nearest first.

    Restrictions farther than ``buffer_m`` from the geometry are skipped.
    A restriction that cannot be evaluated is left out rather than
    reported with a possibly wrong margin.
    """
    buffer_m = settings.hazard_route_buffer_m if buffer_m is None else buffer_m
    if not geometry:
        logger.warning("Route has no geometry; no hazards can be located on it")
        return []
    alerts: list[HazardAlert] = []
    for restriction in restrictions:
        along_m, offset_m = distance_along_route_m(geometry, restriction.location)
        if offset_m > buffer_m:
            logger.debug(
                f"Skipping {restriction.kind.value} at {restriction.location.as_query()}: "
                f"{offset_m:.0f}m off route"
            )
            continue
        try:
            alerts.append(evaluate(profile, restriction, along_m))
        except HazardEvaluationError as exc:
            logger.warning(f"Suppressed {restriction.kind.value} alert at {restriction.location.as_query()}: {exc}")
    alerts.sort(key=lambda alert: alert.distance_m)
    return alerts
