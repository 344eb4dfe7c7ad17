"""Driver-facing hazard titles, messages and distance labels."""

from __future__ import annotations

from ...models.domain import HazardAlert, HazardKind, TruckProfile
from ..units import (
    FEET_PER_MILE,
    format_feet_inches,
    kilograms_to_pounds,
    length_to_meters,
    meters_to_feet,
    weight_to_kilograms,
)

TITLES = {
    HazardKind.LOW_BRIDGE: "LOW BRIDGE AHEAD",
    HazardKind.WEIGHT_LIMIT: "WEIGHT LIMIT AHEAD",
    HazardKind.WIDTH_LIMIT: "WIDTH RESTRICTION AHEAD",
    HazardKind.LENGTH_LIMIT: "LENGTH RESTRICTION AHEAD",
    HazardKind.TUNNEL: "TUNNEL RESTRICTION AHEAD",
    HazardKind.STEEP_GRADE: "STEEP GRADE AHEAD",
}

NOW_THRESHOLD_FT = 300.0


def hazard_title(kind: HazardKind) -> str:
    return TITLES[kind]


def _limit_feet(alert: HazardAlert) -> float:
    restriction = alert.restriction
    return meters_to_feet(length_to_meters(restriction.limit, restriction.unit))


def hazard_message(alert: HazardAlert, profile: TruckProfile | None = None) -> str:
    """Multi-line message for the warning banner, in feet, inches and pounds."""
    restriction = alert.restriction
    kind = restriction.kind

    if kind is HazardKind.STEEP_GRADE:
        grade = f"{restriction.limit:.1f}%" if restriction.limit is not None else "ahead"
        return f"Steep grade: {grade} - Use appropriate gear"
    if kind is HazardKind.TUNNEL and alert.margin is None:
        return "Tunnel restrictions apply - Check clearance and hazmat regulations"

    if kind is HazardKind.WEIGHT_LIMIT:
        limit_lbs = kilograms_to_pounds(weight_to_kilograms(restriction.limit, restriction.unit))
        lines = [f"Weight limit: {limit_lbs:.0f} lbs"]
        if profile is not None:
            truck_lbs = kilograms_to_pounds(profile.gross_weight_kg)
            difference = abs(truck_lbs - limit_lbs)
            lines.append(f"Your truck weight: {truck_lbs:.0f} lbs")
            if alert.violation:
                lines.append(f"Note: {difference:.0f} lbs over limit")
            else:
                lines.append(f"Weight margin: {difference:.0f} lbs")
        return "\n".join(lines)

    limit_ft = _limit_feet(alert)
    if kind is HazardKind.LENGTH_LIMIT:
        lines = [f"Length restriction: {limit_ft:.1f}'"]
        if profile is not None:
            truck_ft = meters_to_feet(profile.length_m)
            difference = abs(truck_ft - limit_ft)
            lines.append(f"Your truck length: {truck_ft:.1f}'")
            lines.append(f"Note: {difference:.0f}' over limit" if alert.violation else f"Clearance: {difference:.0f}'")
        return "\n".join(lines)

    if kind is HazardKind.WIDTH_LIMIT:
        lines = [f"Width restriction: {limit_ft:.1f}'"]
        if profile is not None:
            truck_ft = meters_to_feet(profile.width_m)
            inches = abs(truck_ft - limit_ft) * 12
            lines.append(f"Your truck width: {truck_ft:.1f}'")
            lines.append(f"Note: {inches:.0f}\" over limit" if alert.violation else f"Clearance: {inches:.0f}\"")
        return "\n".join(lines)

    # Low bridge, or a tunnel with a height limit.
    label = "Bridge clearance" if kind is HazardKind.LOW_BRIDGE else "Tunnel clearance"
    lines = [f"{label}: {format_feet_inches(limit_ft)}"]
    if profile is not None:
        truck_ft = meters_to_feet(profile.height_m)
        inches = abs(truck_ft - limit_ft) * 12
        lines.append(f"Your truck height: {format_feet_inches(truck_ft)}")
        lines.append(
            f"Note: {inches:.0f}\" over clearance" if alert.violation else f"Clearance available: {inches:.0f}\""
        )
    return "\n".join(lines)


def describe_distance(distance_m: float) -> str:
    feet = meters_to_feet(distance_m)
    if feet < NOW_THRESHOLD_FT:
        return "NOW"
    if feet < FEET_PER_MILE:
        return f"in {int(feet)} ft"
    return f"in {feet / FEET_PER_MILE:.1f} mi"
