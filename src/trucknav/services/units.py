"""Unit normalization between imperial driver input and metric provider units."""

from __future__ import annotations

from typing import Optional

from ..config import settings
from ..models.domain import ImperialTruckProfile, TruckProfile

FEET_TO_METERS = 0.3048
POUNDS_TO_KILOGRAMS = 0.453592
METERS_TO_CENTIMETERS = 100.0
FEET_PER_MILE = 5280.0

_LENGTH_TO_METERS: dict[str, float] = {
    "m": 1.0,
    "cm": 0.01,
    "ft": FEET_TO_METERS,
    "in": FEET_TO_METERS / 12.0,
}

# "t" is the metric tonne, "ton" the US short ton (2000 lbs).
_WEIGHT_TO_KILOGRAMS: dict[str, float] = {
    "kg": 1.0,
    "lbs": POUNDS_TO_KILOGRAMS,
    "t": 1000.0,
    "ton": 2000.0 * POUNDS_TO_KILOGRAMS,
}

LENGTH_UNITS = frozenset(_LENGTH_TO_METERS)
WEIGHT_UNITS = frozenset(_WEIGHT_TO_KILOGRAMS)


def feet_to_meters(feet: float) -> float:
    return feet * FEET_TO_METERS


def meters_to_feet(meters: float) -> float:
    return meters / FEET_TO_METERS


def pounds_to_kilograms(pounds: float) -> float:
    return pounds * POUNDS_TO_KILOGRAMS


def kilograms_to_pounds(kilograms: float) -> float:
    return kilograms / POUNDS_TO_KILOGRAMS


def _optional(value: Optional[float], convert) -> Optional[float]:
    return None if value is None else convert(value)


def to_metric(profile: ImperialTruckProfile) -> TruckProfile:
    """Convert a driver-entered imperial profile to the canonical metric one.

    Values are kept unrounded so that converting back is lossless; rounding
    happens only when a provider query or display string is rendered.
    """
    return TruckProfile(
        height_m=feet_to_meters(profile.height_ft),
        width_m=feet_to_meters(profile.width_ft),
        length_m=feet_to_meters(profile.length_ft),
        gross_weight_kg=pounds_to_kilograms(profile.gross_weight_lbs),
        axle_weight_kg=_optional(profile.axle_weight_lbs, pounds_to_kilograms),
        axle_count=profile.axle_count,
        trailer_count=profile.trailer_count,
        hazardous_goods=profile.hazardous_goods,
        avoidances=profile.avoidances,
        commercial=profile.commercial,
    )


def to_imperial(profile: TruckProfile) -> ImperialTruckProfile:
    return ImperialTruckProfile(
        height_ft=meters_to_feet(profile.height_m),
        width_ft=meters_to_feet(profile.width_m),
        length_ft=meters_to_feet(profile.length_m),
        gross_weight_lbs=kilograms_to_pounds(profile.gross_weight_kg),
        axle_weight_lbs=_optional(profile.axle_weight_kg, kilograms_to_pounds),
        axle_count=profile.axle_count,
        trailer_count=profile.trailer_count,
        hazardous_goods=profile.hazardous_goods,
        avoidances=profile.avoidances,
        commercial=profile.commercial,
    )


# Final-unit renderers used by provider adapters.


def meters_for_query(meters: float) -> float:
    return round(meters, 2)


def to_centimeters(meters: float) -> int:
    return int(round(meters * METERS_TO_CENTIMETERS))


def kilograms_for_query(kilograms: float) -> int:
    return int(round(kilograms))


def length_to_meters(value: float, unit: str) -> float:
    try:
        return value * _LENGTH_TO_METERS[unit.lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported length unit '{unit}'.") from exc


def meters_to_length(meters: float, unit: str) -> float:
    try:
        return meters / _LENGTH_TO_METERS[unit.lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported length unit '{unit}'.") from exc


def weight_to_kilograms(value: float, unit: str) -> float:
    try:
        return value * _WEIGHT_TO_KILOGRAMS[unit.lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported weight unit '{unit}'.") from exc


def kilograms_to_weight(kilograms: float, unit: str) -> float:
    try:
        return kilograms / _WEIGHT_TO_KILOGRAMS[unit.lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported weight unit '{unit}'.") from exc


# Display helpers


def format_feet_inches(feet: float) -> str:
    """Render ``13.5`` as ``13'6"``; whole feet render without inches."""
    total_inches = int(round(feet * 12))
    whole_feet, inches = divmod(total_inches, 12)
    return f"{whole_feet}'{inches}\"" if inches else f"{whole_feet}'"


def format_height(meters: float, imperial: bool = True) -> str:
    if imperial:
        return f"{format_feet_inches(meters_to_feet(meters))} ({meters:.2f}m)"
    return f"{meters:.2f}m"


def format_width(meters: float, imperial: bool = True) -> str:
    if imperial:
        return f"{meters_to_feet(meters):.1f}' ({meters:.2f}m)"
    return f"{meters:.2f}m"


def format_length(meters: float, imperial: bool = True) -> str:
    if imperial:
        return f"{meters_to_feet(meters):.1f} ft"
    return f"{meters:.1f} m"


def format_weight(kilograms: float, imperial: bool = True) -> str:
    tonnes = kilograms / 1000.0
    if imperial:
        return f"{kilograms_to_pounds(kilograms):.0f} lbs ({tonnes:.1f}t)"
    return f"{tonnes:.1f}t"


def describe_profile(profile: TruckProfile, imperial: Optional[bool] = None) -> dict[str, str]:
    """Display strings for a profile's dimensions, in the configured unit system."""
    if imperial is None:
        imperial = settings.use_imperial_units
    return {
        "height": format_height(profile.height_m, imperial),
        "width": format_width(profile.width_m, imperial),
        "length": format_length(profile.length_m, imperial),
        "weight": format_weight(profile.gross_weight_kg, imperial),
    }
