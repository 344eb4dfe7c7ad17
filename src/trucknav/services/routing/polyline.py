"""Flexible polyline codec for HERE routing geometry.

Format: https://github.com/heremaps/flexible-polyline

Every character maps through a 64-symbol table to 6 bits: 5 value bits
and a continuation bit (0x20). The stream starts with two unsigned
varints, the format version and a header word (bits 0-3 precision, bits
4-6 third dimension type, bits 7-10 third dimension precision), followed
by zig-zag encoded deltas: latitude, longitude and, when declared, the
third dimension for every point.

Decoding is lenient. An invalid character, a value cut off mid-stream or
an incomplete trailing point stops decoding and the points decoded so
far are returned together with a diagnostic in ``DecodedGeometry.error``.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from ...models.domain import Coordinate
from .models import DecodedGeometry, ThirdDimension

ENCODING_TABLE = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
DECODING_TABLE = {char: value for value, char in enumerate(ENCODING_TABLE)}
FORMAT_VERSION = 1

logger = logging.getLogger(__name__)


def _decode_unsigned_values(encoded: str) -> tuple[list[int], str | None]:
    """Split the stream into complete unsigned varints.

    Returns the values read before the first problem and a diagnostic for
    that problem, if any.
    """
    values: list[int] = []
    result = 0
    shift = 0
    for position, char in enumerate(encoded):
        value = DECODING_TABLE.get(char)
        if value is None:
            return values, f"invalid character {char!r} at position {position}"
        result |= (value & 0x1F) << shift
        if value & 0x20:
            shift += 5
            continue
        values.append(result)
        result = 0
        shift = 0
    if shift:
        return values, "stream ends inside a value"
    return values, None


def _to_signed(value: int) -> int:
    return ~(value >> 1) if value & 1 else value >> 1


def decode(encoded: str | bytes | None) -> DecodedGeometry:
    """Decode a flexible polyline into coordinates.

    Never raises: malformed input yields a (possibly empty) prefix of the
    geometry with ``error`` set.
    """
    if isinstance(encoded, bytes):
        encoded = encoded.decode("ascii", errors="replace")
    if not encoded:
        return DecodedGeometry()

    values, error = _decode_unsigned_values(encoded)
    if len(values) < 2:
        error = error or "stream ends inside the header"
        logger.warning(f"Discarding polyline with unreadable header: {error}")
        return DecodedGeometry(error=error)

    version, header = values[0], values[1]
    if version != FORMAT_VERSION:
        logger.debug(f"Polyline declares format version {version}, decoding as version {FORMAT_VERSION}")

    precision = header & 0x0F
    third_dimension = ThirdDimension((header >> 4) & 0x07)
    third_dimension_precision = (header >> 7) & 0x0F
    dimensions = 3 if third_dimension else 2

    body = values[2:]
    usable = len(body) - len(body) % dimensions
    if usable != len(body) and error is None:
        error = "stream ends inside a point"

    scale = 10**precision
    third_scale = 10**third_dimension_precision
    last_lat = 0
    last_lon = 0
    last_z = 0
    points: list[Coordinate] = []
    third_values: list[float] = []

    for start in range(0, usable, dimensions):
        last_lat += _to_signed(body[start])
        last_lon += _to_signed(body[start + 1])
        if dimensions == 3:
            last_z += _to_signed(body[start + 2])
        try:
            point = Coordinate(last_lat / scale, last_lon / scale)
        except ValueError as exc:
            error = f"point {len(points)} out of range ({exc})"
            break
        points.append(point)
        if dimensions == 3:
            third_values.append(last_z / third_scale)

    if error:
        logger.warning(f"Partial polyline decode, kept {len(points)} points: {error}")

    return DecodedGeometry(
        points=tuple(points),
        precision=precision,
        third_dimension=third_dimension,
        third_dimension_precision=third_dimension_precision,
        third_dimension_values=tuple(third_values),
        error=error,
    )


def _scale(value: float, factor: int) -> int:
    # Round half away from zero, as the reference encoders do.
    rounded = int(math.floor(abs(value) * factor + 0.5))
    return -rounded if value < 0 else rounded


def _encode_unsigned(value: int, out: list[str]) -> None:
    while value > 0x1F:
        out.append(ENCODING_TABLE[(value & 0x1F) | 0x20])
        value >>= 5
    out.append(ENCODING_TABLE[value])


def _encode_signed(value: int, out: list[str]) -> None:
    value <<= 1
    if value < 0:
        value = ~value
    _encode_unsigned(value, out)


def _as_values(point: Coordinate | Sequence[float]) -> tuple[float, ...]:
    if isinstance(point, Coordinate):
        return point.as_tuple()
    return tuple(point)


def encode(
    points: Iterable[Coordinate | Sequence[float]],
    precision: int = 5,
    third_dimension: ThirdDimension = ThirdDimension.ABSENT,
    third_dimension_precision: int = 0,
) -> str:
    """Encode ``(lat, lon)`` or ``(lat, lon, z)`` points as a flexible polyline."""
    if not 0 <= precision <= 15:
        raise ValueError("precision must be between 0 and 15")
    if not 0 <= third_dimension_precision <= 15:
        raise ValueError("third_dimension_precision must be between 0 and 15")
    third_dimension = ThirdDimension(third_dimension)
    if third_dimension in (ThirdDimension.RESERVED1, ThirdDimension.RESERVED2):
        raise ValueError(f"third dimension {third_dimension.name} is reserved")

    header = (third_dimension_precision << 7) | (third_dimension << 4) | precision
    out: list[str] = []
    _encode_unsigned(FORMAT_VERSION, out)
    _encode_unsigned(header, out)

    scale = 10**precision
    third_scale = 10**third_dimension_precision
    last_lat = last_lon = last_z = 0
    for point in points:
        values = _as_values(point)
        if third_dimension and len(values) < 3:
            raise ValueError(f"point {values} is missing its {third_dimension.name.lower()} value")
        lat = _scale(values[0], scale)
        lon = _scale(values[1], scale)
        _encode_signed(lat - last_lat, out)
        _encode_signed(lon - last_lon, out)
        last_lat, last_lon = lat, lon
        if third_dimension:
            z = _scale(values[2], third_scale)
            _encode_signed(z - last_z, out)
            last_z = z
    return "".join(out)
