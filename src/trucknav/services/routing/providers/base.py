"""Base classes for routing provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from ....models.domain import Coordinate
from ..models import DecodedGeometry, ParsedRoute, RouteRequest, ThirdDimension

# Stand-in position for an instruction whose point offset is outside its geometry.
UNRESOLVED_COORDINATE = Coordinate(0.0, 0.0)

_SECRET_PARAMS = frozenset({"apiKey", "key"})


class RouteParseError(ValueError):
    """A provider response could not be turned into a route."""


class NoRouteFoundError(RouteParseError):
    """The provider answered but returned no route."""


class MalformedResponseError(RouteParseError):
    """The provider response does not have the expected shape."""


class ProviderLimitError(ValueError):
    """The request exceeds what the provider accepts (e.g. too many via points)."""


@dataclass(frozen=True, slots=True)
class ProviderQuery:
    """An HTTP request ready to be sent to a provider."""

    url: str
    params: tuple[tuple[str, str], ...]
    method: str = "GET"

    def redacted_params(self) -> list[tuple[str, str]]:
        return [(name, "***" if name in _SECRET_PARAMS else value) for name, value in self.params]


class RoutingProvider(ABC):
    """Contract for routing provider adapters.

    An adapter translates a provider-agnostic ``RouteRequest`` into the
    provider's query format and the provider's response body back into a
    normalized ``Route``. No I/O happens here.
    """

    name: str = ""
    max_via_points: int = 0
    api_key: str | None = None

    @abstractmethod
    def build_query(self, request: RouteRequest) -> ProviderQuery:
        raise NotImplementedError

    @abstractmethod
    def parse_response(self, payload: Mapping[str, Any]) -> ParsedRoute:
        raise NotImplementedError

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ValueError(f"{self.name} API key is not configured.")
        return self.api_key

    def check_limits(self, request: RouteRequest) -> None:
        if self.max_via_points and len(request.via) > self.max_via_points:
            raise ProviderLimitError(
                f"{self.name} accepts at most {self.max_via_points} via points, got {len(request.via)}."
            )


def resolve_offset(geometry: Sequence[Coordinate], offset: Any) -> tuple[Coordinate, int | None, bool]:
    """Look up a point offset, falling back to ``UNRESOLVED_COORDINATE``."""
    if offset is None:
        return UNRESOLVED_COORDINATE, None, False
    index = int(offset)
    if 0 <= index < len(geometry):
        return geometry[index], index, True
    return UNRESOLVED_COORDINATE, index, False


def join_geometries(parts: Sequence[DecodedGeometry]) -> DecodedGeometry:
    """Concatenate section geometries, dropping repeated junction points."""
    if not parts:
        return DecodedGeometry()
    first = parts[0]
    keep_third = all(part.third_dimension == first.third_dimension for part in parts)
    points: list[Coordinate] = []
    third_values: list[float] = []
    errors: list[str] = []
    for part in parts:
        part_points = list(part.points)
        part_values = list(part.third_dimension_values)
        if points and part_points and part_points[0] == points[-1]:
            part_points = part_points[1:]
            part_values = part_values[1:]
        points.extend(part_points)
        third_values.extend(part_values)
        if part.error:
            errors.append(part.error)
    return DecodedGeometry(
        points=tuple(points),
        precision=first.precision,
        third_dimension=first.third_dimension if keep_third else ThirdDimension.ABSENT,
        third_dimension_precision=first.third_dimension_precision if keep_third else 0,
        third_dimension_values=tuple(third_values) if keep_third else (),
        error="; ".join(errors) or None,
    )
