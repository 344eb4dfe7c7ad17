"""Turn raw provider response bodies into routes without raising."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .models import Route
from .providers.base import MalformedResponseError, NoRouteFoundError, RouteParseError, RoutingProvider

logger = logging.getLogger(__name__)

__all__ = [
    "ParseResult",
    "parse_route_response",
    "RouteParseError",
    "NoRouteFoundError",
    "MalformedResponseError",
]


@dataclass(slots=True)
class ParseResult:
    """Either a route or the error that prevented one, plus warnings."""

    route: Optional[Route] = None
    error: Optional[RouteParseError] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.route is not None and self.error is None

    def unwrap(self) -> Route:
        if self.error is not None:
            raise self.error
        if self.route is None:
            raise MalformedResponseError("Parse result holds neither a route nor an error.")
        return self.route


def _load(raw: Union[bytes, str, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedResponseError(f"Response body is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f"Expected a JSON object, got {type(payload).__name__}.")
    return payload


def parse_route_response(raw: Union[bytes, str, Mapping[str, Any]], provider: RoutingProvider) -> ParseResult:
    """Parse a provider response into a ``ParseResult``.

    Domain failures come back in ``ParseResult.error``; they are never
    raised from here.
    """
    try:
        parsed = provider.parse_response(_load(raw))
    except RouteParseError as exc:
        logger.warning(f"{provider.name} route response rejected: {exc}")
        return ParseResult(error=exc)
    except (KeyError, TypeError, ValueError) as exc:
        error = MalformedResponseError(f"Unexpected {provider.name} response structure: {exc}")
        logger.warning(str(error))
        return ParseResult(error=error)

    for warning in parsed.warnings:
        logger.warning(f"{provider.name} route {parsed.route.id}: {warning}")
    return ParseResult(route=parsed.route, warnings=list(parsed.warnings))
