"""Ports for point-to-point routing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rehabfinder.domain.model import Coordinates


class RoutingError(RuntimeError):
    """Raised when the routing provider cannot produce a route."""


@dataclass(slots=True)
class Route:
    distance_text: str
    duration_text: str
    distance_metres: int | None = None
    duration_seconds: int | None = None
    start_address: str | None = None
    end_address: str | None = None


@runtime_checkable
class RoutingService(Protocol):
    def route(self, origin: Coordinates, destination: Coordinates) -> Route: ...


__all__ = ["Route", "RoutingError", "RoutingService"]
