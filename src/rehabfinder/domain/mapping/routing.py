"""Routing between the viewer and a selected centre."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.domain.model import ErrorKind

if TYPE_CHECKING:
    from rehabfinder.domain.model import Coordinates
    from rehabfinder.domain.ports import Route, RoutingService

log = getLogger(__name__)


class PreconditionFailedError(ValueError):
    """Raised when routing is requested without both endpoints."""

    kind = ErrorKind.PRECONDITION_FAILED


class RoutePlanner:
    def __init__(self, service: RoutingService) -> None:
        self._service = service

    def route(self, viewer: Coordinates | None, destination: Coordinates | None) -> Route:
        if viewer is None:
            raise PreconditionFailedError("Viewer location is required for directions")
        if destination is None:
            raise PreconditionFailedError("Destination has no coordinates")
        route = self._service.route(viewer, destination)
        log.debug("Route found: %s, %s", route.distance_text, route.duration_text)
        return route
