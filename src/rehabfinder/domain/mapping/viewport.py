"""Initial map viewport selection."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rehabfinder.domain.model import Coordinates

DEFAULT_CENTRE = (4.2105, 101.9758)
DEFAULT_ZOOM = 6
VIEWER_ZOOM = 12
MAX_FIT_ZOOM = 15


@dataclass(frozen=True, slots=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, points: Iterable[Coordinates]) -> Bounds | None:
        collected = list(points)
        if not collected:
            return None
        return cls(
            south=min(point.latitude for point in collected),
            west=min(point.longitude for point in collected),
            north=max(point.latitude for point in collected),
            east=max(point.longitude for point in collected),
        )

    @property
    def centre(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)


@dataclass(frozen=True, slots=True)
class Viewport:
    centre: tuple[float, float]
    zoom: int
    bounds: Bounds | None = None


def _fit_zoom(bounds: Bounds) -> int:
    lat_span = bounds.north - bounds.south
    lng_span = bounds.east - bounds.west
    if lat_span <= 0 and lng_span <= 0:
        return MAX_FIT_ZOOM
    zoom_for_lat = math.log2(180 / lat_span) if lat_span > 0 else MAX_FIT_ZOOM
    zoom_for_lng = math.log2(360 / lng_span) if lng_span > 0 else MAX_FIT_ZOOM
    return max(0, min(MAX_FIT_ZOOM, math.floor(min(zoom_for_lat, zoom_for_lng))))


def compute_viewport(
    points: Iterable[Coordinates],
    viewer: Coordinates | None = None,
) -> Viewport:
    """Centre on the viewer if known, else fit the markers, else show the default region."""

    if viewer is not None:
        return Viewport(centre=viewer.as_tuple(), zoom=VIEWER_ZOOM)
    bounds = Bounds.around(points)
    if bounds is None:
        return Viewport(centre=DEFAULT_CENTRE, zoom=DEFAULT_ZOOM)
    return Viewport(centre=bounds.centre, zoom=_fit_zoom(bounds), bounds=bounds)
