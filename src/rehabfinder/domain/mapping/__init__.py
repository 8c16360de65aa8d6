"""Map rendering: markers, distances, viewport and routing."""

from __future__ import annotations

from .geo import format_distance, haversine_km, sort_by_distance
from .links import (
    SharePayload,
    apple_maps_directions_url,
    google_directions_url,
    google_maps_url,
    share_payload,
)
from .markers import (
    InvalidMarkerTransitionError,
    Marker,
    MarkerDetail,
    MarkerState,
    category_colour,
)
from .render import MapRenderer, RenderedMap
from .routing import PreconditionFailedError, RoutePlanner
from .viewport import Bounds, Viewport, compute_viewport

__all__ = [
    "Bounds",
    "InvalidMarkerTransitionError",
    "MapRenderer",
    "Marker",
    "MarkerDetail",
    "MarkerState",
    "PreconditionFailedError",
    "RenderedMap",
    "RoutePlanner",
    "SharePayload",
    "Viewport",
    "apple_maps_directions_url",
    "category_colour",
    "compute_viewport",
    "format_distance",
    "google_directions_url",
    "google_maps_url",
    "haversine_km",
    "share_payload",
    "sort_by_distance",
]
