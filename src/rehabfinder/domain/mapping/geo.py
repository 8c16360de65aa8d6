"""Great-circle distances and distance ordering."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from rehabfinder.domain.model import Coordinates

EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: Coordinates, destination: Coordinates) -> float:
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(destination.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(destination.longitude - origin.longitude)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def sort_by_distance[T](
    items: Iterable[T],
    viewer: Coordinates,
    *,
    coordinates_of: Callable[[T], Coordinates | None],
) -> list[tuple[T, float | None]]:
    """Order ``items`` nearest first; items without coordinates follow in input order."""

    located: list[tuple[T, float]] = []
    unlocated: list[tuple[T, float | None]] = []
    for item in items:
        coordinates = coordinates_of(item)
        if coordinates is None:
            unlocated.append((item, None))
        else:
            located.append((item, haversine_km(viewer, coordinates)))
    located.sort(key=lambda entry: entry[1])
    return [*located, *unlocated]


def format_distance(distance_km: float | None) -> str | None:
    if distance_km is None:
        return None
    if distance_km < 1:
        return f"{round(distance_km * 1000)}m away"
    return f"{distance_km:.1f}km away"
