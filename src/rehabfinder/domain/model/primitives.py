"""Value objects shared across the domain."""

from __future__ import annotations

import math
from dataclasses import dataclass

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


def is_valid_pair(latitude: float | None, longitude: float | None) -> bool:
    """Return whether a latitude/longitude pair describes a usable location.

    Null components, the ``(0, 0)``-style placeholder zero and out-of-range values
    all count as unusable.
    """

    if latitude is None or longitude is None:
        return False
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    if latitude == 0 or longitude == 0:
        return False
    return (
        LATITUDE_RANGE[0] <= latitude <= LATITUDE_RANGE[1]
        and LONGITUDE_RANGE[0] <= longitude <= LONGITUDE_RANGE[1]
    )


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not is_valid_pair(self.latitude, self.longitude):
            raise ValueError(
                f"Invalid coordinates: latitude={self.latitude!r}, longitude={self.longitude!r}"
            )

    @classmethod
    def from_optional(
        cls, latitude: float | None, longitude: float | None
    ) -> Coordinates | None:
        if latitude is None or longitude is None or not is_valid_pair(latitude, longitude):
            return None
        return cls(latitude, longitude)

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)
