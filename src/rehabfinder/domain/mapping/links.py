"""External map links for a centre location."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rehabfinder.domain.model import Coordinates

APP_NAME = "RehabFinder"


@dataclass(frozen=True, slots=True)
class SharePayload:
    title: str
    text: str
    url: str


def google_directions_url(destination: Coordinates) -> str:
    return (
        "https://www.google.com/maps/dir/?api=1"
        f"&destination={destination.latitude},{destination.longitude}"
    )


def google_maps_url(location: Coordinates) -> str:
    return f"https://www.google.com/maps/@{location.latitude},{location.longitude},15z"


def apple_maps_directions_url(destination: Coordinates) -> str:
    return f"http://maps.apple.com/?daddr={destination.latitude},{destination.longitude}&dirflg=d"


def share_payload(name: str, location: Coordinates) -> SharePayload:
    return SharePayload(
        title=f"{name} - {APP_NAME}",
        text=f"Check out this rehabilitation center: {name}",
        url=google_maps_url(location),
    )
