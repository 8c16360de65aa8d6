"""Ports for resolving names and addresses into coordinates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rehabfinder.domain.model import Coordinates, ErrorKind


class LookupServiceError(RuntimeError):
    """Raised by lookup adapters for any failure other than "no match"."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(slots=True)
class LookupMatch:
    """Best candidate returned by a place search or geocoding call."""

    coordinates: Coordinates
    formatted_address: str | None = None
    name: str | None = None
    place_id: str | None = None
    types: tuple[str, ...] = ()


@dataclass(slots=True)
class PlaceDetails:
    place_id: str
    name: str | None = None
    formatted_address: str | None = None
    phone: str | None = None
    website: str | None = None
    types: tuple[str, ...] = field(default_factory=tuple)


@runtime_checkable
class LookupService(Protocol):
    """Zero-or-one best match per call; ``None`` means the provider found nothing."""

    def search_place(
        self,
        query: str,
        *,
        category_hint: str | None = None,
        region_hint: str | None = None,
    ) -> LookupMatch | None: ...

    def geocode(self, address: str, *, region_hint: str | None = None) -> LookupMatch | None: ...


@runtime_checkable
class PlaceDetailsService(Protocol):
    def place_details(self, place_id: str) -> PlaceDetails | None: ...


__all__ = [
    "LookupMatch",
    "LookupService",
    "LookupServiceError",
    "PlaceDetails",
    "PlaceDetailsService",
]
