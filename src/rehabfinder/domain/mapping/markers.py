"""Map markers: lifecycle state, category colours and detail panel data."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, assert_never

from rehabfinder.domain.model import CentreCategory

if TYPE_CHECKING:
    from uuid import UUID

    from rehabfinder.domain.model import Centre, Coordinates

DEFAULT_MARKER_COLOUR = "#6b7280"
FAILED_MARKER_COLOUR = "#111827"
SERVICES_PREVIEW_LENGTH = 100


class MarkerState(StrEnum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[MarkerState, frozenset[MarkerState]] = {
    MarkerState.UNRESOLVED: frozenset({MarkerState.RESOLVING}),
    MarkerState.RESOLVING: frozenset({MarkerState.RESOLVED, MarkerState.FAILED}),
    MarkerState.RESOLVED: frozenset(),
    MarkerState.FAILED: frozenset(),
}


class InvalidMarkerTransitionError(ValueError):
    """Raised when a marker is moved to a state its lifecycle does not allow."""


def category_colour(category: CentreCategory) -> str:
    match category:
        case CentreCategory.INPATIENT:
            return "#dc2626"
        case CentreCategory.OUTPATIENT:
            return "#059669"
        case CentreCategory.COMMUNITY:
            return "#7c3aed"
        case CentreCategory.TRADITIONAL:
            return "#d97706"
        case CentreCategory.SPECIALIST:
            return "#2563eb"
        case CentreCategory.UNKNOWN:
            return DEFAULT_MARKER_COLOUR
        case _:
            assert_never(category)


def truncate_services(services: str | None) -> str | None:
    if not services:
        return None
    if len(services) <= SERVICES_PREVIEW_LENGTH:
        return services
    return services[:SERVICES_PREVIEW_LENGTH] + "..."


def normalize_website(website: str | None) -> str | None:
    if not website:
        return None
    website = website.strip()
    return website if website.startswith("http") else f"https://{website}"


@dataclass(frozen=True, slots=True)
class MarkerDetail:
    """Data shown in the info panel of a clicked marker."""

    name: str
    address: str
    type_name: str
    country_name: str | None
    services: str | None
    phone: str | None
    email: str | None
    website: str | None

    @classmethod
    def for_centre(
        cls, centre: Centre, *, type_name: str | None, country_name: str | None
    ) -> MarkerDetail:
        return cls(
            name=centre.name,
            address=centre.address,
            type_name=type_name or CentreCategory.UNKNOWN.value,
            country_name=country_name,
            services=truncate_services(centre.services),
            phone=centre.phone or None,
            email=centre.email or None,
            website=normalize_website(centre.website),
        )


class Marker:
    """One centre on the map; only resolved markers carry coordinates and accept clicks."""

    def __init__(
        self,
        centre_id: UUID,
        category: CentreCategory,
        detail: MarkerDetail,
        coordinates: Coordinates | None = None,
    ) -> None:
        self.centre_id = centre_id
        self.category = category
        self.detail = detail
        self.coordinates = coordinates
        self.state = MarkerState.RESOLVED if coordinates else MarkerState.UNRESOLVED
        self.failure_reason: str | None = None

    def __repr__(self) -> str:
        return f"Marker({self.detail.name!r}, state={self.state.value})"

    def _transition(self, target: MarkerState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidMarkerTransitionError(
                f"Marker for {self.detail.name!r} cannot move from {self.state} to {target}"
            )
        self.state = target

    def start_resolving(self) -> None:
        self._transition(MarkerState.RESOLVING)

    def resolve(self, coordinates: Coordinates) -> None:
        self._transition(MarkerState.RESOLVED)
        self.coordinates = coordinates

    def fail(self, reason: str | None = None) -> None:
        self._transition(MarkerState.FAILED)
        self.failure_reason = reason

    @property
    def clickable(self) -> bool:
        return self.state is MarkerState.RESOLVED

    @property
    def colour(self) -> str:
        if self.state is MarkerState.FAILED:
            return FAILED_MARKER_COLOUR
        return category_colour(self.category)
