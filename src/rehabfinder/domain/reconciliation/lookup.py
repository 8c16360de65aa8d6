"""Tiered name/address resolution on top of a lookup service."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.domain.model import ErrorKind, Strategy
from rehabfinder.domain.ports import LookupServiceError

from .outcomes import ResolutionOutcome
from .selection import is_placeholder_address

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from rehabfinder.domain.ports import LookupMatch, LookupService

log = getLogger(__name__)

DEFAULT_SERVICES_DESCRIPTION = "Rehabilitation services"
_GENERIC_PLACE_TYPES = frozenset({"establishment", "point_of_interest"})


@dataclass(frozen=True, slots=True)
class ProviderProfile:
    """Business classification derived from provider place types."""

    type_name: str | None
    services: str


def describe_place_types(types: Iterable[str]) -> ProviderProfile:
    """Classify provider place types into a directory type and a services blurb."""

    kinds = tuple(types)
    type_name: str | None = None
    if any(kind in {"hospital", "health"} for kind in kinds):
        type_name = "Hospital"
    elif any(kind in {"doctor", "medical"} for kind in kinds):
        type_name = "Private"
    descriptive = [kind.replace("_", " ") for kind in kinds if kind not in _GENERIC_PLACE_TYPES]
    return ProviderProfile(
        type_name=type_name,
        services=", ".join(descriptive) or DEFAULT_SERVICES_DESCRIPTION,
    )


class TieredLookup:
    """Place search first, geocoding second, short-circuiting on the first match."""

    def __init__(self, service: LookupService, *, category_hint: str | None = None) -> None:
        self._service = service
        self._category_hint = category_hint

    def resolve(
        self,
        name: str,
        address: str | None,
        country_name: str,
        country_hint: str | None,
        *,
        centre_id: UUID | None = None,
    ) -> ResolutionOutcome:
        place_error: LookupServiceError | None = None
        query = f"{name.strip()} {country_name}".strip()
        try:
            match = self._service.search_place(
                query,
                category_hint=self._category_hint,
                region_hint=country_hint,
            )
        except LookupServiceError as exc:
            if exc.kind is ErrorKind.RATE_LIMITED:
                return ResolutionOutcome(
                    centre_name=name,
                    centre_id=centre_id,
                    success=False,
                    strategy_used=Strategy.PLACE_SEARCH,
                    error_kind=ErrorKind.RATE_LIMITED,
                    reason=f"place search: {exc.message}",
                )
            log.warning("Place search failed for %r (%s): %s", name, exc.kind, exc.message)
            place_error = exc
        else:
            if match is not None:
                return _success(name, centre_id, Strategy.PLACE_SEARCH, match)

        prefix = f"place search: {place_error.message}; " if place_error else ""
        if address is None or is_placeholder_address(address):
            return ResolutionOutcome(
                centre_name=name,
                centre_id=centre_id,
                success=False,
                strategy_used=Strategy.PLACE_SEARCH if place_error else None,
                error_kind=place_error.kind if place_error else ErrorKind.NOT_FOUND,
                reason=f"{prefix}no usable address",
            )

        try:
            match = self._service.geocode(
                f"{address.strip()}, {country_name}",
                region_hint=country_hint,
            )
        except LookupServiceError as exc:
            return ResolutionOutcome(
                centre_name=name,
                centre_id=centre_id,
                success=False,
                strategy_used=Strategy.GEOCODING,
                error_kind=exc.kind,
                reason=f"{prefix}geocoding: {exc.message}",
            )
        if match is not None:
            return _success(name, centre_id, Strategy.GEOCODING, match)

        return ResolutionOutcome(
            centre_name=name,
            centre_id=centre_id,
            success=False,
            error_kind=ErrorKind.NOT_FOUND,
            reason=f"{prefix}geocoding: no match" if place_error else "no match found",
        )


def _success(
    name: str,
    centre_id: UUID | None,
    strategy: Strategy,
    match: LookupMatch,
) -> ResolutionOutcome:
    return ResolutionOutcome(
        centre_name=name,
        centre_id=centre_id,
        success=True,
        strategy_used=strategy,
        coordinates=match.coordinates,
        normalized_address=match.formatted_address,
        provider_name=match.name,
        place_id=match.place_id,
    )
