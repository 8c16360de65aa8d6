"""Translate Google Maps payloads into lookup and routing results."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.domain.model import Coordinates, ErrorKind
from rehabfinder.domain.ports import LookupMatch, LookupServiceError, PlaceDetails, Route

if TYPE_CHECKING:
    from .schema import (
        DirectionsResponse,
        PlaceDetailsResponse,
        PlaceResult,
        SearchResponse,
        StatusResponse,
    )

log = getLogger(__name__)

NO_MATCH_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})
_STATUS_KINDS: dict[str, ErrorKind] = {
    "OVER_QUERY_LIMIT": ErrorKind.RATE_LIMITED,
    "OVER_DAILY_LIMIT": ErrorKind.RATE_LIMITED,
    "INVALID_REQUEST": ErrorKind.INVALID_REQUEST,
    "REQUEST_DENIED": ErrorKind.INVALID_REQUEST,
    "MAX_WAYPOINTS_EXCEEDED": ErrorKind.INVALID_REQUEST,
    "MAX_ROUTE_LENGTH_EXCEEDED": ErrorKind.INVALID_REQUEST,
    "UNKNOWN_ERROR": ErrorKind.TRANSPORT_ERROR,
}


def kind_for_http_status(status_code: int) -> ErrorKind:
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if 400 <= status_code < 500:
        return ErrorKind.INVALID_REQUEST
    return ErrorKind.TRANSPORT_ERROR


def check_status(response: StatusResponse) -> bool:
    """Return ``True`` for a match, ``False`` for no match, raise on provider errors."""

    if response.status == "OK":
        return True
    if response.status in NO_MATCH_STATUSES:
        return False
    kind = _STATUS_KINDS.get(response.status, ErrorKind.TRANSPORT_ERROR)
    message = response.status
    if response.error_message:
        message = f"{response.status}: {response.error_message}"
    raise LookupServiceError(kind, message)


def to_lookup_match(result: PlaceResult) -> LookupMatch | None:
    if result.geometry is None:
        return None
    location = result.geometry.location
    coordinates = Coordinates.from_optional(location.lat, location.lng)
    if coordinates is None:
        log.warning("Discarding result with unusable coordinates: %s", location)
        return None
    return LookupMatch(
        coordinates=coordinates,
        formatted_address=result.formatted_address,
        name=result.name,
        place_id=result.place_id,
        types=tuple(result.types),
    )


def best_match(response: SearchResponse) -> LookupMatch | None:
    if not check_status(response) or not response.results:
        return None
    return to_lookup_match(response.results[0])


def to_place_details(place_id: str, response: PlaceDetailsResponse) -> PlaceDetails | None:
    if not check_status(response) or response.result is None:
        return None
    result = response.result
    return PlaceDetails(
        place_id=result.place_id or place_id,
        name=result.name,
        formatted_address=result.formatted_address,
        phone=result.formatted_phone_number,
        website=result.website,
        types=tuple(result.types),
    )


def to_route(response: DirectionsResponse) -> Route | None:
    if not check_status(response) or not response.routes or not response.routes[0].legs:
        return None
    leg = response.routes[0].legs[0]
    return Route(
        distance_text=leg.distance.text,
        duration_text=leg.duration.text,
        distance_metres=leg.distance.value,
        duration_seconds=leg.duration.value,
        start_address=leg.start_address,
        end_address=leg.end_address,
    )
