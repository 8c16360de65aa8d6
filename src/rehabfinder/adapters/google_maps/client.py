"""HTTP client for the Google Maps Platform web services."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from rehabfinder.adapters.http_resilience import ResilientClient
from rehabfinder.config.google_maps import GoogleMapsConfig, get_google_maps_config
from rehabfinder.domain.model import ErrorKind
from rehabfinder.domain.ports import (
    LookupService,
    LookupServiceError,
    PlaceDetailsService,
    RoutingError,
    RoutingService,
)

from .schema import DirectionsResponse, PlaceDetailsResponse, SearchResponse
from .translator import best_match, kind_for_http_status, to_place_details, to_route

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from typing import Any

    from rehabfinder.config.http_resilience import ResilienceConfig
    from rehabfinder.domain.model import Coordinates
    from rehabfinder.domain.ports import LookupMatch, PlaceDetails, Route

log = getLogger(__name__)

TEXT_SEARCH_PATH = "place/textsearch/json"
PLACE_DETAILS_PATH = "place/details/json"
GEOCODE_PATH = "geocode/json"
DIRECTIONS_PATH = "directions/json"
PLACE_DETAILS_FIELDS = "name,formatted_address,formatted_phone_number,website,geometry,types"

_CACHEABLE_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


def _should_cache_payload(payload: object) -> bool:
    return isinstance(payload, dict) and payload.get("status") in _CACHEABLE_STATUSES


def _default_config() -> GoogleMapsConfig:
    return get_google_maps_config(cache_predicate=_should_cache_payload)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class GoogleMapsClient:
    """Place search, geocoding, place details and directions over one API key.

    Public calls are synchronous. They run on one event loop owned by the client and
    share one ``ResilientClient``, so its rate limiter and cache span every call until
    ``close()``. Calls are serialised; the engine sends one request at a time anyway.
    """

    config: GoogleMapsConfig = field(default_factory=_default_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _runner: asyncio.Runner | None = field(default=None, init=False, repr=False)
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    def search_place(
        self,
        query: str,
        *,
        category_hint: str | None = None,
        region_hint: str | None = None,
    ) -> LookupMatch | None:
        params: dict[str, str | int] = {"query": query}
        if category_hint:
            params["type"] = category_hint
        if region_hint:
            params["region"] = region_hint.lower()
        response = self._run(self._get_async(TEXT_SEARCH_PATH, params, SearchResponse))
        return best_match(response)

    def geocode(self, address: str, *, region_hint: str | None = None) -> LookupMatch | None:
        params: dict[str, str | int] = {"address": address}
        if region_hint:
            params["region"] = region_hint.lower()
        response = self._run(self._get_async(GEOCODE_PATH, params, SearchResponse))
        return best_match(response)

    def place_details(self, place_id: str) -> PlaceDetails | None:
        params: dict[str, str | int] = {"place_id": place_id, "fields": PLACE_DETAILS_FIELDS}
        response = self._run(self._get_async(PLACE_DETAILS_PATH, params, PlaceDetailsResponse))
        return to_place_details(place_id, response)

    def route(self, origin: Coordinates, destination: Coordinates) -> Route:
        params: dict[str, str | int] = {
            "origin": f"{origin.latitude},{origin.longitude}",
            "destination": f"{destination.latitude},{destination.longitude}",
            "mode": "driving",
        }
        try:
            response = self._run(self._get_async(DIRECTIONS_PATH, params, DirectionsResponse))
            route = to_route(response)
        except LookupServiceError as exc:
            raise RoutingError(f"Directions request failed: {exc.message}") from exc
        if route is None:
            raise RoutingError("No route found")
        return route

    def close(self) -> None:
        """Close the shared HTTP client and the event loop; the next call opens new ones."""

        with self._lock:
            runner, http = self._runner, self._http
            self._runner = None
            self._http = None
            if runner is None:
                return
            try:
                if http is not None:
                    runner.run(http.aclose())
            finally:
                runner.close()

    def _run[TResult](self, coro: Coroutine[Any, Any, TResult]) -> TResult:
        with self._lock:
            if self._runner is None:
                self._runner = asyncio.Runner()
            return self._runner.run(coro)

    def _resilient_client(self) -> ResilientClient:
        if self._http is None:
            self._http = self.client_factory(self.config.resilience)
        return self._http

    async def _get_async[TResponse: BaseModel](
        self,
        path: str,
        params: dict[str, str | int],
        response_model: type[TResponse],
    ) -> TResponse:
        query = httpx.QueryParams({**params, "key": self.config.api_key})
        try:
            response = await self._resilient_client().get(path, params=query)
        except httpx.TransportError as exc:
            log.warning("Google Maps %s transport failure: %s", path, exc)
            raise LookupServiceError(ErrorKind.TRANSPORT_ERROR, str(exc)) from exc

        if response.is_error:
            kind = kind_for_http_status(response.status_code)
            log.warning("Google Maps %s returned HTTP %d", path, response.status_code)
            raise LookupServiceError(kind, f"HTTP {response.status_code}")

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise LookupServiceError(
                ErrorKind.TRANSPORT_ERROR, f"Malformed response from {path}"
            ) from exc


if TYPE_CHECKING:
    _lookup_check: LookupService = GoogleMapsClient()
    _details_check: PlaceDetailsService = GoogleMapsClient()
    _routing_check: RoutingService = GoogleMapsClient()
