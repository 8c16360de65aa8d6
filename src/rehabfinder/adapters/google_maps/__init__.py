"""Public interface for the Google Maps Platform adapter."""

from __future__ import annotations

from .client import GoogleMapsClient
from .loader import ClientNotInitialisedError, get_client, init, is_ready, reset
from .schema import DirectionsResponse, PlaceDetailsResponse, SearchResponse
from .translator import best_match, check_status, kind_for_http_status

__all__ = [
    "ClientNotInitialisedError",
    "DirectionsResponse",
    "GoogleMapsClient",
    "PlaceDetailsResponse",
    "SearchResponse",
    "best_match",
    "check_status",
    "get_client",
    "init",
    "is_ready",
    "kind_for_http_status",
    "reset",
]
