"""Process-wide, lazily initialised Google Maps client handle."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .client import GoogleMapsClient

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


class ClientNotInitialisedError(RuntimeError):
    """Raised when the client handle is used before ``init()``."""


@dataclass(slots=True)
class _HandleState:
    lock: threading.Lock = field(default_factory=threading.Lock)
    client: GoogleMapsClient | None = None
    factory: Callable[[], GoogleMapsClient] = GoogleMapsClient


_STATE = _HandleState()


def init(factory: Callable[[], GoogleMapsClient] | None = None) -> GoogleMapsClient:
    """Create the shared client once; later and concurrent calls get the same instance."""

    with _STATE.lock:
        if _STATE.client is None:
            if factory is not None:
                _STATE.factory = factory
            _STATE.client = _STATE.factory()
            log.debug("Google Maps client initialised")
        return _STATE.client


def is_ready() -> bool:
    return _STATE.client is not None


def get_client() -> GoogleMapsClient:
    client = _STATE.client
    if client is None:
        raise ClientNotInitialisedError(
            "Google Maps client not initialised. Call "
            "rehabfinder.adapters.google_maps.loader.init() first."
        )
    return client


def reset() -> None:
    """Close and drop the shared client; the next ``init()`` builds a new one."""

    with _STATE.lock:
        client = _STATE.client
        _STATE.client = None
        _STATE.factory = GoogleMapsClient
    if client is not None:
        client.close()
        log.debug("Google Maps client closed")
