"""Mock-transport helpers for HTTP adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from rehabfinder.adapters.google_maps import GoogleMapsClient
from rehabfinder.adapters.http_resilience import ResilientClient
from rehabfinder.config.google_maps import GOOGLE_MAPS_BASE_URL, GoogleMapsConfig
from rehabfinder.config.http_resilience import ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable


class RecordingHandler:
    """Serve queued responses (the last one repeats) and remember every request."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def make_google_maps_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> GoogleMapsClient:
    resilience = ResilienceConfig(
        name="google_maps_test",
        base_url=GOOGLE_MAPS_BASE_URL,
        retry=RetryPolicy(total=1, backoff_factor=0.0, backoff_jitter=0.0),
    )

    def factory(config: ResilienceConfig) -> ResilientClient:
        return ResilientClient(config, transport=httpx.MockTransport(handler))

    return GoogleMapsClient(
        config=GoogleMapsConfig(api_key="test-key", resilience=resilience),
        client_factory=factory,
    )
