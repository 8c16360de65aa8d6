from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers.http import RecordingHandler, make_google_maps_client

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    import httpx

    from rehabfinder.adapters.google_maps import GoogleMapsClient


@pytest.fixture
def client_for() -> Iterator[Callable[..., tuple[GoogleMapsClient, RecordingHandler]]]:
    clients: list[GoogleMapsClient] = []

    def build(
        *responses: httpx.Response | Exception,
    ) -> tuple[GoogleMapsClient, RecordingHandler]:
        handler = RecordingHandler(*responses)
        client = make_google_maps_client(handler)
        clients.append(client)
        return client, handler

    yield build
    for client in clients:
        client.close()
