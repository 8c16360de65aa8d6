from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from rehabfinder.adapters.google_maps import GoogleMapsClient
from rehabfinder.adapters.http_resilience import ResilientClient
from rehabfinder.config.google_maps import GOOGLE_MAPS_BASE_URL, GoogleMapsConfig
from rehabfinder.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from rehabfinder.domain.model import Coordinates, ErrorKind
from rehabfinder.domain.ports import LookupServiceError, RoutingError
from tests.helpers.http import RecordingHandler

if TYPE_CHECKING:
    from collections.abc import Callable

    ClientFor = Callable[..., tuple[GoogleMapsClient, RecordingHandler]]


def _place(lat: float = 3.1458, lng: float = 101.7003) -> dict[str, object]:
    return {
        "place_id": "ChIJ-tungshin",
        "name": "Tung Shin Hospital",
        "formatted_address": "102, Jalan Pudu, 55100 Kuala Lumpur",
        "geometry": {"location": {"lat": lat, "lng": lng}},
        "types": ["hospital", "health", "establishment"],
    }


def _ok(results: list[dict[str, object]]) -> httpx.Response:
    return httpx.Response(200, json={"status": "OK", "results": results})


def _status(status: str, http_status: int = 200) -> httpx.Response:
    return httpx.Response(http_status, json={"status": status, "results": []})


def test_search_place_returns_best_match(client_for: ClientFor) -> None:
    client, handler = client_for(_ok([_place(), _place(1.0, 103.0)]))

    result = client.search_place(
        "Tung Shin Hospital Malaysia", category_hint="hospital", region_hint="MY"
    )

    assert result is not None
    assert result.coordinates == Coordinates(3.1458, 101.7003)
    assert result.formatted_address == "102, Jalan Pudu, 55100 Kuala Lumpur"
    assert result.place_id == "ChIJ-tungshin"
    request = handler.requests[0]
    assert request.url.path == "/maps/api/place/textsearch/json"
    assert request.url.params["query"] == "Tung Shin Hospital Malaysia"
    assert request.url.params["type"] == "hospital"
    assert request.url.params["region"] == "my"
    assert request.url.params["key"] == "test-key"


def _counting_client(
    handler: RecordingHandler, built: list[ResilientClient]
) -> GoogleMapsClient:
    resilience = ResilienceConfig(
        name="google_maps_test",
        base_url=GOOGLE_MAPS_BASE_URL,
        retry=RetryPolicy(total=0),
        ratelimit=RateLimit(max_calls=2, per_seconds=60.0),
    )

    def factory(config: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(config, transport=httpx.MockTransport(handler))
        built.append(client)
        return client

    return GoogleMapsClient(
        config=GoogleMapsConfig(api_key="test-key", resilience=resilience),
        client_factory=factory,
    )


def test_calls_share_one_rate_limited_client() -> None:
    handler = RecordingHandler(_ok([_place()]))
    built: list[ResilientClient] = []
    client = _counting_client(handler, built)

    try:
        client.search_place("Pusat Rehab")
        client.geocode("Jalan Pudu, Kuala Lumpur")

        assert len(handler.requests) == 2
        assert len(built) == 1
        # Both requests drew from the same two-per-minute bucket.
        assert not built[0]._limiter.has_capacity()  # noqa: SLF001
    finally:
        client.close()


def test_close_releases_the_shared_client() -> None:
    handler = RecordingHandler(_ok([_place()]))
    built: list[ResilientClient] = []
    client = _counting_client(handler, built)

    client.search_place("Pusat Rehab")
    client.close()
    client.search_place("Pusat Rehab")
    client.close()

    assert len(built) == 2
    assert all(item._client.is_closed for item in built)  # noqa: SLF001



def test_geocode_sends_address_and_region(client_for: ClientFor) -> None:
    client, handler = client_for(_ok([_place()]))

    result = client.geocode("102 Jalan Pudu, Malaysia", region_hint="MY")

    assert result is not None
    request = handler.requests[0]
    assert request.url.path == "/maps/api/geocode/json"
    assert request.url.params["address"] == "102 Jalan Pudu, Malaysia"
    assert request.url.params["region"] == "my"


@pytest.mark.parametrize("status", ["ZERO_RESULTS", "NOT_FOUND"])
def test_no_match_statuses_return_none(client_for: ClientFor, status: str) -> None:
    client, _ = client_for(_status(status))

    assert client.geocode("nowhere") is None


def test_out_of_range_coordinates_are_no_match(client_for: ClientFor) -> None:
    client, _ = client_for(_ok([_place(lat=123.0)]))

    assert client.geocode("somewhere") is None


@pytest.mark.parametrize(
    ("response", "kind"),
    [
        (_status("OVER_QUERY_LIMIT"), ErrorKind.RATE_LIMITED),
        (_status("OVER_DAILY_LIMIT"), ErrorKind.RATE_LIMITED),
        (_status("INVALID_REQUEST"), ErrorKind.INVALID_REQUEST),
        (_status("REQUEST_DENIED"), ErrorKind.INVALID_REQUEST),
        (_status("UNKNOWN_ERROR"), ErrorKind.TRANSPORT_ERROR),
        (httpx.Response(429), ErrorKind.RATE_LIMITED),
        (httpx.Response(403), ErrorKind.INVALID_REQUEST),
        (httpx.Response(200, content=b"<html>"), ErrorKind.TRANSPORT_ERROR),
    ],
)
def test_status_mapping(client_for: ClientFor, response: httpx.Response, kind: ErrorKind) -> None:
    client, _ = client_for(response)

    with pytest.raises(LookupServiceError) as excinfo:
        client.search_place("anything")

    assert excinfo.value.kind is kind


def test_http_429_is_not_retried(client_for: ClientFor) -> None:
    client, handler = client_for(httpx.Response(429))

    with pytest.raises(LookupServiceError):
        client.search_place("anything")

    assert len(handler.requests) == 1


def test_server_errors_are_retried_once(client_for: ClientFor) -> None:
    client, handler = client_for(httpx.Response(503), httpx.Response(503))

    with pytest.raises(LookupServiceError) as excinfo:
        client.search_place("anything")

    assert excinfo.value.kind is ErrorKind.TRANSPORT_ERROR
    assert len(handler.requests) == 2


def test_server_error_then_success(client_for: ClientFor) -> None:
    client, handler = client_for(httpx.Response(502), _ok([_place()]))

    assert client.search_place("anything") is not None
    assert len(handler.requests) == 2


def test_network_failure_is_transport_error(client_for: ClientFor) -> None:
    client, _ = client_for(httpx.ConnectError("connection refused"))

    with pytest.raises(LookupServiceError) as excinfo:
        client.geocode("anything")

    assert excinfo.value.kind is ErrorKind.TRANSPORT_ERROR


def test_place_details(client_for: ClientFor) -> None:
    client, handler = client_for(
        httpx.Response(
            200,
            json={
                "status": "OK",
                "result": {
                    "name": "Tung Shin Hospital",
                    "formatted_phone_number": "03-2037 2288",
                    "website": "https://www.tungshin.com.my/",
                    "types": ["hospital", "health"],
                },
            },
        )
    )

    details = client.place_details("ChIJ-tungshin")

    assert details is not None
    assert details.place_id == "ChIJ-tungshin"
    assert details.phone == "03-2037 2288"
    assert details.types == ("hospital", "health")
    params = handler.requests[0].url.params
    assert params["fields"] == (
        "name,formatted_address,formatted_phone_number,website,geometry,types"
    )


def test_route_returns_first_leg(client_for: ClientFor) -> None:
    client, handler = client_for(
        httpx.Response(
            200,
            json={
                "status": "OK",
                "routes": [
                    {
                        "legs": [
                            {
                                "distance": {"text": "5.2 km", "value": 5200},
                                "duration": {"text": "12 mins", "value": 720},
                                "start_address": "KLCC",
                                "end_address": "Jalan Pudu",
                            }
                        ]
                    }
                ],
            },
        )
    )

    route = client.route(Coordinates(3.1579, 101.7116), Coordinates(3.1458, 101.7003))

    assert route.distance_text == "5.2 km"
    assert route.duration_seconds == 720
    assert route.end_address == "Jalan Pudu"
    params = handler.requests[0].url.params
    assert params["mode"] == "driving"
    assert params["origin"] == "3.1579,101.7116"


def test_route_without_result_raises(client_for: ClientFor) -> None:
    client, _ = client_for(httpx.Response(200, json={"status": "ZERO_RESULTS", "routes": []}))

    with pytest.raises(RoutingError, match="No route found"):
        client.route(Coordinates(3.1, 101.6), Coordinates(1.3, 103.8))


def test_route_provider_error_raises_routing_error(client_for: ClientFor) -> None:
    client, _ = client_for(httpx.Response(200, json={"status": "REQUEST_DENIED", "routes": []}))

    with pytest.raises(RoutingError, match="REQUEST_DENIED"):
        client.route(Coordinates(3.1, 101.6), Coordinates(1.3, 103.8))
