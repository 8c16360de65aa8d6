from __future__ import annotations

import pytest

from rehabfinder.adapters.google_maps import (
    PlaceDetailsResponse,
    SearchResponse,
    best_match,
    check_status,
    kind_for_http_status,
)
from rehabfinder.adapters.google_maps.client import _should_cache_payload  # noqa: PLC2701
from rehabfinder.adapters.google_maps.translator import to_place_details
from rehabfinder.domain.model import ErrorKind
from rehabfinder.domain.ports import LookupServiceError


@pytest.mark.parametrize(
    ("status_code", "kind"),
    [
        (429, ErrorKind.RATE_LIMITED),
        (400, ErrorKind.INVALID_REQUEST),
        (404, ErrorKind.INVALID_REQUEST),
        (500, ErrorKind.TRANSPORT_ERROR),
        (503, ErrorKind.TRANSPORT_ERROR),
    ],
)
def test_kind_for_http_status(status_code: int, kind: ErrorKind) -> None:
    assert kind_for_http_status(status_code) is kind


def test_check_status_includes_provider_message() -> None:
    response = SearchResponse.model_validate(
        {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}
    )

    with pytest.raises(LookupServiceError) as excinfo:
        check_status(response)

    assert excinfo.value.kind is ErrorKind.INVALID_REQUEST
    assert excinfo.value.message == "REQUEST_DENIED: The provided API key is invalid."


def test_unknown_status_is_transport_error() -> None:
    response = SearchResponse.model_validate({"status": "SOMETHING_NEW"})

    with pytest.raises(LookupServiceError) as excinfo:
        check_status(response)

    assert excinfo.value.kind is ErrorKind.TRANSPORT_ERROR


def test_best_match_ignores_results_without_geometry() -> None:
    response = SearchResponse.model_validate(
        {"status": "OK", "results": [{"name": "Somewhere", "formatted_address": " "}]}
    )

    assert best_match(response) is None


def test_blank_text_fields_become_none() -> None:
    response = SearchResponse.model_validate(
        {
            "status": "OK",
            "results": [
                {
                    "name": "  ",
                    "formatted_address": "Jalan 1",
                    "geometry": {"location": {"lat": 3.1, "lng": 101.6}},
                }
            ],
        }
    )

    result = best_match(response)

    assert result is not None
    assert result.name is None
    assert result.formatted_address == "Jalan 1"


def test_place_details_falls_back_to_requested_id() -> None:
    response = PlaceDetailsResponse.model_validate(
        {"status": "OK", "result": {"name": "Clinic", "website": ""}}
    )

    details = to_place_details("abc", response)

    assert details is not None
    assert details.place_id == "abc"
    assert details.website is None


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"status": "OK", "results": []}, True),
        ({"status": "ZERO_RESULTS", "results": []}, True),
        ({"status": "OVER_QUERY_LIMIT"}, False),
        ({"status": "UNKNOWN_ERROR"}, False),
        (["not", "a", "dict"], False),
    ],
)
def test_only_definitive_answers_are_cached(payload: object, expected: bool) -> None:
    assert _should_cache_payload(payload) is expected
