from __future__ import annotations

import asyncio
from typing import Any, cast

import httpx
import pytest

from rehabfinder.adapters.http_resilience import (  # noqa: PLC2701
    ResilientClient,
    _PayloadCacheFilter,
)
from rehabfinder.config.http_resilience import ResilienceConfig, RetryPolicy
from tests.helpers.http import RecordingHandler


def _is_ok(payload: object) -> bool:
    return isinstance(payload, dict) and payload.get("status") == "OK"


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (b'{"status": "OK"}', True),
        (b'{"status": "OVER_QUERY_LIMIT"}', False),
        (b"<html>busy</html>", False),
        (b"\xff\xfe", False),
        (b"", False),
        (None, False),
    ],
)
def test_cache_filter_admits_only_matching_payloads(body: bytes | None, expected: bool) -> None:
    cache_filter = _PayloadCacheFilter(_is_ok)

    assert cache_filter.needs_body()
    assert cache_filter.apply(cast("Any", None), body) is expected


def test_retry_policy_refuses_to_retry_rate_limits() -> None:
    with pytest.raises(ValueError, match="429"):
        RetryPolicy(status_forcelist=frozenset({429, 503}))


def test_client_sends_user_agent_and_params() -> None:
    handler = RecordingHandler(httpx.Response(200, json={"status": "OK"}))
    config = ResilienceConfig(
        name="test",
        base_url="https://example.test/api/",
        retry=RetryPolicy(total=0),
        user_agent="rehabfinder/test",
    )

    async def fetch() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.get("lookup/json", params={"q": "Kuala Lumpur"})

    response = asyncio.run(fetch())

    assert response.status_code == 200
    (request,) = handler.requests
    assert request.url.path == "/api/lookup/json"
    assert request.url.params["q"] == "Kuala Lumpur"
    assert request.headers["User-Agent"] == "rehabfinder/test"
