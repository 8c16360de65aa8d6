"""Throttled, retrying and caching HTTP client shared by provider adapters."""

from __future__ import annotations

import json
from contextlib import nullcontext
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import RetryTransport

from rehabfinder.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from rehabfinder.config.http_resilience import (
        CacheConfig,
        RateLimit,
        ResilienceConfig,
        ShouldCacheHook,
    )

log = getLogger(__name__)


class ResilientClient:
    """Wrap ``httpx.AsyncClient`` with an ``aiolimiter`` throttle, retries and a cache.

    ``transport`` replaces the network transport underneath the retry layer, which
    is how tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = _build_limiter(config.ratelimit)
        self._client = _build_http_client(config, transport)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(
        self, url: str, *, params: Mapping[str, str | int] | httpx.QueryParams | None = None
    ) -> httpx.Response:
        if self._limiter is not None and not self._limiter.has_capacity():
            log.debug("%s: throttling request to %s", self.config.name, url)
        async with self._limiter or nullcontext():
            response = await self._client.get(url, params=params)
        if response.extensions.get("hishel_from_cache"):
            log.debug("%s: served %s from cache", self.config.name, url)
        return response


class _PayloadCacheFilter(BaseFilter[HishelCacheResponse]):
    """Admit a response into the cache only when its JSON body passes ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if not body:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


def _build_http_client(
    config: ResilienceConfig, transport: httpx.AsyncBaseTransport | None
) -> httpx.AsyncClient:
    retry_transport = RetryTransport(transport=transport, retry=config.retry.build())
    headers = {"User-Agent": config.user_agent} if config.user_agent else None
    base_url = config.base_url or ""
    if config.cache is None:
        return httpx.AsyncClient(
            base_url=base_url,
            timeout=config.timeout_seconds,
            headers=headers,
            transport=retry_transport,
        )
    return AsyncCacheClient(
        base_url=base_url,
        timeout=config.timeout_seconds,
        headers=headers,
        transport=retry_transport,
        storage=_build_cache_storage(config.cache),
        policy=_build_cache_policy(config.cache),
    )


def _build_cache_storage(cache: CacheConfig) -> AsyncSqliteStorage:
    if cache.backend == "sqlite":
        database_path = cache.sqlite_path or str(get_http_cache_path())
    elif cache.backend == "memory":
        database_path = ":memory:"
    else:
        raise ValueError(f"Unsupported cache backend: {cache.backend}")
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=cache.ttl_seconds,
        refresh_ttl_on_access=False,
    )


def _build_cache_policy(cache: CacheConfig) -> FilterPolicy | None:
    if cache.should_cache is None:
        return None
    return FilterPolicy(response_filters=[_PayloadCacheFilter(cache.should_cache)])
