"""Settings for the shared provider HTTP client.

Provider adapters describe how their upstream should be treated (base URL,
throttle, retry and cache admission) with these value objects; the adapter layer
turns them into an ``httpx`` client stack.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

import httpx
from httpx_retries import Retry

ShouldCacheHook = Callable[[object], bool]

RETRYABLE_EXCEPTIONS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retries for idempotent lookups.

    Only GET and HEAD are retried. A 429 is never in the forcelist: the caller
    owns rate-limit handling and needs to see it immediately.
    """

    total: int = 1
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 1.0
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({500, 502, 503, 504})
    )

    def __post_init__(self) -> None:
        if 429 in self.status_forcelist:
            raise ValueError("429 must reach the caller and cannot be retried")

    def build(self) -> Retry:
        return Retry(
            total=self.total,
            backoff_factor=self.backoff_factor,
            max_backoff_wait=self.max_backoff_wait,
            respect_retry_after_header=True,
            allowed_methods=("GET", "HEAD"),
            status_forcelist=tuple(sorted(self.status_forcelist)),
            retry_on_exceptions=RETRYABLE_EXCEPTIONS,
            backoff_jitter=self.backoff_jitter,
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float = 1.0


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache settings; ``should_cache`` decides admission from the JSON body."""

    backend: Literal["sqlite", "memory"] = "sqlite"
    sqlite_path: str | None = None
    ttl_seconds: float | None = None
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    user_agent: str | None = None
