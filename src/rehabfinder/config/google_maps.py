"""Google Maps Platform configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from rehabfinder import __version__

from .env import require_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy, ShouldCacheHook

GOOGLE_MAPS_BASE_URL = "https://maps.googleapis.com/maps/api/"
GOOGLE_MAPS_TIMEOUT_SECONDS = 10.0
GOOGLE_MAPS_CACHE_TTL_SECONDS = 24 * 60 * 60.0


@dataclass(frozen=True)
class GoogleMapsConfig:
    """Holds Google Maps Platform API configuration values."""

    api_key: str
    resilience: ResilienceConfig


def default_google_maps_resilience(
    *, cache_predicate: ShouldCacheHook | None = None
) -> ResilienceConfig:
    return ResilienceConfig(
        name="google_maps",
        base_url=GOOGLE_MAPS_BASE_URL,
        timeout_seconds=GOOGLE_MAPS_TIMEOUT_SECONDS,
        user_agent=f"rehabfinder/{__version__}",
        retry=RetryPolicy(total=1),
        ratelimit=RateLimit(max_calls=10),
        cache=CacheConfig(
            backend="sqlite",
            ttl_seconds=GOOGLE_MAPS_CACHE_TTL_SECONDS,
            should_cache=cache_predicate,
        ),
    )


def get_google_maps_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> GoogleMapsConfig:
    return GoogleMapsConfig(
        api_key=require_env_var("GOOGLE_MAPS_API_KEY"),
        resilience=resilience or default_google_maps_resilience(cache_predicate=cache_predicate),
    )
