"""Pacing and batching defaults for reconciliation runs."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_float, optional_int
from .errors import ConfigurationError

DEFAULT_RUN_BATCH_SIZE = 5
DEFAULT_SUB_BATCH_SIZE = 10
DEFAULT_CALL_DELAY_SECONDS = 0.2
DEFAULT_BATCH_DELAY_SECONDS = 0.4
DEFAULT_RATE_LIMIT_PAUSE_SECONDS = 2.0
DEFAULT_RATE_LIMIT_RETRIES = 1
DEFAULT_CATEGORY_HINT = "hospital"
DEFAULT_ON_DEMAND_CAP = 20


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    sub_batch_size: int = DEFAULT_SUB_BATCH_SIZE
    call_delay_seconds: float = DEFAULT_CALL_DELAY_SECONDS
    batch_delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS
    rate_limit_pause_seconds: float = DEFAULT_RATE_LIMIT_PAUSE_SECONDS
    rate_limit_retries: int = DEFAULT_RATE_LIMIT_RETRIES
    category_hint: str | None = DEFAULT_CATEGORY_HINT
    on_demand_cap: int = DEFAULT_ON_DEMAND_CAP

    def __post_init__(self) -> None:
        if self.sub_batch_size < 1:
            raise ConfigurationError("sub_batch_size must be at least 1")
        if self.call_delay_seconds < 0 or self.batch_delay_seconds < 0:
            raise ConfigurationError("Pacing delays must be non-negative")
        if self.rate_limit_retries < 0:
            raise ConfigurationError("rate_limit_retries must be non-negative")


def get_reconciliation_config() -> ReconciliationConfig:
    category_hint = os.getenv("REHABFINDER_CATEGORY_HINT", DEFAULT_CATEGORY_HINT).strip()
    return ReconciliationConfig(
        sub_batch_size=optional_int("REHABFINDER_SUB_BATCH_SIZE", DEFAULT_SUB_BATCH_SIZE),
        call_delay_seconds=optional_float(
            "REHABFINDER_CALL_DELAY_SECONDS", DEFAULT_CALL_DELAY_SECONDS
        ),
        batch_delay_seconds=optional_float(
            "REHABFINDER_BATCH_DELAY_SECONDS", DEFAULT_BATCH_DELAY_SECONDS
        ),
        category_hint=category_hint or None,
    )
