"""Per-record outcomes and run-level aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rehabfinder.domain.model import ErrorKind

if TYPE_CHECKING:
    from uuid import UUID

    from rehabfinder.domain.model import Coordinates, Strategy


@dataclass(slots=True)
class ResolutionOutcome:
    """Result of resolving one centre; never persisted."""

    centre_name: str
    success: bool
    centre_id: UUID | None = None
    strategy_used: Strategy | None = None
    coordinates: Coordinates | None = None
    normalized_address: str | None = None
    error_kind: ErrorKind | None = None
    reason: str | None = None
    provider_name: str | None = None
    place_id: str | None = None

    @property
    def rate_limited(self) -> bool:
        return self.error_kind is ErrorKind.RATE_LIMITED

    def as_failure(self, kind: ErrorKind, reason: str) -> None:
        self.success = False
        self.error_kind = kind
        self.reason = reason


@dataclass(slots=True)
class ReconciliationRun:
    """Outcomes of one engine invocation, in candidate order."""

    candidates: int = 0
    outcomes: list[ResolutionOutcome] = field(default_factory=list["ResolutionOutcome"])
    skipped: int = 0
    incomplete: bool = False
    cancelled: bool = False
    stop_reason: str | None = None

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def successful(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return self.processed - self.successful

    def failures(self) -> list[tuple[UUID | None, str]]:
        return [
            (outcome.centre_id, outcome.reason or str(outcome.error_kind))
            for outcome in self.outcomes
            if not outcome.success
        ]
