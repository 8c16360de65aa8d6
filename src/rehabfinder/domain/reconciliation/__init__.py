"""Resolution of centre addresses into coordinates."""

from __future__ import annotations

from .engine import ReconciliationEngine, set_centre_coordinates
from .export import export_outcomes_csv
from .lookup import ProviderProfile, TieredLookup, describe_place_types
from .outcomes import ReconciliationRun, ResolutionOutcome
from .pacing import Pacer
from .selection import is_placeholder_address, select_candidates

__all__ = [
    "Pacer",
    "ProviderProfile",
    "ReconciliationEngine",
    "ReconciliationRun",
    "ResolutionOutcome",
    "TieredLookup",
    "describe_place_types",
    "export_outcomes_csv",
    "is_placeholder_address",
    "select_candidates",
    "set_centre_coordinates",
]
