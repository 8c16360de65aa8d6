"""Public domain model surface."""

from __future__ import annotations

from rehabfinder.domain.model.directory import Centre, CentreType, Country
from rehabfinder.domain.model.enums import CentreCategory, ErrorKind, Strategy
from rehabfinder.domain.model.primitives import Coordinates, is_valid_pair

__all__ = [
    "Centre",
    "CentreCategory",
    "CentreType",
    "Coordinates",
    "Country",
    "ErrorKind",
    "Strategy",
    "is_valid_pair",
]
