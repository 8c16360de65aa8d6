"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    INVALID_REQUEST = "invalid_request"
    TRANSPORT_ERROR = "transport_error"
    STORE_WRITE_FAILURE = "store_write_failure"
    PRECONDITION_FAILED = "precondition_failed"


class Strategy(StrEnum):
    """Lookup tier that produced (or last attempted) a resolution."""

    PLACE_SEARCH = "place_search"
    GEOCODING = "geocoding"


class CentreCategory(StrEnum):
    INPATIENT = "Inpatient"
    OUTPATIENT = "Outpatient"
    COMMUNITY = "Community"
    TRADITIONAL = "Traditional"
    SPECIALIST = "Specialist"
    UNKNOWN = "Unknown"

    @classmethod
    def from_type_name(cls, name: str | None) -> CentreCategory:
        if not name:
            return cls.UNKNOWN
        cleaned = name.strip().casefold()
        for member in cls:
            if member.value.casefold() == cleaned:
                return member
        return cls.UNKNOWN
