"""Domain port definitions for adapters."""

from __future__ import annotations

from .lookup import (
    LookupMatch,
    LookupService,
    LookupServiceError,
    PlaceDetails,
    PlaceDetailsService,
)
from .persistence import (
    WRITABLE_CENTRE_FIELDS,
    CentreFilter,
    CentreRepository,
    CentreTypeRepository,
    CountryRepository,
    Repository,
    StoreWriteError,
)
from .routing import Route, RoutingError, RoutingService
from .unit_of_work import (
    DirectoryRepositories,
    DirectoryUnitOfWork,
)

__all__ = [
    "WRITABLE_CENTRE_FIELDS",
    "CentreFilter",
    "CentreRepository",
    "CentreTypeRepository",
    "CountryRepository",
    "DirectoryRepositories",
    "DirectoryUnitOfWork",
    "LookupMatch",
    "LookupService",
    "LookupServiceError",
    "PlaceDetails",
    "PlaceDetailsService",
    "Repository",
    "Route",
    "RoutingError",
    "RoutingService",
    "StoreWriteError",
]
