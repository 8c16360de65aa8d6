"""Ports for persisting directory records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rehabfinder.domain.model import Centre, CentreType, Country

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping
    from uuid import UUID


class StoreWriteError(RuntimeError):
    """Raised when the store rejects a write."""


# Columns the reconciliation pipeline is allowed to touch.
WRITABLE_CENTRE_FIELDS = frozenset(
    {"latitude", "longitude", "address", "name", "phone", "website", "services"}
)


@dataclass(frozen=True, slots=True)
class CentreFilter:
    active: bool | None = True
    unresolved_only: bool = False
    country_id: UUID | None = None
    limit: int | None = None


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class CentreRepository(Repository[Centre], Protocol):
    """Persistence contract for centres."""

    def query(self, criteria: CentreFilter) -> list[Centre]: ...

    def list_all(self) -> list[Centre]: ...

    def update(self, centre_id: UUID, fields: Mapping[str, object]) -> bool: ...

    def delete_many(self, centre_ids: Collection[UUID]) -> int: ...


@runtime_checkable
class CountryRepository(Repository[Country], Protocol):
    def list_all(self) -> list[Country]: ...


@runtime_checkable
class CentreTypeRepository(Repository[CentreType], Protocol):
    def list_all(self) -> list[CentreType]: ...


__all__ = [
    "WRITABLE_CENTRE_FIELDS",
    "CentreFilter",
    "CentreRepository",
    "CentreTypeRepository",
    "CountryRepository",
    "Repository",
    "StoreWriteError",
]
