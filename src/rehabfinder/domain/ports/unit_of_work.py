"""Transaction boundary around the directory repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self

if TYPE_CHECKING:
    from types import TracebackType

    from rehabfinder.domain.ports.persistence import (
        CentreRepository,
        CentreTypeRepository,
        CountryRepository,
    )


@dataclass(slots=True)
class DirectoryRepositories:
    """Repositories sharing one session inside a unit of work."""

    centres: CentreRepository
    countries: CountryRepository
    centre_types: CentreTypeRepository


class DirectoryUnitOfWork(Protocol):
    """One transaction per ``with`` block.

    Work that is not committed before the block exits is discarded. ``commit``
    raises ``StoreWriteError`` when the store rejects the transaction.
    """

    @property
    def repositories(self) -> DirectoryRepositories: ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
