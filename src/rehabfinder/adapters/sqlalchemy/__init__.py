"""SQLAlchemy adapter package for the centre directory."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCentreRepository,
    SqlAlchemyCentreTypeRepository,
    SqlAlchemyCountryRepository,
)
from .unit_of_work import (
    SqlAlchemyDirectoryUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCentreRepository",
    "SqlAlchemyCentreTypeRepository",
    "SqlAlchemyCountryRepository",
    "SqlAlchemyDirectoryUnitOfWork",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "startup",
    "start_mappers",
]
