"""Engine lifecycle and the SQLAlchemy unit of work for the centre directory."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from rehabfinder.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from rehabfinder.adapters.sqlalchemy.repositories import (
    SqlAlchemyCentreRepository,
    SqlAlchemyCentreTypeRepository,
    SqlAlchemyCountryRepository,
)
from rehabfinder.config.storage import get_database_config
from rehabfinder.domain.ports import DirectoryRepositories, StoreWriteError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or a session is misused."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def clear(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call rehabfinder.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        return self.session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to a database, creating the directory tables when missing."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if engine is None:
        database = get_database_config()
        engine = create_engine(database_uri or database.uri, echo=database.echo)
    start_mappers()
    create_all_tables(engine)
    _STATE.bind(engine)
    log.debug("SQLAlchemy adapter started on %s", engine.url)


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it (primarily for tests)."""

    _STATE.clear()


class SqlAlchemyDirectoryUnitOfWork:
    """One session per ``with`` block over the directory repositories."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or _STATE.require_session_factory()
        self._session: Session | None = None
        self._repositories: DirectoryRepositories | None = None

    def __enter__(self) -> SqlAlchemyDirectoryUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already open")
        session = self._session_factory()
        self._session = session
        self._repositories = DirectoryRepositories(
            centres=SqlAlchemyCentreRepository(session),
            countries=SqlAlchemyCountryRepository(session),
            centre_types=SqlAlchemyCentreTypeRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not open")
        return self._session

    @property
    def repositories(self) -> DirectoryRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not open")
        return self._repositories

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreWriteError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from rehabfinder.domain.ports import DirectoryUnitOfWork

    _uow_check: DirectoryUnitOfWork = SqlAlchemyDirectoryUnitOfWork()
