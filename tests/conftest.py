from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from rehabfinder.adapters.google_maps import loader
from rehabfinder.adapters.sqlalchemy import create_all_tables, start_mappers
from rehabfinder.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyDirectoryUnitOfWork,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _isolated_environment(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    monkeypatch.setenv("REHABFINDER_DATA_DIR", str(tmp_path_factory.mktemp("data")))
    for name in (
        "GOOGLE_MAPS_API_KEY",
        "REHABFINDER_SUB_BATCH_SIZE",
        "REHABFINDER_CALL_DELAY_SECONDS",
        "REHABFINDER_BATCH_DELAY_SECONDS",
        "REHABFINDER_CATEGORY_HINT",
        "REHABFINDER_LOG_LEVEL",
        "REHABFINDER_SQL_ECHO",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    loader.reset()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyDirectoryUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyDirectoryUnitOfWork:
        return SqlAlchemyDirectoryUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
