"""Locations of the directory database and the provider response cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "rehabfinder"
DATABASE_FILENAME: Final[str] = "rehabfinder.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"

DATA_DIR_ENV: Final[str] = "REHABFINDER_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
SQL_ECHO_ENV: Final[str] = "REHABFINDER_SQL_ECHO"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def _file(self, filename: str) -> Path:
        directory = self.data_dir.expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

    @property
    def database_path(self) -> Path:
        return self._file(DATABASE_FILENAME)

    @property
    def http_cache_path(self) -> Path:
        return self._file(HTTP_CACHE_FILENAME)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings; any SQLAlchemy URI, SQLite in the data dir by default."""

    uri: str
    echo: bool = False


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv(DATA_DIR_ENV)
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    echo = os.getenv(SQL_ECHO_ENV, "").strip().lower() in {"1", "true", "yes"}
    uri = os.getenv(DATABASE_URI_ENV)
    if not uri:
        database_path = (storage or get_storage_config()).database_path
        uri = f"sqlite+pysqlite:///{database_path}"
    return DatabaseConfig(uri=uri, echo=echo)


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path
