"""Root logger setup for command-line runs."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_LEVEL_ENV = "REHABFINDER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Per-request chatter from the HTTP and SQL stacks.
QUIET_LOGGERS = ("httpx", "httpcore", "hishel", "sqlalchemy.engine")


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper()
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        raise ConfigurationError(f"{LOG_LEVEL_ENV} is not a log level: {name!r}")
    return numeric


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Configure the root logger once.

    ``level`` defaults to ``REHABFINDER_LOG_LEVEL`` and then INFO. Library loggers in
    ``QUIET_LOGGERS`` are held at WARNING unless the chosen level is DEBUG.
    """

    numeric = _resolve_level(level)
    logging.basicConfig(level=numeric, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    if numeric > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
