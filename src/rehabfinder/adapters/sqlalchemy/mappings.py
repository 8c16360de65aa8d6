"""SQLAlchemy mapping metadata for the directory model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)

from rehabfinder.domain.model import Centre, CentreType, Country

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

country_table = Table(
    "country",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("code", String(2), nullable=False, unique=True),
)

centre_type_table = Table(
    "centre_type",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
    Column("description", Text, nullable=False, default=""),
)

centre_table = Table(
    "centre",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("address", Text, nullable=False),
    Column("latitude", Float, nullable=True),
    Column("longitude", Float, nullable=True),
    Column("phone", String, nullable=True),
    Column("email", String, nullable=True),
    Column("website", String, nullable=True),
    Column("services", Text, nullable=True),
    Column("country_id", UUIDColumnType, ForeignKey("country.id"), nullable=True),
    Column("centre_type_id", UUIDColumnType, ForeignKey("centre_type.id"), nullable=True),
    Column("active", Boolean, nullable=False, default=True),
    Column("verified", Boolean, nullable=False, default=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_centre_active_name", "active", "name"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the directory model."""

    mapper_registry.map_imperatively(Country, country_table)
    mapper_registry.map_imperatively(CentreType, centre_type_table)
    mapper_registry.map_imperatively(Centre, centre_table)
    log.debug("Directory mappers configured")
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    mapper_registry.metadata.create_all(engine)
