"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from rehabfinder.adapters.sqlalchemy.mappings import (
    centre_table,
    centre_type_table,
    country_table,
)
from rehabfinder.domain.model import Centre, CentreType, Country
from rehabfinder.domain.model.primitives import LATITUDE_RANGE, LONGITUDE_RANGE
from rehabfinder.domain.ports import WRITABLE_CENTRE_FIELDS, StoreWriteError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Collection, Mapping

    from sqlalchemy import ColumnElement, CursorResult
    from sqlalchemy.orm import Session

    from rehabfinder.domain.ports import CentreFilter


def _unresolved_clause() -> ColumnElement[bool]:
    latitude = centre_table.c.latitude
    longitude = centre_table.c.longitude
    return or_(
        latitude.is_(None),
        longitude.is_(None),
        latitude == 0,
        longitude == 0,
        latitude < LATITUDE_RANGE[0],
        latitude > LATITUDE_RANGE[1],
        longitude < LONGITUDE_RANGE[0],
        longitude > LONGITUDE_RANGE[1],
    )


class SqlAlchemyCentreRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Centre) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> Centre | None:
        return self.session.get(Centre, entity_id)

    def list_all(self) -> list[Centre]:
        stmt = select(Centre).order_by(centre_table.c.created_at, centre_table.c.id)
        return list(self.session.execute(stmt).scalars())

    def query(self, criteria: CentreFilter) -> list[Centre]:
        stmt = select(Centre)
        if criteria.active is not None:
            stmt = stmt.where(centre_table.c.active.is_(criteria.active))
        if criteria.unresolved_only:
            stmt = stmt.where(_unresolved_clause())
        if criteria.country_id is not None:
            stmt = stmt.where(centre_table.c.country_id == criteria.country_id)
        stmt = stmt.order_by(centre_table.c.name, centre_table.c.created_at)
        if criteria.limit is not None:
            stmt = stmt.limit(criteria.limit)
        return list(self.session.execute(stmt).scalars())

    def update(self, centre_id: uuid.UUID, fields: Mapping[str, object]) -> bool:
        """Write ``fields`` to one centre and return whether it exists.

        Only the columns in ``WRITABLE_CENTRE_FIELDS`` may be written; everything
        else on the row is left untouched.
        """

        if not fields:
            raise ValueError("No fields to update")
        unknown = set(fields) - WRITABLE_CENTRE_FIELDS
        if unknown:
            raise ValueError(f"Fields not writable: {', '.join(sorted(unknown))}")
        stmt = update(centre_table).where(centre_table.c.id == centre_id).values(**fields)
        try:
            result = cast("CursorResult[Any]", self.session.execute(stmt))
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Update of centre {centre_id} failed: {exc}") from exc
        return result.rowcount > 0

    def delete_many(self, centre_ids: Collection[uuid.UUID]) -> int:
        if not centre_ids:
            return 0
        stmt = delete(centre_table).where(centre_table.c.id.in_(list(centre_ids)))
        try:
            result = cast("CursorResult[Any]", self.session.execute(stmt))
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Delete of {len(centre_ids)} centre(s) failed: {exc}") from exc
        return result.rowcount


class SqlAlchemyCountryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Country) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> Country | None:
        return self.session.get(Country, entity_id)

    def list_all(self) -> list[Country]:
        stmt = select(Country).order_by(country_table.c.name)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyCentreTypeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CentreType) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> CentreType | None:
        return self.session.get(CentreType, entity_id)

    def list_all(self) -> list[CentreType]:
        stmt = select(CentreType).order_by(centre_type_table.c.name)
        return list(self.session.execute(stmt).scalars())
