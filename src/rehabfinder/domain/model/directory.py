"""Directory entities: centres and the reference data they point to."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from rehabfinder.domain.model.primitives import Coordinates, is_valid_pair


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False)
class Country:
    name: str
    code: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(eq=False)
class CentreType:
    name: str
    description: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(eq=False)
class Centre:
    """A rehabilitation centre listed in the directory.

    ``active`` and ``verified`` belong to the moderation workflow; the
    reconciliation pipeline reads them but never writes them.
    """

    name: str
    address: str
    country_id: uuid.UUID | None = None
    centre_type_id: uuid.UUID | None = None
    latitude: float | None = None
    longitude: float | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    services: str | None = None
    active: bool = True
    verified: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def is_resolved(self) -> bool:
        return is_valid_pair(self.latitude, self.longitude)

    @property
    def coordinates(self) -> Coordinates | None:
        return Coordinates.from_optional(self.latitude, self.longitude)

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Centre):
            return NotImplemented
        return self.id == other.id
