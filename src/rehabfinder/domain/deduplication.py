"""Duplicate detection and cleanup for directory centres.

Centres imported more than once end up under the same name with small variations
in case and whitespace. Grouping is by ``name.strip().lower()``; the oldest record of
each group is authoritative and the others are deletion candidates. The policy is
fixed and never merges fields between records.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.domain.ports import StoreWriteError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from uuid import UUID

    from rehabfinder.domain.model import Centre
    from rehabfinder.domain.ports import DirectoryUnitOfWork

log = getLogger(__name__)

DEFAULT_DELETE_BATCH_SIZE = 50


def normalize_name(name: str) -> str:
    return name.strip().lower()


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    normalized_name: str
    members: tuple[Centre, ...]

    @property
    def retained(self) -> Centre:
        return self.members[0]

    @property
    def to_delete(self) -> tuple[Centre, ...]:
        return self.members[1:]


@dataclass(frozen=True, slots=True)
class DuplicateScanSummary:
    total_records: int
    duplicate_groups: int
    records_to_delete: int


@dataclass(slots=True)
class DeletionReport:
    """What an ``apply`` call actually did, batch by batch."""

    requested_ids: list[UUID] = field(default_factory=list["UUID"])
    deleted_ids: list[UUID] = field(default_factory=list["UUID"])
    kept_ids: list[UUID] = field(default_factory=list["UUID"])
    failed_batch: list[UUID] = field(default_factory=list["UUID"])
    error: str | None = None
    resolved_groups: list[str] = field(default_factory=list[str])
    partially_resolved_groups: list[str] = field(default_factory=list[str])
    untouched_groups: list[str] = field(default_factory=list[str])

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_ids)

    @property
    def complete(self) -> bool:
        return self.error is None and self.deleted_count == len(self.requested_ids)


def scan(all_centres: Iterable[Centre]) -> list[DuplicateGroup]:
    """Group centres by normalized name; largest groups first."""

    buckets: dict[str, list[Centre]] = defaultdict(list)
    for centre in all_centres:
        buckets[normalize_name(centre.name)].append(centre)

    groups = [
        DuplicateGroup(
            normalized_name=key,
            members=tuple(sorted(members, key=lambda centre: centre.created_at)),
        )
        for key, members in buckets.items()
        if len(members) > 1
    ]
    groups.sort(key=lambda group: (-len(group.members), group.normalized_name))
    return groups


def summarize(
    all_centres: Sequence[Centre], groups: Sequence[DuplicateGroup]
) -> DuplicateScanSummary:
    return DuplicateScanSummary(
        total_records=len(all_centres),
        duplicate_groups=len(groups),
        records_to_delete=sum(len(group.to_delete) for group in groups),
    )


def apply(
    groups: Sequence[DuplicateGroup],
    *,
    unit_of_work_factory: Callable[[], DirectoryUnitOfWork],
    batch_size: int = DEFAULT_DELETE_BATCH_SIZE,
) -> DeletionReport:
    """Delete every non-retained member of ``groups`` in bounded batches.

    A failing batch is not retried and is left untouched: a batch whose delete count
    differs from its size is rolled back. The run stops there and the report carries
    the failed batch and the error. Groups are then split into resolved, partially
    resolved and untouched by how many of their deletion candidates are gone.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    report = DeletionReport()
    for group in groups:
        report.kept_ids.append(group.retained.id)
        report.requested_ids.extend(member.id for member in group.to_delete)

    pending = list(report.requested_ids)
    for start in range(0, len(pending), batch_size):
        batch = pending[start : start + batch_size]
        try:
            with unit_of_work_factory() as uow:
                deleted = uow.repositories.centres.delete_many(batch)
                if deleted != len(batch):
                    uow.rollback()
                    raise StoreWriteError(
                        f"store deleted {deleted} of {len(batch)} record(s)"
                    )
                uow.commit()
        except StoreWriteError as exc:
            log.error("Duplicate cleanup stopped: batch of %d failed: %s", len(batch), exc)
            report.failed_batch = batch
            report.error = str(exc)
            break
        report.deleted_ids.extend(batch)

    deleted_ids = set(report.deleted_ids)
    for group in groups:
        gone = sum(1 for member in group.to_delete if member.id in deleted_ids)
        if gone == len(group.to_delete):
            report.resolved_groups.append(group.normalized_name)
        elif gone:
            report.partially_resolved_groups.append(group.normalized_name)
        else:
            report.untouched_groups.append(group.normalized_name)

    log.info(
        "Duplicate cleanup: %d of %d record(s) deleted across %d group(s)",
        report.deleted_count,
        len(report.requested_ids),
        len(report.resolved_groups),
    )
    return report
