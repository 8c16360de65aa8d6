"""Sequential, paced reconciliation of unresolved centres."""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.config.reconciliation import ReconciliationConfig
from rehabfinder.domain.model import Coordinates, ErrorKind
from rehabfinder.domain.ports import LookupServiceError, StoreWriteError

from .lookup import describe_place_types
from .outcomes import ReconciliationRun, ResolutionOutcome
from .pacing import Pacer
from .selection import select_candidates

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from rehabfinder.domain.model import Centre, Country
    from rehabfinder.domain.ports import DirectoryUnitOfWork, PlaceDetailsService

    from .lookup import TieredLookup

log = getLogger(__name__)

STOP_RATE_LIMITED = "rate limited"
STOP_CANCELLED = "cancelled"


class ReconciliationEngine:
    """Resolve centres one at a time and write coordinates back per record.

    Each write happens in its own unit of work, so a failed write never affects
    other records and a cancelled or aborted run keeps everything written so far.
    """

    def __init__(
        self,
        *,
        lookup: TieredLookup,
        unit_of_work_factory: Callable[[], DirectoryUnitOfWork],
        config: ReconciliationConfig | None = None,
        details: PlaceDetailsService | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._lookup = lookup
        self._uow_factory = unit_of_work_factory
        self._config = config or ReconciliationConfig()
        self._details = details
        self._sleep = sleep

    def run(
        self,
        candidates: Iterable[Centre],
        batch_size: int | None,
        include_already_resolved: bool = False,
        cancel: threading.Event | None = None,
        *,
        update_address: bool = False,
        adopt_provider_details: bool = False,
    ) -> ReconciliationRun:
        selected = select_candidates(
            candidates,
            batch_size=batch_size,
            include_already_resolved=include_already_resolved,
        )
        run = ReconciliationRun(candidates=len(selected))
        pacer = Pacer(
            sub_batch_size=self._config.sub_batch_size,
            call_delay=self._config.call_delay_seconds,
            batch_delay=self._config.batch_delay_seconds,
            sleep=self._sleep,
        )
        log.info("Reconciliation started: %d candidate(s)", len(selected))

        for candidate in selected:
            if cancel is not None and cancel.is_set():
                run.cancelled = True
                run.stop_reason = STOP_CANCELLED
                log.info("Reconciliation cancelled after %d record(s)", run.processed)
                break

            current, country = self._reload(candidate.id)
            if current is None:
                run.skipped += 1
                log.info("Skipping %s: record no longer exists", candidate.id)
                continue
            if current.is_resolved and not include_already_resolved:
                run.skipped += 1
                log.info("Skipping %s: already resolved", candidate.id)
                continue
            if country is None:
                run.outcomes.append(
                    ResolutionOutcome(
                        centre_name=current.name,
                        centre_id=current.id,
                        success=False,
                        error_kind=ErrorKind.INVALID_REQUEST,
                        reason="country not found",
                    )
                )
                continue

            outcome = self._resolve(current, country, pacer)
            if outcome.rate_limited:
                run.outcomes.append(outcome)
                run.incomplete = True
                run.stop_reason = STOP_RATE_LIMITED
                log.warning(
                    "Provider rate limit reached at %r; aborting with %d record(s) left",
                    current.name,
                    len(selected) - run.processed - run.skipped,
                )
                break

            coordinates = outcome.coordinates if outcome.success else None
            if outcome.success and coordinates is None:
                outcome.as_failure(ErrorKind.NOT_FOUND, "match has no coordinates")
            if coordinates is not None:
                self._write_back(
                    current,
                    coordinates,
                    outcome,
                    update_address=update_address,
                    adopt_provider_details=adopt_provider_details,
                )
            else:
                log.info("Could not resolve %r: %s", current.name, outcome.reason)
            run.outcomes.append(outcome)

        log.info(
            "Reconciliation finished: %d processed, %d successful, %d failed, %d skipped",
            run.processed,
            run.successful,
            run.failed,
            run.skipped,
        )
        return run

    def _reload(self, centre_id: UUID) -> tuple[Centre | None, Country | None]:
        with self._uow_factory() as uow:
            centre = uow.repositories.centres.get(centre_id)
            if centre is None or centre.country_id is None:
                return centre, None
            return centre, uow.repositories.countries.get(centre.country_id)

    def _resolve(self, centre: Centre, country: Country, pacer: Pacer) -> ResolutionOutcome:
        pacer.wait()
        outcome = self._lookup.resolve(
            centre.name, centre.address, country.name, country.code, centre_id=centre.id
        )
        retries = self._config.rate_limit_retries
        while outcome.rate_limited and retries > 0:
            retries -= 1
            log.warning(
                "Rate limited; pausing %.1fs before retrying %r",
                self._config.rate_limit_pause_seconds,
                centre.name,
            )
            self._sleep(self._config.rate_limit_pause_seconds)
            pacer.wait()
            outcome = self._lookup.resolve(
                centre.name, centre.address, country.name, country.code, centre_id=centre.id
            )
        return outcome

    def _write_back(
        self,
        centre: Centre,
        coordinates: Coordinates,
        outcome: ResolutionOutcome,
        *,
        update_address: bool,
        adopt_provider_details: bool,
    ) -> None:
        fields: dict[str, object] = {
            "latitude": coordinates.latitude,
            "longitude": coordinates.longitude,
        }
        if (update_address or adopt_provider_details) and outcome.normalized_address:
            fields["address"] = outcome.normalized_address
        if adopt_provider_details:
            if outcome.provider_name:
                fields["name"] = outcome.provider_name
            fields.update(self._provider_contact_fields(centre, outcome))

        try:
            with self._uow_factory() as uow:
                matched = uow.repositories.centres.update(centre.id, fields)
                uow.commit()
        except StoreWriteError as exc:
            log.error("Store write failed for %s: %s", centre.id, exc)
            outcome.as_failure(ErrorKind.STORE_WRITE_FAILURE, f"store write failed: {exc}")
            return
        if not matched:
            log.error("Store write for %s matched no record", centre.id)
            outcome.as_failure(ErrorKind.STORE_WRITE_FAILURE, "record no longer exists")

    def _provider_contact_fields(
        self, centre: Centre, outcome: ResolutionOutcome
    ) -> dict[str, object]:
        if self._details is None or not outcome.place_id:
            return {}
        try:
            details = self._details.place_details(outcome.place_id)
        except LookupServiceError as exc:
            log.warning("Place details unavailable for %r: %s", centre.name, exc.message)
            return {}
        if details is None:
            return {}
        fields: dict[str, object] = {}
        if details.phone and not centre.phone:
            fields["phone"] = details.phone
        if details.website and not centre.website:
            fields["website"] = details.website
        if not centre.services:
            fields["services"] = describe_place_types(details.types).services
        return fields


def set_centre_coordinates(
    centre_id: UUID,
    latitude: float,
    longitude: float,
    *,
    unit_of_work_factory: Callable[[], DirectoryUnitOfWork],
) -> bool:
    """Assign coordinates to a single centre; return whether the centre exists."""

    coordinates = Coordinates(latitude, longitude)
    with unit_of_work_factory() as uow:
        matched = uow.repositories.centres.update(
            centre_id,
            {"latitude": coordinates.latitude, "longitude": coordinates.longitude},
        )
        uow.commit()
    if matched:
        log.info("Coordinates set for %s: %s", centre_id, coordinates.as_tuple())
    return matched
