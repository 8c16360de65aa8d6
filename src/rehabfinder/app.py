"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.adapters.google_maps import loader
from rehabfinder.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyDirectoryUnitOfWork,
    is_started,
    shutdown,
    startup,
)
from rehabfinder.config.reconciliation import (
    DEFAULT_RUN_BATCH_SIZE,
    ReconciliationConfig,
    get_reconciliation_config,
)
from rehabfinder.domain import deduplication
from rehabfinder.domain.mapping import MapRenderer, RoutePlanner, sort_by_distance
from rehabfinder.domain.ports import CentreFilter, DirectoryUnitOfWork
from rehabfinder.domain.reconciliation import (
    ReconciliationEngine,
    TieredLookup,
)
from rehabfinder.domain.reconciliation import (
    set_centre_coordinates as assign_coordinates,
)

if TYPE_CHECKING:
    import threading
    from uuid import UUID

    from rehabfinder.domain.deduplication import (
        DeletionReport,
        DuplicateGroup,
        DuplicateScanSummary,
    )
    from rehabfinder.domain.mapping import RenderedMap
    from rehabfinder.domain.model import Centre, Coordinates
    from rehabfinder.domain.ports import (
        LookupService,
        PlaceDetailsService,
        Route,
        RoutingService,
    )
    from rehabfinder.domain.reconciliation import ReconciliationRun

UnitOfWorkFactory = Callable[[], DirectoryUnitOfWork]


log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyDirectoryUnitOfWork


def _build_engine(
    *,
    lookup: LookupService | None,
    details: PlaceDetailsService | None,
    unit_of_work_factory: UnitOfWorkFactory,
    config: ReconciliationConfig,
) -> ReconciliationEngine:
    if lookup is None:
        client = loader.init()
        lookup = client
        details = details or client
    return ReconciliationEngine(
        lookup=TieredLookup(lookup, category_hint=config.category_hint),
        unit_of_work_factory=unit_of_work_factory,
        config=config,
        details=details,
    )


def reconcile_centres(
    *,
    lookup: LookupService | None = None,
    details: PlaceDetailsService | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
    country_id: UUID | None = None,
    batch_size: int | None = DEFAULT_RUN_BATCH_SIZE,
    include_already_resolved: bool = False,
    update_address: bool = False,
    adopt_provider_details: bool = False,
    cancel: threading.Event | None = None,
) -> ReconciliationRun:
    """Resolve coordinates for active centres using the configured adapters."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_config = config or get_reconciliation_config()
    with effective_uow() as uow:
        candidates = uow.repositories.centres.query(
            CentreFilter(
                active=True,
                unresolved_only=not include_already_resolved,
                country_id=country_id,
            )
        )
    log.info(
        "Starting reconciliation: batch_size=%s, country=%s, include_resolved=%s",
        batch_size,
        country_id,
        include_already_resolved,
    )
    engine = _build_engine(
        lookup=lookup,
        details=details,
        unit_of_work_factory=effective_uow,
        config=effective_config,
    )
    return engine.run(
        candidates,
        batch_size,
        include_already_resolved,
        cancel,
        update_address=update_address,
        adopt_provider_details=adopt_provider_details,
    )


def scan_duplicates(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> tuple[list[DuplicateGroup], DuplicateScanSummary]:
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        centres = uow.repositories.centres.list_all()
    groups = deduplication.scan(centres)
    return groups, deduplication.summarize(centres, groups)


def apply_duplicate_cleanup(
    groups: list[DuplicateGroup],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    batch_size: int = deduplication.DEFAULT_DELETE_BATCH_SIZE,
) -> DeletionReport:
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    log.info("Applying duplicate cleanup to %d group(s)", len(groups))
    return deduplication.apply(groups, unit_of_work_factory=effective_uow, batch_size=batch_size)


def render_map(
    viewer: Coordinates | None = None,
    *,
    country_id: UUID | None = None,
    resolve_on_demand: bool = False,
    lookup: LookupService | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
    cancel: threading.Event | None = None,
) -> RenderedMap:
    """Build markers for active centres, optionally resolving missing coordinates."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_config = config or get_reconciliation_config()
    with effective_uow() as uow:
        centres = uow.repositories.centres.query(CentreFilter(country_id=country_id))
        centre_types = {item.id: item for item in uow.repositories.centre_types.list_all()}
        countries = {item.id: item for item in uow.repositories.countries.list_all()}

    engine = None
    if resolve_on_demand:
        engine = _build_engine(
            lookup=lookup,
            details=None,
            unit_of_work_factory=effective_uow,
            config=effective_config,
        )
    renderer = MapRenderer(
        centre_types=centre_types,
        countries=countries,
        engine=engine,
        on_demand_cap=effective_config.on_demand_cap,
    )
    return renderer.render(centres, viewer, resolve_on_demand=resolve_on_demand, cancel=cancel)


def nearest_centres(
    viewer: Coordinates,
    *,
    limit: int | None = 10,
    country_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[tuple[Centre, float | None]]:
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        centres = uow.repositories.centres.query(CentreFilter(country_id=country_id))
    ordered = sort_by_distance(centres, viewer, coordinates_of=lambda centre: centre.coordinates)
    return ordered[:limit] if limit is not None else ordered


def plan_route(
    viewer: Coordinates | None,
    centre_id: UUID,
    *,
    routing: RoutingService | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Route:
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        centre = uow.repositories.centres.get(centre_id)
    destination = centre.coordinates if centre is not None else None
    planner = RoutePlanner(routing or loader.init())
    return planner.route(viewer, destination)


def set_centre_coordinates(
    centre_id: UUID,
    latitude: float,
    longitude: float,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    return assign_coordinates(
        centre_id, latitude, longitude, unit_of_work_factory=effective_uow
    )


def close_adapters() -> None:
    """Release the shared provider client and the database engine."""

    loader.reset()
    if is_started():
        shutdown()
