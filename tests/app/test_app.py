from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import httpx
import pytest

from rehabfinder import app
from rehabfinder.adapters.google_maps import loader
from rehabfinder.adapters.sqlalchemy.unit_of_work import is_started
from rehabfinder.config.reconciliation import ReconciliationConfig
from rehabfinder.domain.mapping import PreconditionFailedError
from rehabfinder.domain.model import Coordinates
from tests.helpers.directory import (
    FakeLookupService,
    FakeRoutingService,
    load_centre,
    make_centre,
    make_country,
    match,
    seed,
)
from tests.helpers.http import RecordingHandler, make_google_maps_client

if TYPE_CHECKING:
    from collections.abc import Callable

    from rehabfinder.adapters.sqlalchemy.unit_of_work import SqlAlchemyDirectoryUnitOfWork

    UowFactory = Callable[[], SqlAlchemyDirectoryUnitOfWork]

NO_PACING = ReconciliationConfig(call_delay_seconds=0.0, batch_delay_seconds=0.0)
KUALA_LUMPUR = Coordinates(3.1390, 101.6869)


def test_reconcile_centres_is_idempotent(sqlite_unit_of_work: UowFactory) -> None:
    country = make_country()
    first = make_centre("Alpha Rehab", country=country)
    second = make_centre("Beta Rehab", country=country)
    resolved = make_centre("Gamma Rehab", country=country, latitude=3.0, longitude=101.5)
    seed(sqlite_unit_of_work, country, first, second, resolved)
    service = FakeLookupService(
        places={
            "Alpha Rehab Malaysia": match(3.15, 101.70),
            "Beta Rehab Malaysia": match(5.41, 100.33),
        }
    )

    run = app.reconcile_centres(
        lookup=service,
        unit_of_work_factory=sqlite_unit_of_work,
        config=NO_PACING,
    )
    rerun = app.reconcile_centres(
        lookup=service,
        unit_of_work_factory=sqlite_unit_of_work,
        config=NO_PACING,
    )

    assert run.candidates == 2
    assert run.successful == 2
    assert rerun.candidates == 0
    assert rerun.processed == 0
    assert len(service.search_calls) == 2
    stored = load_centre(sqlite_unit_of_work, first)
    assert stored is not None
    assert stored.coordinates == Coordinates(3.15, 101.70)


def test_reconcile_centres_respects_batch_size_and_country(
    sqlite_unit_of_work: UowFactory,
) -> None:
    malaysia = make_country()
    singapore = make_country("Singapore", "SG")
    centres = [make_centre(f"Centre {index}", country=malaysia) for index in range(3)]
    foreign = make_centre("Foreign Centre", country=singapore)
    seed(sqlite_unit_of_work, malaysia, singapore, *centres, foreign)
    service = FakeLookupService()

    run = app.reconcile_centres(
        lookup=service,
        unit_of_work_factory=sqlite_unit_of_work,
        config=NO_PACING,
        country_id=malaysia.id,
        batch_size=2,
    )

    assert run.candidates == 2
    assert [query for query, _, _ in service.search_calls] == [
        "Centre 0 Malaysia",
        "Centre 1 Malaysia",
    ]


def test_scan_and_apply_duplicates(sqlite_unit_of_work: UowFactory) -> None:
    oldest = make_centre("Tung Shin Hospital", created_offset_days=0)
    newer = make_centre("tung shin hospital ", created_offset_days=3)
    other = make_centre("Sunway Rehab")
    seed(sqlite_unit_of_work, oldest, newer, other)

    groups, summary = app.scan_duplicates(unit_of_work_factory=sqlite_unit_of_work)

    assert summary.total_records == 3
    assert summary.duplicate_groups == 1
    assert summary.records_to_delete == 1

    report = app.apply_duplicate_cleanup(groups, unit_of_work_factory=sqlite_unit_of_work)

    assert report.complete
    assert report.deleted_ids == [newer.id]
    assert load_centre(sqlite_unit_of_work, newer) is None
    assert load_centre(sqlite_unit_of_work, oldest) is not None
    _, after = app.scan_duplicates(unit_of_work_factory=sqlite_unit_of_work)
    assert after.duplicate_groups == 0


def test_nearest_centres_orders_by_distance(sqlite_unit_of_work: UowFactory) -> None:
    near = make_centre("Near", latitude=3.15, longitude=101.70)
    far = make_centre("Far", latitude=5.41, longitude=100.33)
    unknown = make_centre("Unknown")
    closed = make_centre("Closed", latitude=3.14, longitude=101.69, active=False)
    seed(sqlite_unit_of_work, far, unknown, near, closed)

    ordered = app.nearest_centres(KUALA_LUMPUR, unit_of_work_factory=sqlite_unit_of_work)

    assert [centre.name for centre, _ in ordered] == ["Near", "Far", "Unknown"]
    assert ordered[-1][1] is None
    nearest = app.nearest_centres(
        KUALA_LUMPUR, limit=1, unit_of_work_factory=sqlite_unit_of_work
    )
    assert [centre.name for centre, _ in nearest] == ["Near"]


def test_plan_route_requires_both_endpoints(sqlite_unit_of_work: UowFactory) -> None:
    located = make_centre("Located", latitude=3.15, longitude=101.70)
    unlocated = make_centre("Unlocated")
    seed(sqlite_unit_of_work, located, unlocated)
    routing = FakeRoutingService()

    route = app.plan_route(
        KUALA_LUMPUR, located.id, routing=routing, unit_of_work_factory=sqlite_unit_of_work
    )

    assert route.distance_text == "5.2 km"
    assert routing.calls == [(KUALA_LUMPUR, Coordinates(3.15, 101.70))]
    with pytest.raises(PreconditionFailedError):
        app.plan_route(
            None, located.id, routing=routing, unit_of_work_factory=sqlite_unit_of_work
        )
    with pytest.raises(PreconditionFailedError):
        app.plan_route(
            KUALA_LUMPUR, unlocated.id, routing=routing, unit_of_work_factory=sqlite_unit_of_work
        )
    assert len(routing.calls) == 1


def test_set_centre_coordinates(sqlite_unit_of_work: UowFactory) -> None:
    centre = make_centre("Manual")
    seed(sqlite_unit_of_work, centre)

    assert app.set_centre_coordinates(
        centre.id, 3.15, 101.70, unit_of_work_factory=sqlite_unit_of_work
    )
    assert not app.set_centre_coordinates(
        uuid.uuid4(), 3.15, 101.70, unit_of_work_factory=sqlite_unit_of_work
    )
    stored = load_centre(sqlite_unit_of_work, centre)
    assert stored is not None
    assert stored.is_resolved


def test_render_map_resolves_on_demand(sqlite_unit_of_work: UowFactory) -> None:
    country = make_country()
    pending = make_centre("Pending Rehab", country=country)
    placed = make_centre("Placed Rehab", country=country, latitude=3.15, longitude=101.70)
    seed(sqlite_unit_of_work, country, pending, placed)
    service = FakeLookupService(places={"Pending Rehab Malaysia": match(5.41, 100.33)})

    rendered = app.render_map(
        KUALA_LUMPUR,
        resolve_on_demand=True,
        lookup=service,
        unit_of_work_factory=sqlite_unit_of_work,
        config=NO_PACING,
    )

    assert len(rendered.plotted) == 2
    assert rendered.pending == []
    stored = load_centre(sqlite_unit_of_work, pending)
    assert stored is not None
    assert stored.is_resolved


def test_close_adapters_releases_client_and_engine(sqlite_unit_of_work: UowFactory) -> None:
    handler = RecordingHandler(httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
    client = loader.init(lambda: make_google_maps_client(handler))
    assert client.geocode("Jalan Pudu") is None
    assert is_started()

    app.close_adapters()

    assert not loader.is_ready()
    assert not is_started()
    assert client._runner is None  # noqa: SLF001
