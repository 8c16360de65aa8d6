"""Build the marker set and list ordering for a map view."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rehabfinder.config.reconciliation import DEFAULT_ON_DEMAND_CAP
from rehabfinder.domain.model import CentreCategory

from .geo import sort_by_distance
from .markers import Marker, MarkerDetail, MarkerState
from .viewport import compute_viewport

if TYPE_CHECKING:
    import threading
    from collections.abc import Mapping, Sequence
    from uuid import UUID

    from rehabfinder.domain.model import Centre, CentreType, Coordinates, Country
    from rehabfinder.domain.reconciliation import ReconciliationEngine

    from .viewport import Viewport

log = getLogger(__name__)


@dataclass(slots=True)
class RenderedMap:
    markers: list[Marker]
    entries: list[tuple[Marker, float | None]]
    viewport: Viewport
    pending: list[UUID] = field(default_factory=list["UUID"])

    @property
    def plotted(self) -> list[Marker]:
        return [marker for marker in self.markers if marker.state is MarkerState.RESOLVED]


class MapRenderer:
    """Turn centres into markers, optionally resolving missing coordinates on demand.

    On-demand resolution goes through the reconciliation engine, so it obeys the
    same pacing and write-back rules as a batch run. At most ``on_demand_cap``
    centres are resolved per render; the rest stay unresolved and are listed in
    ``RenderedMap.pending``.
    """

    def __init__(
        self,
        *,
        centre_types: Mapping[UUID, CentreType] | None = None,
        countries: Mapping[UUID, Country] | None = None,
        engine: ReconciliationEngine | None = None,
        on_demand_cap: int = DEFAULT_ON_DEMAND_CAP,
    ) -> None:
        self._centre_types = dict(centre_types or {})
        self._countries = dict(countries or {})
        self._engine = engine
        self._on_demand_cap = on_demand_cap

    def render(
        self,
        centres: Sequence[Centre],
        viewer: Coordinates | None = None,
        *,
        resolve_on_demand: bool = False,
        cancel: threading.Event | None = None,
    ) -> RenderedMap:
        markers = [self._marker_for(centre) for centre in centres]
        pending = [marker for marker in markers if marker.state is MarkerState.UNRESOLVED]

        if resolve_on_demand and pending:
            if self._engine is None:
                raise ValueError("On-demand resolution requires a reconciliation engine")
            self._resolve(self._engine, centres, pending[: self._on_demand_cap], cancel)

        plotted = [marker for marker in markers if marker.state is MarkerState.RESOLVED]
        if viewer is not None:
            entries = sort_by_distance(markers, viewer, coordinates_of=_plotted_coordinates)
        else:
            entries = [(marker, None) for marker in markers]

        return RenderedMap(
            markers=markers,
            entries=entries,
            viewport=compute_viewport(
                (marker.coordinates for marker in plotted if marker.coordinates),
                viewer,
            ),
            pending=[
                marker.centre_id for marker in markers if marker.state is MarkerState.UNRESOLVED
            ],
        )

    def _marker_for(self, centre: Centre) -> Marker:
        centre_type = (
            self._centre_types.get(centre.centre_type_id) if centre.centre_type_id else None
        )
        country = self._countries.get(centre.country_id) if centre.country_id else None
        type_name = centre_type.name if centre_type else None
        return Marker(
            centre.id,
            CentreCategory.from_type_name(type_name),
            MarkerDetail.for_centre(
                centre,
                type_name=type_name,
                country_name=country.name if country else None,
            ),
            coordinates=centre.coordinates,
        )

    def _resolve(
        self,
        engine: ReconciliationEngine,
        centres: Sequence[Centre],
        batch: list[Marker],
        cancel: threading.Event | None,
    ) -> None:
        by_id = {centre.id: centre for centre in centres}
        for marker in batch:
            marker.start_resolving()
        run = engine.run(
            [by_id[marker.centre_id] for marker in batch],
            batch_size=len(batch),
            cancel=cancel,
        )
        outcomes = {outcome.centre_id: outcome for outcome in run.outcomes}
        for marker in batch:
            outcome = outcomes.get(marker.centre_id)
            if outcome is None:
                marker.fail("not attempted" if run.incomplete or run.cancelled else "skipped")
            elif outcome.success and outcome.coordinates is not None:
                marker.resolve(outcome.coordinates)
            else:
                marker.fail(outcome.reason)
        log.info(
            "On-demand resolution: %d of %d marker(s) resolved",
            run.successful,
            len(batch),
        )


def _plotted_coordinates(marker: Marker) -> Coordinates | None:
    return marker.coordinates if marker.state is MarkerState.RESOLVED else None
