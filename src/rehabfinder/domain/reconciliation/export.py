"""CSV export of reconciliation outcomes for operators."""

from __future__ import annotations

import csv
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import TextIO

    from .outcomes import ResolutionOutcome

CSV_HEADER = ("Center ID", "Center Name", "Success", "Latitude", "Longitude", "Error")


def export_outcomes_csv(outcomes: Iterable[ResolutionOutcome], stream: TextIO) -> int:
    """Write ``outcomes`` to ``stream`` as CSV and return the number of rows written."""

    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    rows = 0
    for outcome in outcomes:
        coordinates = outcome.coordinates
        writer.writerow(
            (
                str(outcome.centre_id) if outcome.centre_id else "",
                outcome.centre_name,
                "true" if outcome.success else "false",
                coordinates.latitude if coordinates and outcome.success else "",
                coordinates.longitude if coordinates and outcome.success else "",
                "" if outcome.success else (outcome.reason or ""),
            )
        )
        rows += 1
    return rows
