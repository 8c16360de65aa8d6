from __future__ import annotations

import pytest

from rehabfinder.domain.mapping import format_distance, haversine_km, sort_by_distance
from rehabfinder.domain.model import Centre, Coordinates
from tests.helpers.directory import make_centre

KUALA_LUMPUR = Coordinates(3.139, 101.687)


def test_haversine_known_distance() -> None:
    penang = Coordinates(5.4141, 100.3288)

    assert haversine_km(KUALA_LUMPUR, penang) == pytest.approx(294.0, abs=3.0)
    assert haversine_km(KUALA_LUMPUR, KUALA_LUMPUR) == 0.0


def test_sort_by_distance_puts_unresolved_last_in_input_order() -> None:
    far = make_centre("Penang", latitude=5.4141, longitude=100.3288)
    unresolved_first = make_centre("No coords 1")
    near = make_centre("Cheras", latitude=3.106, longitude=101.725)
    unresolved_second = make_centre("No coords 2", latitude=0.0, longitude=0.0)
    middle = make_centre("Seremban", latitude=2.7297, longitude=101.9381)

    ordered = sort_by_distance(
        [far, unresolved_first, near, unresolved_second, middle],
        KUALA_LUMPUR,
        coordinates_of=lambda centre: centre.coordinates,
    )

    names = [centre.name for centre, _ in ordered]
    assert names == ["Cheras", "Seremban", "Penang", "No coords 1", "No coords 2"]
    distances = [distance for _, distance in ordered]
    assert distances[3:] == [None, None]
    located = [distance for distance in distances[:3] if distance is not None]
    assert located == sorted(located)


def test_sort_by_distance_without_locations() -> None:
    centres: list[Centre] = [make_centre("A"), make_centre("B")]

    ordered = sort_by_distance(centres, KUALA_LUMPUR, coordinates_of=lambda c: c.coordinates)

    assert [centre for centre, _ in ordered] == centres


@pytest.mark.parametrize(
    ("distance", "expected"),
    [
        (0.85, "850m away"),
        (0.0004, "0m away"),
        (1.0, "1.0km away"),
        (1.234, "1.2km away"),
        (25.06, "25.1km away"),
        (None, None),
    ],
)
def test_format_distance(distance: float | None, expected: str | None) -> None:
    assert format_distance(distance) == expected
