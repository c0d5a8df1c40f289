import math

import numpy as np
import pytest

from surveypath.core.errors import InvalidCoordinate
from surveypath.core.geodesy import (
    Coordinate,
    as_coordinate,
    bearing,
    destination,
    distance,
    distances_from,
    path_length,
)


def test_one_degree_of_latitude_is_about_111_km():
    assert distance((0, 0), (0, 1)) == pytest.approx(111195, rel=1e-4)


def test_distance_is_symmetric_and_zero_on_identity():
    a, b = (101.87513, 2.94575), (101.876, 2.946)
    assert distance(a, b) == pytest.approx(distance(b, a))
    assert distance(a, a) == 0


def test_bearing_cardinal_directions():
    assert bearing((0, 0), (0, 1)) == pytest.approx(0)
    assert bearing((0, 0), (1, 0)) == pytest.approx(math.pi / 2)
    assert bearing((0, 0), (-1, 0)) == pytest.approx(-math.pi / 2)
    assert bearing((0, 1), (0, 0)) == pytest.approx(math.pi)


def test_destination_travels_the_requested_distance():
    origin = (101.87513, 2.94575)
    brng = bearing(origin, (101.88, 2.95))
    end = destination(origin, brng, 250)

    assert isinstance(end, Coordinate)
    assert distance(origin, end) == pytest.approx(250, abs=1e-6)
    assert bearing(origin, end) == pytest.approx(brng, abs=1e-7)


def test_destination_wraps_across_the_antimeridian():
    end = destination((179.9999, 0), math.pi / 2, 1000)
    assert -180 < end.lng < -179.99


def test_distances_from_matches_scalar_distance():
    origin = (0, 0)
    points = [(0, 1), (1, 1), (0, 0)]
    result = distances_from(origin, points)

    assert isinstance(result, np.ndarray)
    assert result == pytest.approx([distance(origin, p) for p in points])
    assert distances_from(origin, []).shape == (0,)


def test_path_length_sums_segments():
    points = [(0, 0), (0, 1), (0, 2)]
    assert path_length(points) == pytest.approx(2 * distance((0, 0), (0, 1)))
    assert path_length(points[:1]) == 0


def test_as_coordinate_accepts_pairs_and_ignores_altitude():
    assert as_coordinate([1, 2]) == (1.0, 2.0)
    assert as_coordinate((1.5, -2.5, 30)) == Coordinate(1.5, -2.5)


@pytest.mark.parametrize("value", [None, [1], ["a", 2], [True, 1], [float("nan"), 0], [0, float("inf")]])
def test_as_coordinate_rejects_invalid_values(value):
    with pytest.raises(InvalidCoordinate):
        as_coordinate(value)


def test_identical_points_have_zero_bearing():
    p = (101.87513, 2.94575)
    assert bearing(p, p) == 0
    assert bearing((0, 0), (0, 0)) == 0


def test_zero_distance_destination_is_the_origin():
    p = (101.87513, 2.94575)
    assert destination(p, 0.0, 0) == p
    assert destination(p, 1.2, 0) == p


def test_as_coordinate_rejects_integers_too_large_for_a_float():
    with pytest.raises(InvalidCoordinate):
        as_coordinate([10 ** 400, 0])
    with pytest.raises(InvalidCoordinate):
        as_coordinate([0, -10 ** 400])
