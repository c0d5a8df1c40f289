import math

import pytest

from surveypath.core.errors import InvalidSpacing
from surveypath.core.geodesy import Coordinate, distance
from surveypath.core.interpolation import interpolate, validate_spacing


def test_hundred_metres_at_fifty_metre_spacing_adds_one_point():
    result = interpolate([[0, 0], [0, 0.0009]], 50)

    assert len(result) == 3
    assert result[0] == (0, 0)
    assert result[-1] == (0, 0.0009)
    assert distance(result[0], result[1]) == pytest.approx(50, abs=1e-6)
    assert result[1].lng == pytest.approx(0, abs=1e-12)


def test_intermediate_points_are_evenly_spaced():
    waypoints = [(101.87513, 2.94575), (101.87913, 2.94975)]
    result = interpolate(waypoints, 5)

    segment_length = distance(*waypoints)
    assert len(result) == 2 + max(math.floor(segment_length / 5) - 1, 0)
    for a, b in zip(result[:-2], result[1:-1]):
        assert distance(a, b) == pytest.approx(5, rel=1e-6)
    assert distance(result[-2], result[-1]) >= 5 - 1e-3


def test_every_waypoint_appears_in_order():
    waypoints = [(0, 0), (0, 0.001), (0.001, 0.001), (0.001, 0.0012), (0, 0)]
    result = interpolate(waypoints, 20)

    positions = []
    start = 0
    for waypoint in waypoints:
        index = result.index(waypoint, start)
        positions.append(index)
        start = index + 1
    assert positions == sorted(positions)
    assert positions[0] == 0
    assert positions[-1] == len(result) - 1


def test_short_segment_adds_no_points():
    # ~55 m apart with 50 m spacing: floor(1.1) - 1 == 0
    assert interpolate([(0, 0), (0, 0.0005)], 50) == [(0, 0), (0, 0.0005)]


def test_identical_consecutive_waypoints_are_kept():
    assert interpolate([(1, 1), (1, 1)], 5) == [(1, 1), (1, 1)]


@pytest.mark.parametrize("waypoints", [[], [(12.5, -3.25)]])
def test_fewer_than_two_waypoints_are_returned_unchanged(waypoints):
    assert interpolate(waypoints, 5) == waypoints


@pytest.mark.parametrize("waypoints", [[[12.5, -3.25]], [(12.5, -3.25)], [Coordinate(12.5, -3.25)]])
def test_single_waypoint_comes_back_as_a_new_coordinate_list(waypoints):
    result = interpolate(waypoints, 5)

    assert result == [Coordinate(12.5, -3.25)]
    assert result is not waypoints
    assert all(isinstance(point, Coordinate) for point in result)


def test_input_is_not_modified():
    waypoints = [[0, 0], [0, 0.0009]]
    interpolate(waypoints, 10)
    assert waypoints == [[0, 0], [0, 0.0009]]


@pytest.mark.parametrize("spacing", [0, -5, float("nan"), float("inf"), "5", None, True])
def test_invalid_spacing_is_rejected(spacing):
    with pytest.raises(InvalidSpacing):
        interpolate([(0, 0), (0, 1)], spacing)


def test_invalid_spacing_is_rejected_even_for_a_single_point():
    with pytest.raises(InvalidSpacing):
        interpolate([(0, 0)], 0)


def test_validate_spacing_returns_float():
    assert validate_spacing(5) == 5.0
    assert isinstance(validate_spacing(5), float)
