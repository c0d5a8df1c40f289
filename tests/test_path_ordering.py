from collections import Counter

import pytest

from surveypath.core.errors import EmptyPath
from surveypath.core.geodesy import path_length
from surveypath.core.path_ordering import reorder


def test_nearest_point_is_visited_next():
    assert reorder([[0, 0], [0, 10], [0, 1]]) == [(0, 0), (0, 1), (0, 10)]


def test_result_is_a_permutation_with_the_same_start():
    points = [(0.003, 0.001), (0, 0), (0.001, 0.002), (0.002, 0), (0.0005, 0.0005), (0.003, 0.003)]
    result = reorder(points)

    assert result[0] == points[0]
    assert Counter(result) == Counter(points)


def test_input_is_not_modified():
    points = [[0, 0], [0, 10], [0, 1]]
    reorder(points)
    assert points == [[0, 0], [0, 10], [0, 1]]


def test_ties_keep_the_earlier_point():
    # (0, 1) and (0, -1) are equally far from the start
    assert reorder([(0, 0), (0, 1), (0, -1)]) == [(0, 0), (0, 1), (0, -1)]


def test_zigzag_is_shortened():
    points = [(0, 0), (0, 0.004), (0, 0.001), (0, 0.003), (0, 0.002)]
    result = reorder(points)

    assert result == [(0, 0), (0, 0.001), (0, 0.002), (0, 0.003), (0, 0.004)]
    assert path_length(result) < path_length(points)


def test_single_point_is_returned_as_is():
    assert reorder([(4, 5)]) == [(4, 5)]


def test_empty_input_is_rejected():
    with pytest.raises(EmptyPath):
        reorder([])
