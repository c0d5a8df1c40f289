# core/path_ordering.py
"""Order a set of waypoints into a travel sequence."""

import logging
from typing import List, Sequence

import numpy as np

from surveypath.core.errors import EmptyPath
from surveypath.core.geodesy import Coordinate, distances_from

logger = logging.getLogger(__name__)


def reorder(points: Sequence[Sequence[float]]) -> List[Coordinate]:
    """Greedy nearest-neighbour ordering starting from the first point.

    From the current point, the closest remaining point (first one wins on
    ties) is visited next, until every point is placed. This is a heuristic
    travelling-salesman tour: it never backtracks and can be longer than the
    optimal tour. O(n^2) distance evaluations.

    The input sequence is not modified.

    Raises:
        EmptyPath: if there are no points to order.
    """
    ordered = [Coordinate(p[0], p[1]) for p in points]
    if not ordered:
        raise EmptyPath("Cannot order an empty set of points")

    for i in range(len(ordered) - 1):
        remaining = ordered[i + 1:]
        # argmin returns the first minimum, keeping the lowest index on ties
        closest = i + 1 + int(np.argmin(distances_from(ordered[i], remaining)))
        ordered[i + 1], ordered[closest] = ordered[closest], ordered[i + 1]

    logger.debug(f"Ordered {len(ordered)} points by nearest neighbour")
    return ordered
