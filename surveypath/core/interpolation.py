# core/interpolation.py
"""Fill a waypoint sequence with evenly spaced collection points."""

import logging
import math
from typing import List, Sequence

from surveypath.core.errors import InvalidSpacing
from surveypath.core.geodesy import Coordinate, bearing, destination, distance

DEFAULT_SPACING = 5  # meters between collection points

logger = logging.getLogger(__name__)


def validate_spacing(spacing) -> float:
    """Return spacing as a float, raising InvalidSpacing unless it is a positive finite number."""
    if isinstance(spacing, bool) or not isinstance(spacing, (int, float)):
        raise InvalidSpacing(f"Spacing must be a number, got {spacing!r}")
    if not math.isfinite(spacing) or spacing <= 0:
        raise InvalidSpacing(f"Spacing must be positive, got {spacing!r}")
    return float(spacing)


def interpolate(waypoints: Sequence[Sequence[float]], spacing: float = DEFAULT_SPACING) -> List[Coordinate]:
    """Sample the path through `waypoints` every `spacing` meters.

    The result starts with the first waypoint and, for every consecutive pair,
    holds floor(d / spacing) - 1 intermediate points (never fewer than zero)
    followed by the pair's end waypoint. Every waypoint therefore appears in
    the result, in its original order.

    The result is always a new list of Coordinate, also when fewer than two
    waypoints are given; it compares equal to list input only when that input
    holds tuples or Coordinates.

    The bearing is computed once per segment from its start waypoint, so very
    long segments drift slightly off the true great circle.

    Raises:
        InvalidSpacing: if spacing is not a positive number.
    """
    spacing = validate_spacing(spacing)
    points = [Coordinate(p[0], p[1]) for p in waypoints]

    if len(points) < 2:
        return points

    result = [points[0]]
    for i in range(1, len(points)):
        result.extend(_interpolate_segment(points[i - 1], points[i], spacing))

    logger.debug(f"Interpolated {len(points)} waypoints into {len(result)} points at {spacing} m")
    return result


def _interpolate_segment(start: Coordinate, end: Coordinate, spacing: float) -> List[Coordinate]:
    """Intermediate points of one segment, followed by its end point."""
    segment_length = distance(start, end)
    count = max(math.floor(segment_length / spacing) - 1, 0)
    brng = bearing(start, end)

    segment = []
    current = start
    for _ in range(count):
        current = destination(current, brng, spacing)
        segment.append(current)
    segment.append(end)

    return segment
