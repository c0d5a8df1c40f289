# core/geodesy.py
"""Great-circle helpers on a spherical Earth.

All positions are (longitude, latitude) pairs in degrees, matching GeoJSON
ordering. Formulas follow https://www.movable-type.co.uk/scripts/latlong.html
"""

import math
from typing import Iterable, List, NamedTuple, Sequence

import numpy as np

from surveypath.core.errors import InvalidCoordinate

EARTH_RADIUS_M = 6371000.0  # Mean Earth radius, no ellipsoid correction


class Coordinate(NamedTuple):
    """Longitude/latitude pair in degrees."""
    lng: float
    lat: float


def as_coordinate(value) -> Coordinate:
    """Coerce a [lng, lat] style value into a Coordinate.

    Extra trailing values (altitude, weights) are ignored.

    Raises:
        InvalidCoordinate: if the value is not a pair of finite numbers.
    """
    try:
        lng, lat = value[0], value[1]
    except (TypeError, IndexError, KeyError):
        raise InvalidCoordinate(f"Not a coordinate pair: {value!r}")

    for component in (lng, lat):
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise InvalidCoordinate(f"Coordinate components must be numbers: {value!r}")

    try:
        lng, lat = float(lng), float(lat)
    except OverflowError:
        raise InvalidCoordinate("Coordinate components are too large")
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise InvalidCoordinate(f"Coordinate components must be finite: {value!r}")

    return Coordinate(lng, lat)


def as_coordinates(values: Iterable) -> List[Coordinate]:
    return [as_coordinate(v) for v in values]


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Calculate great-circle distance between two coordinates in meters."""
    # Haversine formula
    lat1_rad = math.radians(a[1])
    lat2_rad = math.radians(b[1])
    delta_lat = math.radians(b[1] - a[1])
    delta_lon = math.radians(b[0] - a[0])

    h = (math.sin(delta_lat / 2) * math.sin(delta_lat / 2) +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) * math.sin(delta_lon / 2))
    h = min(h, 1.0)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c


def bearing(a: Sequence[float], b: Sequence[float]) -> float:
    """Initial bearing from a to b in radians, within (-pi, pi].

    Identical points give a bearing of 0.
    """
    if a[0] == b[0] and a[1] == b[1]:
        return 0.0

    lat1 = math.radians(a[1])
    lat2 = math.radians(b[1])
    delta_lon = math.radians(b[0] - a[0])

    y = math.sin(delta_lon) * math.cos(lat2)
    x = (math.cos(lat1) * math.sin(lat2) -
         math.sin(lat1) * math.cos(lat2) * math.cos(delta_lon))
    brng = math.atan2(y, x)

    return math.pi if brng == -math.pi else brng


def destination(origin: Sequence[float], brng: float, meters: float) -> Coordinate:
    """Point reached by travelling `meters` from `origin` along initial bearing `brng`."""
    if meters == 0:
        return Coordinate(origin[0], origin[1])

    angular = meters / EARTH_RADIUS_M
    lat1 = math.radians(origin[1])
    lng1 = math.radians(origin[0])

    lat2 = math.asin(math.sin(lat1) * math.cos(angular) +
                     math.cos(lat1) * math.sin(angular) * math.cos(brng))
    lng2 = lng1 + math.atan2(math.sin(brng) * math.sin(angular) * math.cos(lat1),
                             math.cos(angular) - math.sin(lat1) * math.sin(lat2))

    return Coordinate(math.degrees(_normalize_longitude(lng2)), math.degrees(lat2))


def _normalize_longitude(lng: float) -> float:
    # Wrap into (-pi, pi], leaving in-range values untouched
    while lng > math.pi:
        lng -= 2 * math.pi
    while lng <= -math.pi:
        lng += 2 * math.pi
    return lng


def distances_from(origin: Sequence[float], points: Sequence[Sequence[float]]) -> np.ndarray:
    """Vectorised haversine distance in meters from `origin` to every point."""
    if len(points) == 0:
        return np.empty(0, dtype=float)

    pts = np.radians(np.asarray(points, dtype=float)[:, :2])
    lng1 = math.radians(origin[0])
    lat1 = math.radians(origin[1])

    delta_lat = pts[:, 1] - lat1
    delta_lon = pts[:, 0] - lng1

    h = (np.sin(delta_lat / 2) ** 2 +
         math.cos(lat1) * np.cos(pts[:, 1]) * np.sin(delta_lon / 2) ** 2)
    h = np.clip(h, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))

    return EARTH_RADIUS_M * c


def path_length(points: Sequence[Sequence[float]]) -> float:
    """Total along-path length in meters."""
    total = 0.0
    for i in range(1, len(points)):
        total += distance(points[i - 1], points[i])
    return total
