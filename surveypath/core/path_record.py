# core/path_record.py

import json
from dataclasses import dataclass, field
from typing import List

from surveypath.core.errors import InvalidCoordinate, PathRecordError
from surveypath.core.geodesy import Coordinate, as_coordinate

DEFAULT_VERSION = "0.1.0"

SAMPLES_GEOMETRY = "MultiPoint"
WAYPOINTS_GEOMETRY = "LineString"


@dataclass
class PathRecord:
    """Persisted form of a survey path."""
    version: str = DEFAULT_VERSION
    waypoints: List[Coordinate] = field(default_factory=list)
    samples: List[Coordinate] = field(default_factory=list)

    @classmethod
    def default(cls) -> "PathRecord":
        return cls()

    def to_geojson(self) -> dict:
        """Convert to a GeoJSON FeatureCollection.

        Feature 0 is always the MultiPoint of samples and feature 1 the
        LineString of waypoints; readers of the record rely on this order.
        """
        return {
            'type': 'FeatureCollection',
            'version': self.version,
            'features': [
                _feature(SAMPLES_GEOMETRY, self.samples),
                _feature(WAYPOINTS_GEOMETRY, self.waypoints),
            ],
        }

    def dumps(self, indent=None) -> str:
        return json.dumps(self.to_geojson(), indent=indent)

    @classmethod
    def from_geojson(cls, document) -> "PathRecord":
        """Convert a GeoJSON FeatureCollection back into a PathRecord.

        The MultiPoint and LineString features are accepted in either order.

        Raises:
            PathRecordError: if the document is not a complete path record.
        """
        if not isinstance(document, dict) or document.get('type') != 'FeatureCollection':
            raise PathRecordError("Invalid Path GeoJSON: expected a FeatureCollection")

        version = document.get('version')
        if version is None:
            raise PathRecordError("Invalid Path GeoJSON: Missing Version")
        if not isinstance(version, str):
            raise PathRecordError("Invalid Path GeoJSON: Invalid Version")

        features = document.get('features')
        if not isinstance(features, list) or len(features) != 2:
            raise PathRecordError(
                "Invalid Path GeoJSON: Path GeoJSON requires two features (Multi Point and Line String)."
            )

        geometries = {}
        for feature in features:
            geometry = feature.get('geometry') if isinstance(feature, dict) else None
            if not isinstance(geometry, dict):
                raise PathRecordError("Invalid Path GeoJSON: feature without geometry")
            geometry_type = geometry.get('type')
            if not isinstance(geometry_type, str):
                raise PathRecordError("Invalid Path GeoJSON: geometry type must be a string")
            geometries[geometry_type] = geometry.get('coordinates')

        if set(geometries) != {SAMPLES_GEOMETRY, WAYPOINTS_GEOMETRY}:
            raise PathRecordError(
                "Invalid Path GeoJSON: Path GeoJSON requires two features (Multi Point and Line String)."
            )

        return cls(
            version=version,
            waypoints=_parse_positions(geometries[WAYPOINTS_GEOMETRY]),
            samples=_parse_positions(geometries[SAMPLES_GEOMETRY]),
        )

    @classmethod
    def loads(cls, text: str) -> "PathRecord":
        try:
            document = json.loads(text)
        except (ValueError, RecursionError) as e:
            # ValueError covers JSONDecodeError and over-long integer literals
            raise PathRecordError(f"Invalid Path GeoJSON: {e}")
        return cls.from_geojson(document)


def _feature(geometry_type: str, coordinates: List[Coordinate]) -> dict:
    return {
        'type': 'Feature',
        'properties': {},
        'geometry': {
            'type': geometry_type,
            'coordinates': [[c[0], c[1]] for c in coordinates],
        },
    }


def _parse_positions(positions) -> List[Coordinate]:
    if not isinstance(positions, list):
        raise PathRecordError("Invalid Path GeoJSON: coordinates must be an array")
    try:
        return [as_coordinate(p) for p in positions]
    except InvalidCoordinate as e:
        raise PathRecordError(f"Invalid Path GeoJSON: {e.message}")
