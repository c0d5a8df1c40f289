# maps/map_bridge.py

import logging

from PySide6.QtCore import QObject, Signal, Slot, Property

from surveypath.core.geodesy import Coordinate


class MapBridge(QObject):
    """Map collaborator exposed to QML.

    Python calls (set_source, fit_bounds, marker primitives) are re-emitted as
    signals for the QML map view to draw; map gestures come back through the QML
    slots and are re-emitted as clicked/dragged for the marker layer.
    """

    # Signals to QML
    source_updated = Signal(str, 'QVariant')             # source_id, geojson
    bounds_fit_requested = Signal('QVariant', int)       # [[lng, lat], ...], padding_px
    marker_created = Signal(int, float, float, bool)     # handle, lng, lat, draggable
    marker_repositioned = Signal(int, float, float)      # handle, lng, lat
    marker_removed = Signal(int)                         # handle

    # Signals to the marker layer
    clicked = Signal(object)            # coordinate
    dragged = Signal(object, object)    # handle, coordinate

    def __init__(self, config=None):
        super().__init__()
        self.config = config or {}
        self.logger = logging.getLogger("SURVEY.MapBridge")

        self._next_handle = 1
        self._markers = {}  # handle -> Coordinate
        self._sources = {}  # source_id -> geojson

    # QML properties

    @Property('QVariant', constant=True)
    def home_position(self):
        home = self.config.get("default_home_position", {})
        return {
            "latitude": home.get("latitude", 2.94575),
            "longitude": home.get("longitude", 101.87513),
            "zoom": home.get("zoom", 18),
        }

    # Render primitives

    def set_source(self, source_id: str, record: dict):
        self._sources[source_id] = record
        self.source_updated.emit(source_id, record)

    @Slot(str, result='QVariant')
    def get_source(self, source_id: str):
        return self._sources.get(source_id)

    def fit_bounds(self, coords, padding: int):
        if not coords:
            return
        self.bounds_fit_requested.emit([[c[0], c[1]] for c in coords], padding)

    # Marker primitives

    def create(self, coord, draggable: bool = True) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._markers[handle] = Coordinate(coord[0], coord[1])
        self.marker_created.emit(handle, coord[0], coord[1], draggable)
        return handle

    def reposition(self, handle: int, coord):
        if handle not in self._markers:
            self.logger.warning(f"Cannot reposition unknown marker {handle}")
            return
        self._markers[handle] = Coordinate(coord[0], coord[1])
        self.marker_repositioned.emit(handle, coord[0], coord[1])

    def remove(self, handle: int):
        if self._markers.pop(handle, None) is None:
            self.logger.warning(f"Cannot remove unknown marker {handle}")
            return
        self.marker_removed.emit(handle)

    def marker_position(self, handle: int):
        return self._markers.get(handle)

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    # QML slots

    @Slot(float, float)
    def map_clicked(self, lng, lat):
        self.logger.debug(f"Map clicked at {lng}, {lat}")
        self.clicked.emit(Coordinate(lng, lat))

    @Slot(int, float, float)
    def marker_dragged(self, handle, lng, lat):
        self.logger.debug(f"Marker {handle} dragged to {lng}, {lat}")
        self.dragged.emit(handle, Coordinate(lng, lat))
