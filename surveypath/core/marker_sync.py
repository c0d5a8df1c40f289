# core/marker_sync.py

import logging
from typing import List

from PySide6.QtCore import QObject, Slot

from surveypath.core.errors import PathError
from surveypath.core.geodesy import Coordinate


class MarkerSyncLayer(QObject):
    """Keeps one draggable marker per waypoint, in waypoint order.

    The backend draws the markers and reports gestures. It must provide
    create(coord, draggable) -> handle, reposition(handle, coord),
    remove(handle) and the Qt signals clicked(coord) and dragged(handle, coord).
    """

    def __init__(self, model, backend):
        super().__init__()
        self.model = model
        self.backend = backend
        self.logger = logging.getLogger("SURVEY.MarkerSync")

        self._markers = []
        self._positions: List[Coordinate] = []

        self._setup_connections()

    def _setup_connections(self):
        # Model -> markers
        self.model.waypoints_reset.connect(self.on_waypoints_reset)
        self.model.waypoint_added.connect(self.on_waypoint_added)
        self.model.waypoint_moved.connect(self.on_waypoint_moved)

        # Gestures -> model
        self.backend.clicked.connect(self.on_map_clicked)
        self.backend.dragged.connect(self.on_marker_dragged)

    @property
    def markers(self) -> list:
        return list(self._markers)

    def positions(self) -> List[Coordinate]:
        """Positions of the markers, in marker order."""
        return list(self._positions)

    # Model signal handlers

    @Slot(object)
    def on_waypoints_reset(self, waypoints):
        for handle in self._markers:
            self.backend.remove(handle)
        self._markers = []
        self._positions = []

        for coord in waypoints:
            self._create_marker(coord)
        self.logger.debug(f"Rebuilt {len(self._markers)} markers")

    @Slot(int, object)
    def on_waypoint_added(self, index, coord):
        if index != len(self._markers):
            self.logger.warning(f"Marker set out of step: waypoint {index} added with {len(self._markers)} markers")
        self._create_marker(coord)

    @Slot(int, object)
    def on_waypoint_moved(self, index, coord):
        handle = self._markers[index]
        self.backend.reposition(handle, coord)
        self._positions[index] = Coordinate(coord[0], coord[1])

    def _create_marker(self, coord):
        handle = self.backend.create(coord, True)
        self._markers.append(handle)
        self._positions.append(Coordinate(coord[0], coord[1]))

    # Gesture handlers

    @Slot(object)
    def on_map_clicked(self, coord):
        try:
            self.model.add_waypoint(coord)
        except PathError as e:
            self.logger.warning(f"Ignoring map click at {coord}: {e.message}")

    @Slot(object, object)
    def on_marker_dragged(self, handle, coord):
        try:
            index = self._markers.index(handle)
        except ValueError:
            self.logger.warning(f"Drag from unknown marker {handle!r} ignored")
            return

        try:
            self.model.move_waypoint(index, coord)
        except PathError as e:
            self.logger.warning(f"Ignoring drag of marker {index}: {e.message}")
            # Put the marker back where the waypoint still is
            self.backend.reposition(handle, self._positions[index])
