# core/path_model.py

import asyncio
import logging
from enum import Enum
from typing import List, Optional, Sequence

from PySide6.QtCore import QObject, Signal

from surveypath.core.errors import (
    EmptyPath,
    IndexOutOfRange,
    PathNotLoaded,
    ReadFailure,
    WriteFailure,
)
from surveypath.core.geodesy import Coordinate, as_coordinate, as_coordinates, path_length
from surveypath.core.interpolation import DEFAULT_SPACING, interpolate, validate_spacing
from surveypath.core.path_ordering import reorder
from surveypath.core.path_record import DEFAULT_VERSION, PathRecord
from surveypath.core.path_store import PathStore

PATH_SOURCE_ID = "path"
DEFAULT_FIT_PADDING = 50  # pixels


class PathState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    DIRTY = "dirty"
    SAVING = "saving"


class PathModel(QObject):
    """Owns the waypoint sequence and the collection points derived from it.

    After every change the collection points equal
    interpolate(line_coords, spacing). Collaborators (marker layer, map source,
    persistence) follow the model through its signals.
    """

    # Marker set signals
    waypoints_reset = Signal(object)          # [Coordinate], rebuild every marker
    waypoint_added = Signal(int, object)      # index, coordinate
    waypoint_moved = Signal(int, object)      # index, coordinate
    # Map signals
    source_changed = Signal(str, object)      # source_id, geojson record
    fit_bounds_requested = Signal(object, int)  # [Coordinate], padding_px
    state_changed = Signal(str)               # PathState value

    def __init__(self, store: PathStore, config: Optional[dict] = None):
        super().__init__()
        self.store = store
        self.config = config or {}
        self.logger = logging.getLogger("SURVEY.PathModel")

        path_config = self.config.get("path", {})
        self._spacing = validate_spacing(path_config.get("spacing", DEFAULT_SPACING))
        self._default_version = path_config.get("version", DEFAULT_VERSION)
        self.fit_padding = int(path_config.get("fit_bounds_padding", DEFAULT_FIT_PADDING))

        self._version = self._default_version
        self._line_coords: List[Coordinate] = []
        self._point_coords: List[Coordinate] = []
        self._state = PathState.UNINITIALIZED

        # Every edit bumps the revision; saves carry the revision they were taken at
        self._revision = 0
        self._saved_revision = 0
        self._saves_in_flight = 0
        self._pending_saves = set()

        self.logger.info(f"Path Model initialized (spacing {self._spacing} m)")

    # Read-only views

    @property
    def line_coords(self) -> List[Coordinate]:
        return list(self._line_coords)

    @property
    def point_coords(self) -> List[Coordinate]:
        return list(self._point_coords)

    @property
    def spacing(self) -> float:
        return self._spacing

    @property
    def state(self) -> PathState:
        return self._state

    def to_record(self) -> PathRecord:
        return PathRecord(
            version=self._version,
            waypoints=list(self._line_coords),
            samples=list(self._point_coords),
        )

    # Loading

    async def load(self):
        """Load the stored path, falling back to an empty path if it cannot be read."""
        try:
            record = await self.store.read_path()
        except ReadFailure as e:
            self.logger.error(f"Failed to read stored path, starting with an empty path: {e}")
            record = PathRecord(version=self._default_version)

        self._version = record.version
        self._line_coords = list(record.waypoints)
        self._point_coords = interpolate(self._line_coords, self._spacing)
        if record.samples and record.samples != self._point_coords:
            self.logger.info("Stored collection points were recalculated for the current spacing")

        self._saved_revision = self._revision
        self._set_state(PathState.LOADED)
        self.logger.info(f"Path loaded: {len(self._line_coords)} waypoints, {len(self._point_coords)} collection points")

        self.waypoints_reset.emit(self.line_coords)
        self._publish_source()
        if self._line_coords:
            self.fit_bounds_requested.emit(self.line_coords, self.fit_padding)

    # Mutations

    def add_waypoint(self, coord) -> int:
        """Append a waypoint and return its index."""
        self._require_loaded()
        coord = as_coordinate(coord)

        new_line = self._line_coords + [coord]
        new_points = interpolate(new_line, self._spacing)

        self._line_coords = new_line
        self._point_coords = new_points
        index = len(new_line) - 1
        self._mark_dirty()

        self.logger.debug(f"Waypoint {index} added at {coord}")
        self.waypoint_added.emit(index, coord)
        self._publish_source()
        self.request_save()
        return index

    def move_waypoint(self, index: int, coord):
        """Replace the waypoint at `index` with a new position."""
        self._require_loaded()
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._line_coords):
            raise IndexOutOfRange(f"Waypoint index {index} out of range (0..{len(self._line_coords) - 1})")
        coord = as_coordinate(coord)

        new_line = list(self._line_coords)
        new_line[index] = coord
        new_points = interpolate(new_line, self._spacing)

        self._line_coords = new_line
        self._point_coords = new_points
        self._mark_dirty()

        self.logger.debug(f"Waypoint {index} moved to {coord}")
        self.waypoint_moved.emit(index, coord)
        self._publish_source()
        self.request_save()

    async def replace_all(self, new_waypoints: Sequence) -> bool:
        """Replace every waypoint, rebuild the markers, and save.

        Returns:
            bool: True if the new path was saved, False if saving failed.

        Raises:
            EmptyPath: if `new_waypoints` is empty.
        """
        self._require_loaded()
        new_line = as_coordinates(new_waypoints)
        if not new_line:
            raise EmptyPath("Cannot replace the path with an empty set of waypoints")
        new_points = interpolate(new_line, self._spacing)

        self._line_coords = new_line
        self._point_coords = new_points
        self._mark_dirty()

        self.logger.info(f"Path replaced: {len(new_line)} waypoints, {len(new_points)} collection points")
        self.waypoints_reset.emit(self.line_coords)
        self._publish_source()
        return await self.save()

    async def reorder(self) -> bool:
        """Reorder the waypoints by nearest neighbour from the first one, then save."""
        self._require_loaded()
        before = path_length(self._line_coords)
        ordered = reorder(self._line_coords)
        self.logger.info(f"Generating path: {before:.1f} m -> {path_length(ordered):.1f} m")
        return await self.replace_all(ordered)

    def set_spacing(self, spacing):
        """Change the distance between collection points and recalculate them."""
        spacing = validate_spacing(spacing)
        if spacing == self._spacing:
            return

        new_points = interpolate(self._line_coords, spacing)
        self._spacing = spacing
        self.logger.info(f"Collection point spacing set to {spacing} m")

        if self._state == PathState.UNINITIALIZED:
            return

        self._point_coords = new_points
        self._mark_dirty()
        self._publish_source()
        self.request_save()

    # Import / export

    async def import_path(self, file_path: str) -> bool:
        """Replace the current path with the waypoints stored in `file_path`.

        Collection points are recalculated rather than taken from the file.

        Returns:
            bool: True if the path was imported and saved.

        Raises:
            EmptyPath: if the file holds no waypoints.
        """
        self._require_loaded()
        try:
            record = await self.store.import_path(file_path)
        except ReadFailure as e:
            self.logger.error(f"Failed to import path from {file_path}: {e}")
            return False

        saved = await self.replace_all(record.waypoints)
        self.fit_bounds_requested.emit(self.line_coords, self.fit_padding)
        self.logger.info(f"Path imported from {file_path}")
        return saved

    async def export_path(self, file_path: str) -> bool:
        """Write the current path to `file_path`."""
        self._require_loaded()
        try:
            await self.store.export_path(self.to_record(), file_path)
        except WriteFailure as e:
            self.logger.error(f"Failed to export path to {file_path}: {e}")
            return False

        self.logger.info(f"Path exported to {file_path}")
        return True

    # Saving

    async def save(self) -> bool:
        """Save the current path and wait for the write to finish."""
        return await self._save_record(self.to_record(), self._revision)

    def request_save(self):
        """Save the current path without waiting for it.

        The snapshot is taken now; a later save always supersedes it.
        """
        coro = self._save_record(self.to_record(), self._revision)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (scripts, tests): finish the write right away
            asyncio.run(coro)
            return

        task = loop.create_task(coro)
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    async def wait_for_saves(self):
        """Wait until every detached save has finished."""
        while self._pending_saves:
            await asyncio.gather(*list(self._pending_saves))

    async def _save_record(self, record: PathRecord, revision: int) -> bool:
        self._saves_in_flight += 1
        self._set_state(PathState.SAVING)
        try:
            await self.store.save_path(record, sequence=revision)
        except WriteFailure as e:
            self.logger.error(f"Failed to save path: {e}")
            return False
        else:
            self._saved_revision = max(self._saved_revision, revision)
            self.logger.debug(f"Path saved (revision {revision})")
            return True
        finally:
            self._saves_in_flight -= 1
            self._settle_state()

    # Helpers

    def _require_loaded(self):
        if self._state == PathState.UNINITIALIZED:
            raise PathNotLoaded("Path has not been loaded yet")

    def _mark_dirty(self):
        self._revision += 1
        self._set_state(PathState.DIRTY)

    def _set_state(self, state: PathState):
        if state != self._state:
            self._state = state
            self.state_changed.emit(state.value)

    def _settle_state(self):
        # Clean only once the newest edit is on disk and no save is running
        if self._saves_in_flight:
            return
        if self._saved_revision == self._revision:
            self._set_state(PathState.LOADED)
        else:
            self._set_state(PathState.DIRTY)

    def _publish_source(self):
        self.source_changed.emit(PATH_SOURCE_ID, self.to_record().to_geojson())
