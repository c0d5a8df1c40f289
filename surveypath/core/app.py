# core/app.py
import asyncio
import logging

from PySide6.QtCore import QCoreApplication, QObject, Slot, Signal, Property

from surveypath.config import resolve_path
from surveypath.core.errors import PathError
from surveypath.core.marker_sync import MarkerSyncLayer
from surveypath.core.path_model import PathModel
from surveypath.core.path_store import DEFAULT_PATH_FILE, PathStore
from surveypath.maps.map_bridge import MapBridge


class App(QObject):
    # Signal to notify QML of import/export/generate results
    operation_result = Signal(str, bool, str)  # operation, success, message
    # Signal to notify QML of path state changes (loaded, dirty, saving)
    path_state_changed = Signal(str)
    # Signal to notify QML when the collection point spacing changes
    spacing_changed = Signal(float)

    def __init__(self, config):
        super().__init__()
        self.config = config
        self._tasks = set()
        self._quit_task = None

        # Get logger using standard Python logging
        self.logger = logging.getLogger("SURVEY.App")
        self.logger.info("Survey Path Planner starting...")

        storage_config = self.config.get("storage", {})
        data_dir = resolve_path(storage_config.get("data_dir", "data"))
        path_file = storage_config.get("path_file", DEFAULT_PATH_FILE)

        # Initialize components in dependency order
        self.store = PathStore(data_dir, path_file)
        self.model = PathModel(self.store, self.config)
        self._map_bridge = MapBridge(self.config)
        self.marker_sync = MarkerSyncLayer(self.model, self._map_bridge)

        # Set up component connections
        self._setup_connections()

        self.logger.info(f"Path file: {self.store.path_file}")

    # QML Property to expose the map collaborator
    @Property(QObject, constant=True)
    def map_bridge(self):
        return self._map_bridge

    @Property(float, notify=spacing_changed)
    def spacing(self):
        return self.model.spacing

    def _setup_connections(self):
        """Set up signal connections between components."""
        self.model.source_changed.connect(self._map_bridge.set_source)
        self.model.fit_bounds_requested.connect(self._map_bridge.fit_bounds)
        self.model.state_changed.connect(self.path_state_changed)

    async def start(self):
        """Load the stored path and draw it."""
        self.logger.info("Loading stored path...")
        await self.model.load()
        self.logger.info("Survey Path Planner ready")

    def stop(self):
        """Cancel outstanding operations."""
        self.logger.info("Stopping Survey Path Planner...")
        for task in list(self._tasks):
            task.cancel()
        self.logger.info("All operations stopped.")

    async def shutdown(self):
        """Finish outstanding operations and saves."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self.model.wait_for_saves()

    @Slot()
    def quit(self):
        """Drain outstanding operations and saves, then leave the event loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.shutdown())
            QCoreApplication.quit()
            return None

        # Not tracked in _tasks: shutdown() gathers those
        self._quit_task = loop.create_task(self._shutdown_and_quit())
        return self._quit_task

    async def _shutdown_and_quit(self):
        self.logger.info("Saving outstanding changes before exit...")
        await self.shutdown()
        self.logger.info("Outstanding changes saved")
        QCoreApplication.quit()

    # QML slots

    @Slot(str)
    def import_path(self, file_path):
        self._spawn(self._run_operation("import", self.model.import_path(file_path)))

    @Slot(str)
    def export_path(self, file_path):
        self._spawn(self._run_operation("export", self.model.export_path(file_path)))

    @Slot()
    def generate_path(self):
        self._spawn(self._run_operation("generate", self.model.reorder()))

    @Slot(float)
    def set_spacing(self, spacing):
        try:
            self.model.set_spacing(spacing)
        except PathError as e:
            self.logger.error(f"Invalid spacing {spacing}: {e.message}")
            self.operation_result.emit("spacing", False, e.message)
            return
        self.spacing_changed.emit(self.model.spacing)
        self.operation_result.emit("spacing", True, f"Spacing set to {self.model.spacing} m")

    # Helpers

    async def _run_operation(self, name, coro) -> bool:
        try:
            success = await coro
        except PathError as e:
            self.logger.error(f"Path {name} failed: {e.message}")
            self.operation_result.emit(name, False, e.message)
            return False

        if success:
            message = f"Path {name} completed ({len(self.model.line_coords)} waypoints)"
            self.logger.info(message)
        else:
            message = f"Path {name} failed, see log for details"
        self.operation_result.emit(name, success, message)
        return success

    def _spawn(self, coro):
        """Run an operation on the event loop, keeping a reference until it finishes."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running: complete the operation now
            asyncio.run(coro)
            return

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
