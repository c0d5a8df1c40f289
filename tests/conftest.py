import asyncio

import pytest
from PySide6.QtCore import QCoreApplication, QObject, Signal

from surveypath.core.path_model import PathModel
from surveypath.core.path_store import PathStore


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def store(tmp_path):
    return PathStore(tmp_path / "data", "path.geojson")


@pytest.fixture
def model(qapp, store):
    return PathModel(store, {"path": {"spacing": 50}})


@pytest.fixture
def loaded_model(model):
    asyncio.run(model.load())
    return model


class FakeMarkerBackend(QObject):
    """Marker backend recording every primitive call."""

    clicked = Signal(object)
    dragged = Signal(object, object)

    def __init__(self):
        super().__init__()
        self.calls = []
        self.live = {}
        self._next = 0

    def create(self, coord, draggable):
        self._next += 1
        handle = f"marker-{self._next}"
        self.live[handle] = tuple(coord)
        self.calls.append(("create", handle, tuple(coord), draggable))
        return handle

    def reposition(self, handle, coord):
        self.live[handle] = tuple(coord)
        self.calls.append(("reposition", handle, tuple(coord)))

    def remove(self, handle):
        del self.live[handle]
        self.calls.append(("remove", handle))


@pytest.fixture
def marker_backend(qapp):
    return FakeMarkerBackend()
