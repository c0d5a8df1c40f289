import asyncio
import json

import pytest

from surveypath.core.errors import ReadFailure, WriteFailure
from surveypath.core.path_record import PathRecord
from surveypath.core.path_store import PathStore


def _record(*waypoints):
    return PathRecord(waypoints=list(waypoints), samples=list(waypoints))


def test_missing_file_reads_as_default_record(store):
    assert asyncio.run(store.read_path()) == PathRecord.default()


def test_corrupt_file_raises_read_failure(store):
    store.path_file.parent.mkdir(parents=True)
    store.path_file.write_text("not geojson at all")

    with pytest.raises(ReadFailure) as excinfo:
        asyncio.run(store.read_path())
    assert excinfo.value.file_path == str(store.path_file)


def test_unreadable_file_raises_read_failure(store):
    # A directory where the file should be
    store.path_file.mkdir(parents=True)

    with pytest.raises(ReadFailure):
        asyncio.run(store.read_path())


def test_save_then_read(store):
    record = _record((1.5, 2.5), (3.25, 4.125))
    asyncio.run(store.save_path(record))

    assert asyncio.run(store.read_path()) == record
    # No temporary files are left behind
    assert [p.name for p in store.path_file.parent.iterdir()] == ["path.geojson"]


def test_last_issued_save_wins(store):
    first = _record((0, 0))
    second = _record((1, 1), (2, 2))

    async def save_both():
        await asyncio.gather(store.save_path(first), store.save_path(second))

    asyncio.run(save_both())

    assert asyncio.run(store.read_path()) == second
    assert [p.name for p in store.path_file.parent.iterdir()] == ["path.geojson"]


def test_unwritable_location_raises_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    store = PathStore(blocker / "data")

    with pytest.raises(WriteFailure):
        asyncio.run(store.save_path(PathRecord.default()))


def test_export_then_import(store, tmp_path):
    record = _record((101.87513, 2.94575), (101.876, 2.946))
    target = tmp_path / "exports" / "survey.geojson"

    asyncio.run(store.export_path(record, str(target)))

    assert json.loads(target.read_text())["features"][1]["geometry"]["type"] == "LineString"
    assert "\n" in target.read_text()
    assert asyncio.run(store.import_path(str(target))) == record


def test_import_missing_file_raises_read_failure(store, tmp_path):
    with pytest.raises(ReadFailure, match="not found"):
        asyncio.run(store.import_path(tmp_path / "missing.geojson"))


def test_import_invalid_record_raises_read_failure(store, tmp_path):
    source = tmp_path / "bad.geojson"
    source.write_text(json.dumps({"type": "FeatureCollection", "features": []}))

    with pytest.raises(ReadFailure, match="Missing Version"):
        asyncio.run(store.import_path(source))
