#!/usr/bin/env python3
"""
Local Path Server for the Survey Path Planner
Serves the stored survey path to the web map and handles path file import/export
"""

import contextlib
import logging
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from surveypath.config import load_config, resolve_path
from surveypath.core.errors import PathRecordError, ReadFailure, WriteFailure
from surveypath.core.interpolation import DEFAULT_SPACING, interpolate, validate_spacing
from surveypath.core.path_record import PathRecord
from surveypath.core.path_store import DEFAULT_PATH_FILE, PathStore

SERVER_NAME = "Survey Path Server"
SERVER_VERSION = "1.0.0"

logger = logging.getLogger("SURVEY.PathServer")


class PathFileRequest(BaseModel):
    file_path: str


def create_app(config: Optional[dict] = None) -> FastAPI:
    """Build the path server for the given configuration."""
    if config is None:
        config = load_config()

    storage_config = config.get("storage", {})
    store = PathStore(
        resolve_path(storage_config.get("data_dir", "data")),
        storage_config.get("path_file", DEFAULT_PATH_FILE),
    )
    spacing = validate_spacing(config.get("path", {}).get("spacing", DEFAULT_SPACING))

    # Startup and shutdown events
    @contextlib.asynccontextmanager
    async def lifespan(app):
        logger.info(f"{SERVER_NAME} starting up...")
        logger.info(f"Path file: {store.path_file}")
        yield
        logger.info(f"{SERVER_NAME} shut down")

    app = FastAPI(title=SERVER_NAME, version=SERVER_VERSION, lifespan=lifespan)
    app.state.config = config
    app.state.store = store

    # Enable CORS for the web map
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def with_samples(record: PathRecord) -> PathRecord:
        # Collection points are always derived from the waypoints
        return PathRecord(
            version=record.version,
            waypoints=record.waypoints,
            samples=interpolate(record.waypoints, spacing),
        )

    async def save(record: PathRecord):
        try:
            await store.save_path(record)
        except WriteFailure as e:
            logger.error(f"Error saving path: {e.message}")
            raise HTTPException(status_code=500, detail=e.to_payload())

    @app.get("/api/info")
    async def api_info():
        """API information endpoint"""
        default_home = config.get("default_home_position", {
            "latitude": 2.94575,
            "longitude": 101.87513,
            "zoom": 18
        })
        return {
            "name": f"{SERVER_NAME} API",
            "version": SERVER_VERSION,
            "spacing": spacing,
            "path_file": str(store.path_file),
            "default_home_position": default_home,
        }

    @app.get("/api/path")
    async def get_path():
        """Stored path as GeoJSON; an unreadable file gives the default path"""
        try:
            record = await store.read_path()
        except ReadFailure as e:
            logger.error(f"Error reading stored path, serving default: {e.message}")
            record = PathRecord.default()
        return record.to_geojson()

    @app.put("/api/path")
    async def put_path(document: dict = Body(...)):
        """Validate and store a path record"""
        try:
            record = with_samples(PathRecord.from_geojson(document))
        except PathRecordError as e:
            logger.warning(f"Rejected path record: {e.message}")
            raise HTTPException(status_code=400, detail=e.to_payload())

        await save(record)
        logger.info(f"Path stored: {len(record.waypoints)} waypoints, {len(record.samples)} collection points")
        return record.to_geojson()

    @app.post("/api/path/import")
    async def import_path(request: PathFileRequest):
        """Replace the stored path with the one in request.file_path"""
        if not Path(request.file_path).is_file():
            missing = ReadFailure(f"Path file not found: {request.file_path}", request.file_path)
            raise HTTPException(status_code=404, detail=missing.to_payload())

        try:
            record = with_samples(await store.import_path(request.file_path))
        except ReadFailure as e:
            logger.error(f"Error importing path: {e.message}")
            raise HTTPException(status_code=400, detail=e.to_payload())

        await save(record)
        logger.info(f"Path imported from {request.file_path}")
        return record.to_geojson()

    @app.post("/api/path/export")
    async def export_path(request: PathFileRequest):
        """Write the stored path to request.file_path"""
        try:
            record = await store.read_path()
            await store.export_path(record, request.file_path)
        except (ReadFailure, WriteFailure) as e:
            logger.error(f"Error exporting path: {e.message}")
            raise HTTPException(status_code=500, detail=e.to_payload())

        logger.info(f"Path exported to {request.file_path}")
        return {"success": True, "file_path": request.file_path}

    return app


def main():
    from surveypath.main import setup_global_logging

    config = load_config()
    setup_global_logging(config)

    map_config = config.get("map_server", {})
    host = map_config.get("host", "127.0.0.1")
    port = map_config.get("port", 8081)

    # Run the server using configured host and port
    logger.info(f"Starting {SERVER_NAME} on http://{host}:{port}")
    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
