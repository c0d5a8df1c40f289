# core/errors.py
"""Error types raised by the path core."""

from typing import Optional


class PathError(Exception):
    code = "PATH_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"success": False, "error_code": self.code, "error": self.message}


class InvalidSpacing(PathError, ValueError):
    code = "INVALID_SPACING"


class IndexOutOfRange(PathError, IndexError):
    code = "INDEX_OUT_OF_RANGE"


class EmptyPath(PathError, ValueError):
    code = "EMPTY_PATH"


class InvalidCoordinate(PathError, ValueError):
    code = "INVALID_COORDINATE"


class PathNotLoaded(PathError, RuntimeError):
    code = "PATH_NOT_LOADED"


class PathRecordError(PathError, ValueError):
    """Raised when a GeoJSON document is not a valid path record."""
    code = "INVALID_PATH_RECORD"


class PersistenceError(PathError):
    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message)
        self.file_path = file_path

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.file_path is not None:
            payload["file_path"] = self.file_path
        return payload


class ReadFailure(PersistenceError):
    code = "READ_FAILURE"


class WriteFailure(PersistenceError):
    code = "WRITE_FAILURE"
