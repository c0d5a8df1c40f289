# core/path_store.py

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

from surveypath.core.errors import PathRecordError, ReadFailure, WriteFailure
from surveypath.core.path_record import PathRecord

DEFAULT_PATH_FILE = "path.geojson"


class PathStore:
    """File persistence for path records.

    The application copy lives in `data_dir`; import/export work on any file
    the operator picks. Every write goes to a temporary file that then
    atomically replaces the target, so concurrent writers overwrite each
    other instead of interleaving.
    """

    def __init__(self, data_dir: Union[str, Path], file_name: str = DEFAULT_PATH_FILE):
        self.data_dir = Path(data_dir)
        self.file_name = file_name
        self.logger = logging.getLogger("SURVEY.PathStore")

        # Save ordering: a save older than the last committed one is dropped
        self._issued_saves = 0
        self._committed_save = 0
        self._commit_lock = asyncio.Lock()

    @property
    def path_file(self) -> Path:
        return self.data_dir / self.file_name

    async def read_path(self) -> PathRecord:
        """Read the application copy of the path.

        A missing file is not an error: the default (empty) record is returned.

        Raises:
            ReadFailure: if the file exists but cannot be read or parsed.
        """
        self.logger.debug(f"Reading path from {self.path_file}")
        return await self._read_record(self.path_file, missing_ok=True)

    async def save_path(self, record: PathRecord, sequence: Optional[int] = None) -> None:
        """Write the application copy of the path.

        `sequence` orders overlapping saves: once a save has been written, any
        save with a lower sequence is dropped. Without one, saves are ordered
        by when they start.

        Raises:
            WriteFailure: if the file cannot be written.
        """
        if sequence is None:
            sequence = self._issued_saves + 1
        self._issued_saves = max(self._issued_saves, sequence)
        text = record.dumps()

        self.logger.debug(f"Saving path #{sequence} to {self.path_file}")
        await self._write_text(self.path_file, text, sequence)

    async def import_path(self, file_path: Union[str, Path]) -> PathRecord:
        """Read a path record from an operator-selected file.

        Raises:
            ReadFailure: if the file is missing, unreadable or not a path record.
        """
        self.logger.debug(f"Importing from: {file_path}")
        return await self._read_record(Path(file_path), missing_ok=False)

    async def export_path(self, record: PathRecord, file_path: Union[str, Path]) -> None:
        """Write a path record to an operator-selected file.

        Raises:
            WriteFailure: if the file cannot be written.
        """
        self.logger.debug(f"Exporting to: {file_path}")
        await self._write_text(Path(file_path), record.dumps(indent=2))

    async def _read_record(self, file_path: Path, missing_ok: bool) -> PathRecord:
        try:
            async with aiofiles.open(file_path, 'r', encoding='utf-8') as f:
                text = await f.read()
        except FileNotFoundError:
            if missing_ok:
                self.logger.warning(f"Unable to find path file {file_path}, using default path")
                return PathRecord.default()
            raise ReadFailure(f"Path file not found: {file_path}", str(file_path))
        except (OSError, UnicodeDecodeError) as e:
            raise ReadFailure(f"Unable to read path file {file_path}: {e}", str(file_path))

        try:
            return PathRecord.loads(text)
        except PathRecordError as e:
            raise ReadFailure(f"{file_path}: {e.message}", str(file_path))

    async def _write_text(self, file_path: Path, text: str, sequence: Optional[int] = None) -> None:
        tmp_path = file_path.parent / f".{file_path.name}.{uuid.uuid4().hex}.tmp"
        try:
            await aiofiles.os.makedirs(file_path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(text)

            # Stale check and replace must not interleave with another commit
            async with self._commit_lock:
                if sequence is not None and sequence < self._committed_save:
                    self.logger.debug(f"Dropping stale save #{sequence}, #{self._committed_save} already written")
                    await aiofiles.os.remove(tmp_path)
                    return

                await aiofiles.os.replace(tmp_path, file_path)
                if sequence is not None:
                    self._committed_save = max(self._committed_save, sequence)
        except OSError as e:
            await self._discard(tmp_path)
            raise WriteFailure(f"Unable to write path file {file_path}: {e}", str(file_path))

    async def _discard(self, tmp_path: Path) -> None:
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.debug(f"Could not remove temporary file {tmp_path}: {e}")
