"""Upload pipeline: destination resolution, collision handling, streaming to disk."""
from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import aiofiles
from fastapi import UploadFile

from ....observability import get_logger
from ....observability.metrics import UPLOAD_BYTES_TOTAL, UPLOADS_TOTAL
from ...errors import InvalidPathError, UploadFailedError
from ...paths import PathResolver
from ...storage import Storage
from ..files import is_reserved_name, sanitize_name

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class UploadResult:
    """Where an accepted upload ended up."""
    filename: str
    path: str
    size: int


def timestamped_name(name: str, epoch_millis: int) -> str:
    """Insert ``_<epoch_millis>`` between the base name and the extension."""
    base, ext = os.path.splitext(name)
    return f'{base}_{epoch_millis}{ext}'


class UploadPipeline:
    """Stores incoming files beneath the storage root.

    A name collision is resolved once by inserting the current time in
    milliseconds; the file is then created exclusively, so an upload never
    overwrites an existing entry. When the timestamped name is taken as well
    the upload fails instead of retrying.
    """

    def __init__(
        self,
        resolver: PathResolver,
        storage: Storage,
        *,
        clock: Callable[[], float] = time.time,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.resolver = resolver
        self.storage = storage
        self._clock = clock
        self.chunk_size = chunk_size

    def prepare_target(self, destination_subpath: str, declared_name: str | None) -> Path:
        """Resolve and create the destination directory and pick the final file path.

        Raises:
            UploadFailedError: Unsafe destination, unusable name, or directory
                creation failure. Nothing has been written when this is raised.
        """
        try:
            target_dir = self.resolver.resolve(destination_subpath)
        except InvalidPathError as e:
            raise UploadFailedError(
                'Upload failed: Invalid upload directory specified (path safety check failed)',
                details=e.details,
                path=destination_subpath,
            )

        safe_name = sanitize_name(declared_name or '')
        if is_reserved_name(safe_name):
            raise UploadFailedError('Upload failed: Invalid file name', details=declared_name)

        try:
            self.storage.ensure_dir(target_dir)
        except OSError as e:
            raise UploadFailedError(
                f'Upload failed: Failed to create target directory: {e.strerror or e}',
                path=destination_subpath,
            )

        final = target_dir / safe_name
        if self.storage.exists(final):
            renamed = timestamped_name(safe_name, int(self._clock() * 1000))
            logger.warning('upload_renamed_on_collision', original=safe_name, renamed=renamed)
            final = target_dir / renamed
        return final

    async def accept(self, destination_subpath: str, upload: UploadFile) -> UploadResult:
        """Persist ``upload`` into ``destination_subpath``.

        Args:
            destination_subpath: Directory relative to the storage root
            upload: Incoming multipart file

        Returns:
            UploadResult with the final file name and relative path
        """
        final = await asyncio.to_thread(self.prepare_target, destination_subpath, upload.filename)

        size = 0
        try:
            async with aiofiles.open(final, 'xb') as out:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    await out.write(chunk)
                    size += len(chunk)
        except FileExistsError:
            UPLOADS_TOTAL.labels(outcome='failed').inc()
            raise UploadFailedError(
                f"Upload failed: '{final.name}' already exists",
                path=destination_subpath,
            )
        except OSError as e:
            UPLOADS_TOTAL.labels(outcome='failed').inc()
            logger.error('upload_write_failed', path=str(final.name), error=str(e))
            raise UploadFailedError(f'Upload failed: {e.strerror or e}', path=destination_subpath)

        UPLOADS_TOTAL.labels(outcome='stored').inc()
        UPLOAD_BYTES_TOTAL.inc(size)
        rel_path = self.resolver.relative(final)
        logger.info('file_uploaded', path=rel_path, size=size)
        return UploadResult(filename=final.name, path=rel_path, size=size)
