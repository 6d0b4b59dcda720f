"""Accept uploaded restore files and move them into the staging area."""

import os
import uuid
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import aiofiles

from .._utils import logger
from .errors import FilesystemError, ValidationError
from .models import UploadedFile
from .staging import StagingStore, ensure_dir, validate_database_name
from .utils import flatten_filename

CHUNK_SIZE = 1024 * 1024
OVERRIDE_PREFIX = "filename_"


def resolve_filename(upload: UploadedFile, name_overrides: Mapping[str, str]) -> str:
    """Final base name for an uploaded file inside the staging directory.

    The override keyed ``filename_<field>`` wins over the client declared
    name. Directory components are always stripped.
    """
    override = name_overrides.get(f"{OVERRIDE_PREFIX}{upload.field_name}")
    return (
        flatten_filename(override)
        or flatten_filename(upload.original_name)
        or upload.temp_path.name
    )


def discard_uploads(uploads: Iterable[UploadedFile]) -> None:
    """Delete temporary upload files that still exist, ignoring errors."""
    for upload in uploads:
        try:
            upload.temp_path.unlink()
            logger.debug(f"Removed temporary upload: {upload.temp_path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove temporary upload {upload.temp_path}: {e}")


class UploadIntake:
    """Spool uploads to temporary files and relocate them for a restore."""

    def __init__(self, staging: StagingStore, uploads_dir: Union[str, Path]):
        self.staging = staging
        self.uploads_dir = Path(uploads_dir)

    async def spool(self, field_name: str, original_name: Optional[str], source: Any) -> UploadedFile:
        """Write an incoming upload stream to a temporary file.

        Args:
            field_name: Multipart field name
            original_name: Client declared file name
            source: Object with an async ``read(size)`` method (e.g. UploadFile)

        Returns:
            UploadedFile pointing at the temporary copy
        """
        ensure_dir(self.uploads_dir)
        temp_path = self.uploads_dir / uuid.uuid4().hex

        try:
            async with aiofiles.open(temp_path, "wb") as f:
                while True:
                    chunk = await source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await f.write(chunk)
        except OSError as e:
            discard_uploads([UploadedFile(field_name, original_name or "", temp_path)])
            raise FilesystemError(f"Failed to store upload {original_name}", detail=str(e)) from e

        logger.debug(f"Spooled upload {original_name!r} to {temp_path}")
        return UploadedFile(field_name=field_name, original_name=original_name or "", temp_path=temp_path)

    async def relocate(
        self,
        database: str,
        uploads: Sequence[UploadedFile],
        name_overrides: Optional[Mapping[str, str]] = None,
    ) -> List[str]:
        """Move every upload into the database's staging directory.

        Files of the same name already staged are overwritten. Relocation is
        not all-or-nothing: on failure the files moved so far stay in place
        and every remaining temporary file is deleted.

        Returns:
            Final file names in upload order

        Raises:
            ValidationError: Missing database or empty upload set
            FilesystemError: Directory creation or a move failed
        """
        database = validate_database_name(database)
        if not uploads:
            raise ValidationError("Backup files are required")
        name_overrides = name_overrides or {}

        staging_dir = self.staging.path_for(database)
        placed: List[str] = []

        try:
            self.staging.ensure_dir(staging_dir)
            for upload in uploads:
                filename = resolve_filename(upload, name_overrides)
                dest_path = staging_dir / filename
                try:
                    os.replace(upload.temp_path, dest_path)
                except OSError as e:
                    logger.error(f"Failed to move {upload.temp_path} to {dest_path}: {e}")
                    raise FilesystemError(f"Failed to move upload {filename}", detail=str(e)) from e
                placed.append(filename)
                logger.info(f"Staged restore file: {dest_path}")
        except FilesystemError:
            discard_uploads(uploads)
            raise

        return placed
