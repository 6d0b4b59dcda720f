"""Build compressed archives from staging directories."""

import asyncio
import os
import zipfile
from pathlib import Path
from typing import Optional

from .._utils import logger
from .errors import ArchiveError
from .staging import ensure_dir

COMPRESSION_LEVEL = 9


def _write_zip(source_dir: Path, output_path: Path, root_name: str) -> None:
    with zipfile.ZipFile(
        output_path,
        "w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=COMPRESSION_LEVEL,
    ) as zf:
        zf.write(source_dir, arcname=root_name)
        for dirpath, dirnames, filenames in os.walk(source_dir):
            dirnames.sort()
            current = Path(dirpath)
            for name in dirnames:
                path = current / name
                zf.write(path, arcname=f"{root_name}/{path.relative_to(source_dir).as_posix()}")
            for name in sorted(filenames):
                path = current / name
                zf.write(path, arcname=f"{root_name}/{path.relative_to(source_dir).as_posix()}")


async def create_archive(
    source_dir: Path,
    output_path: Path,
    root_name: Optional[str] = None,
) -> int:
    """Create a zip archive from a directory tree.

    Every entry is placed under ``root_name`` (the source directory's name by
    default). Compression runs in a worker thread. When writing fails the
    partial archive is removed before the error propagates.

    Args:
        source_dir: Directory to archive
        output_path: Output .zip file path; its parent is created if missing
        root_name: Top-level directory name inside the archive

    Returns:
        Size of created archive in bytes

    Raises:
        ArchiveError: If the source is not a directory or writing fails
    """
    source_dir = Path(source_dir)
    output_path = Path(output_path)
    root_name = root_name or source_dir.name

    if not source_dir.is_dir():
        raise ArchiveError(
            f"Nothing to archive: {source_dir} is not a directory",
            detail=f"Staging directory not found: {source_dir}",
        )

    ensure_dir(output_path.parent)
    logger.info(f"Creating archive: {output_path}")

    try:
        await asyncio.to_thread(_write_zip, source_dir, output_path, root_name)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        logger.error(f"Failed to create archive {output_path}: {e}")
        try:
            output_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup_error:
            logger.warning(f"Failed to remove partial archive {output_path}: {cleanup_error}")
        raise ArchiveError(f"Failed to create archive {output_path.name}", detail=str(e)) from e

    archive_size = output_path.stat().st_size
    logger.info(f"Archive created: {archive_size:,} bytes")

    return archive_size
