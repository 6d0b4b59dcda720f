"""Dump and download API endpoints."""

import os
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from starlette.types import Receive, Scope, Send

from ..dependencies import get_janitor, get_orchestrator
from ..exceptions import ArchiveNotFoundError, to_api_error
from ..models import DumpRequest, DumpResponse
from mongo_backup.backup import BackupError, BackupOrchestrator, DownloadJanitor
from mongo_backup._utils import logger

router = APIRouter(tags=["backup"])


class ArchiveResponse(FileResponse):
    """Serve an archive and hand it to the janitor once the transfer ends.

    Removal is scheduled whether the body was sent completely or the client
    went away mid-transfer.
    """

    def __init__(self, path: Path, filename: str, janitor: DownloadJanitor, stat_result: os.stat_result):
        super().__init__(
            path=path,
            media_type="application/zip",
            filename=filename,
            stat_result=stat_result,
        )
        self.archive_path = Path(path)
        self.janitor = janitor

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.janitor.schedule(self.archive_path)


@router.post("/dump", response_model=DumpResponse)
async def dump_database(
    body: Optional[DumpRequest] = None,
    orchestrator: BackupOrchestrator = Depends(get_orchestrator),
) -> DumpResponse:
    """Dump a database and prepare a zip archive for download.

    The archive can be fetched once from the returned ``downloadUrl``.
    """
    database = body.database if body else None

    try:
        result = await orchestrator.backup(database)
    except BackupError as e:
        logger.error(f"Error dumping database {database!r}: {e.message}: {e.detail}")
        raise to_api_error(e, "Failed to backup database") from e

    return DumpResponse(
        message=f'Database "{result.database}" backed up successfully',
        path=result.staging_path,
        download_url=f"/download/{result.archive_name}",
    )


@router.get("/download/{filename}")
async def download_archive(
    filename: str,
    janitor: DownloadJanitor = Depends(get_janitor),
) -> FileResponse:
    """Download a backup archive.

    The archive is deleted shortly after the transfer ends.
    """
    archive_path = janitor.resolve(filename)

    if archive_path is None:
        raise ArchiveNotFoundError(filename)

    # A deferred deletion may have removed it since resolve()
    try:
        stat_result = os.stat(archive_path)
    except FileNotFoundError:
        raise ArchiveNotFoundError(filename)

    return ArchiveResponse(archive_path, filename, janitor, stat_result)
