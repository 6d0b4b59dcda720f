"""Restore API endpoint."""

from typing import Dict, List

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..dependencies import get_orchestrator
from ..exceptions import BadRequestError, to_api_error
from ..models import RestoreResponse
from mongo_backup.backup import BackupError, BackupOrchestrator, ValidationError
from mongo_backup.backup.intake import OVERRIDE_PREFIX, discard_uploads
from mongo_backup.backup.models import UploadedFile
from mongo_backup.backup.staging import validate_database_name
from mongo_backup._utils import logger

router = APIRouter(tags=["restore"])


@router.post("/restore", response_model=RestoreResponse)
async def restore_database(
    request: Request,
    orchestrator: BackupOrchestrator = Depends(get_orchestrator),
) -> RestoreResponse:
    """Restore a database from uploaded dump files.

    Multipart form fields:
        database: Target database name
        <any file field>: One or more dump files (the web page uses ``files``)
        filename_<field>: Optional replacement name for files of that field
    """
    try:
        form = await request.form()
    except StarletteHTTPException as e:
        logger.error(f"Malformed restore form: {e.detail}")
        raise BadRequestError("Invalid multipart form", str(e.detail)) from e

    uploads: List[UploadedFile] = []
    database = None

    try:
        database = form.get("database")
        if not isinstance(database, str):
            database = None
        name_overrides: Dict[str, str] = {
            key: value
            for key, value in form.multi_items()
            if key.startswith(OVERRIDE_PREFIX) and isinstance(value, str)
        }
        parts = [(key, value) for key, value in form.multi_items() if isinstance(value, UploadFile)]

        validate_database_name(database)
        if not parts:
            raise ValidationError("Backup files are required")

        for field_name, part in parts:
            uploads.append(await orchestrator.intake.spool(field_name, part.filename, part))

        result = await orchestrator.restore(database, uploads, name_overrides)
    except BackupError as e:
        logger.error(f"Error restoring database {database!r}: {e.message}: {e.detail}")
        discard_uploads(uploads)
        raise to_api_error(e, "Failed to restore database") from e
    finally:
        await form.close()

    return RestoreResponse(message=f'Database "{result.database}" restored successfully')
