"""Database listing endpoint."""

from fastapi import APIRouter, Depends

from ..dependencies import get_orchestrator
from ..exceptions import to_api_error
from ..models import DatabaseListResponse
from mongo_backup.backup import BackupError, BackupOrchestrator
from mongo_backup._utils import logger

router = APIRouter(tags=["databases"])


@router.get("/databases", response_model=DatabaseListResponse)
async def list_databases(
    orchestrator: BackupOrchestrator = Depends(get_orchestrator),
) -> DatabaseListResponse:
    """List user databases of the MongoDB container."""
    try:
        databases = await orchestrator.list_databases()
    except BackupError as e:
        logger.error(f"Error listing databases: {e.message}: {e.detail}")
        raise to_api_error(e, "Failed to list databases") from e

    return DatabaseListResponse(databases=databases)
