"""Dependency injection for FastAPI."""

from fastapi import Request
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mongo_backup.backup import BackupOrchestrator, DownloadJanitor


async def get_orchestrator(request: Request) -> "BackupOrchestrator":
    """Get BackupOrchestrator instance from app state."""
    return request.app.state.orchestrator


async def get_janitor(request: Request) -> "DownloadJanitor":
    """Get DownloadJanitor instance from app state."""
    return request.app.state.janitor
