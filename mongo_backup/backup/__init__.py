"""Backup and restore core: commands, staging, archives and uploads."""

from .errors import (
    ArchiveError,
    BackupError,
    ExecutionError,
    FilesystemError,
    NotFoundError,
    ValidationError,
)
from .intake import UploadIntake
from .janitor import DownloadJanitor
from .orchestrator import BackupOrchestrator, MongoCommands
from .staging import StagingStore

__all__ = [
    "ArchiveError",
    "BackupError",
    "BackupOrchestrator",
    "DownloadJanitor",
    "ExecutionError",
    "FilesystemError",
    "MongoCommands",
    "NotFoundError",
    "StagingStore",
    "UploadIntake",
    "ValidationError",
]
