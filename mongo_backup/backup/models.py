"""Data models for backup/restore operations."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


@dataclass
class UploadedFile:
    """An uploaded file waiting in the uploads area.

    Attributes:
        field_name: Multipart field the file arrived in
        original_name: File name declared by the client
        temp_path: Server-assigned temporary location
    """

    field_name: str
    original_name: str
    temp_path: Path


class BackupResult(BaseModel):
    """Outcome of a completed dump + archive flow."""

    database: str
    staging_path: str = Field(..., description="Staging directory holding the dump")
    archive_name: str = Field(..., description="File name of the archive in the downloads area")
    size_bytes: int
    created_at: datetime


class RestoreResult(BaseModel):
    """Outcome of a completed intake + restore flow."""

    database: str
    staging_path: str
    files: List[str] = Field(default_factory=list, description="File names placed in the staging directory")
