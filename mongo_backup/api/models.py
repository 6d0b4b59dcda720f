"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class DumpRequest(BaseModel):
    database: Optional[str] = None


class DatabaseListResponse(BaseModel):
    success: bool = True
    databases: List[str]


class DumpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    path: str
    download_url: str = Field(..., alias="downloadUrl")


class RestoreResponse(BaseModel):
    success: bool = True
    message: str


class HealthStatus(BaseModel):
    status: str = "ok"
    message: str
