"""Custom exceptions and handlers for FastAPI application."""

from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from mongo_backup.backup.errors import BackupError, NotFoundError, ValidationError


class BackupAPIError(HTTPException):
    """Base exception for backup API errors.

    Rendered as ``{"success": false, "message": ..., "error": ...}``.
    """

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        super().__init__(status_code, message)
        self.message = message
        self.error = error


class BadRequestError(BackupAPIError):
    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(HTTP_400_BAD_REQUEST, message, error)


class ArchiveNotFoundError(BackupAPIError):
    def __init__(self, filename: str):
        super().__init__(HTTP_404_NOT_FOUND, "File not found", f"No archive named {filename}")


class OperationFailedError(BackupAPIError):
    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(HTTP_500_INTERNAL_SERVER_ERROR, message, error)


def to_api_error(exc: BackupError, message: str) -> BackupAPIError:
    """Map a domain error to its HTTP form.

    ``message`` is used for server-side failures; validation errors keep
    their own message.
    """
    if isinstance(exc, ValidationError):
        error = exc.detail if exc.detail != exc.message else None
        return BadRequestError(exc.message, error)
    if isinstance(exc, NotFoundError):
        return BackupAPIError(HTTP_404_NOT_FOUND, exc.message, exc.detail)
    return OperationFailedError(message, exc.detail)


async def backup_api_error_handler(request: Request, exc: BackupAPIError) -> JSONResponse:
    content = {"success": False, "message": exc.message}
    if exc.error is not None:
        content["error"] = exc.error
    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Invalid request", "error": str(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BackupAPIError, backup_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
