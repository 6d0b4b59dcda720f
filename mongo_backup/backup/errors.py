"""Error taxonomy for backup and restore flows."""

from typing import Optional


class BackupError(Exception):
    """Base error for every backup/restore failure.

    ``detail`` carries the diagnostic text relayed to clients (captured
    stderr or the underlying exception message).
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


class ValidationError(BackupError):
    """Required input is missing or malformed."""


class ExecutionError(BackupError):
    """External command exited non-zero, could not be spawned, or timed out."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message, detail=stderr.strip() or message)
        self.returncode = returncode
        self.stderr = stderr


class FilesystemError(BackupError):
    """A directory or file operation could not complete."""


class ArchiveError(FilesystemError):
    """The compressed archive could not be written."""


class NotFoundError(BackupError):
    """A requested archive does not exist."""
