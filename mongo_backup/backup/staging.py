"""On-disk staging area for per-database dump and restore files."""

import asyncio
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Optional, Union

from .._utils import logger
from .errors import FilesystemError, ValidationError

DATABASE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_database_name(database: Optional[str]) -> str:
    """Check a database identifier before it touches paths or commands.

    Raises:
        ValidationError: If the identifier is missing or has characters
            outside ``[A-Za-z0-9_-]``
    """
    if not database:
        raise ValidationError("Database name is required")
    if not DATABASE_NAME_PATTERN.match(database):
        raise ValidationError(
            f"Invalid database name: {database!r}",
            detail="Database names may only contain letters, digits, '_' and '-' (max 64 characters)",
        )
    return database


def ensure_dir(path: Union[str, Path]) -> Path:
    """Create a directory tree if missing.

    Raises:
        FilesystemError: If creation is blocked by permissions or a
            non-directory entry at the path
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise FilesystemError(f"Failed to create directory {path}", detail=str(e)) from e
    return path


class StagingStore:
    """Own the staging root and serialize work per database identifier.

    Flows on distinct identifiers proceed in parallel, flows on the same
    identifier run one at a time.
    """

    def __init__(self, data_root: Union[str, Path]):
        self.data_root = Path(data_root)
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    def ensure_root(self) -> Path:
        """Create the staging root if absent."""
        return ensure_dir(self.data_root)

    def path_for(self, database: str) -> Path:
        """Staging directory for a database identifier."""
        return self.data_root / database

    def ensure_dir(self, path: Union[str, Path]) -> Path:
        return ensure_dir(path)

    @asynccontextmanager
    async def lock(self, database: str) -> AsyncIterator[None]:
        """Hold the lock for one database identifier."""
        lock = self._locks.setdefault(database, asyncio.Lock())
        self._holders[database] = self._holders.get(database, 0) + 1
        if lock.locked():
            logger.info(f"Waiting for in-flight operation on database: {database}")
        try:
            async with lock:
                yield
        finally:
            # Drop the lock once nobody holds or waits on it
            self._holders[database] -= 1
            if not self._holders[database]:
                del self._holders[database]
                del self._locks[database]

    @property
    def active_locks(self) -> int:
        return len(self._locks)
