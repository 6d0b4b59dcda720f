"""Naming helpers for backup archives and uploaded files."""

import re
from datetime import datetime, timezone
from typing import Optional

ARCHIVE_EXTENSION = ".zip"

_PATH_SEPARATORS = re.compile(r"[\\/]")


def generate_archive_name(database: str, now: Optional[datetime] = None) -> str:
    """Generate archive file name for a database.

    Returns:
        Name in format: <database>_backup_<epoch milliseconds>.zip
    """
    now = now or datetime.now(timezone.utc)
    timestamp = int(now.timestamp() * 1000)
    return f"{database}_backup_{timestamp}{ARCHIVE_EXTENSION}"


def flatten_filename(name: Optional[str]) -> str:
    """Strip every directory component from a client supplied file name.

    Both ``/`` and ``\\`` count as separators. Returns "" when nothing usable
    is left (empty input, ``.`` or ``..``).
    """
    if not name:
        return ""
    base = _PATH_SEPARATORS.split(name)[-1].strip()
    if base in ("", ".", ".."):
        return ""
    return base


def is_plain_filename(name: str) -> bool:
    """True when ``name`` names a file with no directory component."""
    return bool(name) and flatten_filename(name) == name
