"""Deferred removal of served archives from the downloads area."""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Union

from .._utils import logger
from .utils import is_plain_filename


def remove_file(path: Path) -> bool:
    """Delete a file if it still exists.

    Returns:
        True if deleted, False if it was already gone or could not be removed
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Failed to delete {path}: {e}")
        return False
    logger.info(f"Deleted served archive: {path.name}")
    return True


class DownloadJanitor:
    """Own archives in the downloads area once they have been served.

    Each served archive is deleted ``delay`` seconds after its transfer ends.
    Pending deletions are tracked so ``close`` can run them immediately when
    the application shuts down.
    """

    def __init__(self, downloads_dir: Union[str, Path], delay: float = 5.0):
        self.downloads_dir = Path(downloads_dir)
        self.delay = delay
        self._pending: Dict[Path, asyncio.Task] = {}

    def resolve(self, filename: str) -> Optional[Path]:
        """Path to a downloadable archive or None if not found."""
        if not is_plain_filename(filename):
            return None
        path = self.downloads_dir / filename
        return path if path.is_file() else None

    def schedule(self, path: Path, delay: Optional[float] = None) -> asyncio.Task:
        """Schedule deletion of ``path`` after ``delay`` seconds.

        Scheduling the same path twice keeps the first pending deletion.
        """
        path = Path(path)
        task = self._pending.get(path)
        if task is not None and not task.done():
            return task

        delay = self.delay if delay is None else delay
        task = asyncio.get_running_loop().create_task(self._remove_later(path, delay))
        self._pending[path] = task
        task.add_done_callback(lambda t, p=path: self._forget(p, t))
        logger.debug(f"Scheduled deletion of {path.name} in {delay}s")
        return task

    async def _remove_later(self, path: Path, delay: float) -> bool:
        await asyncio.sleep(delay)
        return remove_file(path)

    def _forget(self, path: Path, task: asyncio.Task) -> None:
        if self._pending.get(path) is task:
            del self._pending[path]

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def close(self) -> None:
        """Cancel pending timers and delete their files now."""
        pending = list(self._pending.items())
        self._pending.clear()
        for path, task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*(task for _, task in pending), return_exceptions=True)
        for path, _ in pending:
            remove_file(path)
