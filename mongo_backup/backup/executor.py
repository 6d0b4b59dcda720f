"""Run external commands as child processes."""

import asyncio
from typing import Optional, Sequence

from .._utils import logger
from .errors import ExecutionError


async def run_command(
    argv: Sequence[str],
    timeout: Optional[float] = None,
    cwd: Optional[str] = None,
) -> str:
    """Run a command to completion and return its standard output.

    The command is spawned directly from its argument vector, never through a
    shell, so caller-supplied arguments are passed verbatim.

    Args:
        argv: Program followed by its arguments
        timeout: Seconds to wait before killing the child. None waits forever.
        cwd: Working directory for the child process

    Returns:
        Decoded standard output

    Raises:
        ExecutionError: On spawn failure, timeout or non-zero exit status
    """
    command = " ".join(argv)
    logger.info(f"Running command: {command}")

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error(f"Failed to start command {command}: {e}")
        raise ExecutionError(f"Failed to start command: {e}", stderr=str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.error(f"Command timed out after {timeout}s: {command}")
        raise ExecutionError(
            f"Command timed out after {timeout}s",
            returncode=process.returncode,
        )

    stdout_text = stdout.decode(errors="replace")
    stderr_text = stderr.decode(errors="replace")

    if process.returncode != 0:
        logger.error(
            f"Command failed with exit code {process.returncode}: {command}\n{stderr_text}"
        )
        raise ExecutionError(
            f"Command failed with exit code {process.returncode}",
            returncode=process.returncode,
            stderr=stderr_text,
        )

    return stdout_text
