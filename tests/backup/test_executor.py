"""Tests for external command execution."""

import sys
from unittest.mock import patch

import pytest

from mongo_backup.backup.errors import ExecutionError
from mongo_backup.backup.executor import run_command


@pytest.mark.asyncio
async def test_run_command_returns_stdout():
    output = await run_command([sys.executable, "-c", "print('shop'); print('users')"])
    assert output.splitlines() == ["shop", "users"]


@pytest.mark.asyncio
async def test_run_command_passes_arguments_verbatim(tmp_path):
    """Shell metacharacters in arguments are never interpreted."""
    marker = tmp_path / "pwned"
    argument = f"shop; touch {marker}"

    output = await run_command([sys.executable, "-c", "import sys; print(sys.argv[1])", argument])

    assert output.strip() == argument
    assert not marker.exists()


@pytest.mark.asyncio
async def test_run_command_nonzero_exit_carries_stderr():
    with pytest.raises(ExecutionError) as exc_info:
        await run_command([
            sys.executable, "-c",
            "import sys; sys.stderr.write('dump failed'); sys.exit(4)",
        ])

    error = exc_info.value
    assert error.returncode == 4
    assert "dump failed" in error.stderr
    assert error.detail == "dump failed"


@pytest.mark.asyncio
async def test_run_command_spawn_failure(tmp_path):
    with pytest.raises(ExecutionError) as exc_info:
        await run_command([str(tmp_path / "missing-script.sh")])

    assert exc_info.value.returncode is None
    assert "Failed to start command" in exc_info.value.message


@pytest.mark.asyncio
async def test_run_command_timeout_kills_process():
    with pytest.raises(ExecutionError) as exc_info:
        await run_command([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)

    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_run_command_uses_working_directory(tmp_path):
    output = await run_command([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=str(tmp_path))
    assert output.strip() == str(tmp_path.resolve())


@pytest.mark.asyncio
async def test_run_command_logs_invocation_at_info():
    with patch("mongo_backup.backup.executor.logger") as mock_logger:
        await run_command([sys.executable, "-c", "pass"])

    message = mock_logger.info.call_args_list[0].args[0]
    assert message.startswith("Running command: ")
    assert sys.executable in message
