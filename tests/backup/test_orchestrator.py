"""Tests for BackupOrchestrator."""

import asyncio
import zipfile
from unittest.mock import AsyncMock, patch

import pytest

from mongo_backup.backup.errors import ArchiveError, ExecutionError, ValidationError
from mongo_backup.backup.intake import UploadIntake
from mongo_backup.backup.models import UploadedFile
from mongo_backup.backup.orchestrator import BackupOrchestrator, MongoCommands
from mongo_backup.backup.staging import StagingStore


def _orchestrator(workdir, script, **kwargs) -> BackupOrchestrator:
    staging = StagingStore(workdir / "data")
    return BackupOrchestrator(
        staging,
        UploadIntake(staging, workdir / "uploads"),
        workdir / "downloads",
        commands=MongoCommands(backup_script=str(script)),
        script_cwd=str(workdir),
        **kwargs,
    )


def _upload(workdir, name, field="files", content=b"dump"):
    temp_path = workdir / "uploads" / f"tmp-{len(list((workdir / 'uploads').iterdir()))}"
    temp_path.write_bytes(content)
    return UploadedFile(field, name, temp_path)


def test_commands_are_argument_vectors():
    commands = MongoCommands(container_name="mongo-test", backup_script="/opt/mongodb-backup.sh")

    assert commands.dump("shop") == ["/opt/mongodb-backup.sh", "-d", "-n", "shop"]
    assert commands.restore("shop") == ["/opt/mongodb-backup.sh", "-r", "-n", "shop"]
    assert commands.list_databases()[:5] == ["docker", "exec", "mongo-test", "mongosh", "--quiet"]
    assert "listDatabases" in commands.list_databases()[-1]


@pytest.mark.asyncio
async def test_list_databases_excludes_reserved(workdir, backup_script):
    orchestrator = _orchestrator(workdir, backup_script)
    output = "admin\nshop\n  config  \n\nlocal\nusers\n"

    with patch("mongo_backup.backup.orchestrator.run_command", new=AsyncMock(return_value=output)):
        databases = await orchestrator.list_databases()

    assert databases == ["shop", "users"]


@pytest.mark.asyncio
async def test_list_databases_failure(workdir, backup_script):
    orchestrator = _orchestrator(workdir, backup_script)
    error = ExecutionError("Command failed with exit code 1", returncode=1, stderr="No such container: mongodb")

    with patch("mongo_backup.backup.orchestrator.run_command", new=AsyncMock(side_effect=error)):
        with pytest.raises(ExecutionError, match="exit code 1"):
            await orchestrator.list_databases()


@pytest.mark.asyncio
async def test_backup_creates_archive(workdir, backup_script):
    orchestrator = _orchestrator(workdir, backup_script)

    result = await orchestrator.backup("shop")

    archive_path = workdir / "downloads" / result.archive_name
    assert result.database == "shop"
    assert result.archive_name.startswith("shop_backup_")
    assert result.staging_path == str(workdir / "data" / "shop")
    assert result.size_bytes == archive_path.stat().st_size

    with zipfile.ZipFile(archive_path) as zf:
        assert zf.read("shop/shop/users.bson") == b"users-dump"

    # Staged dump is kept
    assert (workdir / "data" / "shop" / "shop" / "users.bson").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("database", [None, "", "shop && reboot"])
async def test_backup_rejects_bad_database_without_side_effects(workdir, backup_script, database):
    orchestrator = _orchestrator(workdir, backup_script)
    mock_run = AsyncMock()

    with patch("mongo_backup.backup.orchestrator.run_command", new=mock_run):
        with pytest.raises(ValidationError):
            await orchestrator.backup(database)

    mock_run.assert_not_called()
    assert list((workdir / "data").iterdir()) == []
    assert list((workdir / "downloads").iterdir()) == []


@pytest.mark.asyncio
async def test_backup_dump_failure(workdir, failing_script):
    orchestrator = _orchestrator(workdir, failing_script)

    with pytest.raises(ExecutionError) as exc_info:
        await orchestrator.backup("shop")

    assert exc_info.value.returncode == 3
    assert "connection refused" in exc_info.value.detail
    assert list((workdir / "downloads").iterdir()) == []


@pytest.mark.asyncio
async def test_backup_archive_failure_leaves_no_file(workdir, backup_script):
    orchestrator = _orchestrator(workdir, backup_script)

    with patch(
        "mongo_backup.backup.archive._write_zip",
        side_effect=OSError("disk full"),
    ):
        with pytest.raises(ArchiveError):
            await orchestrator.backup("shop")

    assert list((workdir / "downloads").iterdir()) == []


@pytest.mark.asyncio
async def test_backup_same_database_serialized(workdir, backup_script):
    orchestrator = _orchestrator(workdir, backup_script)
    running = 0
    peak = 0

    async def tracked_run(argv, timeout=None, cwd=None):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.05)
        (workdir / "data" / argv[-1]).mkdir(parents=True, exist_ok=True)
        running -= 1
        return ""

    with patch("mongo_backup.backup.orchestrator.run_command", new=tracked_run):
        await asyncio.gather(orchestrator.backup("shop"), orchestrator.backup("shop"))

    assert peak == 1


@pytest.mark.asyncio
async def test_restore_stages_files_and_runs_script(workdir, backup_script, leftover_uploads):
    orchestrator = _orchestrator(workdir, backup_script)
    uploads = [_upload(workdir, "a.sql"), _upload(workdir, "b.sql")]

    result = await orchestrator.restore("shop", uploads)

    staging_dir = workdir / "data" / "shop"
    assert result.files == ["a.sql", "b.sql"]
    assert sorted(p.name for p in staging_dir.iterdir()) == ["a.sql", "b.sql"]
    assert (workdir / "restored_shop.txt").read_text().split() == ["a.sql", "b.sql"]
    assert leftover_uploads() == []


@pytest.mark.asyncio
async def test_restore_command_failure_cleans_up(workdir, failing_script, leftover_uploads):
    orchestrator = _orchestrator(workdir, failing_script)
    uploads = [_upload(workdir, "a.sql"), _upload(workdir, "../../evil.sql")]

    with pytest.raises(ExecutionError):
        await orchestrator.restore("shop", uploads)

    assert leftover_uploads() == []
    # Relocated files and staging directory are kept
    assert sorted(p.name for p in (workdir / "data" / "shop").iterdir()) == ["a.sql", "evil.sql"]


@pytest.mark.asyncio
async def test_restore_validation_discards_uploads(workdir, backup_script, leftover_uploads):
    orchestrator = _orchestrator(workdir, backup_script)
    uploads = [_upload(workdir, "a.sql")]

    with pytest.raises(ValidationError, match="Database name is required"):
        await orchestrator.restore("", uploads)

    assert leftover_uploads() == []


@pytest.mark.asyncio
async def test_restore_requires_files(workdir, backup_script):
    orchestrator = _orchestrator(workdir, backup_script)

    with pytest.raises(ValidationError, match="Backup files are required"):
        await orchestrator.restore("shop", [])
