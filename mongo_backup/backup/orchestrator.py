"""Backup and restore orchestration for a containerized MongoDB."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from .._utils import logger
from .archive import create_archive
from .errors import ValidationError
from .executor import run_command
from .intake import UploadIntake, discard_uploads
from .models import BackupResult, RestoreResult, UploadedFile
from .staging import StagingStore, validate_database_name
from .utils import generate_archive_name

LIST_DATABASES_SCRIPT = "db.adminCommand('listDatabases').databases.map(d => d.name).join('\\n')"


@dataclass
class MongoCommands:
    """Argument vectors for the external tools the flows drive."""

    container_name: str = "mongodb"
    docker_binary: str = "docker"
    mongo_shell: str = "mongosh"
    backup_script: str = "./mongodb-backup.sh"
    reserved_databases: Tuple[str, ...] = field(default=("admin", "config", "local"))

    def list_databases(self) -> List[str]:
        return [
            self.docker_binary, "exec", self.container_name,
            self.mongo_shell, "--quiet", "--eval", LIST_DATABASES_SCRIPT,
        ]

    def dump(self, database: str) -> List[str]:
        return [self.backup_script, "-d", "-n", database]

    def restore(self, database: str) -> List[str]:
        return [self.backup_script, "-r", "-n", database]


class BackupOrchestrator:
    """Sequence dump/archive and intake/restore steps into single flows."""

    def __init__(
        self,
        staging: StagingStore,
        intake: UploadIntake,
        downloads_dir: Union[str, Path],
        commands: Optional[MongoCommands] = None,
        command_timeout: Optional[float] = None,
        script_cwd: Optional[str] = None,
    ):
        """Initialize orchestrator.

        Args:
            staging: Store owning per-database staging directories
            intake: Upload intake relocating restore files
            downloads_dir: Directory receiving finished archives
            commands: External command builder
            command_timeout: Seconds before an external command is killed
            script_cwd: Working directory for the dump/restore script
        """
        self.staging = staging
        self.intake = intake
        self.downloads_dir = Path(downloads_dir)
        self.commands = commands or MongoCommands()
        self.command_timeout = command_timeout
        self.script_cwd = script_cwd

    async def list_databases(self) -> List[str]:
        """List user databases, excluding the reserved system ones."""
        output = await run_command(self.commands.list_databases(), timeout=self.command_timeout)
        reserved = set(self.commands.reserved_databases)
        return [
            name
            for name in (line.strip() for line in output.splitlines())
            if name and name not in reserved
        ]

    async def backup(self, database: Optional[str]) -> BackupResult:
        """Dump a database and package its staging directory as an archive.

        The staging directory is kept after a successful backup.

        Raises:
            ValidationError: Missing or invalid database name
            ExecutionError: Dump command failed
            ArchiveError: Archive could not be written
        """
        database = validate_database_name(database)
        staging_dir = self.staging.path_for(database)

        async with self.staging.lock(database):
            logger.info(f"Starting backup: {database}")
            await self._run_script(self.commands.dump(database))

            archive_name = generate_archive_name(database)
            archive_path = self.downloads_dir / archive_name
            size = await create_archive(staging_dir, archive_path, root_name=database)

        logger.info(f"Backup complete: {database} -> {archive_name} ({size:,} bytes)")
        return BackupResult(
            database=database,
            staging_path=str(staging_dir),
            archive_name=archive_name,
            size_bytes=size,
            created_at=datetime.now(timezone.utc),
        )

    async def restore(
        self,
        database: Optional[str],
        uploads: Sequence[UploadedFile],
        name_overrides: Optional[Mapping[str, str]] = None,
    ) -> RestoreResult:
        """Stage uploaded files for a database and run the restore script.

        Temporary upload files that were not relocated are deleted on every
        exit path. The staging directory is kept after a successful restore.

        Raises:
            ValidationError: Missing or invalid database name, or no files
            FilesystemError: Uploads could not be staged
            ExecutionError: Restore command failed
        """
        try:
            database = validate_database_name(database)
            if not uploads:
                raise ValidationError("Backup files are required")

            async with self.staging.lock(database):
                logger.info(f"Starting restore: {database} ({len(uploads)} files)")
                files = await self.intake.relocate(database, uploads, name_overrides)
                await self._run_script(self.commands.restore(database))
        finally:
            discard_uploads(uploads)

        logger.info(f"Restore complete: {database}")
        return RestoreResult(
            database=database,
            staging_path=str(self.staging.path_for(database)),
            files=files,
        )

    async def _run_script(self, argv: List[str]) -> str:
        return await run_command(argv, timeout=self.command_timeout, cwd=self.script_cwd)
