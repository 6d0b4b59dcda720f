"""FastAPI application for the MongoDB backup server."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging
import sys
import os

from mongo_backup.backup import (
    BackupOrchestrator,
    DownloadJanitor,
    MongoCommands,
    StagingStore,
    UploadIntake,
)
from mongo_backup.backup.staging import ensure_dir
from .config import Settings, settings as default_settings
from .exceptions import register_exception_handlers
from .routers import databases, backup, restore, health

# Configure the package logger with an app-managed handler so INFO logs are
# visible regardless of uvicorn's logging config
app_logger = logging.getLogger("mongo-backup")
app_logger.setLevel(logging.INFO)
app_logger.propagate = False
app_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
app_logger.addHandler(console_handler)

# Allow disabling app-managed logging via env var for production
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    app_logger.handlers.clear()
    app_logger.propagate = True  # Fall back to server-managed pattern

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare filesystem areas and flush pending deletions on shutdown."""
    config: Settings = app.state.settings

    app.state.orchestrator.staging.ensure_root()
    ensure_dir(config.downloads_dir)
    ensure_dir(config.uploads_dir)
    logger.info(f"MongoDB Backup Server ready (container: {config.container_name}, data: {config.data_dir})")

    yield

    logger.info("Shutting down MongoDB Backup Server...")
    await app.state.janitor.close()


def build_orchestrator(config: Settings) -> BackupOrchestrator:
    """Wire the backup core from settings."""
    staging = StagingStore(config.data_dir)
    intake = UploadIntake(staging, config.uploads_dir)
    commands = MongoCommands(
        container_name=config.container_name,
        docker_binary=config.docker_binary,
        mongo_shell=config.mongo_shell,
        backup_script=config.backup_script,
        reserved_databases=tuple(config.reserved_databases),
    )
    return BackupOrchestrator(
        staging,
        intake,
        config.downloads_dir,
        commands=commands,
        command_timeout=config.command_timeout,
        script_cwd=config.script_cwd,
    )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    config = config or default_settings

    app = FastAPI(
        title=config.api_title,
        version=config.api_version,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.orchestrator = build_orchestrator(config)
    app.state.janitor = DownloadJanitor(config.downloads_dir, delay=config.download_cleanup_delay)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(databases.router)
    app.include_router(backup.router)
    app.include_router(restore.router)
    app.include_router(health.router)

    # Operator page and assets, mounted last so API routes take precedence
    if config.static_dir and Path(config.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")

    return app


# Create default app instance
app = create_app()
