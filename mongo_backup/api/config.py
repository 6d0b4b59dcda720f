"""Configuration for FastAPI application."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, Field
from typing import List, Optional, Union
import json


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # API Configuration
    api_title: str = "MongoDB Backup Server"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 1532
    allowed_origins: Union[str, List[str]] = ["*"]

    @field_validator('allowed_origins', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            # If it's a JSON array string, parse it
            if v.startswith('['):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            # Single origin string
            return [v]
        return v

    # MongoDB container
    container_name: str = "mongodb"
    docker_binary: str = "docker"
    mongo_shell: str = "mongosh"
    reserved_databases: List[str] = ["admin", "config", "local"]

    # Dump/restore script
    backup_script: str = "./mongodb-backup.sh"
    script_cwd: Optional[str] = None
    command_timeout: Optional[float] = Field(default=None, description="Seconds before an external command is killed")

    # Filesystem layout
    data_dir: str = "./data"
    downloads_dir: str = "./downloads"
    uploads_dir: str = "./uploads"
    static_dir: Optional[str] = None

    download_cleanup_delay: float = Field(default=5.0, description="Seconds to keep an archive after it was served")


settings = Settings()
