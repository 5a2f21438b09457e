"""
DotWatch Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

import shlex
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
load_dotenv()


class WatcherSettings(BaseSettings):
    """File watcher configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    root: Path = Field(default_factory=Path.cwd, description="Directory to watch")
    cache_directory: Path = Field(
        default=Path(".dotter/cache"),
        description="Deployment cache directory, never triggers a deploy",
    )
    cache_file: Path = Field(
        default=Path(".dotter/cache.toml"),
        description="Deployment cache file, never triggers a deploy",
    )
    debounce_delay_ms: int = Field(default=500, ge=0, le=60000)
    health_check_interval: float = Field(default=1.0, gt=0.0)


class DeploySettings(BaseSettings):
    """Deploy command configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DEPLOY_")

    command: Annotated[list[str], NoDecode] = Field(
        default=["dotter", "deploy"],
        description="Command run on every admitted change",
    )
    timeout_seconds: float | None = Field(default=None, gt=0.0)

    @field_validator("command", mode="before")
    @classmethod
    def parse_command(cls, v: str | list[str]) -> list[str]:
        """Parse the command from a shell-style string or list."""
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @field_validator("command")
    @classmethod
    def require_command(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("deploy command must not be empty")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="DotWatch")
    app_version: str = Field(default="0.1.0")

    # Sub-settings
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    deploy: DeploySettings = Field(default_factory=DeploySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def watch_root(self) -> Path:
        """Absolute watch root."""
        return self.watcher.root.expanduser().resolve()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()
