"""
LogTail Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


class ScannerSettings(BaseSettings):
    """Line scanner settings."""

    model_config = SettingsConfigDict(env_prefix="SCANNER_")

    chunk_size: int = Field(
        default=4096,
        ge=1,
        description="Maximum bytes pulled from the stream per read",
    )


class WatcherSettings(BaseSettings):
    """Polling file watcher settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    poll_interval_ms: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Sleep between two metadata queries",
    )
    refresh_interval_ms: int = Field(
        default=1000,
        ge=1,
        description="How long a notification send may block before re-polling",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Only json and console renderers exist."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError(f"unknown log format: {v}")
        return v


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="LogTail")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")

    # Sub-settings
    scanner: ScannerSettings = Field(default_factory=ScannerSettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings. Call ``get_settings.cache_clear()``
    after changing the environment to pick up new values.
    """
    return Settings()

