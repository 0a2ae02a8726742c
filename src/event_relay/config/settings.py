"""
Module: settings.py
Description: Relay configuration using pydantic-settings.

Configures the ingestion host, the on-disk queue location and the
queue/retry limits from environment variables (prefix EVENT_RELAY_)
with validation and defaults. Supports .env files for local development.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Relay settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EVENT_RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Event Relay", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # Delivery settings
    ingest_host: str = Field(
        default="https://eu.i.posthog.com",
        description="Base URL of the ingestion endpoint; batches go to {host}/batch"
    )
    delivery_timeout: int = Field(
        default=10,
        ge=1,
        le=30,
        description="HTTP timeout in seconds for delivery attempts"
    )

    # Queue settings
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding the offline queue database"
    )
    database_filename: str = Field(
        default="telemetry.db",
        description="File name of the offline queue database"
    )
    max_queue_size: int = Field(
        default=500,
        ge=1,
        description="Maximum number of queued events kept on disk"
    )
    max_retry_count: int = Field(
        default=5,
        ge=1,
        description="Failed attempts after which a queued event is purged"
    )
    flush_batch_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum queued events sent per flush pass"
    )

    @property
    def database_path(self) -> Path:
        """Full path of the offline queue database file."""
        return self.data_dir / self.database_filename

    @field_validator('ingest_host')
    @classmethod
    def validate_ingest_host(cls, v: str) -> str:
        """Validate the ingestion host is an HTTP(S) base URL."""
        if not v or not isinstance(v, str):
            raise ValueError("ingest_host must be a non-empty string")
        if not v.startswith(('http://', 'https://')):
            raise ValueError("ingest_host must be a valid HTTP/HTTPS URL")
        return v.rstrip('/')

    @field_validator('database_filename')
    @classmethod
    def validate_database_filename(cls, v: str) -> str:
        """Validate the database file name is a bare file name."""
        if not v or '/' in v or '\\' in v:
            raise ValueError("database_filename must be a plain file name")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()


# Global settings instance
settings = Settings()
