"""Configuration models for ChirpChirp.

This module contains all configuration-related Pydantic models used throughout the application.
"""

from pydantic import BaseModel, Field, field_validator

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=dict)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of {', '.join(VALID_LOG_LEVELS)}."
            )
        return level


class DatabaseConfig(BaseModel):
    """Connection parameters for the image and attribution store.

    Both values are opaque to the application: the URL selects the SQLAlchemy
    async driver and the credential, when set, becomes the connection password.
    """

    url: str = "sqlite+aiosqlite:///./chirpchirp.db"
    credential: str | None = None
    echo: bool = False
    pool_pre_ping: bool = True
    create_tables: bool = False  # Create missing tables at startup (local development)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject blank connection URLs."""
        if not v or not v.strip():
            raise ValueError("Database URL cannot be empty")
        return v.strip()


class ChirpConfig(BaseModel):
    """Configuration settings for the ChirpChirp core API service."""

    # Version tracking
    config_version: str = "1.0.0"

    # Service identity
    service_name: str = "core-api-service"

    # HTTP listener
    host: str = "0.0.0.0"  # nosemgrep
    port: int = 8080

    # Listing defaults
    default_page: int = 1
    default_page_size: int = 20

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that the listen port is in the TCP range."""
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port {v}. Must be between 1 and 65535.")
        return v

    @field_validator("default_page", "default_page_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Listing defaults must be positive."""
        if v < 1:
            raise ValueError("Listing defaults must be positive integers")
        return v
