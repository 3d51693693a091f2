"""Logging configuration schema."""

import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class LogDestination(str, Enum):
    """Log destination enumeration."""

    STDERR = "stderr"
    FILE = "file"
    BOTH = "both"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("WARNING", description="Root log level")
    destination: LogDestination = Field(LogDestination.STDERR, description="Where log records go")
    file_path: str = Field("deptrac.log", description="Log file used for file destinations")
    max_size_mb: int = Field(10, description="Maximum log file size before rotation")
    backup_count: int = Field(3, description="Number of rotated log files to keep")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """
        Validate log level.

        Args:
            v: Value to validate

        Returns:
            Upper-cased level name

        Raises:
            ValueError: If level is not a standard logging level
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = v.upper()
        if level not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return level

    @field_validator("max_size_mb", "backup_count")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Value must not be negative")
        return v

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "LoggingConfig":
        """Build logging configuration from ``DEPTRAC_LOG_*`` environment variables."""
        environ = os.environ if environ is None else environ
        overrides = {
            "level": environ.get("DEPTRAC_LOG_LEVEL"),
            "destination": environ.get("DEPTRAC_LOG_DESTINATION"),
            "file_path": environ.get("DEPTRAC_LOG_FILE"),
        }
        return cls(**{key: value for key, value in overrides.items() if value})
