"""Configuration for LedgerLens statement ingestion.

This module provides Pydantic Settings-based configuration with environment
variable support and defaults matching the ingestion heuristics.

Usage:
    from ledgerlens_core.config import IngestionSettings

    # Load from environment variables and .env file
    settings = IngestionSettings()

    # Override specific settings
    settings = IngestionSettings(header_scan_rows=25, log_level="DEBUG")

Environment Variables:
    LEDGERLENS_MAX_FILE_SIZE_BYTES: Upload size cap in bytes
    LEDGERLENS_HEADER_SCAN_ROWS: Rows searched for a spreadsheet header
    LEDGERLENS_MIN_DOCUMENT_CHARS: Minimum PDF text before it counts as scanned
    LEDGERLENS_LINE_TOLERANCE: Vertical distance that still counts as one line
    LEDGERLENS_MIN_LINE_LENGTH: Shorter PDF lines are treated as noise
    LEDGERLENS_DESCRIPTION_MAX_LENGTH: Cap for cleaned descriptions
    LEDGERLENS_DUPLICATE_SIMILARITY: Description similarity threshold
    LEDGERLENS_DUPLICATE_AMOUNT_TOLERANCE: Amount distance for duplicates
    LEDGERLENS_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    LEDGERLENS_LOG_JSON: Render logs as JSON lines
"""

from decimal import Decimal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024


class IngestionSettings(BaseSettings):
    """Tunable thresholds for the ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGERLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_file_size_bytes: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        gt=0,
        description="Uploads at or above this size are rejected",
    )
    header_scan_rows: int = Field(
        default=15,
        ge=1,
        description="Number of leading spreadsheet rows searched for a header",
    )
    min_document_chars: int = Field(
        default=50,
        ge=0,
        description="PDFs with less reconstructed text are treated as scanned images",
    )
    line_tolerance: float = Field(
        default=5.0,
        ge=0.0,
        description="Fragments within this vertical distance share a text line",
    )
    min_line_length: int = Field(
        default=10,
        ge=0,
        description="Shorter PDF lines are dropped as noise",
    )
    description_max_length: int = Field(
        default=100,
        gt=0,
        description="Cleaned descriptions are truncated to this length",
    )
    duplicate_similarity: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Descriptions more similar than this may be duplicates",
    )
    duplicate_amount_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Amounts closer than this may be duplicates",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Render log events as JSON instead of console output",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def max_file_size_mb(self) -> int:
        """Size cap in whole megabytes, for user-facing messages."""
        return self.max_file_size_bytes // (1024 * 1024)


def load_settings(**overrides) -> IngestionSettings:
    """Load settings, reporting invalid values as a ConfigurationError."""
    try:
        return IngestionSettings(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigurationError(
            f"Invalid configuration for {key}: {first['msg']}",
            config_key=key,
            expected=first["msg"],
            details={"errors": e.error_count()},
        ) from e
