"""Configuration management for the social report normalizer.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SRN_ prefix, or via a .env file in the project root.

Environment Variables:
    SRN_MAX_FILE_SIZE_MB: Maximum workbook upload size in MB (default: 10)
    SRN_RESERVED_SHEET_NAME: Placeholder sheet skipped by the scanner (default: Sheet1)
    SRN_COLUMN_SAMPLE_SIZE: Populated values sampled per column (default: 200)
    SRN_CATEGORICAL_UNIQUE_RATIO: Distinct/sample ratio below which strings are
        categorical (default: 0.6)
    SRN_CATEGORICAL_MAX_DISTINCT: Max distinct strings for a categorical column
        (default: 50)
    SRN_MAX_CHARTS_PER_SECTION: Chart cap per dashboard section (default: 6)
    SRN_MAX_PROFILE_OPTIONS: Profile names offered as dashboard filters (default: 50)
    SRN_REPORT_TITLE: Title of the published reporting spreadsheet
    SRN_GOOGLE_SERVICE_ACCOUNT_EMAIL: Service account used by the publish client
    SRN_GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY: Service account private key
    SRN_LOG_LEVEL: Logging level (default: INFO)
    SRN_DEBUG: Enable debug mode (default: false)
    SRN_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SRN_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SRN_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from social_report.services.column_classifier import ClassifierThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables prefixed with SRN_
    or via a .env file. The service account key uses SecretStr to prevent
    accidental logging.

    Example .env file:
        SRN_LOG_LEVEL=DEBUG
        SRN_COLUMN_SAMPLE_SIZE=500
    """

    model_config = SettingsConfigDict(
        env_prefix="SRN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Upload Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum workbook upload size in megabytes."""

    # =========================================================================
    # Detection Settings
    # =========================================================================

    reserved_sheet_name: str = "Sheet1"
    """Placeholder sheet name that is never scanned for tables."""

    column_sample_size: int = 200
    """Number of populated values sampled when classifying a column."""

    categorical_unique_ratio: float = 0.6
    """Distinct/sample ratio below which a string column is categorical."""

    categorical_max_distinct: int = 50
    """Maximum distinct values for a string column to be categorical."""

    # =========================================================================
    # Dashboard Settings
    # =========================================================================

    max_charts_per_section: int = 6
    """Maximum number of charts emitted per dashboard section."""

    max_profile_options: int = 50
    """Maximum number of profile names offered as dashboard filters."""

    # =========================================================================
    # Publishing Settings
    # =========================================================================

    report_title: str = "Looker Social Reporting"
    """Title given to the published reporting spreadsheet."""

    google_service_account_email: str = ""
    """Service account email used by the external publishing client."""

    google_service_account_private_key: SecretStr = SecretStr("")
    """Service account private key used by the external publishing client."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_file_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("column_sample_size", "categorical_max_distinct")
    @classmethod
    def validate_positive_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be at least 1, got {v}")
        return v

    @field_validator("categorical_unique_ratio")
    @classmethod
    def validate_ratio(cls, v: float) -> float:
        """Validate ratio is between 0.0 and 1.0."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"Ratio must be between 0.0 and 1.0, got {v}")
        return v

    @field_validator("max_charts_per_section")
    @classmethod
    def validate_max_charts(cls, v: int) -> int:
        if not 1 <= v <= 20:
            raise ValueError(
                f"max_charts_per_section must be between 1 and 20, got {v}"
            )
        return v

    @field_validator("reserved_sheet_name")
    @classmethod
    def validate_reserved_sheet_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def classifier_thresholds(self) -> ClassifierThresholds:
        """Column classifier thresholds built from the detection settings."""
        return ClassifierThresholds(
            sample_size=self.column_sample_size,
            categorical_ratio=self.categorical_unique_ratio,
            categorical_max_distinct=self.categorical_max_distinct,
        )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    @property
    def publishing_configured(self) -> bool:
        """Whether service account credentials for publishing are present."""
        return bool(
            self.google_service_account_email
            and self.google_service_account_private_key.get_secret_value()
        )

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary with sensitive values masked.

        Returns:
            Dictionary representation with the private key masked.
        """
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "reserved_sheet_name": self.reserved_sheet_name,
            "column_sample_size": self.column_sample_size,
            "categorical_unique_ratio": self.categorical_unique_ratio,
            "categorical_max_distinct": self.categorical_max_distinct,
            "max_charts_per_section": self.max_charts_per_section,
            "max_profile_options": self.max_profile_options,
            "report_title": self.report_title,
            "google_service_account_email": self.google_service_account_email,
            "google_service_account_private_key": (
                "***"
                if self.google_service_account_private_key.get_secret_value()
                else "(not set)"
            ),
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if not s.publishing_configured:
        logger.warning(
            "Google service account is not configured. Publishing to Google "
            "Sheets will not work. Set SRN_GOOGLE_SERVICE_ACCOUNT_EMAIL and "
            "SRN_GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY."
        )

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_file_size_mb={s.max_file_size_mb}, "
        f"column_sample_size={s.column_sample_size}"
    )


# Create the global settings instance
settings = Settings()
