"""Tests for configuration management module."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import SecretStr

from social_report.config import Settings, validate_settings_on_startup
from social_report.services.column_classifier import ClassifierThresholds


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.max_file_size_mb == 10

        # Detection defaults
        assert settings.reserved_sheet_name == "Sheet1"
        assert settings.column_sample_size == 200
        assert settings.categorical_unique_ratio == 0.6
        assert settings.categorical_max_distinct == 50

        # Dashboard defaults
        assert settings.max_charts_per_section == 6
        assert settings.max_profile_options == 50

        # Publishing defaults
        assert settings.report_title == "Looker Social Reporting"
        assert settings.google_service_account_email == ""
        assert settings.publishing_configured is False

        assert settings.log_level == "INFO"
        assert settings.debug is False
        assert settings.cors_origins == "*"
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000

    def test_environment_variable_prefix(self) -> None:
        """Environment variables use the SRN_ prefix."""
        env_vars = {
            "SRN_MAX_FILE_SIZE_MB": "25",
            "SRN_RESERVED_SHEET_NAME": " Placeholder ",
            "SRN_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.max_file_size_mb == 25
        assert settings.reserved_sheet_name == "Placeholder"
        assert settings.log_level == "DEBUG"

    def test_secret_str_for_private_key(self) -> None:
        env_vars = {
            "SRN_GOOGLE_SERVICE_ACCOUNT_EMAIL": "svc@example.iam",
            "SRN_GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY": "-----BEGIN KEY-----",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert isinstance(settings.google_service_account_private_key, SecretStr)
        assert "BEGIN KEY" not in str(settings.google_service_account_private_key)
        assert settings.publishing_configured is True

    def test_max_file_size_bytes_property(self) -> None:
        settings = Settings(_env_file=None, max_file_size_mb=3)
        assert settings.max_file_size_bytes == 3 * 1024 * 1024

    def test_classifier_thresholds(self) -> None:
        settings = Settings(
            _env_file=None,
            column_sample_size=50,
            categorical_unique_ratio=0.25,
            categorical_max_distinct=10,
        )

        assert settings.classifier_thresholds == ClassifierThresholds(
            sample_size=50, categorical_ratio=0.25, categorical_max_distinct=10
        )

    def test_cors_origins_list_multiple(self) -> None:
        env_vars = {"SRN_CORS_ORIGINS": "https://example.com, https://app.example.com"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors_origins_list == [
            "https://example.com",
            "https://app.example.com",
        ]

    def test_cors_origins_list_wildcard(self) -> None:
        settings = Settings(_env_file=None, cors_origins="*")
        assert settings.cors_origins_list == ["*"]

    def test_log_level_int_property(self) -> None:
        for name, value in [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ]:
            settings = Settings(_env_file=None, log_level=name)
            assert settings.log_level_int == value


class TestSettingsValidation:
    """Tests for field validators."""

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            Settings(_env_file=None, log_level="VERBOSE")

    @pytest.mark.parametrize("size", [0, 501])
    def test_file_size_bounds(self, size: int) -> None:
        with pytest.raises(ValueError, match="max_file_size_mb"):
            Settings(_env_file=None, max_file_size_mb=size)

    def test_sample_size_positive(self) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            Settings(_env_file=None, column_sample_size=0)

    @pytest.mark.parametrize("ratio", [-0.1, 1.5])
    def test_ratio_bounds(self, ratio: float) -> None:
        with pytest.raises(ValueError, match="Ratio"):
            Settings(_env_file=None, categorical_unique_ratio=ratio)

    @pytest.mark.parametrize("charts", [0, 21])
    def test_max_charts_bounds(self, charts: int) -> None:
        with pytest.raises(ValueError, match="max_charts_per_section"):
            Settings(_env_file=None, max_charts_per_section=charts)

    def test_port_bounds(self) -> None:
        with pytest.raises(ValueError, match="server_port"):
            Settings(_env_file=None, server_port=70000)


class TestSafeDict:
    def test_private_key_masked(self) -> None:
        settings = Settings(
            _env_file=None,
            google_service_account_private_key=SecretStr("secret"),
        )

        safe = settings.to_safe_dict()

        assert safe["google_service_account_private_key"] == "***"
        assert "secret" not in str(safe)

    def test_private_key_not_set(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            safe = Settings(_env_file=None).to_safe_dict()

        assert safe["google_service_account_private_key"] == "(not set)"
        assert safe["reserved_sheet_name"] == "Sheet1"


class TestValidateSettingsOnStartup:
    """Tests for startup warnings."""

    def test_warns_without_service_account(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.INFO, logger="social_report.config"):
            validate_settings_on_startup(settings)

        messages = [r.getMessage() for r in caplog.records]
        assert any("service account is not configured" in m for m in messages)
        assert any("CORS is configured to allow all origins" in m for m in messages)
        assert any("Configuration loaded" in m for m in messages)

    def test_no_warnings_when_configured(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings = Settings(
            _env_file=None,
            google_service_account_email="svc@example.iam",
            google_service_account_private_key=SecretStr("key"),
            cors_origins="https://example.com",
        )

        with caplog.at_level(logging.INFO, logger="social_report.config"):
            validate_settings_on_startup(settings)

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
