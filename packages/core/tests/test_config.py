"""Tests for the configuration system."""

from decimal import Decimal

import pytest

from ledgerlens_core.config import DEFAULT_MAX_FILE_SIZE, IngestionSettings, load_settings
from ledgerlens_core.exceptions import ConfigurationError


class TestIngestionSettings:
    """Test suite for IngestionSettings."""

    def test_default_values(self, monkeypatch, tmp_path):
        """Settings should have the documented defaults."""
        monkeypatch.chdir(tmp_path)
        settings = IngestionSettings()

        assert settings.max_file_size_bytes == DEFAULT_MAX_FILE_SIZE == 100 * 1024 * 1024
        assert settings.max_file_size_mb == 100
        assert settings.header_scan_rows == 15
        assert settings.min_document_chars == 50
        assert settings.line_tolerance == 5.0
        assert settings.min_line_length == 10
        assert settings.description_max_length == 100
        assert settings.duplicate_similarity == 0.8
        assert settings.duplicate_amount_tolerance == Decimal("0.01")
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    def test_from_environment(self, monkeypatch):
        """Settings should load from LEDGERLENS_ environment variables."""
        monkeypatch.setenv("LEDGERLENS_MAX_FILE_SIZE_BYTES", "2048")
        monkeypatch.setenv("LEDGERLENS_HEADER_SCAN_ROWS", "30")
        monkeypatch.setenv("LEDGERLENS_DUPLICATE_SIMILARITY", "0.9")
        monkeypatch.setenv("LEDGERLENS_LOG_LEVEL", "debug")
        monkeypatch.setenv("LEDGERLENS_LOG_JSON", "true")

        settings = IngestionSettings()

        assert settings.max_file_size_bytes == 2048
        assert settings.header_scan_rows == 30
        assert settings.duplicate_similarity == 0.9
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True

    def test_from_env_file(self, monkeypatch, tmp_path):
        """Settings should read a .env file in the working directory."""
        (tmp_path / ".env").write_text("LEDGERLENS_MIN_DOCUMENT_CHARS=10\n")
        monkeypatch.chdir(tmp_path)

        assert IngestionSettings().min_document_chars == 10

    def test_log_level_validation(self):
        """Log level must be a known level name."""
        assert IngestionSettings(log_level=" warning ").log_level == "WARNING"

        with pytest.raises(ValueError):
            IngestionSettings(log_level="VERBOSE")

    def test_numeric_bounds(self):
        """Thresholds reject out-of-range values."""
        with pytest.raises(ValueError):
            IngestionSettings(max_file_size_bytes=0)

        with pytest.raises(ValueError):
            IngestionSettings(duplicate_similarity=1.5)

        with pytest.raises(ValueError):
            IngestionSettings(header_scan_rows=0)

        with pytest.raises(ValueError):
            IngestionSettings(description_max_length=0)


class TestLoadSettings:
    """Test suite for load_settings."""

    def test_overrides(self):
        assert load_settings(header_scan_rows=25).header_scan_rows == 25

    def test_invalid_value_raises_configuration_error(self, monkeypatch):
        """Invalid environment values surface as ConfigurationError."""
        monkeypatch.setenv("LEDGERLENS_LINE_TOLERANCE", "-1")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings()

        assert exc_info.value.config_key == "line_tolerance"
        assert exc_info.value.details["errors"] == 1
