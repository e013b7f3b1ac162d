"""Tests for configuration management module."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from spreadsheet_document_engine.config import Settings


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.default_sanitize_sheet_names is False
        assert settings.import_date_format == "%Y-%m-%d %H:%M:%S"
        assert settings.import_time_format == "%H:%M:%S"
        assert settings.import_locale == "en_US"
        assert settings.max_digit_width == 7.0
        assert settings.text_padding == 5.0
        assert settings.log_level == "INFO"
        assert settings.debug is False

    def test_env_overrides(self) -> None:
        """Environment variables with the SDE_ prefix override defaults."""
        env = {
            "SDE_DEFAULT_SANITIZE_SHEET_NAMES": "true",
            "SDE_IMPORT_DATE_FORMAT": "%d.%m.%Y",
            "SDE_MAX_DIGIT_WIDTH": "8",
            "SDE_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.default_sanitize_sheet_names is True
        assert settings.import_date_format == "%d.%m.%Y"
        assert settings.max_digit_width == 8.0
        assert settings.log_level == "DEBUG"

    def test_unprefixed_variables_ignored(self) -> None:
        """Variables without the prefix are not read."""
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"


class TestSettingsValidation:
    """Tests for field validators."""

    def test_invalid_log_level(self) -> None:
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="VERBOSE")

    @pytest.mark.parametrize("field", ["max_digit_width", "text_padding"])
    def test_negative_pixels(self, field: str) -> None:
        """Pixel measures cannot be negative."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: -1})

    @pytest.mark.parametrize("field", ["import_date_format", "import_time_format"])
    def test_pattern_without_directive(self, field: str) -> None:
        """Date and time patterns need a % directive."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: "yyyy-MM-dd"})

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("CRITICAL", logging.CRITICAL)],
    )
    def test_log_level_int(self, level: str, expected: int) -> None:
        """The level name maps to the logging constant."""
        assert Settings(_env_file=None, log_level=level).log_level_int == expected

    def test_debug_forces_debug_level(self) -> None:
        """debug=True overrides the configured level."""
        settings = Settings(_env_file=None, log_level="ERROR", debug=True)
        assert settings.log_level == "ERROR"
        assert settings.log_level_int == logging.DEBUG
