"""Engine settings, read by pydantic-settings from ``SDE_``-prefixed variables.

A ``.env`` file in the working directory is honoured as well.

    SDE_DEFAULT_SANITIZE_SHEET_NAMES   rename colliding sheet names instead of failing
    SDE_IMPORT_DATE_FORMAT             strptime pattern for dates read as text
    SDE_IMPORT_TIME_FORMAT             strptime pattern for times read as text
    SDE_IMPORT_LOCALE                  locale tag carried by import options
    SDE_MAX_DIGIT_WIDTH                widest digit of the default font, in pixels
    SDE_TEXT_PADDING                   cell text padding, in pixels
    SDE_LOG_LEVEL                      level used by ``configure_logging``
    SDE_DEBUG                          force DEBUG regardless of SDE_LOG_LEVEL
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Process-wide defaults of the engine.

    Example .env file:
        SDE_LOG_LEVEL=DEBUG
        SDE_IMPORT_DATE_FORMAT=%d.%m.%Y %H:%M:%S
    """

    model_config = SettingsConfigDict(
        env_prefix="SDE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Workbook
    default_sanitize_sheet_names: bool = False

    # Import coercion
    import_date_format: str = "%Y-%m-%d %H:%M:%S"
    import_time_format: str = "%H:%M:%S"
    import_locale: str = "en_US"

    # Column width conversions
    max_digit_width: float = 7.0
    text_padding: float = 5.0

    # Logging
    log_level: str = "INFO"
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize to upper case and reject names ``logging`` does not define."""
        level = v.upper()
        if level not in _LEVEL_NAMES:
            raise ValueError(f"Unknown log level {v!r}, expected one of {', '.join(_LEVEL_NAMES)}")
        return level

    @field_validator("max_digit_width", "text_padding")
    @classmethod
    def validate_pixels(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Pixel measure must not be negative, got {v}")
        return v

    @field_validator("import_date_format", "import_time_format")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        if "%" not in v:
            raise ValueError(f"Pattern must contain a % directive, got {v!r}")
        return v

    @property
    def log_level_int(self) -> int:
        """Numeric level for ``logging``; DEBUG whenever ``debug`` is set."""
        if self.debug:
            return logging.DEBUG
        level: int = getattr(logging, self.log_level)
        return level


settings = Settings()
