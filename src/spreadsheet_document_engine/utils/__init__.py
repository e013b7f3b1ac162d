"""Utilities package for the spreadsheet document engine.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    FormatError,
    LoadError,
    RangeError,
    SDEError,
    StyleError,
    WorksheetError,
)
from spreadsheet_document_engine.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    timed_operation,
)

__all__ = [
    # Exceptions
    "ErrorCode",
    "FormatError",
    "LoadError",
    "RangeError",
    "SDEError",
    "StyleError",
    "WorksheetError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "timed_operation",
]
