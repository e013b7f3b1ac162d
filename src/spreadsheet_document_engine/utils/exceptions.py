"""Exceptions raised by the spreadsheet document engine.

    SDEError
    ├── FormatError      malformed text, or a value a conversion cannot represent
    ├── RangeError       a number outside its documented bound
    ├── WorksheetError   a well-formed call breaking a worksheet/workbook invariant
    ├── StyleError       invalid style data or a missing style repository
    └── LoadError        decoded data that cannot be turned into a workbook

Every error carries an ``ErrorCode`` ("E" plus four digits) whose first digit
names the category, and a ``details`` dict with the offending input.
None of these derive from ``ValueError``, so they propagate unwrapped out of
pydantic validators.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes, grouped by leading digit.

    - E1xxx: format
    - E2xxx: range
    - E3xxx: worksheet and workbook structure
    - E4xxx: styles
    - E5xxx: loading
    - E9xxx: internal
    """

    INVALID_ADDRESS = "E1001"
    INVALID_RANGE = "E1002"
    INVALID_DATE = "E1003"
    INVALID_DURATION = "E1004"
    INVALID_DIMENSION = "E1005"
    INVALID_WORKSHEET_NAME = "E1006"
    INVALID_VALUE = "E1007"

    OUT_OF_RANGE = "E2001"
    COLUMN_OUT_OF_RANGE = "E2002"
    ROW_OUT_OF_RANGE = "E2003"
    MERGE_OVERLAP = "E2004"
    MERGE_NOT_FOUND = "E2005"
    VALUE_COUNT_MISMATCH = "E2006"

    WORKSHEET_NOT_FOUND = "E3001"
    DUPLICATE_WORKSHEET = "E3002"
    INVALID_WORKSHEET_STATE = "E3003"
    CELL_NOT_FOUND = "E3004"
    SPLIT_ORDER_VIOLATION = "E3005"
    MISSING_WORKBOOK = "E3006"

    INVALID_STYLE = "E4001"
    MISSING_STYLE_REPOSITORY = "E4002"
    INVALID_COLOR = "E4003"

    LOAD_FAILED = "E5001"
    UNKNOWN_STYLE_INDEX = "E5002"

    INTERNAL_ERROR = "E9001"


def _with_fields(details: dict[str, Any] | None, **fields: Any) -> dict[str, Any]:
    merged = dict(details or {})
    merged.update({key: value for key, value in fields.items() if value is not None})
    return merged


class SDEError(Exception):
    """Base class of every error raised by the library.

    Attributes:
        message: Human-readable description.
        error_code: Code identifying the failure.
        details: Offending input and related context, possibly empty.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: code, message and details when there are any."""
        payload: dict[str, Any] = {"error_code": self.error_code.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"


class FormatError(SDEError):
    """Malformed textual input, or a value outside a conversion's domain.

    ``value`` is kept as given; ``details["value"]`` holds its ``str()``.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_VALUE,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        text = None if value is None else str(value)
        super().__init__(message, error_code, _with_fields(details, value=text))
        self.value = value


class RangeError(SDEError):
    """A numeric value outside ``[minimum, maximum]``."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.OUT_OF_RANGE,
        value: Any = None,
        minimum: float | None = None,
        maximum: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = _with_fields(details, value=value, minimum=minimum, maximum=maximum)
        super().__init__(message, error_code, merged)
        self.value = value
        self.minimum = minimum
        self.maximum = maximum


class WorksheetError(SDEError):
    """A valid call that would break a worksheet or workbook invariant."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_WORKSHEET_STATE,
        worksheet: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, _with_fields(details, worksheet=worksheet))
        self.worksheet = worksheet


class StyleError(SDEError):
    """Invalid facet data, or styling a cell with no style repository."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_STYLE,
        facet: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, _with_fields(details, facet=facet))
        self.facet = facet


class LoadError(SDEError):
    """Decoded workbook data that cannot be turned into a model."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.LOAD_FAILED,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, _with_fields(details, source=source))
        self.source = source
