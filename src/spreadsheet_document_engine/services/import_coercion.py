"""Type coercion applied to decoded cell values.

Decoded values arrive with the type the container stored them with. The
coercion engine reshapes them according to ``ImportOptions``:

1. A per-column policy applies to rows at or after the start row.
   Formulas are never touched.
2. A global strategy, when not ``DEFAULT``, applies afterwards and wins.
3. The date/time-as-number and empty-as-string flags apply last.

The resulting cell type is resolved from the runtime type of the value.
Strings that cannot be parsed into the requested type pass through
unchanged; coercion never raises for unparseable input.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from spreadsheet_document_engine.addressing import decode_column, validate_column_number
from spreadsheet_document_engine.cell import infer_cell_type, is_numeric
from spreadsheet_document_engine.config import settings
from spreadsheet_document_engine.models import CellType
from spreadsheet_document_engine.units import (
    FIRST_ALLOWED_DATE,
    LAST_ALLOWED_DATE,
    MAX_OADATE_VALUE,
    date_from_epoch,
    duration_from_epoch,
    epoch_from_date,
    epoch_from_duration,
    epoch_from_time_of_day,
    parse_date,
    parse_time,
)
from spreadsheet_document_engine.utils.exceptions import FormatError

_DURATION_ROOT = datetime(1899, 12, 31)
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_BOOL_TOLERANCE = 1e-6


class GlobalType(str, Enum):
    """Strategy applied to every decoded value."""

    DEFAULT = "default"
    ALL_NUMBERS_TO_FLOAT = "all_numbers_to_float"
    ALL_NUMBERS_TO_DECIMAL = "all_numbers_to_decimal"
    ALL_NUMBERS_TO_INT = "all_numbers_to_int"
    EVERYTHING_TO_STRING = "everything_to_string"


class ColumnType(str, Enum):
    """Type enforced on the values of one column."""

    NUMERIC = "numeric"
    FLOAT = "float"
    DECIMAL = "decimal"
    DATE = "date"
    TIME = "time"
    BOOL = "bool"
    STRING = "string"


class ImportOptions(BaseModel):
    """Options controlling how decoded values are coerced.

    Attributes:
        global_enforcing_type: Strategy applied to every value.
        enforced_column_types: Column policies keyed by zero-based column
            number. Column letters are accepted and converted.
        enforcing_start_row_number: First zero-based row that is coerced.
        enforce_date_times_as_numbers: Store dates and times as epoch numbers.
        enforce_empty_values_as_string: Store empty values as "".
        date_time_format: strptime/strftime pattern for dates.
        time_format: strptime/strftime pattern for times.
        locale: Locale name recorded for date and time rendering.
    """

    global_enforcing_type: GlobalType = GlobalType.DEFAULT
    enforced_column_types: dict[int, ColumnType] = Field(default_factory=dict)
    enforcing_start_row_number: int = Field(default=0, ge=0)
    enforce_date_times_as_numbers: bool = False
    enforce_empty_values_as_string: bool = False
    date_time_format: str = Field(default_factory=lambda: settings.import_date_format)
    time_format: str = Field(default_factory=lambda: settings.import_time_format)
    locale: str = Field(default_factory=lambda: settings.import_locale)

    @field_validator("enforced_column_types", mode="before")
    @classmethod
    def normalize_column_keys(cls, value: Any) -> Any:
        """Accept column letters as keys and validate column numbers."""
        if not isinstance(value, dict):
            return value
        normalized: dict[int, Any] = {}
        for key, column_type in value.items():
            column = decode_column(key) if isinstance(key, str) else key
            validate_column_number(column)
            normalized[column] = column_type
        return normalized

    def add_enforced_column(self, column: int | str, column_type: ColumnType) -> None:
        """Register or replace the policy of one column."""
        number = decode_column(column) if isinstance(column, str) else column
        validate_column_number(number)
        self.enforced_column_types[number] = column_type


# =============================================================================
# Parsing helpers
# =============================================================================


def _parse_number(text: str) -> int | float | None:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_decimal(text: str) -> Decimal | None:
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _in_date_range(value: datetime) -> bool:
    return FIRST_ALLOWED_DATE <= value <= LAST_ALLOWED_DATE


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _time_of_day(value: datetime | time) -> timedelta:
    return timedelta(hours=value.hour, minutes=value.minute, seconds=value.second)


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


class ImportCoercionEngine:
    """Resolve the final value and type of decoded cells."""

    def __init__(self, options: ImportOptions | None = None) -> None:
        self.options = options or ImportOptions()

    def coerce(
        self,
        value: Any,
        imported_type: CellType = CellType.DEFAULT,
        column: int = 0,
        row: int = 0,
    ) -> tuple[Any, CellType]:
        """Coerce one decoded value.

        Args:
            value: Value as decoded from the container.
            imported_type: Type the container stored the value with.
            column: Zero-based column of the cell.
            row: Zero-based row of the cell.

        Returns:
            Tuple of the coerced value and its cell type.
        """
        options = self.options
        if imported_type == CellType.DEFAULT:
            imported_type = infer_cell_type(value)
        data = value
        if row >= options.enforcing_start_row_number:
            column_type = options.enforced_column_types.get(column)
            if column_type is not None and imported_type != CellType.FORMULA:
                data = self._enforce_column(data, column_type)
            if imported_type != CellType.FORMULA:
                data = self._enforce_globally(data)
            data = self._apply_flags(data)

        if imported_type == CellType.FORMULA and data is not None:
            return data, CellType.FORMULA
        if isinstance(data, datetime) and data < FIRST_ALLOWED_DATE:
            data = data + timedelta(days=1)
        return data, infer_cell_type(data)

    # ------------------------------------------------------------------ #
    # Policies
    # ------------------------------------------------------------------ #

    def _enforce_column(self, data: Any, column_type: ColumnType) -> Any:
        if column_type == ColumnType.NUMERIC:
            return self.to_numeric(data)
        if column_type == ColumnType.FLOAT:
            return self.to_float(data)
        if column_type == ColumnType.DECIMAL:
            return self.to_decimal(data)
        if column_type == ColumnType.DATE:
            return self.to_date(data)
        if column_type == ColumnType.TIME:
            return self.to_time(data)
        if column_type == ColumnType.BOOL:
            return self.to_bool(data)
        return self.to_string(data)

    def _enforce_globally(self, data: Any) -> Any:
        strategy = self.options.global_enforcing_type
        if strategy == GlobalType.DEFAULT:
            return data
        if strategy == GlobalType.ALL_NUMBERS_TO_FLOAT:
            converted = self.to_float(data)
        elif strategy == GlobalType.ALL_NUMBERS_TO_DECIMAL:
            converted = self.to_decimal(data)
        elif strategy == GlobalType.ALL_NUMBERS_TO_INT:
            converted = self.to_int(data)
        else:
            converted = self.to_string(data)
        return data if converted is None else converted

    def _apply_flags(self, data: Any) -> Any:
        if self.options.enforce_date_times_as_numbers:
            if isinstance(data, date):
                return epoch_from_date(_as_datetime(data), skip_validation=True)
            if isinstance(data, timedelta):
                return epoch_from_duration(data)
            if isinstance(data, time):
                return epoch_from_time_of_day(data)
        if self.options.enforce_empty_values_as_string and data is None:
            return ""
        return data

    # ------------------------------------------------------------------ #
    # Conversions
    # ------------------------------------------------------------------ #

    def parse_date_text(self, text: str) -> datetime | None:
        """Parse a date with the configured pattern, or None."""
        try:
            parsed = parse_date(text, self.options.date_time_format)
        except FormatError:
            return None
        return parsed if _in_date_range(parsed) else None

    def parse_time_text(self, text: str) -> timedelta | None:
        """Parse a time with the configured pattern, or None."""
        try:
            return parse_time(text, self.options.time_format)
        except FormatError:
            return None

    @staticmethod
    def parse_bool_text(text: str) -> bool | None:
        lowered = text.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        return None

    def to_numeric(self, data: Any) -> Any:
        """Convert to a number, keeping ints as ints where possible."""
        if isinstance(data, bool):
            return 1 if data else 0
        if is_numeric(data):
            return data
        if isinstance(data, date):
            return epoch_from_date(_as_datetime(data), skip_validation=True)
        if isinstance(data, timedelta):
            return epoch_from_duration(data)
        if isinstance(data, time):
            return epoch_from_time_of_day(data)
        if isinstance(data, str):
            number = _parse_number(data)
            if number is not None:
                return number
            parsed_date = self.parse_date_text(data)
            if parsed_date is not None:
                return epoch_from_date(parsed_date)
            parsed_time = self.parse_time_text(data)
            if parsed_time is not None:
                return epoch_from_duration(parsed_time)
            flag = self.parse_bool_text(data)
            if flag is not None:
                return 1 if flag else 0
        return data

    def to_decimal(self, data: Any) -> Any:
        if data is None:
            return None
        if isinstance(data, bool):
            return Decimal(1) if data else Decimal(0)
        if isinstance(data, Decimal):
            return data
        if isinstance(data, int):
            return Decimal(data)
        if isinstance(data, float):
            return Decimal(str(data)) if math.isfinite(data) else data
        if isinstance(data, date):
            return Decimal(str(epoch_from_date(_as_datetime(data), skip_validation=True)))
        if isinstance(data, timedelta):
            return Decimal(str(epoch_from_duration(data)))
        if isinstance(data, time):
            return Decimal(str(epoch_from_time_of_day(data)))
        if isinstance(data, str):
            number = _parse_decimal(data)
            if number is not None:
                return number
            parsed_date = self.parse_date_text(data)
            if parsed_date is not None:
                return Decimal(str(epoch_from_date(parsed_date)))
            parsed_time = self.parse_time_text(data)
            if parsed_time is not None:
                return Decimal(str(epoch_from_duration(parsed_time)))
        return data

    def to_float(self, data: Any) -> Any:
        converted = self.to_decimal(data)
        if isinstance(converted, Decimal):
            return float(converted)
        return converted

    def to_int(self, data: Any) -> int | None:
        """Convert to an int with half-up rounding, or None if impossible."""
        if data is None:
            return None
        if isinstance(data, bool):
            return 1 if data else 0
        if isinstance(data, int):
            return data
        if isinstance(data, (float, Decimal)):
            number = float(data)
            if not math.isfinite(number) or not _INT32_MIN <= number <= _INT32_MAX:
                return None
            return _round_half_up(number)
        if isinstance(data, date):
            return _round_half_up(
                epoch_from_date(_as_datetime(data), skip_validation=True)
            )
        if isinstance(data, timedelta):
            return _round_half_up(epoch_from_duration(data))
        if isinstance(data, time):
            return _round_half_up(epoch_from_time_of_day(data))
        if isinstance(data, str):
            try:
                return int(data)
            except ValueError:
                return None
        return None

    def to_bool(self, data: Any) -> Any:
        if data is None or isinstance(data, bool):
            return data
        if is_numeric(data):
            number = float(data)
            if abs(number) < _BOOL_TOLERANCE:
                return False
            if abs(number - 1) < _BOOL_TOLERANCE:
                return True
            return data
        if isinstance(data, str):
            flag = self.parse_bool_text(data)
            return data if flag is None else flag
        return data

    def to_date(self, data: Any) -> Any:
        if data is None:
            return None
        if isinstance(data, date):
            return _as_datetime(data)
        if isinstance(data, timedelta):
            return _DURATION_ROOT + data
        if isinstance(data, bool):
            return data
        if is_numeric(data):
            return self._date_from_number(data)
        if isinstance(data, str):
            parsed = self.parse_date_text(data)
            if parsed is not None:
                return parsed
            number = _parse_number(data)
            if number is not None:
                return self._date_from_number(number)
        return data

    def _date_from_number(self, data: Any) -> Any:
        number = float(data)
        try:
            converted = date_from_epoch(number)
        except FormatError:
            return data
        return converted if _in_date_range(converted) else data

    def to_time(self, data: Any) -> Any:
        if data is None or isinstance(data, timedelta):
            return data
        if isinstance(data, (datetime, time)):
            return _time_of_day(data)
        if isinstance(data, bool):
            return data
        if is_numeric(data):
            return self._time_from_number(data)
        if isinstance(data, str):
            parsed = self.parse_time_text(data)
            if parsed is not None:
                return parsed
            number = _parse_number(data)
            if number is not None:
                return self._time_from_number(number)
        return data

    @staticmethod
    def _time_from_number(data: Any) -> Any:
        number = float(data)
        if 0 <= number <= MAX_OADATE_VALUE:
            return duration_from_epoch(number)
        return data

    def to_string(self, data: Any) -> Any:
        if data is None:
            return None
        if isinstance(data, str):
            return data
        if isinstance(data, bool):
            return "true" if data else "false"
        if isinstance(data, date):
            return _as_datetime(data).strftime(self.options.date_time_format)
        if isinstance(data, timedelta):
            of_day = data % timedelta(days=1)
            return (datetime(1900, 1, 1) + of_day).strftime(self.options.time_format)
        if isinstance(data, time):
            return data.strftime(self.options.time_format)
        return str(data)

