"""Numeric conversions between model values and their stored representation.

Dates are stored as OA-date numbers: days since 1899-12-30 with the
time of day as the fractional part. Dates before 1900-03-01 are shifted
by one day so that the fictitious 1900-02-29 keeps its slot (value 60),
matching what spreadsheet applications store.

Column widths, row heights and split pane positions are snapped to
whole pixels of the default font the same way the application does, so
that stored values compare equal after a round trip.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

from spreadsheet_document_engine.utils.exceptions import ErrorCode, FormatError

FIRST_ALLOWED_DATE = datetime(1900, 1, 1)
LAST_ALLOWED_DATE = datetime(9999, 12, 31, 23, 59, 59, 999000)
MAX_OADATE_VALUE = 2958465.999988426
MIN_OADATE_VALUE = 0.0

DEFAULT_MAX_DIGIT_WIDTH = 7.0
DEFAULT_TEXT_PADDING = 5.0
MIN_COLUMN_WIDTH = 0.0
MAX_COLUMN_WIDTH = 255.0
MIN_ROW_HEIGHT = 0.0
MAX_ROW_HEIGHT = 409.5

_ROOT_DATE = datetime(1899, 12, 30)
_LEAP_YEAR_BUG_END = datetime(1900, 3, 1)
_SECONDS_PER_DAY = 86400.0

_ROW_HEIGHT_POINT_MULTIPLIER = 4 / 3
_COLUMN_WIDTH_ROUNDING_MODIFIER = 256.0
_SPLIT_WIDTH_MULTIPLIER = 12.0
_SPLIT_WIDTH_OFFSET = 0.5
_SPLIT_WIDTH_POINT_MULTIPLIER = 3 / 4
_SPLIT_POINT_DIVIDER = 20.0
_SPLIT_WIDTH_POINT_OFFSET = 390.0
_SPLIT_HEIGHT_POINT_OFFSET = 300.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo is not None else value
    return datetime(value.year, value.month, value.day)


# =============================================================================
# Dates and times
# =============================================================================


def epoch_from_date(value: date | datetime, skip_validation: bool = False) -> float:
    """Convert a date to its OA-date number.

    Args:
        value: Date or datetime; timezone information is dropped.
        skip_validation: Skip the 1900-01-01..9999-12-31 bounds check.

    Returns:
        Days since 1899-12-30, time of day as fraction.

    Raises:
        FormatError: If the date is outside the supported range.
    """
    if value is None:
        raise FormatError("The date cannot be null", ErrorCode.INVALID_DATE)
    dt = _as_datetime(value)
    if not skip_validation and not FIRST_ALLOWED_DATE <= dt <= LAST_ALLOWED_DATE:
        raise FormatError(
            "The date is not in a valid range (1900-01-01 to 9999-12-31)",
            ErrorCode.INVALID_DATE,
            value=dt,
        )
    shifted = dt - timedelta(days=1) if dt < _LEAP_YEAR_BUG_END else dt
    days = (shifted - _ROOT_DATE).days
    seconds = dt.hour * 3600 + dt.minute * 60 + dt.second
    return days + seconds / _SECONDS_PER_DAY


def date_from_epoch(value: float) -> datetime:
    """Convert an OA-date number back to a datetime.

    Seconds are rounded to the nearest whole second.

    Raises:
        FormatError: If the value is negative or beyond 9999-12-31.
    """
    if not MIN_OADATE_VALUE <= value <= MAX_OADATE_VALUE:
        raise FormatError(
            f"The OA date value {value} is not in a valid range",
            ErrorCode.INVALID_DATE,
            value=value,
        )
    if value < 60:
        value += 1
    whole_days = int(value)
    remainder = value - whole_days
    hours = remainder * 24
    minutes = (hours - int(hours)) * 60
    seconds = round((minutes - int(minutes)) * 60)
    return _ROOT_DATE + timedelta(
        days=whole_days, hours=int(hours), minutes=int(minutes), seconds=seconds
    )


def epoch_from_duration(value: timedelta) -> float:
    """Convert a duration to fractional days."""
    if value is None:
        raise FormatError("The time cannot be null", ErrorCode.INVALID_DURATION)
    return value.total_seconds() / _SECONDS_PER_DAY


def epoch_from_time_of_day(value: time) -> float:
    """Convert a wall-clock time to fractional days."""
    seconds = value.hour * 3600 + value.minute * 60 + value.second
    return seconds / _SECONDS_PER_DAY


def duration_from_epoch(value: float) -> timedelta:
    """Convert fractional days to a duration rounded to whole seconds."""
    return timedelta(seconds=_round_half_up(value * _SECONDS_PER_DAY))


def create_duration(
    days: int = 0, hours: int = 0, minutes: int = 0, seconds: int = 0
) -> timedelta:
    """Create a duration from its components.

    Raises:
        FormatError: If a component is negative, hours exceed 23, minutes or
            seconds exceed 59, or the day count passes 9999-12-31.
    """
    if days > MAX_OADATE_VALUE:
        raise FormatError(
            f"The number of days '{days}' exceeds the maximum allowed date of 9999-12-31",
            ErrorCode.INVALID_DURATION,
            value=days,
        )
    if (
        days < 0
        or not 0 <= hours <= 23
        or not 0 <= minutes <= 59
        or not 0 <= seconds <= 59
    ):
        raise FormatError(
            "One of the passed duration components is invalid. "
            f"Days:{days}, Hours:{hours}, Minutes:{minutes}, Seconds:{seconds}",
            ErrorCode.INVALID_DURATION,
        )
    return timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds)


def parse_time(text: str, pattern: str) -> timedelta:
    """Parse a time of day into a duration using a strptime pattern.

    Raises:
        FormatError: If the text or pattern is empty or parsing fails.
    """
    if not text or not pattern:
        raise FormatError(
            "Either no time value or pattern was defined", ErrorCode.INVALID_DURATION
        )
    try:
        parsed = datetime.strptime(text, pattern)
    except ValueError as e:
        raise FormatError(
            f"The time could not be parsed: {e}", ErrorCode.INVALID_DURATION, value=text
        ) from e
    return timedelta(hours=parsed.hour, minutes=parsed.minute, seconds=parsed.second)


def parse_date(text: str, pattern: str) -> datetime:
    """Parse a date using a strptime pattern.

    Raises:
        FormatError: If the text or pattern is empty or parsing fails.
    """
    if not text or not pattern:
        raise FormatError(
            "Either no date value or pattern was defined", ErrorCode.INVALID_DATE
        )
    try:
        return datetime.strptime(text, pattern)
    except ValueError as e:
        raise FormatError(
            f"The date could not be parsed: {e}", ErrorCode.INVALID_DATE, value=text
        ) from e


# =============================================================================
# Widths and heights
# =============================================================================


def internal_column_width(
    width: float,
    max_digit_width: float = DEFAULT_MAX_DIGIT_WIDTH,
    text_padding: float = DEFAULT_TEXT_PADDING,
) -> float:
    """Snap a column width in characters to the stored width.

    Raises:
        FormatError: If the width is outside 0..255.
    """
    if not MIN_COLUMN_WIDTH <= width <= MAX_COLUMN_WIDTH:
        raise FormatError(
            f"The column width {width} is not valid. "
            f"The valid range is between {MIN_COLUMN_WIDTH} and {MAX_COLUMN_WIDTH}",
            ErrorCode.INVALID_DIMENSION,
            value=width,
        )
    if width <= 0 or max_digit_width <= 0:
        return 0.0
    if width <= 1:
        return (
            math.floor(
                width
                * (max_digit_width + text_padding)
                / max_digit_width
                * _COLUMN_WIDTH_ROUNDING_MODIFIER
            )
            / _COLUMN_WIDTH_ROUNDING_MODIFIER
        )
    return (
        math.floor(
            (width * max_digit_width + text_padding)
            / max_digit_width
            * _COLUMN_WIDTH_ROUNDING_MODIFIER
        )
        / _COLUMN_WIDTH_ROUNDING_MODIFIER
    )


def column_width(
    internal_width: float,
    max_digit_width: float = DEFAULT_MAX_DIGIT_WIDTH,
    text_padding: float = DEFAULT_TEXT_PADDING,
) -> float:
    """Inverse of internal_column_width, rounded to two decimals (lossy)."""
    if internal_width <= 0 or max_digit_width <= 0:
        return 0.0
    if internal_width <= (max_digit_width + text_padding) / max_digit_width:
        width = internal_width * max_digit_width / (max_digit_width + text_padding)
    else:
        width = (internal_width * max_digit_width - text_padding) / max_digit_width
    return min(max(round(width, 2), MIN_COLUMN_WIDTH), MAX_COLUMN_WIDTH)


def internal_row_height(height: float) -> float:
    """Snap a row height in points to a whole number of pixels.

    Raises:
        FormatError: If the height is outside 0..409.5.
    """
    if not MIN_ROW_HEIGHT <= height <= MAX_ROW_HEIGHT:
        raise FormatError(
            f"The row height {height} is not valid. "
            f"The valid range is between {MIN_ROW_HEIGHT} and {MAX_ROW_HEIGHT}",
            ErrorCode.INVALID_DIMENSION,
            value=height,
        )
    if height == 0:
        return 0.0
    return (
        _round_half_up(height * _ROW_HEIGHT_POINT_MULTIPLIER)
        / _ROW_HEIGHT_POINT_MULTIPLIER
    )


def internal_pane_split_width(
    width: float,
    max_digit_width: float = DEFAULT_MAX_DIGIT_WIDTH,
    text_padding: float = DEFAULT_TEXT_PADDING,
) -> float:
    """Convert a split position in characters to the stored point value."""
    width = max(width, 0.0)
    if width <= 1:
        pixels = math.floor(width / _SPLIT_WIDTH_MULTIPLIER + _SPLIT_WIDTH_OFFSET)
    else:
        pixels = math.floor(width * max_digit_width + _SPLIT_WIDTH_OFFSET) + text_padding
    points = pixels * _SPLIT_WIDTH_POINT_MULTIPLIER
    return points * _SPLIT_POINT_DIVIDER + _SPLIT_WIDTH_POINT_OFFSET


def internal_pane_split_height(height: float) -> float:
    """Convert a split position in points to the stored value."""
    height = max(height, 0.0)
    return math.floor(_SPLIT_POINT_DIVIDER * height + _SPLIT_HEIGHT_POINT_OFFSET)


def pane_split_width(
    internal_width: float,
    max_digit_width: float = DEFAULT_MAX_DIGIT_WIDTH,
    text_padding: float = DEFAULT_TEXT_PADDING,
) -> float:
    """Approximate inverse of internal_pane_split_width.

    The forward conversion rounds to whole pixels, so this is lossy.
    """
    points = (internal_width - _SPLIT_WIDTH_POINT_OFFSET) / _SPLIT_POINT_DIVIDER
    if points < 0.001:
        return 0.0
    width = points / _SPLIT_WIDTH_POINT_MULTIPLIER
    return (width - text_padding - _SPLIT_WIDTH_OFFSET) / max_digit_width


def pane_split_height(internal_height: float) -> float:
    """Inverse of internal_pane_split_height (lossy)."""
    if internal_height < _SPLIT_HEIGHT_POINT_OFFSET:
        return 0.0
    return (internal_height - _SPLIT_HEIGHT_POINT_OFFSET) / _SPLIT_POINT_DIVIDER


# =============================================================================
# Protection
# =============================================================================


def password_hash(password: str | None) -> str:
    """Compute the legacy 16-bit protection hash of a password.

    This is the structural marker the file format stores for sheet and
    workbook protection. It is not a cryptographic hash.

    Returns:
        Upper-case hex digits without padding, or an empty string for an
        empty password.
    """
    if not password:
        return ""
    encoded = password.encode("utf-16-le")
    code_units = [
        int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2)
    ]
    length = len(code_units)
    hash_value = 0
    for unit in reversed(code_units):
        hash_value = ((hash_value >> 14) & 0x01) | ((hash_value << 1) & 0x7FFF)
        hash_value ^= unit
    hash_value = ((hash_value >> 14) & 0x01) | ((hash_value << 1) & 0x7FFF)
    hash_value ^= 0x8000 | (ord("N") << 8) | ord("K")
    hash_value ^= length
    return format(hash_value, "X")
