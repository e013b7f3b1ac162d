"""Cell and range addressing.

Converts between zero-based (column, row) pairs and the textual address
grammar ``$A$1``. Column letters are a bijective base-26 numeral system
without a zero digit: column 0 is ``A``, 25 is ``Z`` and 26 is ``AA``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from spreadsheet_document_engine.models import AddressScope, AddressType
from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    FormatError,
    RangeError,
)

MIN_COLUMN_NUMBER = 0
MAX_COLUMN_NUMBER = 16383
MIN_ROW_NUMBER = 0
MAX_ROW_NUMBER = 1048575

_ADDRESS_PATTERN = re.compile(r"^(\$?)([A-Z]{1,3})(\$?)([0-9]{1,7})$", re.IGNORECASE)
_LETTERS_PATTERN = re.compile(r"^[A-Z]+$", re.IGNORECASE)


def validate_column_number(column: int) -> None:
    """Raise RangeError if a column index is outside 0..16383."""
    if not MIN_COLUMN_NUMBER <= column <= MAX_COLUMN_NUMBER:
        raise RangeError(
            f"The column number ({column}) is out of range",
            ErrorCode.COLUMN_OUT_OF_RANGE,
            value=column,
            minimum=MIN_COLUMN_NUMBER,
            maximum=MAX_COLUMN_NUMBER,
        )


def validate_row_number(row: int) -> None:
    """Raise RangeError if a row index is outside 0..1048575."""
    if not MIN_ROW_NUMBER <= row <= MAX_ROW_NUMBER:
        raise RangeError(
            f"The row number ({row}) is out of range",
            ErrorCode.ROW_OUT_OF_RANGE,
            value=row,
            minimum=MIN_ROW_NUMBER,
            maximum=MAX_ROW_NUMBER,
        )


def encode_column(column: int) -> str:
    """Convert a zero-based column index to its letters.

    Args:
        column: Column index in 0..16383.

    Returns:
        Column letters, e.g. ``"A"`` for 0 and ``"XFD"`` for 16383.

    Raises:
        RangeError: If the index is out of bounds.
    """
    validate_column_number(column)
    letters = []
    n = column + 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def decode_column(letters: str) -> int:
    """Convert column letters (case-insensitive) to a zero-based index.

    Raises:
        RangeError: If the input is empty or decodes out of bounds.
        FormatError: If the input contains anything other than letters.
    """
    if not letters:
        raise RangeError(
            "The column address is empty", ErrorCode.COLUMN_OUT_OF_RANGE
        )
    if not _LETTERS_PATTERN.match(letters):
        raise FormatError(
            f"The column address '{letters}' is not valid",
            ErrorCode.INVALID_ADDRESS,
            value=letters,
        )
    result = 0
    for ch in letters.upper():
        result = result * 26 + (ord(ch) - ord("A") + 1)
    column = result - 1
    validate_column_number(column)
    return column


def encode_address(
    column: int, row: int, address_type: AddressType = AddressType.DEFAULT
) -> str:
    """Build the textual address for a cell position.

    Args:
        column: Zero-based column index.
        row: Zero-based row index.
        address_type: Which parts carry a ``$`` modifier.

    Returns:
        Address text such as ``"B3"`` or ``"$B$3"``.
    """
    validate_row_number(row)
    letters = encode_column(column)
    column_prefix = (
        "$"
        if address_type in (AddressType.FIXED_COLUMN, AddressType.FIXED_ROW_AND_COLUMN)
        else ""
    )
    row_prefix = (
        "$"
        if address_type in (AddressType.FIXED_ROW, AddressType.FIXED_ROW_AND_COLUMN)
        else ""
    )
    return f"{column_prefix}{letters}{row_prefix}{row + 1}"


def decode_address(text: str) -> Address:
    """Parse address text into an Address.

    Raises:
        FormatError: If the text does not match the address grammar.
        RangeError: If the column or row is out of bounds.
    """
    if not text:
        raise FormatError("The cell address is empty", ErrorCode.INVALID_ADDRESS)
    match = _ADDRESS_PATTERN.match(text)
    if match is None:
        raise FormatError(
            f"The format of the cell address '{text}' is malformed",
            ErrorCode.INVALID_ADDRESS,
            value=text,
        )
    fixed_column = match.group(1) == "$"
    fixed_row = match.group(3) == "$"
    column = decode_column(match.group(2))
    row = int(match.group(4)) - 1
    validate_row_number(row)

    if fixed_column and fixed_row:
        address_type = AddressType.FIXED_ROW_AND_COLUMN
    elif fixed_column:
        address_type = AddressType.FIXED_COLUMN
    elif fixed_row:
        address_type = AddressType.FIXED_ROW
    else:
        address_type = AddressType.DEFAULT
    return Address(column, row, address_type)


def resolve_cell_coordinate(text: str) -> tuple[int, int]:
    """Return the (column, row) pair of address text."""
    address = decode_address(text)
    return address.column, address.row


def decode_range(text: str) -> Range:
    """Parse range text such as ``"A1:C3"`` into a normalized Range.

    Raises:
        FormatError: If the text is empty or does not split into exactly two
            addresses, or if either address is malformed.
        RangeError: If either address is out of bounds.
    """
    if not text:
        raise FormatError("The cell range is empty", ErrorCode.INVALID_RANGE)
    parts = text.split(":")
    if len(parts) != 2:
        raise FormatError(
            f"The cell range '{text}' is malformed",
            ErrorCode.INVALID_RANGE,
            value=text,
        )
    return Range(decode_address(parts[0]), decode_address(parts[1]))


def address_scope(text: str) -> AddressScope:
    """Classify an expression as a single address, a range, or invalid."""
    try:
        decode_address(text)
        return AddressScope.SINGLE_ADDRESS
    except (FormatError, RangeError):
        pass
    try:
        decode_range(text)
        return AddressScope.RANGE
    except (FormatError, RangeError):
        return AddressScope.INVALID


def enclosed_addresses(cell_range: Range) -> list[Address]:
    """Return every address inside a range, column by column then row by row."""
    return cell_range.enclosed_addresses()


@dataclass(frozen=True)
class Address:
    """Immutable cell address.

    Equality compares column, row and type. Ordering is column-major and
    ignores the type.
    """

    column: int
    row: int
    type: AddressType = AddressType.DEFAULT

    def __post_init__(self) -> None:
        validate_column_number(self.column)
        validate_row_number(self.row)

    @classmethod
    def parse(cls, text: str) -> Address:
        """Parse address text."""
        return decode_address(text)

    @property
    def column_letters(self) -> str:
        """Column part of the address without modifiers."""
        return encode_column(self.column)

    @property
    def sort_key(self) -> int:
        """Column-major position used for ordering."""
        return self.column * (MAX_ROW_NUMBER + 1) + self.row

    def get_address(self) -> str:
        """Address text including ``$`` modifiers."""
        return encode_address(self.column, self.row, self.type)

    def copy(self) -> Address:
        """Return an equal address."""
        return Address(self.column, self.row, self.type)

    def __lt__(self, other: Address) -> bool:
        return self.sort_key < other.sort_key

    def __le__(self, other: Address) -> bool:
        return self.sort_key <= other.sort_key

    def __gt__(self, other: Address) -> bool:
        return self.sort_key > other.sort_key

    def __ge__(self, other: Address) -> bool:
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        return self.get_address()


@dataclass(frozen=True)
class Range:
    """Rectangular cell range with start <= end under Address ordering."""

    start: Address
    end: Address

    def __post_init__(self) -> None:
        if self.start > self.end:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @classmethod
    def parse(cls, text: str) -> Range:
        """Parse range text."""
        return decode_range(text)

    @classmethod
    def from_coordinates(
        cls, start_column: int, start_row: int, end_column: int, end_row: int
    ) -> Range:
        """Build a range from two corner positions."""
        return cls(Address(start_column, start_row), Address(end_column, end_row))

    @property
    def min_column(self) -> int:
        return min(self.start.column, self.end.column)

    @property
    def max_column(self) -> int:
        return max(self.start.column, self.end.column)

    @property
    def min_row(self) -> int:
        return min(self.start.row, self.end.row)

    @property
    def max_row(self) -> int:
        return max(self.start.row, self.end.row)

    @property
    def size(self) -> int:
        """Number of enclosed addresses."""
        return (self.max_column - self.min_column + 1) * (
            self.max_row - self.min_row + 1
        )

    def enclosed_addresses(self) -> list[Address]:
        """Materialize all enclosed addresses in column-major order."""
        return [
            Address(column, row)
            for column in range(self.min_column, self.max_column + 1)
            for row in range(self.min_row, self.max_row + 1)
        ]

    def contains(self, address: Address) -> bool:
        """Whether an address lies inside the rectangle."""
        return (
            self.min_column <= address.column <= self.max_column
            and self.min_row <= address.row <= self.max_row
        )

    def overlaps(self, other: Range) -> bool:
        """Whether two ranges share at least one address."""
        return (
            self.min_column <= other.max_column
            and other.min_column <= self.max_column
            and self.min_row <= other.max_row
            and other.min_row <= self.max_row
        )

    def copy(self) -> Range:
        return Range(self.start.copy(), self.end.copy())

    def __str__(self) -> str:
        return f"{self.start}:{self.end}"
