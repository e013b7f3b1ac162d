"""Builders for frequently used formulas.

Formulas are not evaluated. Every builder returns a formula Cell whose
value is the formula text, ready to be stored with
``Worksheet.add_cell``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from spreadsheet_document_engine.addressing import Address, Range
from spreadsheet_document_engine.cell import Cell
from spreadsheet_document_engine.models import CellType
from spreadsheet_document_engine.utils.exceptions import ErrorCode, FormatError, RangeError

if TYPE_CHECKING:
    from spreadsheet_document_engine.worksheet import Worksheet

LookupNumber = int | float | Decimal

_MAX_DECIMALS = 18


def _prefix(target: Worksheet | None) -> str:
    if target is None or not target.sheet_name:
        return ""
    return "'" + target.sheet_name.replace("'", "''") + "'!"


def _range_argument(target: Worksheet | None, cell_range: Range) -> str:
    if cell_range.start == cell_range.end:
        return _prefix(target) + str(cell_range.start)
    return _prefix(target) + str(cell_range)


def _basic_formula(
    target: Worksheet | None,
    cell_range: Range,
    function_name: str,
    post_argument: str | None = None,
) -> Cell:
    argument = _range_argument(target, cell_range)
    if post_argument is not None:
        argument += "," + post_argument
    return Cell(f"{function_name}({argument})", CellType.FORMULA)


def _format_number(number: LookupNumber) -> str:
    """Render a lookup number without exponent or trailing zeros."""
    if isinstance(number, bool) or not isinstance(number, (int, float, Decimal)):
        raise FormatError(
            "The lookup variable can only be a cell address or a numeric value. "
            f"The value '{number}' is invalid.",
            ErrorCode.INVALID_VALUE,
            value=number,
        )
    if isinstance(number, int):
        return str(number)
    text = format(Decimal(str(number)) if isinstance(number, float) else number, "f")
    if "." not in text:
        return text
    whole, fraction = text.split(".", 1)
    fraction = fraction[:_MAX_DECIMALS].rstrip("0")
    if not fraction:
        return "0" if whole in ("-0", "") else whole
    return f"{whole}.{fraction}"


class BasicFormulas:
    """Formula builders. ``target`` prefixes references with a sheet name."""

    @staticmethod
    def average(cell_range: Range, target: Worksheet | None = None) -> Cell:
        return _basic_formula(target, cell_range, "AVERAGE")

    @staticmethod
    def ceil(address: Address, decimals: int, target: Worksheet | None = None) -> Cell:
        """Round up to a number of decimals (ROUNDUP)."""
        return _basic_formula(target, Range(address, address), "ROUNDUP", str(decimals))

    @staticmethod
    def floor(address: Address, decimals: int, target: Worksheet | None = None) -> Cell:
        """Round down to a number of decimals (ROUNDDOWN)."""
        return _basic_formula(target, Range(address, address), "ROUNDDOWN", str(decimals))

    @staticmethod
    def max(cell_range: Range, target: Worksheet | None = None) -> Cell:
        return _basic_formula(target, cell_range, "MAX")

    @staticmethod
    def median(cell_range: Range, target: Worksheet | None = None) -> Cell:
        return _basic_formula(target, cell_range, "MEDIAN")

    @staticmethod
    def min(cell_range: Range, target: Worksheet | None = None) -> Cell:
        return _basic_formula(target, cell_range, "MIN")

    @staticmethod
    def round(address: Address, decimals: int, target: Worksheet | None = None) -> Cell:
        return _basic_formula(target, Range(address, address), "ROUND", str(decimals))

    @staticmethod
    def sum(cell_range: Range, target: Worksheet | None = None) -> Cell:
        return _basic_formula(target, cell_range, "SUM")

    @staticmethod
    def vlookup(
        lookup: Address | LookupNumber,
        cell_range: Range,
        column_index: int,
        exact_match: bool,
        range_target: Worksheet | None = None,
        query_target: Worksheet | None = None,
    ) -> Cell:
        """Build a VLOOKUP formula.

        Args:
            lookup: Address of the lookup value, or a number.
            cell_range: Range searched in its first column.
            column_index: 1-based column of the range to return.
            exact_match: Whether only exact matches are returned.
            range_target: Worksheet holding the range.
            query_target: Worksheet holding the lookup address.

        Raises:
            RangeError: If the column index is outside the range width.
            FormatError: If the lookup value is neither an address nor a number.
        """
        width = cell_range.max_column - cell_range.min_column + 1
        if not 1 <= column_index <= width:
            raise RangeError(
                f"The column index on range {cell_range} can only be between 1 and {width}",
                value=column_index,
                minimum=1,
                maximum=width,
            )
        if isinstance(lookup, Address):
            first = _prefix(query_target) + str(lookup)
        else:
            first = _format_number(lookup)
        second = _prefix(range_target) + str(cell_range)
        match = "TRUE" if exact_match else "FALSE"
        return Cell(f"VLOOKUP({first},{second},{column_index},{match})", CellType.FORMULA)
