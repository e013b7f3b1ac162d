"""Cells and column definitions of a worksheet."""

from __future__ import annotations

import numbers
from collections.abc import Iterable
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any

from spreadsheet_document_engine.addressing import (
    Address,
    decode_address,
    encode_column,
    validate_column_number,
)
from spreadsheet_document_engine.models import AddressType, CellType
from spreadsheet_document_engine.styles import BasicStyles, CellXf, Style, StyleRepository
from spreadsheet_document_engine.units import MAX_COLUMN_WIDTH, MIN_COLUMN_WIDTH
from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    RangeError,
    StyleError,
)

DEFAULT_COLUMN_WIDTH = 10.0


def is_numeric(value: Any) -> bool:
    """Whether a value is a number (booleans excluded)."""
    return not isinstance(value, bool) and isinstance(value, (numbers.Real, Decimal))


def infer_cell_type(value: Any) -> CellType:
    """Map the runtime type of a value to a cell type."""
    if value is None:
        return CellType.EMPTY
    if isinstance(value, bool):
        return CellType.BOOL
    if is_numeric(value):
        return CellType.NUMBER
    if isinstance(value, date):
        return CellType.DATE
    if isinstance(value, (timedelta, time)):
        return CellType.TIME
    return CellType.STRING


class Cell:
    """A single cell: value, resolved type, position and optional style.

    A cell created with ``CellType.DEFAULT`` resolves its type from the
    value. Dates and times receive the matching number format style. The
    style set here is not interned; the owning worksheet interns it when
    the cell is stored.
    """

    def __init__(
        self,
        value: Any = None,
        data_type: CellType = CellType.DEFAULT,
        address: Address | str | None = None,
    ) -> None:
        self.data_type = data_type
        self.value = None if data_type == CellType.EMPTY else value
        self.style: Style | None = None
        if address is None:
            address = Address(0, 0)
        elif isinstance(address, str):
            address = decode_address(address)
        self._address = address
        if data_type == CellType.DEFAULT:
            self.resolve_cell_type()

    # ------------------------------------------------------------------ #
    # Address
    # ------------------------------------------------------------------ #

    @property
    def address(self) -> Address:
        return self._address

    @address.setter
    def address(self, value: Address | str) -> None:
        self._address = decode_address(value) if isinstance(value, str) else value

    @property
    def column_number(self) -> int:
        return self._address.column

    @property
    def row_number(self) -> int:
        return self._address.row

    @property
    def address_type(self) -> AddressType:
        return self._address.type

    @property
    def cell_address(self) -> str:
        """Address text of the cell including ``$`` modifiers."""
        return self._address.get_address()

    # ------------------------------------------------------------------ #
    # Value and type
    # ------------------------------------------------------------------ #

    def set_value(self, value: Any) -> None:
        """Replace the value and re-resolve the type (formulas stay formulas)."""
        self.value = value
        self.resolve_cell_type()

    def resolve_cell_type(self) -> None:
        """Derive the cell type from the runtime type of the value."""
        if self.value is None:
            self.data_type = CellType.EMPTY
            return
        if self.data_type == CellType.FORMULA:
            return
        self.data_type = infer_cell_type(self.value)
        if self.data_type == CellType.DATE:
            self.style = BasicStyles.date_format()
        elif self.data_type == CellType.TIME:
            self.style = BasicStyles.time_format()

    # ------------------------------------------------------------------ #
    # Style
    # ------------------------------------------------------------------ #

    def set_style(
        self,
        style: Style,
        repository: StyleRepository | None = None,
        unmanaged: bool = False,
    ) -> Style:
        """Assign a style.

        Args:
            style: Style to assign.
            repository: Repository used to intern the style.
            unmanaged: Assign the reference as-is without interning.

        Returns:
            The style now referenced by the cell.

        Raises:
            StyleError: If no style is given, or no repository is given for
                a managed assignment.
        """
        if style is None:
            raise StyleError("No style to assign was defined")
        if unmanaged:
            self.style = style
        elif repository is None:
            raise StyleError(
                "No style repository is reachable to register the style",
                ErrorCode.MISSING_STYLE_REPOSITORY,
            )
        else:
            self.style = repository.intern(style)
        return self.style

    def remove_style(self) -> None:
        self.style = None

    def set_cell_lock_state(
        self, locked: bool, hidden: bool, repository: StyleRepository | None = None
    ) -> Style:
        """Set the locked and hidden protection flags of the cell style."""
        base = self.style or Style()
        cell_xf = base.cell_xf.model_copy(update={"locked": locked, "hidden": hidden})
        return self.set_style(base.with_facet(cell_xf), repository)

    def copy(self) -> Cell:
        """Copy value, type, address and style reference."""
        duplicate = Cell(self.value, self.data_type, self._address)
        if self.style is not None:
            duplicate.set_style(self.style, unmanaged=True)
        return duplicate

    # ------------------------------------------------------------------ #
    # Conversion
    # ------------------------------------------------------------------ #

    @staticmethod
    def convert_values(values: Iterable[Any] | None) -> list[Cell]:
        """Convert plain values to cells.

        Cells pass through unchanged. Values of an unknown kind are stored
        as their string rendering.
        """
        output: list[Cell] = []
        if values is None:
            return output
        for value in values:
            if isinstance(value, Cell):
                output.append(value)
                continue
            data_type = infer_cell_type(value)
            if data_type == CellType.STRING and not isinstance(value, str):
                value = str(value)
            output.append(Cell(value, data_type))
            if data_type == CellType.DATE:
                output[-1].style = BasicStyles.date_format()
            elif data_type == CellType.TIME:
                output[-1].style = BasicStyles.time_format()
        return output

    # ------------------------------------------------------------------ #
    # Comparison
    # ------------------------------------------------------------------ #

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self._address == other._address
            and self.data_type == other.data_type
            and self.value == other.value
            and self.style == other.style
        )

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: Cell) -> bool:
        return (self.row_number, self.column_number) < (
            other.row_number,
            other.column_number,
        )

    def __repr__(self) -> str:
        return (
            f"Cell(value={self.value!r}, data_type={self.data_type.value}, "
            f"address={self.cell_address!r})"
        )


class Column:
    """Non-default properties of one worksheet column."""

    def __init__(self, number: int, width: float = DEFAULT_COLUMN_WIDTH) -> None:
        validate_column_number(number)
        self._number = number
        self._width = DEFAULT_COLUMN_WIDTH
        self.width = width
        self.hidden = False
        self.auto_filter = False
        self.default_style: Style | None = None

    @property
    def number(self) -> int:
        return self._number

    @property
    def column_address(self) -> str:
        return encode_column(self._number)

    @property
    def width(self) -> float:
        return self._width

    @width.setter
    def width(self, value: float) -> None:
        if not MIN_COLUMN_WIDTH <= value <= MAX_COLUMN_WIDTH:
            raise RangeError(
                f"The passed column width ({value}) is out of range",
                value=value,
                minimum=MIN_COLUMN_WIDTH,
                maximum=MAX_COLUMN_WIDTH,
            )
        self._width = value

    @property
    def is_default(self) -> bool:
        """Whether the entry carries no information and may be pruned."""
        return (
            not self.hidden
            and not self.auto_filter
            and self._width == DEFAULT_COLUMN_WIDTH
            and self.default_style is None
        )

    def copy(self) -> Column:
        duplicate = Column(self._number, self._width)
        duplicate.hidden = self.hidden
        duplicate.auto_filter = self.auto_filter
        duplicate.default_style = self.default_style
        return duplicate

    def __repr__(self) -> str:
        return (
            f"Column(number={self._number}, width={self._width}, "
            f"hidden={self.hidden}, auto_filter={self.auto_filter})"
        )


def merge_marker_xf(cell_xf: CellXf) -> CellXf:
    """Return ``cell_xf`` with forced alignment, marking a merged cell."""
    return cell_xf.model_copy(update={"force_apply_alignment": True})
