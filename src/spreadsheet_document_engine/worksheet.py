"""Worksheet model: sparse cell table plus the structural metadata of a sheet.

The worksheet keeps cells, columns, row exceptions, merges, the auto-filter,
selection, panes, protection and the write cursor mutually consistent.
Every mutation validates its input before changing state, so a call that
raises leaves the worksheet untouched.
"""

from __future__ import annotations

import re
import weakref
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from spreadsheet_document_engine.addressing import (
    MAX_COLUMN_NUMBER,
    MAX_ROW_NUMBER,
    Address,
    Range,
    address_scope,
    decode_address,
    decode_column,
    decode_range,
    encode_address,
    validate_column_number,
    validate_row_number,
)
from spreadsheet_document_engine.cell import (
    DEFAULT_COLUMN_WIDTH,
    Cell,
    Column,
    merge_marker_xf,
)
from spreadsheet_document_engine.models import (
    AddressScope,
    CellDirection,
    CellType,
    SheetProtectionValue,
    SheetViewType,
    WorksheetPane,
)
from spreadsheet_document_engine.styles import BasicStyles, Style, StyleRepository
from spreadsheet_document_engine.units import (
    MAX_COLUMN_WIDTH,
    MAX_ROW_HEIGHT,
    MIN_COLUMN_WIDTH,
    MIN_ROW_HEIGHT,
    password_hash,
)
from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    FormatError,
    RangeError,
    WorksheetError,
)
from spreadsheet_document_engine.utils.logging import get_logger

if TYPE_CHECKING:
    from spreadsheet_document_engine.workbook import Workbook

logger = get_logger(__name__)

MAX_WORKSHEET_NAME_LENGTH = 31
DEFAULT_WORKSHEET_NAME = "Sheet1"
DEFAULT_ROW_HEIGHT = 15.0

AUTO_ZOOM_FACTOR = 0
MIN_ZOOM_FACTOR = 10
MAX_ZOOM_FACTOR = 400
DEFAULT_ZOOM_FACTOR = 100

_INVALID_NAME_CHARACTERS = frozenset("[]*?/\\")
_TRAILING_NUMBER_PATTERN = re.compile(r"^(.*?)(\d{1,31})$")


def _cell_key(column: int, row: int) -> str:
    return encode_address(column, row)


def _relocated(cell: Cell, address: Address) -> Cell:
    """Copy of ``cell`` at ``address``; the table never shares Cell objects."""
    duplicate = cell.copy()
    duplicate.address = address
    return duplicate


def _normalized(cell_range: Range) -> Range:
    """Rectangle of ``cell_range`` with plain addresses, top-left first."""
    return Range.from_coordinates(
        cell_range.min_column,
        cell_range.min_row,
        cell_range.max_column,
        cell_range.max_row,
    )


def _subtract(source: Range, cut: Range) -> list[Range]:
    """Split ``source`` into the rectangles not covered by ``cut``."""
    if not source.overlaps(cut):
        return [source]
    top = max(source.min_row, cut.min_row)
    bottom = min(source.max_row, cut.max_row)
    left = max(source.min_column, cut.min_column)
    right = min(source.max_column, cut.max_column)
    pieces: list[Range] = []
    if source.min_row < top:
        pieces.append(
            Range.from_coordinates(
                source.min_column, source.min_row, source.max_column, top - 1
            )
        )
    if bottom < source.max_row:
        pieces.append(
            Range.from_coordinates(
                source.min_column, bottom + 1, source.max_column, source.max_row
            )
        )
    if source.min_column < left:
        pieces.append(Range.from_coordinates(source.min_column, top, left - 1, bottom))
    if right < source.max_column:
        pieces.append(
            Range.from_coordinates(right + 1, top, source.max_column, bottom)
        )
    return pieces


class Worksheet:
    """One sheet of a workbook.

    A worksheet that is not attached to a workbook interns styles into a
    private repository. When it is attached, its styles are adopted by the
    workbook's repository and every later assignment goes there.

    Attributes:
        current_cell_direction: Direction the cursor advances after a
            sequential write.
        show_gridlines: Whether grid lines are displayed.
        show_row_column_headers: Whether row and column headers are displayed.
        show_ruler: Whether the ruler is displayed in page layout view.
        default_row_height: Height of rows without an explicit height.
    """

    def __init__(
        self,
        sheet_name: str | None = None,
        sheet_id: int | None = None,
    ) -> None:
        self._cells: dict[str, Cell] = {}
        self._columns: dict[int, Column] = {}
        self._row_heights: dict[int, float] = {}
        self._hidden_rows: dict[int, bool] = {}
        self._merged_cells: dict[str, Range] = {}
        self._selected_cells: list[Range] = []
        self._auto_filter_range: Range | None = None

        self._active_style: Style | None = None
        self._use_active_style = False
        self._detached_repository = StyleRepository()
        self._workbook_ref: weakref.ReferenceType[Workbook] | None = None

        self.current_cell_direction = CellDirection.COLUMN_TO_COLUMN
        self._current_column = 0
        self._current_row = 0

        self._sheet_id = 0
        self._sheet_name: str | None = None
        self._hidden = False

        self._sheet_protection_values: list[SheetProtectionValue] = []
        self._sheet_protection_password: str | None = None
        self._sheet_protection_password_hash: str | None = None
        self.use_sheet_protection = False

        self._pane_split_top_height: float | None = None
        self._pane_split_left_width: float | None = None
        self._freeze_split_panes: bool | None = None
        self._pane_split_top_left_cell: Address | None = None
        self._pane_split_address: Address | None = None
        self._active_pane: WorksheetPane | None = None

        self.show_gridlines = True
        self.show_row_column_headers = True
        self.show_ruler = True
        self.default_row_height = DEFAULT_ROW_HEIGHT
        self._view_type = SheetViewType.NORMAL
        self._zoom_factors: dict[SheetViewType, int] = {
            SheetViewType.NORMAL: DEFAULT_ZOOM_FACTOR
        }

        if sheet_name is not None:
            self.set_sheet_name(sheet_name)
        if sheet_id is not None:
            self.sheet_id = sheet_id

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    @property
    def cells(self) -> Mapping[str, Cell]:
        """Cells keyed by their plain address text (e.g. ``"B3"``)."""
        return MappingProxyType(self._cells)

    @property
    def columns(self) -> Mapping[int, Column]:
        return MappingProxyType(self._columns)

    @property
    def row_heights(self) -> Mapping[int, float]:
        return MappingProxyType(self._row_heights)

    @property
    def hidden_rows(self) -> Mapping[int, bool]:
        return MappingProxyType(self._hidden_rows)

    @property
    def merged_cells(self) -> Mapping[str, Range]:
        """Merged ranges in registration order, keyed by range text."""
        return MappingProxyType(self._merged_cells)

    @property
    def selected_cells(self) -> list[Range]:
        return list(self._selected_cells)

    @property
    def auto_filter_range(self) -> Range | None:
        return self._auto_filter_range

    # ------------------------------------------------------------------ #
    # Workbook linkage and styles
    # ------------------------------------------------------------------ #

    @property
    def workbook(self) -> Workbook | None:
        """Owning workbook, or None for a standalone worksheet."""
        if self._workbook_ref is None:
            return None
        return self._workbook_ref()

    @property
    def style_repository(self) -> StyleRepository:
        """Repository styles of this worksheet are interned into."""
        workbook = self.workbook
        if workbook is not None:
            return workbook.style_repository
        return self._detached_repository

    def _attach(self, workbook: Workbook) -> None:
        """Link the worksheet to ``workbook`` and adopt its styles there."""
        self._workbook_ref = weakref.ref(workbook)
        self._adopt_styles(workbook.style_repository)

    def _detach(self) -> None:
        self._workbook_ref = None
        self._adopt_styles(self._detached_repository)

    def _adopt_styles(self, repository: StyleRepository) -> None:
        for cell in self._cells.values():
            if cell.style is not None:
                cell.style = repository.intern(cell.style)
        for column in self._columns.values():
            if column.default_style is not None:
                column.default_style = repository.intern(column.default_style)
        if self._active_style is not None:
            self._active_style = repository.intern(self._active_style)

    @property
    def active_style(self) -> Style | None:
        return self._active_style

    def set_active_style(self, style: Style | None) -> None:
        """Set a style merged into every following write; None disables it."""
        self._use_active_style = style is not None
        self._active_style = (
            self.style_repository.intern(style) if style is not None else None
        )

    def clear_active_style(self) -> None:
        self._use_active_style = False
        self._active_style = None

    # ------------------------------------------------------------------ #
    # Address helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _resolve_address(target: Address | str | int, row: int | None = None) -> Address:
        if isinstance(target, Address):
            return Address(target.column, target.row)
        if isinstance(target, str):
            address = decode_address(target)
            return Address(address.column, address.row)
        if row is None:
            raise FormatError(
                "A row number is required when a column number is passed",
                ErrorCode.INVALID_ADDRESS,
                value=target,
            )
        return Address(target, row)

    @staticmethod
    def _resolve_range(
        target: Range | Address | str, end: Address | str | None = None
    ) -> Range:
        if isinstance(target, Range):
            return target
        if end is not None:
            start = decode_address(target) if isinstance(target, str) else target
            stop = decode_address(end) if isinstance(end, str) else end
            return Range(start, stop)
        if isinstance(target, Address):
            return Range(target, target)
        if ":" not in target:
            address = decode_address(target)
            return Range(address, address)
        return decode_range(target)

    @staticmethod
    def _resolve_column(column: int | str) -> int:
        if isinstance(column, str):
            return decode_column(column)
        validate_column_number(column)
        return column

    # ------------------------------------------------------------------ #
    # Cell writes
    # ------------------------------------------------------------------ #

    def _as_cell(self, value: Any, address: Address) -> Cell:
        if isinstance(value, Cell):
            return _relocated(value, address)
        return Cell(value, CellType.DEFAULT, address)

    def _apply_style(self, cell: Cell, style: Style | None) -> None:
        """Combine the cell's own style with the active and passed styles."""
        result = cell.style
        overlays = []
        if self._use_active_style and self._active_style is not None:
            overlays.append(self._active_style)
        if style is not None:
            overlays.append(style)
        for overlay in overlays:
            result = overlay if result is None else result.append(overlay)
        if result is not None:
            cell.set_style(result, self.style_repository)

    def _next_position(self, column: int, row: int) -> tuple[int, int]:
        if self.current_cell_direction == CellDirection.COLUMN_TO_COLUMN:
            return column + 1, row
        if self.current_cell_direction == CellDirection.ROW_TO_ROW:
            return column, row + 1
        return column, row

    def _store_cell(self, cell: Cell, incremental: bool, style: Style | None) -> Cell:
        if incremental:
            next_column, next_row = self._next_position(
                self._current_column, self._current_row
            )
            validate_column_number(next_column)
            validate_row_number(next_row)
        self._apply_style(cell, style)
        self._cells[_cell_key(cell.column_number, cell.row_number)] = cell
        if incremental:
            self._current_column, self._current_row = next_column, next_row
        elif self.current_cell_direction != CellDirection.DISABLED:
            next_column, next_row = self._next_position(
                cell.column_number, cell.row_number
            )
            # At the last column or row the cursor stays on the written cell
            if next_column <= MAX_COLUMN_NUMBER and next_row <= MAX_ROW_NUMBER:
                self._current_column, self._current_row = next_column, next_row
            else:
                self._current_column, self._current_row = (
                    cell.column_number,
                    cell.row_number,
                )
        return cell

    def add_next_cell(self, value: Any, style: Style | None = None) -> Cell:
        """Write a value at the cursor and advance the cursor one step.

        Raises:
            RangeError: If the cursor would move past the last column or row.
        """
        address = Address(self._current_column, self._current_row)
        return self._store_cell(self._as_cell(value, address), True, style)

    def add_cell(
        self,
        value: Any,
        address: Address | str | int,
        row: int | None = None,
        style: Style | None = None,
    ) -> Cell:
        """Write a value at an address.

        The cursor is moved just past the written cell in the current
        direction, so sequential writes continue from there. At the last
        column or row it stays on the written cell.

        Args:
            value: Value or prepared Cell to store.
            address: Address, address text, or a column number.
            row: Row number when ``address`` is a column number.
            style: Optional style merged into the cell style.

        Returns:
            The stored cell.
        """
        resolved = self._resolve_address(address, row)
        return self._store_cell(self._as_cell(value, resolved), False, style)

    def add_cell_formula(
        self,
        formula: str,
        address: Address | str | int,
        row: int | None = None,
        style: Style | None = None,
    ) -> Cell:
        resolved = self._resolve_address(address, row)
        return self._store_cell(Cell(formula, CellType.FORMULA, resolved), False, style)

    def add_next_cell_formula(self, formula: str, style: Style | None = None) -> Cell:
        address = Address(self._current_column, self._current_row)
        return self._store_cell(Cell(formula, CellType.FORMULA, address), True, style)

    def add_cell_range(
        self,
        values: Iterable[Any],
        target: Range | Address | str,
        end: Address | str | None = None,
        style: Style | None = None,
    ) -> list[Cell]:
        """Write values into a range, column by column then row by row.

        Raises:
            RangeError: If the number of values differs from the range size.
        """
        values = list(values)
        cell_range = self._resolve_range(target, end)
        addresses = cell_range.enclosed_addresses()
        if len(values) != len(addresses):
            raise RangeError(
                f"The number of passed values ({len(values)}) differs from the "
                f"number of cells within the range ({len(addresses)})",
                ErrorCode.VALUE_COUNT_MISMATCH,
                value=len(values),
                minimum=len(addresses),
                maximum=len(addresses),
            )
        stored = []
        for cell, address in zip(Cell.convert_values(values), addresses, strict=True):
            stored.append(self._store_cell(_relocated(cell, address), False, style))
        return stored

    def _put_cell(self, cell: Cell) -> Cell:
        """Store a decoded cell as-is: no style merge, no cursor move."""
        self._cells[_cell_key(cell.column_number, cell.row_number)] = cell
        return cell

    # ------------------------------------------------------------------ #
    # Cell reads and removal
    # ------------------------------------------------------------------ #

    def has_cell(self, address: Address | str | int, row: int | None = None) -> bool:
        resolved = self._resolve_address(address, row)
        return _cell_key(resolved.column, resolved.row) in self._cells

    def get_cell(self, address: Address | str | int, row: int | None = None) -> Cell:
        """Return the cell at an address.

        Raises:
            WorksheetError: If no cell is stored there.
        """
        resolved = self._resolve_address(address, row)
        key = _cell_key(resolved.column, resolved.row)
        cell = self._cells.get(key)
        if cell is None:
            raise WorksheetError(
                f"The cell with the address {key} does not exist in this worksheet",
                ErrorCode.CELL_NOT_FOUND,
                worksheet=self._sheet_name,
            )
        return cell

    def remove_cell(self, address: Address | str | int, row: int | None = None) -> bool:
        """Remove a cell; returns whether one was stored."""
        resolved = self._resolve_address(address, row)
        return self._cells.pop(_cell_key(resolved.column, resolved.row), None) is not None

    def get_row(self, row: int) -> list[Cell]:
        """Cells of a row, sorted by column."""
        return sorted(
            (cell for cell in self._cells.values() if cell.row_number == row),
            key=lambda cell: cell.column_number,
        )

    def get_column(self, column: int | str) -> list[Cell]:
        """Cells of a column, sorted by row."""
        number = self._resolve_column(column)
        return sorted(
            (cell for cell in self._cells.values() if cell.column_number == number),
            key=lambda cell: cell.row_number,
        )

    def set_style(
        self,
        target: Range | Address | str,
        style: Style | None,
        end: Address | str | None = None,
    ) -> None:
        """Assign a style to every cell of an address or range.

        Missing cells are created empty. A None style removes the style of
        existing cells. The cursor is not moved.

        Raises:
            FormatError: If a text target is neither an address nor a range.
        """
        if isinstance(target, str) and end is None:
            scope = address_scope(target)
            if scope == AddressScope.INVALID:
                raise FormatError(
                    f"The passed address '{target}' is neither a cell address nor a range",
                    ErrorCode.INVALID_ADDRESS,
                    value=target,
                )
            if scope == AddressScope.SINGLE_ADDRESS:
                target = decode_address(target)
        cell_range = self._resolve_range(target, end)
        repository = self.style_repository
        canonical = repository.intern(style) if style is not None else None
        for address in cell_range.enclosed_addresses():
            key = _cell_key(address.column, address.row)
            cell = self._cells.get(key)
            if cell is None:
                if canonical is None:
                    continue
                cell = Cell(None, CellType.EMPTY, address)
                self._cells[key] = cell
            if canonical is None:
                cell.remove_style()
            else:
                cell.set_style(canonical, repository)

    # ------------------------------------------------------------------ #
    # Cursor
    # ------------------------------------------------------------------ #

    @property
    def current_column_number(self) -> int:
        return self._current_column

    @current_column_number.setter
    def current_column_number(self, value: int) -> None:
        validate_column_number(value)
        self._current_column = value

    @property
    def current_row_number(self) -> int:
        return self._current_row

    @current_row_number.setter
    def current_row_number(self, value: int) -> None:
        validate_row_number(value)
        self._current_row = value

    def set_current_cell_address(
        self, address: Address | str | int, row: int | None = None
    ) -> None:
        resolved = self._resolve_address(address, row)
        self._current_column, self._current_row = resolved.column, resolved.row

    def go_to_next_column(self, number_of_columns: int = 1, keep_row: bool = False) -> None:
        """Move the cursor right; the row resets to 0 unless ``keep_row``."""
        column = self._current_column + number_of_columns
        validate_column_number(column)
        self._current_column = column
        if not keep_row:
            self._current_row = 0

    def go_to_next_row(self, number_of_rows: int = 1, keep_column: bool = False) -> None:
        """Move the cursor down; the column resets to 0 unless ``keep_column``."""
        row = self._current_row + number_of_rows
        validate_row_number(row)
        self._current_row = row
        if not keep_column:
            self._current_column = 0

    # ------------------------------------------------------------------ #
    # Boundaries
    # ------------------------------------------------------------------ #

    @staticmethod
    def _has_data(cell: Cell) -> bool:
        return cell.value is not None and cell.value != ""

    def _cell_boundary(self, row: bool, minimum: bool, data_only: bool) -> int | None:
        numbers = [
            cell.row_number if row else cell.column_number
            for cell in self._cells.values()
            if not data_only or self._has_data(cell)
        ]
        if not numbers:
            return None
        return min(numbers) if minimum else max(numbers)

    def _boundary(self, row: bool, minimum: bool) -> int | None:
        candidates = []
        cell_boundary = self._cell_boundary(row, minimum, data_only=False)
        if cell_boundary is not None:
            candidates.append(cell_boundary)
        if row:
            candidates.extend(self._row_heights)
            candidates.extend(self._hidden_rows)
        else:
            candidates.extend(self._columns)
        if not candidates:
            return None
        return min(candidates) if minimum else max(candidates)

    def get_first_column_number(self) -> int | None:
        """First defined column, counting cells and column definitions."""
        return self._boundary(row=False, minimum=True)

    def get_last_column_number(self) -> int | None:
        return self._boundary(row=False, minimum=False)

    def get_first_row_number(self) -> int | None:
        """First defined row, counting cells, row heights and hidden rows."""
        return self._boundary(row=True, minimum=True)

    def get_last_row_number(self) -> int | None:
        return self._boundary(row=True, minimum=False)

    def get_first_data_column_number(self) -> int | None:
        """First column holding a cell with a value."""
        return self._cell_boundary(row=False, minimum=True, data_only=True)

    def get_last_data_column_number(self) -> int | None:
        return self._cell_boundary(row=False, minimum=False, data_only=True)

    def get_first_data_row_number(self) -> int | None:
        return self._cell_boundary(row=True, minimum=True, data_only=True)

    def get_last_data_row_number(self) -> int | None:
        return self._cell_boundary(row=True, minimum=False, data_only=True)

    @staticmethod
    def _address_or_none(column: int | None, row: int | None) -> Address | None:
        if column is None or row is None:
            return None
        return Address(column, row)

    def get_first_cell_address(self) -> Address | None:
        return self._address_or_none(
            self.get_first_column_number(), self.get_first_row_number()
        )

    def get_last_cell_address(self) -> Address | None:
        return self._address_or_none(
            self.get_last_column_number(), self.get_last_row_number()
        )

    def get_first_data_cell_address(self) -> Address | None:
        return self._address_or_none(
            self.get_first_data_column_number(), self.get_first_data_row_number()
        )

    def get_last_data_cell_address(self) -> Address | None:
        return self._address_or_none(
            self.get_last_data_column_number(), self.get_last_data_row_number()
        )

    # ------------------------------------------------------------------ #
    # Merged cells
    # ------------------------------------------------------------------ #

    def merge_cells(
        self, target: Range | Address | str, end: Address | str | None = None
    ) -> str:
        """Register a merged range.

        Args:
            target: Range, range text, or the start address.
            end: End address when ``target`` is the start address.

        Returns:
            The key of the merged range, e.g. ``"A1:B2"``.

        Raises:
            RangeError: If the range shares a cell with a registered merge.
        """
        cell_range = _normalized(self._resolve_range(target, end))
        for key, existing in self._merged_cells.items():
            if existing.overlaps(cell_range):
                raise RangeError(
                    f"The passed range {cell_range} contains cells that are "
                    f"already in the defined merge range {key}",
                    ErrorCode.MERGE_OVERLAP,
                    value=str(cell_range),
                )
        key = str(cell_range)
        self._merged_cells[key] = cell_range
        logger.debug("Merged cells", range=key, worksheet=self._sheet_name)
        return key

    def resolve_merged_cells(self) -> None:
        """Empty every merged cell except the first and mark it as merged.

        Cells missing inside a merged range are created. Ranges are
        resolved in registration order.
        """
        repository = self.style_repository
        merge_style = repository.intern(BasicStyles.merge_cell_style())
        for cell_range in self._merged_cells.values():
            for position, address in enumerate(cell_range.enclosed_addresses()):
                key = _cell_key(address.column, address.row)
                cell = self._cells.get(key)
                if cell is None:
                    cell = Cell(None, CellType.EMPTY, address)
                    self._cells[key] = cell
                if position == 0:
                    continue
                cell.value = None
                cell.data_type = CellType.EMPTY
                if cell.style is None:
                    cell.set_style(merge_style, repository)
                else:
                    marked = cell.style.with_facet(merge_marker_xf(cell.style.cell_xf))
                    cell.set_style(marked, repository)

    def remove_merged_cells(
        self, target: Range | Address | str, end: Address | str | None = None
    ) -> None:
        """Unregister a merged range and restore the types of its cells.

        Raises:
            RangeError: If the range is not registered.
        """
        key = str(_normalized(self._resolve_range(target, end)))
        cell_range = self._merged_cells.get(key)
        if cell_range is None:
            raise RangeError(
                f"The cell range {key} was not found in the list of merged cell ranges",
                ErrorCode.MERGE_NOT_FOUND,
                value=key,
            )
        merge_style = BasicStyles.merge_cell_style()
        for address in cell_range.enclosed_addresses():
            cell = self._cells.get(_cell_key(address.column, address.row))
            if cell is None:
                continue
            if cell.style == merge_style:
                cell.remove_style()
            cell.resolve_cell_type()
            if cell.style is not None:
                cell.style = self.style_repository.intern(cell.style)
        del self._merged_cells[key]

    # ------------------------------------------------------------------ #
    # Auto-filter and columns
    # ------------------------------------------------------------------ #

    def set_auto_filter(
        self, start: int | str | Range, end_column: int | str | None = None
    ) -> None:
        """Define the auto-filter by a column span or range text.

        The end row is recomputed from the data in the span, and every
        column in the span is marked as filter-bearing.
        """
        if isinstance(start, Range):
            cell_range = start
        elif end_column is not None:
            first = self._resolve_column(start)
            last = self._resolve_column(end_column)
            cell_range = Range.from_coordinates(min(first, last), 0, max(first, last), 0)
        elif isinstance(start, str) and ":" in start:
            cell_range = decode_range(start)
        else:
            column = self._resolve_column(start)
            cell_range = Range.from_coordinates(column, 0, column, 0)
        for column in self._columns.values():
            column.auto_filter = False
        self._auto_filter_range = cell_range
        self.recalculate_auto_filter()
        self.recalculate_columns()

    def remove_auto_filter(self) -> None:
        self._auto_filter_range = None
        for column in self._columns.values():
            column.auto_filter = False
        self.recalculate_columns()

    def recalculate_auto_filter(self) -> None:
        """Extend the filter to the last used row and flag its columns."""
        if self._auto_filter_range is None:
            return
        start = self._auto_filter_range.min_column
        end = self._auto_filter_range.max_column
        end_row = max(
            (
                cell.row_number
                for cell in self._cells.values()
                if start <= cell.column_number <= end
            ),
            default=0,
        )
        for number in range(start, end + 1):
            column = self._columns.get(number)
            if column is None:
                column = Column(number)
                self._columns[number] = column
            column.auto_filter = True
        self._auto_filter_range = Range.from_coordinates(start, 0, end, end_row)

    def recalculate_columns(self) -> None:
        """Drop column entries that carry no information."""
        for number in [n for n, column in self._columns.items() if column.is_default]:
            del self._columns[number]

    def _column_entry(self, number: int) -> Column:
        column = self._columns.get(number)
        if column is None:
            column = Column(number)
            self._columns[number] = column
        return column

    def set_column_width(self, column: int | str, width: float) -> None:
        """Set the width of a column in characters.

        Raises:
            RangeError: If the width is outside 0 to 255.
        """
        number = self._resolve_column(column)
        if not MIN_COLUMN_WIDTH <= width <= MAX_COLUMN_WIDTH:
            raise RangeError(
                f"The column width ({width}) is out of range. Range is from "
                f"{MIN_COLUMN_WIDTH} to {MAX_COLUMN_WIDTH} (chars).",
                value=width,
                minimum=MIN_COLUMN_WIDTH,
                maximum=MAX_COLUMN_WIDTH,
            )
        self._column_entry(number).width = width

    def set_column_hidden_state(self, column: int | str, hidden: bool) -> None:
        number = self._resolve_column(column)
        entry = self._columns.get(number)
        if entry is None:
            if not hidden:
                return
            entry = self._column_entry(number)
        entry.hidden = hidden
        if entry.is_default:
            del self._columns[number]

    def set_column_default_style(self, column: int | str, style: Style | None) -> None:
        number = self._resolve_column(column)
        if style is None:
            entry = self._columns.get(number)
            if entry is not None:
                entry.default_style = None
                if entry.is_default:
                    del self._columns[number]
            return
        self._column_entry(number).default_style = self.style_repository.intern(style)

    def reset_column(self, column: int | str) -> None:
        """Reset a column; auto-filter columns keep an entry to avoid gaps."""
        number = self._resolve_column(column)
        entry = self._columns.get(number)
        if entry is None:
            return
        if entry.auto_filter:
            entry.hidden = False
            entry.width = DEFAULT_COLUMN_WIDTH
            entry.default_style = None
        else:
            del self._columns[number]

    # ------------------------------------------------------------------ #
    # Rows
    # ------------------------------------------------------------------ #

    def set_row_height(self, row: int, height: float) -> None:
        """Set the height of a row in points.

        Raises:
            RangeError: If the height is outside 0 to 409.5.
        """
        validate_row_number(row)
        if not MIN_ROW_HEIGHT <= height <= MAX_ROW_HEIGHT:
            raise RangeError(
                f"The row height ({height}) is out of range. Range is from "
                f"{MIN_ROW_HEIGHT} to {MAX_ROW_HEIGHT} (equals 546px).",
                value=height,
                minimum=MIN_ROW_HEIGHT,
                maximum=MAX_ROW_HEIGHT,
            )
        self._row_heights[row] = height

    def remove_row_height(self, row: int) -> None:
        self._row_heights.pop(row, None)

    def set_row_hidden_state(self, row: int, hidden: bool) -> None:
        validate_row_number(row)
        if hidden:
            self._hidden_rows[row] = True
        else:
            self._hidden_rows.pop(row, None)

    # ------------------------------------------------------------------ #
    # Selection
    # ------------------------------------------------------------------ #

    def add_selected_cells(
        self, target: Range | Address | str, end: Address | str | None = None
    ) -> None:
        cell_range = _normalized(self._resolve_range(target, end))
        if cell_range not in self._selected_cells:
            self._selected_cells.append(cell_range)

    def set_selected_cells(
        self, target: Range | Address | str | None, end: Address | str | None = None
    ) -> None:
        """Replace the selection; None clears it."""
        if target is None:
            self._selected_cells.clear()
            return
        cell_range = _normalized(self._resolve_range(target, end))
        self._selected_cells = [cell_range]

    def remove_selected_cells(
        self, target: Range | Address | str | None = None, end: Address | str | None = None
    ) -> None:
        """Deselect a range; selected ranges it covers partially are split.

        Without a target the whole selection is cleared.
        """
        if target is None:
            self._selected_cells.clear()
            return
        cut = _normalized(self._resolve_range(target, end))
        remaining: list[Range] = []
        for selected in self._selected_cells:
            for piece in _subtract(selected, cut):
                if piece not in remaining:
                    remaining.append(piece)
        self._selected_cells = remaining

    def clear_selected_cells(self) -> None:
        self._selected_cells.clear()

    # ------------------------------------------------------------------ #
    # Protection
    # ------------------------------------------------------------------ #

    @property
    def sheet_protection_values(self) -> list[SheetProtectionValue]:
        return list(self._sheet_protection_values)

    @property
    def sheet_protection_password(self) -> str | None:
        return self._sheet_protection_password

    @property
    def sheet_protection_password_hash(self) -> str | None:
        return self._sheet_protection_password_hash

    def add_allowed_action(self, action: SheetProtectionValue) -> None:
        """Allow an action on the protected sheet and enable protection."""
        if action in self._sheet_protection_values:
            return
        if (
            action == SheetProtectionValue.SELECT_LOCKED_CELLS
            and SheetProtectionValue.SELECT_UNLOCKED_CELLS
            not in self._sheet_protection_values
        ):
            self._sheet_protection_values.append(SheetProtectionValue.SELECT_UNLOCKED_CELLS)
        self._sheet_protection_values.append(action)
        self.use_sheet_protection = True

    def remove_allowed_action(self, action: SheetProtectionValue) -> None:
        if action in self._sheet_protection_values:
            self._sheet_protection_values.remove(action)

    def set_sheet_protection_password(self, password: str | None) -> None:
        """Set the protection password; an empty password disables protection."""
        if not password:
            self._sheet_protection_password = None
            self._sheet_protection_password_hash = None
            self.use_sheet_protection = False
            return
        self._sheet_protection_password = password
        self._sheet_protection_password_hash = password_hash(password)
        self.use_sheet_protection = True

    def set_sheet_protection_password_hash(self, hash_value: str | None) -> None:
        """Restore a stored hash when the plain password is unknown (loading)."""
        self._sheet_protection_password = None
        self._sheet_protection_password_hash = hash_value or None

    # ------------------------------------------------------------------ #
    # Panes
    # ------------------------------------------------------------------ #

    @property
    def pane_split_top_height(self) -> float | None:
        return self._pane_split_top_height

    @property
    def pane_split_left_width(self) -> float | None:
        return self._pane_split_left_width

    @property
    def freeze_split_panes(self) -> bool | None:
        return self._freeze_split_panes

    @property
    def pane_split_top_left_cell(self) -> Address | None:
        return self._pane_split_top_left_cell

    @property
    def pane_split_address(self) -> Address | None:
        return self._pane_split_address

    @property
    def active_pane(self) -> WorksheetPane | None:
        return self._active_pane

    def set_horizontal_split(
        self,
        top_pane_height: float,
        top_left_cell: Address | None = None,
        active_pane: WorksheetPane | None = None,
    ) -> None:
        self.set_split(None, top_pane_height, top_left_cell, active_pane)

    def set_vertical_split(
        self,
        left_pane_width: float,
        top_left_cell: Address | None = None,
        active_pane: WorksheetPane | None = None,
    ) -> None:
        self.set_split(left_pane_width, None, top_left_cell, active_pane)

    def set_split(
        self,
        left_pane_width: float | None,
        top_pane_height: float | None,
        top_left_cell: Address | None = None,
        active_pane: WorksheetPane | None = None,
    ) -> None:
        """Split the panes by size in characters; these splits cannot freeze."""
        self._pane_split_left_width = left_pane_width
        self._pane_split_top_height = top_pane_height
        self._freeze_split_panes = None
        self._pane_split_address = None
        self._pane_split_top_left_cell = top_left_cell
        self._active_pane = active_pane

    def set_horizontal_split_rows(
        self,
        number_of_rows: int,
        freeze: bool = False,
        top_left_cell: Address | None = None,
        active_pane: WorksheetPane | None = None,
    ) -> None:
        self.set_split_counts(None, number_of_rows, freeze, top_left_cell, active_pane)

    def set_vertical_split_columns(
        self,
        number_of_columns: int,
        freeze: bool = False,
        top_left_cell: Address | None = None,
        active_pane: WorksheetPane | None = None,
    ) -> None:
        self.set_split_counts(number_of_columns, None, freeze, top_left_cell, active_pane)

    def set_split_counts(
        self,
        number_of_columns: int | None,
        number_of_rows: int | None,
        freeze: bool = False,
        top_left_cell: Address | None = None,
        active_pane: WorksheetPane | None = None,
    ) -> None:
        """Split the panes by a number of columns and rows.

        Args:
            number_of_columns: Columns left of the split, or None.
            number_of_rows: Rows above the split, or None.
            freeze: Whether the top and left panes are frozen.
            top_left_cell: Top-left cell of the bottom-right pane. Defaults
                to the split position.
            active_pane: Pane holding the focus.

        Raises:
            WorksheetError: If a frozen split has a top-left cell before the
                split position.
        """
        columns = number_of_columns or 0
        rows = number_of_rows or 0
        validate_column_number(columns)
        validate_row_number(rows)
        if top_left_cell is None:
            top_left_cell = Address(columns, rows)
        if freeze:
            if number_of_columns is not None and top_left_cell.column < number_of_columns:
                raise WorksheetError(
                    f"The column number {top_left_cell.column} is not valid for a "
                    f"frozen, vertical split with the split pane column number "
                    f"{number_of_columns}",
                    ErrorCode.SPLIT_ORDER_VIOLATION,
                    worksheet=self._sheet_name,
                )
            if number_of_rows is not None and top_left_cell.row < number_of_rows:
                raise WorksheetError(
                    f"The row number {top_left_cell.row} is not valid for a frozen, "
                    f"horizontal split with the split pane row number {number_of_rows}",
                    ErrorCode.SPLIT_ORDER_VIOLATION,
                    worksheet=self._sheet_name,
                )
        self._pane_split_left_width = None
        self._pane_split_top_height = None
        self._freeze_split_panes = freeze
        self._pane_split_address = Address(columns, rows)
        self._pane_split_top_left_cell = top_left_cell
        self._active_pane = active_pane

    def reset_split(self) -> None:
        self._pane_split_left_width = None
        self._pane_split_top_height = None
        self._freeze_split_panes = None
        self._pane_split_address = None
        self._pane_split_top_left_cell = None
        self._active_pane = None

    # ------------------------------------------------------------------ #
    # Sheet view
    # ------------------------------------------------------------------ #

    @property
    def view_type(self) -> SheetViewType:
        return self._view_type

    @view_type.setter
    def view_type(self, value: SheetViewType) -> None:
        self._view_type = value
        self._zoom_factors[value] = DEFAULT_ZOOM_FACTOR

    @property
    def zoom_factor(self) -> int:
        """Zoom factor of the current view type."""
        return self._zoom_factors.get(self._view_type, DEFAULT_ZOOM_FACTOR)

    @property
    def zoom_factors(self) -> Mapping[SheetViewType, int]:
        return MappingProxyType(self._zoom_factors)

    def set_zoom_factor(self, zoom: int, view_type: SheetViewType | None = None) -> None:
        """Set the zoom of a view type (the current one by default).

        Raises:
            RangeError: Unless the zoom is 0 (automatic) or within 10 to 400.
        """
        if zoom != AUTO_ZOOM_FACTOR and not MIN_ZOOM_FACTOR <= zoom <= MAX_ZOOM_FACTOR:
            raise RangeError(
                f"The zoom factor {zoom} is not valid. Valid are values between "
                f"{MIN_ZOOM_FACTOR} and {MAX_ZOOM_FACTOR}, or {AUTO_ZOOM_FACTOR} (automatic)",
                value=zoom,
                minimum=MIN_ZOOM_FACTOR,
                maximum=MAX_ZOOM_FACTOR,
            )
        self._zoom_factors[view_type or self._view_type] = zoom

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    @property
    def sheet_id(self) -> int:
        return self._sheet_id

    @sheet_id.setter
    def sheet_id(self, value: int) -> None:
        if value < 1:
            raise FormatError(
                f"The ID {value} is invalid. Worksheet IDs must be >0",
                value=value,
            )
        self._sheet_id = value

    @property
    def sheet_name(self) -> str | None:
        return self._sheet_name

    def set_sheet_name(self, name: str, sanitize: bool = False) -> None:
        """Rename the worksheet.

        Args:
            name: New name.
            sanitize: Replace invalid characters and make the name unique
                within the owning workbook.

        Raises:
            FormatError: If the name is invalid and not sanitized.
            WorksheetError: If sanitizing without a workbook, or the name is
                already used by another worksheet of the workbook.
        """
        workbook = self.workbook
        if sanitize:
            if workbook is None:
                raise WorksheetError(
                    "The worksheet name cannot be sanitized without a workbook",
                    ErrorCode.MISSING_WORKBOOK,
                    worksheet=name,
                )
            self._sheet_name = self.sanitize_worksheet_name(name, workbook, exclude=self)
            return
        self.validate_worksheet_name(name)
        if workbook is not None and any(
            sheet is not self and sheet.sheet_name == name for sheet in workbook.worksheets
        ):
            raise WorksheetError(
                f"The worksheet name '{name}' is already used in the workbook",
                ErrorCode.DUPLICATE_WORKSHEET,
                worksheet=name,
            )
        self._sheet_name = name

    @property
    def hidden(self) -> bool:
        return self._hidden

    @hidden.setter
    def hidden(self, value: bool) -> None:
        previous = self._hidden
        self._hidden = value
        workbook = self.workbook
        if value and workbook is not None:
            try:
                workbook.validate_worksheets()
            except WorksheetError:
                self._hidden = previous
                raise

    @staticmethod
    def validate_worksheet_name(name: str | None) -> None:
        """Check length and reserved characters of a worksheet name.

        Raises:
            FormatError: If the name is empty, longer than 31 characters, or
                contains one of ``[ ] * ? / \\``.
        """
        if not name or len(name) > MAX_WORKSHEET_NAME_LENGTH:
            raise FormatError(
                f"The sheet name must be between 1 and {MAX_WORKSHEET_NAME_LENGTH} characters",
                ErrorCode.INVALID_WORKSHEET_NAME,
                value=name,
            )
        if any(character in _INVALID_NAME_CHARACTERS for character in name):
            raise FormatError(
                "The sheet name must not contain the characters [ ] * ? / \\",
                ErrorCode.INVALID_WORKSHEET_NAME,
                value=name,
            )

    @staticmethod
    def sanitize_worksheet_name(
        name: str | None, workbook: Workbook | None, exclude: Worksheet | None = None
    ) -> str:
        """Turn any text into a valid worksheet name unused in ``workbook``.

        Reserved characters become ``_``, the name is cut to 31 characters
        and, on collision, a number is appended or an existing trailing
        number is incremented.

        Raises:
            WorksheetError: If no workbook is given.
        """
        if workbook is None:
            raise WorksheetError(
                "The workbook reference is null", ErrorCode.MISSING_WORKBOOK
            )
        if not name:
            name = DEFAULT_WORKSHEET_NAME
        cleaned = "".join(
            "_" if character in _INVALID_NAME_CHARACTERS else character
            for character in name[:MAX_WORKSHEET_NAME_LENGTH]
        )
        used = {
            sheet.sheet_name for sheet in workbook.worksheets if sheet is not exclude
        }
        if cleaned not in used:
            return cleaned
        prefix = cleaned
        number = 1
        match = _TRAILING_NUMBER_PATTERN.match(cleaned)
        if match:
            prefix = match.group(1)
            number = int(match.group(2))
        while True:
            suffix = str(number)
            overflow = len(prefix) + len(suffix) - MAX_WORKSHEET_NAME_LENGTH
            if overflow > 0:
                prefix = prefix[: len(prefix) - overflow]
            candidate = prefix + suffix
            if candidate not in used:
                return candidate
            number += 1

    # ------------------------------------------------------------------ #
    # Copy
    # ------------------------------------------------------------------ #

    def copy(self) -> Worksheet:
        """Deep copy without name, ID and workbook link.

        Styles are carried over by reference and adopted by the target
        repository once the copy is attached to a workbook.
        """
        duplicate = Worksheet()
        for key, cell in self._cells.items():
            duplicate._cells[key] = cell.copy()
        duplicate._columns = {n: column.copy() for n, column in self._columns.items()}
        duplicate._row_heights = dict(self._row_heights)
        duplicate._hidden_rows = dict(self._hidden_rows)
        duplicate._merged_cells = {k: r.copy() for k, r in self._merged_cells.items()}
        duplicate._selected_cells = [r.copy() for r in self._selected_cells]
        if self._auto_filter_range is not None:
            duplicate._auto_filter_range = self._auto_filter_range.copy()
        duplicate._active_style = self._active_style
        duplicate._use_active_style = self._use_active_style
        duplicate.current_cell_direction = self.current_cell_direction
        duplicate._current_column = self._current_column
        duplicate._current_row = self._current_row
        duplicate._hidden = self._hidden
        duplicate._sheet_protection_values = list(self._sheet_protection_values)
        duplicate._sheet_protection_password = self._sheet_protection_password
        duplicate._sheet_protection_password_hash = self._sheet_protection_password_hash
        duplicate.use_sheet_protection = self.use_sheet_protection
        duplicate._pane_split_top_height = self._pane_split_top_height
        duplicate._pane_split_left_width = self._pane_split_left_width
        duplicate._freeze_split_panes = self._freeze_split_panes
        duplicate._pane_split_top_left_cell = self._pane_split_top_left_cell
        duplicate._pane_split_address = self._pane_split_address
        duplicate._active_pane = self._active_pane
        duplicate.show_gridlines = self.show_gridlines
        duplicate.show_row_column_headers = self.show_row_column_headers
        duplicate.show_ruler = self.show_ruler
        duplicate.default_row_height = self.default_row_height
        duplicate._view_type = self._view_type
        duplicate._zoom_factors = dict(self._zoom_factors)
        duplicate._adopt_styles(duplicate._detached_repository)
        return duplicate

    def __repr__(self) -> str:
        return (
            f"Worksheet(sheet_name={self._sheet_name!r}, sheet_id={self._sheet_id}, "
            f"cells={len(self._cells)})"
        )
