"""Tests for cells and column definitions."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from spreadsheet_document_engine.addressing import Address
from spreadsheet_document_engine.cell import (
    DEFAULT_COLUMN_WIDTH,
    Cell,
    Column,
    infer_cell_type,
)
from spreadsheet_document_engine.models import AddressType, CellType
from spreadsheet_document_engine.styles import BasicStyles, Style, StyleRepository
from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    RangeError,
    StyleError,
)


class TestInferCellType:
    """Tests for resolving cell types from values."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, CellType.EMPTY),
            (True, CellType.BOOL),
            (3, CellType.NUMBER),
            (2.5, CellType.NUMBER),
            (Decimal("1.5"), CellType.NUMBER),
            (datetime(2024, 1, 1), CellType.DATE),
            (date(2024, 1, 1), CellType.DATE),
            (timedelta(hours=1), CellType.TIME),
            (time(8, 30), CellType.TIME),
            ("text", CellType.STRING),
            (object(), CellType.STRING),
        ],
    )
    def test_infer(self, value: object, expected: CellType) -> None:
        """Runtime types map to cell types; booleans are not numbers."""
        assert infer_cell_type(value) == expected


class TestCell:
    """Tests for the Cell class."""

    def test_default_resolves_type(self) -> None:
        """A DEFAULT cell resolves its type from the value."""
        cell = Cell(42, CellType.DEFAULT, "B3")
        assert cell.data_type == CellType.NUMBER
        assert cell.cell_address == "B3"
        assert (cell.column_number, cell.row_number) == (1, 2)

    def test_date_gets_date_style(self) -> None:
        """Date values receive the default date format."""
        cell = Cell(datetime(2024, 5, 1))
        assert cell.data_type == CellType.DATE
        assert cell.style == BasicStyles.date_format()

    def test_time_gets_time_style(self) -> None:
        """Time values receive the default time format."""
        cell = Cell(timedelta(minutes=5))
        assert cell.data_type == CellType.TIME
        assert cell.style == BasicStyles.time_format()

    def test_empty_type_drops_value(self) -> None:
        """An EMPTY cell has no value."""
        cell = Cell("ignored", CellType.EMPTY)
        assert cell.value is None
        assert cell.data_type == CellType.EMPTY

    def test_formula_stays_formula(self) -> None:
        """Changing the value of a formula cell keeps the FORMULA type."""
        cell = Cell("SUM(A1:A3)", CellType.FORMULA)
        cell.set_value("SUM(A1:A4)")
        assert cell.data_type == CellType.FORMULA

    def test_set_value_none_is_empty(self) -> None:
        """Setting None turns any cell empty."""
        cell = Cell("x")
        cell.set_value(None)
        assert cell.data_type == CellType.EMPTY

    def test_address_type_is_kept(self) -> None:
        """Modifiers of the address are preserved."""
        cell = Cell(1, CellType.DEFAULT, Address(0, 0, AddressType.FIXED_ROW))
        assert cell.address_type == AddressType.FIXED_ROW
        assert cell.cell_address == "A$1"

    def test_set_style_requires_repository(self) -> None:
        """Managed style assignment needs a repository."""
        cell = Cell("x")
        with pytest.raises(StyleError) as exc_info:
            cell.set_style(BasicStyles.bold())
        assert exc_info.value.error_code == ErrorCode.MISSING_STYLE_REPOSITORY

    def test_set_style_interns(self) -> None:
        """Managed assignment stores the canonical instance."""
        repository = StyleRepository()
        canonical = repository.intern(BasicStyles.bold())
        cell = Cell("x")
        assert cell.set_style(BasicStyles.bold(), repository) is canonical

    def test_set_style_unmanaged(self) -> None:
        """Unmanaged assignment keeps the given reference."""
        style = BasicStyles.italic()
        cell = Cell("x")
        assert cell.set_style(style, unmanaged=True) is style

    def test_set_style_none(self) -> None:
        """A missing style is rejected."""
        with pytest.raises(StyleError):
            Cell("x").set_style(None, StyleRepository())

    def test_set_cell_lock_state(self) -> None:
        """Lock flags are written into the cell format facet."""
        repository = StyleRepository()
        cell = Cell("x")
        cell.set_style(BasicStyles.bold(), repository)
        style = cell.set_cell_lock_state(True, True, repository)
        assert style.cell_xf.locked and style.cell_xf.hidden
        assert style.font.bold

    def test_copy(self) -> None:
        """A copy is equal and independent."""
        cell = Cell(5, CellType.DEFAULT, "C1")
        cell.set_style(BasicStyles.bold(), unmanaged=True)
        duplicate = cell.copy()
        assert duplicate == cell
        duplicate.set_value(6)
        assert cell.value == 5

    def test_ordering_is_row_major(self) -> None:
        """Cells sort by row, then column."""
        cells = [Cell(1, address="B1"), Cell(2, address="A2"), Cell(3, address="A1")]
        assert [c.cell_address for c in sorted(cells)] == ["A1", "B1", "A2"]

    def test_convert_values(self) -> None:
        """Plain values become cells; unknown kinds become strings."""

        class Unknown:
            def __str__(self) -> str:
                return "unknown"

        existing = Cell("keep")
        cells = Cell.convert_values([1, "a", existing, Unknown(), date(2024, 1, 1)])
        assert [c.data_type for c in cells] == [
            CellType.NUMBER,
            CellType.STRING,
            CellType.STRING,
            CellType.STRING,
            CellType.DATE,
        ]
        assert cells[2] is existing
        assert cells[3].value == "unknown"
        assert cells[4].style == BasicStyles.date_format()

    def test_convert_none(self) -> None:
        """No values give no cells."""
        assert Cell.convert_values(None) == []


class TestColumn:
    """Tests for column definitions."""

    def test_defaults(self) -> None:
        """A fresh column carries no information."""
        column = Column(2)
        assert column.width == DEFAULT_COLUMN_WIDTH
        assert column.column_address == "C"
        assert column.is_default

    def test_width_bounds(self) -> None:
        """Widths outside 0..255 are rejected."""
        column = Column(0)
        with pytest.raises(RangeError):
            column.width = 256

    def test_not_default_when_hidden(self) -> None:
        """Hidden columns must be kept."""
        column = Column(0)
        column.hidden = True
        assert not column.is_default

    def test_copy(self) -> None:
        """Copies carry all properties."""
        column = Column(4, 20)
        column.auto_filter = True
        column.default_style = Style()
        duplicate = column.copy()
        assert duplicate.width == 20
        assert duplicate.auto_filter
        assert duplicate.default_style == Style()
