"""Tests for the formula builders."""

from decimal import Decimal

import pytest

from spreadsheet_document_engine import Address, BasicFormulas, CellType, Range, Worksheet
from spreadsheet_document_engine.utils.exceptions import FormatError, RangeError


class TestBasicFormulas:
    """Tests for range and rounding formulas."""

    def test_sum(self) -> None:
        """SUM over a range."""
        cell = BasicFormulas.sum(Range.parse("A1:A10"))
        assert cell.value == "SUM(A1:A10)"
        assert cell.data_type == CellType.FORMULA

    @pytest.mark.parametrize(
        ("builder", "name"),
        [
            (BasicFormulas.average, "AVERAGE"),
            (BasicFormulas.max, "MAX"),
            (BasicFormulas.median, "MEDIAN"),
            (BasicFormulas.min, "MIN"),
        ],
    )
    def test_range_functions(self, builder, name: str) -> None:
        """Each range function wraps the range."""
        assert builder(Range.parse("B2:C3")).value == f"{name}(B2:C3)"

    def test_single_cell_range(self) -> None:
        """A one-cell range is written as an address."""
        assert BasicFormulas.sum(Range.parse("C3:C3")).value == "SUM(C3)"

    def test_rounding(self) -> None:
        """Rounding formulas take the decimals as second argument."""
        address = Address(0, 0)
        assert BasicFormulas.round(address, 2).value == "ROUND(A1,2)"
        assert BasicFormulas.ceil(address, 1).value == "ROUNDUP(A1,1)"
        assert BasicFormulas.floor(address, 0).value == "ROUNDDOWN(A1,0)"

    def test_sheet_prefix(self) -> None:
        """A target worksheet prefixes the reference with its quoted name."""
        target = Worksheet("It's data")
        assert BasicFormulas.sum(Range.parse("A1:B2"), target).value == "SUM('It''s data'!A1:B2)"

    def test_stored_in_worksheet(self, worksheet: Worksheet) -> None:
        """Builders return cells ready to store."""
        worksheet.add_cell(BasicFormulas.sum(Range.parse("A1:A3")), "A4")
        stored = worksheet.get_cell("A4")
        assert stored.data_type == CellType.FORMULA
        assert stored.cell_address == "A4"


class TestVlookup:
    """Tests for the VLOOKUP builder."""

    def test_address_lookup(self) -> None:
        """Lookups by address reference both worksheets."""
        cell = BasicFormulas.vlookup(
            Address(0, 0),
            Range.parse("A1:C10"),
            2,
            True,
            range_target=Worksheet("Data"),
            query_target=Worksheet("Query"),
        )
        assert cell.value == "VLOOKUP('Query'!A1,'Data'!A1:C10,2,TRUE)"

    @pytest.mark.parametrize(
        ("number", "text"),
        [(42, "42"), (2.5, "2.5"), (Decimal("1.2300"), "1.23"), (1e-7, "0.0000001"), (3.0, "3")],
    )
    def test_number_lookup(self, number: object, text: str) -> None:
        """Numbers are rendered without exponents or trailing zeros."""
        cell = BasicFormulas.vlookup(number, Range.parse("A1:B2"), 1, False)
        assert cell.value == f"VLOOKUP({text},A1:B2,1,FALSE)"

    @pytest.mark.parametrize("index", [0, 4])
    def test_column_index_out_of_range(self, index: int) -> None:
        """The column index must lie within the range width."""
        with pytest.raises(RangeError):
            BasicFormulas.vlookup(1, Range.parse("A1:C3"), index, True)

    @pytest.mark.parametrize("lookup", ["A1", True])
    def test_invalid_lookup(self, lookup: object) -> None:
        """Only addresses and numbers can be looked up."""
        with pytest.raises(FormatError):
            BasicFormulas.vlookup(lookup, Range.parse("A1:C3"), 1, True)
