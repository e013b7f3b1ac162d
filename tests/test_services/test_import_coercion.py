"""Tests for import type coercion."""

from datetime import datetime, time, timedelta
from decimal import Decimal

import pytest

from spreadsheet_document_engine.models import CellType
from spreadsheet_document_engine.services.import_coercion import (
    ColumnType,
    GlobalType,
    ImportCoercionEngine,
    ImportOptions,
)
from spreadsheet_document_engine.utils.exceptions import RangeError


def _engine(**options: object) -> ImportCoercionEngine:
    return ImportCoercionEngine(ImportOptions(**options))


class TestImportOptions:
    """Tests for the options model."""

    def test_defaults_from_settings(self) -> None:
        """Patterns and locale default to the configured values."""
        options = ImportOptions()
        assert options.global_enforcing_type == GlobalType.DEFAULT
        assert options.date_time_format == "%Y-%m-%d %H:%M:%S"
        assert options.time_format == "%H:%M:%S"
        assert options.locale == "en_US"

    def test_column_letters(self) -> None:
        """Column letters are converted to zero-based numbers."""
        options = ImportOptions(enforced_column_types={"B": ColumnType.BOOL, 3: "string"})
        assert options.enforced_column_types == {1: ColumnType.BOOL, 3: ColumnType.STRING}
        options.add_enforced_column("AA", ColumnType.DATE)
        assert options.enforced_column_types[26] == ColumnType.DATE

    def test_invalid_column(self) -> None:
        """Column numbers are validated."""
        with pytest.raises(RangeError):
            ImportOptions(enforced_column_types={-1: ColumnType.BOOL})
        with pytest.raises(RangeError):
            ImportOptions().add_enforced_column(20000, ColumnType.BOOL)


class TestColumnPolicies:
    """Tests for per-column coercion."""

    @pytest.mark.parametrize(
        ("value", "expected", "cell_type"),
        [
            ("42", 42, CellType.NUMBER),
            ("2.5", 2.5, CellType.NUMBER),
            ("2024-01-15 00:00:00", 45306.0, CellType.NUMBER),
            ("12:00:00", 0.5, CellType.NUMBER),
            ("true", 1, CellType.NUMBER),
            (True, 1, CellType.NUMBER),
            (datetime(1900, 3, 1), 61.0, CellType.NUMBER),
            ("abc", "abc", CellType.STRING),
        ],
    )
    def test_numeric(self, value: object, expected: object, cell_type: CellType) -> None:
        """Numbers, dates, times and flags become numbers."""
        engine = _engine(enforced_column_types={0: ColumnType.NUMERIC})
        assert engine.coerce(value) == (expected, cell_type)

    def test_float_and_decimal(self) -> None:
        """Float and decimal policies convert through Decimal."""
        float_engine = _engine(enforced_column_types={0: ColumnType.FLOAT})
        assert float_engine.coerce("1.5") == (1.5, CellType.NUMBER)
        assert float_engine.coerce(3)[0] == 3.0
        assert isinstance(float_engine.coerce(3)[0], float)
        decimal_engine = _engine(enforced_column_types={0: ColumnType.DECIMAL})
        assert decimal_engine.coerce(1.1)[0] == Decimal("1.1")
        assert decimal_engine.coerce(False)[0] == Decimal(0)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (45306, datetime(2024, 1, 15)),
            ("2024-01-15 00:00:00", datetime(2024, 1, 15)),
            ("45306", datetime(2024, 1, 15)),
            (61, datetime(1900, 3, 1)),
            (timedelta(days=1), datetime(1900, 1, 1)),
        ],
    )
    def test_date(self, value: object, expected: datetime) -> None:
        """Numbers and date text become dates."""
        engine = _engine(enforced_column_types={0: ColumnType.DATE})
        assert engine.coerce(value) == (expected, CellType.DATE)

    def test_date_unparseable(self) -> None:
        """Text that is no date passes through."""
        engine = _engine(enforced_column_types={0: ColumnType.DATE})
        assert engine.coerce("soon") == ("soon", CellType.STRING)
        assert engine.coerce(-5) == (-5, CellType.NUMBER)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0.5, timedelta(hours=12)),
            ("08:15:00", timedelta(hours=8, minutes=15)),
            (datetime(2024, 1, 1, 8, 30), timedelta(hours=8, minutes=30)),
            (time(6, 0, 5), timedelta(hours=6, seconds=5)),
        ],
    )
    def test_time(self, value: object, expected: timedelta) -> None:
        """Fractions, text and datetimes become times of day."""
        engine = _engine(enforced_column_types={0: ColumnType.TIME})
        assert engine.coerce(value) == (expected, CellType.TIME)

    def test_time_out_of_range(self) -> None:
        """Negative numbers are not times."""
        engine = _engine(enforced_column_types={0: ColumnType.TIME})
        assert engine.coerce(-1) == (-1, CellType.NUMBER)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1, True), (0.0, False), ("TRUE", True), ("0", False), (2, 2), ("yes", "yes")],
    )
    def test_bool(self, value: object, expected: object) -> None:
        """0/1 and true/false become flags, anything else is kept."""
        engine = _engine(enforced_column_types={0: ColumnType.BOOL})
        assert engine.coerce(value)[0] == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (42, "42"),
            (False, "false"),
            (datetime(2024, 1, 15), "2024-01-15 00:00:00"),
            (timedelta(hours=1, minutes=2, seconds=3), "01:02:03"),
            (time(9, 5), "09:05:00"),
        ],
    )
    def test_string(self, value: object, expected: str) -> None:
        """Values are rendered with the configured patterns."""
        engine = _engine(enforced_column_types={0: ColumnType.STRING})
        assert engine.coerce(value) == (expected, CellType.STRING)

    def test_only_listed_columns(self) -> None:
        """Columns without a policy are unchanged."""
        engine = _engine(enforced_column_types={1: ColumnType.NUMERIC})
        assert engine.coerce("42", column=0) == ("42", CellType.STRING)
        assert engine.coerce("42", column=1) == (42, CellType.NUMBER)

    def test_start_row(self) -> None:
        """Rows before the start row are not coerced."""
        engine = _engine(
            enforced_column_types={0: ColumnType.NUMERIC}, enforcing_start_row_number=1
        )
        assert engine.coerce("42", row=0) == ("42", CellType.STRING)
        assert engine.coerce("42", row=1) == (42, CellType.NUMBER)

    def test_formulas_untouched(self) -> None:
        """Formulas keep their text and type."""
        engine = _engine(
            enforced_column_types={0: ColumnType.NUMERIC},
            global_enforcing_type=GlobalType.EVERYTHING_TO_STRING,
        )
        assert engine.coerce("SUM(A1:A3)", CellType.FORMULA) == ("SUM(A1:A3)", CellType.FORMULA)


class TestGlobalStrategies:
    """Tests for the global strategy."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.5, 3), (3.4, 3), (-2.5, -2), (Decimal("7.5"), 8), ("12", 12), (True, 1)],
    )
    def test_all_numbers_to_int(self, value: object, expected: int) -> None:
        """Numbers are rounded half up."""
        engine = _engine(global_enforcing_type=GlobalType.ALL_NUMBERS_TO_INT)
        assert engine.coerce(value) == (expected, CellType.NUMBER)

    def test_all_numbers_to_int_keeps_unconvertible(self) -> None:
        """Values that cannot become ints are kept."""
        engine = _engine(global_enforcing_type=GlobalType.ALL_NUMBERS_TO_INT)
        assert engine.coerce("abc") == ("abc", CellType.STRING)
        assert engine.coerce(1e12) == (1e12, CellType.NUMBER)

    def test_all_numbers_to_float(self) -> None:
        """Ints become floats, text is kept."""
        engine = _engine(global_enforcing_type=GlobalType.ALL_NUMBERS_TO_FLOAT)
        value, cell_type = engine.coerce(3)
        assert isinstance(value, float) and cell_type == CellType.NUMBER
        assert engine.coerce("x") == ("x", CellType.STRING)

    def test_all_numbers_to_decimal(self) -> None:
        """Numbers become Decimal."""
        engine = _engine(global_enforcing_type=GlobalType.ALL_NUMBERS_TO_DECIMAL)
        assert engine.coerce("0.1") == (Decimal("0.1"), CellType.NUMBER)

    def test_everything_to_string(self) -> None:
        """Every value becomes text; empty stays empty."""
        engine = _engine(global_enforcing_type=GlobalType.EVERYTHING_TO_STRING)
        assert engine.coerce(5) == ("5", CellType.STRING)
        assert engine.coerce(True) == ("true", CellType.STRING)
        assert engine.coerce(None) == (None, CellType.EMPTY)

    def test_global_wins_over_column(self) -> None:
        """The global strategy applies after the column policy."""
        engine = _engine(
            enforced_column_types={0: ColumnType.BOOL},
            global_enforcing_type=GlobalType.EVERYTHING_TO_STRING,
        )
        assert engine.coerce(1) == ("true", CellType.STRING)


class TestFlags:
    """Tests for the final flags."""

    def test_dates_as_numbers(self) -> None:
        """Dates and times are stored as OA numbers."""
        engine = _engine(enforce_date_times_as_numbers=True)
        assert engine.coerce(datetime(2024, 1, 15)) == (45306.0, CellType.NUMBER)
        assert engine.coerce(timedelta(hours=6)) == (0.25, CellType.NUMBER)
        assert engine.coerce(time(18, 0)) == (0.75, CellType.NUMBER)

    def test_empty_as_string(self) -> None:
        """Empty values become empty strings."""
        engine = _engine(enforce_empty_values_as_string=True)
        assert engine.coerce(None) == ("", CellType.STRING)

    def test_no_options(self) -> None:
        """Without options values keep their runtime type."""
        engine = ImportCoercionEngine()
        assert engine.coerce(None) == (None, CellType.EMPTY)
        assert engine.coerce("x") == ("x", CellType.STRING)
        assert engine.coerce(1.5) == (1.5, CellType.NUMBER)

    def test_dates_before_1900_shift(self) -> None:
        """Dates before 1900-01-01 move one day forward."""
        engine = ImportCoercionEngine()
        assert engine.coerce(datetime(1899, 12, 31)) == (datetime(1900, 1, 1), CellType.DATE)
