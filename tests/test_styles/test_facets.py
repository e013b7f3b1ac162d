"""Tests for style facets."""

import pytest
from pydantic import ValidationError

from spreadsheet_document_engine.styles import (
    Border,
    BorderStyle,
    CellXf,
    Fill,
    FillType,
    Font,
    FormatNumber,
    FormatRange,
    NumberFormat,
    PatternValue,
    TextDirectionValue,
    validate_color,
)
from spreadsheet_document_engine.utils.exceptions import ErrorCode, FormatError, StyleError


class TestValidateColor:
    """Tests for hex color validation."""

    def test_valid(self) -> None:
        """RGB and ARGB values of the right length pass."""
        validate_color("FF00AC", use_alpha=False)
        validate_color("80FF00AC", use_alpha=True)
        validate_color("", use_alpha=True, allow_empty=True)

    @pytest.mark.parametrize(
        ("value", "use_alpha"),
        [("", False), ("FF00A", False), ("FF00AC", True), ("GG00AC", False)],
    )
    def test_invalid(self, value: str, use_alpha: bool) -> None:
        """Empty, wrong length and non-hex values fail."""
        with pytest.raises(StyleError) as exc_info:
            validate_color(value, use_alpha=use_alpha)
        assert exc_info.value.error_code == ErrorCode.INVALID_COLOR


class TestFacetValues:
    """Tests for facet equality and append."""

    def test_structural_equality(self) -> None:
        """Equal fields make equal, equally hashed facets."""
        assert Font(bold=True) == Font(bold=True)
        assert hash(Font(bold=True)) == hash(Font(bold=True))
        assert Font(bold=True) != Font(italic=True)

    def test_frozen(self) -> None:
        """Facets cannot be mutated."""
        font = Font()
        with pytest.raises(ValidationError):
            font.bold = True  # type: ignore[misc]

    def test_append_takes_non_default_fields(self) -> None:
        """Only fields that differ from the default are overlaid."""
        base = Font(bold=True, size=14)
        merged = base.append(Font(italic=True))
        assert merged.bold and merged.italic
        assert merged.size == 14

    def test_append_default_is_identity(self) -> None:
        """Appending a default facet returns the base."""
        base = Border(top_style=BorderStyle.THIN)
        assert base.append(Border()) is base

    def test_append_wrong_type(self) -> None:
        """Facets of different kinds cannot be appended."""
        with pytest.raises(StyleError):
            Font().append(Fill())


class TestFont:
    """Tests for the Font facet."""

    def test_size_is_clamped(self) -> None:
        """Sizes are kept within 1..409."""
        assert Font(size=0.5).size == 1.0
        assert Font(size=1000).size == 409.0

    def test_empty_name(self) -> None:
        """Font names cannot be empty."""
        with pytest.raises(StyleError):
            Font(name="")

    def test_invalid_color(self) -> None:
        """Color values must be ARGB."""
        with pytest.raises(StyleError):
            Font(color_value="FF0000")

    def test_negative_theme(self) -> None:
        """Theme numbers are at least 0."""
        with pytest.raises(StyleError):
            Font(color_theme=-1)


class TestFill:
    """Tests for the Fill facet."""

    def test_from_color(self) -> None:
        """A fill color sets the foreground; a pattern color the background."""
        fill = Fill.from_color("FFFF0000")
        assert fill.foreground_color == "FFFF0000"
        assert fill.pattern_fill == PatternValue.SOLID
        pattern = Fill.from_color("FF00FF00", FillType.PATTERN_COLOR)
        assert pattern.background_color == "FF00FF00"

    def test_invalid_color(self) -> None:
        """Fill colors are validated."""
        with pytest.raises(StyleError):
            Fill(background_color="red")


class TestCellXf:
    """Tests for the cell format facet."""

    def test_rotation_bounds(self) -> None:
        """Rotation is limited to -90..90."""
        with pytest.raises(FormatError):
            CellXf(text_rotation=91)

    def test_negative_indent(self) -> None:
        """Indentation cannot be negative."""
        with pytest.raises(StyleError):
            CellXf(indent=-1)

    @pytest.mark.parametrize(
        ("rotation", "direction", "expected"),
        [
            (45, TextDirectionValue.HORIZONTAL, 45),
            (-45, TextDirectionValue.HORIZONTAL, 135),
            (30, TextDirectionValue.VERTICAL, 255),
        ],
    )
    def test_internal_rotation(
        self, rotation: int, direction: TextDirectionValue, expected: int
    ) -> None:
        """Negative angles map to 91..180 and vertical text to 255."""
        cell_xf = CellXf(text_rotation=rotation, text_direction=direction)
        assert cell_xf.internal_rotation == expected


class TestNumberFormat:
    """Tests for the number format facet."""

    @pytest.mark.parametrize(
        ("number", "expected"),
        [
            (14, (FormatNumber.FORMAT_14, FormatRange.DEFINED_FORMAT)),
            (0, (FormatNumber.NONE, FormatRange.DEFINED_FORMAT)),
            (30, (FormatNumber.NONE, FormatRange.UNDEFINED)),
            (164, (FormatNumber.CUSTOM, FormatRange.CUSTOM_FORMAT)),
            (200, (FormatNumber.CUSTOM, FormatRange.CUSTOM_FORMAT)),
            (-1, (FormatNumber.NONE, FormatRange.INVALID)),
        ],
    )
    def test_try_parse(self, number: int, expected: tuple[FormatNumber, FormatRange]) -> None:
        """Raw IDs are classified."""
        assert NumberFormat.try_parse_format_number(number) == expected

    def test_date_and_time_formats(self) -> None:
        """Date and time formats are recognized."""
        assert NumberFormat(number=FormatNumber.FORMAT_14).is_date_format
        assert NumberFormat(number=FormatNumber.FORMAT_21).is_time_format
        assert not NumberFormat(number=FormatNumber.FORMAT_2).is_date_format

    def test_custom_id_minimum(self) -> None:
        """Custom IDs start at 164."""
        with pytest.raises(StyleError):
            NumberFormat(custom_format_id=100)
