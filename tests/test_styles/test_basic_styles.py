"""Tests for the predefined styles."""

import pytest

from spreadsheet_document_engine.styles import (
    BasicStyles,
    BorderStyle,
    PatternValue,
    UnderlineValue,
)
from spreadsheet_document_engine.utils.exceptions import ErrorCode, StyleError


class TestBasicStyles:
    """Tests for the BasicStyles factory."""

    def test_font_styles(self) -> None:
        """Font flags are set."""
        assert BasicStyles.bold().font.bold
        assert BasicStyles.italic().font.italic
        assert BasicStyles.bold_italic().font.bold
        assert BasicStyles.underline().font.underline == UnderlineValue.SINGLE
        assert BasicStyles.double_underline().font.underline == UnderlineValue.DOUBLE
        assert BasicStyles.strike().font.strike

    def test_new_instance_per_call(self) -> None:
        """Each call returns an equal but separate style."""
        first = BasicStyles.bold()
        second = BasicStyles.bold()
        assert first == second
        assert first is not second

    def test_number_formats(self) -> None:
        """Date and time styles use the built-in formats."""
        assert BasicStyles.date_format().number_format.is_date_format
        assert BasicStyles.time_format().number_format.is_time_format

    def test_border_frames(self) -> None:
        """The header frame has a medium bottom line and bold text."""
        frame = BasicStyles.border_frame().border
        assert frame.left_style == BorderStyle.THIN
        assert frame.bottom_style == BorderStyle.THIN
        header = BasicStyles.border_frame_header()
        assert header.border.bottom_style == BorderStyle.MEDIUM
        assert header.font.bold

    def test_dotted_fill(self) -> None:
        """The dotted fill uses the gray 0.125 pattern."""
        assert BasicStyles.dotted_fill_0_125().fill.pattern_fill == PatternValue.GRAY_125

    def test_merge_cell_style(self) -> None:
        """The merge marker forces alignment."""
        assert BasicStyles.merge_cell_style().cell_xf.force_apply_alignment

    def test_colorized(self) -> None:
        """RGB values get an opaque alpha channel."""
        assert BasicStyles.colorized_text("ff00ac").font.color_value == "FFFF00AC"
        fill = BasicStyles.colorized_background("00ff00").fill
        assert fill.foreground_color == "FF00FF00"
        assert fill.pattern_fill == PatternValue.SOLID

    @pytest.mark.parametrize("rgb", ["", "FF00", "FF00FF00", "zzzzzz"])
    def test_colorized_invalid(self, rgb: str) -> None:
        """Invalid RGB values are rejected."""
        with pytest.raises(StyleError) as exc_info:
            BasicStyles.colorized_text(rgb)
        assert exc_info.value.error_code == ErrorCode.INVALID_COLOR

    def test_font(self) -> None:
        """Custom fonts carry name and size."""
        font = BasicStyles.font("Arial", 14, bold=True).font
        assert (font.name, font.size, font.bold, font.italic) == ("Arial", 14, True, False)
