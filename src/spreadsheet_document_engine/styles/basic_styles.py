"""Factory for frequently used styles."""

from __future__ import annotations

from spreadsheet_document_engine.styles.facets import (
    Border,
    BorderStyle,
    CellXf,
    Fill,
    FillType,
    Font,
    FormatNumber,
    NumberFormat,
    PatternValue,
    UnderlineValue,
    validate_color,
)
from spreadsheet_document_engine.styles.style import Style


class BasicStyles:
    """Predefined styles. Each call returns a new, uninterned Style."""

    @staticmethod
    def bold() -> Style:
        return Style(font=Font(bold=True))

    @staticmethod
    def italic() -> Style:
        return Style(font=Font(italic=True))

    @staticmethod
    def bold_italic() -> Style:
        return Style(font=Font(bold=True, italic=True))

    @staticmethod
    def underline() -> Style:
        return Style(font=Font(underline=UnderlineValue.SINGLE))

    @staticmethod
    def double_underline() -> Style:
        return Style(font=Font(underline=UnderlineValue.DOUBLE))

    @staticmethod
    def strike() -> Style:
        return Style(font=Font(strike=True))

    @staticmethod
    def date_format() -> Style:
        """Default date format (number format 14)."""
        return Style(number_format=NumberFormat(number=FormatNumber.FORMAT_14))

    @staticmethod
    def time_format() -> Style:
        """Default time format (number format 21)."""
        return Style(number_format=NumberFormat(number=FormatNumber.FORMAT_21))

    @staticmethod
    def round_format() -> Style:
        return Style(number_format=NumberFormat(number=FormatNumber.FORMAT_1))

    @staticmethod
    def border_frame() -> Style:
        return Style(
            border=Border(
                top_style=BorderStyle.THIN,
                bottom_style=BorderStyle.THIN,
                left_style=BorderStyle.THIN,
                right_style=BorderStyle.THIN,
            )
        )

    @staticmethod
    def border_frame_header() -> Style:
        """Thin frame with a medium bottom line and bold text."""
        return Style(
            border=Border(
                top_style=BorderStyle.THIN,
                bottom_style=BorderStyle.MEDIUM,
                left_style=BorderStyle.THIN,
                right_style=BorderStyle.THIN,
            ),
            font=Font(bold=True),
        )

    @staticmethod
    def dotted_fill_0_125() -> Style:
        return Style(fill=Fill(pattern_fill=PatternValue.GRAY_125))

    @staticmethod
    def merge_cell_style() -> Style:
        """Marker style applied to the hidden cells of a merged range."""
        return Style(cell_xf=CellXf(force_apply_alignment=True))

    @staticmethod
    def colorized_text(rgb: str) -> Style:
        """Text color from an RGB hex value such as ``"FF00AC"``."""
        validate_color(rgb, use_alpha=False)
        return Style(font=Font(color_value="FF" + rgb.upper()))

    @staticmethod
    def colorized_background(rgb: str) -> Style:
        """Solid background from an RGB hex value."""
        validate_color(rgb, use_alpha=False)
        return Style(fill=Fill.from_color("FF" + rgb.upper(), FillType.FILL_COLOR))

    @staticmethod
    def font(
        name: str, size: float = 11.0, bold: bool = False, italic: bool = False
    ) -> Style:
        return Style(font=Font(name=name, size=size, bold=bold, italic=italic))
