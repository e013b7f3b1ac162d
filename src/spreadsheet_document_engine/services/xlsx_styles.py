"""Conversion between engine styles and openpyxl style objects."""

from __future__ import annotations

from dataclasses import dataclass

from openpyxl.cell import Cell as XlsxCell
from openpyxl.styles import Alignment, Border, Color, Font, PatternFill, Protection, Side
from openpyxl.styles.numbers import BUILTIN_FORMATS, BUILTIN_FORMATS_REVERSE

from spreadsheet_document_engine.styles import (
    BorderStyle,
    CellXf,
    Fill,
    FontVerticalAlignValue,
    FormatNumber,
    FormatRange,
    HorizontalAlignValue,
    NumberFormat,
    PatternValue,
    SchemeValue,
    Style,
    TextBreakValue,
    TextDirectionValue,
    UnderlineValue,
    VerticalAlignValue,
)
from spreadsheet_document_engine.styles import Border as EngineBorder
from spreadsheet_document_engine.styles import Font as EngineFont
from spreadsheet_document_engine.styles.facets import DEFAULT_COLOR, VERTICAL_TEXT_ROTATION

_BORDER_SIDES = ("left", "right", "top", "bottom", "diagonal")
_PATTERNS = frozenset(pattern.value for pattern in PatternValue)


@dataclass(frozen=True)
class XlsxStyle:
    """openpyxl objects of one engine style; None keeps the openpyxl default."""

    font: Font | None = None
    fill: PatternFill | None = None
    border: Border | None = None
    alignment: Alignment | None = None
    protection: Protection | None = None
    number_format: str | None = None

    def apply(self, cell: XlsxCell) -> None:
        if self.font is not None:
            cell.font = self.font
        if self.fill is not None:
            cell.fill = self.fill
        if self.border is not None:
            cell.border = self.border
        if self.alignment is not None:
            cell.alignment = self.alignment
        if self.protection is not None:
            cell.protection = self.protection
        if self.number_format is not None:
            cell.number_format = self.number_format


# =============================================================================
# Engine -> openpyxl
# =============================================================================


def _font_to_xlsx(font: EngineFont) -> Font:
    color = Color(rgb=font.color_value) if font.color_value else Color(theme=font.color_theme)
    return Font(
        name=font.name,
        size=font.size,
        bold=font.bold,
        italic=font.italic,
        strike=font.strike,
        underline=None if font.underline == UnderlineValue.NONE else font.underline.value,
        vertAlign=(
            None
            if font.vertical_align == FontVerticalAlignValue.NONE
            else font.vertical_align.value
        ),
        color=color,
        scheme=None if font.scheme == SchemeValue.NONE else font.scheme.value,
        family=float(font.family) if font.family else None,
        charset=int(font.charset) if font.charset else None,
    )


def _fill_to_xlsx(fill: Fill) -> PatternFill:
    return PatternFill(
        patternType=fill.pattern_fill.value,
        fgColor=Color(rgb=fill.foreground_color),
        bgColor=Color(rgb=fill.background_color),
    )


def _side_to_xlsx(style: BorderStyle, color: str) -> Side:
    return Side(
        style=None if style == BorderStyle.NONE else style.value,
        color=Color(rgb=color) if color else None,
    )


def _border_to_xlsx(border: EngineBorder) -> Border:
    sides = {
        name: _side_to_xlsx(getattr(border, f"{name}_style"), getattr(border, f"{name}_color"))
        for name in _BORDER_SIDES
    }
    return Border(
        diagonalUp=border.diagonal_up, diagonalDown=border.diagonal_down, **sides
    )


def _alignment_to_xlsx(cell_xf: CellXf) -> Alignment:
    return Alignment(
        horizontal=(
            None
            if cell_xf.horizontal_align == HorizontalAlignValue.NONE
            else cell_xf.horizontal_align.value
        ),
        vertical=(
            None
            if cell_xf.vertical_align == VerticalAlignValue.NONE
            else cell_xf.vertical_align.value
        ),
        wrap_text=cell_xf.alignment == TextBreakValue.WRAP_TEXT or None,
        shrink_to_fit=cell_xf.alignment == TextBreakValue.SHRINK_TO_FIT or None,
        text_rotation=cell_xf.internal_rotation,
        indent=cell_xf.indent,
    )


def _number_format_to_xlsx(number_format: NumberFormat) -> str | None:
    if number_format.number == FormatNumber.NONE:
        return None
    if number_format.is_custom_format:
        return number_format.custom_format_code or None
    return BUILTIN_FORMATS.get(int(number_format.number))


def style_to_xlsx(style: Style) -> XlsxStyle:
    """Convert an engine style; default facets are left out."""
    cell_xf = style.cell_xf
    alignment_xf = cell_xf.model_copy(update={"locked": False, "hidden": False})
    return XlsxStyle(
        font=None if style.font.is_default_font else _font_to_xlsx(style.font),
        fill=None if style.fill.pattern_fill == PatternValue.NONE else _fill_to_xlsx(style.fill),
        border=None if style.border.is_empty else _border_to_xlsx(style.border),
        alignment=None if alignment_xf == CellXf() else _alignment_to_xlsx(cell_xf),
        protection=(
            Protection(locked=cell_xf.locked, hidden=cell_xf.hidden)
            if cell_xf.locked or cell_xf.hidden
            else None
        ),
        number_format=_number_format_to_xlsx(style.number_format),
    )


# =============================================================================
# openpyxl -> engine
# =============================================================================


def _rgb(color: Color | None) -> str | None:
    if color is None or color.type != "rgb":
        return None
    return color.rgb


def _font_from_xlsx(font: Font) -> EngineFont:
    rgb = _rgb(font.color)
    theme = font.color.theme if font.color is not None and font.color.type == "theme" else 1
    return EngineFont(
        bold=bool(font.bold),
        italic=bool(font.italic),
        strike=bool(font.strike),
        underline=UnderlineValue(font.underline) if font.underline else UnderlineValue.NONE,
        size=font.size or EngineFont().size,
        name=font.name or EngineFont().name,
        family=str(int(font.family)) if font.family is not None else "",
        color_theme=theme,
        color_value=rgb or "",
        scheme=SchemeValue(font.scheme) if font.scheme else SchemeValue.NONE,
        vertical_align=(
            FontVerticalAlignValue(font.vertAlign)
            if font.vertAlign in ("subscript", "superscript")
            else FontVerticalAlignValue.NONE
        ),
        charset=str(font.charset) if font.charset is not None else "",
    )


def _fill_from_xlsx(fill: PatternFill) -> Fill:
    pattern = getattr(fill, "patternType", None)
    if not pattern or pattern == "none":
        return Fill()
    return Fill(
        pattern_fill=PatternValue(pattern) if pattern in _PATTERNS else PatternValue.SOLID,
        foreground_color=_rgb(fill.fgColor) or DEFAULT_COLOR,
        background_color=_rgb(fill.bgColor) or DEFAULT_COLOR,
    )


def _border_from_xlsx(border: Border) -> EngineBorder:
    values: dict[str, object] = {}
    for name in _BORDER_SIDES:
        side = getattr(border, name)
        if side is None or side.style is None:
            continue
        values[f"{name}_style"] = BorderStyle(side.style)
        values[f"{name}_color"] = _rgb(side.color) or ""
    values["diagonal_up"] = bool(border.diagonalUp)
    values["diagonal_down"] = bool(border.diagonalDown)
    return EngineBorder(**values)


def _cell_xf_from_xlsx(alignment: Alignment, protection: Protection) -> CellXf:
    rotation = int(alignment.textRotation or 0)
    direction = TextDirectionValue.HORIZONTAL
    if rotation == VERTICAL_TEXT_ROTATION:
        direction = TextDirectionValue.VERTICAL
        rotation = 0
    elif rotation > 90:
        rotation = 90 - rotation
    if alignment.wrapText:
        text_break = TextBreakValue.WRAP_TEXT
    elif alignment.shrinkToFit:
        text_break = TextBreakValue.SHRINK_TO_FIT
    else:
        text_break = TextBreakValue.NONE
    protected = protection != Protection()
    return CellXf(
        horizontal_align=(
            HorizontalAlignValue(alignment.horizontal)
            if alignment.horizontal
            else HorizontalAlignValue.NONE
        ),
        vertical_align=(
            VerticalAlignValue(alignment.vertical)
            if alignment.vertical
            else VerticalAlignValue.NONE
        ),
        alignment=text_break,
        text_direction=direction,
        text_rotation=rotation,
        indent=int(alignment.indent or 0),
        locked=bool(protection.locked) if protected else False,
        hidden=bool(protection.hidden) if protected else False,
    )


def _number_format_from_xlsx(code: str | None) -> NumberFormat:
    if not code or code == "General":
        return NumberFormat()
    builtin = BUILTIN_FORMATS_REVERSE.get(code)
    if builtin is not None:
        number, format_range = NumberFormat.try_parse_format_number(builtin)
        if format_range == FormatRange.DEFINED_FORMAT:
            return NumberFormat(number=number)
    return NumberFormat(number=FormatNumber.CUSTOM, custom_format_code=code)


def style_from_xlsx(cell: XlsxCell) -> Style:
    """Read the style of an openpyxl cell."""
    return Style(
        border=_border_from_xlsx(cell.border),
        cell_xf=_cell_xf_from_xlsx(cell.alignment, cell.protection),
        fill=_fill_from_xlsx(cell.fill),
        font=_font_from_xlsx(cell.font),
        number_format=_number_format_from_xlsx(cell.number_format),
    )
