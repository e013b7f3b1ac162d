"""Style model and interning for the spreadsheet document engine."""

from spreadsheet_document_engine.styles.basic_styles import BasicStyles
from spreadsheet_document_engine.styles.facets import (
    Border,
    BorderStyle,
    CellXf,
    Fill,
    FillType,
    Font,
    FontVerticalAlignValue,
    FormatNumber,
    FormatRange,
    HorizontalAlignValue,
    NumberFormat,
    PatternValue,
    SchemeValue,
    TextBreakValue,
    TextDirectionValue,
    UnderlineValue,
    VerticalAlignValue,
    validate_color,
)
from spreadsheet_document_engine.styles.repository import StyleRepository
from spreadsheet_document_engine.styles.style import Style

__all__ = [
    "BasicStyles",
    "Border",
    "BorderStyle",
    "CellXf",
    "Fill",
    "FillType",
    "Font",
    "FontVerticalAlignValue",
    "FormatNumber",
    "FormatRange",
    "HorizontalAlignValue",
    "NumberFormat",
    "PatternValue",
    "SchemeValue",
    "Style",
    "StyleRepository",
    "TextBreakValue",
    "TextDirectionValue",
    "UnderlineValue",
    "VerticalAlignValue",
    "validate_color",
]
