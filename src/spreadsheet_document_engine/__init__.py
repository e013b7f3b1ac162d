"""Spreadsheet Document Engine - in-memory workbook model with cell, style and unit codecs."""

from spreadsheet_document_engine.addressing import Address, Range
from spreadsheet_document_engine.cell import Cell, Column
from spreadsheet_document_engine.formulas import BasicFormulas
from spreadsheet_document_engine.metadata import Metadata
from spreadsheet_document_engine.models import (
    AddressScope,
    AddressType,
    CellDirection,
    CellType,
    SheetProtectionValue,
    SheetViewType,
    WorksheetPane,
)
from spreadsheet_document_engine.styles import BasicStyles, Style, StyleRepository
from spreadsheet_document_engine.workbook import Workbook
from spreadsheet_document_engine.worksheet import Worksheet

__all__ = [
    "Address",
    "AddressScope",
    "AddressType",
    "BasicFormulas",
    "BasicStyles",
    "Cell",
    "CellDirection",
    "CellType",
    "Column",
    "Metadata",
    "Range",
    "SheetProtectionValue",
    "SheetViewType",
    "Style",
    "StyleRepository",
    "Workbook",
    "Worksheet",
    "WorksheetPane",
]
__version__ = "0.1.0"
