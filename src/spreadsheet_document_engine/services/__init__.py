"""Boundary services: import coercion, load/export and file adapters."""

from spreadsheet_document_engine.services.frames import (
    dataframe_to_worksheet,
    worksheet_to_dataframe,
)
from spreadsheet_document_engine.services.import_coercion import (
    ColumnType,
    GlobalType,
    ImportCoercionEngine,
    ImportOptions,
)
from spreadsheet_document_engine.services.workbook_exporter import (
    ExportedWorkbook,
    WorkbookExporter,
)
from spreadsheet_document_engine.services.workbook_loader import (
    DecodedCell,
    DecodedWorkbook,
    DecodedWorksheet,
    WorkbookLoader,
)
from spreadsheet_document_engine.services.xlsx_reader import XlsxReader, read_xlsx
from spreadsheet_document_engine.services.xlsx_writer import XlsxWriter, write_xlsx

__all__ = [
    "ColumnType",
    "DecodedCell",
    "DecodedWorkbook",
    "DecodedWorksheet",
    "ExportedWorkbook",
    "GlobalType",
    "ImportCoercionEngine",
    "ImportOptions",
    "WorkbookExporter",
    "WorkbookLoader",
    "XlsxReader",
    "XlsxWriter",
    "dataframe_to_worksheet",
    "read_xlsx",
    "worksheet_to_dataframe",
    "write_xlsx",
]
