"""Read .xlsx files with openpyxl into workbook models."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.cell import Cell as XlsxCell
from openpyxl.cell.cell import MergedCell
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook as XlsxWorkbook
from openpyxl.worksheet.worksheet import Worksheet as XlsxWorksheet

from spreadsheet_document_engine.config import settings
from spreadsheet_document_engine.metadata import Metadata
from spreadsheet_document_engine.models import (
    CellType,
    SheetProtectionValue,
    SheetViewType,
    WorksheetPane,
)
from spreadsheet_document_engine.services.import_coercion import ImportOptions
from spreadsheet_document_engine.services.workbook_loader import (
    DecodedCell,
    DecodedPane,
    DecodedWorkbook,
    DecodedWorksheet,
    WorkbookLoader,
)
from spreadsheet_document_engine.services.xlsx_styles import style_from_xlsx
from spreadsheet_document_engine.styles import Style
from spreadsheet_document_engine.units import column_width, pane_split_height, pane_split_width
from spreadsheet_document_engine.utils.exceptions import LoadError
from spreadsheet_document_engine.utils.logging import get_logger, timed_operation
from spreadsheet_document_engine.workbook import Workbook

logger = get_logger(__name__)

_DEFAULT_SELECTION = "A1"


class XlsxReader:
    """Decode .xlsx containers and load them as workbooks."""

    def __init__(
        self,
        max_digit_width: float | None = None,
        text_padding: float | None = None,
    ) -> None:
        self._max_digit_width = max_digit_width or settings.max_digit_width
        self._text_padding = text_padding or settings.text_padding

    def read(self, path: Path | str, options: ImportOptions | None = None) -> Workbook:
        """Load a workbook from a file.

        Args:
            path: Path of the .xlsx file.
            options: Coercion options applied to every value.

        Returns:
            The loaded workbook.

        Raises:
            FileNotFoundError: If the file does not exist.
            LoadError: If the file cannot be opened as a workbook.
        """
        decoded = self.decode(path)
        return WorkbookLoader(options).load(decoded)

    def decode(self, path: Path | str) -> DecodedWorkbook:
        """Decode a file into loader records without building a model."""
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Excel file not found: {file_path}")
        with timed_operation(logger, "read_xlsx") as metrics:
            try:
                document = load_workbook(filename=file_path, data_only=False)
            except (BadZipFile, InvalidFileException, OSError, KeyError, ValueError) as e:
                raise LoadError(
                    f"The file could not be opened as a workbook: {e}",
                    source=str(file_path),
                ) from e
            style_table: dict[Style, int] = {Style(): 0}
            worksheets = [
                self._decode_worksheet(sheet, style_table) for sheet in document.worksheets
            ]
            metrics.worksheets_processed = len(worksheets)
            metrics.cells_processed = sum(len(sheet.cells) for sheet in worksheets)
            metrics.styles_registered = len(style_table)

        return DecodedWorkbook(
            worksheets=worksheets,
            styles=list(style_table),
            selected_worksheet=document.index(document.active) if document.active else 0,
            hidden=bool(document.views) and document.views[0].visibility == "hidden",
            metadata=self._decode_metadata(document),
            source=str(file_path),
            **self._decode_workbook_protection(document),
        )

    @staticmethod
    def _decode_metadata(document: XlsxWorkbook) -> Metadata:
        properties = document.properties
        return Metadata(
            creator=properties.creator,
            title=properties.title,
            subject=properties.subject,
            description=properties.description,
            keywords=properties.keywords,
            category=properties.category,
            content_status=properties.contentStatus,
        )

    @staticmethod
    def _decode_workbook_protection(document: XlsxWorkbook) -> dict[str, Any]:
        security = document.security
        if security is None or not (security.lockStructure or security.lockWindows):
            return {}
        return {
            "use_protection": True,
            "lock_structure": bool(security.lockStructure),
            "lock_windows": bool(security.lockWindows),
            "protection_password_hash": security.workbookPassword,
        }

    def _decode_worksheet(
        self, sheet: XlsxWorksheet, style_table: dict[Style, int]
    ) -> DecodedWorksheet:
        cells = []
        for row in sheet.iter_rows():
            for cell in row:
                if isinstance(cell, MergedCell):
                    continue
                record = self._decode_cell(cell, style_table)
                if record is not None:
                    cells.append(record)

        view = sheet.sheet_view
        decoded = DecodedWorksheet(
            name=sheet.title,
            hidden=sheet.sheet_state != "visible",
            cells=cells,
            selected_cells=self._decode_selection(sheet),
            merged_cells=[str(cell_range) for cell_range in sheet.merged_cells.ranges],
            auto_filter=sheet.auto_filter.ref or None,
            default_row_height=sheet.sheet_format.defaultRowHeight,
            pane=self._decode_pane(sheet),
            show_gridlines=view.showGridLines is not False,
            view_type=SheetViewType(view.view) if view.view else SheetViewType.NORMAL,
            zoom_factor=view.zoomScale,
        )
        self._decode_dimensions(sheet, decoded)
        self._decode_protection(sheet, decoded)
        return decoded

    @staticmethod
    def _decode_cell(cell: XlsxCell, style_table: dict[Style, int]) -> DecodedCell | None:
        value = cell.value
        style_index = None
        if cell.has_style:
            style = style_from_xlsx(cell)
            if not style.is_default:
                style_index = style_table.setdefault(style, len(style_table))
        if value is None and style_index is None:
            return None

        type_hint = CellType.DEFAULT
        if cell.data_type == "f" and isinstance(value, str):
            value = value[1:] if value.startswith("=") else value
            type_hint = CellType.FORMULA
        elif isinstance(value, datetime):
            type_hint = CellType.DATE
        elif isinstance(value, (time, timedelta)):
            type_hint = CellType.TIME
        elif not isinstance(value, (str, bool, int, float)) and value is not None:
            value = str(value)
        return DecodedCell(
            address=cell.coordinate, value=value, type_hint=type_hint, style_index=style_index
        )

    @staticmethod
    def _decode_selection(sheet: XlsxWorksheet) -> list[str]:
        ranges: list[str] = []
        for selection in sheet.sheet_view.selection:
            sqref = str(selection.sqref or "")
            if not sqref or sqref == _DEFAULT_SELECTION:
                continue
            for part in sqref.split():
                ranges.append(part if ":" in part else f"{part}:{part}")
        return ranges

    def _decode_pane(self, sheet: XlsxWorksheet) -> DecodedPane | None:
        pane = sheet.sheet_view.pane
        if pane is None:
            return None
        active = WorksheetPane(pane.activePane) if pane.activePane else None
        if pane.state in ("frozen", "frozenSplit"):
            return DecodedPane(
                split_columns=int(pane.xSplit) if pane.xSplit else None,
                split_rows=int(pane.ySplit) if pane.ySplit else None,
                freeze=True,
                top_left_cell=pane.topLeftCell,
                active_pane=active,
            )
        return DecodedPane(
            left_width=(
                pane_split_width(pane.xSplit, self._max_digit_width, self._text_padding)
                if pane.xSplit
                else None
            ),
            top_height=pane_split_height(pane.ySplit) if pane.ySplit else None,
            top_left_cell=pane.topLeftCell,
            active_pane=active,
        )

    def _decode_dimensions(self, sheet: XlsxWorksheet, decoded: DecodedWorksheet) -> None:
        for key, dimension in sheet.column_dimensions.items():
            first = dimension.min or column_index_from_string(key)
            last = dimension.max or first
            for number in range(first - 1, last):
                if dimension.customWidth:
                    decoded.column_widths[number] = column_width(
                        dimension.width, self._max_digit_width, self._text_padding
                    )
                if dimension.hidden:
                    decoded.hidden_columns.append(number)
        for number, dimension in sheet.row_dimensions.items():
            if dimension.height is not None:
                decoded.row_heights[number - 1] = dimension.height
            if dimension.hidden:
                decoded.hidden_rows.append(number - 1)

    @staticmethod
    def _decode_protection(sheet: XlsxWorksheet, decoded: DecodedWorksheet) -> None:
        protection = sheet.protection
        if not protection.sheet:
            return
        decoded.use_protection = True
        decoded.protection_values = [
            action
            for action in SheetProtectionValue
            if not getattr(protection, action.value)
        ]
        decoded.protection_password_hash = protection.password or None


def read_xlsx(path: Path | str, options: ImportOptions | None = None) -> Workbook:
    return XlsxReader().read(path, options)
