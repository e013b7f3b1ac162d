"""Write workbooks to .xlsx files with openpyxl."""

from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook as XlsxWorkbook
from openpyxl.utils import get_column_letter
from openpyxl.workbook.protection import WorkbookProtection
from openpyxl.worksheet.views import Pane, Selection
from openpyxl.worksheet.worksheet import Worksheet as XlsxWorksheet

from spreadsheet_document_engine.addressing import decode_address
from spreadsheet_document_engine.cell import DEFAULT_COLUMN_WIDTH
from spreadsheet_document_engine.config import settings
from spreadsheet_document_engine.models import CellType, SheetProtectionValue
from spreadsheet_document_engine.services.workbook_exporter import (
    ExportedPane,
    ExportedWorkbook,
    ExportedWorksheet,
    WorkbookExporter,
)
from spreadsheet_document_engine.services.xlsx_styles import XlsxStyle, style_to_xlsx
from spreadsheet_document_engine.units import (
    internal_column_width,
    internal_pane_split_height,
    internal_pane_split_width,
    internal_row_height,
)
from spreadsheet_document_engine.utils.logging import get_logger, timed_operation
from spreadsheet_document_engine.workbook import Workbook

logger = get_logger(__name__)


class XlsxWriter:
    """Encode workbooks into .xlsx containers."""

    def __init__(
        self,
        max_digit_width: float | None = None,
        text_padding: float | None = None,
    ) -> None:
        self._max_digit_width = max_digit_width or settings.max_digit_width
        self._text_padding = text_padding or settings.text_padding
        self._exporter = WorkbookExporter()

    def write(self, workbook: Workbook, path: Path | str) -> Path:
        """Export a workbook and save it.

        Args:
            workbook: Workbook to save. Merges are resolved in place.
            path: Target file path.

        Returns:
            The path written to.
        """
        target = Path(path)
        with timed_operation(logger, "write_xlsx") as metrics:
            exported = self._exporter.export(workbook)
            document = self.build(exported)
            document.save(target)
            metrics.worksheets_processed = len(exported.worksheets)
            metrics.cells_processed = sum(len(sheet.cells) for sheet in exported.worksheets)
            metrics.styles_registered = len(exported.styles)
        logger.info("Saved workbook", path=str(target))
        return target

    def build(self, exported: ExportedWorkbook) -> XlsxWorkbook:
        """Create the openpyxl workbook for an exported snapshot."""
        document = XlsxWorkbook()
        document.remove(document.active)
        styles = [style_to_xlsx(style) for style in exported.styles]
        for sheet in exported.worksheets:
            self._write_worksheet(document.create_sheet(sheet.name), sheet, styles)

        if exported.worksheets:
            document.active = exported.selected_worksheet
        if exported.hidden and document.views:
            document.views[0].visibility = "hidden"
        self._write_metadata(document, exported)
        if exported.use_protection:
            security = WorkbookProtection(
                lockStructure=exported.lock_structure,
                lockWindows=exported.lock_windows,
            )
            if exported.protection_password_hash:
                security.set_workbook_password(
                    exported.protection_password_hash, already_hashed=True
                )
            document.security = security
        return document

    @staticmethod
    def _write_metadata(document: XlsxWorkbook, exported: ExportedWorkbook) -> None:
        metadata = exported.metadata
        properties = document.properties
        properties.creator = metadata.creator
        properties.title = metadata.title
        properties.subject = metadata.subject
        properties.description = metadata.description
        properties.keywords = metadata.keywords
        properties.category = metadata.category
        properties.contentStatus = metadata.content_status

    def _write_worksheet(
        self,
        target: XlsxWorksheet,
        sheet: ExportedWorksheet,
        styles: list[XlsxStyle],
    ) -> None:
        for record in sheet.cells:
            cell = target.cell(row=record.row + 1, column=record.column + 1)
            if record.data_type == CellType.FORMULA:
                cell.value = f"={record.value}"
            elif record.data_type != CellType.EMPTY:
                cell.value = record.value
            if record.style_index:
                styles[record.style_index].apply(cell)

        for column in sheet.columns:
            dimension = target.column_dimensions[get_column_letter(column.number + 1)]
            dimension.width = internal_column_width(
                column.width, self._max_digit_width, self._text_padding
            )
            dimension.hidden = column.hidden
        for row, height in sheet.row_heights.items():
            target.row_dimensions[row + 1].height = internal_row_height(height)
        for row in sheet.hidden_rows:
            target.row_dimensions[row + 1].hidden = True
        target.sheet_format.defaultRowHeight = sheet.default_row_height

        for cell_range in sheet.merged_cells:
            target.merge_cells(cell_range)
        if sheet.auto_filter:
            target.auto_filter.ref = sheet.auto_filter

        view = target.sheet_view
        if sheet.selected_cells:
            view.selection = [
                Selection(
                    activeCell=sheet.selected_cells[0].split(":")[0],
                    sqref=" ".join(sheet.selected_cells),
                )
            ]
        if sheet.pane is not None:
            view.pane = self._build_pane(sheet, sheet.pane)
        view.showGridLines = sheet.show_gridlines
        view.view = sheet.view_type.value
        view.zoomScale = sheet.zoom_factor

        if sheet.hidden:
            target.sheet_state = "hidden"
        if sheet.use_protection:
            self._write_protection(target, sheet)

    def _build_pane(self, sheet: ExportedWorksheet, pane: ExportedPane) -> Pane:
        state = "split"
        if pane.split_address is not None:
            split = decode_address(pane.split_address)
            if pane.freeze:
                state = "frozen"
                x_split, y_split = float(split.column), float(split.row)
            else:
                left_width = self._columns_width(sheet, split.column)
                top_height = self._rows_height(sheet, split.row)
                x_split = self._split_width(left_width) if split.column else 0.0
                y_split = internal_pane_split_height(top_height) if split.row else 0.0
        else:
            x_split = self._split_width(pane.left_width) if pane.left_width else 0.0
            y_split = internal_pane_split_height(pane.top_height) if pane.top_height else 0.0
        return Pane(
            xSplit=x_split or None,
            ySplit=y_split or None,
            topLeftCell=pane.top_left_cell,
            activePane=pane.active_pane.value if pane.active_pane else "topLeft",
            state=state,
        )

    def _split_width(self, width: float) -> float:
        return internal_pane_split_width(width, self._max_digit_width, self._text_padding)

    @staticmethod
    def _columns_width(sheet: ExportedWorksheet, count: int) -> float:
        widths = {column.number: column.width for column in sheet.columns}
        return sum(widths.get(number, DEFAULT_COLUMN_WIDTH) for number in range(count))

    @staticmethod
    def _rows_height(sheet: ExportedWorksheet, count: int) -> float:
        return sum(
            sheet.row_heights.get(number, sheet.default_row_height)
            for number in range(count)
        )

    @staticmethod
    def _write_protection(target: XlsxWorksheet, sheet: ExportedWorksheet) -> None:
        protection = target.protection
        protection.sheet = True
        allowed = set(sheet.protection_values)
        # A set flag locks the action
        for action in SheetProtectionValue:
            setattr(protection, action.value, action not in allowed)
        if sheet.protection_password_hash:
            protection.set_password(sheet.protection_password_hash, already_hashed=True)


def write_xlsx(workbook: Workbook, path: Path | str) -> Path:
    return XlsxWriter().write(workbook, path)
