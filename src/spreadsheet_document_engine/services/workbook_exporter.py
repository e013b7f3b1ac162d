"""Snapshot a workbook for a container encoder.

``WorkbookExporter.export`` prepares a workbook (merges resolved,
invariants validated, auto-filters and columns recalculated) and returns
an ``ExportedWorkbook``: plain records that reference styles by their
index in a table holding exactly one entry per canonical style. Dates and
times are exported as raw OA-date numbers.
"""

from __future__ import annotations

from datetime import date, time, timedelta
from typing import Any

from pydantic import BaseModel, Field

from spreadsheet_document_engine.cell import Cell
from spreadsheet_document_engine.metadata import Metadata
from spreadsheet_document_engine.models import (
    CellType,
    SheetProtectionValue,
    SheetViewType,
    WorksheetPane,
)
from spreadsheet_document_engine.styles import Style, StyleRepository
from spreadsheet_document_engine.units import (
    epoch_from_date,
    epoch_from_duration,
    epoch_from_time_of_day,
)
from spreadsheet_document_engine.utils.logging import (
    LogContext,
    get_logger,
    timed_operation,
)
from spreadsheet_document_engine.workbook import Workbook
from spreadsheet_document_engine.worksheet import Worksheet

logger = get_logger(__name__)


class ExportedCell(BaseModel):
    address: str
    column: int
    row: int
    value: Any = None
    data_type: CellType
    style_index: int = 0


class ExportedColumn(BaseModel):
    number: int
    width: float
    hidden: bool = False
    auto_filter: bool = False
    style_index: int | None = None


class ExportedPane(BaseModel):
    """Pane state; ``split_address`` is set for count splits only."""

    split_address: str | None = None
    left_width: float | None = None
    top_height: float | None = None
    freeze: bool = False
    top_left_cell: str | None = None
    active_pane: WorksheetPane | None = None


class ExportedWorksheet(BaseModel):
    name: str
    sheet_id: int
    hidden: bool = False
    cells: list[ExportedCell] = Field(default_factory=list)
    columns: list[ExportedColumn] = Field(default_factory=list)
    row_heights: dict[int, float] = Field(default_factory=dict)
    hidden_rows: list[int] = Field(default_factory=list)
    default_row_height: float
    merged_cells: list[str] = Field(default_factory=list)
    selected_cells: list[str] = Field(default_factory=list)
    auto_filter: str | None = None
    pane: ExportedPane | None = None
    show_gridlines: bool = True
    view_type: SheetViewType = SheetViewType.NORMAL
    zoom_factor: int = 100
    use_protection: bool = False
    protection_values: list[SheetProtectionValue] = Field(default_factory=list)
    protection_password_hash: str | None = None


class ExportedWorkbook(BaseModel):
    """Encoder input: worksheets in order plus the canonical style table."""

    worksheets: list[ExportedWorksheet] = Field(default_factory=list)
    styles: list[Style] = Field(default_factory=list)
    selected_worksheet: int = 0
    hidden: bool = False
    metadata: Metadata
    use_protection: bool = False
    lock_windows: bool = False
    lock_structure: bool = False
    protection_password_hash: str | None = None
    mru_colors: list[str] = Field(default_factory=list)


def export_value(cell: Cell) -> Any:
    """Value of a cell as the container stores it; dates become OA numbers."""
    value = cell.value
    if cell.data_type == CellType.DATE and isinstance(value, date):
        return epoch_from_date(value)
    if cell.data_type == CellType.TIME:
        if isinstance(value, timedelta):
            return epoch_from_duration(value)
        if isinstance(value, time):
            return epoch_from_time_of_day(value)
    return value


class WorkbookExporter:
    """Validate a workbook and turn it into an ``ExportedWorkbook``."""

    def export(self, workbook: Workbook) -> ExportedWorkbook:
        """Prepare and snapshot a workbook.

        Merged cells are resolved and the auto-filters and columns of every
        worksheet are recalculated, so the workbook itself is modified.

        Raises:
            WorksheetError: If the workbook breaks its worksheet invariants.
            FormatError: If a date cell is outside 1900-01-01..9999-12-31.
        """
        repository = workbook.style_repository
        with (
            LogContext(workbook=workbook.filename or "<memory>"),
            timed_operation(logger, "export_workbook") as metrics,
        ):
            workbook.resolve_merged_cells()
            workbook.validate_worksheets()
            worksheets = []
            for worksheet in workbook.worksheets:
                worksheet.recalculate_auto_filter()
                worksheet.recalculate_columns()
                with LogContext(worksheet=worksheet.sheet_name):
                    worksheets.append(self._export_worksheet(worksheet, repository))
                metrics.worksheets_processed += 1
                metrics.cells_processed += len(worksheet.cells)
            styles = repository.styles
            metrics.styles_registered = len(styles)

        return ExportedWorkbook(
            worksheets=worksheets,
            styles=styles,
            selected_worksheet=workbook.selected_worksheet,
            hidden=workbook.hidden,
            metadata=workbook.metadata.model_copy(),
            use_protection=workbook.use_workbook_protection,
            lock_windows=workbook.lock_windows_if_protected,
            lock_structure=workbook.lock_structure_if_protected,
            protection_password_hash=workbook.workbook_protection_password_hash,
            mru_colors=workbook.mru_colors,
        )

    @staticmethod
    def _style_index(style: Style | None, repository: StyleRepository) -> int:
        if style is None:
            return 0
        return repository.index_of(repository.intern(style))

    def _export_worksheet(
        self, worksheet: Worksheet, repository: StyleRepository
    ) -> ExportedWorksheet:
        cells = sorted(
            worksheet.cells.values(), key=lambda c: (c.row_number, c.column_number)
        )
        exported_cells = [
            ExportedCell(
                address=str(cell.address),
                column=cell.column_number,
                row=cell.row_number,
                value=export_value(cell),
                data_type=cell.data_type,
                style_index=self._style_index(cell.style, repository),
            )
            for cell in cells
        ]
        columns = [
            ExportedColumn(
                number=column.number,
                width=column.width,
                hidden=column.hidden,
                auto_filter=column.auto_filter,
                style_index=(
                    self._style_index(column.default_style, repository)
                    if column.default_style is not None
                    else None
                ),
            )
            for column in sorted(worksheet.columns.values(), key=lambda c: c.number)
        ]
        auto_filter = worksheet.auto_filter_range
        return ExportedWorksheet(
            name=worksheet.sheet_name,
            sheet_id=worksheet.sheet_id,
            hidden=worksheet.hidden,
            cells=exported_cells,
            columns=columns,
            row_heights=dict(worksheet.row_heights),
            hidden_rows=sorted(worksheet.hidden_rows),
            default_row_height=worksheet.default_row_height,
            merged_cells=list(worksheet.merged_cells),
            selected_cells=[str(cell_range) for cell_range in worksheet.selected_cells],
            auto_filter=str(auto_filter) if auto_filter is not None else None,
            pane=self._export_pane(worksheet),
            show_gridlines=worksheet.show_gridlines,
            view_type=worksheet.view_type,
            zoom_factor=worksheet.zoom_factor,
            use_protection=worksheet.use_sheet_protection,
            protection_values=worksheet.sheet_protection_values,
            protection_password_hash=worksheet.sheet_protection_password_hash,
        )

    @staticmethod
    def _export_pane(worksheet: Worksheet) -> ExportedPane | None:
        split_address = worksheet.pane_split_address
        left_width = worksheet.pane_split_left_width
        top_height = worksheet.pane_split_top_height
        if split_address is None and left_width is None and top_height is None:
            return None
        top_left = worksheet.pane_split_top_left_cell
        return ExportedPane(
            split_address=str(split_address) if split_address is not None else None,
            left_width=left_width,
            top_height=top_height,
            freeze=bool(worksheet.freeze_split_panes),
            top_left_cell=str(top_left) if top_left is not None else None,
            active_pane=worksheet.active_pane,
        )


def export_workbook(workbook: Workbook) -> ExportedWorkbook:
    return WorkbookExporter().export(workbook)
