"""Build workbook models from decoded container records.

A container decoder (see ``xlsx_reader``) produces ``DecodedWorkbook``
records. ``WorkbookLoader`` turns them into a ``Workbook``: every value is
coerced through the import engine, style indices are resolved against the
workbook style table and sheet metadata is restored. Worksheet validation
is suspended until the whole workbook is loaded.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from spreadsheet_document_engine.addressing import Address, decode_address
from spreadsheet_document_engine.cell import Cell
from spreadsheet_document_engine.metadata import Metadata
from spreadsheet_document_engine.models import (
    CellType,
    SheetProtectionValue,
    SheetViewType,
    WorksheetPane,
)
from spreadsheet_document_engine.services.import_coercion import (
    ImportCoercionEngine,
    ImportOptions,
)
from spreadsheet_document_engine.styles import Style, StyleRepository
from spreadsheet_document_engine.utils.exceptions import ErrorCode, LoadError
from spreadsheet_document_engine.utils.logging import (
    LogContext,
    ProgressTracker,
    get_logger,
    timed_operation,
)
from spreadsheet_document_engine.workbook import Workbook
from spreadsheet_document_engine.worksheet import Worksheet

logger = get_logger(__name__)


class DecodedCell(BaseModel):
    """One decoded cell record."""

    address: str
    value: Any = None
    type_hint: CellType = CellType.DEFAULT
    style_index: int | None = None


class DecodedPane(BaseModel):
    """Decoded pane state.

    Either the count fields (``split_columns``/``split_rows``) or the size
    fields (``left_width``/``top_height``) are set.
    """

    split_columns: int | None = None
    split_rows: int | None = None
    left_width: float | None = None
    top_height: float | None = None
    freeze: bool = False
    top_left_cell: str | None = None
    active_pane: WorksheetPane | None = None


class DecodedWorksheet(BaseModel):
    """Decoded worksheet with its sheet-level metadata."""

    name: str
    hidden: bool = False
    cells: list[DecodedCell] = Field(default_factory=list)
    selected_cells: list[str] = Field(default_factory=list)
    merged_cells: list[str] = Field(default_factory=list)
    auto_filter: str | None = None
    column_widths: dict[int, float] = Field(default_factory=dict)
    hidden_columns: list[int] = Field(default_factory=list)
    row_heights: dict[int, float] = Field(default_factory=dict)
    hidden_rows: list[int] = Field(default_factory=list)
    default_row_height: float | None = None
    pane: DecodedPane | None = None
    show_gridlines: bool = True
    view_type: SheetViewType = SheetViewType.NORMAL
    zoom_factor: int | None = None
    use_protection: bool = False
    protection_values: list[SheetProtectionValue] = Field(default_factory=list)
    protection_password_hash: str | None = None


class DecodedWorkbook(BaseModel):
    """Decoded workbook: worksheets in order plus the shared style table."""

    worksheets: list[DecodedWorksheet] = Field(default_factory=list)
    styles: list[Style] = Field(default_factory=list)
    selected_worksheet: int = 0
    hidden: bool = False
    metadata: Metadata | None = None
    use_protection: bool = False
    lock_windows: bool = False
    lock_structure: bool = False
    protection_password_hash: str | None = None
    source: str | None = None


class WorkbookLoader:
    """Turn decoded records into a validated Workbook."""

    def __init__(self, options: ImportOptions | None = None) -> None:
        self._engine = ImportCoercionEngine(options)

    @property
    def options(self) -> ImportOptions:
        return self._engine.options

    def load(self, decoded: DecodedWorkbook) -> Workbook:
        """Build a workbook from decoded records.

        Args:
            decoded: Decoded workbook records.

        Returns:
            The loaded workbook, validated.

        Raises:
            FormatError: If a record carries a malformed address or range.
            LoadError: If a cell references an unknown style index.
            WorksheetError: If the loaded worksheets break the workbook
                invariants.
        """
        workbook = Workbook(filename=decoded.source)
        with (
            LogContext(workbook=decoded.source or "<memory>"),
            timed_operation(logger, "load_workbook") as metrics,
        ):
            styles = [workbook.add_style(style) for style in decoded.styles]
            metrics.styles_registered = len(workbook.style_repository)
            tracker = ProgressTracker(logger, "Loading worksheets", len(decoded.worksheets))
            with workbook.bulk_load():
                for sheet in decoded.worksheets:
                    with LogContext(worksheet=sheet.name):
                        self._load_worksheet(workbook, sheet, styles, decoded.source)
                    tracker.update(details=sheet.name)
                    metrics.worksheets_processed += 1
                    metrics.cells_processed += len(sheet.cells)
                if decoded.worksheets:
                    workbook.set_selected_worksheet(decoded.selected_worksheet)
                    workbook.set_current_worksheet(decoded.selected_worksheet)
                workbook.hidden = decoded.hidden
                if decoded.metadata is not None:
                    workbook.metadata = decoded.metadata.model_copy()
                if decoded.use_protection:
                    workbook.set_workbook_protection(
                        True, decoded.lock_windows, decoded.lock_structure
                    )
                    workbook.set_workbook_protection_password_hash(
                        decoded.protection_password_hash
                    )
        return workbook

    def _load_worksheet(
        self,
        workbook: Workbook,
        decoded: DecodedWorksheet,
        styles: list[Style],
        source: str | None,
    ) -> Worksheet:
        worksheet = workbook.add_worksheet(decoded.name, sanitize=False)
        repository = workbook.style_repository
        for record in decoded.cells:
            worksheet._put_cell(self._build_cell(record, styles, repository, source))

        for cell_range in decoded.merged_cells:
            worksheet.merge_cells(cell_range)
        for selection in decoded.selected_cells:
            worksheet.add_selected_cells(selection)
        for number, width in decoded.column_widths.items():
            worksheet.set_column_width(number, width)
        for number in decoded.hidden_columns:
            worksheet.set_column_hidden_state(number, True)
        for number, height in decoded.row_heights.items():
            worksheet.set_row_height(number, height)
        for number in decoded.hidden_rows:
            worksheet.set_row_hidden_state(number, True)
        if decoded.default_row_height is not None:
            worksheet.default_row_height = decoded.default_row_height
        if decoded.auto_filter:
            worksheet.set_auto_filter(decoded.auto_filter)
        if decoded.pane is not None:
            self._load_pane(worksheet, decoded.pane)

        worksheet.show_gridlines = decoded.show_gridlines
        if decoded.view_type != SheetViewType.NORMAL:
            worksheet.view_type = decoded.view_type
        if decoded.zoom_factor is not None:
            worksheet.set_zoom_factor(decoded.zoom_factor)

        for action in decoded.protection_values:
            worksheet.add_allowed_action(action)
        worksheet.use_sheet_protection = decoded.use_protection
        if decoded.protection_password_hash:
            worksheet.set_sheet_protection_password_hash(decoded.protection_password_hash)

        worksheet.hidden = decoded.hidden
        logger.debug("Loaded worksheet", cells=len(decoded.cells))
        return worksheet

    def _build_cell(
        self,
        record: DecodedCell,
        styles: list[Style],
        repository: StyleRepository,
        source: str | None,
    ) -> Cell:
        parsed = decode_address(record.address)
        address = Address(parsed.column, parsed.row)
        value, data_type = self._engine.coerce(
            record.value, record.type_hint, address.column, address.row
        )
        if data_type == CellType.FORMULA:
            cell = Cell(value, CellType.FORMULA, address)
        else:
            cell = Cell(value, CellType.DEFAULT, address)

        if record.style_index is not None:
            if not 0 <= record.style_index < len(styles):
                raise LoadError(
                    f"The cell {address} references the unknown style index "
                    f"{record.style_index}",
                    ErrorCode.UNKNOWN_STYLE_INDEX,
                    source=source,
                    details={"address": str(address), "style_index": record.style_index},
                )
            cell.set_style(styles[record.style_index], unmanaged=True)
        elif cell.style is not None:
            cell.set_style(cell.style, repository)
        return cell

    @staticmethod
    def _load_pane(worksheet: Worksheet, pane: DecodedPane) -> None:
        top_left = decode_address(pane.top_left_cell) if pane.top_left_cell else None
        if pane.split_columns is not None or pane.split_rows is not None:
            worksheet.set_split_counts(
                pane.split_columns,
                pane.split_rows,
                pane.freeze,
                top_left,
                pane.active_pane,
            )
        elif pane.left_width is not None or pane.top_height is not None:
            worksheet.set_split(
                pane.left_width, pane.top_height, top_left, pane.active_pane
            )


def load_workbook(
    decoded: DecodedWorkbook, options: ImportOptions | None = None
) -> Workbook:
    """Convenience wrapper around ``WorkbookLoader.load``."""
    return WorkbookLoader(options).load(decoded)
