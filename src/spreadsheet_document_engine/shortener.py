"""Compact sequential-write facade bound to the current worksheet."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from spreadsheet_document_engine.utils.exceptions import ErrorCode, WorksheetError

if TYPE_CHECKING:
    from spreadsheet_document_engine.cell import Cell
    from spreadsheet_document_engine.styles import Style
    from spreadsheet_document_engine.workbook import Workbook
    from spreadsheet_document_engine.worksheet import Worksheet


class Shortener:
    """Writes values and moves the cursor of the workbook's current worksheet.

    The shortener holds no state of its own besides the worksheet it is
    bound to. The workbook re-binds it whenever its current worksheet
    changes.

    Example:
        workbook = Workbook("Data")
        workbook.ws.value("Name")
        workbook.ws.value("Age")
        workbook.ws.down()
    """

    def __init__(self, workbook: Workbook) -> None:
        self._workbook = workbook
        self._worksheet: Worksheet | None = None

    @property
    def worksheet(self) -> Worksheet | None:
        return self._worksheet

    def set_current_worksheet(self, worksheet: Worksheet) -> None:
        """Make ``worksheet`` the current worksheet of the workbook as well."""
        self._workbook.set_current_worksheet(worksheet)

    def _bind(self, worksheet: Worksheet | None) -> None:
        self._worksheet = worksheet

    def _require_worksheet(self) -> Worksheet:
        if self._worksheet is None:
            raise WorksheetError(
                "No worksheet was defined", ErrorCode.WORKSHEET_NOT_FOUND
            )
        return self._worksheet

    def value(self, value: Any, style: Style | None = None) -> Cell:
        return self._require_worksheet().add_next_cell(value, style)

    def formula(self, formula: str, style: Style | None = None) -> Cell:
        return self._require_worksheet().add_next_cell_formula(formula, style)

    def down(self, number_of_rows: int = 1, keep_column: bool = False) -> None:
        self._require_worksheet().go_to_next_row(number_of_rows, keep_column)

    def up(self, number_of_rows: int = 1, keep_column: bool = False) -> None:
        self._require_worksheet().go_to_next_row(-number_of_rows, keep_column)

    def right(self, number_of_columns: int = 1, keep_row: bool = False) -> None:
        self._require_worksheet().go_to_next_column(number_of_columns, keep_row)

    def left(self, number_of_columns: int = 1, keep_row: bool = False) -> None:
        self._require_worksheet().go_to_next_column(-number_of_columns, keep_row)
