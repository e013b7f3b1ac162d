"""Tests for the workbook snapshot used by encoders."""

from datetime import datetime, timedelta

import pytest

from spreadsheet_document_engine import BasicStyles, CellType, Workbook, Worksheet
from spreadsheet_document_engine.models import SheetProtectionValue
from spreadsheet_document_engine.services import WorkbookExporter
from spreadsheet_document_engine.services.workbook_exporter import export_workbook
from spreadsheet_document_engine.styles import Style
from spreadsheet_document_engine.utils.exceptions import FormatError, WorksheetError


class TestExportCells:
    """Tests for exported cell records."""

    def test_values_and_style_indices(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Cells reference the canonical style table by index."""
        worksheet.add_cell("x", "A1", style=BasicStyles.bold())
        worksheet.add_cell(5, "B1")
        exported = WorkbookExporter().export(workbook)

        assert exported.styles[0] == Style()
        cells = {cell.address: cell for cell in exported.worksheets[0].cells}
        bold_index = cells["A1"].style_index
        assert exported.styles[bold_index] == BasicStyles.bold()
        assert cells["B1"].style_index == 0
        assert (cells["B1"].column, cells["B1"].row) == (1, 0)

    def test_unique_styles(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Each canonical style appears once."""
        worksheet.add_cell("a", "A1", style=BasicStyles.italic())
        worksheet.add_cell("b", "A2", style=BasicStyles.italic())
        exported = export_workbook(workbook)
        assert len(exported.styles) == len(set(exported.styles))
        indices = {cell.style_index for cell in exported.worksheets[0].cells}
        assert len(indices) == 1

    def test_dates_and_times_as_numbers(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Dates and times are exported as OA-date numbers."""
        worksheet.add_cell(datetime(2024, 1, 15), "A1")
        worksheet.add_cell(timedelta(hours=6), "B1")
        cells = {c.address: c for c in export_workbook(workbook).worksheets[0].cells}
        assert cells["A1"].value == 45306.0
        assert cells["A1"].data_type == CellType.DATE
        assert cells["B1"].value == 0.25

    def test_date_out_of_range(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Dates before 1900 cannot be exported."""
        worksheet.add_cell(datetime(1850, 1, 1), "A1")
        with pytest.raises(FormatError):
            export_workbook(workbook)

    def test_cells_sorted(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Cells are ordered by row, then column."""
        worksheet.add_cell(1, "B2")
        worksheet.add_cell(2, "C1")
        worksheet.add_cell(3, "A2")
        addresses = [c.address for c in export_workbook(workbook).worksheets[0].cells]
        assert addresses == ["C1", "A2", "B2"]


class TestExportPreparation:
    """Tests for the preparation steps."""

    def test_merges_resolved(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Hidden merged cells are emptied in the workbook itself."""
        worksheet.add_cell("keep", "A1")
        worksheet.add_cell("drop", "B1")
        worksheet.merge_cells("A1:B1")
        exported = export_workbook(workbook)
        assert worksheet.get_cell("B1").data_type == CellType.EMPTY
        assert exported.worksheets[0].merged_cells == ["A1:B1"]

    def test_auto_filter_recalculated(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """The filter range reaches the last used row."""
        worksheet.set_auto_filter(0, 1)
        worksheet.add_cell(1, "A5")
        exported = export_workbook(workbook).worksheets[0]
        assert exported.auto_filter == "A1:B5"
        assert [c.number for c in exported.columns if c.auto_filter] == [0, 1]

    def test_invalid_workbook(self) -> None:
        """A workbook without worksheets cannot be exported."""
        with pytest.raises(WorksheetError):
            WorkbookExporter().export(Workbook())


class TestExportSheetState:
    """Tests for sheet-level records."""

    def test_dimensions_and_protection(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Columns, rows and protection are carried over."""
        worksheet.set_column_width("A", 20)
        worksheet.set_column_hidden_state("C", True)
        worksheet.set_row_height(2, 30)
        worksheet.set_row_hidden_state(3, True)
        worksheet.add_allowed_action(SheetProtectionValue.SORT)
        worksheet.set_sheet_protection_password("test")
        exported = export_workbook(workbook).worksheets[0]
        columns = {c.number: c for c in exported.columns}
        assert columns[0].width == 20
        assert columns[2].hidden
        assert exported.row_heights == {2: 30}
        assert exported.hidden_rows == [3]
        assert exported.use_protection
        assert exported.protection_values == [SheetProtectionValue.SORT]
        assert exported.protection_password_hash == "CBEB"

    def test_pane(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Count splits are exported by address."""
        worksheet.set_vertical_split_columns(2, freeze=True)
        pane = export_workbook(workbook).worksheets[0].pane
        assert pane is not None
        assert pane.split_address == "C1"
        assert pane.freeze
        assert pane.top_left_cell == "C1"

    def test_no_pane(self, workbook: Workbook) -> None:
        """Unsplit worksheets export no pane."""
        assert export_workbook(workbook).worksheets[0].pane is None

    def test_workbook_fields(self, workbook: Workbook) -> None:
        """Selection, metadata and protection are exported."""
        workbook.add_worksheet("Second")
        workbook.set_selected_worksheet(1)
        workbook.metadata.title = "Quarterly"
        workbook.set_workbook_protection(True, False, True, "test")
        workbook.add_mru_color("00FF00")
        exported = export_workbook(workbook)
        assert [sheet.name for sheet in exported.worksheets] == ["Sheet1", "Second"]
        assert exported.selected_worksheet == 1
        assert exported.metadata.title == "Quarterly"
        assert exported.lock_structure and not exported.lock_windows
        assert exported.protection_password_hash == "CBEB"
        assert exported.mru_colors == ["FF00FF00"]
