"""Tests for the Workbook model."""

from unittest.mock import patch

import pytest

from spreadsheet_document_engine import (
    BasicStyles,
    CellType,
    Workbook,
    Worksheet,
)
from spreadsheet_document_engine.styles import Font
from spreadsheet_document_engine.units import password_hash
from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    FormatError,
    RangeError,
    StyleError,
    WorksheetError,
)


class TestWorksheetLifecycle:
    """Tests for adding and removing worksheets."""

    def test_empty_workbook(self) -> None:
        """A workbook may start without worksheets."""
        workbook = Workbook()
        assert workbook.worksheets == []
        assert workbook.current_worksheet is None

    def test_add_worksheet_becomes_current(self, workbook: Workbook) -> None:
        """The added worksheet is current and numbered."""
        second = workbook.add_worksheet("Second")
        assert workbook.current_worksheet is second
        assert second.sheet_id == 2
        assert second.workbook is workbook

    def test_duplicate_name(self, workbook: Workbook) -> None:
        """Duplicate names fail unless sanitized."""
        with pytest.raises(WorksheetError) as exc_info:
            workbook.add_worksheet("Sheet1", sanitize=False)
        assert exc_info.value.error_code == ErrorCode.DUPLICATE_WORKSHEET
        assert workbook.add_worksheet("Sheet1", sanitize=True).sheet_name == "Sheet2"

    def test_invalid_name(self, workbook: Workbook) -> None:
        """Invalid names fail unless sanitized."""
        with pytest.raises(FormatError):
            workbook.add_worksheet("a*b", sanitize=False)
        assert workbook.add_worksheet("a*b", sanitize=True).sheet_name == "a_b"

    def test_sanitize_default_from_settings(self, workbook: Workbook) -> None:
        """The sanitize default comes from the settings."""
        with patch(
            "spreadsheet_document_engine.workbook.settings.default_sanitize_sheet_names",
            True,
        ):
            assert workbook.add_worksheet("Sheet1").sheet_name == "Sheet2"

    def test_add_attached_worksheet(self, workbook: Workbook) -> None:
        """A worksheet cannot belong to two workbooks."""
        sheet = workbook.get_worksheet(0)
        with pytest.raises(WorksheetError):
            Workbook().add_worksheet(sheet)

    def test_get_worksheet(self, workbook: Workbook) -> None:
        """Lookups by name and index; misses raise."""
        assert workbook.get_worksheet("Sheet1") is workbook.get_worksheet(0)
        with pytest.raises(WorksheetError):
            workbook.get_worksheet("Nope")
        with pytest.raises(RangeError):
            workbook.get_worksheet(3)

    def test_remove_worksheet_renumbers(self, workbook: Workbook) -> None:
        """Remaining worksheets are renumbered from 1."""
        workbook.add_worksheet("B")
        workbook.add_worksheet("C")
        workbook.remove_worksheet("Sheet1")
        assert [ws.sheet_id for ws in workbook.worksheets] == [1, 2]
        assert [ws.sheet_name for ws in workbook.worksheets] == ["B", "C"]

    def test_remove_current_moves_to_last(self, workbook: Workbook) -> None:
        """Removing the current worksheet makes the last one current."""
        workbook.add_worksheet("B")
        workbook.add_worksheet("C")
        workbook.set_current_worksheet("B")
        workbook.remove_worksheet("B")
        assert workbook.current_worksheet.sheet_name == "C"

    def test_remove_selected_moves_selection(self, workbook: Workbook) -> None:
        """Removing the selected worksheet selects the last one."""
        workbook.add_worksheet("B")
        workbook.add_worksheet("C")
        workbook.set_selected_worksheet(1)
        workbook.remove_worksheet(1)
        assert workbook.selected_worksheet == 1

    def test_remove_last_worksheet(self, workbook: Workbook) -> None:
        """A workbook cannot lose its last worksheet."""
        with pytest.raises(WorksheetError):
            workbook.remove_worksheet(0)
        assert len(workbook.worksheets) == 1

    def test_removed_worksheet_is_detached(self, workbook: Workbook) -> None:
        """A removed worksheet keeps its styles in its own repository."""
        sheet = workbook.add_worksheet("B")
        sheet.add_cell("x", "A1", style=BasicStyles.bold())
        workbook.remove_worksheet("B")
        assert sheet.workbook is None
        assert sheet.get_cell("A1").style in sheet.style_repository


class TestSelection:
    """Tests for current and selected worksheets."""

    def test_cannot_select_hidden(self, workbook: Workbook) -> None:
        """A hidden worksheet cannot be selected."""
        hidden = workbook.add_worksheet("Hidden")
        hidden.hidden = True
        with pytest.raises(WorksheetError):
            workbook.set_selected_worksheet("Hidden")

    def test_cannot_hide_selected(self, workbook: Workbook) -> None:
        """The selected worksheet cannot be hidden."""
        workbook.add_worksheet("Other")
        with pytest.raises(WorksheetError):
            workbook.get_worksheet(0).hidden = True

    def test_current_follows_shortener(self, workbook: Workbook) -> None:
        """The shortener writes into the current worksheet."""
        other = workbook.add_worksheet("Other")
        workbook.ws.value("x")
        assert other.get_cell("A1").value == "x"
        workbook.set_current_worksheet(0)
        workbook.ws.value("y")
        assert workbook.get_worksheet(0).get_cell("A1").value == "y"


class TestBulkLoad:
    """Tests for suspending validation."""

    def test_bulk_load_defers_validation(self) -> None:
        """Invalid intermediate states are allowed inside bulk_load."""
        workbook = Workbook()
        with workbook.bulk_load():
            sheet = workbook.add_worksheet("Only")
            sheet.hidden = True
            sheet.hidden = False
        assert not workbook.import_in_progress

    def test_bulk_load_validates_on_exit(self) -> None:
        """Leaving bulk_load with a broken state raises."""
        workbook = Workbook()
        with pytest.raises(WorksheetError):
            with workbook.bulk_load():
                workbook.add_worksheet("Only").hidden = True

    def test_bulk_load_resets_on_error(self) -> None:
        """Errors inside bulk_load re-enable validation."""
        workbook = Workbook("A")
        with pytest.raises(KeyError):
            with workbook.bulk_load():
                raise KeyError("boom")
        assert not workbook.import_in_progress

    def test_validate_empty(self) -> None:
        """A workbook without worksheets is invalid."""
        with pytest.raises(WorksheetError):
            Workbook().validate_worksheets()


class TestCopyWorksheet:
    """Tests for copying worksheets."""

    def test_copy_into_this(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Copies are sanitized and keep the current worksheet."""
        worksheet.add_cell("x", "A1", style=BasicStyles.bold())
        duplicate = workbook.copy_worksheet_into_this("Sheet1", "Sheet1")
        assert duplicate.sheet_name == "Sheet2"
        assert workbook.current_worksheet is worksheet
        assert duplicate.get_cell("A1").style is worksheet.get_cell("A1").style

    def test_copy_to_other_workbook(self, workbook: Workbook, worksheet: Worksheet) -> None:
        """Styles are re-interned in the target workbook."""
        worksheet.add_cell("x", "A1", style=BasicStyles.italic())
        target = Workbook("Main")
        duplicate = workbook.copy_worksheet_to(0, "Copy", target)
        assert duplicate.workbook is target
        assert duplicate.get_cell("A1").style in target.style_repository
        assert target.current_worksheet.sheet_name == "Main"


class TestStylesAndProtection:
    """Tests for workbook-level styles and protection."""

    def test_add_style_interns(self, workbook: Workbook) -> None:
        """Equal styles share one instance."""
        first = workbook.add_style(BasicStyles.bold())
        assert workbook.add_style(BasicStyles.bold()) is first

    def test_add_style_component(self, workbook: Workbook) -> None:
        """A facet replaces the matching facet of the base."""
        style = workbook.add_style_component(BasicStyles.border_frame(), Font(italic=True))
        assert style.font.italic
        assert style.border == BasicStyles.border_frame().border

    def test_workbook_protection(self, workbook: Workbook) -> None:
        """Protection needs a locked aspect; the password is hashed."""
        workbook.set_workbook_protection(True, False, False, "pw")
        assert not workbook.use_workbook_protection
        workbook.set_workbook_protection(True, True, False, "pw")
        assert workbook.use_workbook_protection
        assert workbook.workbook_protection_password_hash == password_hash("pw")

    def test_protection_hash_only(self, workbook: Workbook) -> None:
        """A restored hash clears the plain password."""
        workbook.set_workbook_protection(True, False, True, "pw")
        workbook.set_workbook_protection_password_hash("ABCD")
        assert workbook.workbook_protection_password is None
        assert workbook.workbook_protection_password_hash == "ABCD"

    def test_mru_colors(self, workbook: Workbook) -> None:
        """RGB colors get an alpha channel; invalid colors are rejected."""
        workbook.add_mru_color("ff0000")
        assert workbook.mru_colors == ["FFFF0000"]
        with pytest.raises(StyleError):
            workbook.add_mru_color("xyz")
        workbook.clear_mru_colors()
        assert workbook.mru_colors == []


class TestScenario:
    """End-to-end use of the model."""

    def test_write_merge_and_duplicate(self) -> None:
        """Sequential writes, a resolved merge and a duplicate name."""
        workbook = Workbook("Sheet1")
        workbook.ws.value("Name")
        workbook.ws.value("Age")
        sheet = workbook.current_worksheet
        assert (sheet.current_column_number, sheet.current_row_number) == (2, 0)

        sheet.add_cell("merged", "A2")
        sheet.add_cell("hidden", "B2")
        sheet.merge_cells("A2:B2")
        workbook.resolve_merged_cells()
        cell = sheet.get_cell("B2")
        assert cell.data_type == CellType.EMPTY
        assert cell.value is None
        assert cell.style.cell_xf.force_apply_alignment

        assert workbook.add_worksheet("Sheet1", sanitize=True).sheet_name == "Sheet2"
        with pytest.raises(WorksheetError):
            workbook.add_worksheet("Sheet1", sanitize=False)
