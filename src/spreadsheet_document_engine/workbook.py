"""Workbook model: ordered worksheets, style repository and document state."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from spreadsheet_document_engine.config import settings
from spreadsheet_document_engine.metadata import Metadata
from spreadsheet_document_engine.shortener import Shortener
from spreadsheet_document_engine.styles import Style, StyleRepository, validate_color
from spreadsheet_document_engine.styles.facets import _Facet
from spreadsheet_document_engine.units import password_hash
from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    RangeError,
    WorksheetError,
)
from spreadsheet_document_engine.utils.logging import get_logger
from spreadsheet_document_engine.worksheet import Worksheet

logger = get_logger(__name__)


def _check_worksheets(worksheets: list[Worksheet], selected: int) -> None:
    """Raise WorksheetError if a worksheet list breaks the workbook invariants."""
    if not worksheets:
        raise WorksheetError(
            "The workbook must contain at least one worksheet",
            ErrorCode.INVALID_WORKSHEET_STATE,
        )
    if 0 <= selected < len(worksheets) and worksheets[selected].hidden:
        raise WorksheetError(
            f"The worksheet with the index {selected} cannot be set as selected, "
            "since it is set hidden",
            ErrorCode.INVALID_WORKSHEET_STATE,
            worksheet=worksheets[selected].sheet_name,
        )
    if all(worksheet.hidden for worksheet in worksheets):
        raise WorksheetError(
            "The workbook must contain at least one visible worksheet",
            ErrorCode.INVALID_WORKSHEET_STATE,
        )


class Workbook:
    """In-memory workbook.

    The workbook owns its worksheets and the style repository they share.
    The *current* worksheet is the design-time focus used by sequential
    writes; the *selected* worksheet is the tab shown when the file opens.

    Attributes:
        filename: Optional path used by file adapters.
        metadata: Document properties.
        hidden: Whether the workbook window is hidden.
        ws: Sequential-write facade bound to the current worksheet.
    """

    def __init__(
        self,
        sheet_name: str | None = None,
        sanitize: bool = False,
        filename: str | None = None,
    ) -> None:
        self.filename = filename
        self.metadata = Metadata()
        self.hidden = False
        self.ws = Shortener(self)

        self._style_repository = StyleRepository()
        self._worksheets: list[Worksheet] = []
        self._current_worksheet: Worksheet | None = None
        self._selected_worksheet = 0
        self._import_in_progress = False
        self._mru_colors: list[str] = []

        self._use_workbook_protection = False
        self._lock_windows_if_protected = False
        self._lock_structure_if_protected = False
        self._workbook_protection_password: str | None = None
        self._workbook_protection_password_hash: str | None = None

        if sheet_name is not None:
            self.add_worksheet(sheet_name, sanitize=sanitize)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def style_repository(self) -> StyleRepository:
        return self._style_repository

    @property
    def worksheets(self) -> list[Worksheet]:
        return list(self._worksheets)

    @property
    def current_worksheet(self) -> Worksheet | None:
        return self._current_worksheet

    @property
    def selected_worksheet(self) -> int:
        """Index of the worksheet selected when the file is opened."""
        return self._selected_worksheet

    @property
    def import_in_progress(self) -> bool:
        return self._import_in_progress

    @property
    def mru_colors(self) -> list[str]:
        return list(self._mru_colors)

    @property
    def use_workbook_protection(self) -> bool:
        return self._use_workbook_protection

    @property
    def lock_windows_if_protected(self) -> bool:
        return self._lock_windows_if_protected

    @property
    def lock_structure_if_protected(self) -> bool:
        return self._lock_structure_if_protected

    @property
    def workbook_protection_password(self) -> str | None:
        return self._workbook_protection_password

    @property
    def workbook_protection_password_hash(self) -> str | None:
        return self._workbook_protection_password_hash

    # ------------------------------------------------------------------ #
    # Worksheet lookup
    # ------------------------------------------------------------------ #

    def _index_of(self, worksheet: str | int | Worksheet) -> int:
        if isinstance(worksheet, Worksheet):
            for index, candidate in enumerate(self._worksheets):
                if candidate is worksheet:
                    return index
            raise WorksheetError(
                "The passed worksheet object is not in the worksheet collection",
                ErrorCode.WORKSHEET_NOT_FOUND,
                worksheet=worksheet.sheet_name,
            )
        if isinstance(worksheet, int):
            if not 0 <= worksheet < len(self._worksheets):
                raise RangeError(
                    f"The worksheet index {worksheet} is out of range",
                    value=worksheet,
                    minimum=0,
                    maximum=len(self._worksheets) - 1,
                )
            return worksheet
        for index, candidate in enumerate(self._worksheets):
            if candidate.sheet_name == worksheet:
                return index
        raise WorksheetError(
            f"No worksheet with the name '{worksheet}' was found in this workbook",
            ErrorCode.WORKSHEET_NOT_FOUND,
            worksheet=worksheet,
        )

    def get_worksheet(self, worksheet: str | int) -> Worksheet:
        """Return a worksheet by name or index.

        Raises:
            WorksheetError: If no worksheet has the name.
            RangeError: If the index is out of range.
        """
        return self._worksheets[self._index_of(worksheet)]

    def has_worksheet(self, name: str) -> bool:
        return any(worksheet.sheet_name == name for worksheet in self._worksheets)

    # ------------------------------------------------------------------ #
    # Worksheet lifecycle
    # ------------------------------------------------------------------ #

    def _next_worksheet_id(self) -> int:
        return max((worksheet.sheet_id for worksheet in self._worksheets), default=0) + 1

    def add_worksheet(
        self, worksheet: str | Worksheet, sanitize: bool | None = None
    ) -> Worksheet:
        """Append a worksheet and make it the current one.

        Args:
            worksheet: Name of a new worksheet, or a standalone Worksheet.
            sanitize: Fix invalid or colliding names instead of failing.
                Defaults to ``settings.default_sanitize_sheet_names``.

        Returns:
            The added worksheet.

        Raises:
            WorksheetError: If the name is already used (without sanitizing),
                or the worksheet already belongs to a workbook.
            FormatError: If the name is invalid (without sanitizing).
        """
        if sanitize is None:
            sanitize = settings.default_sanitize_sheet_names
        if isinstance(worksheet, Worksheet):
            if worksheet.workbook is not None:
                raise WorksheetError(
                    "The worksheet already belongs to a workbook",
                    ErrorCode.INVALID_WORKSHEET_STATE,
                    worksheet=worksheet.sheet_name,
                )
            name = worksheet.sheet_name
            target = worksheet
        else:
            name = worksheet
            target = None

        if sanitize:
            name = Worksheet.sanitize_worksheet_name(name, self)
        else:
            Worksheet.validate_worksheet_name(name)
            if self.has_worksheet(name):
                raise WorksheetError(
                    f"The worksheet with the name '{name}' already exists",
                    ErrorCode.DUPLICATE_WORKSHEET,
                    worksheet=name,
                )

        if target is None:
            target = Worksheet(name)
        elif target.sheet_name != name:
            target.set_sheet_name(name)
        if not self._import_in_progress:
            _check_worksheets([*self._worksheets, target], self._selected_worksheet)
        target.sheet_id = self._next_worksheet_id()
        self._worksheets.append(target)
        target._attach(self)
        self._set_current(target)
        logger.debug("Added worksheet", worksheet=name, sheet_id=target.sheet_id)
        return target

    def remove_worksheet(self, worksheet: str | int) -> None:
        """Remove a worksheet by name or index.

        Remaining worksheets are renumbered 1..n. If the removed worksheet
        was current, the last worksheet becomes current. The selection
        moves to the last worksheet if it pointed at or beyond the removed
        position.

        Raises:
            WorksheetError: If the worksheet does not exist, or removing it
                would leave the workbook without a valid worksheet.
            RangeError: If the index is out of range.
        """
        index = self._index_of(worksheet)
        removed = self._worksheets[index]
        remaining = self._worksheets[:index] + self._worksheets[index + 1 :]
        selected = self._selected_worksheet
        if remaining and (selected == index or selected > len(remaining) - 1):
            selected = len(remaining) - 1
        elif not remaining:
            selected = 0
        if not self._import_in_progress:
            _check_worksheets(remaining, selected)

        self._worksheets = remaining
        for position, sheet in enumerate(self._worksheets, start=1):
            sheet.sheet_id = position
        self._selected_worksheet = selected
        removed._detach()
        if removed is self._current_worksheet:
            self._set_current(self._worksheets[-1] if self._worksheets else None)
        logger.debug("Removed worksheet", worksheet=removed.sheet_name)

    def _set_current(self, worksheet: Worksheet | None) -> None:
        self._current_worksheet = worksheet
        self.ws._bind(worksheet)

    def set_current_worksheet(self, worksheet: str | int | Worksheet) -> Worksheet:
        """Change the design-time focus; the shortener follows it."""
        target = self._worksheets[self._index_of(worksheet)]
        self._set_current(target)
        return target

    def set_selected_worksheet(self, worksheet: str | int | Worksheet) -> None:
        """Select the worksheet shown when the file is opened.

        Raises:
            WorksheetError: If the worksheet is hidden.
        """
        index = self._index_of(worksheet)
        if not self._import_in_progress:
            _check_worksheets(self._worksheets, index)
        self._selected_worksheet = index

    def copy_worksheet_into_this(
        self,
        source: str | int | Worksheet,
        new_name: str,
        sanitize: bool = True,
    ) -> Worksheet:
        """Copy a worksheet of this workbook into this workbook."""
        return self.copy_worksheet_to(source, new_name, self, sanitize)

    def copy_worksheet_to(
        self,
        source: str | int | Worksheet,
        new_name: str,
        target: Workbook | None = None,
        sanitize: bool = True,
    ) -> Worksheet:
        """Copy a worksheet into ``target`` (this workbook by default).

        The target's current worksheet is left unchanged.

        Returns:
            The attached copy.
        """
        if target is None:
            target = self
        if isinstance(source, Worksheet):
            original = source
        else:
            original = self.get_worksheet(source)
        duplicate = original.copy()
        if sanitize:
            new_name = Worksheet.sanitize_worksheet_name(new_name, target)
        duplicate.set_sheet_name(new_name)
        previous = target.current_worksheet
        target.add_worksheet(duplicate, sanitize=False)
        if previous is not None:
            target.set_current_worksheet(previous)
        return duplicate

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate_worksheets(self) -> None:
        """Check the worksheet invariants unless an import is in progress.

        Raises:
            WorksheetError: If there is no worksheet, the selected worksheet
                is hidden, or no worksheet is visible.
        """
        if self._import_in_progress:
            return
        _check_worksheets(self._worksheets, self._selected_worksheet)

    def set_import_state(self, in_progress: bool) -> None:
        """Suspend or resume validation; resuming validates immediately."""
        self._import_in_progress = in_progress
        if not in_progress:
            self.validate_worksheets()

    @contextmanager
    def bulk_load(self) -> Generator[Workbook, None, None]:
        """Suspend worksheet validation while a workbook is being filled.

        Validation is re-enabled and run when the block exits normally.
        """
        self._import_in_progress = True
        try:
            yield self
        except BaseException:
            self._import_in_progress = False
            raise
        self.set_import_state(False)

    # ------------------------------------------------------------------ #
    # Styles
    # ------------------------------------------------------------------ #

    def add_style(self, style: Style) -> Style:
        """Register a style and return its canonical instance."""
        return self._style_repository.intern(style)

    def add_style_component(self, base: Style, component: _Facet) -> Style:
        """Replace one facet of ``base`` and register the result."""
        return self._style_repository.intern(base.with_facet(component))

    def resolve_merged_cells(self) -> None:
        for worksheet in self._worksheets:
            worksheet.resolve_merged_cells()

    # ------------------------------------------------------------------ #
    # Protection and colors
    # ------------------------------------------------------------------ #

    def set_workbook_protection(
        self,
        state: bool,
        protect_windows: bool,
        protect_structure: bool,
        password: str | None = None,
    ) -> None:
        """Configure workbook protection.

        Protection is only enabled if windows or structure are locked.
        """
        self._lock_windows_if_protected = protect_windows
        self._lock_structure_if_protected = protect_structure
        self._workbook_protection_password = password or None
        self._workbook_protection_password_hash = password_hash(password) or None
        self._use_workbook_protection = state and (protect_windows or protect_structure)

    def set_workbook_protection_password_hash(self, hash_value: str | None) -> None:
        self._workbook_protection_password = None
        self._workbook_protection_password_hash = hash_value or None

    def add_mru_color(self, color: str) -> None:
        """Add a recently used color; six-digit RGB values get an ``FF`` alpha."""
        if color is not None and len(color) == 6:
            color = "FF" + color
        validate_color(color, use_alpha=True)
        self._mru_colors.append(color.upper())

    def clear_mru_colors(self) -> None:
        self._mru_colors.clear()

    def __repr__(self) -> str:
        names = [worksheet.sheet_name for worksheet in self._worksheets]
        return f"Workbook(filename={self.filename!r}, worksheets={names!r})"
