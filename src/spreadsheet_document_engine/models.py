"""Enumerations shared across the workbook model."""

from enum import Enum


class CellType(str, Enum):
    """Type of a cell value."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    BOOL = "bool"
    FORMULA = "formula"
    EMPTY = "empty"
    DEFAULT = "default"


class AddressType(str, Enum):
    """Reference modifier of an address ($ prefixes)."""

    DEFAULT = "default"
    FIXED_ROW = "fixed_row"
    FIXED_COLUMN = "fixed_column"
    FIXED_ROW_AND_COLUMN = "fixed_row_and_column"


class AddressScope(str, Enum):
    """Classification of an address expression."""

    SINGLE_ADDRESS = "single_address"
    RANGE = "range"
    INVALID = "invalid"


class CellDirection(str, Enum):
    """Direction the write cursor advances after a sequential write."""

    COLUMN_TO_COLUMN = "column_to_column"
    ROW_TO_ROW = "row_to_row"
    DISABLED = "disabled"


class SheetProtectionValue(str, Enum):
    """Actions that remain allowed on a protected worksheet."""

    OBJECTS = "objects"
    SCENARIOS = "scenarios"
    FORMAT_CELLS = "formatCells"
    FORMAT_COLUMNS = "formatColumns"
    FORMAT_ROWS = "formatRows"
    INSERT_COLUMNS = "insertColumns"
    INSERT_ROWS = "insertRows"
    INSERT_HYPERLINKS = "insertHyperlinks"
    DELETE_COLUMNS = "deleteColumns"
    DELETE_ROWS = "deleteRows"
    SELECT_LOCKED_CELLS = "selectLockedCells"
    SORT = "sort"
    AUTO_FILTER = "autoFilter"
    PIVOT_TABLES = "pivotTables"
    SELECT_UNLOCKED_CELLS = "selectUnlockedCells"


class WorksheetPane(str, Enum):
    """Pane of a split worksheet."""

    BOTTOM_RIGHT = "bottomRight"
    TOP_RIGHT = "topRight"
    BOTTOM_LEFT = "bottomLeft"
    TOP_LEFT = "topLeft"


class SheetViewType(str, Enum):
    """View mode of a worksheet window."""

    NORMAL = "normal"
    PAGE_BREAK_PREVIEW = "pageBreakPreview"
    PAGE_LAYOUT = "pageLayout"
