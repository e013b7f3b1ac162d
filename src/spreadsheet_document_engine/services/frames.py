"""pandas DataFrame import and export of worksheet values."""

from __future__ import annotations

import math
from typing import Any

import pandas as pd

from spreadsheet_document_engine.addressing import Address, decode_address
from spreadsheet_document_engine.models import CellType
from spreadsheet_document_engine.services.import_coercion import (
    ImportCoercionEngine,
    ImportOptions,
)
from spreadsheet_document_engine.utils.logging import get_logger
from spreadsheet_document_engine.worksheet import Worksheet

logger = get_logger(__name__)


def worksheet_to_dataframe(worksheet: Worksheet, header: bool = True) -> pd.DataFrame:
    """Export the used area of a worksheet as a DataFrame.

    Args:
        worksheet: Source worksheet.
        header: Use the first used row as column labels.

    Returns:
        DataFrame of cell values; missing cells are None.
    """
    first = worksheet.get_first_cell_address()
    last = worksheet.get_last_cell_address()
    if first is None or last is None:
        return pd.DataFrame()
    rows: list[list[Any]] = []
    for row in range(first.row, last.row + 1):
        values = []
        for column in range(first.column, last.column + 1):
            cell = worksheet.cells.get(str(Address(column, row)))
            values.append(None if cell is None else cell.value)
        rows.append(values)
    if header and rows:
        labels = [
            str(label) if label is not None else f"column_{index}"
            for index, label in enumerate(rows[0])
        ]
        return pd.DataFrame(rows[1:], columns=labels)
    return pd.DataFrame(rows)


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def _native(value: Any) -> Any:
    """Unwrap numpy and pandas scalars into plain Python values."""
    if _is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, pd.Timedelta):
        return value.to_pytimedelta()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value


def dataframe_to_worksheet(
    frame: pd.DataFrame,
    worksheet: Worksheet,
    options: ImportOptions | None = None,
    start_address: Address | str = "A1",
    include_header: bool = True,
) -> int:
    """Write a DataFrame into a worksheet.

    Values pass through the import coercion engine with their position
    relative to the start address, so column policies refer to the
    DataFrame columns. Missing values are skipped unless the options ask
    for empty strings.

    Args:
        frame: Source DataFrame.
        worksheet: Target worksheet.
        options: Coercion options.
        start_address: Top-left cell of the written block.
        include_header: Write the column labels as the first row.

    Returns:
        Number of cells written.
    """
    engine = ImportCoercionEngine(options)
    start = (
        decode_address(start_address) if isinstance(start_address, str) else start_address
    )
    rows: list[list[Any]] = []
    if include_header:
        rows.append([str(label) for label in frame.columns])
    rows.extend(list(record) for record in frame.itertuples(index=False, name=None))

    written = 0
    for row_offset, values in enumerate(rows):
        for column_offset, raw in enumerate(values):
            value, data_type = engine.coerce(
                _native(raw), CellType.DEFAULT, column_offset, row_offset
            )
            if data_type == CellType.EMPTY:
                continue
            address = Address(start.column + column_offset, start.row + row_offset)
            worksheet.add_cell(value, address)
            written += 1
    logger.debug("Wrote DataFrame", worksheet=worksheet.sheet_name, cells=written)
    return written
