from __future__ import annotations

import pytest

from spreadsheet_document_engine import Workbook, Worksheet
from spreadsheet_document_engine.utils.logging import clear_context


@pytest.fixture(autouse=True)
def _reset_log_context() -> None:
    clear_context()


@pytest.fixture
def workbook() -> Workbook:
    """Workbook with a single worksheet named Sheet1."""
    return Workbook("Sheet1")


@pytest.fixture
def worksheet(workbook: Workbook) -> Worksheet:
    return workbook.get_worksheet("Sheet1")


@pytest.fixture
def standalone_worksheet() -> Worksheet:
    """Worksheet not attached to any workbook."""
    return Worksheet("Standalone")
