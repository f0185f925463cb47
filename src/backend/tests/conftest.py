import os
import sys
from io import BytesIO


# Ensure `src/backend` is on sys.path so imports like `import common...` work,
# even when pytest's rootdir is the repository root.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest
from openpyxl import Workbook

from common.cbd_validation.grid import Grid, parse_cell_ref


def _rows_from_cells(cells: dict) -> list[list[object]]:
    rows: list[list[object]] = []
    for ref, value in cells.items():
        row, col = parse_cell_ref(ref)
        while len(rows) <= row:
            rows.append([])
        while len(rows[row]) <= col:
            rows[row].append("")
        rows[row][col] = value
    return rows


@pytest.fixture
def make_grid():
    """Build a Grid from {"A10": "OVERHEAD", "L10": 0.4} or from explicit rows."""

    def _make(cells: dict | None = None, *, rows=None, name: str = "Sheet1") -> Grid:
        if rows is None:
            rows = _rows_from_cells(cells or {})
        return Grid.from_rows(rows, name=name)

    return _make


@pytest.fixture
def make_workbook_bytes():
    """Build .xlsx bytes; ``sheets`` maps sheet name -> {cell ref: value}, in order."""

    def _make(sheets: dict | None = None) -> bytes:
        sheets = sheets or {"Sheet1": {}}
        workbook = Workbook()
        workbook.remove(workbook.active)
        for title, cells in sheets.items():
            sheet = workbook.create_sheet(title=title)
            for ref, value in cells.items():
                sheet[ref] = value
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make
