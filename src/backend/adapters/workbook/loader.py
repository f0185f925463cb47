from __future__ import annotations

import logging
import zipfile
from datetime import date, datetime, time
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Any, Dict

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from common.cbd_validation.grid import CellValue, Grid

logger = logging.getLogger(__name__)


class WorkbookReadError(ValueError):
    pass


class WorkbookParseError(ValueError):
    pass


def read_workbook_file(path: str | Path) -> bytes:
    """Read a workbook from disk; missing or unreadable files raise WorkbookReadError."""
    file_path = Path(path)
    if not file_path.is_file():
        raise WorkbookReadError(f"Workbook not found: {file_path}")
    try:
        return file_path.read_bytes()
    except OSError as exc:
        raise WorkbookReadError(f"Failed to read file {file_path.name}: {exc}") from exc


def parse_workbook(data: bytes) -> Dict[str, Grid]:
    """
    Convert workbook bytes into one Grid per sheet, in workbook order.

    Cached formula results are read (not the formulas). Trailing empty cells are
    kept as openpyxl reports them; the Grid treats missing and empty alike.
    """
    if not data:
        raise WorkbookReadError("Failed to read file: no data")
    try:
        workbook = load_workbook(BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise WorkbookParseError(f"Workbook could not be parsed: {exc}") from exc

    try:
        sheets: Dict[str, Grid] = {}
        for sheet in workbook.worksheets:
            rows = [[_cell_value(value) for value in row] for row in sheet.iter_rows(values_only=True)]
            sheets[sheet.title] = Grid.from_rows(rows, name=sheet.title)
            logger.debug("Loaded sheet %r with %d rows", sheet.title, len(rows))
    finally:
        workbook.close()

    if not sheets:
        raise WorkbookParseError("Workbook contains no sheets")
    return sheets


def _cell_value(value: Any) -> CellValue:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
