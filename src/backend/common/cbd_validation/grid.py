from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from openpyxl.utils import column_index_from_string, get_column_letter

CellValue = Union[str, int, float]


def column_index(letter: str) -> int:
    """Convert a column letter ("A", "AA") to a 0-based index."""
    return column_index_from_string(letter.strip().upper()) - 1


def column_letter(index: int) -> str:
    return get_column_letter(index + 1)


def cell_ref(row: int, col: int) -> str:
    """Display reference for a 0-based (row, col), e.g. (9, 11) -> "L10"."""
    return f"{column_letter(col)}{row + 1}"


def parse_cell_ref(ref: str) -> tuple[int, int]:
    text = ref.strip().upper()
    letters = "".join(ch for ch in text if ch.isalpha())
    digits = text[len(letters):]
    if not letters or not digits.isdigit() or int(digits) < 1:
        raise ValueError(f"Invalid cell reference: {ref!r}")
    return int(digits) - 1, column_index(letters)


def normalize_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip().casefold()


def is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


@dataclass(frozen=True)
class Grid:
    """Row-major sheet contents. Rows may be jagged; missing cells read as ""."""

    rows: tuple[tuple[CellValue, ...], ...] = ()
    name: str = ""

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[object]], *, name: str = "") -> "Grid":
        return cls(
            rows=tuple(tuple("" if v is None else v for v in row) for row in rows),
            name=name,
        )

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def last_row_index(self) -> int:
        return len(self.rows) - 1

    def cell(self, row: int, col: int) -> CellValue:
        if row < 0 or col < 0 or row >= len(self.rows):
            return ""
        values = self.rows[row]
        if col >= len(values):
            return ""
        return values[col]

    def text(self, row: int, col: int) -> str:
        value = self.cell(row, col)
        return str(value).strip() if value != "" else ""
