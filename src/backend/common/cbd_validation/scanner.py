"""Anchor scanning and section bounds resolution over a Grid.

Both scans are single-pass and top-to-bottom. "Not found" is a normal outcome
(``None`` / last row), never an exception.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .grid import Grid, normalize_text
from .models import MatchMode


def matches_keyword(value: object, keywords: Iterable[str], match: MatchMode) -> bool:
    text = normalize_text(value)
    if not text:
        return False
    for keyword in keywords:
        needle = normalize_text(keyword)
        if match == MatchMode.EQUALS and text == needle:
            return True
        if match == MatchMode.CONTAINS and needle in text:
            return True
    return False


def find_anchor_row(
    grid: Grid,
    column: int,
    keyword: str | Iterable[str],
    match: MatchMode = MatchMode.CONTAINS,
    *,
    start_row: int = 0,
    end_row: Optional[int] = None,
) -> Optional[int]:
    """Return the first row index in ``[start_row, end_row)`` whose ``column`` matches."""
    keywords = [keyword] if isinstance(keyword, str) else list(keyword)
    stop = len(grid) if end_row is None else min(end_row, len(grid))
    for row in range(max(start_row, 0), stop):
        if matches_keyword(grid.cell(row, column), keywords, match):
            return row
    return None


def resolve_section_end(
    grid: Grid,
    start_row: int,
    column: int,
    keyword: str | Iterable[str],
    *,
    match: MatchMode = MatchMode.CONTAINS,
    max_rows: Optional[int] = None,
) -> int:
    """Return the row holding the stop keyword after ``start_row``.

    When the keyword never appears the section extends to the last row of the
    grid (or to ``start_row + max_rows`` when capped).
    """
    last = grid.last_row_index
    if max_rows is not None:
        last = min(last, start_row + max_rows)
    found = find_anchor_row(grid, column, keyword, match, start_row=start_row + 1, end_row=last + 1)
    return last if found is None else found
