from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .grid import Grid
from .models import MatchMode
from .scanner import find_anchor_row


@dataclass(frozen=True)
class RuleContext:
    grid: Grid
    file_name: str = ""
    # Values read once from the grid before evaluation (e.g. vendor / country of origin).
    derived: Dict[str, str] = field(default_factory=dict)
    # Brand reference data (e.g. the OB cost breakdown), already loaded by the caller.
    reference: Optional[object] = None

    def get_derived(self, key: str, default: str = "") -> str:
        return self.derived.get(key, default)


def read_labelled_value(
    grid: Grid,
    *,
    label_column: int,
    label: str,
    value_column: int,
    match: MatchMode = MatchMode.CONTAINS,
) -> str:
    """Return the trimmed value next to the first ``label`` hit, or "" if absent."""
    row = find_anchor_row(grid, label_column, label, match)
    if row is None:
        return ""
    return grid.text(row, value_column)
