from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .grid import cell_ref


class MatchMode(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"


class VerdictStatus(str, Enum):
    VALID = "VALID"
    WARNING = "WARNING"
    INVALID = "INVALID"
    EMPTY = "EMPTY"
    NOT_FOUND = "NOT_FOUND"


class Color(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


def color_for_status(status: VerdictStatus) -> Color:
    # Fixed mapping: the report colour is derived from the carried status, never from text.
    return {
        VerdictStatus.VALID: Color.GREEN,
        VerdictStatus.WARNING: Color.AMBER,
        VerdictStatus.INVALID: Color.RED,
        VerdictStatus.EMPTY: Color.RED,
        VerdictStatus.NOT_FOUND: Color.RED,
    }[status]


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    label: str
    found: bool
    status: VerdictStatus

    # 0-based; None when the anchor was not found.
    row: Optional[int] = None
    anchor_col: Optional[int] = None
    value_col: Optional[int] = None

    actual_raw: Union[str, int, float] = ""
    actual_number: Optional[Decimal] = None
    actual_display: str = ""
    expected_display: str = ""
    note: str = ""

    @property
    def is_valid(self) -> bool:
        return self.status == VerdictStatus.VALID

    @property
    def color(self) -> Color:
        return color_for_status(self.status)

    @property
    def row_number(self) -> Optional[int]:
        return None if self.row is None else self.row + 1

    @property
    def anchor_ref(self) -> str:
        if self.row is None or self.anchor_col is None:
            return "-"
        return cell_ref(self.row, self.anchor_col)

    @property
    def value_ref(self) -> str:
        if self.row is None or self.value_col is None:
            return "-"
        return cell_ref(self.row, self.value_col)


class FileResult(BaseModel):
    file_name: str
    sheet_name: Optional[str] = None
    verdicts: List[Verdict] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def passed_count(self) -> int:
        return sum(1 for v in self.verdicts if v.is_valid)

    @property
    def total_count(self) -> int:
        return len(self.verdicts)

    @property
    def summary(self) -> str:
        return f"{self.passed_count} out of {self.total_count} checks passed"


class ValidationRunReport(BaseModel):
    run_id: str
    brand_id: str
    brand_name: str
    generated_at: datetime

    files: List[FileResult] = Field(default_factory=list)
    # Fatal precondition failure for the whole run (e.g. missing reference data).
    error: Optional[str] = None
    totals: Dict[VerdictStatus, int] = Field(default_factory=dict)
