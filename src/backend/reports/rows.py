from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from common.cbd_validation.models import Color, FileResult, Verdict, VerdictStatus

COLOR_HEX = {
    Color.GREEN: "#065f46",
    Color.AMBER: "#92400e",
    Color.RED: "#991b1b",
}
COLOR_RGB = {
    Color.GREEN: (0.024, 0.373, 0.275),
    Color.AMBER: (0.573, 0.251, 0.055),
    Color.RED: (0.600, 0.106, 0.106),
}


@dataclass(frozen=True)
class ReportRow:
    """One rendered line of a file section. Both renderers build from these."""

    label: str
    cell: str
    value: str
    expected: str
    note: str
    status: VerdictStatus
    color: Color

    @property
    def show_expected(self) -> bool:
        return self.color != Color.GREEN and bool(self.expected)

    @property
    def value_text(self) -> str:
        if self.show_expected:
            return f"{self.value} (Expected: {self.expected})"
        return self.value


def row_for_verdict(verdict: Verdict) -> ReportRow:
    return ReportRow(
        label=verdict.label,
        cell=verdict.value_ref,
        value=verdict.actual_display or "-",
        expected=verdict.expected_display,
        note=verdict.note,
        status=verdict.status,
        color=verdict.color,
    )


def report_rows(file_result: FileResult) -> List[ReportRow]:
    return [row_for_verdict(verdict) for verdict in file_result.verdicts]


def pdf_file_name(brand_name: str, on: date) -> str:
    safe_brand = "".join(ch if ch.isalnum() else "_" for ch in brand_name.strip()).strip("_") or "Brand"
    return f"{safe_brand}_Validation_{on.isoformat()}.pdf"
