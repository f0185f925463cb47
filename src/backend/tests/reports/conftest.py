from datetime import datetime, timezone
from decimal import Decimal

import pytest

from common.cbd_validation.models import FileResult, ValidationRunReport, Verdict, VerdictStatus


@pytest.fixture
def make_verdict():
    def _make(label: str, status: VerdictStatus, *, display: str = "0.40", expected: str = "0.40", row=9, note: str = ""):
        found = status != VerdictStatus.NOT_FOUND
        return Verdict(
            rule_id=f"T-{label.upper()}",
            label=label,
            found=found,
            status=status,
            row=row if found else None,
            anchor_col=0 if found else None,
            value_col=11 if found else None,
            actual_raw=display,
            actual_number=Decimal("0.4") if found else None,
            actual_display=display,
            expected_display=expected,
            note=note,
        )

    return _make


@pytest.fixture
def sample_report(make_verdict):
    files = [
        FileResult(
            file_name="FW25_<Jacket>.xlsx",
            sheet_name="Sheet1",
            verdicts=[
                make_verdict("OVERHEAD", VerdictStatus.VALID),
                make_verdict("PROFIT & OTHERS", VerdictStatus.INVALID, display="0.41", expected="0.35 - 0.45"),
                make_verdict("Wastage", VerdictStatus.WARNING, display="5.2%", expected="5%", row=14),
                make_verdict("Profit", VerdictStatus.NOT_FOUND, display="Not Found"),
            ],
        ),
        FileResult(file_name="broken.xlsx", error="Workbook could not be parsed: File is not a zip file"),
    ]
    return ValidationRunReport(
        run_id="run-1",
        brand_id="fox",
        brand_name="FOX",
        generated_at=datetime(2025, 6, 30, 14, 5, tzinfo=timezone.utc),
        files=files,
        totals={VerdictStatus.VALID: 1, VerdictStatus.INVALID: 1, VerdictStatus.WARNING: 1, VerdictStatus.NOT_FOUND: 1},
    )
