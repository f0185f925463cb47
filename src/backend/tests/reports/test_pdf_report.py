import fitz

from common.cbd_validation.models import VerdictStatus
from reports.pdf import render_report_pdf
from reports.rows import COLOR_RGB, report_rows


def _spans(doc):
    for page in doc:
        for block in page.get_text("dict")["blocks"]:
            for line in block.get("lines", []):
                for span in line["spans"]:
                    yield span


def _rgb(color: int) -> tuple[int, int, int]:
    return (color >> 16) & 255, (color >> 8) & 255, color & 255


def test_pdf_has_title_timestamp_and_page_per_file(sample_report):
    data = render_report_pdf(sample_report)
    assert data.startswith(b"%PDF")
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert doc.page_count == 2
        first = doc[0].get_text()
        assert "FOX Validation Results" in first
        assert "Generated: 2025-06-30 14:05:00 UTC" in first
        assert "File: FW25_<Jacket>.xlsx" in first
        assert "1 out of 4 checks passed" in first
        assert "Page 1 of 2" in first
        second = doc[1].get_text()
        assert "File: broken.xlsx" in second
        assert "Error: Workbook could not be parsed" in second


def test_pdf_value_colours_follow_verdict_status(sample_report):
    rows = report_rows(sample_report.files[0])
    expected = {row.value_text: row.color for row in rows}
    data = render_report_pdf(sample_report)
    with fitz.open(stream=data, filetype="pdf") as doc:
        seen = {}
        for span in _spans(doc):
            if span["text"] in expected:
                seen[span["text"]] = _rgb(span["color"])

    assert set(seen) == set(expected)
    for text, color in expected.items():
        want = tuple(round(c * 255) for c in COLOR_RGB[color])
        got = seen[text]
        assert all(abs(a - b) <= 2 for a, b in zip(got, want)), (text, got, want)
    assert {row.status for row in rows} == {
        VerdictStatus.VALID,
        VerdictStatus.INVALID,
        VerdictStatus.WARNING,
        VerdictStatus.NOT_FOUND,
    }


def test_pdf_for_failed_run(sample_report):
    failed = sample_report.model_copy(update={"files": [], "error": "Failed to load Columbia_CostBreakdown.csv"})
    with fitz.open(stream=render_report_pdf(failed), filetype="pdf") as doc:
        assert doc.page_count == 1
        assert "Error: Failed to load Columbia_CostBreakdown.csv" in doc[0].get_text()
