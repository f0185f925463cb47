from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import fitz  # PyMuPDF

from common.cbd_validation.models import FileResult, ValidationRunReport

from .rows import COLOR_RGB, ReportRow, report_rows

# A4 landscape, points.
PAGE_WIDTH, PAGE_HEIGHT = 842, 595
MARGIN = 28
ROW_HEIGHT = 14
FONT = "helv"
FONT_BOLD = "hebo"

HEADER_FILL = (43 / 255, 74 / 255, 108 / 255)
ALT_FILL = (245 / 255, 245 / 255, 245 / 255)
BLACK = (0, 0, 0)
WHITE = (1, 1, 1)
GREY = (0.35, 0.35, 0.35)
ERROR_RED = (0.600, 0.106, 0.106)


def _columns(with_notes: bool) -> List[Tuple[str, float, float]]:
    right = PAGE_WIDTH - MARGIN
    if with_notes:
        return [("Check", MARGIN, 380), ("Cell", 380, 440), ("Value", 440, 680), ("Supplier", 680, right)]
    return [("Check", MARGIN, 440), ("Cell", 440, 500), ("Value", 500, right)]


def _fit(text: str, width: float, fontsize: float, fontname: str = FONT) -> str:
    limit = width - 6
    if fitz.get_text_length(text, fontname=fontname, fontsize=fontsize) <= limit:
        return text
    while text and fitz.get_text_length(text + "...", fontname=fontname, fontsize=fontsize) > limit:
        text = text[:-1]
    return text + "..."


class _Writer:
    def __init__(self, doc: fitz.Document) -> None:
        self.doc = doc
        self.page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        self.y = MARGIN + 12

    def new_page(self) -> None:
        self.page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        self.y = MARGIN + 12

    def ensure_space(self, height: float) -> bool:
        if self.y + height > PAGE_HEIGHT - MARGIN - 12:
            self.new_page()
            return True
        return False

    def text(self, x: float, text: str, *, size: float = 10, bold: bool = False, color=BLACK) -> None:
        self.page.insert_text(
            (x, self.y),
            text,
            fontsize=size,
            fontname=FONT_BOLD if bold else FONT,
            color=color,
        )

    def fill(self, x0: float, x1: float, color: Sequence[float]) -> None:
        rect = fitz.Rect(x0, self.y - ROW_HEIGHT + 4, x1, self.y + 4)
        self.page.draw_rect(rect, color=None, fill=color, width=0)


def _table_header(writer: _Writer, columns) -> None:
    writer.y += ROW_HEIGHT
    writer.fill(MARGIN, PAGE_WIDTH - MARGIN, HEADER_FILL)
    for title, x0, _ in columns:
        writer.text(x0 + 3, title, size=9, bold=True, color=WHITE)


def _table_row(writer: _Writer, row: ReportRow, columns, index: int) -> None:
    writer.y += ROW_HEIGHT
    if index % 2 == 1:
        writer.fill(MARGIN, PAGE_WIDTH - MARGIN, ALT_FILL)
    values = [row.label, row.cell, row.value_text, row.note]
    for (title, x0, x1), value in zip(columns, values):
        if title == "Value":
            writer.text(x0 + 3, _fit(value, x1 - x0, 8, FONT_BOLD), size=8, bold=True, color=COLOR_RGB[row.color])
        else:
            writer.text(x0 + 3, _fit(value, x1 - x0, 8), size=8)


def _file_section(writer: _Writer, file_result: FileResult) -> None:
    writer.text(MARGIN, _fit(f"File: {file_result.file_name}", PAGE_WIDTH - 2 * MARGIN, 12, FONT_BOLD), size=12, bold=True)
    writer.y += 16
    if file_result.error:
        writer.text(MARGIN, _fit(f"Error: {file_result.error}", PAGE_WIDTH - 2 * MARGIN, 10), size=10, color=ERROR_RED)
        return

    writer.text(MARGIN, f"Sheet: {file_result.sheet_name or 'Not Found'}   {file_result.summary}", size=10, color=GREY)
    rows = report_rows(file_result)
    columns = _columns(any(row.note for row in rows))
    _table_header(writer, columns)
    for index, row in enumerate(rows):
        if writer.ensure_space(ROW_HEIGHT):
            _table_header(writer, columns)
        _table_row(writer, row, columns, index)


def _page_numbers(doc: fitz.Document) -> None:
    count = doc.page_count
    for number, page in enumerate(doc, start=1):
        label = f"Page {number} of {count}"
        width = fitz.get_text_length(label, fontname=FONT, fontsize=8)
        page.insert_text(((PAGE_WIDTH - width) / 2, PAGE_HEIGHT - 14), label, fontsize=8, fontname=FONT)


def render_report_pdf(report: ValidationRunReport, *, files: Optional[Iterable[FileResult]] = None) -> bytes:
    """
    Render a run as a landscape A4 PDF: title and generated timestamp on the
    first page, then one page (or more) per file. Value colours come from each
    Verdict's status.
    """
    shown = list(report.files if files is None else files)
    doc = fitz.open()
    try:
        writer = _Writer(doc)
        writer.text(MARGIN, f"{report.brand_name} Validation Results", size=18, bold=True)
        writer.y += 16
        generated = report.generated_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
        writer.text(MARGIN, f"Generated: {generated}", size=10, color=GREY)
        writer.y += 22

        if report.error:
            writer.text(MARGIN, _fit(f"Error: {report.error}", PAGE_WIDTH - 2 * MARGIN, 10), size=10, color=ERROR_RED)
        elif not shown:
            writer.text(MARGIN, "No files to display.", size=10, color=GREY)

        for index, file_result in enumerate(shown if not report.error else []):
            if index > 0:
                writer.new_page()
            _file_section(writer, file_result)

        _page_numbers(doc)
        return doc.tobytes()
    finally:
        doc.close()
