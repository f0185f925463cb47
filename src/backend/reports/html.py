from __future__ import annotations

import html as html_lib
from typing import Iterable, List, Optional

from common.cbd_validation.models import FileResult, ValidationRunReport

from .rows import COLOR_HEX, report_rows

_STYLE = (
    "body{font-family:'Libre Franklin',Arial,sans-serif;margin:20px;color:#111;background:#fff;}",
    "h1,h2,h3{margin:0 0 8px 0;}",
    ".meta{color:#444;margin-bottom:16px;font-size:12px;}",
    ".summary span{display:inline-block;margin-right:10px;padding:4px 8px;"
    "background:#f2f2f2;border:1px solid #ddd;border-radius:4px;font-size:12px;}",
    ".file-result{margin-bottom:24px;}",
    ".file-summary{padding:8px 10px;border:1px solid #e5e5e5;border-radius:6px;background:#fafafa;font-size:12px;}",
    "table{width:100%;border-collapse:collapse;margin-top:8px;}"
    "th,td{border:1px solid #ccc;padding:6px;text-align:left;vertical-align:top;font-size:12px;}",
    "th{background:#2b4a6c;color:#fff;font-weight:600;}",
    "tbody tr:nth-child(even){background:#f5f5f5;}",
    ".cell-ref{white-space:nowrap;text-align:center;}",
    ".value{font-weight:600;}",
    ".error-block{border:2px solid #991b1b;border-radius:6px;padding:10px 12px;color:#991b1b;background:#fef2f2;}",
)


def _escape(value: object) -> str:
    return html_lib.escape(str(value))


def render_error_block(message: str, *, file_name: Optional[str] = None) -> str:
    title = f"<strong>File:</strong> {_escape(file_name)}<br>" if file_name else ""
    return f"<div class='error-block'>{title}<strong>Error:</strong> {_escape(message)}</div>"


def render_file_section(file_result: FileResult) -> str:
    if file_result.error:
        return (
            "<div class='file-result'>"
            + render_error_block(file_result.error, file_name=file_result.file_name)
            + "</div>"
        )

    rows = report_rows(file_result)
    with_notes = any(row.note for row in rows)
    lines: List[str] = ["<div class='file-result'>"]
    lines.append(
        "<div class='file-summary'>"
        f"<strong>File:</strong> {_escape(file_result.file_name)}<br>"
        f"<strong>Sheet:</strong> {_escape(file_result.sheet_name or 'Not Found')}<br>"
        f"<strong>Summary:</strong> {_escape(file_result.summary)}"
        "</div>"
    )
    lines.append("<table>")
    header = "<th>Check</th><th>Cell</th><th>Value</th>"
    if with_notes:
        header += "<th>Supplier</th>"
    lines.append(f"<thead><tr>{header}</tr></thead>")
    lines.append("<tbody>")
    for row in rows:
        color = COLOR_HEX[row.color]
        note_cell = f"<td>{_escape(row.note)}</td>" if with_notes else ""
        lines.append(
            f"<tr data-status='{row.status.value}'>"
            f"<td>{_escape(row.label)}</td>"
            f"<td class='cell-ref'>{_escape(row.cell)}</td>"
            f"<td class='value' style='color:{color}'>{_escape(row.value_text)}</td>"
            f"{note_cell}"
            "</tr>"
        )
    lines.append("</tbody>")
    lines.append("</table>")
    lines.append("</div>")
    return "\n".join(lines)


def render_report_html(
    report: ValidationRunReport,
    *,
    files: Optional[Iterable[FileResult]] = None,
) -> str:
    """Full HTML page for a run; ``files`` overrides the report's files (e.g. a filtered view)."""
    shown = list(report.files if files is None else files)

    lines: List[str] = []
    lines.append("<!DOCTYPE html>")
    lines.append("<html lang='en'>")
    lines.append("<head>")
    lines.append("<meta charset='utf-8'>")
    lines.append("<meta name='viewport' content='width=device-width, initial-scale=1'>")
    lines.append(f"<title>{_escape(report.brand_name)} Validation</title>")
    lines.append("<style>")
    lines.extend(_STYLE)
    lines.append("</style>")
    lines.append("</head>")
    lines.append("<body>")
    lines.append(f"<h1>{_escape(report.brand_name)} Validation Results</h1>")
    lines.append(
        f"<div class='meta'>Run {_escape(report.run_id)} • Generated at {_escape(report.generated_at.isoformat())}</div>"
    )

    if report.error:
        lines.append(render_error_block(report.error))
    else:
        if report.totals:
            lines.append("<div class='summary'>")
            for status, count in report.totals.items():
                lines.append(f"<span>{_escape(status.value)}: {count}</span>")
            lines.append("</div>")
        if not shown:
            lines.append("<div class='meta'>No files to display.</div>")
        for file_result in shown:
            lines.append(render_file_section(file_result))

    lines.append("</body></html>")
    return "\n".join(lines)
