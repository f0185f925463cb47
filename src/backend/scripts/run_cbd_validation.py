from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def run_validation(
    brand_id: str,
    paths: list[Path],
    *,
    reference_path: Path | None = None,
    reference_dir: Path | None = None,
):
    _ensure_backend_on_path()
    from common.cbd_validation.registry import registry
    from pipelines.cbd_validation import UploadedFile, ValidationRunner

    ruleset = registry.create(brand_id)
    runner = ValidationRunner(ruleset, reference_dir=reference_dir, reference_path=reference_path)
    return runner.process_files(UploadedFile.from_path(path) for path in paths)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate BCBD cost breakdown workbooks against a brand ruleset and write HTML/JSON/PDF outputs."
    )
    parser.add_argument("files", nargs="+", help="Workbook files (.xlsx) in the order to process.")
    parser.add_argument("--brand", required=True, help="Brand ruleset id (see the ruleset catalog).")
    parser.add_argument(
        "--out-dir",
        default=".",
        help="Output directory for the report files (default: current directory).",
    )
    parser.add_argument("--pdf", action="store_true", help="Also export a PDF report.")
    parser.add_argument(
        "--reference",
        default=None,
        help="Reference CSV for brands that need one (defaults to CBD_REFERENCE_DIR/<brand file>).",
    )
    parser.add_argument(
        "--filter",
        default=None,
        help="Only include files whose name contains this text in the rendered reports.",
    )
    args = parser.parse_args(argv)

    _ensure_backend_on_path()
    from common.cbd_validation.registry import UnknownRulesetError
    from common.logging_config import setup_logging
    from common.settings import get_settings
    from pipelines.cbd_validation import filter_results
    from reports.html import render_report_html
    from reports.pdf import render_report_pdf
    from reports.rows import pdf_file_name

    settings = get_settings()
    setup_logging(settings.log_dir, level=settings.log_level_value)

    try:
        report = run_validation(
            args.brand,
            [Path(p) for p in args.files],
            reference_path=Path(args.reference) if args.reference else None,
            reference_dir=settings.reference_dir,
        )
    except UnknownRulesetError as exc:
        raise SystemExit(str(exc)) from exc

    output_dir = Path(args.out_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    shown = filter_results(report.files, args.filter)
    base_name = f"{report.brand_id}_validation_{report.generated_at.date().isoformat()}"
    out_json = output_dir / f"{base_name}.json"
    out_html = output_dir / f"{base_name}.html"

    out_json.write_text(json.dumps(report.model_dump(mode="json"), indent=2))
    out_html.write_text(render_report_html(report, files=shown), encoding="utf-8")
    print(f"Wrote {out_json}")
    print(f"Wrote {out_html}")

    if args.pdf:
        out_pdf = output_dir / pdf_file_name(report.brand_name, report.generated_at.date())
        out_pdf.write_bytes(render_report_pdf(report, files=shown))
        print(f"Wrote {out_pdf}")

    if report.error:
        print(f"Error: {report.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
