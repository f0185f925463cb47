from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from adapters.reference.cost_breakdown import ReferenceDataError, load_cost_breakdown_csv
from adapters.workbook.loader import WorkbookReadError, parse_workbook, read_workbook_file
from common.cbd_validation.models import FileResult, ValidationRunReport, Verdict, VerdictStatus
from common.cbd_validation.reference import CostBreakdownReference
from common.cbd_validation.rule import Ruleset

logger = logging.getLogger(__name__)

SHEET_CHECK_LABEL = "Sheet Check"


@dataclass(frozen=True)
class UploadedFile:
    name: str
    data: bytes
    # Set when the bytes could not be read; the file then yields an error result.
    read_error: Optional[str] = None

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadedFile":
        file_path = Path(path)
        try:
            return cls(name=file_path.name, data=read_workbook_file(file_path))
        except WorkbookReadError as exc:
            return cls(name=file_path.name, data=b"", read_error=str(exc))


class ValidationRunner:
    """Runs one brand ruleset over a batch of workbooks, one file at a time."""

    def __init__(
        self,
        ruleset: Ruleset,
        *,
        reference_dir: Path | None = None,
        reference_path: Path | None = None,
    ) -> None:
        self._ruleset = ruleset
        self._reference_dir = reference_dir
        self._reference_path = reference_path

    @property
    def ruleset(self) -> Ruleset:
        return self._ruleset

    def process_files(self, files: Iterable[UploadedFile]) -> ValidationRunReport:
        report = ValidationRunReport(
            run_id=str(uuid.uuid4()),
            brand_id=self._ruleset.brand_id,
            brand_name=self._ruleset.brand_name,
            generated_at=datetime.now(timezone.utc),
        )

        reference: Optional[CostBreakdownReference] = None
        if self._ruleset.requires_reference:
            try:
                reference = self._load_reference()
            except ReferenceDataError as exc:
                logger.error("%s run aborted: %s", self._ruleset.brand_name, exc)
                report.error = str(exc)
                return report

        for upload in files:
            report.files.append(self.process_file(upload, reference=reference))

        report.totals = _totals(report.files)
        logger.info(
            "%s run %s: %d file(s), totals=%s",
            self._ruleset.brand_name,
            report.run_id,
            len(report.files),
            {status.value: count for status, count in report.totals.items()},
        )
        return report

    def process_file(self, upload: UploadedFile, *, reference: Optional[object] = None) -> FileResult:
        if upload.read_error:
            logger.error("Error reading file %s: %s", upload.name, upload.read_error)
            return FileResult(file_name=upload.name, error=upload.read_error)
        try:
            sheets = parse_workbook(upload.data)
            sheet_name = self._ruleset.sheet.select(list(sheets))
            if sheet_name is None:
                logger.warning("%s: sheet %r not found", upload.name, self._ruleset.sheet.describe())
                return FileResult(
                    file_name=upload.name,
                    sheet_name=None,
                    verdicts=[self._missing_sheet_verdict()],
                )
            verdicts = self._ruleset.evaluate(sheets[sheet_name], file_name=upload.name, reference=reference)
        except Exception as exc:
            logger.exception("Error processing file %s", upload.name)
            return FileResult(file_name=upload.name, error=str(exc) or exc.__class__.__name__)

        return FileResult(file_name=upload.name, sheet_name=sheet_name, verdicts=verdicts)

    def _load_reference(self) -> CostBreakdownReference:
        path = self._reference_path
        if path is None:
            if self._reference_dir is None or not self._ruleset.reference_file:
                raise ReferenceDataError(f"No reference data location configured for {self._ruleset.brand_name}")
            path = self._reference_dir / self._ruleset.reference_file
        return load_cost_breakdown_csv(path)

    def _missing_sheet_verdict(self) -> Verdict:
        wanted = self._ruleset.sheet.describe()
        return Verdict(
            rule_id="SHEET",
            label=SHEET_CHECK_LABEL,
            found=False,
            status=VerdictStatus.NOT_FOUND,
            actual_display=f'Sheet "{wanted}" not found',
            expected_display=wanted,
        )


def _totals(files: List[FileResult]) -> Dict[VerdictStatus, int]:
    totals: Dict[VerdictStatus, int] = {}
    for file_result in files:
        for verdict in file_result.verdicts:
            totals[verdict.status] = totals.get(verdict.status, 0) + 1
    return totals


def filter_results(results: Iterable[FileResult], term: str | None) -> List[FileResult]:
    """Keep results whose file name contains ``term`` (case-insensitive); blank keeps all."""
    needle = (term or "").strip().casefold()
    if not needle:
        return list(results)
    return [result for result in results if needle in result.file_name.casefold()]


class ResultStore:
    """Last run per brand. Each run replaces the previous one wholesale."""

    def __init__(self) -> None:
        self._reports: Dict[str, ValidationRunReport] = {}

    def put(self, report: ValidationRunReport) -> None:
        self._reports[report.brand_id] = report

    def latest(self, brand_id: str) -> Optional[ValidationRunReport]:
        return self._reports.get(brand_id)

    def clear(self) -> None:
        self._reports.clear()
