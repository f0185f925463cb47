from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, Response

from common.cbd_validation.catalog import build_catalog
from common.cbd_validation.registry import UnknownRulesetError, registry
from common.cbd_validation.rule import Ruleset
from pipelines.cbd_validation import ResultStore, UploadedFile, ValidationRunner, filter_results
from reports.html import render_report_html
from reports.pdf import render_report_pdf
from reports.rows import pdf_file_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cbd", tags=["cbd"])


def _get_ruleset(brand_id: str) -> Ruleset:
    try:
        return registry.create(brand_id)
    except UnknownRulesetError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _result_store(request: Request) -> ResultStore:
    store = getattr(request.app.state, "results", None)
    if store is None:
        store = ResultStore()
        request.app.state.results = store
    return store


@router.get("/rulesets")
def list_rulesets():
    return [entry.model_dump(mode="json", exclude={"rule_schema"}) for entry in build_catalog()]


@router.post("/{brand_id}/validate", response_class=HTMLResponse)
async def validate_workbooks(
    request: Request,
    brand_id: str,
    files: List[UploadFile] = File(...),
    name_filter: str | None = Query(None, alias="filter"),
):
    ruleset = _get_ruleset(brand_id)
    uploads = [UploadedFile(name=upload.filename or "upload.xlsx", data=await upload.read()) for upload in files]

    settings = request.app.state.settings
    runner = ValidationRunner(ruleset, reference_dir=settings.reference_dir)
    report = runner.process_files(uploads)
    _result_store(request).put(report)
    logger.info("Validated %d file(s) for %s", len(uploads), ruleset.brand_name)

    return HTMLResponse(render_report_html(report, files=filter_results(report.files, name_filter)))


@router.get("/{brand_id}/results", response_class=HTMLResponse)
def latest_results(request: Request, brand_id: str, name_filter: str | None = Query(None, alias="filter")):
    ruleset = _get_ruleset(brand_id)
    report = _result_store(request).latest(ruleset.brand_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"No results for {ruleset.brand_name}. Validate files first.")
    return HTMLResponse(render_report_html(report, files=filter_results(report.files, name_filter)))


@router.get("/{brand_id}/export")
def export_pdf(request: Request, brand_id: str, name_filter: str | None = Query(None, alias="filter")):
    ruleset = _get_ruleset(brand_id)
    report = _result_store(request).latest(ruleset.brand_id)
    if report is None:
        raise HTTPException(status_code=404, detail="No results to export. Please generate results first.")

    filename = pdf_file_name(report.brand_name, report.generated_at.date())
    content = render_report_pdf(report, files=filter_results(report.files, name_filter))
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
