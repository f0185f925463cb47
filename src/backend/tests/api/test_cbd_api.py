import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from common.settings import CBDSettings

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

FOX_CELLS = {"C3": "Vendor", "D3": "Madison 88 Ltd.", "K3": "OVERHEAD", "L3": 0.45}


@pytest.fixture
def client(tmp_path):
    settings = CBDSettings(reference_dir=tmp_path, log_dir=tmp_path / "logs", log_level="INFO")
    return TestClient(create_app(settings, configure_logging=False))


def _upload(name: str, data: bytes):
    return ("files", (name, data, XLSX))


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_rulesets_catalog(client):
    resp = client.get("/cbd/rulesets")
    assert resp.status_code == 200
    entries = {entry["brand_id"]: entry for entry in resp.json()}
    assert set(entries) == {"columbia", "cotopaxi", "fox", "outdoor_research"}
    assert entries["cotopaxi"]["sheet"] == "Blank Cost Sheet"
    assert entries["columbia"]["requires_reference"] is True
    assert "rule_schema" not in entries["fox"]


def test_validate_then_results_and_export(client, make_workbook_bytes):
    assert client.get("/cbd/fox/export").status_code == 404

    resp = client.post(
        "/cbd/fox/validate",
        files=[
            _upload("style_1.xlsx", make_workbook_bytes({"CBD": FOX_CELLS})),
            _upload("style_2.xlsx", b"garbage"),
        ],
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "FOX Validation Results" in resp.text
    assert "style_1.xlsx" in resp.text
    assert "<strong>File:</strong> style_2.xlsx<br><strong>Error:</strong>" in resp.text
    assert "0.45 (Expected: 0.40)" in resp.text

    filtered = client.get("/cbd/fox/results", params={"filter": "STYLE_2"})
    assert filtered.status_code == 200
    assert "style_2.xlsx" in filtered.text
    assert "style_1.xlsx" not in filtered.text

    pdf = client.get("/cbd/fox/export")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.headers["content-disposition"].startswith('attachment; filename="FOX_Validation_')
    assert pdf.content.startswith(b"%PDF")


def test_results_before_any_run(client):
    resp = client.get("/cbd/cotopaxi/results")
    assert resp.status_code == 404


def test_unknown_brand(client, make_workbook_bytes):
    assert client.get("/cbd/acme/results").status_code == 404
    resp = client.post("/cbd/acme/validate", files=[_upload("a.xlsx", make_workbook_bytes())])
    assert resp.status_code == 404


def test_columbia_without_reference_shows_run_error(client, make_workbook_bytes):
    resp = client.post("/cbd/columbia/validate", files=[_upload("col.xlsx", make_workbook_bytes())])
    assert resp.status_code == 200
    assert "error-block" in resp.text
    assert "Columbia_CostBreakdown.csv" in resp.text
    assert "col.xlsx" not in resp.text
