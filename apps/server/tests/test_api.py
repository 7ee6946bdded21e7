from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from builders import build_xlsx, make_report
from conftest import failing_font_cache, offline_font_cache
from fastapi.testclient import TestClient

from maintreport.advice import ERROR_FALLBACK, AdviceService
from maintreport.app import RuntimeState, create_app
from maintreport.config import load_config
from maintreport.record_store import ReportStore
from maintreport.spreadsheet import build_template_xlsx
from maintreport.spreadsheet.xlsx_export import SpreadsheetFile


def _runtime(tmp_path: Path, *, font_cache=None) -> RuntimeState:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {"storage": {"reports_json_path": "reports.json"}, "advice": {"enabled": False}}
        ),
        encoding="utf-8",
    )
    config = load_config(config_path)
    return RuntimeState(
        config=config,
        store=ReportStore(config.storage.reports_json_path),
        font_cache=font_cache or offline_font_cache(),
        advice=AdviceService(config.advice),
    )


@pytest.fixture
def runtime(tmp_path: Path) -> RuntimeState:
    return _runtime(tmp_path)


@pytest.fixture
def client(runtime: RuntimeState) -> TestClient:
    return TestClient(create_app(runtime=runtime))


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "report_count": 0, "font_cached": False}


# -- records -------------------------------------------------------------------


def test_create_report_attaches_advice_text(client: TestClient, runtime: RuntimeState) -> None:
    resp = client.post(
        "/api/reports",
        json={
            "notificationNo": "N-1",
            "equipmentName": "Pump",
            "workDept": "전기",
            "failDate": "2024-05-10",
            "failTime": "14:30",
            "cause": "wear",
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"].startswith("REP-")
    assert body["workDept"] == "전기"
    assert body["aiInsights"] == ERROR_FALLBACK
    assert runtime.store.get(body["id"]).notification_no == "N-1"


def test_read_update_toggle_delete(client: TestClient, runtime: RuntimeState) -> None:
    runtime.store.add(make_report(id="A", created_at="2024. 1. 1."))

    assert client.get("/api/reports").json()[0]["id"] == "A"
    assert client.get("/api/reports/A").json()["notificationNo"] == "N-2024-001"
    assert client.get("/api/reports/missing").status_code == 404

    updated = client.put("/api/reports/A", json={"notificationNo": "N-2", "cause": "seal"})
    assert updated.status_code == 200
    assert updated.json()["id"] == "A"
    assert updated.json()["createdAt"] == "2024. 1. 1."

    assert client.post("/api/reports/A/toggle-completed").json()["isCompleted"] is True
    assert client.post("/api/reports/A/toggle-archived").json()["isArchived"] is True
    assert client.get("/api/reports/stats").json() == {
        "totalReports": 1,
        "recentFailures": 0,
        "aiAnalyzed": 1,
    }

    assert client.delete("/api/reports/A").status_code == 200
    assert client.delete("/api/reports/A").status_code == 404


def test_bulk_archive(client: TestClient, runtime: RuntimeState) -> None:
    for rid in ("A", "B"):
        runtime.store.add(make_report(id=rid))
    resp = client.post("/api/reports/archive", json={"ids": ["A", "B", "Z"]})
    assert resp.json() == {"updated": 2}
    assert client.post("/api/reports/archive", json={"ids": []}).status_code == 422


# -- spreadsheet ---------------------------------------------------------------


def test_import_template_creates_one_record(client: TestClient, runtime: RuntimeState) -> None:
    resp = client.post("/api/reports/import", content=build_template_xlsx().content)
    assert resp.status_code == 200
    body = resp.json()
    assert body["imported"] == 1
    assert runtime.store.get(body["ids"][0]).notification_no == "예: N-2024-001"


def test_import_drops_example_row_of_multi_row_upload(client: TestClient) -> None:
    data = build_xlsx(["통지번호", "설비명칭"], [["EX", "example"], ["N-1", "Fan"], ["N-2", "Pump"]])
    body = client.post("/api/reports/import", content=data).json()
    assert body["imported"] == 2
    listed = [r["notificationNo"] for r in client.get("/api/reports").json()]
    assert listed == ["N-1", "N-2"]


def test_import_rejects_unreadable_uploads(client: TestClient) -> None:
    assert client.post("/api/reports/import", content=b"").status_code == 400
    resp = client.post("/api/reports/import", content=b"definitely not xlsx")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "엑셀 로드 오류"


def test_export_and_template_downloads(client: TestClient, runtime: RuntimeState) -> None:
    runtime.store.add(make_report(id="A"))
    export = client.get("/api/reports/export")
    assert export.status_code == 200
    assert export.headers["content-type"] == SpreadsheetFile.media_type
    assert "filename*=UTF-8''NPK_" in export.headers["content-disposition"]

    template = client.get("/api/reports/template")
    assert template.status_code == 200
    assert template.content[:2] == b"PK"


# -- PDF -----------------------------------------------------------------------


def test_single_report_pdf(client: TestClient, runtime: RuntimeState) -> None:
    runtime.store.add(make_report(id="A", notification_no="N-7"))
    resp = client.get("/api/reports/A/pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
    assert client.get("/api/health").json()["font_cached"] is True


def test_batch_pdf_and_missing_records(client: TestClient, runtime: RuntimeState) -> None:
    for rid in ("A", "B"):
        runtime.store.add(make_report(id=rid))
    assert client.post("/api/reports/pdf", json={"ids": ["A", "B"]}).status_code == 200
    assert client.post("/api/reports/pdf", json={"ids": ["nope"]}).status_code == 404
    assert client.get("/api/reports/nope/pdf").status_code == 404


def test_pdf_reports_font_outage_as_service_unavailable(tmp_path: Path) -> None:
    runtime = _runtime(tmp_path, font_cache=failing_font_cache())
    runtime.store.add(make_report(id="A"))
    client = TestClient(create_app(runtime=runtime))
    resp = client.get("/api/reports/A/pdf")
    assert resp.status_code == 503
    assert "폰트 로드 실패" in resp.json()["detail"]
