"""
FastAPI 백엔드 테스트 (TestClient)
"""

import io
import json
import zipfile

import pytest
from fastapi.testclient import TestClient

from adreport.api import backend

CSV_CONTENT = (
    "캠페인,Spring Sale\n"
    "광고주,Acme\n"
    "날짜,광고상품,노출,클릭\n"
    "2026.01.01,메인배너,100,5\n"
    "2026.01.02,메인배너,0,0\n"
    "2026.02.03,서브배너,200,10\n"
).encode("utf-8")


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(backend.settings, "data_dir", tmp_path / "data_root")
    monkeypatch.setattr(backend.settings, "gemini_api_key", "")
    backend.store.clear()
    yield TestClient(backend.app)
    backend.store.clear()


def _upload(client, content=CSV_CONTENT, filename="report.csv"):
    return client.post("/api/reports/parse", files={"file": (filename, content, "text/csv")})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_parse_upload(client):
    response = _upload(client)
    assert response.status_code == 200

    data = response.json()
    assert data["summary"]["advertiser"] == "Acme"
    assert data["summary"]["totalImpressions"] == 300
    assert data["summary"]["avgCtr"] == 5.0
    assert data["months"] == ["01", "02"]
    assert data["row_count"] == 2
    assert data["source_file"] == "report.csv"


def test_parse_failure_keeps_current_report(client):
    _upload(client)

    response = _upload(client, "제목만 있는 파일\n".encode("utf-8"))
    assert response.status_code == 400
    assert "헤더" in response.json()["detail"]

    current = client.get("/api/reports/current")
    assert current.status_code == 200
    assert current.json()["summary"]["name"] == "Spring Sale"


def test_parse_keeps_previous_advertiser(client):
    _upload(client)

    response = _upload(client, "날짜,노출,클릭\n2026.03.01,100,1\n".encode("utf-8"), "march.csv")
    assert response.status_code == 200
    assert response.json()["summary"]["advertiser"] == "Acme"


def test_parse_unsupported_file(client):
    response = _upload(client, b"%PDF-1.4", "report.pdf")
    assert response.status_code == 400


def test_current_report_requires_upload(client):
    assert client.get("/api/reports/current").status_code == 404


def test_current_report_month(client):
    _upload(client)

    data = client.get("/api/reports/current", params={"month": "02"}).json()
    assert data["selected_month"] == "02"
    assert data["cards"][0]["value"] == 200
    assert data["cards"][0]["sub_value"] == "2월 노출량"

    assert client.get("/api/reports/current", params={"month": "07"}).status_code == 404


def test_current_rows(client):
    _upload(client)

    data = client.get("/api/reports/current/rows", params={"month": "all", "per_page": 20}).json()
    assert data["total"] == 2
    assert [r["no"] for r in data["rows"]] == [1, 2]

    assert client.get("/api/reports/current/rows", params={"per_page": 15}).status_code == 400


def test_update_title(client):
    _upload(client)

    response = client.patch("/api/reports/current/title", json={"name": "  Summer Sale "})
    assert response.status_code == 200
    assert response.json()["summary"]["name"] == "Summer Sale"
    assert client.get("/api/reports/current").json()["summary"]["name"] == "Summer Sale"

    assert client.patch("/api/reports/current/title", json={"name": " "}).status_code == 400


def test_insight(client, monkeypatch):
    _upload(client)
    monkeypatch.setattr(backend, "generate_insight", lambda report, api_key, model: f"{report.summary.advertiser} 요약")

    response = client.post("/api/reports/current/insight")
    assert response.status_code == 200
    assert response.json()["insight"] == "Acme 요약"
    assert client.get("/api/reports/current").json()["insight"] == "Acme 요약"


def test_pdf_download(client, monkeypatch):
    _upload(client)
    monkeypatch.setattr(backend, "render_report_pdf_bytes", lambda report, month, insight: b"%PDF-fake")

    response = client.get("/api/reports/current/pdf", params={"month": "01"})
    assert response.status_code == 200
    assert response.content == b"%PDF-fake"
    assert response.headers["content-type"] == "application/pdf"
    assert "Ad_Report_Acme_" in response.headers["content-disposition"]


def test_pdf_failure(client, monkeypatch):
    _upload(client)

    def broken(report, month, insight):
        raise RuntimeError("cairo missing")

    monkeypatch.setattr(backend, "render_report_pdf_bytes", broken)

    response = client.get("/api/reports/current/pdf")
    assert response.status_code == 500
    assert client.get("/api/reports/current").status_code == 200


def test_package_download(client):
    _upload(client)

    response = client.post("/api/reports/current/package", json={"insight": "요약"})
    assert response.status_code == 200
    assert "Report_Package_Acme.zip" in response.headers["content-disposition"]

    with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
        assert sorted(zf.namelist()) == ["data/acme/01.json", "data/acme/02.json", "data/acme/index.json"]
        assert json.loads(zf.read("data/acme/index.json"))["aiInsight"] == "요약"


def test_package_invalid_client_key(client):
    _upload(client)
    response = client.post("/api/reports/current/package", json={"client_key": "!!!"})
    assert response.status_code == 400


def test_publish_and_view(client):
    _upload(client)

    response = client.post("/api/clients/acme/publish", json={"insight": "요약"})
    assert response.status_code == 200
    assert response.json()["months"] == ["01", "02"]

    view = client.get("/api/clients/acme").json()
    assert view["summary"]["name"] == "Spring Sale"
    assert view["months"] == ["01", "02"]
    assert view["insight"] == "요약"
    assert view["row_count"] == 2

    feb = client.get("/api/clients/acme", params={"month": "02"}).json()
    assert feb["selected_month"] == "02"
    assert feb["months"] == ["01", "02"]
    assert feb["cards"][0]["value"] == 200

    rows = client.get("/api/clients/acme/rows", params={"month": "01"}).json()
    assert rows["total"] == 1
    assert rows["rows"][0]["date"] == "2026.01.01"


def test_unknown_client(client):
    assert client.get("/api/clients/nobody").status_code == 404
    assert client.get("/api/clients/nobody/rows").status_code == 404
