"""End-to-end walk through the HTTP surface backed by a real data directory."""

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from main import create_app
from modules.safety_inspections import api
from modules.safety_inspections.api import reset_container


def _client():
    return TestClient(create_app())


def test_first_start_seeds_demo_records(isolated_hub, monkeypatch):
    monkeypatch.setenv("SAFETYHUB_SEED_DEMO", "1")
    with _client() as client:
        records = client.get("/api/inspections").json()
        assert [r["id"] for r in records] == ["INS-1715421", "INS-1715428"]
        assert records[0]["overall_risk"] == "High"
        assert records[1]["overall_risk"] == "Low"
        assert client.get("/api/dashboard").json() == {
            "total_inspections": 2,
            "critical_hazards": 1,
            "total_violations": 1,
            "open_actions": 1,
        }
        pending = client.get("/api/weekly-reports/pending").json()
        assert pending == [{"week_start": "2023-10-23", "week_end": "2023-10-28", "count": 2}]
    assert (isolated_hub / "safety_hub.db").exists()


def test_inspection_to_weekly_report(isolated_hub, monkeypatch):
    monkeypatch.setenv("SAFETYHUB_SEED_DEMO", "0")
    monkeypatch.setenv("SAFETYHUB_USER_ID", "u9")
    monkeypatch.setenv("SAFETYHUB_USER_NAME", "Inspector Chan")
    payload = {
        "location": "Chemical Store",
        "date": "2024-05-17",
        "inspector_name": "Inspector Chan",
        "findings": [
            {
                "id": "c1",
                "category": "Chemical Storage",
                "status": "At Risk",
                "observation": "Unlabelled drums",
                "likelihood": "Almost Certain",
                "severity": "Major",
            }
        ],
    }
    with _client() as client:
        created = client.post("/api/inspections", json=payload).json()
        assert created["inspector_id"] == "u9"
        assert created["overall_risk"] == "Extreme"
        assert "Inspector Chan" in client.get("/api/picklists/inspectors").json()

        draft = client.post("/api/weekly-reports/draft", json={"week_start": "2024-05-17"}).json()
        report = client.post("/api/weekly-reports/submit", json=draft).json()
        assert report["id"] == "WR-20240513"
        assert report["summary"] == ""

    # a fresh process sees the same data
    reset_container()
    with _client() as client:
        view = client.get("/api/weekly-reports/WR-20240513", params={"locale": "zh"}).json()
        assert view["period_label"] == "2024年5月 - 第2週"
        assert view["report"]["status"] == "Submitted"
        assert view["critical_hazards"] == 1

        client.patch(
            f"/api/inspections/{created['id']}/findings/c1",
            json={"op": "action_status", "action_status": "Completed"},
        )
        csv_text = client.get("/api/inspections/follow-up.csv", params={"locale": "en"}).content.decode("utf-8-sig")
        assert csv_text.splitlines()[1].endswith('"Completed","Inspector Chan",""')

    settings = json.loads((isolated_hub / "settings.json").read_text(encoding="utf-8"))
    assert settings["last_used"]["inspectors"] == "陳大文"


def test_shutdown_closes_shared_services(isolated_hub, monkeypatch):
    monkeypatch.setenv("SAFETYHUB_SEED_DEMO", "0")
    with _client() as client:
        assert client.get("/api/inspections").json() == []
        assert api._container is not None
    assert api._container is None
