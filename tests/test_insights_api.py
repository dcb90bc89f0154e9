from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from carbon.insights_service import InsightService

ANSWER = {
    "headline": "Fuel is the hotspot",
    "narrative": "Diesel use doubled.",
    "hotspot": "Fuel",
    "confidence": "high",
    "actions": [{"id": "1", "title": "Plan routes", "detail": "Cut idle time"}],
}


class _Completions:
    def __init__(self, content):
        self.content = content

    def create(self, **kwargs):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


@pytest.fixture
def fake_ai(app_session):
    previous = app_session.insight_service
    client = SimpleNamespace(chat=SimpleNamespace(completions=_Completions(json.dumps(ANSWER))))
    app_session.insight_service = InsightService(client)
    yield app_session.insight_service
    app_session.insight_service = previous


def test_ai_data_payload(client, user_headers):
    client.post("/api/emissions", json={"month": "2025-02", "diesel_litres": 4}, headers=user_headers)
    client.post("/api/emissions", json={"month": "2025-01", "electricity_kwh": 10}, headers=user_headers)
    months = client.get("/api/ai/data", headers=user_headers).get_json()["months"]
    assert [m["month"] for m in months] == ["2025-01-01", "2025-02-01"]
    assert months[1]["diesel"] == 4.0
    assert months[1]["fuel"] == 4.0


def test_latest_insight_404_before_generation(client, user_headers):
    assert client.get("/api/ai/insights", headers=user_headers).status_code == 404


def test_generate_then_read(client, user_headers, fake_ai):
    client.post("/api/emissions", json={"month": "2025-02", "diesel_litres": 4}, headers=user_headers)
    resp = client.post("/api/ai/insights", headers=user_headers)
    assert resp.status_code == 201
    assert resp.get_json()["insight"]["hotspot"] == "Fuel"
    stored = client.get("/api/ai/insights", headers=user_headers).get_json()["insight"]
    assert stored["headline"] == ANSWER["headline"]
    assert stored["generated_at"]


def test_generate_without_api_key_is_503(client, user_headers, app_session, monkeypatch):
    monkeypatch.setattr(app_session, "insight_service", InsightService(api_key=""))
    resp = client.post("/api/ai/insights", headers=user_headers)
    assert resp.status_code == 503
    assert resp.get_json()["detail"] == "ai_not_configured"


def test_recompute_all_requires_admin(client, user_headers):
    resp = client.post("/api/ai/recompute-all", headers=user_headers)
    assert resp.status_code == 403
    assert resp.get_json()["required_role"] == "admin"


def test_recompute_all_as_admin(client, admin_headers, user_headers, fake_ai):
    other = client.application.test_client()
    other.post("/api/emissions", json={"month": "2025-02", "electricity_kwh": 5}, headers=user_headers)
    body = client.post("/api/ai/recompute-all", headers=admin_headers).get_json()
    assert body["ok"] is True
    assert body["processed"] >= 1
    assert all(r["ok"] for r in body["results"])


@pytest.fixture
def answer_with(app_session):
    """Swap in a fake client that always answers ``content``."""
    previous = app_session.insight_service

    def _install(content):
        client = SimpleNamespace(chat=SimpleNamespace(completions=_Completions(content)))
        app_session.insight_service = InsightService(client)

    yield _install
    app_session.insight_service = previous


def test_recompute_on_change_unknown_month_404(client, user_headers, fake_ai):
    resp = client.post("/api/ai/recompute-on-change", json={"month": "2024-06"}, headers=user_headers)
    assert resp.status_code == 404
    assert resp.get_json()["detail"] == "emission_not_found"


def test_recompute_on_change_regenerates(client, user_headers, fake_ai):
    client.post("/api/emissions", json={"month": "2025-03", "diesel_litres": 2}, headers=user_headers)
    resp = client.post("/api/ai/recompute-on-change", json={"month": "2025-03-01"}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.get_json()["insight"]["headline"] == ANSWER["headline"]
    assert client.get("/api/ai/insights", headers=user_headers).status_code == 200


def test_recompute_on_change_bad_month_422(client, user_headers, fake_ai):
    resp = client.post("/api/ai/recompute-on-change", json={"month": "soon"}, headers=user_headers)
    assert resp.status_code == 422
    assert resp.get_json()["errors"][0]["field"] == "month"


def test_recommended_actions_normalises_shares(client, user_headers, answer_with):
    answer_with(json.dumps({"actions": [{"title": f"T{i}", "description": "d"} for i in range(5)]}))
    resp = client.post(
        "/api/ai/recommended-actions",
        json={"electricity": 85.44, "fuel": 5.66, "refrigerant": 8.94, "months": 3},
        headers=user_headers,
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["shares"] == {"electricity": 85.4, "fuel": 5.7, "refrigerant": 8.9}
    assert [a["title"] for a in body["actions"]] == ["T0", "T1", "T2"]


@pytest.mark.parametrize(
    "payload, field",
    [
        ([1, 2], "body"),
        ({"electricity": "lots"}, "body"),
        ({"electricity": 50, "months": -1}, "months"),
        ({"electricity": 50, "months": "6"}, "months"),
    ],
)
def test_recommended_actions_validation(client, user_headers, answer_with, payload, field):
    answer_with('{"actions": []}')
    resp = client.post("/api/ai/recommended-actions", json=payload, headers=user_headers)
    assert resp.status_code == 422
    assert resp.get_json()["errors"][0]["field"] == field


def test_recommended_actions_bad_model_output_502(client, user_headers, answer_with):
    answer_with("no idea")
    resp = client.post("/api/ai/recommended-actions", json={"fuel": 100}, headers=user_headers)
    assert resp.status_code == 502


def test_performance_without_data_400(client, user_headers, answer_with):
    answer_with('{"status": "Rising", "insight": "Up."}')
    resp = client.get("/api/ai/performance", headers=user_headers)
    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "no_emissions"


def test_performance(client, user_headers, answer_with):
    answer_with('{"status": "Falling", "insight": "Down.", "risk": "High"}')
    client.post("/api/emissions", json={"month": "2025-01", "electricity_kwh": 10}, headers=user_headers)
    client.post("/api/emissions", json={"month": "2025-02", "electricity_kwh": 8}, headers=user_headers)
    body = client.get("/api/ai/performance", headers=user_headers).get_json()
    assert body["ok"] is True
    assert body["status"] == "Falling"
    assert body["risk"] is None
    assert body["months"] == 2
