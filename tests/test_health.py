from __future__ import annotations

from carbon.metrics import configure_metrics


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_health_reports_factor_set(client):
    body = client.get("/health").get_json()
    assert body["status"] == "ok"
    assert body["factor_version"] == "DEFRA-2024-v1"
    assert body["factor_region"] == "UK"
    assert body["metrics"] is None


def test_health_exposes_memory_counters(client, user_headers):
    configure_metrics("memory")
    try:
        client.post(
            "/api/scope3",
            json={"category": "purchased_goods", "month": "2025-01", "spend_gbp": 1},
            headers=user_headers,
        )
        body = client.get("/health").get_json()
    finally:
        configure_metrics("noop")
    assert body["metrics"]["scope3.create"] == 1
