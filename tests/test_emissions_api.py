from __future__ import annotations

import pytest

PAYLOAD = {
    "month": "2025-11",
    "electricity_kwh": 1000,
    "diesel_litres": 10,
    "petrol_litres": 0,
    "gas_kwh": 100,
    "refrigerant_type": "R410A",
    "refrigerant_kg": 0.5,
}


def test_requires_session(client):
    resp = client.get("/api/emissions")
    assert resp.status_code == 401
    assert resp.mimetype == "application/problem+json"


def test_create_computes_and_stores(client, user_headers):
    resp = client.post("/api/emissions", json=PAYLOAD, headers=user_headers)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["ok"] is True
    assert body["factor_version"] == "DEFRA-2024-v1"
    assert body["total_co2e"] == pytest.approx(207.05 + 26.0 + 18.4 + 1044.0)
    assert body["breakdown"]["refrigerant"] == pytest.approx(1044.0)

    listing = client.get("/api/emissions", headers=user_headers).get_json()
    assert listing["meta"]["total"] == 1
    item = listing["items"][0]
    assert item["id"] == body["id"]
    assert item["month"] == "2025-11-01"
    assert item["month_label"] == "November 2025"
    assert item["refrigerant_label"].startswith("R410A")


def test_create_validation_error(client, user_headers):
    resp = client.post("/api/emissions", json={"month": "2025-11", "electricity_kwh": -5}, headers=user_headers)
    assert resp.status_code == 422
    body = resp.get_json()
    assert body["errors"] == [{"field": "electricity_kwh", "msg": "must be a non-negative number"}]


def test_create_bad_month(client, user_headers):
    resp = client.post("/api/emissions", json={"month": "soon"}, headers=user_headers)
    assert resp.status_code == 422
    assert resp.get_json()["errors"][0]["field"] == "month"


def test_list_is_paginated_newest_first(client, user_headers):
    for m in ("2025-01", "2025-03", "2025-02"):
        client.post("/api/emissions", json={"month": m, "electricity_kwh": 1}, headers=user_headers)
    page = client.get("/api/emissions?page=1&size=2", headers=user_headers).get_json()
    assert [i["month"] for i in page["items"]] == ["2025-03-01", "2025-02-01"]
    assert page["meta"] == {"page": 1, "size": 2, "total": 3, "pages": 2}


def test_list_bad_page_param(client, user_headers):
    resp = client.get("/api/emissions?page=0", headers=user_headers)
    assert resp.status_code == 400


def test_delete_only_own_rows(client, user_headers):
    created = client.post("/api/emissions", json={"month": "2025-01"}, headers=user_headers).get_json()
    other = client.application.test_client()
    resp = other.delete(f"/api/emissions/{created['id']}", headers={"X-User-Id": "someone-else"})
    assert resp.status_code == 404
    resp = client.delete(f"/api/emissions/{created['id']}", headers=user_headers)
    assert resp.status_code == 200
    assert client.delete(f"/api/emissions/{created['id']}", headers=user_headers).status_code == 404


@pytest.mark.parametrize("body", [[1, 2], "x", 5])
def test_create_rejects_non_object_body(client, user_headers, body):
    resp = client.post("/api/emissions", json=body, headers=user_headers)
    assert resp.status_code == 422
    assert resp.get_json()["errors"] == [{"field": "body", "msg": "expected a JSON object"}]
