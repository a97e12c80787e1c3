from datetime import date

import pytest
from common.codes import next_daily_code
from rest_framework.test import APIClient
from users.tests.factories import UserFactory, client_for


@pytest.mark.django_db
def test_daily_codes_are_sequential_per_prefix_and_day():
    day = date(2025, 1, 2)
    assert next_daily_code("PO", day=day) == "PO-20250102-001"
    assert next_daily_code("PO", day=day) == "PO-20250102-002"
    assert next_daily_code("WO", day=day) == "WO-20250102-001"
    assert next_daily_code("PO", day=date(2025, 1, 3)) == "PO-20250103-001"


@pytest.mark.django_db
def test_error_envelope_carries_request_id():
    client = client_for(UserFactory())
    resp = client.get("/api/v1/suppliers/999/", HTTP_X_REQUEST_ID="req-123")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == {"kind": "not_found", "message": "Supplier not found", "details": {}}
    assert body["meta"]["request_id"] == "req-123"
    assert body["meta"]["version"] == "1.0.0"


@pytest.mark.django_db
def test_success_envelope():
    client = client_for(UserFactory())
    resp = client.post("/api/v1/fragrances/ratios/", {"percentage": 0}, format="json")
    body = resp.json()
    assert body["success"] is True
    assert set(body) == {"success", "data", "meta"}
    assert body["meta"]["request_id"]


@pytest.mark.django_db
def test_method_not_allowed_is_wrapped():
    client = client_for(UserFactory())
    resp = client.put("/api/v1/fragrances/ratios/", {}, format="json")
    assert resp.status_code == 405
    assert resp.json()["error"]["kind"] == "invalid_argument"


@pytest.mark.django_db
def test_health_is_public():
    resp = APIClient().get("/health/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
