"""Tests for the HTTP API."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from parking_tracker.api import init_router, router
from parking_tracker.service import ParkingService
from parking_tracker.state import ParkingStore
from parking_tracker.storage import StateStorage

T0 = datetime(2025, 9, 23, 17, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def client(tmp_path):
    service = ParkingService(ParkingStore(slot_count=4))
    init_router(service, storage=StateStorage(tmp_path / "state.json"), facility_name="Test Lot")

    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    return TestClient(app)


def assign(client, slot_id, car_number, entry_time=T0):
    return client.post(
        f"/api/v1/slots/{slot_id}/assign",
        json={"carNumber": car_number, "entryTime": entry_time.isoformat()},
    )


class TestStatus:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["storageAvailable"] is True

    def test_initial_status(self, client):
        body = client.get("/api/v1/status").json()
        assert body["facility"] == "Test Lot"
        assert body["totalSlots"] == 4
        assert body["available"] == 4
        assert body["regIndex"] == 1
        assert [s["status"] for s in body["slots"]] == ["available"] * 4

    def test_unknown_slot_is_404(self, client):
        assert client.get("/api/v1/slots/42").status_code == 404

    def test_metrics(self, client):
        response = client.get("/api/v1/metrics")
        assert response.status_code == 200
        assert "parking_slots_total" in response.text


class TestParkingFlow:
    def test_assign_car(self, client):
        response = assign(client, 1, "mh12ab1234")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "occupied"
        assert body["carNumber"] == "MH12AB1234"
        assert body["billing"]["amount"] > 0

    def test_assign_errors(self, client):
        assert assign(client, 1, "INVALID").status_code == 400
        assert assign(client, 9, "MH12AB1234").status_code == 404

        assign(client, 1, "MH12AB1234")
        assert assign(client, 1, "KA01CD5678").status_code == 409
        assert assign(client, 2, "MH12AB1234").status_code == 409

    def test_find_car(self, client):
        assign(client, 3, "MH12AB1234")
        response = client.get("/api/v1/cars/mh12ab1234")
        assert response.status_code == 200
        assert response.json()["id"] == 3

        assert client.get("/api/v1/cars/KA01CD5678").status_code == 404

    def test_preview_and_close(self, client):
        assign(client, 1, "MH12AB1234")
        exit_time = T0 + timedelta(seconds=45)

        preview = client.post(
            "/api/v1/billing/preview",
            json={"carNumber": "MH12AB1234", "exitTime": exit_time.isoformat()},
        )
        assert preview.status_code == 200
        receipt = preview.json()
        assert receipt["duration"] == 45
        assert receipt["amount"] == 7
        assert receipt["status"] == "generated"

        closed = client.post("/api/v1/billing/close", json=receipt)
        assert closed.status_code == 200
        assert closed.json()["status"] == "completed"

        status = client.get("/api/v1/status").json()
        assert status["totalRevenue"] == 7
        assert status["regIndex"] == 2
        assert status["slots"][0]["status"] == "available"

        assert client.post("/api/v1/billing/close", json=receipt).status_code == 409

    def test_naive_entry_time(self, client):
        response = client.post(
            "/api/v1/slots/1/assign",
            json={"carNumber": "MH12AB1234", "entryTime": "2025-09-23T17:00:00"},
        )
        assert response.status_code == 200

        preview = client.post("/api/v1/billing/preview", json={"carNumber": "MH12AB1234"})
        assert preview.status_code == 200
        assert preview.json()["amount"] >= 5

        preview = client.post(
            "/api/v1/billing/preview",
            json={"carNumber": "MH12AB1234", "exitTime": "2025-09-23T17:00:45"},
        )
        assert preview.status_code == 200
        assert preview.json()["amount"] == 7

    def test_close_rejects_edited_amount(self, client):
        assign(client, 1, "MH12AB1234")
        receipt = client.post(
            "/api/v1/billing/preview",
            json={"carNumber": "MH12AB1234", "exitTime": (T0 + timedelta(seconds=45)).isoformat()},
        ).json()
        receipt["amount"] = 0.01

        assert client.post("/api/v1/billing/close", json=receipt).status_code == 400

        status = client.get("/api/v1/status").json()
        assert status["totalRevenue"] == 0
        assert status["slots"][0]["status"] == "occupied"

    def test_receipt_text(self, client):
        assign(client, 1, "MH12AB1234")
        receipt = client.post(
            "/api/v1/billing/preview",
            json={"carNumber": "MH12AB1234", "exitTime": (T0 + timedelta(seconds=45)).isoformat()},
        ).json()

        response = client.post("/api/v1/billing/receipt-text", json=receipt)
        assert response.status_code == 200
        assert "PARKING RECEIPT" in response.text
        assert receipt["id"] in response.headers["content-disposition"]

    def test_summary_and_reset(self, client):
        assign(client, 1, "MH12AB1234", datetime.now(timezone.utc))
        summary = client.get("/api/v1/billing/summary").json()
        assert summary["occupied"] == 1
        assert summary["potentialRevenue"] >= 5
        assert summary["formattedTotalRevenue"] == "$0.00"

        body = client.post("/api/v1/reset").json()
        assert body["available"] == 4
        assert body["totalRevenue"] == 0
