#!/usr/bin/env python3
"""Tests for the Flask JSON API."""
import pytest
from servicetrack import InMemoryGateway, ServiceRecord
from servicetrack.config import Settings
from web.app import create_app


@pytest.fixture
def gateway():
    return InMemoryGateway(
        [
            ServiceRecord(1, 1, "2000-01-01", "exterior-paint", "South wall", 350000, "completed"),
            ServiceRecord(2, 2, "2024-12-10", "roof-repair", "Typhoon damage", 85000, "pending"),
            ServiceRecord(3, 2, "2001-03-01", "gutter", None, 12000, "completed"),
        ]
    )


@pytest.fixture
def client(gateway):
    app = create_app(gateway=gateway, settings=Settings(environ={}))
    app.config["TESTING"] = True
    return app.test_client()


class TestListRecords:
    """Tests for GET /api/records."""

    def test_default_newest_first(self, client):
        response = client.get("/api/records")
        assert response.status_code == 200
        body = response.get_json()
        assert body["success"]
        assert [r["recordId"] for r in body["data"]] == [2, 3, 1]

    def test_filters_and_sort(self, client):
        response = client.get("/api/records?customer_id=2&sort=amount&direction=asc")
        assert [r["recordId"] for r in response.get_json()["data"]] == [3, 2]

    def test_amount_range(self, client):
        response = client.get("/api/records?min_amount=50000&max_amount=100000")
        assert [r["recordId"] for r in response.get_json()["data"]] == [2]

    def test_bad_sort_field(self, client):
        response = client.get("/api/records?sort=colour")
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"

    def test_storage_failure(self):
        class BrokenGateway(InMemoryGateway):
            async def fetch(self, record_filter=None):
                raise ConnectionError("unreachable")

        app = create_app(gateway=BrokenGateway(), settings=Settings(environ={}))
        response = app.test_client().get("/api/records")
        assert response.status_code == 503
        assert response.get_json()["code"] == "NETWORK_ERROR"


class TestMutations:
    """Tests for POST, PUT and DELETE."""

    def test_create(self, client, gateway):
        response = client.post(
            "/api/records",
            json={"customerId": 3, "serviceDate": "2024-11-28", "serviceType": "plumbing", "amount": 45000},
        )
        assert response.status_code == 201
        data = response.get_json()["data"]
        assert data["recordId"] == 4
        assert data["status"] == "completed"
        assert gateway.calls.count("create") == 1

    def test_create_invalid(self, client, gateway):
        response = client.post("/api/records", json={"amount": -1})
        assert response.status_code == 400
        body = response.get_json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "Customer is required" in body["details"]
        assert "create" not in gateway.calls

    def test_update(self, client):
        response = client.put("/api/records/2", json={"status": "completed"})
        assert response.status_code == 200
        assert response.get_json()["data"]["status"] == "completed"

    def test_update_missing(self, client):
        response = client.put("/api/records/99", json={"status": "completed"})
        assert response.status_code == 404
        assert response.get_json()["code"] == "NOT_FOUND"

    def test_delete(self, client):
        assert client.delete("/api/records/1").status_code == 200
        ids = [r["recordId"] for r in client.get("/api/records").get_json()["data"]]
        assert ids == [2, 3]

    def test_delete_missing(self, client):
        assert client.delete("/api/records/99").status_code == 404


class TestMaintenance:
    """Tests for GET /api/maintenance."""

    def test_all_predictions_ranked(self, client):
        data = client.get("/api/maintenance").get_json()["data"]
        assert [s["recordId"] for s in data] == [1, 3, 2]
        assert data[0]["urgencyLevel"] == "overdue"
        assert data[0]["standardCycleYears"] == 10

    def test_customer_scope(self, client):
        data = client.get("/api/maintenance?customer_id=2").get_json()["data"]
        assert {s["customerId"] for s in data} == {2}

    def test_due_only(self, client):
        data = client.get("/api/maintenance?due=true").get_json()["data"]
        assert [s["recordId"] for s in data] == [1, 3]

    def test_category(self, client):
        data = client.get("/api/maintenance?category=gutter").get_json()["data"]
        assert [s["recordId"] for s in data] == [3]


class TestMalformedBodies:
    """Bad JSON field types come back as validation errors."""

    def test_numeric_service_type(self, client, gateway):
        response = client.post(
            "/api/records",
            json={"customerId": 1, "serviceDate": "2024-11-28", "serviceType": 123},
        )
        assert response.status_code == 400
        body = response.get_json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"] == ["Service type must be text, got 123"]
        assert "create" not in gateway.calls

    def test_blank_date_on_update(self, client):
        response = client.put("/api/records/1", json={"serviceDate": ""})
        assert response.status_code == 400
