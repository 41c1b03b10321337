"""API tests for violations and reports."""

from decimal import Decimal

import pytest


MANAGER = {"X-User-Role": "manager"}


@pytest.fixture
def order(api_client):
    client = api_client.post("/api/v1/clients", json={"name": "Acme Events", "phone": "0700"}).json()
    chair = api_client.post("/api/v1/products", json={
        "name": "Plastic chair", "rental_price": "10.00", "quantity_in_stock": 500,
    }).json()
    return api_client.post("/api/v1/orders", json={
        "client_id": client["id"],
        "rental_start_date": "2024-03-01",
        "rental_end_date": "2024-03-05",
        "items": [{"product_id": chair["id"], "quantity": 100}],
    }).json()


def record_violation(api_client, order_id, penalty="300", **extra):
    payload = {"order_id": order_id, "violation_type": "damaged_item", "description": "Chairs cracked",
               "penalty_amount": penalty}
    payload.update(extra)
    return api_client.post("/api/v1/violations", json=payload, headers=MANAGER)


class TestViolations:

    def test_staff_cannot_record(self, api_client, order):
        response = api_client.post("/api/v1/violations", json={
            "order_id": order["id"], "violation_type": "other", "description": "x", "penalty_amount": "1",
        })
        assert response.status_code == 403

    def test_create_update_and_list(self, api_client, order):
        created = record_violation(api_client, order["id"])
        assert created.status_code == 201
        violation = created.json()
        assert violation["created_by"] == "manager"
        assert Decimal(violation["outstanding_amount"]) == Decimal("300")

        updated = api_client.put(
            f"/api/v1/violations/{violation['id']}", json={"penalty_amount": "250"}, headers=MANAGER
        ).json()
        assert Decimal(updated["penalty_amount"]) == Decimal("250")

        assert len(api_client.get("/api/v1/violations", params={"violation_type": "damaged_item"}).json()) == 1
        assert api_client.get("/api/v1/violations", params={"violation_type": "missing_item"}).json() == []
        assert api_client.get(f"/api/v1/violations/{violation['id']}").json()["description"] == "Chairs cracked"

    def test_update_rejects_unknown_fields(self, api_client, order):
        violation = record_violation(api_client, order["id"]).json()

        response = api_client.put(f"/api/v1/violations/{violation['id']}", json={"resolved": True}, headers=MANAGER)

        assert response.status_code == 422

    def test_resolve(self, api_client, order):
        violation = record_violation(api_client, order["id"]).json()

        response = api_client.put(
            f"/api/v1/violations/{violation['id']}/resolve",
            json={"paid_amount": "200", "waived_amount": "100", "resolution_notes": "Paid in cash"},
            headers=MANAGER,
        )

        body = response.json()
        assert body["resolved"] is True
        assert body["resolved_by"] == "manager"
        assert Decimal(body["outstanding_amount"]) == Decimal("0")
        assert api_client.get("/api/v1/violations", params={"resolved": False}).json() == []

        again = api_client.put(f"/api/v1/violations/{violation['id']}/resolve", json={}, headers=MANAGER)
        assert again.status_code == 409
        assert api_client.delete(f"/api/v1/violations/{violation['id']}", headers=MANAGER).status_code == 409

    def test_resolve_over_penalty(self, api_client, order):
        violation = record_violation(api_client, order["id"], penalty="100").json()

        response = api_client.put(
            f"/api/v1/violations/{violation['id']}/resolve", json={"paid_amount": "150"}, headers=MANAGER
        )

        assert response.status_code == 400

    def test_delete(self, api_client, order):
        violation = record_violation(api_client, order["id"]).json()

        assert api_client.delete(f"/api/v1/violations/{violation['id']}", headers=MANAGER).status_code == 204
        assert api_client.get(f"/api/v1/violations/{violation['id']}").status_code == 404

    def test_unknown_order(self, api_client):
        response = record_violation(api_client, 999)
        assert response.status_code == 404
        assert response.json()["details"] == {"entity": "Order", "id": 999}


class TestReports:

    def test_overdue_returns(self, api_client, order):
        api_client.put(f"/api/v1/orders/{order['id']}/status", json={"status": "confirmed"})

        assert api_client.get("/api/v1/reports/overdue-returns", params={"as_of": "2024-03-08"}).json() == []
        report = api_client.get("/api/v1/reports/overdue-returns", params={"as_of": "2024-03-12"}).json()

        assert len(report) == 1
        line = report[0]
        assert line["order_id"] == order["id"]
        assert line["client_name"] == "Acme Events"
        assert line["expected_return_date"] == "2024-03-08"
        assert line["overdue_days"] == 4
        assert line["return_status"] == "late"
        assert Decimal(line["estimated_penalty"]) == Decimal("200")

    def test_pending_orders_are_not_overdue(self, api_client, order):
        report = api_client.get("/api/v1/reports/overdue-returns", params={"as_of": "2024-04-01"}).json()
        assert report == []

    def test_worker_remuneration(self, api_client, order, admin_headers):
        amina = api_client.post(
            "/api/v1/workers", json={"name": "Amina", "phone": "0700", "daily_rate": "800"}, headers=admin_headers
        ).json()
        brian = api_client.post("/api/v1/workers", json={"name": "Brian", "phone": "0701"}, headers=admin_headers).json()
        api_client.post(f"/api/v1/workers/{amina['id']}/attendance", json={"date": "2024-03-01", "hours_worked": "4"})
        api_client.post("/api/v1/worker-tasks", json={
            "order_id": order["id"],
            "task_type": "loading",
            "task_amount": "600",
            "completed_at": "2024-03-01T10:00:00",
            "workers": [{"worker_id": amina["id"]}, {"worker_id": brian["id"]}],
        })

        response = api_client.get(
            "/api/v1/reports/worker-remuneration", params={"start_date": "2024-03-01", "end_date": "2024-03-31"}
        )

        assert response.status_code == 200
        body = response.json()
        assert [w["worker_name"] for w in body["workers"]] == ["Amina", "Brian"]
        assert Decimal(body["workers"][0]["attendance_amount"]) == Decimal("400")
        assert Decimal(body["workers"][0]["total"]) == Decimal("700")
        assert Decimal(body["workers"][1]["task_earnings"]) == Decimal("300")
        assert Decimal(body["total_remuneration"]) == Decimal("1000")

    def test_worker_remuneration_needs_period(self, api_client):
        response = api_client.get("/api/v1/reports/worker-remuneration", params={"start_date": "2024-03-01"})
        assert response.status_code == 422
