"""Integration tests for the daily closures endpoints"""

import uuid
import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


def close_day(client: TestClient, closure_date: str, collected: float, expenses=None, manager_id="manager-1"):
    return client.post(
        "/v1/daily-closures",
        json={
            "manager_id": manager_id,
            "closure_date": closure_date,
            "total_collected": collected,
            "expenses": expenses or [],
            "notes": "Route closed",
        },
    )


def test_create_daily_closure(client: TestClient):
    response = close_day(
        client,
        "2025-03-15",
        26800,
        [
            {"category": "FUEL", "amount": 1500, "description": "Route north"},
            {"category": "FUEL", "amount": 500},
            {"category": "REPAIRS", "amount": 2000},
        ],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["manager_id"] == "manager-1"
    assert data["closure_date"] == "2025-03-15"
    assert data["total_collected"] == 26800
    assert data["total_expenses"] == 4000
    assert data["net_amount"] == 22800
    assert data["notes"] == "Route closed"
    assert [e["category"] for e in data["expenses"]] == ["FUEL", "FUEL", "REPAIRS"]
    assert data["expenses_by_category"] == {"FUEL": 2000, "REPAIRS": 2000}

    fetched = client.get(f"/v1/daily-closures/{data['closure_id']}")
    assert fetched.status_code == 200
    assert fetched.json() == data


def test_create_daily_closure_twice_conflicts(client: TestClient):
    assert close_day(client, "2025-03-15", 1000).status_code == 201
    assert close_day(client, "2025-03-15", 2000).status_code == 409
    # Another lender may close the same date
    assert close_day(client, "2025-03-15", 2000, manager_id="manager-2").status_code == 201


@pytest.mark.parametrize(
    "closure_date,collected,expenses",
    [
        ("2025-03-21", 1000, []),
        ("2025-03-15", -1, []),
        ("2025-03-15", 1000, [{"category": "FUEL", "amount": 0}]),
        ("2025-03-15", 1000, [{"category": "TOLLS", "amount": 10}]),
    ],
)
def test_create_daily_closure_rejects_invalid_input(client: TestClient, closure_date, collected, expenses):
    response = close_day(client, closure_date, collected, expenses)
    assert response.status_code == 422


def test_get_daily_closure_errors(client: TestClient):
    assert client.get("/v1/daily-closures/not-a-uuid").status_code == 400
    assert client.get(f"/v1/daily-closures/{uuid.uuid4()}").status_code == 404


def test_list_daily_closures_with_summary(client: TestClient):
    close_day(client, "2025-03-10", 10000, [{"category": "CONSUMPTION", "amount": 1000}])
    close_day(client, "2025-03-12", 5000)
    close_day(client, "2025-03-18", 3000, [{"category": "OTHER", "amount": 4000}])
    close_day(client, "2025-03-12", 9999, manager_id="manager-2")

    response = client.get(
        "/v1/daily-closures",
        params={"manager_id": "manager-1", "start_date": "2025-03-11", "end_date": "2025-03-18"},
    )

    assert response.status_code == 200
    data = response.json()
    assert [c["closure_date"] for c in data["closures"]] == ["2025-03-18", "2025-03-12"]
    assert data["summary"] == {
        "closure_count": 2,
        "total_collected": 8000,
        "total_expenses": 4000,
        "net_amount": 4000,
        "average_daily": 2000,
    }

    everything = client.get("/v1/daily-closures", params={"manager_id": "manager-1"}).json()
    assert everything["summary"]["closure_count"] == 3


def test_list_daily_closures_rejects_inverted_range(client: TestClient):
    response = client.get(
        "/v1/daily-closures",
        params={"manager_id": "manager-1", "start_date": "2025-03-18", "end_date": "2025-03-11"},
    )
    assert response.status_code == 400


def test_closure_by_date_before_closing(client: TestClient, reference_loan: dict):
    """Second installment of the reference loan falls due 2025-03-15 and is unpaid"""
    response = client.get("/v1/daily-closures/date/2025-03-15", params={"manager_id": "manager-1"})

    assert response.status_code == 200
    data = response.json()
    assert data["closure"] is None
    assert data["collection_gap"] is None
    assert data["expected_amount"] == 26800
    (due,) = data["installments"]
    assert due["loan_id"] == reference_loan["loan_id"]
    assert due["tracking_code"] == reference_loan["tracking_code"]
    assert due["installment_number"] == 2
    assert due["status"] == "OVERDUE"
    assert due["days_overdue"] == 5
    assert due["outstanding_amount"] == 26800


def test_closure_by_date_reports_collection_gap(client: TestClient, reference_loan: dict):
    loan_id = reference_loan["loan_id"]
    client.post(
        f"/v1/loans/{loan_id}/installments/2/payments",
        json={"amount": 20000, "paid_on": "2025-03-15"},
    )
    close_day(client, "2025-03-15", 20000, [{"category": "FUEL", "amount": 1000}])

    data = client.get("/v1/daily-closures/date/2025-03-15", params={"manager_id": "manager-1"}).json()

    assert data["closure"]["net_amount"] == 19000
    assert data["expected_amount"] == 26800
    assert data["collection_gap"] == 6800
    assert data["installments"][0]["paid_amount"] == 20000
    assert data["installments"][0]["outstanding_amount"] == 6800


def test_installments_due_on_date(client: TestClient, reference_loan: dict):
    response = client.get("/v1/daily-closures/installments/2025-04-15", params={"manager_id": "manager-1"})

    assert response.status_code == 200
    data = response.json()
    assert data["expected_amount"] == 26800
    assert [i["installment_number"] for i in data["installments"]] == [3]
    assert data["installments"][0]["status"] == "PENDING"

    other = client.get("/v1/daily-closures/installments/2025-04-15", params={"manager_id": "manager-2"})
    assert other.json()["installments"] == []
    assert other.json()["expected_amount"] == 0


def test_daily_closure_metrics(client: TestClient):
    close_day(client, "2025-03-15", 1000, [{"category": "FUEL", "amount": 100}])
    text = client.get("/metrics").text
    assert "loan_servicing_daily_closures_total" in text
    assert "loan_servicing_closure_expenses_amount_total" in text
