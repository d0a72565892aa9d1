"""
Integration tests for rescheduling and priority routes.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from washplanner.api.app import app
from washplanner.models.customers import Weekday

client = TestClient(app)

ABSENT_DATE = "2025-10-02"


@pytest.mark.integration
def test_suggest_next_slot(make_customer, make_appointment):
    absent = make_appointment(5, 1, ABSENT_DATE, "07:00")
    
    response = client.post(
        "/reschedules/suggest",
        json={
            "customer": make_customer().model_dump(mode="json"),
            "after_date": ABSENT_DATE,
            "appointments": [absent.model_dump(mode="json")],
        },
    )
    
    assert response.status_code == 200
    assert response.json() == {
        "found": True,
        "suggestion": {"date": "2025-10-05", "time": "07:00", "period": "morning"},
    }


@pytest.mark.integration
def test_suggest_next_slot_skips_days_inside_gap(make_customer):
    customer = make_customer(preferred_days=(Weekday.FRIDAY,))

    response = client.post(
        "/reschedules/suggest",
        json={"customer": customer.model_dump(mode="json"), "after_date": "2025-10-02"},
    )

    # Friday Oct 3 is only one day out
    assert response.json()["found"] is True
    assert response.json()["suggestion"]["date"] == "2025-10-10"


@pytest.mark.integration
def test_suggest_next_slot_not_found(make_customer, make_appointment):
    customer = make_customer(preferred_days=(Weekday.FRIDAY,), preferred_period="morning")
    fridays = ["2025-10-10", "2025-10-17", "2025-10-24", "2025-10-31"]
    booked = [
        make_appointment(100 * (n + 1) + i, 1000 + 100 * n + i, friday, time)
        for n, friday in enumerate(fridays)
        for i, time in enumerate(["07:00", "07:30", "08:00", "08:30", "09:00", "09:30",
                                  "10:00", "10:30", "11:00", "11:30", "12:00"])
    ]

    response = client.post(
        "/reschedules/suggest",
        json={
            "customer": customer.model_dump(mode="json"),
            "after_date": "2025-10-02",
            "appointments": [a.model_dump(mode="json") for a in booked],
        },
    )

    assert response.json() == {"found": False, "suggestion": None}


@pytest.mark.integration
def test_auto_reschedule(make_customer, make_appointment):
    absent = make_appointment(5, 1, ABSENT_DATE, "07:00")
    
    response = client.post(
        "/reschedules/auto",
        json={
            "request": {"appointment_id": 5, "reason": "Customer travelling"},
            "customer": make_customer().model_dump(mode="json"),
            "appointments": [absent.model_dump(mode="json")],
        },
    )
    
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["new_appointment"]["id"] == 6
    assert data["new_appointment"]["original_date"] == ABSENT_DATE
    assert data["new_appointment"]["reschedule_reason"] == "Customer travelling"
    assert data["new_appointment"]["rescheduled_by"] == "system"


@pytest.mark.integration
def test_auto_reschedule_unknown_appointment(make_customer):
    response = client.post(
        "/reschedules/auto",
        json={"request": {"appointment_id": 42}, "customer": make_customer().model_dump(mode="json")},
    )
    
    assert response.status_code == 404
    assert response.json()["error"] == "Appointment with id '42' not found"


@pytest.mark.integration
def test_auto_reschedule_with_anchor_only(make_customer):
    response = client.post(
        "/reschedules/auto",
        json={
            "request": {"appointment_id": 42, "new_date": ABSENT_DATE},
            "customer": make_customer().model_dump(mode="json"),
        },
    )
    
    data = response.json()
    assert data["success"] is True
    assert data["new_appointment"]["date"] == "2025-10-05"
    assert data["new_appointment"]["original_date"] is None


@pytest.mark.integration
def test_auto_reschedule_other_customers_appointment(make_customer, make_appointment):
    absent = make_appointment(5, 2, ABSENT_DATE, "07:00")
    
    response = client.post(
        "/reschedules/auto",
        json={
            "request": {"appointment_id": 5},
            "customer": make_customer(1).model_dump(mode="json"),
            "appointments": [absent.model_dump(mode="json")],
        },
    )
    
    assert response.status_code == 400


@pytest.mark.integration
def test_auto_reschedule_conflict_returns_409(make_customer, make_appointment):
    absent = make_appointment(5, 1, ABSENT_DATE, "07:00")
    same_day = make_appointment(8, 1, "2025-10-05", "09:00")

    response = client.post(
        "/reschedules/auto",
        json={
            "request": {"appointment_id": 5},
            "customer": make_customer().model_dump(mode="json"),
            "appointments": [absent.model_dump(mode="json"), same_day.model_dump(mode="json")],
        },
    )

    assert response.status_code == 409
    data = response.json()
    assert data["error"] == "Could not reschedule because of time or capacity conflicts"
    assert data["details"]["conflicts"] == ["Customer already has an appointment on 2025-10-05"]


@pytest.mark.integration
def test_bulk_reschedule(make_customer, make_appointment):
    appointments = [
        make_appointment(1, 1, ABSENT_DATE, "07:00"),
        make_appointment(2, 2, ABSENT_DATE, "07:30"),
    ]
    
    response = client.post(
        "/reschedules/bulk",
        json={
            "appointment_ids": [1, 2],
            "customers": [make_customer(1).model_dump(mode="json"), make_customer(2).model_dump(mode="json")],
            "appointments": [a.model_dump(mode="json") for a in appointments],
        },
    )
    
    assert response.status_code == 200
    items = response.json()
    assert [item["result"]["new_appointment"]["time"] for item in items] == ["07:00", "07:30"]


@pytest.mark.integration
def test_bulk_reschedule_unknown_id(make_customer):
    response = client.post(
        "/reschedules/bulk",
        json={"appointment_ids": [7], "customers": [make_customer().model_dump(mode="json")]},
    )
    
    assert response.status_code == 404


@pytest.mark.integration
def test_priority_score(make_customer):
    customer = make_customer(is_vip=True, join_date=date(2025, 10, 15))
    
    response = client.post(
        "/priority/score",
        json={
            "customer": customer.model_dump(mode="json"),
            "waiting_since": "2025-10-15T09:00:00Z",
            "now": "2025-10-15T12:00:00Z",
        },
    )
    
    assert response.json() == {"customer_id": 1, "score": 53}


@pytest.mark.integration
def test_wait_list_ordering(make_customer):
    customers = [
        make_customer(1, join_date=date(2025, 10, 15)),
        make_customer(2, join_date=date(2025, 10, 15), is_vip=True),
    ]
    
    response = client.post(
        "/priority/wait-list",
        json={
            "entries": [
                {"id": 10, "customer_id": 1, "requested_at": "2025-10-15T10:00:00Z"},
                {"id": 11, "customer_id": 2, "requested_at": "2025-10-15T10:00:00Z"},
            ],
            "customers": [c.model_dump(mode="json") for c in customers],
            "now": "2025-10-15T12:00:00Z",
        },
    )
    
    entries = response.json()
    assert [e["id"] for e in entries] == [11, 10]
    assert [e["priority_score"] for e in entries] == [52, 2]


@pytest.mark.integration
def test_compensation():
    assert client.get("/priority/compensation", params={"missed_count": 1}).json() == {
        "missed_count": 1,
        "compensation": None,
    }
    assert client.get("/priority/compensation", params={"missed_count": 3}).json()["compensation"] == {
        "type": "free_wash",
        "count": 1,
    }
