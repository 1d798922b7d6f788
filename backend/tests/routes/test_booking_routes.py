from datetime import date, time

import pytest

from guidebook.models.booking import BookingStatus
from tests.factories.scheduling_builders import (
    add_window,
    create_activity,
    create_booking,
    create_category,
    create_employee,
    create_user,
)

DAY = date(2030, 7, 15)
BASE = "/api/v1/bookings"


@pytest.fixture
def world(db):
    adventure = create_category(db, "Adventure", max_per_guide=10)
    ana = create_employee(db, "ana")
    add_window(db, ana, DAY, time(9, 0), time(12, 0))
    return {
        "ana": ana,
        "customer": create_user(db, "maria", last_name="Stan"),
        "zip_line": create_activity(
            db, "Zip Line", adventure, duration_minutes=120, min_participants=2,
            price_per_person="45.50", deposit_percent="30",
        ),
    }


def _payload(world, **overrides):
    payload = {
        "activity_id": world["zip_line"].id,
        "booking_date": DAY.isoformat(),
        "start_time": "09:00",
        "number_of_participants": 4,
    }
    payload.update(overrides)
    return payload


class TestCalendarEndpoints:
    def test_available_slots(self, client, world):
        response = client.get(
            f"{BASE}/available-slots",
            params={"activity_id": world["zip_line"].id, "date": DAY.isoformat(), "participants": 2},
        )

        assert response.status_code == 200
        assert response.json() == [
            {"start_time": "09:00:00", "end_time": "11:00:00", "available": True},
            {"start_time": "09:30:00", "end_time": "11:30:00", "available": True},
            {"start_time": "10:00:00", "end_time": "12:00:00", "available": True},
        ]

    def test_available_dates(self, client, world):
        response = client.get(
            f"{BASE}/available-dates",
            params={"activity_id": world["zip_line"].id, "date": "2030-07-01"},
        )

        assert response.status_code == 200
        assert response.json() == {"activity_id": world["zip_line"].id, "dates": ["2030-07-15"]}

    def test_unknown_activity_is_a_problem_document(self, client, world):
        response = client.get(
            f"{BASE}/available-slots",
            params={"activity_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ", "date": DAY.isoformat()},
        )

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "ACTIVITY_NOT_FOUND"
        assert body["status"] == 404
        assert body["instance"] == f"{BASE}/available-slots"


class TestCreate:
    def test_create_booking(self, client, world):
        response = client.post(
            BASE, json=_payload(world), headers={"X-User-Id": world["customer"].id}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["employee_id"] == world["ana"].id
        assert body["customer_name"] == "Maria Stan"
        assert body["is_guest_booking"] is False
        assert body["end_time"] == "11:00:00"
        assert body["status"] == "PENDING"
        assert body["total_price"] == 182.0
        assert body["deposit_amount"] == 54.6

    def test_missing_user_header(self, client, world):
        response = client.post(BASE, json=_payload(world))

        assert response.status_code == 422

    def test_unknown_fields_are_rejected(self, client, world):
        response = client.post(
            BASE,
            json=_payload(world, employee_id=world["ana"].id),
            headers={"X-User-Id": world["customer"].id},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_datetime_booking_date_is_rejected(self, client, world):
        response = client.post(
            BASE,
            json=_payload(world, booking_date="2030-07-15T09:00:00"),
            headers={"X-User-Id": world["customer"].id},
        )

        assert response.status_code == 422

    def test_invalid_capacity(self, client, world):
        response = client.post(
            BASE,
            json=_payload(world, number_of_participants=1),
            headers={"X-User-Id": world["customer"].id},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_CAPACITY"
        assert body["errors"] == {"requested": 1, "min": 2, "max": 10}

    def test_no_employee_available(self, client, world):
        headers = {"X-User-Id": world["customer"].id}
        assert client.post(BASE, json=_payload(world, number_of_participants=9), headers=headers).status_code == 201

        response = client.post(BASE, json=_payload(world, number_of_participants=2), headers=headers)

        assert response.status_code == 422
        assert response.json()["code"] == "NO_EMPLOYEE_AVAILABLE"

    def test_create_guest_booking(self, client, world):
        response = client.post(
            f"{BASE}/guest",
            json=_payload(world, guest_name="Ion Popescu", guest_phone="+40722000000"),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["is_guest_booking"] is True
        assert body["customer_name"] == "Ion Popescu"
        assert body["user_id"] is None


class TestLifecycle:
    @pytest.fixture
    def booking(self, db, world):
        return create_booking(
            db, world["zip_line"], world["ana"], DAY, time(9, 0), 4, customer=world["customer"]
        )

    def test_get_booking(self, client, booking):
        response = client.get(f"{BASE}/{booking.id}")

        assert response.status_code == 200
        assert response.json()["id"] == booking.id

    def test_get_missing_booking(self, client, world):
        response = client.get(f"{BASE}/01HZZZZZZZZZZZZZZZZZZZZZZZ")

        assert response.status_code == 404
        assert response.json()["code"] == "BOOKING_NOT_FOUND"

    def test_confirm_then_can_pay(self, client, booking):
        response = client.put(f"{BASE}/{booking.id}/status", json={"status": "CONFIRMED"})

        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"
        assert response.json()["payment_deadline"] is not None

        can_pay = client.get(f"{BASE}/{booking.id}/can-pay")
        assert can_pay.json() == {"booking_id": booking.id, "can_accept_payment": True}

    def test_invalid_status(self, client, booking):
        response = client.put(f"{BASE}/{booking.id}/status", json={"status": "LOST"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATUS"

    def test_invalid_transition(self, client, booking):
        response = client.put(f"{BASE}/{booking.id}/status", json={"status": "COMPLETED"})

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_STATUS_TRANSITION"

    def test_reassign_employee(self, client, db, booking):
        bob = create_employee(db, "bob")

        response = client.put(f"{BASE}/{booking.id}/employee", json={"employee_id": bob.id})

        assert response.status_code == 200
        assert response.json()["employee_id"] == bob.id

    def test_cancel_booking(self, client, booking):
        response = client.delete(f"{BASE}/{booking.id}")

        assert response.status_code == 200
        assert response.json()["status"] == BookingStatus.CANCELLED.value
        assert client.get(f"{BASE}/{booking.id}/can-pay").json()["can_accept_payment"] is False

    def test_my_bookings(self, client, db, world, booking):
        create_booking(db, world["zip_line"], world["ana"], DAY, time(10, 0), 2)

        response = client.get(f"{BASE}/my-bookings", headers={"X-User-Id": world["customer"].id})

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [booking.id]

    def test_list_bookings_by_status(self, client, booking):
        assert [b["id"] for b in client.get(BASE).json()] == [booking.id]

        response = client.get(BASE, params={"status": "CONFIRMED"})
        assert response.status_code == 200
        assert response.json() == []
