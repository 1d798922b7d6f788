from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from guidebook.core.config import settings
from guidebook.core.enums import RoleName
from guidebook.core.exceptions import (
    BusinessRuleException,
    ConcurrencyConflictException,
    InvalidCapacityException,
    NoEmployeeAvailableException,
    NotFoundException,
    ValidationException,
)
from guidebook.models.booking import Booking, BookingStatus, PaymentStatus
from guidebook.schemas.booking import BookingCreate, GuestBookingCreate
from guidebook.services.booking_service import BookingService
from tests.factories.scheduling_builders import (
    add_window,
    create_activity,
    create_booking,
    create_category,
    create_employee,
    create_user,
)

DAY = date(2030, 7, 15)
MISSING_ID = "01HZZZZZZZZZZZZZZZZZZZZZZZ"


@pytest.fixture
def world(db):
    adventure = create_category(db, "Adventure", max_per_guide=10)
    ana = create_employee(db, "ana")
    add_window(db, ana, DAY, time(9, 0), time(17, 0))
    zip_line = create_activity(
        db,
        "Zip Line",
        adventure,
        duration_minutes=120,
        min_participants=2,
        max_participants=10,
        price_per_person="45.50",
        deposit_percent="30",
    )
    return {
        "ana": ana,
        "customer": create_user(db, "maria"),
        "zip_line": zip_line,
    }


def _request(world, participants=4, start=time(9, 0), **kwargs):
    return BookingCreate(
        activity_id=world["zip_line"].id,
        booking_date=DAY,
        start_time=start,
        number_of_participants=participants,
        **kwargs,
    )


class TestCreateBooking:
    def test_creates_pending_booking_with_employee_and_pricing(self, db, world):
        booking = BookingService(db).create_booking(
            _request(world, notes="Birthday"), world["customer"].id
        )

        assert booking.employee_id == world["ana"].id
        assert booking.user_id == world["customer"].id
        assert booking.end_time == time(11, 0)
        assert booking.status == BookingStatus.PENDING.value
        assert booking.payment_status == PaymentStatus.UNPAID.value
        assert booking.total_price == Decimal("182.00")
        assert booking.deposit_amount == Decimal("54.60")
        assert booking.remaining_amount == Decimal("182.00")
        assert booking.notes == "Birthday"
        assert db.query(Booking).count() == 1

    def test_guest_booking(self, db, world):
        request = GuestBookingCreate(
            **_request(world).model_dump(),
            guest_name="  Ion Popescu ",
            guest_phone="+40722000000",
        )

        booking = BookingService(db).create_guest_booking(request)

        assert booking.is_guest_booking
        assert booking.guest_name == "Ion Popescu"
        assert booking.customer_name == "Ion Popescu"

    @pytest.mark.parametrize(
        "name, phone, code",
        [(" ", "+40722000000", "GUEST_NAME_REQUIRED"), ("Ion", "", "GUEST_PHONE_REQUIRED")],
    )
    def test_guest_contact_required(self, db, world, name, phone, code):
        request = GuestBookingCreate(
            **_request(world).model_dump(), guest_name=name, guest_phone=phone
        )

        with pytest.raises(ValidationException) as exc_info:
            BookingService(db).create_guest_booking(request)
        assert exc_info.value.code == code

    @pytest.mark.parametrize("participants", [1, 11])
    def test_participants_outside_activity_bounds(self, db, world, participants):
        with pytest.raises(InvalidCapacityException):
            BookingService(db).create_booking(
                _request(world, participants=participants), world["customer"].id
            )

    def test_unknown_customer(self, db, world):
        with pytest.raises(NotFoundException):
            BookingService(db).create_booking(_request(world), MISSING_ID)

    def test_unknown_activity(self, db, world):
        request = _request(world).model_copy(update={"activity_id": MISSING_ID})
        with pytest.raises(NotFoundException):
            BookingService(db).create_booking(request, world["customer"].id)

    def test_inactive_activity(self, db, world):
        world["zip_line"].is_active = False
        db.commit()

        with pytest.raises(BusinessRuleException) as exc_info:
            BookingService(db).create_booking(_request(world), world["customer"].id)
        assert exc_info.value.code == "ACTIVITY_INACTIVE"

    def test_activity_running_past_midnight(self, db, world):
        with pytest.raises(ValidationException) as exc_info:
            BookingService(db).create_booking(
                _request(world, start=time(23, 0)), world["customer"].id
            )
        assert exc_info.value.code == "INVALID_TIME_RANGE"

    def test_no_employee_available(self, db, world):
        service = BookingService(db)
        service.create_booking(_request(world, participants=8), world["customer"].id)

        with pytest.raises(NoEmployeeAvailableException):
            service.create_booking(_request(world, participants=3), world["customer"].id)
        assert db.query(Booking).count() == 1

    def test_second_group_shares_the_guide(self, db, world):
        service = BookingService(db)
        first = service.create_booking(_request(world, participants=6), world["customer"].id)
        second = service.create_booking(_request(world, participants=4), world["customer"].id)

        assert first.employee_id == second.employee_id == world["ana"].id

    def test_records_assignment_outcome(self, db, world):
        with patch("guidebook.services.booking_service.prometheus_metrics") as metrics:
            BookingService(db).create_booking(_request(world), world["customer"].id)
        metrics.inc_employee_assignment.assert_called_once_with("assigned")


class TestCreationRace:
    def test_retries_after_losing_the_race(self, db, world):
        service = BookingService(db)
        # Pick Ana, lose the re-check, then succeed on the second attempt.
        with patch.object(
            service.capacity_checker, "can_employee_handle", side_effect=[True, False, True, True]
        ):
            booking = service.create_booking(_request(world), world["customer"].id)

        assert booking.employee_id == world["ana"].id
        assert db.query(Booking).count() == 1

    def test_gives_up_after_configured_retries(self, db, world):
        service = BookingService(db)
        attempts = settings.booking_conflict_retries + 1
        with patch.object(
            service.capacity_checker,
            "can_employee_handle",
            side_effect=[True, False] * attempts,
        ):
            with pytest.raises(ConcurrencyConflictException) as exc_info:
                service.create_booking(_request(world), world["customer"].id)

        assert exc_info.value.details == {"attempts": attempts}
        assert db.query(Booking).count() == 0


class TestStatusChanges:
    def test_confirm_sets_payment_deadline(self, db, world):
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 2)

        updated = BookingService(db).update_booking_status(booking.id, "confirmed")

        assert updated.status == BookingStatus.CONFIRMED.value
        assert updated.confirmed_at is not None
        assert updated.payment_deadline - updated.confirmed_at == timedelta(
            hours=settings.payment_deadline_hours
        )

    def test_unknown_status(self, db, world):
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 2)

        with pytest.raises(ValidationException) as exc_info:
            BookingService(db).update_booking_status(booking.id, "ARCHIVED")
        assert exc_info.value.code == "INVALID_STATUS"

    @pytest.mark.parametrize(
        "current, target",
        [
            (BookingStatus.CANCELLED, "CONFIRMED"),
            (BookingStatus.COMPLETED, "PENDING"),
            (BookingStatus.PENDING, "COMPLETED"),
        ],
    )
    def test_disallowed_transitions(self, db, world, current, target):
        booking = create_booking(
            db, world["zip_line"], world["ana"], DAY, time(9, 0), 2, status=current
        )

        with pytest.raises(BusinessRuleException) as exc_info:
            BookingService(db).update_booking_status(booking.id, target)
        assert exc_info.value.code == "INVALID_STATUS_TRANSITION"

    def test_missing_booking(self, db, world):
        with pytest.raises(NotFoundException):
            BookingService(db).update_booking_status(MISSING_ID, "CONFIRMED")


class TestReassignEmployee:
    def test_reassigns_to_free_employee(self, db, world):
        bob = create_employee(db, "bob")
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 4)

        updated = BookingService(db).reassign_employee(booking.id, bob.id)

        assert updated.employee_id == bob.id

    def test_rejects_non_employee(self, db, world):
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 4)

        with pytest.raises(ValidationException) as exc_info:
            BookingService(db).reassign_employee(booking.id, world["customer"].id)
        assert exc_info.value.code == "NOT_AN_EMPLOYEE"

    def test_rejects_disabled_employee(self, db, world):
        bob = create_employee(db, "bob", is_active=False)
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 4)

        with pytest.raises(BusinessRuleException) as exc_info:
            BookingService(db).reassign_employee(booking.id, bob.id)
        assert exc_info.value.code == "EMPLOYEE_DISABLED"
        db.expire_all()
        assert db.get(Booking, booking.id).employee_id == world["ana"].id

    def test_rejects_employee_without_capacity(self, db, world):
        bob = create_employee(db, "bob")
        create_booking(db, world["zip_line"], bob, DAY, time(10, 0), 8)
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 4)

        with pytest.raises(BusinessRuleException) as exc_info:
            BookingService(db).reassign_employee(booking.id, bob.id)
        assert exc_info.value.code == "EMPLOYEE_CAPACITY_EXCEEDED"

    def test_same_employee_is_not_counted_twice(self, db, world):
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 10)

        updated = BookingService(db).reassign_employee(booking.id, world["ana"].id)

        assert updated.employee_id == world["ana"].id

    def test_closed_booking(self, db, world):
        bob = create_employee(db, "bob")
        booking = create_booking(
            db, world["zip_line"], world["ana"], DAY, time(9, 0), 4, status=BookingStatus.CANCELLED
        )

        with pytest.raises(BusinessRuleException) as exc_info:
            BookingService(db).reassign_employee(booking.id, bob.id)
        assert exc_info.value.code == "BOOKING_CLOSED"

    def test_unknown_employee(self, db, world):
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 4)

        with pytest.raises(NotFoundException):
            BookingService(db).reassign_employee(booking.id, MISSING_ID)


class TestCancellation:
    def test_cancel_is_idempotent(self, db, world):
        booking = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0), 4)
        service = BookingService(db)

        assert service.cancel_booking(booking.id).status == BookingStatus.CANCELLED.value
        assert service.cancel_booking(booking.id).status == BookingStatus.CANCELLED.value

    def test_completed_booking_cannot_be_cancelled(self, db, world):
        booking = create_booking(
            db, world["zip_line"], world["ana"], DAY, time(9, 0), 4, status=BookingStatus.COMPLETED
        )

        with pytest.raises(BusinessRuleException):
            BookingService(db).cancel_booking(booking.id)

    def test_cancelled_booking_frees_the_guide(self, db, world):
        service = BookingService(db)
        first = service.create_booking(_request(world, participants=10), world["customer"].id)
        service.cancel_booking(first.id)

        second = service.create_booking(_request(world, participants=10), world["customer"].id)
        assert second.employee_id == world["ana"].id


class TestPayments:
    def _confirmed(self, db, world, deadline, payment_status=PaymentStatus.UNPAID):
        return create_booking(
            db,
            world["zip_line"],
            world["ana"],
            DAY,
            time(9, 0),
            4,
            status=BookingStatus.CONFIRMED,
            payment_status=payment_status,
            payment_deadline=deadline,
        )

    def test_can_accept_payment_before_deadline(self, db, world):
        now = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)
        booking = self._confirmed(db, world, now + timedelta(hours=1))

        assert BookingService(db).can_accept_payment(booking.id, now=now) is True

    def test_cannot_accept_payment_after_deadline(self, db, world):
        now = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)
        booking = self._confirmed(db, world, now - timedelta(minutes=1))

        assert BookingService(db).can_accept_payment(booking.id, now=now) is False

    def test_cannot_accept_payment_when_fully_paid_or_pending(self, db, world):
        now = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)
        paid = self._confirmed(db, world, now + timedelta(hours=1), PaymentStatus.FULLY_PAID)
        pending = create_booking(db, world["zip_line"], world["ana"], DAY, time(11, 0), 2)
        service = BookingService(db)

        assert service.can_accept_payment(paid.id, now=now) is False
        assert service.can_accept_payment(pending.id, now=now) is False

    def test_cancel_expired_bookings(self, db, world):
        now = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)
        expired = self._confirmed(db, world, now - timedelta(hours=1))
        still_open = self._confirmed(db, world, now + timedelta(hours=1))
        paid = self._confirmed(db, world, now - timedelta(hours=1), PaymentStatus.FULLY_PAID)

        cancelled = BookingService(db).cancel_expired_bookings(now=now)

        assert cancelled == 1
        db.expire_all()
        assert db.get(Booking, expired.id).status == BookingStatus.CANCELLED.value
        assert db.get(Booking, still_open.id).status == BookingStatus.CONFIRMED.value
        assert db.get(Booking, paid.id).status == BookingStatus.CONFIRMED.value


class TestCalendarLookups:
    def test_slots_for_unknown_activity(self, db, world):
        with pytest.raises(NotFoundException):
            BookingService(db).get_available_time_slots(MISSING_ID, DAY)

    def test_slots_and_dates_delegate_to_engines(self, db, world):
        service = BookingService(db)

        slots = service.get_available_time_slots(world["zip_line"].id, DAY, 2)
        with patch(
            "guidebook.services.monthly_availability_service.get_local_today",
            return_value=date(2030, 7, 1),
        ):
            dates = service.get_available_dates_for_month(world["zip_line"].id, DAY)

        assert slots[0].start_time == time(9, 0)
        assert slots[-1].end_time == time(17, 0)
        assert all(slot.available for slot in slots)
        assert dates == [DAY]


class TestBookingLists:
    def test_user_bookings_include_cancelled_and_skip_others(self, db, world):
        maria = world["customer"]
        later = create_booking(
            db, world["zip_line"], world["ana"], DAY, time(13, 0), customer=maria, guest_name=None
        )
        earlier = create_booking(
            db,
            world["zip_line"],
            world["ana"],
            DAY,
            time(9, 0),
            customer=maria,
            guest_name=None,
            status=BookingStatus.CANCELLED,
        )
        create_booking(db, world["zip_line"], world["ana"], DAY, time(11, 0))

        bookings = BookingService(db).get_user_bookings(maria.id)

        assert [b.id for b in bookings] == [earlier.id, later.id]

    def test_user_bookings_for_unknown_user(self, db, world):
        with pytest.raises(NotFoundException):
            BookingService(db).get_user_bookings(MISSING_ID)

    def test_all_bookings_with_status_filter(self, db, world):
        pending = create_booking(db, world["zip_line"], world["ana"], DAY, time(9, 0))
        confirmed = create_booking(
            db, world["zip_line"], world["ana"], DAY, time(11, 0), status=BookingStatus.CONFIRMED
        )
        service = BookingService(db)

        assert [b.id for b in service.get_all_bookings()] == [pending.id, confirmed.id]
        assert [b.id for b in service.get_all_bookings("confirmed")] == [confirmed.id]
        with pytest.raises(ValidationException):
            service.get_all_bookings("LOST")


def test_customer_role_is_not_an_employee(db, world):
    assert not world["customer"].has_role(RoleName.EMPLOYEE)
