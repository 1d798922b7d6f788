from datetime import date, time

import pytest

from guidebook.services.slot_service import SlotService, TimeSlot, resolve_participant_count
from tests.factories.scheduling_builders import (
    add_window,
    create_activity,
    create_booking,
    create_category,
    create_employee,
)

DAY = date(2030, 7, 15)


@pytest.fixture
def setup(db):
    adventure = create_category(db, "Adventure", max_per_guide=10)
    water = create_category(db, "Water", max_per_guide=10)
    ana = create_employee(db, "ana")
    add_window(db, ana, DAY, time(9, 0), time(11, 0))
    return {
        "ana": ana,
        "zip_line": create_activity(db, "Zip Line", adventure, min_participants=2),
        "rafting": create_activity(db, "Rafting", water),
    }


def test_enumerates_slots_on_step_grid(db, setup):
    slots = SlotService(db, step_minutes=30).available_slots(setup["zip_line"], DAY)

    assert slots == [
        TimeSlot(time(9, 0), time(10, 0), True),
        TimeSlot(time(9, 30), time(10, 30), True),
        TimeSlot(time(10, 0), time(11, 0), True),
    ]


def test_marks_slots_blocked_by_incompatible_booking(db, setup):
    create_booking(db, setup["rafting"], setup["ana"], DAY, time(9, 0), participants=2)

    slots = SlotService(db, step_minutes=30).available_slots(setup["zip_line"], DAY)

    assert [(s.start_time, s.available) for s in slots] == [
        (time(9, 0), False),
        (time(9, 30), False),
        (time(10, 0), True),
    ]


def test_headcount_decides_shared_slots(db, setup):
    create_booking(db, setup["zip_line"], setup["ana"], DAY, time(9, 0), participants=6)
    service = SlotService(db, step_minutes=30)

    fits = service.available_slots(setup["zip_line"], DAY, participant_count=4)
    too_many = service.available_slots(setup["zip_line"], DAY, participant_count=5)

    assert fits[0].available is True
    assert too_many[0].available is False
    assert too_many[-1].available is True


def test_slot_enumeration_is_idempotent(db, setup):
    create_booking(db, setup["rafting"], setup["ana"], DAY, time(9, 30), participants=2)
    service = SlotService(db, step_minutes=30)

    first = service.available_slots(setup["zip_line"], DAY, 3)
    second = service.available_slots(setup["zip_line"], DAY, 3)

    assert first == second


def test_overlapping_windows_yield_distinct_slots(db, setup):
    bob = create_employee(db, "bob")
    add_window(db, bob, DAY, time(9, 0), time(10, 0))

    slots = SlotService(db, step_minutes=30).available_slots(setup["zip_line"], DAY)

    assert len(slots) == 3
    assert len({(s.start_time, s.end_time) for s in slots}) == 3


def test_no_windows_means_no_slots(db, setup):
    assert SlotService(db).available_slots(setup["zip_line"], date(2030, 7, 16)) == []


def test_unavailable_windows_are_ignored(db, setup):
    other_day = date(2030, 7, 17)
    add_window(db, setup["ana"], other_day, time(9, 0), time(12, 0), is_available=False)

    assert SlotService(db).available_slots(setup["zip_line"], other_day) == []


def test_resolve_participant_count(db, setup):
    activity = setup["zip_line"]
    assert resolve_participant_count(activity, None) == 2
    assert resolve_participant_count(activity, 0) == 2
    assert resolve_participant_count(activity, 5) == 5
