from datetime import time

import pytest

from guidebook.utils.time_utils import (
    add_minutes,
    is_valid_range,
    iter_slot_starts,
    minutes_to_time,
    overlaps,
    time_to_minutes,
)


class TestOverlaps:
    def test_partial_overlap(self):
        assert overlaps(time(10, 0), time(11, 0), time(10, 30), time(11, 30))

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(time(10, 0), time(11, 0), time(11, 0), time(12, 0))
        assert not overlaps(time(11, 0), time(12, 0), time(10, 0), time(11, 0))

    def test_containment(self):
        assert overlaps(time(9, 0), time(17, 0), time(12, 0), time(13, 0))

    def test_midnight_end_counts_as_end_of_day(self):
        assert overlaps(time(22, 0), time(0, 0), time(23, 0), time(23, 30))
        assert not overlaps(time(22, 0), time(0, 0), time(8, 0), time(9, 0))


class TestMinuteConversions:
    def test_end_of_day_sentinel(self):
        assert time_to_minutes(time(0, 0), is_end_time=True) == 1440
        assert time_to_minutes(time(0, 0)) == 0
        assert minutes_to_time(1440) == time(0, 0)

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            minutes_to_time(1441)

    def test_add_minutes_past_midnight_raises(self):
        assert add_minutes(time(22, 0), 120) == time(0, 0)
        with pytest.raises(ValueError):
            add_minutes(time(23, 0), 120)


class TestIterSlotStarts:
    def test_steps_through_window(self):
        slots = list(iter_slot_starts(time(9, 0), time(11, 0), 60, 30))
        assert slots == [
            (time(9, 0), time(10, 0)),
            (time(9, 30), time(10, 30)),
            (time(10, 0), time(11, 0)),
        ]

    def test_window_shorter_than_activity(self):
        assert list(iter_slot_starts(time(9, 0), time(9, 45), 60, 30)) == []

    def test_rejects_non_positive_step(self):
        with pytest.raises(ValueError):
            list(iter_slot_starts(time(9, 0), time(10, 0), 60, 0))


@pytest.mark.parametrize(
    "start, end, valid",
    [
        (time(9, 0), time(17, 0), True),
        (time(18, 0), time(0, 0), True),
        (time(17, 0), time(9, 0), False),
        (time(9, 0), time(9, 0), False),
        (time(0, 0), time(0, 0), False),
    ],
)
def test_is_valid_range(start, end, valid):
    assert is_valid_range(start, end) is valid
