from __future__ import annotations

from datetime import time
from typing import Iterator, Tuple

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(t: time, *, is_end_time: bool = False) -> int:
    """
    Convert time to minutes since midnight.

    Args:
        t: Time object.
        is_end_time: If True, treat time(0, 0) as 1440 (end of day).

    Returns:
        Minutes since midnight (0-1440).
    """
    minutes = t.hour * 60 + t.minute
    if is_end_time and minutes == 0:
        return MINUTES_PER_DAY
    return minutes


def minutes_to_time(minutes: int) -> time:
    """
    Convert minutes since midnight back to a time.

    1440 maps to time(0, 0), the end-of-day sentinel.
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    if minutes == MINUTES_PER_DAY:
        return time(0, 0)
    return time(minutes // 60, minutes % 60)


def add_minutes(t: time, minutes: int) -> time:
    """Add minutes to a local time without crossing past end of day."""
    return minutes_to_time(time_to_minutes(t) + minutes)


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """
    Half-open interval overlap: [start_a, end_a) vs [start_b, end_b).

    Touching endpoints do not overlap. An end of 00:00 means midnight at the
    end of the day.
    """
    a0 = time_to_minutes(start_a)
    a1 = time_to_minutes(end_a, is_end_time=True)
    b0 = time_to_minutes(start_b)
    b1 = time_to_minutes(end_b, is_end_time=True)
    return a0 < b1 and b0 < a1


def iter_slot_starts(
    window_start: time,
    window_end: time,
    duration_minutes: int,
    step_minutes: int,
) -> Iterator[Tuple[time, time]]:
    """
    Yield candidate (start, end) pairs inside a work window.

    Starts at the window start and steps by ``step_minutes`` while
    ``start + duration <= window_end``; a slot ending exactly at the window
    end is allowed.
    """
    if duration_minutes <= 0 or step_minutes <= 0:
        raise ValueError("duration and step must be positive")

    current = time_to_minutes(window_start)
    limit = time_to_minutes(window_end, is_end_time=True)
    while current + duration_minutes <= limit:
        yield minutes_to_time(current), minutes_to_time(current + duration_minutes)
        current += step_minutes


def is_valid_range(start: time, end: time) -> bool:
    """
    True if [start, end) is a non-empty interval within one day.

    An end of 00:00 is midnight at the end of the day, so 18:00-00:00 is
    valid; 00:00-00:00 is not.
    """
    if start == end:
        return False
    return time_to_minutes(start) < time_to_minutes(end, is_end_time=True)
