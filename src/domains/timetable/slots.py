# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Time slot helpers for timetables.

Slots are half-open intervals ``[start, end)``: a slot ending at 10:00 does
not collide with one starting at 10:00.
"""

from datetime import time

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def intervals_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Check whether candidate slot ``a`` collides with existing slot ``b``.

    Three cases collide: the candidate starts inside the existing slot, the
    candidate ends inside it, or the candidate contains it.

    Example:
        >>> intervals_overlap(time(9, 30), time(10, 30), time(9), time(10))
        True
        >>> intervals_overlap(time(10), time(11), time(9), time(10))
        False
    """
    starts_inside = b_start <= a_start < b_end
    ends_inside = b_start < a_end <= b_end
    contains = a_start <= b_start and b_end <= a_end
    return starts_inside or ends_inside or contains


def day_name(day: int) -> str:
    """Weekday name for 0 (Sunday) to 6 (Saturday), "Unknown" otherwise."""
    if 0 <= day < len(DAY_NAMES):
        return DAY_NAMES[day]
    return "Unknown"


def format_time(value: time) -> str:
    """Format a time as HH:MM."""
    return value.strftime("%H:%M")
