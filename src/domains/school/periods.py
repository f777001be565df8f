# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Daily period layout for a schedule template."""

from datetime import datetime, timedelta
from typing import Any, Protocol


class PeriodSchedule(Protocol):
    """Attributes read from a schedule template or request."""

    start_time: str
    end_time: str
    period_duration: int
    include_break: bool
    break_duration: int
    break_after_period: int
    include_lunch: bool
    lunch_duration: int
    lunch_after_period: int


def _clock(value: str) -> datetime:
    return datetime.strptime(value, "%H:%M")


def calculate_periods(schedule: PeriodSchedule) -> dict[str, Any]:
    """Lay out the periods of a school day.

    Break and lunch minutes are subtracted from the day before the period
    count is taken, then inserted after their configured period numbers.

    Args:
        schedule: Start and end times ("HH:MM") with period, break and
            lunch settings.

    Returns:
        Dict with total_periods, total_hours (one decimal) and the ordered
        rows ({period, start_time, end_time, type}). Break and lunch rows
        have period None.

    Example:
        >>> calculate_periods(schedule)["total_periods"]
        6
    """
    start = _clock(schedule.start_time)
    end = _clock(schedule.end_time)
    total_minutes = int((end - start).total_seconds() // 60)

    reserved = 0
    if schedule.include_break:
        reserved += schedule.break_duration
    if schedule.include_lunch:
        reserved += schedule.lunch_duration

    available = total_minutes - reserved
    count = max(available // schedule.period_duration, 0) if schedule.period_duration > 0 else 0

    rows: list[dict[str, Any]] = []
    cursor = start

    def _slot(minutes: int, kind: str, number: int | None) -> None:
        nonlocal cursor
        slot_end = cursor + timedelta(minutes=minutes)
        rows.append({
            "period": number,
            "start_time": cursor.strftime("%H:%M"),
            "end_time": slot_end.strftime("%H:%M"),
            "type": kind,
        })
        cursor = slot_end

    for number in range(1, count + 1):
        _slot(schedule.period_duration, "period", number)
        if schedule.include_break and number == schedule.break_after_period:
            _slot(schedule.break_duration, "break", None)
        if schedule.include_lunch and number == schedule.lunch_after_period:
            _slot(schedule.lunch_duration, "lunch", None)

    return {
        "total_periods": count,
        "total_hours": round(total_minutes / 60, 1),
        "periods": rows,
    }
