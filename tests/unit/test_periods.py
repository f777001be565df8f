# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for daily period layout."""

from types import SimpleNamespace

from src.domains.school.periods import calculate_periods


def _schedule(**overrides) -> SimpleNamespace:
    values = {
        "start_time": "08:00",
        "end_time": "14:00",
        "period_duration": 45,
        "include_break": True,
        "break_duration": 15,
        "break_after_period": 3,
        "include_lunch": True,
        "lunch_duration": 30,
        "lunch_after_period": 5,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestCalculatePeriods:
    """Tests for calculate_periods."""

    def test_break_and_lunch_reduce_period_count(self) -> None:
        # 360 minutes - 45 reserved = 315 -> 7 periods of 45
        layout = calculate_periods(_schedule())

        assert layout["total_periods"] == 7
        assert layout["total_hours"] == 6.0

    def test_rows_are_ordered_with_break_and_lunch(self) -> None:
        rows = calculate_periods(_schedule())["periods"]

        kinds = [row["type"] for row in rows]
        assert kinds == [
            "period", "period", "period", "break",
            "period", "period", "lunch", "period", "period",
        ]
        assert rows[0] == {"period": 1, "start_time": "08:00", "end_time": "08:45", "type": "period"}
        assert rows[3] == {"period": None, "start_time": "10:15", "end_time": "10:30", "type": "break"}
        assert rows[-1]["end_time"] == "14:00"

    def test_without_break_or_lunch(self) -> None:
        layout = calculate_periods(
            _schedule(include_break=False, include_lunch=False, period_duration=60)
        )

        assert layout["total_periods"] == 6
        assert all(row["type"] == "period" for row in layout["periods"])

    def test_total_hours_rounded_to_one_decimal(self) -> None:
        layout = calculate_periods(_schedule(end_time="13:20"))

        assert layout["total_hours"] == 5.3

    def test_end_before_start_yields_no_periods(self) -> None:
        layout = calculate_periods(_schedule(start_time="10:00", end_time="09:00"))

        assert layout["total_periods"] == 0
        assert layout["periods"] == []
