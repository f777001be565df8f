# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timetable domain: weekly slots per class and overlap rules."""

from src.domains.timetable.service import (
    TimeSlotConflictError,
    TimetableNotFoundError,
    TimetableService,
    TimetableServiceError,
)
from src.domains.timetable.slots import day_name, format_time, intervals_overlap

__all__ = [
    "TimetableService",
    "TimetableServiceError",
    "TimetableNotFoundError",
    "TimeSlotConflictError",
    "day_name",
    "format_time",
    "intervals_overlap",
]
