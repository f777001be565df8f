# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance domain: daily student attendance."""

from src.domains.attendance.service import (
    AttendanceService,
    AttendanceServiceError,
    AttendanceStudentNotFoundError,
)

__all__ = [
    "AttendanceService",
    "AttendanceServiceError",
    "AttendanceStudentNotFoundError",
]
