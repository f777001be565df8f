# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance request models."""

import datetime as dt

from pydantic import BaseModel, Field


class AttendanceMarkRequest(BaseModel):
    """Record a student's attendance for one day."""

    student_id: str = Field(..., description="Student")
    date: dt.date = Field(..., description="Day")
    status: str = Field(..., description="PRESENT, ABSENT, LATE or EXCUSED")
    remarks: str | None = Field(None, description="Remarks")
