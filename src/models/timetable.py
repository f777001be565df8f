# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timetable request models."""

from datetime import time

from pydantic import BaseModel, Field


class TimetableCreateRequest(BaseModel):
    """Schedule a subject for a class on a weekday."""

    class_id: str | None = Field(None, description="Class")
    subject_id: str | None = Field(None, description="Subject")
    teacher_id: str | None = Field(None, description="Teacher")
    day_of_week: int | None = Field(None, description="0 = Sunday .. 6 = Saturday")
    start_time: time | None = Field(None, description="Start (HH:MM)")
    end_time: time | None = Field(None, description="End (HH:MM), exclusive")
    room: str | None = Field(None, max_length=50, description="Room")


class TimetableUpdateRequest(BaseModel):
    """Partial timetable update."""

    subject_id: str | None = Field(None, description="Subject")
    teacher_id: str | None = Field(None, description="Teacher")
    day_of_week: int | None = Field(None, description="0 = Sunday .. 6 = Saturday")
    start_time: time | None = Field(None, description="Start (HH:MM)")
    end_time: time | None = Field(None, description="End (HH:MM), exclusive")
    room: str | None = Field(None, max_length=50, description="Room")
