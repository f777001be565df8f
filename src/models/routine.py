# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class routine request models."""

from datetime import time

from pydantic import BaseModel, Field


class RoutineSlotInput(BaseModel):
    """One cell of the routine grid."""

    day: str | None = Field(None, description="Weekday name, e.g. Monday")
    start_time: time | None = Field(None, description="Start (HH:MM)")
    end_time: time | None = Field(None, description="End (HH:MM), exclusive")
    subject_id: str | None = Field(None, description="Subject, empty for breaks")
    teacher_id: str | None = Field(None, description="Teacher")
    class_type: str = Field("regular", description="regular, special or break")


class RoutineUpsertRequest(BaseModel):
    """Save the routine of a class for an academic year, replacing its slots."""

    class_id: str | None = Field(None, description="Class")
    academic_year: str | None = Field(None, max_length=20, description="Academic year")
    branch_id: str | None = Field(None, description="Branch")
    slots: list[RoutineSlotInput] = Field(default_factory=list, description="All slots of the grid")
