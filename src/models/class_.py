# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class request models."""

from pydantic import BaseModel, Field


class ClassCreateRequest(BaseModel):
    """Create a class in a branch for an academic year."""

    name: str | None = Field(None, max_length=100, description="Class name")
    branch_id: str | None = Field(None, description="Owning branch")
    academic_year: str | None = Field(None, max_length=20, description="Academic year, e.g. 2024")
    teacher_id: str | None = Field(None, description="Homeroom teacher")
    schedule_id: str | None = Field(None, description="Schedule template")


class ClassUpdateRequest(BaseModel):
    """Partial class update. Omitted fields are left unchanged."""

    name: str | None = Field(None, max_length=100, description="Class name")
    branch_id: str | None = Field(None, description="Owning branch")
    academic_year: str | None = Field(None, max_length=20, description="Academic year")
    teacher_id: str | None = Field(None, description="Homeroom teacher")
    schedule_id: str | None = Field(None, description="Schedule template")


class AssignStudentsRequest(BaseModel):
    """Students to place in a class."""

    student_ids: list[str] = Field(default_factory=list, description="Student ids")
