# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admission request model.

All fields are optional at the model level. The admission workflow checks
them in a fixed order and reports the first failure by its display label.
"""

from pydantic import BaseModel, Field


class AdmissionRequest(BaseModel):
    """Combined student and parent admission form."""

    # Student
    student_first_name: str | None = Field(None, description="Student first name")
    student_last_name: str | None = Field(None, description="Student last name")
    student_email: str | None = Field(None, description="Student login email")
    student_phone: str | None = Field(None, description="Student phone")
    date_of_birth: str | None = Field(None, description="Date of birth (YYYY-MM-DD)")
    gender: str | None = Field(None, description="MALE, FEMALE or OTHER")
    blood_group: str | None = Field(None, description="Blood group")
    roll_number: str | None = Field(None, description="Roll number, unique per section")
    section_id: str | None = Field(None, description="Section")
    admission_date: str | None = Field(None, description="Admission date (YYYY-MM-DD)")
    address: str | None = Field(None, description="Student address")

    # Parent
    parent_first_name: str | None = Field(None, description="Parent first name")
    parent_last_name: str | None = Field(None, description="Parent last name")
    parent_email: str | None = Field(None, description="Parent login email")
    parent_phone: str | None = Field(None, description="Parent phone")
    parent_gender: str | None = Field(None, description="Parent gender")
    relation: str | None = Field(None, description="Father, Mother or Guardian")
    parent_address: str | None = Field(None, description="Parent address, defaults to the student's")

    # Optional
    nationality: str | None = Field(None, description="Nationality")
    religion: str | None = Field(None, description="Religion")
    birth_certificate_no: str | None = Field(None, description="Birth certificate number")
