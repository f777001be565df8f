# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request models."""

from datetime import date

from pydantic import BaseModel, Field


class StudentCreateRequest(BaseModel):
    """Create a student in a section."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email")
    phone: str | None = Field(None, max_length=30, description="Phone")
    roll_number: str | None = Field(None, max_length=20, description="Roll number, unique per section")
    admission_date: date | None = Field(None, description="Admission date, defaults to today")
    section_id: str | None = Field(None, description="Section")
    parent_id: str | None = Field(None, description="Existing parent")
    address: str | None = Field(None, description="Address")
    date_of_birth: date | None = Field(None, description="Date of birth")
    gender: str | None = Field(None, description="MALE, FEMALE or OTHER")
    blood_group: str | None = Field(None, max_length=5, description="Blood group")
    birth_certificate_no: str | None = Field(None, max_length=50, description="Birth certificate number")
    nationality: str | None = Field(None, max_length=100, description="Nationality")
    religion: str | None = Field(None, max_length=100, description="Religion")


class StudentUpdateRequest(BaseModel):
    """Full student update.

    Identity fields are always overwritten. Profile fields that are omitted
    are cleared.
    """

    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    email: str = Field(..., min_length=3, max_length=255, description="Login email")
    is_active: bool = Field(True, description="Account active")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    date_of_birth: date | None = Field(None, description="Date of birth")
    gender: str | None = Field(None, description="MALE, FEMALE or OTHER; anything else clears it")
    blood_group: str | None = Field(None, max_length=5, description="Blood group")
    nationality: str | None = Field(None, max_length=100, description="Nationality")
    religion: str | None = Field(None, max_length=100, description="Religion")
    birth_certificate_no: str | None = Field(None, max_length=50, description="Birth certificate number")
    roll_number: str = Field(..., min_length=1, max_length=20, description="Roll number")
    admission_date: date | None = Field(None, description="Admission date")
    parent_first_name: str | None = Field(None, max_length=100, description="Parent first name")
    parent_last_name: str | None = Field(None, max_length=100, description="Parent last name")
    parent_email: str | None = Field(None, max_length=255, description="Parent email")
    parent_phone: str | None = Field(None, max_length=30, description="Parent phone")
    relation: str | None = Field(None, max_length=50, description="Parent relation")
