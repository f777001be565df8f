# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class TeacherCreateRequest(BaseModel):
    """Create a teacher with a login account."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email, globally unique")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    date_of_birth: date | None = Field(None, description="Date of birth")
    gender: str | None = Field(None, description="MALE, FEMALE or OTHER")
    branch_id: str | None = Field(None, description="Branch")
    qualification: str | None = Field(None, max_length=200, description="Qualification")
    experience: int | None = Field(None, ge=0, description="Years of experience")
    specialization: str | None = Field(None, max_length=200, description="Specialization")
    salary: Decimal | None = Field(None, ge=0, description="Salary")
    joining_date: date | None = Field(None, description="Joining date")


class TeacherUpdateRequest(BaseModel):
    """Partial teacher update."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    is_active: bool | None = Field(None, description="Account active")
    branch_id: str | None = Field(None, description="Branch")
    qualification: str | None = Field(None, max_length=200, description="Qualification")
    experience: int | None = Field(None, ge=0, description="Years of experience")
    specialization: str | None = Field(None, max_length=200, description="Specialization")
    subjects: list[str] | None = Field(None, description="Subject names taught")
    salary: Decimal | None = Field(None, ge=0, description="Salary")
    joining_date: date | None = Field(None, description="Joining date")
