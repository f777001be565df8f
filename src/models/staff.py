# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff request models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class StaffCreateRequest(BaseModel):
    """Create a staff member with a login account."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    gender: str | None = Field(None, description="MALE, FEMALE or OTHER")
    designation: str | None = Field(None, max_length=100, description="Designation")
    department: str | None = Field(None, max_length=100, description="Department")
    salary: Decimal | None = Field(None, ge=0, description="Salary")
    joining_date: date | None = Field(None, description="Joining date")
    branch_id: str | None = Field(None, description="Branch")


class StaffUpdateRequest(BaseModel):
    """Partial staff update."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    is_active: bool | None = Field(None, description="Account active")
    designation: str | None = Field(None, max_length=100, description="Designation")
    department: str | None = Field(None, max_length=100, description="Department")
    salary: Decimal | None = Field(None, ge=0, description="Salary")
    joining_date: date | None = Field(None, description="Joining date")
