# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School, branch and settings request models."""

from typing import Any

from pydantic import BaseModel, Field


class SchoolRegistrationRequest(BaseModel):
    """Register a new school (tenant) with its first admin."""

    school_name: str = Field(..., min_length=1, max_length=200, description="School name")
    school_address: str | None = Field(None, description="School address")
    school_phone: str | None = Field(None, max_length=30, description="School phone")
    school_email: str | None = Field(None, max_length=255, description="School email")
    admin_first_name: str = Field(..., min_length=1, max_length=100, description="Admin first name")
    admin_last_name: str = Field(..., min_length=1, max_length=100, description="Admin last name")
    admin_email: str = Field(..., min_length=3, max_length=255, description="Admin login email")
    admin_password: str = Field(..., min_length=6, description="Admin password")
    admin_phone: str | None = Field(None, max_length=30, description="Admin phone")


class SchoolSettingsUpdateRequest(BaseModel):
    """Weekly schedule and default subject duration."""

    weekly_schedule: dict[str, Any] = Field(default_factory=dict, description="Per-day schedule")
    subject_duration: int = Field(45, gt=0, description="Default subject duration in minutes")


class PeriodScheduleRequest(BaseModel):
    """Schedule template used to lay out the periods of a day."""

    start_time: str = Field(..., pattern=r"^\d{2}:\d{2}$", description="Day start (HH:MM)")
    end_time: str = Field(..., pattern=r"^\d{2}:\d{2}$", description="Day end (HH:MM)")
    period_duration: int = Field(..., gt=0, description="Period length in minutes")
    include_break: bool = Field(False, description="Insert a break")
    break_duration: int = Field(0, ge=0, description="Break length in minutes")
    break_after_period: int = Field(0, ge=0, description="Period number the break follows")
    include_lunch: bool = Field(False, description="Insert a lunch")
    lunch_duration: int = Field(0, ge=0, description="Lunch length in minutes")
    lunch_after_period: int = Field(0, ge=0, description="Period number lunch follows")
