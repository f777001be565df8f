# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section request models."""

from pydantic import BaseModel, Field


class SectionCreateRequest(BaseModel):
    """Create a section in a class."""

    name: str | None = Field(None, max_length=50, description="Section name, e.g. A")
    class_id: str | None = Field(None, description="Owning class")
    capacity: int | None = Field(None, gt=0, description="Seat capacity")


class SectionUpdateRequest(BaseModel):
    """Update a section's name and capacity."""

    name: str | None = Field(None, max_length=50, description="Section name")
    capacity: int | None = Field(None, gt=0, description="Seat capacity")
