# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent request models."""

from pydantic import BaseModel, Field


class ParentCreateRequest(BaseModel):
    """Create a parent with a login account."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    gender: str | None = Field(None, description="MALE, FEMALE or OTHER")
    relation: str | None = Field(None, max_length=50, description="Father, Mother or Guardian")
    branch_id: str | None = Field(None, description="Branch, defaults to the acting user's")


class ParentUpdateRequest(BaseModel):
    """Partial parent update."""

    first_name: str | None = Field(None, max_length=100, description="First name")
    last_name: str | None = Field(None, max_length=100, description="Last name")
    email: str | None = Field(None, max_length=255, description="Login email")
    phone: str | None = Field(None, max_length=30, description="Phone")
    address: str | None = Field(None, description="Address")
    relation: str | None = Field(None, max_length=50, description="Relation")
    is_active: bool | None = Field(None, description="Account active")
