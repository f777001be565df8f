# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request models."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Email and password login."""

    email: str = Field(..., min_length=3, max_length=255, description="Login email")
    password: str = Field(..., min_length=1, description="Plain text password")
