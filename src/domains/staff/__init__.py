# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff domain: non-teaching staff records."""

from src.domains.staff.service import (
    StaffEmailExistsError,
    StaffNotFoundError,
    StaffService,
    StaffServiceError,
)

__all__ = [
    "StaffService",
    "StaffServiceError",
    "StaffNotFoundError",
    "StaffEmailExistsError",
]
