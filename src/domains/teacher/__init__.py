# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher domain: teacher records, listing and statistics."""

from src.domains.teacher.service import (
    TeacherEmailExistsError,
    TeacherNotFoundError,
    TeacherService,
    TeacherServiceError,
    employee_id,
)

__all__ = [
    "TeacherService",
    "TeacherServiceError",
    "TeacherNotFoundError",
    "TeacherEmailExistsError",
    "employee_id",
]
