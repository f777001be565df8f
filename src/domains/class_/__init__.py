# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class domain package.

This package provides class management functionality including:
- Class CRUD operations with duplicate and reference checks
- Homeroom teacher load limits
- Class search and statistics
"""

from src.domains.class_.service import (
    ClassExistsError,
    ClassInUseError,
    ClassNotFoundError,
    ClassService,
    ClassServiceError,
    InvalidReferenceError,
    TeacherOverloadedError,
)

__all__ = [
    "ClassService",
    "ClassServiceError",
    "ClassNotFoundError",
    "ClassExistsError",
    "ClassInUseError",
    "InvalidReferenceError",
    "TeacherOverloadedError",
]
