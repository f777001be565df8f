# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent domain: parent records and their linked children."""

from src.domains.parent.service import (
    ParentEmailExistsError,
    ParentHasStudentsError,
    ParentNotFoundError,
    ParentService,
    ParentServiceError,
)

__all__ = [
    "ParentService",
    "ParentServiceError",
    "ParentNotFoundError",
    "ParentEmailExistsError",
    "ParentHasStudentsError",
]
