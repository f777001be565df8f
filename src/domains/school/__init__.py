# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School domain: tenant registration, branches, settings and period layout."""

from src.domains.school.periods import calculate_periods
from src.domains.school.service import (
    BranchService,
    SchoolRegistrationService,
    SchoolSettingsService,
)

__all__ = [
    "BranchService",
    "SchoolRegistrationService",
    "SchoolSettingsService",
    "calculate_periods",
]
