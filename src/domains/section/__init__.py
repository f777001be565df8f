# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section domain: class sections and occupancy."""

from src.domains.section.service import (
    SectionExistsError,
    SectionNotEmptyError,
    SectionNotFoundError,
    SectionService,
    SectionServiceError,
)

__all__ = [
    "SectionService",
    "SectionServiceError",
    "SectionNotFoundError",
    "SectionExistsError",
    "SectionNotEmptyError",
]
