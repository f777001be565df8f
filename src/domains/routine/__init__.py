# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Routine domain: weekly class routine grids."""

from src.domains.routine.service import (
    InvalidRoutineReferenceError,
    RoutineNotFoundError,
    RoutineService,
    RoutineServiceError,
    RoutineSlotOverlapError,
)

__all__ = [
    "RoutineService",
    "RoutineServiceError",
    "RoutineNotFoundError",
    "InvalidRoutineReferenceError",
    "RoutineSlotOverlapError",
]
