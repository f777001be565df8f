# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain: student records, listings and roll numbers."""

from src.domains.student.roll_number import (
    RollNumberService,
    next_roll_number,
    roll_sequence,
)
from src.domains.student.service import (
    InvalidSectionError,
    RollNumberExistsError,
    StudentNotFoundError,
    StudentService,
    StudentServiceError,
    student_dto,
)

__all__ = [
    "StudentService",
    "StudentServiceError",
    "StudentNotFoundError",
    "InvalidSectionError",
    "RollNumberExistsError",
    "student_dto",
    "RollNumberService",
    "next_roll_number",
    "roll_sequence",
]
