# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject domain: subjects, chapters and lessons."""

from src.domains.subject.service import (
    ChapterNotFoundError,
    LessonNotFoundError,
    SubjectCodeExistsError,
    SubjectInUseError,
    SubjectNotFoundError,
    SubjectService,
    SubjectServiceError,
)

__all__ = [
    "SubjectService",
    "SubjectServiceError",
    "SubjectNotFoundError",
    "SubjectCodeExistsError",
    "SubjectInUseError",
    "ChapterNotFoundError",
    "LessonNotFoundError",
]
