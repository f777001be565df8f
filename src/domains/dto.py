# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Display shapes shared by several services.

Services return plain snake_case dictionaries. These helpers build the
nested pieces that appear in more than one listing. They only read
attributes that the calling query has eager-loaded.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from src.infrastructure.database.models import Branch, Profile, SchoolSchedule, Teacher, User


def iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def branch_brief(branch: Branch | None) -> dict[str, Any] | None:
    if branch is None:
        return None
    return {
        "id": branch.id,
        "name": branch.name,
        "address": branch.address,
        "phone": branch.phone,
    }


def profile_dto(profile: Profile | None) -> dict[str, Any] | None:
    if profile is None:
        return None
    return {
        "phone": profile.phone,
        "address": profile.address,
        "date_of_birth": iso(profile.date_of_birth),
        "gender": profile.gender,
        "blood_group": profile.blood_group,
        "nationality": profile.nationality,
        "religion": profile.religion,
        "birth_certificate_no": profile.birth_certificate_no,
    }


def user_dto(user: User) -> dict[str, Any]:
    """Identity fields plus the user's profile."""
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
        "is_active": user.is_active,
        "branch_id": user.branch_id,
        "school_id": user.school_id,
        "profile": profile_dto(user.profile),
    }


def teacher_brief(teacher: Teacher | None) -> dict[str, Any] | None:
    """Teacher as shown next to a class. Needs teacher.user.profile loaded."""
    if teacher is None:
        return None
    user = teacher.user
    return {
        "id": teacher.id,
        "name": user.full_name,
        "email": user.email,
        "phone": user.profile.phone if user.profile else None,
        "qualification": teacher.qualification,
        "experience": teacher.experience,
        "subjects": teacher.subjects,
    }


def schedule_brief(schedule: SchoolSchedule | None) -> dict[str, Any] | None:
    if schedule is None:
        return None
    return {
        "id": schedule.id,
        "name": schedule.name,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "period_duration": schedule.period_duration,
    }


def percent(part: int, whole: int) -> int:
    """Rounded percentage, 0 when whole is 0."""
    return round(part / whole * 100) if whole else 0
