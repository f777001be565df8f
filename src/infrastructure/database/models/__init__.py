# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models.

Importing this package registers every mapped class on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import (
    Base,
    TenantMixin,
    TimestampMixin,
    new_id,
)
from src.infrastructure.database.models.school import (
    Branch,
    School,
    SchoolSchedule,
    SchoolSetting,
)
from src.infrastructure.database.models.people import (
    GENDERS,
    Parent,
    Profile,
    Staff,
    Student,
    Teacher,
    User,
    UserRole,
)
from src.infrastructure.database.models.academics import (
    ROUTINE_CLASS_TYPES,
    Chapter,
    Class,
    ClassRoutine,
    Lesson,
    RoutineSlot,
    Section,
    Subject,
    Timetable,
)
from src.infrastructure.database.models.records import (
    ATTENDANCE_STATUSES,
    FEE_STATUSES,
    Attendance,
    Fee,
    StaffAttendance,
)

__all__ = [
    "Base",
    "TenantMixin",
    "TimestampMixin",
    "new_id",
    # School structure
    "School",
    "Branch",
    "SchoolSchedule",
    "SchoolSetting",
    # People
    "User",
    "UserRole",
    "GENDERS",
    "Profile",
    "Teacher",
    "Parent",
    "Student",
    "Staff",
    # Academics
    "Class",
    "Section",
    "Subject",
    "Chapter",
    "Lesson",
    "Timetable",
    "ClassRoutine",
    "RoutineSlot",
    "ROUTINE_CLASS_TYPES",
    # Records
    "Attendance",
    "StaffAttendance",
    "Fee",
    "ATTENDANCE_STATUSES",
    "FEE_STATUSES",
]
