# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    auth: Login, school registration and the current user.
    branches: Branch listing and lookup.
    settings: School settings, period schedules and period previews.
    classes: Class management, teacher and subject lookups.
    sections: Section management and roll number suggestions.
    subjects: Subjects with their chapters and lessons.
    timetables: Weekly timetable entries.
    routines: Weekly class routine grids.
    students: Student management and statistics.
    admissions: Combined parent and student admission.
    teachers: Teacher management.
    parents: Parent management.
    staff: Non-teaching staff management.
    attendance: Daily student attendance.
"""

from fastapi import APIRouter

from src.api.v1 import (
    admissions,
    attendance,
    auth,
    branches,
    classes,
    parents,
    routines,
    sections,
    settings,
    staff,
    students,
    subjects,
    teachers,
    timetables,
)

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(branches.router, prefix="/branches", tags=["Branches"])
router.include_router(settings.router, prefix="/settings", tags=["Settings"])
router.include_router(classes.router, prefix="/classes", tags=["Classes"])
router.include_router(sections.router, prefix="/sections", tags=["Sections"])
router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
router.include_router(timetables.router, prefix="/timetables", tags=["Timetables"])
router.include_router(routines.router, prefix="/class-routines", tags=["Class Routines"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(admissions.router, prefix="/admissions", tags=["Admissions"])
router.include_router(teachers.router, prefix="/teachers", tags=["Teachers"])
router.include_router(parents.router, prefix="/parents", tags=["Parents"])
router.include_router(staff.router, prefix="/staff", tags=["Staff"])
router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])

__all__ = ["router"]
