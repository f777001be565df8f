# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class service for managing classes.

This module provides the ClassService class for:
- Class CRUD operations with duplicate and foreign-key checks
- Teacher load limits for homeroom assignment
- Class listings, search and statistics
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload

from src.core.errors import ServiceError, service_operation
from src.core.result import Err, ErrorKind, Ok
from src.domains.base import TenantScopedService
from src.domains.dto import branch_brief, schedule_brief, teacher_brief
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    Branch,
    Class,
    SchoolSchedule,
    Section,
    Student,
    Subject,
    Teacher,
    User,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.class_ import ClassCreateRequest, ClassUpdateRequest

logger = logging.getLogger(__name__)


class ClassServiceError(ServiceError):
    """Base exception for class service errors."""

    pass


class ClassNotFoundError(ClassServiceError):
    """Raised when class is not found."""

    kind = ErrorKind.NOT_FOUND


class ClassExistsError(ClassServiceError):
    """Raised when name, branch and academic year are already taken."""

    kind = ErrorKind.CONFLICT


class InvalidReferenceError(ClassServiceError):
    """Raised when a branch, teacher or schedule is not in the tenant."""

    kind = ErrorKind.VALIDATION


class TeacherOverloadedError(ClassServiceError):
    """Raised when a teacher already holds the maximum number of classes."""

    kind = ErrorKind.PRECONDITION


class ClassInUseError(ClassServiceError):
    """Raised when a class still has students, subjects or timetables."""

    kind = ErrorKind.PRECONDITION


def _class_summary(class_: Class) -> dict[str, Any]:
    return {
        "id": class_.id,
        "name": class_.name,
        "academic_year": class_.academic_year,
        "branch_id": class_.branch_id,
        "teacher_id": class_.teacher_id,
        "schedule_id": class_.schedule_id,
    }


def _class_detail(class_: Class) -> dict[str, Any]:
    """Full class DTO. Needs the relations loaded by _detail_options()."""
    sections = [
        {
            "id": section.id,
            "name": section.name,
            "display_name": section.display_name,
            "capacity": section.capacity,
            "students": [
                {
                    "id": student.id,
                    "name": student.user.full_name,
                    "roll_number": student.roll_number,
                }
                for student in section.students
            ],
        }
        for section in class_.sections
    ]
    return {
        **_class_summary(class_),
        "total_students": sum(len(s.students) for s in class_.sections),
        "total_subjects": len(class_.subjects),
        "total_timetables": len(class_.timetables),
        "teacher": teacher_brief(class_.teacher),
        "branch": branch_brief(class_.branch),
        "schedule": schedule_brief(class_.schedule),
        "sections": sections,
    }


def _detail_options() -> list[Any]:
    return [
        selectinload(Class.branch),
        selectinload(Class.schedule),
        selectinload(Class.teacher).selectinload(Teacher.user).selectinload(User.profile),
        selectinload(Class.sections).selectinload(Section.students).selectinload(Student.user),
        selectinload(Class.subjects),
        selectinload(Class.timetables),
    ]


class ClassService(TenantScopedService):
    """Service for managing classes.

    Every query is filtered by the context tenant.

    Attributes:
        db: Async database session.
        context: Acting tenant context.
    """

    @service_operation("create class")
    async def create_class(self, request: ClassCreateRequest) -> Ok[dict[str, Any]]:
        """Create a new class.

        Checks run in order: duplicate, branch, teacher, teacher load,
        schedule.

        Args:
            request: Class creation data.

        Returns:
            Created class.

        Raises:
            ClassExistsError: If the class already exists.
            InvalidReferenceError: If branch, teacher or schedule is invalid.
            TeacherOverloadedError: If the teacher is at the class limit.
        """
        aamar_id = self._tenant()

        if not (request.name and request.branch_id and request.academic_year and request.schedule_id):
            raise ClassServiceError("Required fields are missing", "Please fill in all required fields")

        await self._check_duplicate(request.name, request.branch_id, request.academic_year)
        await self._check_branch(request.branch_id)
        if request.teacher_id:
            await self._check_teacher(request.teacher_id)
        await self._check_schedule(request.schedule_id)

        class_ = Class(
            id=new_id(),
            aamar_id=aamar_id,
            name=request.name,
            branch_id=request.branch_id,
            academic_year=request.academic_year,
            teacher_id=request.teacher_id,
            schedule_id=request.schedule_id,
        )

        async with transaction(self.db):
            self.db.add(class_)

        logger.info("Created class: %s (%s) in %s", class_.name, class_.id, aamar_id)
        self._invalidate(DashboardPaths.CLASSES)

        return Ok(_class_summary(class_), message="Class created successfully")

    @service_operation("fetch classes")
    async def list_classes(self) -> list[dict[str, Any]]:
        """List the tenant's classes with teacher, branch, schedule and sections."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Class)
            .where(Class.aamar_id == aamar_id)
            .options(*_detail_options())
            .order_by(Class.name)
        )
        return [_class_detail(c) for c in result.scalars().all()]

    @service_operation("fetch class")
    async def get_class(self, class_id: str) -> dict[str, Any]:
        """Get a class by id.

        Raises:
            ClassNotFoundError: If the class is not in the tenant.
        """
        class_ = await self._get_class(class_id, detailed=True)
        return _class_detail(class_)

    @service_operation("update class")
    async def update_class(self, class_id: str, request: ClassUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a class.

        Only provided fields are updated. The duplicate rule is re-checked
        when name, branch or academic year changes.

        Args:
            class_id: Class to update.
            request: Fields to change.

        Returns:
            Updated class.

        Raises:
            ClassNotFoundError: If the class is not in the tenant.
            ClassExistsError: If the new tuple collides with another class.
            InvalidReferenceError: If a new reference is invalid.
            TeacherOverloadedError: If the new teacher is at the class limit.
        """
        class_ = await self._get_class(class_id)
        changes = request.model_dump(exclude_unset=True)

        name = changes.get("name") or class_.name
        branch_id = changes.get("branch_id") or class_.branch_id
        academic_year = changes.get("academic_year") or class_.academic_year

        if (name, branch_id, academic_year) != (class_.name, class_.branch_id, class_.academic_year):
            await self._check_duplicate(name, branch_id, academic_year, exclude_id=class_.id)
        if branch_id != class_.branch_id:
            await self._check_branch(branch_id)

        teacher_changed = "teacher_id" in changes and changes["teacher_id"] != class_.teacher_id
        if teacher_changed and changes["teacher_id"]:
            await self._check_teacher(changes["teacher_id"], exclude_class_id=class_.id)

        schedule_changed = changes.get("schedule_id") and changes["schedule_id"] != class_.schedule_id
        if schedule_changed:
            await self._check_schedule(changes["schedule_id"])

        async with transaction(self.db):
            class_.name = name
            class_.branch_id = branch_id
            class_.academic_year = academic_year
            if "teacher_id" in changes:
                class_.teacher_id = changes["teacher_id"] or None
            if schedule_changed:
                class_.schedule_id = changes["schedule_id"]

        logger.info("Updated class: %s in %s", class_.id, class_.aamar_id)
        self._invalidate(DashboardPaths.CLASSES)

        return Ok(_class_summary(class_), message="Class updated successfully")

    @service_operation("delete class")
    async def delete_class(self, class_id: str) -> Ok[None]:
        """Delete a class.

        Blocked while any section has students or the class has subjects
        or timetables. Empty sections are removed with the class.

        Raises:
            ClassNotFoundError: If the class is not in the tenant.
            ClassInUseError: If dependents remain.
        """
        class_ = await self._get_class(class_id, detailed=True)

        total_students = sum(len(section.students) for section in class_.sections)
        if total_students > 0:
            raise ClassInUseError(
                f"Cannot delete class with {total_students} students",
                "Please move or remove the students first",
            )
        if class_.subjects or class_.timetables:
            raise ClassInUseError(
                "Cannot delete class with subjects or timetables",
                "Please remove the subjects and timetables first",
            )

        async with transaction(self.db):
            await self.db.delete(class_)

        logger.info("Deleted class: %s in %s", class_id, class_.aamar_id)
        self._invalidate(DashboardPaths.CLASSES)

        return Ok(None, message="Class deleted successfully")

    @service_operation("fetch classes")
    async def list_classes_by_branch(self, branch_id: str) -> list[dict[str, Any]]:
        """List classes of one branch."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Class)
            .where(Class.aamar_id == aamar_id, Class.branch_id == branch_id)
            .options(*_detail_options())
            .order_by(Class.name)
        )
        return [_class_detail(c) for c in result.scalars().all()]

    @service_operation("fetch classes")
    async def list_classes_by_academic_year(self, academic_year: str) -> list[dict[str, Any]]:
        """List classes of one academic year."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Class)
            .where(Class.aamar_id == aamar_id, Class.academic_year == academic_year)
            .options(*_detail_options())
            .order_by(Class.name)
        )
        return [_class_detail(c) for c in result.scalars().all()]

    @service_operation("search classes")
    async def search_classes(self, query: str) -> list[dict[str, Any]]:
        """Search classes by name, academic year, branch or teacher name.

        Matching is case-insensitive substring.
        """
        aamar_id = self._tenant()
        pattern = f"%{query.strip()}%"
        result = await self.db.execute(
            select(Class)
            .join(Class.branch)
            .outerjoin(Class.teacher)
            .outerjoin(Teacher.user)
            .where(
                Class.aamar_id == aamar_id,
                or_(
                    Class.name.ilike(pattern),
                    Class.academic_year.ilike(pattern),
                    Branch.name.ilike(pattern),
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                ),
            )
            .options(*_detail_options())
            .order_by(Class.name)
        )
        return [_class_detail(c) for c in result.scalars().all()]

    @service_operation("fetch class statistics")
    async def get_class_stats(self) -> dict[str, int]:
        """Aggregate class counts for the tenant.

        Returns:
            total_classes, total_students, classes_with_teachers,
            classes_without_teachers and average_students_per_class.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Class)
            .where(Class.aamar_id == aamar_id)
            .options(selectinload(Class.sections).selectinload(Section.students))
        )
        classes = result.scalars().all()

        total_classes = len(classes)
        total_students = sum(len(s.students) for c in classes for s in c.sections)
        with_teachers = sum(1 for c in classes if c.teacher_id is not None)

        return {
            "total_classes": total_classes,
            "total_students": total_students,
            "classes_with_teachers": with_teachers,
            "classes_without_teachers": total_classes - with_teachers,
            "average_students_per_class": round(total_students / total_classes) if total_classes else 0,
        }

    @service_operation("assign students")
    async def assign_students(self, class_id: str, student_ids: list[str]) -> Err:
        """Assign students directly to a class.

        Students belong to sections, so this only validates the class and
        reports that direct assignment is not supported.

        Raises:
            ClassNotFoundError: If the class is not in the tenant.
        """
        await self._get_class(class_id)
        logger.info(
            "Direct class assignment requested for %d students in %s",
            len(student_ids),
            class_id,
        )
        return Err(
            ErrorKind.NOT_IMPLEMENTED,
            "Student assignment is managed through sections",
            "Assign students to a section of this class instead",
        )

    @service_operation("fetch teachers")
    async def list_available_teachers(self, branch_id: str | None = None) -> list[dict[str, Any]]:
        """List active teachers with their class load.

        Args:
            branch_id: Only teachers of this branch.
        """
        aamar_id = self._tenant()
        query = (
            select(Teacher)
            .join(Teacher.user)
            .where(Teacher.aamar_id == aamar_id, User.is_active.is_(True))
            .options(
                selectinload(Teacher.user).selectinload(User.profile),
                selectinload(Teacher.user).selectinload(User.branch),
                selectinload(Teacher.classes),
            )
            .order_by(User.first_name)
        )
        if branch_id:
            query = query.where(User.branch_id == branch_id)

        result = await self.db.execute(query)
        return [
            {
                **teacher_brief(teacher),
                "user_id": teacher.user_id,
                "total_classes": len(teacher.classes),
                "branch": branch_brief(teacher.user.branch),
            }
            for teacher in result.scalars().all()
        ]

    @service_operation("fetch subjects")
    async def list_subjects_for_class(self, class_id: str | None = None) -> list[dict[str, Any]]:
        """List the tenant's subjects, optionally only those of one class."""
        aamar_id = self._tenant()
        query = select(Subject).where(Subject.aamar_id == aamar_id).order_by(Subject.name)
        if class_id:
            query = query.where(Subject.class_id == class_id)

        result = await self.db.execute(query)
        return [
            {
                "id": subject.id,
                "name": subject.name,
                "code": subject.code,
                "class_id": subject.class_id,
                "school_id": subject.school_id,
            }
            for subject in result.scalars().all()
        ]

    # =========================================================================
    # Private Helpers
    # =========================================================================

    async def _get_class(self, class_id: str, detailed: bool = False) -> Class:
        aamar_id = self._tenant()
        query = select(Class).where(Class.id == class_id, Class.aamar_id == aamar_id)
        if detailed:
            query = query.options(*_detail_options())

        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()
        if class_ is None:
            raise ClassNotFoundError("Class not found", "The specified class was not found")
        return class_

    async def _check_duplicate(
        self,
        name: str,
        branch_id: str,
        academic_year: str,
        exclude_id: str | None = None,
    ) -> None:
        query = select(Class.id).where(
            Class.aamar_id == self._tenant(),
            Class.name == name,
            Class.branch_id == branch_id,
            Class.academic_year == academic_year,
        )
        if exclude_id:
            query = query.where(Class.id != exclude_id)

        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise ClassExistsError(
                "Class already exists",
                f"Class {name} already exists for academic year {academic_year}",
            )

    async def _check_branch(self, branch_id: str) -> None:
        result = await self.db.execute(
            select(Branch.id).where(Branch.id == branch_id, Branch.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise InvalidReferenceError("Invalid branch", "The selected branch is not valid")

    async def _check_teacher(self, teacher_id: str, exclude_class_id: str | None = None) -> None:
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Teacher.id).where(Teacher.id == teacher_id, Teacher.aamar_id == aamar_id)
        )
        if result.scalar_one_or_none() is None:
            raise InvalidReferenceError("Invalid teacher", "The selected teacher is not valid")

        load_query = select(func.count(Class.id)).where(
            Class.aamar_id == aamar_id,
            Class.teacher_id == teacher_id,
        )
        if exclude_class_id:
            load_query = load_query.where(Class.id != exclude_class_id)

        load = (await self.db.execute(load_query)).scalar() or 0
        limit = self.school_settings.teacher_class_limit
        if load >= limit:
            raise TeacherOverloadedError(
                "Teacher overloaded",
                f"The selected teacher already has {load} classes (limit {limit})",
            )

    async def _check_schedule(self, schedule_id: str) -> None:
        result = await self.db.execute(
            select(SchoolSchedule.id).where(
                SchoolSchedule.id == schedule_id,
                SchoolSchedule.aamar_id == self._tenant(),
            )
        )
        if result.scalar_one_or_none() is None:
            raise InvalidReferenceError("Invalid schedule", "The selected schedule is not valid")
