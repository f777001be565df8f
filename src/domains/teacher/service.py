# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher service.

This module provides the TeacherService class for:
- Teacher CRUD (user, profile and teacher rows together)
- Paginated listing with class and student totals
- Teacher statistics and search

Teacher emails are unique across all tenants, since the email is the
login identifier.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.auth.password import default_password_hash
from src.domains.base import TenantScopedService
from src.domains.dto import branch_brief, iso
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    GENDERS,
    Branch,
    Class,
    Profile,
    Section,
    Teacher,
    User,
    UserRole,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.teacher import TeacherCreateRequest, TeacherUpdateRequest

logger = logging.getLogger(__name__)


class TeacherServiceError(ServiceError):
    """Base exception for teacher service errors."""

    pass


class TeacherNotFoundError(TeacherServiceError):
    """Raised when a teacher is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class TeacherEmailExistsError(TeacherServiceError):
    """Raised when the email is already registered."""

    kind = ErrorKind.CONFLICT


class TeacherBranchNotFoundError(TeacherServiceError):
    """Raised when the branch is not in the tenant."""

    kind = ErrorKind.VALIDATION


def employee_id(teacher_id: str) -> str:
    """Display employee number: EMP plus the last six id characters."""
    return f"EMP{teacher_id[-6:].upper()}"


def _teacher_dto(teacher: Teacher) -> dict[str, Any]:
    """Teacher listing row. Needs _teacher_options() loaded."""
    user = teacher.user
    profile = user.profile
    return {
        "id": teacher.id,
        "user_id": teacher.user_id,
        "employee_id": employee_id(teacher.id),
        "name": user.full_name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": profile.phone if profile else None,
        "address": profile.address if profile else None,
        "qualification": teacher.qualification,
        "experience": teacher.experience,
        "specialization": teacher.specialization or (teacher.subjects[0] if teacher.subjects else None),
        "subjects": teacher.subjects,
        "joining_date": iso(teacher.joining_date),
        "salary": float(teacher.salary) if teacher.salary is not None else None,
        "is_active": user.is_active,
        "branch": branch_brief(user.branch),
        "total_classes": len(teacher.classes),
        "total_students": sum(
            len(section.students) for class_ in teacher.classes for section in class_.sections
        ),
    }


def _teacher_options() -> list[Any]:
    return [
        selectinload(Teacher.user).selectinload(User.profile),
        selectinload(Teacher.user).selectinload(User.branch),
        selectinload(Teacher.classes).selectinload(Class.sections).selectinload(Section.students),
    ]


class TeacherService(TenantScopedService):
    """Teacher CRUD, listing and statistics."""

    @service_operation("create teacher")
    async def create_teacher(self, request: TeacherCreateRequest) -> Ok[dict[str, Any]]:
        """Create a teacher with a login account and profile.

        Raises:
            TeacherEmailExistsError: If the email is already registered.
            TeacherBranchNotFoundError: If the branch is not in the tenant.
        """
        aamar_id = self._tenant()
        if not (request.first_name and request.last_name and request.email and request.branch_id):
            raise TeacherServiceError("Required fields are missing")

        email = request.email.strip().lower()
        await self._check_email(email)
        await self._check_branch(request.branch_id)

        async with transaction(self.db):
            user = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=email,
                password_hash=default_password_hash(UserRole.TEACHER, self.school_settings),
                first_name=request.first_name,
                last_name=request.last_name,
                role=UserRole.TEACHER,
                is_active=True,
                school_id=self.context.school_id,
                branch_id=request.branch_id,
            )
            self.db.add(user)
            await self.db.flush()

            self.db.add(Profile(
                id=new_id(),
                user_id=user.id,
                phone=request.phone,
                address=request.address,
                date_of_birth=request.date_of_birth,
                gender=request.gender if request.gender in GENDERS else None,
            ))

            teacher = Teacher(
                id=new_id(),
                aamar_id=aamar_id,
                user_id=user.id,
                qualification=request.qualification,
                experience=request.experience or 0,
                specialization=request.specialization,
                subjects=[request.specialization] if request.specialization else [],
                salary=request.salary,
                joining_date=request.joining_date or date.today(),
            )
            self.db.add(teacher)

        logger.info("Created teacher: %s (%s) in %s", user.email, teacher.id, aamar_id)
        self._invalidate(DashboardPaths.TEACHERS, DashboardPaths.STAFF)

        return Ok(
            {"teacher_id": teacher.id, "user_id": user.id},
            message=f"Teacher {user.full_name} created successfully!",
        )

    @service_operation("fetch teachers")
    async def list_teachers(self, page: int = 1, limit: int = 10) -> dict[str, Any]:
        """List teachers alphabetically, one page at a time.

        Args:
            page: 1-based page number.
            limit: Page size.

        Returns:
            Dict with teachers and a pagination block.
        """
        aamar_id = self._tenant()
        page = max(page, 1)
        limit = max(limit, 1)

        total = (
            await self.db.execute(select(func.count(Teacher.id)).where(Teacher.aamar_id == aamar_id))
        ).scalar() or 0

        result = await self.db.execute(
            self._teacher_query()
            .join(Teacher.user)
            .order_by(User.first_name, User.last_name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        teachers = [_teacher_dto(t) for t in result.scalars().all()]
        total_pages = math.ceil(total / limit)

        return {
            "teachers": teachers,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_next_page": page < total_pages,
                "has_prev_page": page > 1,
            },
        }

    @service_operation("fetch teacher")
    async def get_teacher(self, teacher_id: str) -> dict[str, Any]:
        """Get a teacher by id.

        Raises:
            TeacherNotFoundError: If the teacher is not in the tenant.
        """
        return _teacher_dto(await self._get_teacher(teacher_id))

    @service_operation("update teacher")
    async def update_teacher(self, teacher_id: str, request: TeacherUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a teacher. Only supplied fields change.

        Raises:
            TeacherNotFoundError: If the teacher is not in the tenant.
            TeacherEmailExistsError: If the new email is already registered.
        """
        teacher = await self._get_teacher(teacher_id)
        user = teacher.user

        if request.email and request.email.strip().lower() != user.email:
            await self._check_email(request.email.strip().lower())
        if request.branch_id and request.branch_id != user.branch_id:
            await self._check_branch(request.branch_id)

        async with transaction(self.db):
            if request.first_name:
                user.first_name = request.first_name
            if request.last_name:
                user.last_name = request.last_name
            if request.email:
                user.email = request.email.strip().lower()
            if request.branch_id:
                user.branch_id = request.branch_id
            if request.is_active is not None:
                user.is_active = request.is_active

            profile = user.profile
            if profile is None:
                profile = Profile(id=new_id(), user_id=user.id)
                self.db.add(profile)
            if request.phone is not None:
                profile.phone = request.phone
            if request.address is not None:
                profile.address = request.address

            if request.qualification is not None:
                teacher.qualification = request.qualification
            if request.experience is not None:
                teacher.experience = request.experience
            if request.specialization is not None:
                teacher.specialization = request.specialization
            if request.subjects is not None:
                teacher.subjects = request.subjects
            elif request.specialization:
                teacher.subjects = [request.specialization]
            if request.salary is not None:
                teacher.salary = request.salary
            if request.joining_date is not None:
                teacher.joining_date = request.joining_date

        logger.info("Updated teacher: %s in %s", teacher.id, teacher.aamar_id)
        self._invalidate(DashboardPaths.TEACHERS, DashboardPaths.STAFF)

        return Ok(
            {"teacher_id": teacher.id, "user_id": user.id},
            message=f"Teacher {user.full_name} updated successfully!",
        )

    @service_operation("delete teacher")
    async def delete_teacher(self, teacher_id: str) -> Ok[None]:
        """Delete a teacher with its profile and user.

        Classes the teacher was homeroom teacher of are kept with no teacher.

        Raises:
            TeacherNotFoundError: If the teacher is not in the tenant.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Teacher)
            .where(Teacher.id == teacher_id, Teacher.aamar_id == aamar_id)
            .options(selectinload(Teacher.user))
        )
        teacher = result.scalar_one_or_none()
        if teacher is None:
            raise TeacherNotFoundError("Teacher not found")

        user = teacher.user
        async with transaction(self.db):
            await self.db.execute(
                update(Class)
                .where(Class.teacher_id == teacher.id, Class.aamar_id == aamar_id)
                .values(teacher_id=None)
            )
            await self.db.delete(teacher)
            await self.db.flush()
            await self.db.execute(delete(Profile).where(Profile.user_id == user.id))
            await self.db.delete(user)

        logger.info("Deleted teacher: %s in %s", teacher_id, aamar_id)
        self._invalidate(DashboardPaths.TEACHERS, DashboardPaths.STAFF, DashboardPaths.CLASSES)

        return Ok(None, message="Teacher deleted successfully")

    @service_operation("fetch statistics")
    async def get_teacher_stats(self) -> dict[str, Any]:
        """Teacher totals, average experience and counts per branch."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Teacher)
            .where(Teacher.aamar_id == aamar_id)
            .options(selectinload(Teacher.user).selectinload(User.branch))
        )
        teachers = result.scalars().all()

        total = len(teachers)
        active = sum(1 for t in teachers if t.user.is_active)
        average = sum(t.experience or 0 for t in teachers) / total if total else 0

        by_branch: dict[str, dict[str, Any]] = {}
        for teacher in teachers:
            branch_id = teacher.user.branch_id
            if not branch_id:
                continue
            entry = by_branch.setdefault(
                branch_id,
                {
                    "branch_id": branch_id,
                    "branch_name": teacher.user.branch.name if teacher.user.branch else "Unknown Branch",
                    "teacher_count": 0,
                },
            )
            entry["teacher_count"] += 1

        return {
            "total_teachers": total,
            "active_teachers": active,
            "average_experience": round(average, 2),
            "by_branch": list(by_branch.values()),
        }

    @service_operation("search teachers")
    async def search_teachers(self, query: str) -> list[dict[str, Any]]:
        """Search by name, email, qualification or specialization."""
        pattern = f"%{query.strip()}%"
        result = await self.db.execute(
            self._teacher_query()
            .join(Teacher.user)
            .where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    Teacher.qualification.ilike(pattern),
                    Teacher.specialization.ilike(pattern),
                )
            )
            .order_by(User.first_name)
        )
        return [_teacher_dto(t) for t in result.scalars().all()]

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _teacher_query(self) -> Select:
        return select(Teacher).where(Teacher.aamar_id == self._tenant()).options(*_teacher_options())

    async def _get_teacher(self, teacher_id: str) -> Teacher:
        result = await self.db.execute(self._teacher_query().where(Teacher.id == teacher_id))
        teacher = result.scalar_one_or_none()
        if teacher is None:
            raise TeacherNotFoundError("Teacher not found")
        return teacher

    async def _check_email(self, email: str) -> None:
        result = await self.db.execute(select(User.id).where(func.lower(User.email) == email))
        if result.scalar_one_or_none() is not None:
            raise TeacherEmailExistsError("Email already exists")

    async def _check_branch(self, branch_id: str) -> None:
        result = await self.db.execute(
            select(Branch.id).where(Branch.id == branch_id, Branch.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise TeacherBranchNotFoundError("Invalid branch")
