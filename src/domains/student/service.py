# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service.

This module provides the StudentService class for:
- Student CRUD (identity, profile and student rows created together)
- Listings by section, branch and class
- Student search and statistics

Roll numbers are unique per section within a tenant.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from src.core.config import SchoolSettings
from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.auth.context import TenantContext
from src.domains.auth.password import default_password_hash
from src.domains.base import TenantScopedService
from src.domains.dto import iso, user_dto
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    GENDERS,
    Fee,
    Parent,
    Profile,
    Section,
    Student,
    User,
    UserRole,
    new_id,
)
from src.infrastructure.events import DashboardPaths, PathInvalidator
from src.models.student import StudentCreateRequest, StudentUpdateRequest
from src.utils.datetime import days_ago

logger = logging.getLogger(__name__)


class StudentServiceError(ServiceError):
    """Base exception for student service errors."""

    pass


class StudentNotFoundError(StudentServiceError):
    """Raised when a student is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class InvalidSectionError(StudentServiceError):
    """Raised when the section is not in the tenant."""

    kind = ErrorKind.VALIDATION


class RollNumberExistsError(StudentServiceError):
    """Raised when the roll number is taken in the section."""

    kind = ErrorKind.CONFLICT


class InvalidParentError(StudentServiceError):
    """Raised when the linked parent is not in the tenant."""

    kind = ErrorKind.VALIDATION


def student_dto(student: Student) -> dict[str, Any]:
    """Student with user, section, class and parent. Needs _student_options() loaded."""
    parent = student.parent
    return {
        "id": student.id,
        "roll_number": student.roll_number,
        "admission_date": iso(student.admission_date),
        "section_id": student.section_id,
        "class_id": student.class_id,
        "parent_id": student.parent_id,
        "user": user_dto(student.user),
        "section": (
            {
                "id": student.section.id,
                "name": student.section.name,
                "display_name": student.section.display_name,
            }
            if student.section
            else None
        ),
        "class": (
            {
                "id": student.class_.id,
                "name": student.class_.name,
                "academic_year": student.class_.academic_year,
            }
            if student.class_
            else None
        ),
        "parent": (
            {
                "id": parent.id,
                "relation": parent.relation,
                "name": parent.user.full_name,
                "email": parent.user.email,
                "phone": parent.user.profile.phone if parent.user.profile else None,
            }
            if parent
            else None
        ),
    }


def _student_options() -> list[Any]:
    return [
        selectinload(Student.user).selectinload(User.profile),
        selectinload(Student.section),
        selectinload(Student.class_),
        selectinload(Student.parent).selectinload(Parent.user).selectinload(User.profile),
    ]


def _valid_gender(value: str | None) -> str | None:
    return value if value in GENDERS else None


class StudentService(TenantScopedService):
    """Service for managing students.

    Attributes:
        db: Async database session.
        context: Acting tenant context.
        session_factory: Optional factory used to run statistics queries
            concurrently on separate sessions.
    """

    def __init__(
        self,
        db: AsyncSession,
        context: TenantContext | None,
        invalidator: PathInvalidator | None = None,
        school_settings: SchoolSettings | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        super().__init__(db, context, invalidator, school_settings)
        self.session_factory = session_factory

    @service_operation("create student")
    async def create_student(self, request: StudentCreateRequest) -> Ok[dict[str, Any]]:
        """Create a student with a login account and profile.

        The branch is taken from the section's class, not from the caller.

        Raises:
            InvalidSectionError: If the section is not in the tenant.
            RollNumberExistsError: If the roll number is taken in the section.
            InvalidParentError: If the parent is not in the tenant.
        """
        aamar_id = self._tenant()
        if not (request.first_name and request.last_name and request.roll_number and request.section_id):
            raise StudentServiceError("First name, last name, roll number, and section are required")
        if not request.email:
            raise StudentServiceError("Email is required")

        result = await self.db.execute(
            select(Section)
            .where(Section.id == request.section_id, Section.aamar_id == aamar_id)
            .options(selectinload(Section.class_))
        )
        section = result.scalar_one_or_none()
        if section is None:
            raise InvalidSectionError("Invalid section", "Invalid section selected")

        await self._check_roll_number(section.id, request.roll_number)
        if request.parent_id:
            await self._check_parent(request.parent_id)

        async with transaction(self.db):
            user = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=request.email.strip().lower(),
                password_hash=default_password_hash(UserRole.STUDENT, self.school_settings),
                first_name=request.first_name,
                last_name=request.last_name,
                role=UserRole.STUDENT,
                is_active=True,
                school_id=self.context.school_id,
                branch_id=section.class_.branch_id,
            )
            self.db.add(user)
            await self.db.flush()

            self.db.add(Profile(
                id=new_id(),
                user_id=user.id,
                phone=request.phone,
                address=request.address,
                date_of_birth=request.date_of_birth,
                gender=_valid_gender(request.gender),
                blood_group=request.blood_group,
                birth_certificate_no=request.birth_certificate_no,
                nationality=request.nationality,
                religion=request.religion,
            ))

            student = Student(
                id=new_id(),
                aamar_id=aamar_id,
                user_id=user.id,
                roll_number=request.roll_number,
                admission_date=request.admission_date or date.today(),
                section_id=section.id,
                class_id=section.class_id,
                parent_id=request.parent_id,
            )
            self.db.add(student)

        logger.info("Created student: %s (%s) in %s", student.roll_number, student.id, aamar_id)
        self._invalidate(DashboardPaths.STUDENTS)

        return Ok(
            {
                "id": student.id,
                "user_id": user.id,
                "roll_number": student.roll_number,
                "section_id": student.section_id,
                "class_id": student.class_id,
            },
            message="Student created successfully",
        )

    @service_operation("fetch students")
    async def list_students(self) -> list[dict[str, Any]]:
        """List the tenant's students, newest first."""
        query = self._student_query().order_by(Student.created_at.desc())
        return await self._fetch(query)

    @service_operation("fetch student")
    async def get_student(self, student_id: str) -> dict[str, Any]:
        """Get a student by id.

        Raises:
            StudentNotFoundError: If the student is not in the tenant.
        """
        return student_dto(await self._get_student(student_id))

    @service_operation("update student")
    async def update_student(self, student_id: str, request: StudentUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a student and the linked parent.

        Identity fields are always overwritten. Profile fields that are not
        supplied are cleared. The existing parent is updated only when
        parent names are supplied.

        Raises:
            StudentNotFoundError: If the student is not in the tenant.
            RollNumberExistsError: If the new roll number is taken.
        """
        student = await self._get_student(student_id)
        aamar_id = student.aamar_id

        if request.roll_number != student.roll_number:
            await self._check_roll_number(student.section_id, request.roll_number, exclude_id=student.id)

        async with transaction(self.db):
            user = student.user
            user.first_name = request.first_name
            user.last_name = request.last_name
            user.email = request.email.strip().lower()
            user.is_active = request.is_active

            profile = user.profile
            if profile is None:
                profile = Profile(id=new_id(), user_id=user.id)
                self.db.add(profile)
            profile.phone = request.phone or None
            profile.address = request.address or None
            profile.date_of_birth = request.date_of_birth
            profile.gender = _valid_gender(request.gender)
            profile.blood_group = request.blood_group or None
            profile.nationality = request.nationality or None
            profile.religion = request.religion or None
            profile.birth_certificate_no = request.birth_certificate_no or None

            student.roll_number = request.roll_number
            if request.admission_date:
                student.admission_date = request.admission_date

            parent = student.parent
            if parent is not None and request.parent_first_name:
                parent.user.first_name = request.parent_first_name
                parent.user.last_name = request.parent_last_name or ""
                if request.parent_email:
                    parent.user.email = request.parent_email.strip().lower()
                if parent.user.profile is not None:
                    parent.user.profile.phone = request.parent_phone or None
                elif request.parent_phone:
                    self.db.add(Profile(id=new_id(), user_id=parent.user_id, phone=request.parent_phone))
                parent.relation = request.relation or parent.relation

        logger.info("Updated student: %s in %s", student.id, aamar_id)
        self._invalidate(DashboardPaths.STUDENTS)

        return Ok(
            {"id": student.id, "roll_number": student.roll_number},
            message="Student updated successfully",
        )

    @service_operation("delete student")
    async def delete_student(self, student_id: str) -> Ok[None]:
        """Delete a student and its user. The profile follows the user.

        Raises:
            StudentNotFoundError: If the student is not in the tenant.
        """
        student = await self._get_student(student_id)
        user = student.user

        async with transaction(self.db):
            await self.db.delete(student)
            await self.db.flush()
            await self.db.delete(user)

        logger.info("Deleted student: %s in %s", student_id, student.aamar_id)
        self._invalidate(DashboardPaths.STUDENTS)

        return Ok(None, message="Student deleted successfully")

    @service_operation("fetch students")
    async def list_students_by_section(self, section_id: str) -> list[dict[str, Any]]:
        """List a section's students by roll number."""
        query = (
            self._student_query()
            .where(Student.section_id == section_id)
            .order_by(Student.roll_number)
        )
        return await self._fetch(query)

    @service_operation("fetch students")
    async def list_students_by_branch(self, branch_id: str) -> list[dict[str, Any]]:
        """List students whose account belongs to a branch."""
        query = (
            self._student_query()
            .join(Student.user)
            .where(User.branch_id == branch_id)
            .order_by(User.first_name, User.last_name)
        )
        return await self._fetch(query)

    @service_operation("fetch students")
    async def list_students_by_class(self, class_id: str) -> list[dict[str, Any]]:
        """List a class's students by roll number."""
        query = (
            self._student_query()
            .where(Student.class_id == class_id)
            .order_by(Student.roll_number)
        )
        return await self._fetch(query)

    @service_operation("search students")
    async def search_students(self, query: str) -> list[dict[str, Any]]:
        """Search by first name, last name, email or roll number."""
        pattern = f"%{query.strip()}%"
        statement = (
            self._student_query()
            .join(Student.user)
            .where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    Student.roll_number.ilike(pattern),
                )
            )
            .order_by(User.first_name)
        )
        return await self._fetch(statement)

    @service_operation("fetch statistics")
    async def get_student_stats(self) -> dict[str, int]:
        """Six independent student counts.

        With a session factory the counts run concurrently, each on its own
        session. Otherwise they run one after another on the request
        session.
        """
        aamar_id = self._tenant()
        recent_since = days_ago(self.school_settings.recent_admission_days).date()

        base = select(func.count(Student.id)).where(Student.aamar_id == aamar_id)
        queries = {
            "total_students": base,
            "active_students": base.join(Student.user).where(User.is_active.is_(True)),
            "male_students": base.join(Student.user).join(User.profile).where(Profile.gender == "MALE"),
            "female_students": base.join(Student.user).join(User.profile).where(Profile.gender == "FEMALE"),
            "students_with_pending_fees": (
                select(func.count(func.distinct(Student.id)))
                .join(Fee, Fee.student_id == Student.id)
                .where(Student.aamar_id == aamar_id, Fee.status == "PENDING")
            ),
            "recent_admissions": base.where(Student.admission_date >= recent_since),
        }

        if self.session_factory is not None:
            counts = await asyncio.gather(*(self._count_isolated(q) for q in queries.values()))
        else:
            counts = [await self._count(self.db, q) for q in queries.values()]

        return dict(zip(queries.keys(), counts))

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _student_query(self) -> Select:
        return select(Student).where(Student.aamar_id == self._tenant()).options(*_student_options())

    async def _fetch(self, query: Select) -> list[dict[str, Any]]:
        result = await self.db.execute(query)
        return [student_dto(s) for s in result.scalars().all()]

    async def _get_student(self, student_id: str) -> Student:
        result = await self.db.execute(self._student_query().where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise StudentNotFoundError("Student not found")
        return student

    async def _check_roll_number(
        self,
        section_id: str | None,
        roll_number: str,
        exclude_id: str | None = None,
    ) -> None:
        query = select(Student.id).where(
            Student.aamar_id == self._tenant(),
            Student.section_id == section_id,
            Student.roll_number == roll_number,
        )
        if exclude_id:
            query = query.where(Student.id != exclude_id)

        if (await self.db.execute(query)).scalar_one_or_none() is not None:
            raise RollNumberExistsError("Roll number already exists in this section")

    async def _check_parent(self, parent_id: str) -> None:
        result = await self.db.execute(
            select(Parent.id).where(Parent.id == parent_id, Parent.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise InvalidParentError("Invalid parent", "Invalid parent selected")

    @staticmethod
    async def _count(session: AsyncSession, query: Select) -> int:
        return (await session.execute(query)).scalar() or 0

    async def _count_isolated(self, query: Select) -> int:
        async with self.session_factory() as session:
            return await self._count(session, query)
