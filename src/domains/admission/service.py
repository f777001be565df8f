# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admission service.

Admits a student together with a new parent account. Both identities are
created in a single transaction: if any insert fails, nothing persists.

Validation runs in a fixed order and stops at the first failure:

1. a section is selected and belongs to the tenant
2. every required field is present
3. both emails are well formed
4. neither email is used in the tenant
5. the roll number is free in the section

Admission failures surface their own message, unexpected errors included.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
from datetime import date
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.auth.password import default_password_hash
from src.domains.base import TenantScopedService
from src.domains.dto import iso
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    GENDERS,
    Branch,
    Class,
    Parent,
    Profile,
    Section,
    Student,
    User,
    UserRole,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.admission import AdmissionRequest
from src.utils.datetime import days_ago, epoch_millis, start_of_month

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = (
    "student_first_name",
    "student_last_name",
    "student_email",
    "date_of_birth",
    "gender",
    "roll_number",
    "section_id",
    "admission_date",
    "parent_first_name",
    "parent_last_name",
    "parent_email",
    "relation",
)

_BASE36_UPPER = string.digits + string.ascii_uppercase


class AdmissionError(ServiceError):
    """Base exception for admission failures.

    The message is also reported as the human-oriented detail.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message, detail or message)


class SectionNotSelectedError(AdmissionError):
    """Raised when no section is given."""

    kind = ErrorKind.VALIDATION


class AdmissionSectionNotFoundError(AdmissionError):
    """Raised when the section is not in the tenant."""

    kind = ErrorKind.NOT_FOUND


class MissingFieldError(AdmissionError):
    """Raised for the first missing required field."""

    kind = ErrorKind.VALIDATION


class InvalidDateError(AdmissionError):
    """Raised when a date is not in YYYY-MM-DD form."""

    kind = ErrorKind.VALIDATION


class InvalidEmailError(AdmissionError):
    """Raised when an email is malformed."""

    kind = ErrorKind.VALIDATION


class EmailExistsError(AdmissionError):
    """Raised when an email is already used in the tenant."""

    kind = ErrorKind.CONFLICT


class AdmissionRollNumberExistsError(AdmissionError):
    """Raised when the roll number is taken in the section."""

    kind = ErrorKind.CONFLICT


class AdmissionStudentNotFoundError(AdmissionError):
    """Raised when a student is not in the tenant."""

    kind = ErrorKind.NOT_FOUND


def field_label(field: str) -> str:
    """Human label for a request field, e.g. student_first_name -> Student First Name."""
    return field.replace("_", " ").title()


def generate_application_no() -> str:
    """Display label ``ADM-<epoch ms>-<4 base36 chars>``. Not guaranteed unique."""
    suffix = "".join(secrets.choice(_BASE36_UPPER) for _ in range(4))
    return f"ADM-{epoch_millis()}-{suffix}"


def _parse_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDateError(f"Invalid {label.lower()}") from None


def _valid_gender(value: str | None) -> str | None:
    return value if value in GENDERS else None


def _or_na(value: Any) -> Any:
    return value if value else "N/A"


def _application_dto(student: Student) -> dict[str, Any]:
    """Student shown as an admission application. Needs _application_options() loaded."""
    user = student.user
    profile = user.profile
    parent = student.parent
    section = student.section
    return {
        "id": student.id,
        "application_no": f"ADM-{student.roll_number}",
        "student_name": user.full_name,
        "roll_number": student.roll_number,
        "class": section.class_.name if section else None,
        "section": section.name if section else None,
        "branch": section.class_.branch.name if section else None,
        "admission_date": iso(student.admission_date),
        "parent_name": parent.user.full_name if parent else "N/A",
        "parent_email": parent.user.email if parent else "N/A",
        "parent_phone": _or_na(parent.user.profile.phone if parent and parent.user.profile else None),
        "student_email": user.email,
        "student_phone": _or_na(profile.phone if profile else None),
        "address": _or_na(profile.address if profile else None),
        "date_of_birth": iso(profile.date_of_birth) if profile else None,
        "gender": profile.gender if profile else None,
        "status": "Approved",
    }


def _application_options() -> list[Any]:
    return [
        selectinload(Student.user).selectinload(User.profile),
        selectinload(Student.section)
        .selectinload(Section.class_)
        .selectinload(Class.branch)
        .selectinload(Branch.school),
        selectinload(Student.parent).selectinload(Parent.user).selectinload(User.profile),
    ]


class AdmissionService(TenantScopedService):
    """Student admission workflow and admission listings."""

    @service_operation("create student admission", surface_errors=True)
    async def create_student_with_parent(self, request: AdmissionRequest) -> Ok[dict[str, Any]]:
        """Admit a student with a new parent account.

        Args:
            request: Combined admission form.

        Returns:
            Ok with student_id, parent_id and application_no.

        Raises:
            AdmissionError: For the first failed validation step.
        """
        aamar_id = self._tenant()

        if not request.section_id:
            raise SectionNotSelectedError("Please select a section")

        result = await self.db.execute(
            select(Section)
            .where(Section.id == request.section_id, Section.aamar_id == aamar_id)
            .options(selectinload(Section.class_).selectinload(Class.branch))
        )
        section = result.scalar_one_or_none()
        if section is None:
            raise AdmissionSectionNotFoundError("Selected section not found or not accessible")

        for field in REQUIRED_FIELDS:
            if not getattr(request, field):
                raise MissingFieldError(f"{field_label(field)} is required")

        date_of_birth = _parse_date(request.date_of_birth, "date of birth")
        admission_date = _parse_date(request.admission_date, "admission date")
        student_email = request.student_email.strip().lower()
        parent_email = request.parent_email.strip().lower()

        if not EMAIL_PATTERN.match(student_email):
            raise InvalidEmailError("Invalid student email format")
        if not EMAIL_PATTERN.match(parent_email):
            raise InvalidEmailError("Invalid parent email format")

        if await self._email_in_tenant(student_email):
            raise EmailExistsError("Student email already exists in this organization")
        if await self._email_in_tenant(parent_email):
            raise EmailExistsError("Parent email already exists in this organization")

        roll_taken = await self.db.execute(
            select(Student.id).where(
                Student.aamar_id == aamar_id,
                Student.section_id == section.id,
                Student.roll_number == request.roll_number,
            )
        )
        if roll_taken.scalar_one_or_none() is not None:
            raise AdmissionRollNumberExistsError("Roll number already exists in this section")

        application_no = generate_application_no()
        branch = section.class_.branch
        nationality = request.nationality or self.school_settings.default_nationality
        religion = request.religion or self.school_settings.default_religion

        async with transaction(self.db):
            parent_user = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=parent_email,
                password_hash=default_password_hash(UserRole.PARENT, self.school_settings),
                first_name=request.parent_first_name,
                last_name=request.parent_last_name,
                role=UserRole.PARENT,
                is_active=True,
                school_id=branch.school_id,
                branch_id=branch.id,
            )
            self.db.add(parent_user)
            await self.db.flush()

            self.db.add(Profile(
                id=new_id(),
                user_id=parent_user.id,
                phone=request.parent_phone,
                address=request.parent_address or request.address,
                gender=_valid_gender(request.parent_gender),
                nationality=nationality,
                religion=religion,
            ))
            parent = Parent(
                id=new_id(),
                aamar_id=aamar_id,
                user_id=parent_user.id,
                relation=request.relation,
            )
            self.db.add(parent)
            await self.db.flush()

            student_user = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=student_email,
                password_hash=default_password_hash(UserRole.STUDENT, self.school_settings),
                first_name=request.student_first_name,
                last_name=request.student_last_name,
                role=UserRole.STUDENT,
                is_active=True,
                school_id=branch.school_id,
                branch_id=branch.id,
            )
            self.db.add(student_user)
            await self.db.flush()

            self.db.add(Profile(
                id=new_id(),
                user_id=student_user.id,
                phone=request.student_phone,
                address=request.address,
                date_of_birth=date_of_birth,
                gender=_valid_gender(request.gender),
                blood_group=request.blood_group,
                nationality=nationality,
                religion=religion,
                birth_certificate_no=request.birth_certificate_no,
            ))
            student = Student(
                id=new_id(),
                aamar_id=aamar_id,
                user_id=student_user.id,
                roll_number=request.roll_number,
                admission_date=admission_date,
                section_id=section.id,
                class_id=section.class_id,
                parent_id=parent.id,
            )
            self.db.add(student)

        logger.info(
            "Admitted student %s with parent %s in %s (application %s)",
            student.id,
            parent.id,
            aamar_id,
            application_no,
        )
        self._invalidate(DashboardPaths.ADMISSIONS, DashboardPaths.STUDENTS, DashboardPaths.PARENTS)

        return Ok(
            {
                "student_id": student.id,
                "parent_id": parent.id,
                "application_no": application_no,
            },
            message=f"Student admission successful! Application No: {application_no}",
        )

    @service_operation("fetch sections")
    async def list_sections_by_class(self, class_id: str) -> list[dict[str, Any]]:
        """Sections of a class with student counts, for the admission form."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Section, func.count(Student.id))
            .outerjoin(Student, Student.section_id == Section.id)
            .where(Section.aamar_id == aamar_id, Section.class_id == class_id)
            .group_by(Section.id)
            .order_by(Section.name)
        )
        return [
            {
                "id": section.id,
                "name": section.name,
                "display_name": section.display_name,
                "capacity": section.capacity,
                "student_count": count,
            }
            for section, count in result.all()
        ]

    @service_operation("fetch sections")
    async def list_all_sections(self) -> list[dict[str, Any]]:
        """Every section with its class and branch names."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Section)
            .join(Section.class_)
            .where(Section.aamar_id == aamar_id)
            .options(selectinload(Section.class_).selectinload(Class.branch))
            .order_by(Class.name, Section.name)
        )
        return [
            {
                "id": section.id,
                "name": section.name,
                "display_name": section.display_name,
                "class_id": section.class_id,
                "class_name": section.class_.name,
                "branch_name": section.class_.branch.name,
            }
            for section in result.scalars().all()
        ]

    @service_operation("fetch admission applications")
    async def list_admission_applications(self) -> list[dict[str, Any]]:
        """Admitted students shown as applications, newest first."""
        result = await self.db.execute(self._application_query().order_by(Student.created_at.desc()))
        return [_application_dto(s) for s in result.scalars().all()]

    @service_operation("fetch admission statistics")
    async def get_admission_stats(self) -> dict[str, Any]:
        """Admission totals and breakdowns by class, branch and gender."""
        result = await self.db.execute(self._application_query())
        students = result.scalars().all()

        month_start = start_of_month().date()
        recent_since = days_ago(self.school_settings.recent_admission_days).date()

        by_class: dict[str, int] = {}
        by_branch: dict[str, int] = {}
        by_gender: dict[str, int] = {}
        this_month = 0
        recent = 0

        for student in students:
            admitted = student.admission_date
            if admitted is not None:
                if admitted >= month_start:
                    this_month += 1
                if admitted >= recent_since:
                    recent += 1

            if student.section is not None:
                class_key = f"{student.section.class_.name} {student.section.name}"
                by_class[class_key] = by_class.get(class_key, 0) + 1
                branch_key = student.section.class_.branch.name
                by_branch[branch_key] = by_branch.get(branch_key, 0) + 1

            profile = student.user.profile
            gender = (profile.gender if profile else None) or "Not specified"
            by_gender[gender] = by_gender.get(gender, 0) + 1

        return {
            "total_students": len(students),
            "this_month_admissions": this_month,
            "recent_admissions": recent,
            "active_students": len(students),
            "class_counts": by_class,
            "branch_counts": by_branch,
            "gender_counts": by_gender,
        }

    @service_operation("search admissions")
    async def search_admissions(self, query: str) -> list[dict[str, Any]]:
        """Search admissions by student name, email or roll number.

        Queries shorter than the configured minimum return nothing.
        """
        term = (query or "").strip()
        if len(term) < self.school_settings.admission_search_min_length:
            return []

        pattern = f"%{term}%"
        result = await self.db.execute(
            self._application_query()
            .join(Student.user)
            .where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    Student.roll_number.ilike(pattern),
                )
            )
            .order_by(Student.created_at.desc())
            .limit(self.school_settings.admission_search_limit)
        )
        return [_application_dto(s) for s in result.scalars().all()]

    @service_operation("fetch student details")
    async def get_student_details(self, student_id: str) -> dict[str, Any]:
        """Full admission record for one student.

        Raises:
            AdmissionStudentNotFoundError: If the student is not in the tenant.
        """
        result = await self.db.execute(self._application_query().where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise AdmissionStudentNotFoundError("Student not found")

        details = _application_dto(student)
        profile = student.user.profile
        section = student.section
        details.update(
            school=section.class_.branch.school.name if section else None,
            parent_relation=_or_na(student.parent.relation if student.parent else None),
            blood_group=profile.blood_group if profile else None,
            nationality=profile.nationality if profile else None,
            religion=profile.religion if profile else None,
            birth_certificate_no=profile.birth_certificate_no if profile else None,
            status="Active",
        )
        return details

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _application_query(self) -> Select:
        return (
            select(Student)
            .where(Student.aamar_id == self._tenant())
            .options(*_application_options())
        )

    async def _email_in_tenant(self, email: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(
                func.lower(User.email) == email,
                User.aamar_id == self._tenant(),
            )
        )
        return result.scalar_one_or_none() is not None
