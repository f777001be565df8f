# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section service.

Sections are owned by classes. Capacity is advisory: it is reported as
available slots and occupancy, never enforced on enrolment.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.base import TenantScopedService
from src.domains.dto import percent
from src.infrastructure.database import transaction
from src.infrastructure.database.models import Class, Section, Student, Teacher, new_id
from src.infrastructure.events import DashboardPaths
from src.models.section import SectionCreateRequest, SectionUpdateRequest

logger = logging.getLogger(__name__)


class SectionServiceError(ServiceError):
    """Base exception for section service errors."""

    pass


class SectionNotFoundError(SectionServiceError):
    """Raised when a section is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class SectionClassNotFoundError(SectionServiceError):
    """Raised when the owning class is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class SectionExistsError(SectionServiceError):
    """Raised when the class already has a section with this name."""

    kind = ErrorKind.CONFLICT


class SectionNotEmptyError(SectionServiceError):
    """Raised when deleting a section that still has students."""

    kind = ErrorKind.PRECONDITION


def display_name(class_name: str, section_name: str) -> str:
    return f"{class_name} Section {section_name}"


def _section_dto(section: Section, student_count: int) -> dict[str, Any]:
    return {
        "id": section.id,
        "class_id": section.class_id,
        "name": section.name,
        "display_name": section.display_name,
        "capacity": section.capacity,
        "student_count": student_count,
        "available_slots": section.capacity - student_count,
    }


def _with_counts():
    """Sections joined with their student counts."""
    return (
        select(Section, func.count(Student.id))
        .outerjoin(Student, Student.section_id == Section.id)
        .group_by(Section.id)
    )


class SectionService(TenantScopedService):
    """Section CRUD and occupancy statistics."""

    @service_operation("create section")
    async def create_section(self, request: SectionCreateRequest) -> Ok[dict[str, Any]]:
        """Create a section in a class.

        Raises:
            SectionClassNotFoundError: If the class is not in the tenant.
            SectionExistsError: If the name is taken in that class.
        """
        aamar_id = self._tenant()
        if not request.name or not request.class_id:
            raise SectionServiceError("Required fields are missing")

        class_ = await self._get_class(request.class_id)
        await self._check_duplicate(class_, request.name)

        section = Section(
            id=new_id(),
            aamar_id=aamar_id,
            class_id=class_.id,
            name=request.name,
            display_name=display_name(class_.name, request.name),
            capacity=request.capacity or self.school_settings.default_section_capacity,
        )

        async with transaction(self.db):
            self.db.add(section)

        logger.info("Created section: %s (%s) in %s", section.display_name, section.id, aamar_id)
        self._invalidate(DashboardPaths.CLASSES)

        return Ok(
            _section_dto(section, 0),
            message=f"Section {section.display_name} created successfully!",
        )

    @service_operation("fetch sections")
    async def list_sections_by_class(self, class_id: str) -> list[dict[str, Any]]:
        """List the sections of a class with student counts, ordered by name."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            _with_counts()
            .where(Section.aamar_id == aamar_id, Section.class_id == class_id)
            .order_by(Section.name)
        )
        return [_section_dto(section, count) for section, count in result.all()]

    @service_operation("fetch sections")
    async def list_sections(self) -> list[dict[str, Any]]:
        """List every section with occupancy, ordered by class then name."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            _with_counts()
            .join(Section.class_)
            .where(Section.aamar_id == aamar_id)
            .options(
                selectinload(Section.class_).selectinload(Class.branch),
                selectinload(Section.class_).selectinload(Class.teacher).selectinload(Teacher.user),
            )
            .order_by(Class.name, Section.name)
        )

        sections = []
        for section, count in result.all():
            class_ = section.class_
            sections.append({
                **_section_dto(section, count),
                "occupancy_rate": percent(count, section.capacity),
                "status": "Full" if count >= section.capacity else "Available",
                "class": {
                    "id": class_.id,
                    "name": class_.name,
                    "academic_year": class_.academic_year,
                    "branch": class_.branch.name if class_.branch else None,
                    "teacher": class_.teacher.user.full_name if class_.teacher else "Not assigned",
                },
            })
        return sections

    @service_operation("update section")
    async def update_section(self, section_id: str, request: SectionUpdateRequest) -> Ok[dict[str, Any]]:
        """Rename a section or change its capacity.

        Raises:
            SectionNotFoundError: If the section is not in the tenant.
            SectionExistsError: If the new name is taken in the class.
        """
        if not request.name:
            raise SectionServiceError("Section name is required")

        section = await self._get_section(section_id)
        class_ = section.class_
        if request.name != section.name:
            await self._check_duplicate(class_, request.name, exclude_id=section.id)

        async with transaction(self.db):
            section.name = request.name
            section.display_name = display_name(class_.name, request.name)
            if request.capacity:
                section.capacity = request.capacity

        logger.info("Updated section: %s in %s", section.id, section.aamar_id)
        self._invalidate(DashboardPaths.CLASSES)

        return Ok(
            _section_dto(section, len(section.students)),
            message=f"Section {section.display_name} updated successfully!",
        )

    @service_operation("delete section")
    async def delete_section(self, section_id: str) -> Ok[None]:
        """Delete an empty section.

        Raises:
            SectionNotFoundError: If the section is not in the tenant.
            SectionNotEmptyError: If students are enrolled.
        """
        section = await self._get_section(section_id)
        enrolled = len(section.students)
        if enrolled > 0:
            raise SectionNotEmptyError(
                f"Cannot delete section {section.display_name}. It has {enrolled} students enrolled."
            )

        async with transaction(self.db):
            await self.db.delete(section)

        logger.info("Deleted section: %s in %s", section_id, section.aamar_id)
        self._invalidate(DashboardPaths.CLASSES)

        return Ok(None, message=f"Section {section.display_name} deleted successfully!")

    @service_operation("fetch section statistics")
    async def get_section_stats(self) -> dict[str, int]:
        """Capacity and occupancy totals across the tenant's sections."""
        aamar_id = self._tenant()
        total_students = (
            await self.db.execute(select(func.count(Student.id)).where(Student.aamar_id == aamar_id))
        ).scalar() or 0
        rows = (await self.db.execute(_with_counts().where(Section.aamar_id == aamar_id))).all()

        total_capacity = sum(section.capacity for section, _ in rows)
        rates = [count / section.capacity * 100 if section.capacity else 0 for section, count in rows]

        return {
            "total_sections": len(rows),
            "total_students": total_students,
            "total_capacity": total_capacity,
            "average_occupancy": round(sum(rates) / len(rates)) if rates else 0,
            "available_slots": total_capacity - total_students,
        }

    async def _get_class(self, class_id: str) -> Class:
        result = await self.db.execute(
            select(Class).where(Class.id == class_id, Class.aamar_id == self._tenant())
        )
        class_ = result.scalar_one_or_none()
        if class_ is None:
            raise SectionClassNotFoundError("Class not found")
        return class_

    async def _get_section(self, section_id: str) -> Section:
        result = await self.db.execute(
            select(Section)
            .where(Section.id == section_id, Section.aamar_id == self._tenant())
            .options(selectinload(Section.class_), selectinload(Section.students))
        )
        section = result.scalar_one_or_none()
        if section is None:
            raise SectionNotFoundError("Section not found")
        return section

    async def _check_duplicate(self, class_: Class, name: str, exclude_id: str | None = None) -> None:
        query = select(Section.id).where(
            Section.aamar_id == self._tenant(),
            Section.class_id == class_.id,
            Section.name == name,
        )
        if exclude_id:
            query = query.where(Section.id != exclude_id)

        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise SectionExistsError(f"Section {name} already exists for {class_.name}")
