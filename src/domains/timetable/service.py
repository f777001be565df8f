# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timetable service.

A timetable row schedules one subject for a class on a weekday. Rows for
the same class and day must not overlap.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import time
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.base import TenantScopedService
from src.domains.timetable.slots import day_name, format_time, intervals_overlap
from src.infrastructure.database import transaction
from src.infrastructure.database.models import Class, Subject, Teacher, Timetable, new_id
from src.infrastructure.events import DashboardPaths
from src.models.timetable import TimetableCreateRequest, TimetableUpdateRequest

logger = logging.getLogger(__name__)


class TimetableServiceError(ServiceError):
    """Base exception for timetable service errors."""

    pass


class TimetableNotFoundError(TimetableServiceError):
    """Raised when a timetable row is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class TimetableReferenceNotFoundError(TimetableServiceError):
    """Raised when the class, subject or teacher is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class TimeSlotConflictError(TimetableServiceError):
    """Raised when a slot overlaps another slot of the class on that day."""

    kind = ErrorKind.CONFLICT


def _timetable_dto(timetable: Timetable) -> dict[str, Any]:
    return {
        "id": timetable.id,
        "class_id": timetable.class_id,
        "subject_id": timetable.subject_id,
        "teacher_id": timetable.teacher_id,
        "day_of_week": timetable.day_of_week,
        "day_name": day_name(timetable.day_of_week),
        "start_time": format_time(timetable.start_time),
        "end_time": format_time(timetable.end_time),
        "room": timetable.room,
    }


def _validate_slot(day_of_week: int | None, start: time | None, end: time | None) -> None:
    if day_of_week is None or start is None or end is None:
        raise TimetableServiceError("All fields are required")
    if not 0 <= day_of_week <= 6:
        raise TimetableServiceError("Day of week must be between 0 and 6")
    if start >= end:
        raise TimetableServiceError("Start time must be before end time")


class TimetableService(TenantScopedService):
    """Timetable CRUD with slot overlap checks."""

    @service_operation("create timetable")
    async def create_timetable(self, request: TimetableCreateRequest) -> Ok[dict[str, Any]]:
        """Create a timetable slot.

        Raises:
            TimetableReferenceNotFoundError: If class, subject or teacher is not
                in the tenant.
            TimeSlotConflictError: If the slot overlaps an existing one.
        """
        aamar_id = self._tenant()
        if not request.class_id or not request.subject_id:
            raise TimetableServiceError("All fields are required")
        _validate_slot(request.day_of_week, request.start_time, request.end_time)

        await self._check_class(request.class_id)
        await self._check_subject(request.subject_id)
        if request.teacher_id:
            await self._check_teacher(request.teacher_id)
        await self._check_overlap(
            request.class_id, request.day_of_week, request.start_time, request.end_time
        )

        timetable = Timetable(
            id=new_id(),
            aamar_id=aamar_id,
            class_id=request.class_id,
            subject_id=request.subject_id,
            teacher_id=request.teacher_id,
            day_of_week=request.day_of_week,
            start_time=request.start_time,
            end_time=request.end_time,
            room=request.room,
        )
        async with transaction(self.db):
            self.db.add(timetable)

        logger.info(
            "Created timetable: %s (%s %s-%s) in %s",
            timetable.id,
            day_name(timetable.day_of_week),
            format_time(timetable.start_time),
            format_time(timetable.end_time),
            aamar_id,
        )
        self._invalidate(DashboardPaths.TIMETABLES, DashboardPaths.CLASSES)

        return Ok(_timetable_dto(timetable), message="Timetable created successfully")

    @service_operation("update timetable")
    async def update_timetable(self, timetable_id: str, request: TimetableUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a timetable slot.

        The overlap check runs only when the day or times change and skips
        the slot being updated.

        Raises:
            TimetableNotFoundError: If the slot is not in the tenant.
            TimetableReferenceNotFoundError: If a new subject or teacher is not
                in the tenant.
            TimeSlotConflictError: If the new slot overlaps another one.
        """
        timetable = await self._get_timetable(timetable_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        day = changes.get("day_of_week", timetable.day_of_week)
        start = changes.get("start_time", timetable.start_time)
        end = changes.get("end_time", timetable.end_time)

        if (day, start, end) != (timetable.day_of_week, timetable.start_time, timetable.end_time):
            _validate_slot(day, start, end)
            await self._check_overlap(timetable.class_id, day, start, end, exclude_id=timetable.id)

        if "subject_id" in changes and changes["subject_id"] != timetable.subject_id:
            await self._check_subject(changes["subject_id"])

        if "teacher_id" in changes and changes["teacher_id"] != timetable.teacher_id:
            await self._check_teacher(changes["teacher_id"])

        async with transaction(self.db):
            for field, value in changes.items():
                setattr(timetable, field, value)

        logger.info("Updated timetable: %s in %s", timetable.id, timetable.aamar_id)
        self._invalidate(DashboardPaths.TIMETABLES, DashboardPaths.CLASSES)

        return Ok(_timetable_dto(timetable), message="Timetable updated successfully")

    @service_operation("delete timetable")
    async def delete_timetable(self, timetable_id: str) -> Ok[None]:
        """Delete a timetable slot.

        Raises:
            TimetableNotFoundError: If the slot is not in the tenant.
        """
        timetable = await self._get_timetable(timetable_id)
        async with transaction(self.db):
            await self.db.delete(timetable)

        logger.info("Deleted timetable: %s in %s", timetable_id, timetable.aamar_id)
        self._invalidate(DashboardPaths.TIMETABLES, DashboardPaths.CLASSES)

        return Ok(None, message="Timetable deleted successfully")

    @service_operation("fetch timetable")
    async def get_timetable(self, timetable_id: str) -> dict[str, Any]:
        """Get a timetable slot with class and subject names."""
        timetable = await self._get_timetable(timetable_id, with_names=True)
        return {
            **_timetable_dto(timetable),
            "class_name": timetable.class_.name,
            "subject_name": timetable.subject.name,
        }

    @service_operation("fetch timetables")
    async def list_timetables(self, class_id: str | None = None) -> list[dict[str, Any]]:
        """List slots ordered by day and start time.

        Args:
            class_id: Only slots of this class.
        """
        aamar_id = self._tenant()
        query = (
            select(Timetable)
            .where(Timetable.aamar_id == aamar_id)
            .options(selectinload(Timetable.class_), selectinload(Timetable.subject))
            .order_by(Timetable.day_of_week, Timetable.start_time)
        )
        if class_id:
            query = query.where(Timetable.class_id == class_id)

        result = await self.db.execute(query)
        return [
            {
                **_timetable_dto(t),
                "class_name": t.class_.name,
                "subject_name": t.subject.name,
            }
            for t in result.scalars().all()
        ]

    @service_operation("fetch timetable statistics")
    async def get_timetable_stats(self) -> dict[str, int]:
        """Slot totals and the mean number of slots per scheduled day."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Timetable.class_id, Timetable.subject_id, Timetable.day_of_week).where(
                Timetable.aamar_id == aamar_id
            )
        )
        rows = result.all()

        per_day = Counter(day for _, _, day in rows)
        return {
            "total_timetables": len(rows),
            "total_classes": len({class_id for class_id, _, _ in rows}),
            "total_subjects": len({subject_id for _, subject_id, _ in rows}),
            "average_periods_per_day": round(sum(per_day.values()) / len(per_day)) if per_day else 0,
        }

    # =========================================================================
    # Private Helpers
    # =========================================================================

    async def _get_timetable(self, timetable_id: str, with_names: bool = False) -> Timetable:
        query = select(Timetable).where(
            Timetable.id == timetable_id,
            Timetable.aamar_id == self._tenant(),
        )
        if with_names:
            query = query.options(selectinload(Timetable.class_), selectinload(Timetable.subject))

        timetable = (await self.db.execute(query)).scalar_one_or_none()
        if timetable is None:
            raise TimetableNotFoundError("Timetable not found")
        return timetable

    async def _check_class(self, class_id: str) -> None:
        result = await self.db.execute(
            select(Class.id).where(Class.id == class_id, Class.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise TimetableReferenceNotFoundError("Class not found")

    async def _check_subject(self, subject_id: str) -> None:
        result = await self.db.execute(
            select(Subject.id).where(Subject.id == subject_id, Subject.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise TimetableReferenceNotFoundError("Subject not found")

    async def _check_teacher(self, teacher_id: str) -> None:
        result = await self.db.execute(
            select(Teacher.id).where(Teacher.id == teacher_id, Teacher.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise TimetableReferenceNotFoundError("Teacher not found")

    async def _check_overlap(
        self,
        class_id: str,
        day_of_week: int,
        start: time,
        end: time,
        exclude_id: str | None = None,
    ) -> None:
        query = select(Timetable).where(
            Timetable.aamar_id == self._tenant(),
            Timetable.class_id == class_id,
            Timetable.day_of_week == day_of_week,
        )
        if exclude_id:
            query = query.where(Timetable.id != exclude_id)

        existing = (await self.db.execute(query)).scalars().all()
        for slot in existing:
            if intervals_overlap(start, end, slot.start_time, slot.end_time):
                raise TimeSlotConflictError(
                    "Time slot conflicts with existing timetable",
                    f"{day_name(day_of_week)} {format_time(slot.start_time)}-"
                    f"{format_time(slot.end_time)} is already taken",
                )
