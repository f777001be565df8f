# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class routine service.

A routine is the weekly grid of a class for one academic year. Saving a
routine replaces all of its slots in one transaction; slots of the same
day must not overlap.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.base import TenantScopedService
from src.domains.timetable.slots import DAY_NAMES, format_time, intervals_overlap
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    ROUTINE_CLASS_TYPES,
    Branch,
    Class,
    ClassRoutine,
    RoutineSlot,
    Subject,
    Teacher,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.routine import RoutineSlotInput, RoutineUpsertRequest

logger = logging.getLogger(__name__)

FOREIGN_REFERENCE_MESSAGE = "The specified {} does not exist or does not belong to your school"


class RoutineServiceError(ServiceError):
    """Base exception for class routine errors."""

    pass


class RoutineNotFoundError(RoutineServiceError):
    """Raised when a routine is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class InvalidRoutineReferenceError(RoutineServiceError):
    """Raised when a class, branch, subject or teacher is not in the tenant."""

    kind = ErrorKind.VALIDATION


class RoutineSlotOverlapError(RoutineServiceError):
    """Raised when two submitted slots of the same day overlap."""

    kind = ErrorKind.VALIDATION


def _slot_order(slot: RoutineSlot) -> tuple[int, Any]:
    return DAY_NAMES.index(slot.day), slot.start_time


def _slot_dto(slot: RoutineSlot) -> dict[str, Any]:
    return {
        "id": slot.id,
        "day": slot.day,
        "start_time": format_time(slot.start_time),
        "end_time": format_time(slot.end_time),
        "subject_id": slot.subject_id,
        "teacher_id": slot.teacher_id,
        "class_type": slot.class_type,
    }


def _routine_dto(routine: ClassRoutine, slots: list[RoutineSlot]) -> dict[str, Any]:
    return {
        "id": routine.id,
        "class_id": routine.class_id,
        "academic_year": routine.academic_year,
        "branch_id": routine.branch_id,
        "school_id": routine.school_id,
        "created_by": routine.created_by,
        "slots": [_slot_dto(slot) for slot in sorted(slots, key=_slot_order)],
    }


def _validate_slots(slots: list[RoutineSlotInput]) -> None:
    """Check each slot and reject overlaps within a day.

    Raises:
        RoutineServiceError: If a slot is incomplete or malformed.
        RoutineSlotOverlapError: If two slots of the same day overlap.
    """
    by_day: dict[str, list[RoutineSlotInput]] = {}
    for slot in slots:
        if not slot.day or slot.start_time is None or slot.end_time is None:
            raise RoutineServiceError("Each slot needs a day, start time and end time")
        if slot.day not in DAY_NAMES:
            raise RoutineServiceError("Invalid day", f"{slot.day} is not a weekday name")
        if slot.start_time >= slot.end_time:
            raise RoutineServiceError("Start time must be before end time")
        if slot.class_type not in ROUTINE_CLASS_TYPES:
            raise RoutineServiceError(
                "Invalid class type",
                f"Class type must be one of {', '.join(ROUTINE_CLASS_TYPES)}",
            )

        for other in by_day.get(slot.day, []):
            if intervals_overlap(slot.start_time, slot.end_time, other.start_time, other.end_time):
                raise RoutineSlotOverlapError(
                    "Routine slots overlap",
                    f"{slot.day} {format_time(slot.start_time)}-{format_time(slot.end_time)} "
                    f"overlaps {format_time(other.start_time)}-{format_time(other.end_time)}",
                )
        by_day.setdefault(slot.day, []).append(slot)


class RoutineService(TenantScopedService):
    """Class routine grids."""

    @service_operation("fetch class routine")
    async def get_class_routine(self, class_id: str, academic_year: str | None = None) -> dict[str, Any]:
        """Get the routine of a class with subject and teacher names.

        Args:
            class_id: Class whose routine to fetch.
            academic_year: Year to fetch. The latest year when omitted.

        Raises:
            RoutineNotFoundError: If the class has no routine in the tenant.
        """
        query = (
            select(ClassRoutine)
            .where(ClassRoutine.class_id == class_id, ClassRoutine.aamar_id == self._tenant())
            .options(
                selectinload(ClassRoutine.class_),
                selectinload(ClassRoutine.slots).selectinload(RoutineSlot.subject),
                selectinload(ClassRoutine.slots).selectinload(RoutineSlot.teacher).selectinload(Teacher.user),
            )
        )
        if academic_year:
            query = query.where(ClassRoutine.academic_year == academic_year)
        query = query.order_by(ClassRoutine.academic_year.desc()).limit(1)

        routine = (await self.db.execute(query)).scalar_one_or_none()
        if routine is None:
            raise RoutineNotFoundError("Class routine not found", "The specified class routine was not found")

        dto = _routine_dto(routine, routine.slots)
        names = {
            slot.id: (
                slot.subject.name if slot.subject else None,
                slot.teacher.user.full_name if slot.teacher else None,
            )
            for slot in routine.slots
        }
        for slot in dto["slots"]:
            slot["subject_name"], slot["teacher_name"] = names[slot["id"]]
        dto["class_name"] = routine.class_.name
        return dto

    @service_operation("fetch class routines")
    async def list_class_routines(self, academic_year: str | None = None) -> list[dict[str, Any]]:
        """List routines with class names and slot counts."""
        query = (
            select(ClassRoutine)
            .where(ClassRoutine.aamar_id == self._tenant())
            .options(selectinload(ClassRoutine.class_), selectinload(ClassRoutine.slots))
            .order_by(ClassRoutine.academic_year.desc())
        )
        if academic_year:
            query = query.where(ClassRoutine.academic_year == academic_year)

        result = await self.db.execute(query)
        return [
            {
                "id": routine.id,
                "class_id": routine.class_id,
                "class_name": routine.class_.name,
                "academic_year": routine.academic_year,
                "branch_id": routine.branch_id,
                "slot_count": len(routine.slots),
            }
            for routine in result.scalars().all()
        ]

    @service_operation("save class routine")
    async def upsert_class_routine(self, request: RoutineUpsertRequest) -> Ok[dict[str, Any]]:
        """Create or replace the routine of a class for an academic year.

        The class, branch and every referenced subject and teacher must
        belong to the tenant. An existing routine keeps its id; its slots
        are deleted and recreated from the request.

        Raises:
            InvalidRoutineReferenceError: If a referenced row is not in the tenant.
            RoutineSlotOverlapError: If two slots of the same day overlap.
        """
        aamar_id = self._tenant()
        if not (request.class_id and request.academic_year and request.branch_id):
            raise RoutineServiceError("Required fields are missing")
        _validate_slots(request.slots)

        await self._check_ids(Class, {request.class_id}, "class")
        await self._check_ids(Branch, {request.branch_id}, "branch")
        subject_ids = {slot.subject_id for slot in request.slots if slot.subject_id}
        if subject_ids:
            await self._check_ids(Subject, subject_ids, "subject")
        teacher_ids = {slot.teacher_id for slot in request.slots if slot.teacher_id}
        if teacher_ids:
            await self._check_ids(Teacher, teacher_ids, "teacher")

        result = await self.db.execute(
            select(ClassRoutine).where(
                ClassRoutine.aamar_id == aamar_id,
                ClassRoutine.class_id == request.class_id,
                ClassRoutine.academic_year == request.academic_year,
            )
        )
        routine = result.scalar_one_or_none()

        async with transaction(self.db):
            if routine is None:
                routine = ClassRoutine(
                    id=new_id(),
                    aamar_id=aamar_id,
                    class_id=request.class_id,
                    academic_year=request.academic_year,
                    branch_id=request.branch_id,
                    school_id=self.context.school_id,
                    created_by=self.context.user_id,
                )
                self.db.add(routine)
                await self.db.flush()
                message = "Class routine created successfully"
            else:
                await self.db.execute(
                    delete(RoutineSlot).where(
                        RoutineSlot.routine_id == routine.id,
                        RoutineSlot.aamar_id == aamar_id,
                    )
                )
                routine.branch_id = request.branch_id
                routine.created_by = self.context.user_id
                message = "Class routine updated successfully"

            slots = [
                RoutineSlot(
                    id=new_id(),
                    aamar_id=aamar_id,
                    routine_id=routine.id,
                    day=slot.day,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    subject_id=slot.subject_id,
                    teacher_id=slot.teacher_id,
                    class_type=slot.class_type,
                )
                for slot in request.slots
            ]
            for slot in slots:
                self.db.add(slot)

        logger.info(
            "Saved class routine: %s (%d slots) for class %s in %s",
            routine.id,
            len(slots),
            routine.class_id,
            aamar_id,
        )
        self._invalidate(DashboardPaths.ROUTINES)

        return Ok(_routine_dto(routine, slots), message=message)

    @service_operation("delete class routine")
    async def delete_class_routine(self, routine_id: str) -> Ok[None]:
        """Delete a routine and its slots.

        Raises:
            RoutineNotFoundError: If the routine is not in the tenant.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(ClassRoutine).where(ClassRoutine.id == routine_id, ClassRoutine.aamar_id == aamar_id)
        )
        routine = result.scalar_one_or_none()
        if routine is None:
            raise RoutineNotFoundError("Class routine not found", "The specified class routine was not found")

        async with transaction(self.db):
            await self.db.execute(
                delete(RoutineSlot).where(RoutineSlot.routine_id == routine.id, RoutineSlot.aamar_id == aamar_id)
            )
            await self.db.delete(routine)

        logger.info("Deleted class routine: %s in %s", routine_id, aamar_id)
        self._invalidate(DashboardPaths.ROUTINES)

        return Ok(None, message="Class routine deleted successfully")

    # =========================================================================
    # Private Helpers
    # =========================================================================

    async def _check_ids(self, model: Any, ids: set[str], label: str) -> None:
        result = await self.db.execute(
            select(func.count(model.id)).where(model.id.in_(sorted(ids)), model.aamar_id == self._tenant())
        )
        if (result.scalar() or 0) != len(ids):
            raise InvalidRoutineReferenceError(f"Invalid {label}", FOREIGN_REFERENCE_MESSAGE.format(label))
