# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service.

One attendance row per student per day. Marking the same day again
overwrites the status and remarks.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from sqlalchemy import select

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.base import TenantScopedService
from src.domains.dto import iso
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    ATTENDANCE_STATUSES,
    Attendance,
    Student,
    new_id,
)
from src.infrastructure.events import DashboardPaths

logger = logging.getLogger(__name__)


class AttendanceServiceError(ServiceError):
    """Base exception for attendance service errors."""

    pass


class AttendanceStudentNotFoundError(AttendanceServiceError):
    """Raised when the student is not in the tenant."""

    kind = ErrorKind.NOT_FOUND


def _attendance_dto(record: Attendance) -> dict[str, Any]:
    return {
        "id": record.id,
        "student_id": record.student_id,
        "date": iso(record.date),
        "status": record.status,
        "remarks": record.remarks,
    }


class AttendanceService(TenantScopedService):
    """Marks and lists student attendance."""

    @service_operation("mark attendance")
    async def mark_attendance(
        self,
        student_id: str,
        date: dt.date,
        status: str,
        remarks: str | None = None,
    ) -> Ok[dict[str, Any]]:
        """Record a student's attendance for a day.

        Args:
            student_id: Student to mark.
            date: Day being recorded.
            status: One of PRESENT, ABSENT, LATE or EXCUSED.
            remarks: Optional note.

        Raises:
            AttendanceServiceError: If the status is not recognised.
            AttendanceStudentNotFoundError: If the student is not in the tenant.
        """
        aamar_id = self._tenant()
        status = (status or "").upper()
        if status not in ATTENDANCE_STATUSES:
            raise AttendanceServiceError(
                "Invalid attendance status",
                f"Status must be one of {', '.join(ATTENDANCE_STATUSES)}",
            )

        student = await self.db.execute(
            select(Student.id).where(Student.id == student_id, Student.aamar_id == aamar_id)
        )
        if student.scalar_one_or_none() is None:
            raise AttendanceStudentNotFoundError("Student not found")

        result = await self.db.execute(
            select(Attendance).where(
                Attendance.student_id == student_id,
                Attendance.date == date,
                Attendance.aamar_id == aamar_id,
            )
        )
        record = result.scalar_one_or_none()

        async with transaction(self.db):
            if record is None:
                record = Attendance(
                    id=new_id(),
                    aamar_id=aamar_id,
                    student_id=student_id,
                    date=date,
                    status=status,
                    remarks=remarks,
                )
                self.db.add(record)
            else:
                record.status = status
                record.remarks = remarks

        logger.debug("Marked %s for student %s on %s", status, student_id, date)
        self._invalidate(DashboardPaths.ATTENDANCE)

        return Ok(_attendance_dto(record), message="Attendance recorded successfully")

    @service_operation("fetch attendance")
    async def list_attendance_by_student(
        self,
        student_id: str,
        start: dt.date | None = None,
        end: dt.date | None = None,
    ) -> list[dict[str, Any]]:
        """List a student's attendance, newest first.

        The date range is applied, inclusive, only when both ends are given.
        """
        query = select(Attendance).where(
            Attendance.student_id == student_id,
            Attendance.aamar_id == self._tenant(),
        )
        if start is not None and end is not None:
            query = query.where(Attendance.date >= start, Attendance.date <= end)

        result = await self.db.execute(query.order_by(Attendance.date.desc()))
        return [_attendance_dto(r) for r in result.scalars().all()]
