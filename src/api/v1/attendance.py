# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance API endpoints.

- POST / - Mark a student's attendance for a day
- GET /students/{student_id}?start=&end= - A student's attendance history
"""

import datetime as dt

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.attendance.service import AttendanceService
from src.models.attendance import AttendanceMarkRequest

router = APIRouter()


@router.post("")
async def mark_attendance(
    request: AttendanceMarkRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = AttendanceService(db, context, invalidator)
    result = await service.mark_attendance(
        request.student_id,
        request.date,
        request.status,
        request.remarks,
    )
    return envelope_response(result)


@router.get("/students/{student_id}")
async def list_student_attendance(
    student_id: str,
    db: DbSession,
    context: Context,
    start: dt.date | None = Query(None, description="First day, inclusive"),
    end: dt.date | None = Query(None, description="Last day, inclusive"),
) -> JSONResponse:
    service = AttendanceService(db, context)
    return envelope_response(await service.list_attendance_by_student(student_id, start, end))
