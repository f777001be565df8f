# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints.

- POST / - Create a student
- GET / - List students (filter by section, class or branch)
- GET /stats - Student statistics
- GET /search?q= - Search by name, email or roll number
- GET /{student_id} - Get a student
- PUT /{student_id} - Update a student
- DELETE /{student_id} - Delete a student and their account
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.student.service import StudentService
from src.infrastructure.database import get_sessionmaker
from src.models.student import StudentCreateRequest, StudentUpdateRequest

router = APIRouter()


@router.post("")
async def create_student(
    request: StudentCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = StudentService(db, context, invalidator)
    return envelope_response(await service.create_student(request), created=True)


@router.get("")
async def list_students(
    db: DbSession,
    context: Context,
    section_id: str | None = Query(None, description="Only students of this section"),
    class_id: str | None = Query(None, description="Only students of this class"),
    branch_id: str | None = Query(None, description="Only students of this branch"),
) -> JSONResponse:
    service = StudentService(db, context)
    if section_id:
        return envelope_response(await service.list_students_by_section(section_id))
    if class_id:
        return envelope_response(await service.list_students_by_class(class_id))
    if branch_id:
        return envelope_response(await service.list_students_by_branch(branch_id))
    return envelope_response(await service.list_students())


@router.get("/stats")
async def student_stats(db: DbSession, context: Context) -> JSONResponse:
    service = StudentService(db, context, session_factory=get_sessionmaker())
    return envelope_response(await service.get_student_stats())


@router.get("/search")
async def search_students(
    db: DbSession,
    context: Context,
    q: str = Query(..., min_length=1, description="Search text"),
) -> JSONResponse:
    return envelope_response(await StudentService(db, context).search_students(q))


@router.get("/{student_id}")
async def get_student(student_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await StudentService(db, context).get_student(student_id))


@router.put("/{student_id}")
async def update_student(
    student_id: str,
    request: StudentUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = StudentService(db, context, invalidator)
    return envelope_response(await service.update_student(student_id, request))


@router.delete("/{student_id}")
async def delete_student(
    student_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = StudentService(db, context, invalidator)
    return envelope_response(await service.delete_student(student_id))
