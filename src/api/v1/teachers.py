# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher API endpoints.

- POST / - Create a teacher
- GET /?page=&limit= - Paginated teacher list
- GET /stats - Teacher statistics
- GET /search?q= - Search teachers
- GET /{teacher_id} - Get a teacher
- PUT /{teacher_id} - Update a teacher
- DELETE /{teacher_id} - Delete a teacher, unassigning their classes
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.teacher.service import TeacherService
from src.models.teacher import TeacherCreateRequest, TeacherUpdateRequest

router = APIRouter()


@router.post("")
async def create_teacher(
    request: TeacherCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = TeacherService(db, context, invalidator)
    return envelope_response(await service.create_teacher(request), created=True)


@router.get("")
async def list_teachers(
    db: DbSession,
    context: Context,
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
) -> JSONResponse:
    return envelope_response(await TeacherService(db, context).list_teachers(page, limit))


@router.get("/stats")
async def teacher_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await TeacherService(db, context).get_teacher_stats())


@router.get("/search")
async def search_teachers(
    db: DbSession,
    context: Context,
    q: str = Query(..., min_length=1, description="Search text"),
) -> JSONResponse:
    return envelope_response(await TeacherService(db, context).search_teachers(q))


@router.get("/{teacher_id}")
async def get_teacher(teacher_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await TeacherService(db, context).get_teacher(teacher_id))


@router.put("/{teacher_id}")
async def update_teacher(
    teacher_id: str,
    request: TeacherUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = TeacherService(db, context, invalidator)
    return envelope_response(await service.update_teacher(teacher_id, request))


@router.delete("/{teacher_id}")
async def delete_teacher(
    teacher_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = TeacherService(db, context, invalidator)
    return envelope_response(await service.delete_teacher(teacher_id))
