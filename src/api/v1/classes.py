# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class management API endpoints.

This module provides endpoints for class management:
- POST / - Create a class
- GET / - List classes (optionally by branch or academic year)
- GET /stats - Class statistics
- GET /search - Search classes
- GET /available-teachers - Teachers that can take a homeroom class
- GET /subjects - Subjects available for class timetables
- GET /{class_id} - Get class details
- PUT /{class_id} - Update class
- DELETE /{class_id} - Delete class
- POST /{class_id}/students - Assign students (managed through sections)
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.class_.service import ClassService
from src.models.class_ import AssignStudentsRequest, ClassCreateRequest, ClassUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def create_class(
    request: ClassCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = ClassService(db, context, invalidator)
    return envelope_response(await service.create_class(request), created=True)


@router.get("")
async def list_classes(
    db: DbSession,
    context: Context,
    branch_id: str | None = Query(None, description="Only classes of this branch"),
    academic_year: str | None = Query(None, description="Only classes of this academic year"),
) -> JSONResponse:
    """List classes, optionally filtered by branch or academic year."""
    service = ClassService(db, context)
    if branch_id:
        return envelope_response(await service.list_classes_by_branch(branch_id))
    if academic_year:
        return envelope_response(await service.list_classes_by_academic_year(academic_year))
    return envelope_response(await service.list_classes())


@router.get("/stats")
async def class_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await ClassService(db, context).get_class_stats())


@router.get("/search")
async def search_classes(
    db: DbSession,
    context: Context,
    q: str = Query(..., min_length=1, description="Search text"),
) -> JSONResponse:
    return envelope_response(await ClassService(db, context).search_classes(q))


@router.get("/available-teachers")
async def available_teachers(
    db: DbSession,
    context: Context,
    branch_id: str | None = Query(None, description="Restrict to a branch"),
) -> JSONResponse:
    return envelope_response(await ClassService(db, context).list_available_teachers(branch_id))


@router.get("/subjects")
async def subjects_for_class(
    db: DbSession,
    context: Context,
    class_id: str | None = Query(None, description="Restrict to a class"),
) -> JSONResponse:
    return envelope_response(await ClassService(db, context).list_subjects_for_class(class_id))


@router.get("/{class_id}")
async def get_class(class_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await ClassService(db, context).get_class(class_id))


@router.put("/{class_id}")
async def update_class(
    class_id: str,
    request: ClassUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = ClassService(db, context, invalidator)
    return envelope_response(await service.update_class(class_id, request))


@router.delete("/{class_id}")
async def delete_class(
    class_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = ClassService(db, context, invalidator)
    return envelope_response(await service.delete_class(class_id))


@router.post("/{class_id}/students")
async def assign_students(
    class_id: str,
    request: AssignStudentsRequest,
    db: DbSession,
    context: Context,
) -> JSONResponse:
    service = ClassService(db, context)
    return envelope_response(await service.assign_students(class_id, request.student_ids))
