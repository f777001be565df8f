# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timetable API endpoints.

- POST / - Create a timetable entry (rejects overlapping slots)
- GET / - List entries (optionally of one class)
- GET /stats - Timetable statistics
- GET /{timetable_id} - Get an entry
- PUT /{timetable_id} - Update an entry
- DELETE /{timetable_id} - Delete an entry
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.timetable.service import TimetableService
from src.models.timetable import TimetableCreateRequest, TimetableUpdateRequest

router = APIRouter()


@router.post("")
async def create_timetable(
    request: TimetableCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = TimetableService(db, context, invalidator)
    return envelope_response(await service.create_timetable(request), created=True)


@router.get("")
async def list_timetables(
    db: DbSession,
    context: Context,
    class_id: str | None = Query(None, description="Only entries of this class"),
) -> JSONResponse:
    return envelope_response(await TimetableService(db, context).list_timetables(class_id))


@router.get("/stats")
async def timetable_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await TimetableService(db, context).get_timetable_stats())


@router.get("/{timetable_id}")
async def get_timetable(timetable_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await TimetableService(db, context).get_timetable(timetable_id))


@router.put("/{timetable_id}")
async def update_timetable(
    timetable_id: str,
    request: TimetableUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = TimetableService(db, context, invalidator)
    return envelope_response(await service.update_timetable(timetable_id, request))


@router.delete("/{timetable_id}")
async def delete_timetable(
    timetable_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = TimetableService(db, context, invalidator)
    return envelope_response(await service.delete_timetable(timetable_id))
