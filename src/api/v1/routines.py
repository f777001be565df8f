# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class routine API endpoints.

- PUT / - Create or replace the routine of a class for an academic year
- GET / - List routines
- GET /class/{class_id} - Get the routine of a class
- DELETE /{routine_id} - Delete a routine
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.routine.service import RoutineService
from src.models.routine import RoutineUpsertRequest

router = APIRouter()


@router.put("")
async def upsert_class_routine(
    request: RoutineUpsertRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = RoutineService(db, context, invalidator)
    return envelope_response(await service.upsert_class_routine(request))


@router.get("")
async def list_class_routines(
    db: DbSession,
    context: Context,
    academic_year: str | None = Query(None, description="Only routines of this year"),
) -> JSONResponse:
    return envelope_response(await RoutineService(db, context).list_class_routines(academic_year))


@router.get("/class/{class_id}")
async def get_class_routine(
    class_id: str,
    db: DbSession,
    context: Context,
    academic_year: str | None = Query(None, description="Year, latest when omitted"),
) -> JSONResponse:
    return envelope_response(await RoutineService(db, context).get_class_routine(class_id, academic_year))


@router.delete("/{routine_id}")
async def delete_class_routine(
    routine_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = RoutineService(db, context, invalidator)
    return envelope_response(await service.delete_class_routine(routine_id))
