# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School settings API endpoints.

- GET / - Current school settings
- PUT / - Create or replace school settings
- GET /schedules - Schedule templates with their period layout
- GET /schedules/{schedule_id} - One schedule template
- POST /periods/preview - Period layout for an unsaved schedule
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.core.result import Ok
from src.domains.school.periods import calculate_periods
from src.domains.school.service import SchoolSettingsService
from src.models.school import PeriodScheduleRequest, SchoolSettingsUpdateRequest

router = APIRouter()


@router.get("")
async def get_settings(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SchoolSettingsService(db, context).get_settings())


@router.put("")
async def update_settings(
    request: SchoolSettingsUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SchoolSettingsService(db, context, invalidator)
    return envelope_response(await service.update_settings(request))


@router.get("/schedules")
async def list_schedules(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SchoolSettingsService(db, context).list_schedules())


@router.get("/schedules/{schedule_id}")
async def get_schedule(schedule_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SchoolSettingsService(db, context).get_schedule(schedule_id))


@router.post("/periods/preview")
async def preview_periods(request: PeriodScheduleRequest) -> JSONResponse:
    """Lay out periods for a schedule without saving it."""
    return envelope_response(Ok(calculate_periods(request)))
