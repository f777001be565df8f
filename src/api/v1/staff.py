# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff API endpoints."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.staff.service import StaffService
from src.models.staff import StaffCreateRequest, StaffUpdateRequest

router = APIRouter()


@router.post("")
async def create_staff(
    request: StaffCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = StaffService(db, context, invalidator)
    return envelope_response(await service.create_staff(request), created=True)


@router.get("")
async def list_staff(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await StaffService(db, context).list_staff())


@router.get("/stats")
async def staff_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await StaffService(db, context).get_staff_stats())


@router.get("/search")
async def search_staff(
    db: DbSession,
    context: Context,
    q: str = Query(..., min_length=1, description="Search text"),
) -> JSONResponse:
    return envelope_response(await StaffService(db, context).search_staff(q))


@router.get("/{staff_id}")
async def get_staff(staff_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await StaffService(db, context).get_staff(staff_id))


@router.put("/{staff_id}")
async def update_staff(
    staff_id: str,
    request: StaffUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = StaffService(db, context, invalidator)
    return envelope_response(await service.update_staff(staff_id, request))


@router.delete("/{staff_id}")
async def delete_staff(
    staff_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = StaffService(db, context, invalidator)
    return envelope_response(await service.delete_staff(staff_id))
