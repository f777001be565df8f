# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Section API endpoints.

- POST / - Create a section in a class
- GET / - List sections (optionally of one class)
- GET /stats - Occupancy statistics
- GET /{section_id}/next-roll-number - Suggested roll number for a new student
- PUT /{section_id} - Update section
- DELETE /{section_id} - Delete an empty section
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.section.service import SectionService
from src.domains.student.roll_number import RollNumberService
from src.models.section import SectionCreateRequest, SectionUpdateRequest

router = APIRouter()


@router.post("")
async def create_section(
    request: SectionCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SectionService(db, context, invalidator)
    return envelope_response(await service.create_section(request), created=True)


@router.get("")
async def list_sections(
    db: DbSession,
    context: Context,
    class_id: str | None = Query(None, description="Only sections of this class"),
) -> JSONResponse:
    service = SectionService(db, context)
    if class_id:
        return envelope_response(await service.list_sections_by_class(class_id))
    return envelope_response(await service.list_sections())


@router.get("/stats")
async def section_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SectionService(db, context).get_section_stats())


@router.get("/{section_id}/next-roll-number")
async def next_roll_number(section_id: str, db: DbSession, context: Context) -> JSONResponse:
    service = RollNumberService(db, context)
    return envelope_response(await service.generate_roll_number(section_id))


@router.put("/{section_id}")
async def update_section(
    section_id: str,
    request: SectionUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SectionService(db, context, invalidator)
    return envelope_response(await service.update_section(section_id, request))


@router.delete("/{section_id}")
async def delete_section(
    section_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SectionService(db, context, invalidator)
    return envelope_response(await service.delete_section(section_id))
