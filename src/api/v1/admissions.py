# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admission API endpoints.

An admission creates a parent and a student, each with a login account,
in one transaction.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.admission.service import AdmissionService
from src.models.admission import AdmissionRequest

router = APIRouter()


@router.post("")
async def create_admission(
    request: AdmissionRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    """Admit a student together with their parent."""
    service = AdmissionService(db, context, invalidator)
    return envelope_response(await service.create_student_with_parent(request), created=True)


@router.get("/applications")
async def list_applications(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await AdmissionService(db, context).list_admission_applications())


@router.get("/stats")
async def admission_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await AdmissionService(db, context).get_admission_stats())


@router.get("/search")
async def search_admissions(
    db: DbSession,
    context: Context,
    q: str = Query("", description="Search text"),
) -> JSONResponse:
    return envelope_response(await AdmissionService(db, context).search_admissions(q))


@router.get("/sections")
async def list_all_sections(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await AdmissionService(db, context).list_all_sections())


@router.get("/sections/{class_id}")
async def list_sections_by_class(class_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await AdmissionService(db, context).list_sections_by_class(class_id))


@router.get("/students/{student_id}")
async def get_student_details(student_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await AdmissionService(db, context).get_student_details(student_id))
