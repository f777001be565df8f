# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent API endpoints."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.parent.service import ParentService
from src.models.parent import ParentCreateRequest, ParentUpdateRequest

router = APIRouter()


@router.post("")
async def create_parent(
    request: ParentCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = ParentService(db, context, invalidator)
    return envelope_response(await service.create_parent(request), created=True)


@router.get("")
async def list_parents(
    db: DbSession,
    context: Context,
    branch_id: str | None = Query(None, description="Only parents of this branch"),
) -> JSONResponse:
    service = ParentService(db, context)
    if branch_id:
        return envelope_response(await service.list_parents_by_branch(branch_id))
    return envelope_response(await service.list_parents())


@router.get("/stats")
async def parent_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await ParentService(db, context).get_parent_stats())


@router.get("/search")
async def search_parents(
    db: DbSession,
    context: Context,
    q: str = Query(..., min_length=1, description="Search text"),
) -> JSONResponse:
    return envelope_response(await ParentService(db, context).search_parents(q))


@router.get("/{parent_id}")
async def get_parent(parent_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await ParentService(db, context).get_parent(parent_id))


@router.put("/{parent_id}")
async def update_parent(
    parent_id: str,
    request: ParentUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = ParentService(db, context, invalidator)
    return envelope_response(await service.update_parent(parent_id, request))


@router.delete("/{parent_id}")
async def delete_parent(
    parent_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    """Delete a parent. Refused while students are linked to them."""
    service = ParentService(db, context, invalidator)
    return envelope_response(await service.delete_parent(parent_id))
