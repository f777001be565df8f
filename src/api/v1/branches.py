# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch API endpoints.

- GET / - List the tenant's branches
- GET /{branch_id} - Get a branch
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, envelope_response
from src.domains.school.service import BranchService

router = APIRouter()


@router.get("")
async def list_branches(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await BranchService(db, context).list_branches())


@router.get("/{branch_id}")
async def get_branch(branch_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await BranchService(db, context).get_branch(branch_id))
