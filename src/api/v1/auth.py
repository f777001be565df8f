# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for authentication and onboarding:
- POST /login - Exchange email and password for an access token
- POST /register - Register a new school with its first admin
- GET /me - Resolved tenant context of the caller

Example:
    POST /api/v1/auth/login
    Body:
        {"email": "admin@school.edu", "password": "secret"}
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, envelope_response, get_jwt_manager
from src.core.errors import UnauthenticatedError
from src.core.result import Err, Ok
from src.domains.auth.jwt import JWTManager
from src.domains.auth.service import AuthService
from src.domains.school.service import SchoolRegistrationService
from src.models.auth import LoginRequest
from src.models.school import SchoolRegistrationRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login")
async def login(
    request: LoginRequest,
    db: DbSession,
    jwt_manager: JWTManager = Depends(get_jwt_manager),
) -> JSONResponse:
    """Authenticate with email and password."""
    service = AuthService(db, jwt_manager)
    return envelope_response(await service.authenticate(request.email, request.password))


@router.post("/register")
async def register(request: SchoolRegistrationRequest, db: DbSession) -> JSONResponse:
    """Register a school, its main branch and its admin."""
    service = SchoolRegistrationService(db)
    return envelope_response(await service.register_school_and_admin(request), created=True)


@router.get("/me")
async def me(context: Context) -> JSONResponse:
    """Return the caller's tenant context."""
    if context is None:
        error = UnauthenticatedError()
        return envelope_response(Err(error.kind, error.message))
    return envelope_response(Ok(asdict(context)))
