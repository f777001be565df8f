# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Resolve the tenant context of the authenticated user
- Get the process-wide path invalidator
- Render service results as HTTP responses

Example:
    @router.get("/students")
    async def list_students(db: DbSession, context: Context, invalidator: Invalidator):
        service = StudentService(db, context, invalidator)
        return envelope_response(await service.list_students())
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import get_current_user
from src.core.config import get_settings
from src.core.errors import UnauthenticatedError
from src.core.result import Err, ErrorKind, Result
from src.domains.auth.context import TenantContext, TenantContextResolver
from src.domains.auth.jwt import JWTManager
from src.infrastructure.database import get_session
from src.infrastructure.events import PathInvalidator, get_path_invalidator

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.PRECONDITION: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_IMPLEMENTED: status.HTTP_501_NOT_IMPLEMENTED,
    ErrorKind.INFRASTRUCTURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession bound to the shared engine.
    """
    async with get_session() as session:
        yield session


def get_jwt_manager() -> JWTManager:
    return JWTManager(get_settings().jwt)


async def get_tenant_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> TenantContext | None:
    """Resolve the tenant context of the authenticated user.

    Resolved on every request. Returns None when there is no valid session,
    so the service answers with an unauthenticated result.

    Args:
        request: HTTP request carrying the authenticated user.
        db: Request database session.

    Returns:
        The tenant context, or None.
    """
    user = get_current_user(request)
    try:
        return await TenantContextResolver(db).resolve(user.id if user else None)
    except UnauthenticatedError as e:
        logger.debug("No tenant context: %s", e.message)
        return None


def get_invalidator() -> PathInvalidator:
    return get_path_invalidator()


DbSession = Annotated[AsyncSession, Depends(get_db)]
Context = Annotated[TenantContext | None, Depends(get_tenant_context)]
Invalidator = Annotated[PathInvalidator, Depends(get_invalidator)]


def envelope_response(result: Result, created: bool = False) -> JSONResponse:
    """Render a service result as a JSON envelope.

    Args:
        result: Ok or Err returned by a service operation.
        created: Use 201 instead of 200 on success.

    Returns:
        JSONResponse with the envelope body and the mapped status code.
    """
    if isinstance(result, Err):
        status_code = ERROR_STATUS.get(result.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    else:
        status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK

    return JSONResponse(status_code=status_code, content=jsonable_encoder(result.to_envelope()))
