# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service.

Exchanges an email and password for an access token.

Example:
    >>> auth_service = AuthService(db_session, jwt_manager)
    >>> result = await auth_service.authenticate("admin@school.edu", "secret")
"""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind
from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import verify_password
from src.infrastructure.database.models import User

logger = logging.getLogger(__name__)


class AuthenticationError(ServiceError):
    """Raised when credentials do not match an active user."""

    kind = ErrorKind.UNAUTHENTICATED


class AuthService:
    """Credential check and token issue.

    Attributes:
        db: Async database session.
        jwt_manager: Token issuer.
    """

    def __init__(self, db: AsyncSession, jwt_manager: JWTManager) -> None:
        self.db = db
        self.jwt_manager = jwt_manager

    @service_operation("authenticate user")
    async def authenticate(self, email: str, password: str) -> dict[str, Any]:
        """Authenticate a user by email and password.

        Args:
            email: Login email (case-insensitive).
            password: Plain text password.

        Returns:
            Token fields plus the user's id, role and tenant.

        Raises:
            AuthenticationError: For unknown, inactive or mismatched users.
        """
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        user = result.scalar_one_or_none()

        if user is None or not user.is_active or not verify_password(password, user.password_hash or ""):
            logger.info("Failed login for: %s", email)
            raise AuthenticationError("Invalid email or password")

        token = self.jwt_manager.create_access_token(
            user_id=user.id,
            aamar_id=user.aamar_id,
            role=user.role,
        )
        logger.info("User logged in: %s (%s)", user.id, user.aamar_id)

        return {
            **token.model_dump(),
            "user_id": user.id,
            "role": user.role,
            "aamar_id": user.aamar_id,
        }
