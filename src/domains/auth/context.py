# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant context resolution.

The tenant context is derived from the authenticated user row on every
request. It is never cached across requests and there is no fallback tenant:
a request without a resolvable user has no context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import UnauthenticatedError
from src.infrastructure.database.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    """Who is acting and for which tenant.

    Attributes:
        aamar_id: Tenant identifier applied to every query.
        school_id: School of the acting user.
        branch_id: Branch of the acting user.
        role: Role code (ADMIN, TEACHER, STUDENT, PARENT, STAFF).
        user_id: Acting user.
    """

    aamar_id: str
    school_id: str | None
    branch_id: str | None
    role: str
    user_id: str


class TenantContextResolver:
    """Builds a TenantContext from an authenticated user id."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def resolve(self, user_id: str | None) -> TenantContext:
        """Resolve the context for a user.

        Args:
            user_id: Subject of the validated access token.

        Returns:
            The user's tenant context.

        Raises:
            UnauthenticatedError: If no user id is given, or the user does
                not exist or is inactive.
        """
        if not user_id:
            raise UnauthenticatedError()

        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()

        if user is None:
            logger.warning("Token subject has no user row: %s", user_id)
            raise UnauthenticatedError()
        if not user.is_active:
            raise UnauthenticatedError("Account is inactive")

        return TenantContext(
            aamar_id=user.aamar_id,
            school_id=user.school_id,
            branch_id=user.branch_id,
            role=user.role,
            user_id=user.id,
        )
