# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared base for tenant-scoped services."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import SchoolSettings, get_settings
from src.core.errors import UnauthenticatedError
from src.domains.auth.context import TenantContext
from src.infrastructure.events import PathInvalidator


class TenantScopedService:
    """Base class for services whose every query is filtered by tenant.

    Attributes:
        db: Async database session.
        context: Resolved tenant context, None when unauthenticated.
        invalidator: Path invalidator notified after mutations.
        school_settings: Business rule constants.
    """

    def __init__(
        self,
        db: AsyncSession,
        context: TenantContext | None,
        invalidator: PathInvalidator | None = None,
        school_settings: SchoolSettings | None = None,
    ) -> None:
        self.db = db
        self.context = context
        self.invalidator = invalidator
        self.school_settings = school_settings or get_settings().school

    def _tenant(self) -> str:
        """Return the tenant id or raise when there is no session."""
        if self.context is None:
            raise UnauthenticatedError()
        return self.context.aamar_id

    def _invalidate(self, *paths: str) -> None:
        """Mark display paths stale for the current tenant."""
        if self.invalidator is None:
            return
        self.invalidator.invalidate(
            *paths,
            tenant=self.context.aamar_id if self.context else None,
        )
