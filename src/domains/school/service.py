# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School services: tenant registration, branches and settings.

This module provides:
- SchoolRegistrationService: creates a tenant with its school, main branch
  and first admin
- BranchService: branch lookups
- SchoolSettingsService: weekly schedule settings and period layouts

Example:
    >>> service = BranchService(db_session, context)
    >>> result = await service.list_branches()
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind
from src.domains.auth.password import hash_password
from src.domains.base import TenantScopedService
from src.domains.school.periods import calculate_periods
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    Branch,
    Profile,
    School,
    SchoolSchedule,
    SchoolSetting,
    User,
    UserRole,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.school import SchoolRegistrationRequest, SchoolSettingsUpdateRequest
from src.utils.datetime import epoch_millis

logger = logging.getLogger(__name__)

MAIN_BRANCH_NAME = "Main Campus"
MAIN_BRANCH_CODE = "MAIN"


class SchoolServiceError(ServiceError):
    """Base exception for school service errors."""

    pass


class AdminEmailExistsError(SchoolServiceError):
    """Raised when the admin email is already registered."""

    kind = ErrorKind.CONFLICT


class BranchNotFoundError(SchoolServiceError):
    """Raised when a branch is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class SettingsNotFoundError(SchoolServiceError):
    """Raised when the school has no settings row."""

    kind = ErrorKind.NOT_FOUND


class ScheduleNotFoundError(SchoolServiceError):
    """Raised when a schedule template is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


def generate_aamar_id() -> str:
    """Generate a tenant id: AAMAR + last 8 digits of epoch ms + 6 random chars."""
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(6))
    return f"AAMAR{str(epoch_millis())[-8:]}{suffix}"


def generate_school_code(name: str) -> str:
    """Uppercase initials of the school name followed by 4 random digits."""
    initials = "".join(word[0] for word in name.split() if word and word[0].isalnum()).upper()
    digits = "".join(secrets.choice(string.digits) for _ in range(4))
    return f"{initials or 'SCH'}{digits}"


def _branch_dto(branch: Branch) -> dict[str, Any]:
    return {
        "id": branch.id,
        "school_id": branch.school_id,
        "name": branch.name,
        "code": branch.code,
        "address": branch.address,
        "phone": branch.phone,
        "email": branch.email,
    }


def _settings_dto(settings: SchoolSetting) -> dict[str, Any]:
    return {
        "id": settings.id,
        "school_id": settings.school_id,
        "weekly_schedule": settings.weekly_schedule,
        "subject_duration": settings.subject_duration,
    }


class SchoolRegistrationService:
    """Creates new tenants.

    This is the only service that runs without a tenant context.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @service_operation("register school")
    async def register_school_and_admin(self, request: SchoolRegistrationRequest) -> dict[str, str]:
        """Register a school and its first admin.

        Args:
            request: School and admin details.

        Returns:
            Dict with aamar_id, school_id, branch_id and user_id.

        Raises:
            AdminEmailExistsError: If the admin email is taken.
        """
        email = request.admin_email.strip().lower()
        existing = await self.db.execute(select(User.id).where(func.lower(User.email) == email))
        if existing.scalar_one_or_none() is not None:
            raise AdminEmailExistsError("User with this email already exists")

        aamar_id = generate_aamar_id()

        async with transaction(self.db):
            school = School(
                id=new_id(),
                aamar_id=aamar_id,
                name=request.school_name,
                code=generate_school_code(request.school_name),
                address=request.school_address,
                phone=request.school_phone,
                email=request.school_email,
            )
            self.db.add(school)
            await self.db.flush()

            branch = Branch(
                id=new_id(),
                aamar_id=aamar_id,
                school_id=school.id,
                name=MAIN_BRANCH_NAME,
                code=MAIN_BRANCH_CODE,
                address=request.school_address,
                phone=request.school_phone,
                email=request.school_email,
            )
            self.db.add(branch)
            await self.db.flush()

            admin = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=email,
                password_hash=hash_password(request.admin_password),
                first_name=request.admin_first_name,
                last_name=request.admin_last_name,
                role=UserRole.ADMIN,
                is_active=True,
                school_id=school.id,
                branch_id=branch.id,
            )
            self.db.add(admin)
            await self.db.flush()
            self.db.add(Profile(id=new_id(), user_id=admin.id, phone=request.admin_phone))

        logger.info("Registered school: %s (%s) as tenant %s", school.name, school.id, aamar_id)

        return {
            "aamar_id": aamar_id,
            "school_id": school.id,
            "branch_id": branch.id,
            "user_id": admin.id,
        }


class BranchService(TenantScopedService):
    """Branch lookups within the tenant."""

    @service_operation("fetch branch")
    async def get_branch(self, branch_id: str) -> dict[str, Any]:
        """Get a branch by id.

        Raises:
            BranchNotFoundError: If the branch is not in the tenant.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Branch).where(Branch.id == branch_id, Branch.aamar_id == aamar_id)
        )
        branch = result.scalar_one_or_none()
        if branch is None:
            raise BranchNotFoundError("Branch not found")
        return _branch_dto(branch)

    @service_operation("fetch branches")
    async def list_branches(self) -> list[dict[str, Any]]:
        """List the tenant's branches ordered by name."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Branch).where(Branch.aamar_id == aamar_id).order_by(Branch.name)
        )
        return [_branch_dto(b) for b in result.scalars().all()]


class SchoolSettingsService(TenantScopedService):
    """Per-school weekly schedule settings and schedule templates."""

    def _school_id(self) -> str:
        self._tenant()
        if not self.context.school_id:
            raise SettingsNotFoundError("Settings not found", "No school is linked to this account")
        return self.context.school_id

    @service_operation("fetch settings")
    async def get_settings(self) -> dict[str, Any]:
        """Get the settings of the acting user's school.

        Raises:
            SettingsNotFoundError: If the school has no settings yet.
        """
        school_id = self._school_id()
        result = await self.db.execute(
            select(SchoolSetting).where(
                SchoolSetting.school_id == school_id,
                SchoolSetting.aamar_id == self.context.aamar_id,
            )
        )
        settings = result.scalar_one_or_none()
        if settings is None:
            raise SettingsNotFoundError("Settings not found")
        return _settings_dto(settings)

    @service_operation("update settings")
    async def update_settings(self, request: SchoolSettingsUpdateRequest) -> dict[str, Any]:
        """Create or replace the school's settings."""
        school_id = self._school_id()
        aamar_id = self.context.aamar_id
        result = await self.db.execute(
            select(SchoolSetting).where(
                SchoolSetting.school_id == school_id,
                SchoolSetting.aamar_id == aamar_id,
            )
        )
        settings = result.scalar_one_or_none()

        async with transaction(self.db):
            if settings is None:
                settings = SchoolSetting(id=new_id(), aamar_id=aamar_id, school_id=school_id)
                self.db.add(settings)
            settings.weekly_schedule = request.weekly_schedule
            settings.subject_duration = request.subject_duration

        logger.info("Updated settings for school %s in %s", school_id, aamar_id)
        self._invalidate(DashboardPaths.SETTINGS)
        return _settings_dto(settings)

    @service_operation("fetch schedules")
    async def list_schedules(self) -> list[dict[str, Any]]:
        """List schedule templates with their computed period layout."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(SchoolSchedule)
            .where(SchoolSchedule.aamar_id == aamar_id)
            .order_by(SchoolSchedule.name)
        )
        return [_schedule_dto(s) for s in result.scalars().all()]

    @service_operation("fetch schedule")
    async def get_schedule(self, schedule_id: str) -> dict[str, Any]:
        """Get a schedule template with its period layout.

        Raises:
            ScheduleNotFoundError: If the schedule is not in the tenant.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(SchoolSchedule).where(
                SchoolSchedule.id == schedule_id,
                SchoolSchedule.aamar_id == aamar_id,
            )
        )
        schedule = result.scalar_one_or_none()
        if schedule is None:
            raise ScheduleNotFoundError("Schedule not found")
        return _schedule_dto(schedule)


def _schedule_dto(schedule: SchoolSchedule) -> dict[str, Any]:
    layout = calculate_periods(schedule)
    return {
        "id": schedule.id,
        "name": schedule.name,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "period_duration": schedule.period_duration,
        "weekly_holidays": schedule.weekly_holidays,
        **layout,
    }
