# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff service.

Non-teaching staff: CRUD, statistics and search, all scoped to the acting
tenant. Deleting a staff member removes their attendance history.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.auth.password import default_password_hash
from src.domains.base import TenantScopedService
from src.domains.dto import branch_brief, iso
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    GENDERS,
    Branch,
    Profile,
    Staff,
    StaffAttendance,
    User,
    UserRole,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.staff import StaffCreateRequest, StaffUpdateRequest

logger = logging.getLogger(__name__)


class StaffServiceError(ServiceError):
    """Base exception for staff service errors."""

    pass


class StaffNotFoundError(StaffServiceError):
    """Raised when a staff member is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class StaffEmailExistsError(StaffServiceError):
    """Raised when the email is already registered."""

    kind = ErrorKind.CONFLICT


class StaffBranchNotFoundError(StaffServiceError):
    """Raised when the branch is not in the tenant."""

    kind = ErrorKind.VALIDATION


def _staff_dto(staff: Staff) -> dict[str, Any]:
    user = staff.user
    profile = user.profile
    return {
        "id": staff.id,
        "user_id": staff.user_id,
        "name": user.full_name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": profile.phone if profile else None,
        "address": profile.address if profile else None,
        "designation": staff.designation,
        "department": staff.department,
        "salary": float(staff.salary) if staff.salary is not None else None,
        "joining_date": iso(staff.joining_date),
        "is_active": user.is_active,
        "branch": branch_brief(user.branch),
    }


class StaffService(TenantScopedService):
    """Staff CRUD, statistics and search."""

    @service_operation("create staff member")
    async def create_staff(self, request: StaffCreateRequest) -> Ok[dict[str, Any]]:
        """Create a staff member with a login account and profile.

        Raises:
            StaffEmailExistsError: If the email is already registered.
            StaffBranchNotFoundError: If the branch is not in the tenant.
        """
        aamar_id = self._tenant()
        if not (
            request.first_name
            and request.last_name
            and request.email
            and request.designation
            and request.branch_id
        ):
            raise StaffServiceError("Required fields are missing")

        email = request.email.strip().lower()
        await self._check_email(email)

        branch = await self.db.execute(
            select(Branch.id).where(Branch.id == request.branch_id, Branch.aamar_id == aamar_id)
        )
        if branch.scalar_one_or_none() is None:
            raise StaffBranchNotFoundError("Invalid branch")

        async with transaction(self.db):
            user = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=email,
                password_hash=default_password_hash(UserRole.STAFF, self.school_settings),
                first_name=request.first_name,
                last_name=request.last_name,
                role=UserRole.STAFF,
                is_active=True,
                school_id=self.context.school_id,
                branch_id=request.branch_id,
            )
            self.db.add(user)
            await self.db.flush()

            self.db.add(Profile(
                id=new_id(),
                user_id=user.id,
                phone=request.phone,
                address=request.address,
                gender=request.gender if request.gender in GENDERS else None,
            ))
            staff = Staff(
                id=new_id(),
                aamar_id=aamar_id,
                user_id=user.id,
                designation=request.designation,
                department=request.department,
                salary=request.salary,
                joining_date=request.joining_date or date.today(),
            )
            self.db.add(staff)

        logger.info("Created staff member: %s (%s) in %s", user.email, staff.id, aamar_id)
        self._invalidate(DashboardPaths.STAFF)

        return Ok(
            {"staff_id": staff.id, "user_id": user.id},
            message=f"Staff member {user.full_name} created successfully!",
        )

    @service_operation("fetch staff")
    async def list_staff(self) -> list[dict[str, Any]]:
        result = await self.db.execute(
            self._staff_query().join(Staff.user).order_by(User.first_name, User.last_name)
        )
        return [_staff_dto(s) for s in result.scalars().all()]

    @service_operation("fetch staff member")
    async def get_staff(self, staff_id: str) -> dict[str, Any]:
        """Get a staff member by id.

        Raises:
            StaffNotFoundError: If the staff member is not in the tenant.
        """
        return _staff_dto(await self._get_staff(staff_id))

    @service_operation("update staff member")
    async def update_staff(self, staff_id: str, request: StaffUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a staff member. Only supplied fields change.

        Raises:
            StaffNotFoundError: If the staff member is not in the tenant.
            StaffEmailExistsError: If the new email is already registered.
        """
        staff = await self._get_staff(staff_id)
        user = staff.user

        if request.email and request.email.strip().lower() != user.email:
            await self._check_email(request.email.strip().lower())

        async with transaction(self.db):
            if request.first_name:
                user.first_name = request.first_name
            if request.last_name:
                user.last_name = request.last_name
            if request.email:
                user.email = request.email.strip().lower()
            if request.is_active is not None:
                user.is_active = request.is_active

            profile = user.profile
            if profile is None:
                profile = Profile(id=new_id(), user_id=user.id)
                self.db.add(profile)
            if request.phone is not None:
                profile.phone = request.phone
            if request.address is not None:
                profile.address = request.address

            if request.designation:
                staff.designation = request.designation
            if request.department is not None:
                staff.department = request.department
            if request.salary is not None:
                staff.salary = request.salary
            if request.joining_date is not None:
                staff.joining_date = request.joining_date

        logger.info("Updated staff member: %s in %s", staff.id, staff.aamar_id)
        self._invalidate(DashboardPaths.STAFF)

        return Ok(
            {"staff_id": staff.id, "user_id": user.id},
            message=f"Staff member {user.full_name} updated successfully!",
        )

    @service_operation("delete staff member")
    async def delete_staff(self, staff_id: str) -> Ok[None]:
        """Delete a staff member with attendance, profile and user.

        Raises:
            StaffNotFoundError: If the staff member is not in the tenant.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Staff)
            .where(Staff.id == staff_id, Staff.aamar_id == aamar_id)
            .options(selectinload(Staff.user))
        )
        staff = result.scalar_one_or_none()
        if staff is None:
            raise StaffNotFoundError("Staff member not found")

        user = staff.user
        name = user.full_name
        async with transaction(self.db):
            await self.db.execute(delete(StaffAttendance).where(StaffAttendance.staff_id == staff.id))
            await self.db.delete(staff)
            await self.db.flush()
            await self.db.execute(delete(Profile).where(Profile.user_id == user.id))
            await self.db.delete(user)

        logger.info("Deleted staff member: %s in %s", staff_id, aamar_id)
        self._invalidate(DashboardPaths.STAFF)

        return Ok(None, message=f"Staff member {name} deleted successfully!")

    @service_operation("fetch staff statistics")
    async def get_staff_stats(self) -> dict[str, Any]:
        """Staff totals and counts by department and designation."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Staff).where(Staff.aamar_id == aamar_id).options(selectinload(Staff.user))
        )
        staff = result.scalars().all()

        by_department: dict[str, int] = {}
        by_designation: dict[str, int] = {}
        for member in staff:
            department = member.department or "Unassigned"
            by_department[department] = by_department.get(department, 0) + 1
            by_designation[member.designation] = by_designation.get(member.designation, 0) + 1

        return {
            "total_staff": len(staff),
            "active_staff": sum(1 for s in staff if s.user.is_active),
            "by_department": by_department,
            "by_designation": by_designation,
        }

    @service_operation("search staff")
    async def search_staff(self, query: str) -> list[dict[str, Any]]:
        """Search by name, email, designation or department."""
        pattern = f"%{query.strip()}%"
        result = await self.db.execute(
            self._staff_query()
            .join(Staff.user)
            .where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    Staff.designation.ilike(pattern),
                    Staff.department.ilike(pattern),
                )
            )
            .order_by(User.first_name)
        )
        return [_staff_dto(s) for s in result.scalars().all()]

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _staff_query(self) -> Select:
        return (
            select(Staff)
            .where(Staff.aamar_id == self._tenant())
            .options(
                selectinload(Staff.user).selectinload(User.profile),
                selectinload(Staff.user).selectinload(User.branch),
            )
        )

    async def _get_staff(self, staff_id: str) -> Staff:
        result = await self.db.execute(self._staff_query().where(Staff.id == staff_id))
        staff = result.scalar_one_or_none()
        if staff is None:
            raise StaffNotFoundError("Staff member not found")
        return staff

    async def _check_email(self, email: str) -> None:
        result = await self.db.execute(select(User.id).where(func.lower(User.email) == email))
        if result.scalar_one_or_none() is not None:
            raise StaffEmailExistsError("Email already exists")
