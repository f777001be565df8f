# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent service.

Parents are usually created by the admission workflow. This service covers
direct management: CRUD, branch listings, statistics and search. A parent
that still has children linked cannot be deleted.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.auth.password import default_password_hash
from src.domains.base import TenantScopedService
from src.domains.dto import branch_brief
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    GENDERS,
    Branch,
    Class,
    Parent,
    Profile,
    Section,
    Student,
    User,
    UserRole,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.parent import ParentCreateRequest, ParentUpdateRequest

logger = logging.getLogger(__name__)

DEFAULT_RELATION = "Parent"


class ParentServiceError(ServiceError):
    """Base exception for parent service errors."""

    pass


class ParentNotFoundError(ParentServiceError):
    """Raised when a parent is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class ParentEmailExistsError(ParentServiceError):
    """Raised when the email is already registered."""

    kind = ErrorKind.CONFLICT


class ParentBranchNotFoundError(ParentServiceError):
    """Raised when the branch is not in the tenant."""

    kind = ErrorKind.VALIDATION


class ParentHasStudentsError(ParentServiceError):
    """Raised when deleting a parent that still has children linked."""

    kind = ErrorKind.PRECONDITION


def _child_dto(student: Student) -> dict[str, Any]:
    section = student.section
    return {
        "id": student.id,
        "name": student.user.full_name,
        "roll_number": student.roll_number,
        "class": f"{section.class_.name} {section.name}" if section else None,
        "branch": section.class_.branch.name if section else None,
    }


def _parent_dto(parent: Parent) -> dict[str, Any]:
    """Parent with linked children. Needs _parent_options() loaded."""
    user = parent.user
    profile = user.profile
    return {
        "id": parent.id,
        "user_id": parent.user_id,
        "name": user.full_name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": profile.phone if profile else None,
        "address": profile.address if profile else None,
        "gender": profile.gender if profile else None,
        "relation": parent.relation,
        "branch": branch_brief(user.branch),
        "students": [_child_dto(s) for s in parent.students],
        "total_students": len(parent.students),
        "status": "Active" if user.is_active else "Inactive",
    }


def _parent_options() -> list[Any]:
    return [
        selectinload(Parent.user).selectinload(User.profile),
        selectinload(Parent.user).selectinload(User.branch),
        selectinload(Parent.students).selectinload(Student.user),
        selectinload(Parent.students)
        .selectinload(Student.section)
        .selectinload(Section.class_)
        .selectinload(Class.branch),
    ]


class ParentService(TenantScopedService):
    """Parent CRUD, listings and statistics."""

    @service_operation("fetch parents")
    async def list_parents(self) -> list[dict[str, Any]]:
        """List parents alphabetically with their children."""
        result = await self.db.execute(
            self._parent_query().join(Parent.user).order_by(User.first_name, User.last_name)
        )
        return [_parent_dto(p) for p in result.scalars().all()]

    @service_operation("fetch parent")
    async def get_parent(self, parent_id: str) -> dict[str, Any]:
        """Get a parent by id.

        Raises:
            ParentNotFoundError: If the parent is not in the tenant.
        """
        return _parent_dto(await self._get_parent(parent_id))

    @service_operation("create parent")
    async def create_parent(self, request: ParentCreateRequest) -> Ok[dict[str, Any]]:
        """Create a parent with a login account and profile.

        The branch defaults to the acting user's branch.

        Raises:
            ParentEmailExistsError: If the email is already registered.
            ParentBranchNotFoundError: If a requested branch is not in the tenant.
        """
        aamar_id = self._tenant()
        if not (request.first_name and request.last_name and request.email):
            raise ParentServiceError("First name, last name, and email are required")

        email = request.email.strip().lower()
        await self._check_email(email)
        if request.branch_id and request.branch_id != self.context.branch_id:
            await self._check_branch(request.branch_id)

        async with transaction(self.db):
            user = User(
                id=new_id(),
                aamar_id=aamar_id,
                email=email,
                password_hash=default_password_hash(UserRole.PARENT, self.school_settings),
                first_name=request.first_name,
                last_name=request.last_name,
                role=UserRole.PARENT,
                is_active=True,
                school_id=self.context.school_id,
                branch_id=request.branch_id or self.context.branch_id,
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
            parent = Parent(
                id=new_id(),
                aamar_id=aamar_id,
                user_id=user.id,
                relation=request.relation or DEFAULT_RELATION,
            )
            self.db.add(parent)

        logger.info("Created parent: %s (%s) in %s", user.email, parent.id, aamar_id)
        self._invalidate(DashboardPaths.PARENTS)

        return Ok(
            {"id": parent.id, "user_id": user.id, "relation": parent.relation},
            message="Parent created successfully",
        )

    @service_operation("update parent")
    async def update_parent(self, parent_id: str, request: ParentUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a parent. Only supplied fields change.

        Raises:
            ParentNotFoundError: If the parent is not in the tenant.
            ParentEmailExistsError: If the new email is already registered.
        """
        parent = await self._get_parent(parent_id)
        user = parent.user

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

            if request.relation:
                parent.relation = request.relation

        logger.info("Updated parent: %s in %s", parent.id, parent.aamar_id)
        self._invalidate(DashboardPaths.PARENTS)

        return Ok(
            {"id": parent.id, "user_id": user.id, "relation": parent.relation},
            message="Parent updated successfully",
        )

    @service_operation("delete parent")
    async def delete_parent(self, parent_id: str) -> Ok[None]:
        """Delete a parent and its user.

        Raises:
            ParentNotFoundError: If the parent is not in the tenant.
            ParentHasStudentsError: If children are still linked.
        """
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Parent)
            .where(Parent.id == parent_id, Parent.aamar_id == aamar_id)
            .options(selectinload(Parent.user), selectinload(Parent.students))
        )
        parent = result.scalar_one_or_none()
        if parent is None:
            raise ParentNotFoundError("Parent not found")

        if parent.students:
            raise ParentHasStudentsError(
                "Cannot delete parent with students",
                "Please reassign or remove students before deleting this parent",
            )

        user = parent.user
        async with transaction(self.db):
            await self.db.delete(parent)
            await self.db.flush()
            await self.db.delete(user)

        logger.info("Deleted parent: %s in %s", parent_id, aamar_id)
        self._invalidate(DashboardPaths.PARENTS)

        return Ok(None, message="Parent deleted successfully")

    @service_operation("fetch parents")
    async def list_parents_by_branch(self, branch_id: str) -> list[dict[str, Any]]:
        """List parents whose account belongs to a branch."""
        result = await self.db.execute(
            self._parent_query()
            .join(Parent.user)
            .where(User.branch_id == branch_id)
            .order_by(User.first_name, User.last_name)
        )
        return [_parent_dto(p) for p in result.scalars().all()]

    @service_operation("fetch parent statistics")
    async def get_parent_stats(self) -> dict[str, Any]:
        """Parent totals and counts by relation."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Parent)
            .where(Parent.aamar_id == aamar_id)
            .options(selectinload(Parent.user), selectinload(Parent.students))
        )
        parents = result.scalars().all()

        by_relation: dict[str, int] = {}
        for parent in parents:
            relation = parent.relation or DEFAULT_RELATION
            by_relation[relation] = by_relation.get(relation, 0) + 1

        total = len(parents)
        active = sum(1 for p in parents if p.user.is_active)
        return {
            "total_parents": total,
            "active_parents": active,
            "inactive_parents": total - active,
            "parents_with_students": sum(1 for p in parents if p.students),
            "parents_with_multiple_children": sum(1 for p in parents if len(p.students) > 1),
            "by_relation": by_relation,
        }

    @service_operation("search parents")
    async def search_parents(self, query: str) -> list[dict[str, Any]]:
        """Search by name or email."""
        pattern = f"%{query.strip()}%"
        result = await self.db.execute(
            self._parent_query()
            .join(Parent.user)
            .where(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                )
            )
            .order_by(User.first_name)
        )
        return [_parent_dto(p) for p in result.scalars().all()]

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _parent_query(self) -> Select:
        return select(Parent).where(Parent.aamar_id == self._tenant()).options(*_parent_options())

    async def _get_parent(self, parent_id: str) -> Parent:
        result = await self.db.execute(self._parent_query().where(Parent.id == parent_id))
        parent = result.scalar_one_or_none()
        if parent is None:
            raise ParentNotFoundError("Parent not found")
        return parent

    async def _check_email(self, email: str) -> None:
        result = await self.db.execute(select(User.id).where(func.lower(User.email) == email))
        if result.scalar_one_or_none() is not None:
            raise ParentEmailExistsError("Email already exists")

    async def _check_branch(self, branch_id: str) -> None:
        result = await self.db.execute(
            select(Branch.id).where(Branch.id == branch_id, Branch.aamar_id == self._tenant())
        )
        if result.scalar_one_or_none() is None:
            raise ParentBranchNotFoundError("Invalid branch")
