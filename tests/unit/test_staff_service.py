# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Staff service."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from conftest import scalar_result, scalars_result
from src.core.result import ErrorKind
from src.domains.staff.service import StaffService
from src.infrastructure.database.models import Staff
from src.models.staff import StaffCreateRequest


@pytest.fixture(autouse=True)
def fast_password_hash():
    with patch(
        "src.domains.staff.service.default_password_hash",
        return_value="$2b$04$hash",
    ) as mocked:
        yield mocked


@pytest.fixture
def staff_service(mock_db, tenant_context, mock_invalidator, school_settings):
    return StaffService(mock_db, tenant_context, mock_invalidator, school_settings)


def _create_request(**overrides) -> StaffCreateRequest:
    values = {
        "first_name": "Rafiq",
        "last_name": "Islam",
        "email": "rafiq@school.edu",
        "designation": "Accountant",
        "department": "Finance",
        "salary": Decimal("25000"),
        "branch_id": "branch-1",
    }
    values.update(overrides)
    return StaffCreateRequest(**values)


def _member(designation: str, department: str | None, active: bool = True) -> MagicMock:
    member = MagicMock()
    member.designation = designation
    member.department = department
    member.user.is_active = active
    return member


class TestStaffService:
    """Tests for staff management."""

    @pytest.mark.asyncio
    async def test_create_success(self, staff_service, mock_db, mock_invalidator) -> None:
        mock_db.execute.side_effect = [scalar_result(None), scalar_result("branch-1")]

        result = await staff_service.create_staff(_create_request())

        assert result.message == "Staff member Rafiq Islam created successfully!"
        staff = mock_db.add.call_args_list[-1].args[0]
        assert isinstance(staff, Staff)
        assert staff.designation == "Accountant"
        assert staff.joining_date is not None
        mock_invalidator.invalidate.assert_called_once_with("/dashboard/staff", tenant="AAMAR1")

    @pytest.mark.asyncio
    async def test_designation_required(self, staff_service, mock_db) -> None:
        result = await staff_service.create_staff(_create_request(designation=None))

        assert result.error == "Required fields are missing"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_branch(self, staff_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result(None), scalar_result(None)]

        result = await staff_service.create_staff(_create_request())

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Invalid branch"

    @pytest.mark.asyncio
    async def test_delete_removes_attendance_first(self, staff_service, mock_db) -> None:
        staff = MagicMock()
        staff.id = "staff-1"
        staff.user.full_name = "Rafiq Islam"
        mock_db.execute.side_effect = [scalar_result(staff), MagicMock(), MagicMock()]

        result = await staff_service.delete_staff("staff-1")

        assert result.message == "Staff member Rafiq Islam deleted successfully!"
        tables = [call.args[0].table.name for call in mock_db.execute.await_args_list[1:]]
        assert tables == ["staff_attendance", "profiles"]
        assert [call.args[0] for call in mock_db.delete.await_args_list] == [staff, staff.user]

    @pytest.mark.asyncio
    async def test_get_missing(self, staff_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await staff_service.get_staff("missing")

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Staff member not found"

    @pytest.mark.asyncio
    async def test_stats(self, staff_service, mock_db) -> None:
        mock_db.execute.return_value = scalars_result([
            _member("Accountant", "Finance"),
            _member("Clerk", "Finance", active=False),
            _member("Guard", None),
        ])

        result = await staff_service.get_staff_stats()

        assert result.data == {
            "total_staff": 3,
            "active_staff": 2,
            "by_department": {"Finance": 2, "Unassigned": 1},
            "by_designation": {"Accountant": 1, "Clerk": 1, "Guard": 1},
        }
