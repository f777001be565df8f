# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Teacher service."""

from unittest.mock import MagicMock, patch

import pytest

from conftest import scalar_result, scalars_result
from src.core.result import ErrorKind
from src.domains.teacher.service import TeacherService, employee_id
from src.infrastructure.database.models import Teacher
from src.models.teacher import TeacherCreateRequest


@pytest.fixture(autouse=True)
def fast_password_hash():
    with patch(
        "src.domains.teacher.service.default_password_hash",
        return_value="$2b$04$hash",
    ) as mocked:
        yield mocked


@pytest.fixture
def teacher_service(mock_db, tenant_context, mock_invalidator, school_settings):
    return TeacherService(mock_db, tenant_context, mock_invalidator, school_settings)


def _create_request(**overrides) -> TeacherCreateRequest:
    values = {
        "first_name": "Nasrin",
        "last_name": "Akter",
        "email": "Nasrin@School.edu",
        "branch_id": "branch-1",
        "specialization": "Physics",
        "experience": 6,
    }
    values.update(overrides)
    return TeacherCreateRequest(**values)


def _teacher(experience: int, branch_id: str | None, active: bool = True) -> MagicMock:
    teacher = MagicMock()
    teacher.experience = experience
    teacher.user.is_active = active
    teacher.user.branch_id = branch_id
    teacher.user.branch.name = f"Branch {branch_id}"
    return teacher


def test_employee_id() -> None:
    assert employee_id("3f1c9a-77ab12") == "EMP77AB12"


class TestTeacherServiceCreate:
    """Tests for teacher creation."""

    @pytest.mark.asyncio
    async def test_create_success(self, teacher_service, mock_db, mock_invalidator) -> None:
        mock_db.execute.side_effect = [scalar_result(None), scalar_result("branch-1")]

        result = await teacher_service.create_teacher(_create_request())

        assert result.success
        assert result.message == "Teacher Nasrin Akter created successfully!"
        teacher = mock_db.add.call_args_list[-1].args[0]
        assert isinstance(teacher, Teacher)
        assert teacher.subjects == ["Physics"]
        assert teacher.experience == 6
        mock_invalidator.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_email_is_globally_unique(self, teacher_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result("user-9")

        result = await teacher_service.create_teacher(_create_request())

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Email already exists"
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_invalid_branch(self, teacher_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result(None), scalar_result(None)]

        result = await teacher_service.create_teacher(_create_request())

        assert result.error == "Invalid branch"

    @pytest.mark.asyncio
    async def test_required_fields(self, teacher_service) -> None:
        result = await teacher_service.create_teacher(_create_request(branch_id=None))

        assert result.error == "Required fields are missing"


class TestTeacherServiceQueries:
    """Tests for listings, statistics and deletion."""

    @pytest.mark.asyncio
    async def test_pagination_block(self, teacher_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result(25), scalars_result([])]

        result = await teacher_service.list_teachers(page=2, limit=10)

        assert result.data["pagination"] == {
            "page": 2,
            "limit": 10,
            "total": 25,
            "total_pages": 3,
            "has_next_page": True,
            "has_prev_page": True,
        }

    @pytest.mark.asyncio
    async def test_stats(self, teacher_service, mock_db) -> None:
        mock_db.execute.return_value = scalars_result([
            _teacher(5, "branch-1"),
            _teacher(2, "branch-1", active=False),
            _teacher(4, "branch-2"),
        ])

        result = await teacher_service.get_teacher_stats()

        assert result.data["total_teachers"] == 3
        assert result.data["active_teachers"] == 2
        assert result.data["average_experience"] == 3.67
        assert result.data["by_branch"] == [
            {"branch_id": "branch-1", "branch_name": "Branch branch-1", "teacher_count": 2},
            {"branch_id": "branch-2", "branch_name": "Branch branch-2", "teacher_count": 1},
        ]

    @pytest.mark.asyncio
    async def test_delete_unassigns_classes(self, teacher_service, mock_db, mock_invalidator) -> None:
        teacher = MagicMock()
        teacher.id = "teacher-1"
        mock_db.execute.side_effect = [scalar_result(teacher), MagicMock(), MagicMock()]

        result = await teacher_service.delete_teacher("teacher-1")

        assert result.message == "Teacher deleted successfully"
        statements = [call.args[0] for call in mock_db.execute.await_args_list[1:]]
        assert [s.table.name for s in statements] == ["classes", "profiles"]
        assert [call.args[0] for call in mock_db.delete.await_args_list] == [teacher, teacher.user]

    @pytest.mark.asyncio
    async def test_delete_missing_teacher(self, teacher_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await teacher_service.delete_teacher("missing")

        assert result.kind == ErrorKind.NOT_FOUND
