# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Class service."""

from unittest.mock import MagicMock

import pytest

from conftest import scalar_result, scalars_result
from src.core.result import ErrorKind
from src.domains.class_.service import ClassService
from src.models.class_ import ClassCreateRequest, ClassUpdateRequest


@pytest.fixture
def class_service(mock_db, tenant_context, mock_invalidator, school_settings):
    """Create class service with mock database."""
    return ClassService(mock_db, tenant_context, mock_invalidator, school_settings)


@pytest.fixture
def create_request() -> ClassCreateRequest:
    return ClassCreateRequest(
        name="Class 5",
        branch_id="branch-1",
        academic_year="2024",
        teacher_id="teacher-1",
        schedule_id="schedule-1",
    )


def _section(students: int) -> MagicMock:
    section = MagicMock()
    section.students = [MagicMock() for _ in range(students)]
    return section


def _class(sections: list[MagicMock], teacher_id: str | None = "teacher-1") -> MagicMock:
    class_ = MagicMock()
    class_.id = "class-1"
    class_.name = "Class 5"
    class_.branch_id = "branch-1"
    class_.academic_year = "2024"
    class_.teacher_id = teacher_id
    class_.schedule_id = "schedule-1"
    class_.aamar_id = "AAMAR1"
    class_.sections = sections
    class_.subjects = []
    class_.timetables = []
    return class_


class TestClassServiceCreate:
    """Tests for class creation."""

    @pytest.mark.asyncio
    async def test_create_class_success(self, class_service, mock_db, mock_invalidator, create_request) -> None:
        """Test successful class creation."""
        mock_db.execute.side_effect = [
            scalar_result(None),          # no duplicate
            scalar_result("branch-1"),    # branch exists
            scalar_result("teacher-1"),   # teacher exists
            scalar_result(2),             # teacher load
            scalar_result("schedule-1"),  # schedule exists
        ]

        result = await class_service.create_class(create_request)

        assert result.success
        assert result.message == "Class created successfully"
        assert result.data["name"] == "Class 5"
        assert result.data["teacher_id"] == "teacher-1"
        mock_db.add.assert_called_once()
        mock_db.commit.assert_awaited_once()
        mock_invalidator.invalidate.assert_called_once_with("/dashboard/classes", tenant="AAMAR1")

    @pytest.mark.asyncio
    async def test_create_class_duplicate(self, class_service, mock_db, create_request) -> None:
        mock_db.execute.return_value = scalar_result("existing-class")

        result = await class_service.create_class(create_request)

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Class already exists"
        assert mock_db.execute.await_count == 1
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_class_teacher_overloaded(self, class_service, mock_db, create_request) -> None:
        mock_db.execute.side_effect = [
            scalar_result(None),
            scalar_result("branch-1"),
            scalar_result("teacher-1"),
            scalar_result(3),
        ]

        result = await class_service.create_class(create_request)

        assert result.kind == ErrorKind.PRECONDITION
        assert result.error == "Teacher overloaded"
        assert "3 classes" in result.message
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_class_invalid_branch(self, class_service, mock_db, create_request) -> None:
        mock_db.execute.side_effect = [scalar_result(None), scalar_result(None)]

        result = await class_service.create_class(create_request)

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Invalid branch"

    @pytest.mark.asyncio
    async def test_create_class_missing_fields(self, class_service, mock_db) -> None:
        result = await class_service.create_class(ClassCreateRequest(name="Class 5"))

        assert result.error == "Required fields are missing"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_class_commit_failure_is_flattened(
        self,
        class_service,
        mock_db,
        mock_invalidator,
        create_request,
    ) -> None:
        mock_db.execute.side_effect = [
            scalar_result(None),
            scalar_result("branch-1"),
            scalar_result("teacher-1"),
            scalar_result(0),
            scalar_result("schedule-1"),
        ]
        mock_db.commit.side_effect = RuntimeError("connection lost")

        result = await class_service.create_class(create_request)

        assert result.kind == ErrorKind.INFRASTRUCTURE
        assert result.error == "Failed to create class"
        mock_db.rollback.assert_awaited()
        mock_invalidator.invalidate.assert_not_called()


class TestClassServiceUpdate:
    """Tests for class updates."""

    @pytest.mark.asyncio
    async def test_update_name_rechecks_duplicate(self, class_service, mock_db) -> None:
        mock_db.execute.side_effect = [
            scalar_result(_class([])),
            scalar_result("other-class"),
        ]

        result = await class_service.update_class("class-1", ClassUpdateRequest(name="Class 6"))

        assert result.kind == ErrorKind.CONFLICT

    @pytest.mark.asyncio
    async def test_update_teacher_excludes_current_class(self, class_service, mock_db) -> None:
        class_ = _class([], teacher_id=None)
        mock_db.execute.side_effect = [
            scalar_result(class_),
            scalar_result("teacher-2"),
            scalar_result(1),
        ]

        result = await class_service.update_class("class-1", ClassUpdateRequest(teacher_id="teacher-2"))

        assert result.success
        assert result.message == "Class updated successfully"
        assert class_.teacher_id == "teacher-2"

    @pytest.mark.asyncio
    async def test_update_missing_class(self, class_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await class_service.update_class("missing", ClassUpdateRequest(name="X"))

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Class not found"


class TestClassServiceDelete:
    """Tests for class deletion guards."""

    @pytest.mark.asyncio
    async def test_delete_blocked_by_students(self, class_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(_class([_section(2), _section(1)]))

        result = await class_service.delete_class("class-1")

        assert result.kind == ErrorKind.PRECONDITION
        assert result.error == "Cannot delete class with 3 students"
        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_blocked_by_subjects(self, class_service, mock_db) -> None:
        class_ = _class([_section(0)])
        class_.subjects = [MagicMock()]
        mock_db.execute.return_value = scalar_result(class_)

        result = await class_service.delete_class("class-1")

        assert result.error == "Cannot delete class with subjects or timetables"

    @pytest.mark.asyncio
    async def test_delete_empty_class(self, class_service, mock_db) -> None:
        class_ = _class([_section(0)])
        mock_db.execute.return_value = scalar_result(class_)

        result = await class_service.delete_class("class-1")

        assert result.success
        assert result.data is None
        mock_db.delete.assert_awaited_once_with(class_)
        mock_db.commit.assert_awaited_once()


class TestClassServiceQueries:
    """Tests for statistics and unsupported operations."""

    @pytest.mark.asyncio
    async def test_class_stats(self, class_service, mock_db) -> None:
        classes = [
            _class([_section(20), _section(15)], teacher_id="teacher-1"),
            _class([_section(30)], teacher_id="teacher-2"),
            _class([], teacher_id=None),
        ]
        mock_db.execute.return_value = scalars_result(classes)

        result = await class_service.get_class_stats()

        assert result.data == {
            "total_classes": 3,
            "total_students": 65,
            "classes_with_teachers": 2,
            "classes_without_teachers": 1,
            "average_students_per_class": 22,
        }

    @pytest.mark.asyncio
    async def test_class_stats_empty(self, class_service, mock_db) -> None:
        mock_db.execute.return_value = scalars_result([])

        result = await class_service.get_class_stats()

        assert result.data["average_students_per_class"] == 0

    @pytest.mark.asyncio
    async def test_assign_students_not_implemented(self, class_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(_class([]))

        result = await class_service.assign_students("class-1", ["s-1", "s-2"])

        assert result.kind == ErrorKind.NOT_IMPLEMENTED

    @pytest.mark.asyncio
    async def test_list_requires_session(self, mock_db) -> None:
        result = await ClassService(mock_db, None).list_classes()

        assert result.kind == ErrorKind.UNAUTHENTICATED
        mock_db.execute.assert_not_awaited()
