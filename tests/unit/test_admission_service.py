# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the admission workflow."""

import re
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import pytest

from conftest import scalar_result, scalars_result
from src.core.result import ErrorKind
from src.domains.admission.service import (
    AdmissionService,
    InvalidDateError,
    MissingFieldError,
    _parse_date,
    field_label,
    generate_application_no,
)
from src.infrastructure.database.models import Parent, Profile, Student, User
from src.models.admission import AdmissionRequest
from src.utils.datetime import utc_now


@pytest.fixture(autouse=True)
def fast_password_hash():
    """Skip bcrypt for admission tests."""
    with patch(
        "src.domains.admission.service.default_password_hash",
        return_value="$2b$04$hash",
    ) as mocked:
        yield mocked


@pytest.fixture
def admission_service(mock_db, tenant_context, mock_invalidator, school_settings):
    return AdmissionService(mock_db, tenant_context, mock_invalidator, school_settings)


@pytest.fixture
def section() -> MagicMock:
    section = MagicMock()
    section.id = "section-1"
    section.class_id = "class-1"
    section.class_.branch.id = "branch-1"
    section.class_.branch.school_id = "school-1"
    return section


def _request(**overrides) -> AdmissionRequest:
    values = {
        "student_first_name": "Rahim",
        "student_last_name": "Uddin",
        "student_email": "Rahim@Example.com",
        "date_of_birth": "2015-03-14",
        "gender": "MALE",
        "roll_number": "2024001",
        "section_id": "section-1",
        "admission_date": "2024-01-10",
        "address": "12 Lake Road",
        "parent_first_name": "Karim",
        "parent_last_name": "Uddin",
        "parent_email": "karim@example.com",
        "relation": "Father",
    }
    values.update(overrides)
    return AdmissionRequest(**values)


def _happy_path(mock_db, section) -> None:
    mock_db.execute.side_effect = [
        scalar_result(section),  # section
        scalar_result(None),     # student email free
        scalar_result(None),     # parent email free
        scalar_result(None),     # roll number free
    ]


class TestHelpers:
    """Tests for admission helpers."""

    def test_field_label(self) -> None:
        assert field_label("student_first_name") == "Student First Name"
        assert field_label("relation") == "Relation"

    def test_application_no_format(self) -> None:
        assert re.fullmatch(r"ADM-\d{13}-[0-9A-Z]{4}", generate_application_no())


class TestCreateStudentWithParent:
    """Tests for the combined admission."""

    @pytest.mark.asyncio
    async def test_success_creates_rows_in_order(
        self,
        admission_service,
        mock_db,
        mock_invalidator,
        section,
    ) -> None:
        _happy_path(mock_db, section)

        result = await admission_service.create_student_with_parent(_request())

        assert result.success
        assert result.message.startswith("Student admission successful! Application No: ADM-")
        assert set(result.data) == {"student_id", "parent_id", "application_no"}

        added = [call.args[0] for call in mock_db.add.call_args_list]
        assert [type(obj) for obj in added] == [User, Profile, Parent, User, Profile, Student]

        parent_user, parent_profile, parent, student_user, student_profile, student = added
        assert parent_user.email == "karim@example.com"
        assert parent_user.role == "PARENT"
        assert parent_profile.address == "12 Lake Road"
        assert parent_profile.nationality == "Bangladeshi"
        assert student_user.email == "rahim@example.com"
        assert student_user.branch_id == "branch-1"
        assert student_profile.date_of_birth.isoformat() == "2015-03-14"
        assert student.parent_id == parent.id
        assert student.class_id == "class-1"
        assert result.data["student_id"] == student.id

        mock_db.commit.assert_awaited_once()
        mock_invalidator.invalidate.assert_called_once_with(
            "/dashboard/admissions",
            "/dashboard/students",
            "/dashboard/parents",
            tenant="AAMAR1",
        )

    @pytest.mark.asyncio
    async def test_section_is_checked_first(self, admission_service, mock_db) -> None:
        result = await admission_service.create_student_with_parent(
            _request(section_id=None, student_first_name=None)
        )

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Please select a section"
        assert result.message == "Please select a section"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_section(self, admission_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await admission_service.create_student_with_parent(_request())

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Selected section not found or not accessible"

    @pytest.mark.asyncio
    async def test_first_missing_field_is_reported(self, admission_service, mock_db, section) -> None:
        mock_db.execute.return_value = scalar_result(section)

        result = await admission_service.create_student_with_parent(
            _request(date_of_birth=None, relation=None)
        )

        assert result.error == "Date Of Birth is required"

    @pytest.mark.asyncio
    async def test_invalid_student_email(self, admission_service, mock_db, section) -> None:
        mock_db.execute.return_value = scalar_result(section)

        result = await admission_service.create_student_with_parent(_request(student_email="not-an-email"))

        assert result.error == "Invalid student email format"

    @pytest.mark.asyncio
    async def test_invalid_date(self, admission_service, mock_db, section) -> None:
        mock_db.execute.return_value = scalar_result(section)

        result = await admission_service.create_student_with_parent(_request(date_of_birth="14/03/2015"))

        assert result.error == "Invalid date of birth"
        assert result.kind == ErrorKind.VALIDATION

    def test_malformed_date_error_class(self) -> None:
        with pytest.raises(InvalidDateError, match="Invalid admission date") as exc_info:
            _parse_date("2024-13-40", "admission date")

        assert not isinstance(exc_info.value, MissingFieldError)
        assert exc_info.value.detail == "Invalid admission date"

    @pytest.mark.asyncio
    async def test_parent_email_taken(self, admission_service, mock_db, section) -> None:
        mock_db.execute.side_effect = [
            scalar_result(section),
            scalar_result(None),
            scalar_result("user-9"),
        ]

        result = await admission_service.create_student_with_parent(_request())

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Parent email already exists in this organization"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_roll_number_taken(self, admission_service, mock_db, section) -> None:
        mock_db.execute.side_effect = [
            scalar_result(section),
            scalar_result(None),
            scalar_result(None),
            scalar_result("student-9"),
        ]

        result = await admission_service.create_student_with_parent(_request())

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Roll number already exists in this section"

    @pytest.mark.asyncio
    async def test_failure_mid_transaction_rolls_back(
        self,
        admission_service,
        mock_db,
        mock_invalidator,
        section,
    ) -> None:
        _happy_path(mock_db, section)
        # parent user flush, parent flush, then the student user flush fails
        mock_db.flush.side_effect = [None, None, RuntimeError("disk full")]

        result = await admission_service.create_student_with_parent(_request())

        assert result.kind == ErrorKind.INFRASTRUCTURE
        assert result.error == "disk full"
        mock_db.commit.assert_not_awaited()
        mock_db.rollback.assert_awaited()
        mock_invalidator.invalidate.assert_not_called()


def _admitted(admitted: date, class_name: str, section_name: str, gender: str | None) -> MagicMock:
    student = MagicMock()
    student.admission_date = admitted
    student.section.name = section_name
    student.section.class_.name = class_name
    student.section.class_.branch.name = "Main Campus"
    student.user.profile.gender = gender
    return student


class TestAdmissionListings:
    """Tests for admission listings, search and statistics."""

    @pytest.mark.asyncio
    async def test_short_search_returns_nothing(self, admission_service, mock_db) -> None:
        result = await admission_service.search_admissions(" r ")

        assert result.success
        assert result.data == []
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_is_limited(self, admission_service, mock_db) -> None:
        mock_db.execute.return_value = scalars_result([])

        result = await admission_service.search_admissions("Rahim")

        assert result.data == []
        assert "LIMIT" in str(mock_db.execute.await_args.args[0])

    @pytest.mark.asyncio
    async def test_student_details_not_found(self, admission_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await admission_service.get_student_details("missing")

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Student not found"

    @pytest.mark.asyncio
    async def test_stats(self, admission_service, mock_db) -> None:
        today = utc_now().date()
        mock_db.execute.return_value = scalars_result([
            _admitted(today, "Class 5", "A", "MALE"),
            _admitted(today, "Class 5", "A", None),
            _admitted(today - timedelta(days=800), "Class 6", "B", "FEMALE"),
        ])

        result = await admission_service.get_admission_stats()

        assert result.data["total_students"] == 3
        assert result.data["this_month_admissions"] == 2
        assert result.data["recent_admissions"] == 2
        assert result.data["class_counts"] == {"Class 5 A": 2, "Class 6 B": 1}
        assert result.data["branch_counts"] == {"Main Campus": 3}
        assert result.data["gender_counts"] == {"MALE": 1, "Not specified": 1, "FEMALE": 1}
