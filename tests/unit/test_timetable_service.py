# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for timetable slots and the timetable service."""

from datetime import time
from unittest.mock import MagicMock

import pytest

from conftest import rows_result, scalar_result, scalars_result
from src.core.result import ErrorKind
from src.domains.timetable.service import TimetableService
from src.domains.timetable.slots import day_name, format_time, intervals_overlap
from src.infrastructure.database.models import Timetable
from src.models.timetable import TimetableCreateRequest, TimetableUpdateRequest


class TestIntervalsOverlap:
    """Tests for half-open slot collisions against an existing 09:00-10:00 slot."""

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (time(9, 30), time(10, 30), True),   # starts inside
            (time(8, 30), time(9, 30), True),    # ends inside
            (time(8, 0), time(11, 0), True),     # contains
            (time(9, 0), time(10, 0), True),     # identical
            (time(10, 0), time(11, 0), False),   # touches the end
            (time(8, 0), time(9, 0), False),     # touches the start
        ],
    )
    def test_overlap(self, start: time, end: time, expected: bool) -> None:
        assert intervals_overlap(start, end, time(9, 0), time(10, 0)) is expected


class TestSlotFormatting:
    """Tests for day and time formatting."""

    def test_day_names(self) -> None:
        assert day_name(0) == "Sunday"
        assert day_name(6) == "Saturday"
        assert day_name(7) == "Unknown"

    def test_format_time(self) -> None:
        assert format_time(time(8, 5)) == "08:05"


def _slot(start: time, end: time) -> MagicMock:
    slot = MagicMock()
    slot.start_time = start
    slot.end_time = end
    return slot


def _request(**overrides) -> TimetableCreateRequest:
    values = {
        "class_id": "class-1",
        "subject_id": "subject-1",
        "teacher_id": "teacher-1",
        "day_of_week": 1,
        "start_time": time(9, 0),
        "end_time": time(10, 0),
        "room": "101",
    }
    values.update(overrides)
    return TimetableCreateRequest(**values)


class TestTimetableServiceCreate:
    """Tests for timetable creation."""

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db, tenant_context, mock_invalidator) -> None:
        mock_db.execute.side_effect = [
            scalar_result("class-1"),
            scalar_result("subject-1"),
            scalar_result("teacher-1"),
            scalars_result([_slot(time(8, 0), time(9, 0)), _slot(time(10, 0), time(11, 0))]),
        ]
        service = TimetableService(mock_db, tenant_context, mock_invalidator)

        result = await service.create_timetable(_request())

        assert result.success
        assert result.message == "Timetable created successfully"
        assert result.data["day_name"] == "Monday"
        assert result.data["start_time"] == "09:00"
        mock_db.add.assert_called_once()
        mock_db.commit.assert_awaited_once()
        mock_invalidator.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_sunday_is_a_valid_day(self, mock_db, tenant_context) -> None:
        mock_db.execute.side_effect = [
            scalar_result("class-1"),
            scalar_result("subject-1"),
            scalar_result("teacher-1"),
            scalars_result([]),
        ]

        result = await TimetableService(mock_db, tenant_context).create_timetable(_request(day_of_week=0))

        assert result.success
        assert result.data["day_name"] == "Sunday"

    @pytest.mark.asyncio
    async def test_overlap_is_rejected(self, mock_db, tenant_context) -> None:
        mock_db.execute.side_effect = [
            scalar_result("class-1"),
            scalar_result("subject-1"),
            scalar_result("teacher-1"),
            scalars_result([_slot(time(9, 30), time(10, 30))]),
        ]

        result = await TimetableService(mock_db, tenant_context).create_timetable(_request())

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Time slot conflicts with existing timetable"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_after_end_is_rejected(self, mock_db, tenant_context) -> None:
        request = _request(start_time=time(11, 0), end_time=time(10, 0))

        result = await TimetableService(mock_db, tenant_context).create_timetable(request)

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Start time must be before end time"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_day_out_of_range_is_rejected(self, mock_db, tenant_context) -> None:
        result = await TimetableService(mock_db, tenant_context).create_timetable(_request(day_of_week=7))

        assert result.error == "Day of week must be between 0 and 6"

    @pytest.mark.asyncio
    async def test_missing_fields(self, mock_db, tenant_context) -> None:
        result = await TimetableService(mock_db, tenant_context).create_timetable(_request(subject_id=None))

        assert result.error == "All fields are required"

    @pytest.mark.asyncio
    async def test_unknown_subject(self, mock_db, tenant_context) -> None:
        mock_db.execute.side_effect = [scalar_result("class-1"), scalar_result(None)]

        result = await TimetableService(mock_db, tenant_context).create_timetable(_request())

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Subject not found"

    @pytest.mark.asyncio
    async def test_teacher_outside_tenant(self, mock_db, tenant_context) -> None:
        mock_db.execute.side_effect = [
            scalar_result("class-1"),
            scalar_result("subject-1"),
            scalar_result(None),
        ]

        result = await TimetableService(mock_db, tenant_context).create_timetable(
            _request(teacher_id="teacher-other")
        )

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Teacher not found"
        assert "teachers.aamar_id" in str(mock_db.execute.await_args_list[2].args[0])
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_teacher_skips_teacher_check(self, mock_db, tenant_context) -> None:
        mock_db.execute.side_effect = [
            scalar_result("class-1"),
            scalar_result("subject-1"),
            scalars_result([]),
        ]

        result = await TimetableService(mock_db, tenant_context).create_timetable(_request(teacher_id=None))

        assert result.success
        assert result.data["teacher_id"] is None

    @pytest.mark.asyncio
    async def test_requires_session(self, mock_db) -> None:
        result = await TimetableService(mock_db, None).create_timetable(_request())

        assert result.kind == ErrorKind.UNAUTHENTICATED


@pytest.fixture
def timetable_service(mock_db, tenant_context, mock_invalidator):
    return TimetableService(mock_db, tenant_context, mock_invalidator)


def _existing() -> Timetable:
    return Timetable(
        id="tt-1",
        aamar_id="AAMAR1",
        class_id="class-1",
        subject_id="subject-1",
        day_of_week=1,
        start_time=time(9, 0),
        end_time=time(10, 0),
    )


class TestTimetableServiceUpdate:
    """Tests for slot updates."""

    @pytest.mark.asyncio
    async def test_room_change_skips_overlap_check(self, timetable_service, mock_db) -> None:
        timetable = _existing()
        mock_db.execute.return_value = scalar_result(timetable)

        result = await timetable_service.update_timetable("tt-1", TimetableUpdateRequest(room="B-12"))

        assert result.data["room"] == "B-12"
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_moving_slot_excludes_itself(self, timetable_service, mock_db) -> None:
        timetable = _existing()
        mock_db.execute.side_effect = [
            scalar_result(timetable),
            scalars_result([_slot(time(11, 0), time(12, 0))]),
        ]

        result = await timetable_service.update_timetable(
            "tt-1",
            TimetableUpdateRequest(start_time=time(10, 0), end_time=time(11, 0)),
        )

        assert result.success
        assert result.data["start_time"] == "10:00"
        assert "timetables.id !=" in str(mock_db.execute.await_args_list[1].args[0])

    @pytest.mark.asyncio
    async def test_moving_into_taken_slot(self, timetable_service, mock_db) -> None:
        mock_db.execute.side_effect = [
            scalar_result(_existing()),
            scalars_result([_slot(time(10, 30), time(11, 30))]),
        ]

        result = await timetable_service.update_timetable(
            "tt-1",
            TimetableUpdateRequest(start_time=time(10, 0), end_time=time(11, 0)),
        )

        assert result.kind == ErrorKind.CONFLICT
        assert result.message == "Monday 10:30-11:30 is already taken"

    @pytest.mark.asyncio
    async def test_teacher_change_outside_tenant(self, timetable_service, mock_db) -> None:
        timetable = _existing()
        mock_db.execute.side_effect = [scalar_result(timetable), scalar_result(None)]

        result = await timetable_service.update_timetable(
            "tt-1", TimetableUpdateRequest(teacher_id="teacher-other")
        )

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Teacher not found"
        assert timetable.teacher_id is None
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_teacher_change_in_tenant(self, timetable_service, mock_db) -> None:
        timetable = _existing()
        mock_db.execute.side_effect = [scalar_result(timetable), scalar_result("teacher-2")]

        result = await timetable_service.update_timetable("tt-1", TimetableUpdateRequest(teacher_id="teacher-2"))

        assert result.success
        assert timetable.teacher_id == "teacher-2"

    @pytest.mark.asyncio
    async def test_update_missing(self, timetable_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await timetable_service.update_timetable("missing", TimetableUpdateRequest(room="A"))

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Timetable not found"


@pytest.mark.asyncio
async def test_timetable_stats(timetable_service, mock_db) -> None:
    mock_db.execute.return_value = rows_result([
        ("class-1", "math", 0),
        ("class-1", "physics", 0),
        ("class-1", "math", 1),
        ("class-2", "math", 1),
        ("class-2", "english", 1),
        ("class-2", "math", 2),
    ])

    result = await timetable_service.get_timetable_stats()

    assert result.data == {
        "total_timetables": 6,
        "total_classes": 2,
        "total_subjects": 3,
        "average_periods_per_day": 2,
    }
