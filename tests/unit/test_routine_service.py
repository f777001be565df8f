# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Routine service."""

from datetime import time
from unittest.mock import MagicMock

import pytest

from conftest import scalar_result
from src.core.result import ErrorKind
from src.domains.routine.service import RoutineService
from src.infrastructure.database.models import ClassRoutine, RoutineSlot
from src.models.routine import RoutineSlotInput, RoutineUpsertRequest


@pytest.fixture
def routine_service(mock_db, tenant_context, mock_invalidator):
    return RoutineService(mock_db, tenant_context, mock_invalidator)


def _slot(day: str, start: time, end: time, **extra) -> RoutineSlotInput:
    return RoutineSlotInput(day=day, start_time=start, end_time=end, **extra)


def _request(slots: list[RoutineSlotInput], **overrides) -> RoutineUpsertRequest:
    values = {
        "class_id": "class-1",
        "academic_year": "2024",
        "branch_id": "branch-1",
        "slots": slots,
    }
    values.update(overrides)
    return RoutineUpsertRequest(**values)


def _existing() -> ClassRoutine:
    return ClassRoutine(
        id="routine-1",
        aamar_id="AAMAR1",
        class_id="class-1",
        academic_year="2024",
        branch_id="branch-1",
        school_id="school-1",
        created_by="admin-9",
    )


class TestRoutineServiceUpsert:
    """Tests for saving routine grids."""

    @pytest.mark.asyncio
    async def test_create_routine(self, routine_service, mock_db, mock_invalidator) -> None:
        mock_db.execute.side_effect = [
            scalar_result(1),
            scalar_result(1),
            scalar_result(1),
            scalar_result(1),
            scalar_result(None),
        ]
        request = _request([
            _slot("Monday", time(9, 0), time(10, 0), subject_id="subject-1", teacher_id="teacher-1"),
            _slot("Sunday", time(10, 0), time(10, 30), class_type="break"),
        ])

        result = await routine_service.upsert_class_routine(request)

        assert result.success
        assert result.message == "Class routine created successfully"
        assert result.data["school_id"] == "school-1"
        assert result.data["created_by"] == "admin-1"
        assert [s["day"] for s in result.data["slots"]] == ["Sunday", "Monday"]
        assert result.data["slots"][0]["class_type"] == "break"

        routine, *slots = [call.args[0] for call in mock_db.add.call_args_list]
        assert isinstance(routine, ClassRoutine)
        assert all(isinstance(slot, RoutineSlot) for slot in slots)
        assert {slot.routine_id for slot in slots} == {routine.id}
        assert {slot.aamar_id for slot in slots} == {"AAMAR1"}
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_awaited_once()
        mock_invalidator.invalidate.assert_called_once_with("/dashboard/class-routine", tenant="AAMAR1")

    @pytest.mark.asyncio
    async def test_existing_routine_slots_are_replaced(self, routine_service, mock_db) -> None:
        routine = _existing()
        mock_db.execute.side_effect = [
            scalar_result(1),
            scalar_result(1),
            scalar_result(routine),
            MagicMock(),
        ]

        result = await routine_service.upsert_class_routine(
            _request([_slot("Tuesday", time(8, 0), time(8, 45))])
        )

        assert result.message == "Class routine updated successfully"
        assert result.data["id"] == "routine-1"
        assert routine.created_by == "admin-1"
        statement = str(mock_db.execute.await_args_list[3].args[0])
        assert statement.startswith("DELETE FROM routine_slots")
        assert "routine_slots.aamar_id" in statement

        (slot,) = [call.args[0] for call in mock_db.add.call_args_list]
        assert slot.routine_id == "routine-1"
        assert slot.day == "Tuesday"

    @pytest.mark.asyncio
    async def test_class_outside_tenant(self, routine_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(0)

        result = await routine_service.upsert_class_routine(_request([]))

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Invalid class"
        assert result.message == "The specified class does not exist or does not belong to your school"
        assert "classes.aamar_id" in str(mock_db.execute.await_args.args[0])
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_branch_outside_tenant(self, routine_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result(1), scalar_result(0)]

        result = await routine_service.upsert_class_routine(_request([]))

        assert result.error == "Invalid branch"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_teacher_outside_tenant(self, routine_service, mock_db) -> None:
        mock_db.execute.side_effect = [
            scalar_result(1),
            scalar_result(1),
            scalar_result(1),
        ]
        request = _request([
            _slot("Monday", time(9, 0), time(10, 0), teacher_id="teacher-1"),
            _slot("Monday", time(10, 0), time(11, 0), teacher_id="teacher-other"),
        ])

        result = await routine_service.upsert_class_routine(request)

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Invalid teacher"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_overlapping_slots_rejected(self, routine_service, mock_db) -> None:
        request = _request([
            _slot("Monday", time(9, 0), time(10, 0)),
            _slot("Monday", time(9, 30), time(10, 30)),
        ])

        result = await routine_service.upsert_class_routine(request)

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Routine slots overlap"
        assert result.message == "Monday 09:30-10:30 overlaps 09:00-10:00"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_time_on_other_days_allowed(self, routine_service, mock_db) -> None:
        mock_db.execute.side_effect = [
            scalar_result(1),
            scalar_result(1),
            scalar_result(None),
        ]
        request = _request([
            _slot("Monday", time(9, 0), time(10, 0)),
            _slot("Tuesday", time(9, 0), time(10, 0)),
        ])

        result = await routine_service.upsert_class_routine(request)

        assert result.success
        assert len(result.data["slots"]) == 2

    @pytest.mark.parametrize(
        "slot,error",
        [
            (RoutineSlotInput(day="Funday", start_time=time(9), end_time=time(10)), "Invalid day"),
            (RoutineSlotInput(day="Monday", start_time=time(10), end_time=time(9)), "Start time must be before end time"),
            (
                RoutineSlotInput(day="Monday", start_time=time(9), end_time=time(10), class_type="lab"),
                "Invalid class type",
            ),
            (RoutineSlotInput(day="Monday", start_time=time(9)), "Each slot needs a day, start time and end time"),
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_slot(self, routine_service, mock_db, slot, error) -> None:
        result = await routine_service.upsert_class_routine(_request([slot]))

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == error
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_required_fields(self, routine_service, mock_db) -> None:
        result = await routine_service.upsert_class_routine(_request([], academic_year=None))

        assert result.error == "Required fields are missing"


class TestRoutineServiceQueries:
    """Tests for fetching and deleting routines."""

    @pytest.mark.asyncio
    async def test_get_missing_routine(self, routine_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await routine_service.get_class_routine("class-1")

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Class routine not found"

    @pytest.mark.asyncio
    async def test_get_routine_with_names(self, routine_service, mock_db) -> None:
        routine = MagicMock()
        routine.id = "routine-1"
        routine.class_.name = "Class 5"
        slot = MagicMock()
        slot.id = "slot-1"
        slot.day = "Monday"
        slot.start_time = time(9, 0)
        slot.end_time = time(10, 0)
        slot.subject.name = "Mathematics"
        slot.teacher.user.full_name = "Nasrin Akter"
        routine.slots = [slot]
        mock_db.execute.return_value = scalar_result(routine)

        result = await routine_service.get_class_routine("class-1", "2024")

        assert result.data["class_name"] == "Class 5"
        assert result.data["slots"][0]["subject_name"] == "Mathematics"
        assert result.data["slots"][0]["teacher_name"] == "Nasrin Akter"
        assert result.data["slots"][0]["start_time"] == "09:00"

    @pytest.mark.asyncio
    async def test_delete_routine(self, routine_service, mock_db) -> None:
        routine = _existing()
        mock_db.execute.side_effect = [scalar_result(routine), MagicMock()]

        result = await routine_service.delete_class_routine("routine-1")

        assert result.success
        assert result.message == "Class routine deleted successfully"
        assert str(mock_db.execute.await_args_list[1].args[0]).startswith("DELETE FROM routine_slots")
        mock_db.delete.assert_awaited_once_with(routine)

    @pytest.mark.asyncio
    async def test_delete_missing_routine(self, routine_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await routine_service.delete_class_routine("missing")

        assert result.kind == ErrorKind.NOT_FOUND
        mock_db.delete.assert_not_awaited()
