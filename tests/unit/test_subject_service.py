# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Subject service."""

from unittest.mock import MagicMock

import pytest

from conftest import scalar_result
from src.core.result import ErrorKind
from src.domains.subject.service import SubjectService
from src.models.subject import ChapterCreateRequest, LessonCreateRequest, SubjectCreateRequest, SubjectUpdateRequest


@pytest.fixture
def subject_service(mock_db, tenant_context, mock_invalidator):
    return SubjectService(mock_db, tenant_context, mock_invalidator)


def _chapter(chapter_id: str, lessons: int) -> MagicMock:
    chapter = MagicMock()
    chapter.id = chapter_id
    chapter.lessons = [MagicMock() for _ in range(lessons)]
    return chapter


@pytest.fixture
def sample_subject() -> MagicMock:
    """Subject with two chapters (3 lessons) and one timetable."""
    subject = MagicMock()
    subject.id = "subject-1"
    subject.aamar_id = "AAMAR1"
    subject.name = "Mathematics"
    subject.code = "MATH5"
    subject.class_id = "class-1"
    subject.chapters = [_chapter("chapter-1", 2), _chapter("chapter-2", 1)]
    subject.timetables = [MagicMock()]
    return subject


class TestSubjectServiceCreate:
    """Tests for subject creation."""

    @pytest.mark.asyncio
    async def test_create_defaults_school_to_context(self, subject_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result("class-1"), scalar_result(None)]

        result = await subject_service.create_subject(
            SubjectCreateRequest(name="Mathematics", code="MATH5", class_id="class-1")
        )

        assert result.success
        assert result.message == "Subject Mathematics created successfully!"
        assert result.data["school_id"] == "school-1"

    @pytest.mark.asyncio
    async def test_school_outside_tenant(self, subject_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result("class-1"), scalar_result(None)]

        result = await subject_service.create_subject(
            SubjectCreateRequest(name="Mathematics", code="MATH5", class_id="class-1", school_id="school-other")
        )

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Invalid school"
        assert "schools.aamar_id" in str(mock_db.execute.await_args_list[1].args[0])
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_context_school_is_not_rechecked(self, subject_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result("class-1"), scalar_result(None)]

        result = await subject_service.create_subject(
            SubjectCreateRequest(name="Mathematics", code="MATH5", class_id="class-1", school_id="school-1")
        )

        assert result.success
        assert mock_db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_code_unique_per_class(self, subject_service, mock_db) -> None:
        mock_db.execute.side_effect = [scalar_result("class-1"), scalar_result("subject-9")]

        result = await subject_service.create_subject(
            SubjectCreateRequest(name="Maths", code="MATH5", class_id="class-1")
        )

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Subject code already exists in this class"

    @pytest.mark.asyncio
    async def test_unchanged_code_is_not_rechecked(self, subject_service, mock_db, sample_subject) -> None:
        mock_db.execute.return_value = scalar_result(sample_subject)

        result = await subject_service.update_subject(
            "subject-1",
            SubjectUpdateRequest(name="Maths", code="MATH5"),
        )

        assert result.success
        assert sample_subject.name == "Maths"
        assert mock_db.execute.await_count == 1


class TestSubjectServiceDelete:
    """Tests for guarded and cascading subject deletes."""

    @pytest.mark.asyncio
    async def test_delete_with_content_requires_cascade(self, subject_service, mock_db, sample_subject) -> None:
        mock_db.execute.return_value = scalar_result(sample_subject)

        result = await subject_service.delete_subject("subject-1")

        assert result.kind == ErrorKind.PRECONDITION
        assert result.message == "Mathematics has 2 chapters, 3 lessons and 1 timetables"
        assert mock_db.execute.await_count == 1
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cascade_deletes_in_dependency_order(
        self,
        subject_service,
        mock_db,
        mock_invalidator,
        sample_subject,
    ) -> None:
        mock_db.execute.side_effect = [scalar_result(sample_subject)] + [MagicMock() for _ in range(4)]

        result = await subject_service.delete_subject("subject-1", cascade=True)

        assert result.data == {"lessons_deleted": 3, "chapters_deleted": 2, "timetables_deleted": 1}
        assert result.message == (
            "Subject Mathematics deleted successfully! (2 chapters, 3 lessons, 1 timetables)"
        )
        tables = [call.args[0].table.name for call in mock_db.execute.await_args_list[1:]]
        assert tables == ["lessons", "chapters", "timetables", "subjects"]
        mock_db.commit.assert_awaited_once()
        mock_invalidator.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_delete_empty_subject(self, subject_service, mock_db, sample_subject) -> None:
        sample_subject.chapters = []
        sample_subject.timetables = []
        mock_db.execute.side_effect = [scalar_result(sample_subject)] + [MagicMock() for _ in range(3)]

        result = await subject_service.delete_subject("subject-1")

        assert result.success
        assert result.data["lessons_deleted"] == 0

    @pytest.mark.asyncio
    async def test_delete_missing_subject(self, subject_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await subject_service.delete_subject("missing", cascade=True)

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Subject not found"


class TestChaptersAndLessons:
    """Tests for chapter and lesson management."""

    @pytest.mark.asyncio
    async def test_negative_order_index_rejected(self, subject_service, mock_db) -> None:
        result = await subject_service.create_chapter(
            ChapterCreateRequest(subject_id="subject-1", name="Fractions", order_index=-1)
        )

        assert result.error == "Order index must be zero or greater"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_chapter(self, subject_service, mock_db, sample_subject) -> None:
        mock_db.execute.return_value = scalar_result(sample_subject)

        result = await subject_service.create_chapter(
            ChapterCreateRequest(subject_id="subject-1", name="Fractions", order_index=2)
        )

        assert result.data["subject_id"] == "subject-1"
        assert result.data["order_index"] == 2

    @pytest.mark.asyncio
    async def test_delete_chapter_removes_lessons(self, subject_service, mock_db) -> None:
        chapter = _chapter("chapter-1", 4)
        chapter.name = "Fractions"
        mock_db.execute.side_effect = [scalar_result(chapter), MagicMock(), MagicMock()]

        result = await subject_service.delete_chapter("chapter-1")

        assert result.data == {"lessons_deleted": 4}
        tables = [call.args[0].table.name for call in mock_db.execute.await_args_list[1:]]
        assert tables == ["lessons", "chapters"]

    @pytest.mark.asyncio
    async def test_create_lesson_in_unknown_chapter(self, subject_service, mock_db) -> None:
        mock_db.execute.return_value = scalar_result(None)

        result = await subject_service.create_lesson(LessonCreateRequest(chapter_id="nope", name="Intro"))

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Chapter not found"
