# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject service for subjects, chapters and lessons.

This module provides the SubjectService class for:
- Subject CRUD with per-class code uniqueness
- Guarded or cascading subject deletion
- Chapter and lesson management within a subject
- Subject statistics and search
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import selectinload

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind, Ok
from src.domains.base import TenantScopedService
from src.infrastructure.database import transaction
from src.infrastructure.database.models import (
    Chapter,
    Class,
    Lesson,
    School,
    Subject,
    Timetable,
    new_id,
)
from src.infrastructure.events import DashboardPaths
from src.models.subject import (
    ChapterCreateRequest,
    ChapterUpdateRequest,
    LessonCreateRequest,
    LessonUpdateRequest,
    SubjectCreateRequest,
    SubjectUpdateRequest,
)
from src.utils.datetime import start_of_month

logger = logging.getLogger(__name__)


class SubjectServiceError(ServiceError):
    """Base exception for subject service errors."""

    pass


class SubjectNotFoundError(SubjectServiceError):
    """Raised when a subject is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class ChapterNotFoundError(SubjectServiceError):
    """Raised when a chapter is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class LessonNotFoundError(SubjectServiceError):
    """Raised when a lesson is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


class SubjectClassNotFoundError(SubjectServiceError):
    """Raised when the subject's class is not in the tenant."""

    kind = ErrorKind.NOT_FOUND


class InvalidSchoolError(SubjectServiceError):
    """Raised when the requested school is not in the tenant."""

    kind = ErrorKind.VALIDATION


class SubjectCodeExistsError(SubjectServiceError):
    """Raised when the code is already used in the class."""

    kind = ErrorKind.CONFLICT


class SubjectInUseError(SubjectServiceError):
    """Raised when deleting a subject with content without cascade."""

    kind = ErrorKind.PRECONDITION


def _lesson_dto(lesson: Lesson) -> dict[str, Any]:
    return {
        "id": lesson.id,
        "chapter_id": lesson.chapter_id,
        "name": lesson.name,
        "description": lesson.description,
        "content": lesson.content,
        "duration": lesson.duration,
        "lesson_type": lesson.lesson_type,
        "order_index": lesson.order_index,
    }


def _chapter_dto(chapter: Chapter, lessons: bool = False) -> dict[str, Any]:
    dto = {
        "id": chapter.id,
        "subject_id": chapter.subject_id,
        "name": chapter.name,
        "description": chapter.description,
        "order_index": chapter.order_index,
    }
    if lessons:
        dto["lessons"] = [_lesson_dto(lesson) for lesson in chapter.lessons]
    return dto


def _subject_dto(subject: Subject) -> dict[str, Any]:
    return {
        "id": subject.id,
        "name": subject.name,
        "code": subject.code,
        "description": subject.description,
        "class_id": subject.class_id,
        "school_id": subject.school_id,
    }


def _content_counts(subject: Subject) -> dict[str, int]:
    return {
        "chapters": len(subject.chapters),
        "lessons": sum(len(chapter.lessons) for chapter in subject.chapters),
        "timetables": len(subject.timetables),
    }


def _content_options() -> list[Any]:
    return [
        selectinload(Subject.chapters).selectinload(Chapter.lessons),
        selectinload(Subject.timetables),
    ]


class SubjectService(TenantScopedService):
    """Subject, chapter and lesson management."""

    # =========================================================================
    # Subjects
    # =========================================================================

    @service_operation("create subject")
    async def create_subject(self, request: SubjectCreateRequest) -> Ok[dict[str, Any]]:
        """Create a subject in a class.

        Raises:
            SubjectClassNotFoundError: If the class is not in the tenant.
            InvalidSchoolError: If a requested school is not in the tenant.
            SubjectCodeExistsError: If the code is used in the class.
        """
        aamar_id = self._tenant()
        school_id = request.school_id or self.context.school_id
        if not (request.name and request.code and request.class_id and school_id):
            raise SubjectServiceError("Required fields are missing")

        class_result = await self.db.execute(
            select(Class.id).where(Class.id == request.class_id, Class.aamar_id == aamar_id)
        )
        if class_result.scalar_one_or_none() is None:
            raise SubjectClassNotFoundError("Class not found")

        if request.school_id and request.school_id != self.context.school_id:
            school_result = await self.db.execute(
                select(School.id).where(School.id == request.school_id, School.aamar_id == aamar_id)
            )
            if school_result.scalar_one_or_none() is None:
                raise InvalidSchoolError("Invalid school")

        await self._check_code(request.class_id, request.code)

        subject = Subject(
            id=new_id(),
            aamar_id=aamar_id,
            school_id=school_id,
            class_id=request.class_id,
            name=request.name,
            code=request.code,
            description=request.description,
        )
        async with transaction(self.db):
            self.db.add(subject)

        logger.info("Created subject: %s (%s) in %s", subject.name, subject.id, aamar_id)
        self._invalidate(DashboardPaths.SUBJECTS)

        return Ok(_subject_dto(subject), message=f"Subject {subject.name} created successfully!")

    @service_operation("fetch subjects")
    async def list_subjects(self) -> list[dict[str, Any]]:
        """List subjects with chapter, lesson and timetable counts."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Subject)
            .where(Subject.aamar_id == aamar_id)
            .options(*_content_options(), selectinload(Subject.class_))
            .order_by(Subject.name)
        )

        subjects = []
        for subject in result.scalars().all():
            counts = _content_counts(subject)
            subjects.append({
                **_subject_dto(subject),
                "class_name": subject.class_.name if subject.class_ else None,
                "total_chapters": counts["chapters"],
                "total_lessons": counts["lessons"],
                "total_timetables": counts["timetables"],
            })
        return subjects

    @service_operation("fetch subject")
    async def get_subject(self, subject_id: str) -> dict[str, Any]:
        """Get a subject with its chapters and lessons.

        Raises:
            SubjectNotFoundError: If the subject is not in the tenant.
        """
        subject = await self._get_subject(subject_id, with_content=True)
        return {
            **_subject_dto(subject),
            "chapters": [_chapter_dto(chapter, lessons=True) for chapter in subject.chapters],
        }

    @service_operation("update subject")
    async def update_subject(self, subject_id: str, request: SubjectUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a subject. The code is re-checked when it changes.

        Raises:
            SubjectNotFoundError: If the subject is not in the tenant.
            SubjectCodeExistsError: If the new code is used in the class.
        """
        subject = await self._get_subject(subject_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        if "code" in changes and changes["code"] != subject.code:
            await self._check_code(subject.class_id, changes["code"], exclude_id=subject.id)

        async with transaction(self.db):
            for field, value in changes.items():
                setattr(subject, field, value)

        logger.info("Updated subject: %s in %s", subject.id, subject.aamar_id)
        self._invalidate(DashboardPaths.SUBJECTS)

        return Ok(_subject_dto(subject), message=f"Subject {subject.name} updated successfully!")

    @service_operation("delete subject")
    async def delete_subject(self, subject_id: str, cascade: bool = False) -> Ok[dict[str, int]]:
        """Delete a subject.

        A subject with chapters, lessons or timetables is only deleted with
        cascade, which removes lessons, chapters and timetables first, all
        in one transaction.

        Args:
            subject_id: Subject to delete.
            cascade: Delete attached content too.

        Returns:
            Counts of deleted lessons, chapters and timetables.

        Raises:
            SubjectNotFoundError: If the subject is not in the tenant.
            SubjectInUseError: If content exists and cascade is False.
        """
        subject = await self._get_subject(subject_id, with_content=True)
        counts = _content_counts(subject)

        if any(counts.values()) and not cascade:
            raise SubjectInUseError(
                "Cannot delete subject with chapters, lessons or timetables",
                f"{subject.name} has {counts['chapters']} chapters, {counts['lessons']} lessons "
                f"and {counts['timetables']} timetables",
            )

        chapter_ids = [chapter.id for chapter in subject.chapters]
        async with transaction(self.db):
            if chapter_ids:
                await self.db.execute(delete(Lesson).where(Lesson.chapter_id.in_(chapter_ids)))
            await self.db.execute(delete(Chapter).where(Chapter.subject_id == subject.id))
            await self.db.execute(delete(Timetable).where(Timetable.subject_id == subject.id))
            await self.db.execute(
                delete(Subject).where(Subject.id == subject.id, Subject.aamar_id == subject.aamar_id)
            )

        logger.info(
            "Deleted subject: %s in %s (%d chapters, %d lessons, %d timetables)",
            subject_id,
            subject.aamar_id,
            counts["chapters"],
            counts["lessons"],
            counts["timetables"],
        )
        self._invalidate(DashboardPaths.SUBJECTS, DashboardPaths.TIMETABLES)

        return Ok(
            {
                "lessons_deleted": counts["lessons"],
                "chapters_deleted": counts["chapters"],
                "timetables_deleted": counts["timetables"],
            },
            message=(
                f"Subject {subject.name} deleted successfully! ({counts['chapters']} chapters, "
                f"{counts['lessons']} lessons, {counts['timetables']} timetables)"
            ),
        )

    @service_operation("fetch subject statistics")
    async def get_subject_stats(self) -> dict[str, Any]:
        """Subject, chapter and lesson totals with class and school distribution."""
        aamar_id = self._tenant()

        total_subjects = (
            await self.db.execute(select(func.count(Subject.id)).where(Subject.aamar_id == aamar_id))
        ).scalar() or 0
        total_chapters = (
            await self.db.execute(select(func.count(Chapter.id)).where(Chapter.aamar_id == aamar_id))
        ).scalar() or 0
        total_lessons = (
            await self.db.execute(select(func.count(Lesson.id)).where(Lesson.aamar_id == aamar_id))
        ).scalar() or 0
        new_this_month = (
            await self.db.execute(
                select(func.count(Subject.id)).where(
                    Subject.aamar_id == aamar_id,
                    Subject.created_at >= start_of_month(),
                )
            )
        ).scalar() or 0
        by_class = (
            await self.db.execute(
                select(Subject.class_id, func.count(Subject.id))
                .where(Subject.aamar_id == aamar_id)
                .group_by(Subject.class_id)
            )
        ).all()
        by_school = (
            await self.db.execute(
                select(Subject.school_id, func.count(Subject.id))
                .where(Subject.aamar_id == aamar_id)
                .group_by(Subject.school_id)
            )
        ).all()

        return {
            "total_subjects": total_subjects,
            "total_chapters": total_chapters,
            "total_lessons": total_lessons,
            "new_this_month": new_this_month,
            "class_wise_count": [{"class_id": cid, "count": n} for cid, n in by_class],
            "school_wise_count": [{"school_id": sid, "count": n} for sid, n in by_school],
        }

    @service_operation("search subjects")
    async def search_subjects(self, query: str) -> list[dict[str, Any]]:
        """Search subjects by name, code or description."""
        aamar_id = self._tenant()
        pattern = f"%{query.strip()}%"
        result = await self.db.execute(
            select(Subject)
            .where(
                Subject.aamar_id == aamar_id,
                or_(
                    Subject.name.ilike(pattern),
                    Subject.code.ilike(pattern),
                    Subject.description.ilike(pattern),
                ),
            )
            .order_by(Subject.name)
        )
        return [_subject_dto(s) for s in result.scalars().all()]

    # =========================================================================
    # Chapters
    # =========================================================================

    @service_operation("create chapter")
    async def create_chapter(self, request: ChapterCreateRequest) -> Ok[dict[str, Any]]:
        """Create a chapter in a subject.

        Raises:
            SubjectNotFoundError: If the subject is not in the tenant.
        """
        if not request.subject_id or not request.name:
            raise SubjectServiceError("Required fields are missing")
        if request.order_index < 0:
            raise SubjectServiceError("Order index must be zero or greater")

        subject = await self._get_subject(request.subject_id)
        chapter = Chapter(
            id=new_id(),
            aamar_id=subject.aamar_id,
            subject_id=subject.id,
            name=request.name,
            description=request.description,
            order_index=request.order_index,
        )
        async with transaction(self.db):
            self.db.add(chapter)

        logger.info("Created chapter: %s in subject %s", chapter.id, subject.id)
        self._invalidate(DashboardPaths.SUBJECTS)

        return Ok(_chapter_dto(chapter), message=f"Chapter {chapter.name} created successfully!")

    @service_operation("fetch chapters")
    async def list_chapters(self, subject_id: str) -> list[dict[str, Any]]:
        """List a subject's chapters in order."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Chapter)
            .where(Chapter.subject_id == subject_id, Chapter.aamar_id == aamar_id)
            .options(selectinload(Chapter.lessons))
            .order_by(Chapter.order_index)
        )
        return [
            {**_chapter_dto(chapter), "total_lessons": len(chapter.lessons)}
            for chapter in result.scalars().all()
        ]

    @service_operation("update chapter")
    async def update_chapter(self, chapter_id: str, request: ChapterUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a chapter.

        Raises:
            ChapterNotFoundError: If the chapter is not in the tenant.
        """
        chapter = await self._get_chapter(chapter_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if changes.get("order_index", 0) < 0:
            raise SubjectServiceError("Order index must be zero or greater")

        async with transaction(self.db):
            for field, value in changes.items():
                setattr(chapter, field, value)

        self._invalidate(DashboardPaths.SUBJECTS)
        return Ok(_chapter_dto(chapter), message=f"Chapter {chapter.name} updated successfully!")

    @service_operation("delete chapter")
    async def delete_chapter(self, chapter_id: str) -> Ok[dict[str, int]]:
        """Delete a chapter and its lessons in one transaction.

        Raises:
            ChapterNotFoundError: If the chapter is not in the tenant.
        """
        chapter = await self._get_chapter(chapter_id, with_lessons=True)
        lessons_deleted = len(chapter.lessons)

        async with transaction(self.db):
            await self.db.execute(delete(Lesson).where(Lesson.chapter_id == chapter.id))
            await self.db.execute(delete(Chapter).where(Chapter.id == chapter.id))

        logger.info("Deleted chapter: %s (%d lessons)", chapter_id, lessons_deleted)
        self._invalidate(DashboardPaths.SUBJECTS)

        return Ok(
            {"lessons_deleted": lessons_deleted},
            message=f"Chapter {chapter.name} deleted successfully! ({lessons_deleted} lessons)",
        )

    # =========================================================================
    # Lessons
    # =========================================================================

    @service_operation("create lesson")
    async def create_lesson(self, request: LessonCreateRequest) -> Ok[dict[str, Any]]:
        """Create a lesson in a chapter.

        Raises:
            ChapterNotFoundError: If the chapter is not in the tenant.
        """
        if not request.chapter_id or not request.name:
            raise SubjectServiceError("Required fields are missing")

        chapter = await self._get_chapter(request.chapter_id)
        lesson = Lesson(
            id=new_id(),
            aamar_id=chapter.aamar_id,
            chapter_id=chapter.id,
            name=request.name,
            description=request.description,
            content=request.content,
            duration=request.duration,
            lesson_type=request.lesson_type,
            order_index=request.order_index or 0,
        )
        async with transaction(self.db):
            self.db.add(lesson)

        self._invalidate(DashboardPaths.SUBJECTS)
        return Ok(_lesson_dto(lesson), message=f"Lesson {lesson.name} created successfully!")

    @service_operation("fetch lessons")
    async def list_lessons(self, chapter_id: str) -> list[dict[str, Any]]:
        """List a chapter's lessons in order."""
        aamar_id = self._tenant()
        result = await self.db.execute(
            select(Lesson)
            .where(Lesson.chapter_id == chapter_id, Lesson.aamar_id == aamar_id)
            .order_by(Lesson.order_index)
        )
        return [_lesson_dto(lesson) for lesson in result.scalars().all()]

    @service_operation("update lesson")
    async def update_lesson(self, lesson_id: str, request: LessonUpdateRequest) -> Ok[dict[str, Any]]:
        """Update a lesson.

        Raises:
            LessonNotFoundError: If the lesson is not in the tenant.
        """
        lesson = await self._get_lesson(lesson_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)

        async with transaction(self.db):
            for field, value in changes.items():
                setattr(lesson, field, value)

        self._invalidate(DashboardPaths.SUBJECTS)
        return Ok(_lesson_dto(lesson), message=f"Lesson {lesson.name} updated successfully!")

    @service_operation("delete lesson")
    async def delete_lesson(self, lesson_id: str) -> Ok[None]:
        """Delete a lesson.

        Raises:
            LessonNotFoundError: If the lesson is not in the tenant.
        """
        lesson = await self._get_lesson(lesson_id)
        async with transaction(self.db):
            await self.db.delete(lesson)

        self._invalidate(DashboardPaths.SUBJECTS)
        return Ok(None, message=f"Lesson {lesson.name} deleted successfully!")

    # =========================================================================
    # Private Helpers
    # =========================================================================

    async def _get_subject(self, subject_id: str, with_content: bool = False) -> Subject:
        query = select(Subject).where(Subject.id == subject_id, Subject.aamar_id == self._tenant())
        if with_content:
            query = query.options(*_content_options())

        subject = (await self.db.execute(query)).scalar_one_or_none()
        if subject is None:
            raise SubjectNotFoundError("Subject not found")
        return subject

    async def _get_chapter(self, chapter_id: str, with_lessons: bool = False) -> Chapter:
        query = select(Chapter).where(Chapter.id == chapter_id, Chapter.aamar_id == self._tenant())
        if with_lessons:
            query = query.options(selectinload(Chapter.lessons))

        chapter = (await self.db.execute(query)).scalar_one_or_none()
        if chapter is None:
            raise ChapterNotFoundError("Chapter not found")
        return chapter

    async def _get_lesson(self, lesson_id: str) -> Lesson:
        result = await self.db.execute(
            select(Lesson).where(Lesson.id == lesson_id, Lesson.aamar_id == self._tenant())
        )
        lesson = result.scalar_one_or_none()
        if lesson is None:
            raise LessonNotFoundError("Lesson not found")
        return lesson

    async def _check_code(self, class_id: str, code: str, exclude_id: str | None = None) -> None:
        query = select(Subject.id).where(
            Subject.aamar_id == self._tenant(),
            Subject.class_id == class_id,
            Subject.code == code,
        )
        if exclude_id:
            query = query.where(Subject.id != exclude_id)

        if (await self.db.execute(query)).scalar_one_or_none() is not None:
            raise SubjectCodeExistsError("Subject code already exists in this class")
