# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject, chapter and lesson API endpoints.

Subjects:
- POST / - Create a subject
- GET / - List subjects
- GET /stats - Subject statistics
- GET /search - Search subjects
- GET /{subject_id} - Subject with chapters and lessons
- PUT /{subject_id} - Update subject
- DELETE /{subject_id}?cascade=true - Delete subject (content only with cascade)

Chapters and lessons:
- POST /chapters, GET /{subject_id}/chapters, PUT/DELETE /chapters/{chapter_id}
- POST /lessons, GET /chapters/{chapter_id}/lessons, PUT/DELETE /lessons/{lesson_id}
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import Context, DbSession, Invalidator, envelope_response
from src.domains.subject.service import SubjectService
from src.models.subject import (
    ChapterCreateRequest,
    ChapterUpdateRequest,
    LessonCreateRequest,
    LessonUpdateRequest,
    SubjectCreateRequest,
    SubjectUpdateRequest,
)

router = APIRouter()


# =========================================================================
# Subjects
# =========================================================================


@router.post("")
async def create_subject(
    request: SubjectCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.create_subject(request), created=True)


@router.get("")
async def list_subjects(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SubjectService(db, context).list_subjects())


@router.get("/stats")
async def subject_stats(db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SubjectService(db, context).get_subject_stats())


@router.get("/search")
async def search_subjects(
    db: DbSession,
    context: Context,
    q: str = Query(..., min_length=1, description="Search text"),
) -> JSONResponse:
    return envelope_response(await SubjectService(db, context).search_subjects(q))


# =========================================================================
# Chapters
# =========================================================================


@router.post("/chapters")
async def create_chapter(
    request: ChapterCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.create_chapter(request), created=True)


@router.put("/chapters/{chapter_id}")
async def update_chapter(
    chapter_id: str,
    request: ChapterUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.update_chapter(chapter_id, request))


@router.delete("/chapters/{chapter_id}")
async def delete_chapter(
    chapter_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.delete_chapter(chapter_id))


@router.get("/chapters/{chapter_id}/lessons")
async def list_lessons(chapter_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SubjectService(db, context).list_lessons(chapter_id))


# =========================================================================
# Lessons
# =========================================================================


@router.post("/lessons")
async def create_lesson(
    request: LessonCreateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.create_lesson(request), created=True)


@router.put("/lessons/{lesson_id}")
async def update_lesson(
    lesson_id: str,
    request: LessonUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.update_lesson(lesson_id, request))


@router.delete("/lessons/{lesson_id}")
async def delete_lesson(
    lesson_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.delete_lesson(lesson_id))


# =========================================================================
# Single subject
# =========================================================================


@router.get("/{subject_id}")
async def get_subject(subject_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SubjectService(db, context).get_subject(subject_id))


@router.get("/{subject_id}/chapters")
async def list_chapters(subject_id: str, db: DbSession, context: Context) -> JSONResponse:
    return envelope_response(await SubjectService(db, context).list_chapters(subject_id))


@router.put("/{subject_id}")
async def update_subject(
    subject_id: str,
    request: SubjectUpdateRequest,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.update_subject(subject_id, request))


@router.delete("/{subject_id}")
async def delete_subject(
    subject_id: str,
    db: DbSession,
    context: Context,
    invalidator: Invalidator,
    cascade: bool = Query(False, description="Also delete chapters, lessons and timetables"),
) -> JSONResponse:
    service = SubjectService(db, context, invalidator)
    return envelope_response(await service.delete_subject(subject_id, cascade=cascade))
