# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject, chapter and lesson request models."""

from pydantic import BaseModel, Field


class SubjectCreateRequest(BaseModel):
    """Create a subject for a class."""

    name: str | None = Field(None, max_length=200, description="Subject name")
    code: str | None = Field(None, max_length=50, description="Code, unique per class")
    description: str | None = Field(None, description="Description")
    class_id: str | None = Field(None, description="Owning class")
    school_id: str | None = Field(None, description="Owning school, defaults to the acting user's")


class SubjectUpdateRequest(BaseModel):
    """Partial subject update."""

    name: str | None = Field(None, max_length=200, description="Subject name")
    code: str | None = Field(None, max_length=50, description="Code, unique per class")
    description: str | None = Field(None, description="Description")


class ChapterCreateRequest(BaseModel):
    """Create a chapter in a subject."""

    subject_id: str | None = Field(None, description="Owning subject")
    name: str | None = Field(None, max_length=200, description="Chapter name")
    description: str | None = Field(None, description="Description")
    order_index: int = Field(0, description="Position within the subject")


class ChapterUpdateRequest(BaseModel):
    """Partial chapter update."""

    name: str | None = Field(None, max_length=200, description="Chapter name")
    description: str | None = Field(None, description="Description")
    order_index: int | None = Field(None, description="Position within the subject")


class LessonCreateRequest(BaseModel):
    """Create a lesson in a chapter."""

    chapter_id: str | None = Field(None, description="Owning chapter")
    name: str | None = Field(None, max_length=200, description="Lesson name")
    description: str | None = Field(None, description="Description")
    content: str | None = Field(None, description="Lesson content")
    duration: int | None = Field(None, ge=0, description="Duration in minutes")
    lesson_type: str | None = Field(None, max_length=50, description="Lesson type")
    order_index: int | None = Field(None, ge=0, description="Position within the chapter")


class LessonUpdateRequest(BaseModel):
    """Partial lesson update."""

    name: str | None = Field(None, max_length=200, description="Lesson name")
    description: str | None = Field(None, description="Description")
    content: str | None = Field(None, description="Lesson content")
    duration: int | None = Field(None, ge=0, description="Duration in minutes")
    lesson_type: str | None = Field(None, max_length=50, description="Lesson type")
    order_index: int | None = Field(None, ge=0, description="Position within the chapter")
