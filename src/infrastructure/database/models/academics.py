# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic models: classes, sections, subjects, chapters, lessons, timetables
and class routines.

Sections are owned by classes. Subjects belong to a school and a class and
own chapters, which own lessons. A timetable row is one scheduled period of
a subject for a class on a weekday (0 = Sunday). A class routine is the
weekly grid of a class for one academic year.
"""

from datetime import time
from typing import TYPE_CHECKING

from sqlalchemy import (
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import (
    Base,
    TenantMixin,
    TimestampMixin,
    new_id,
)
from src.infrastructure.database.models.school import Branch, School, SchoolSchedule

if TYPE_CHECKING:
    from src.infrastructure.database.models.people import Student, Teacher


class Class(Base, TenantMixin, TimestampMixin):
    """A class (grade) in a branch for one academic year."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint(
            "aamar_id",
            "name",
            "branch_id",
            "academic_year",
            name="uq_classes_name_branch_year",
        ),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    branch_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("branches.id", ondelete="RESTRICT"), nullable=False
    )
    teacher_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("teachers.id", ondelete="SET NULL"), index=True
    )
    schedule_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("school_schedules.id", ondelete="SET NULL")
    )

    branch: Mapped[Branch] = relationship(back_populates="classes")
    teacher: Mapped["Teacher | None"] = relationship(back_populates="classes")
    schedule: Mapped[SchoolSchedule | None] = relationship()
    sections: Mapped[list["Section"]] = relationship(
        back_populates="class_", cascade="all, delete-orphan"
    )
    subjects: Mapped[list["Subject"]] = relationship(back_populates="class_")
    timetables: Mapped[list["Timetable"]] = relationship(back_populates="class_")


class Section(Base, TenantMixin, TimestampMixin):
    """A section of a class. Capacity is advisory."""

    __tablename__ = "sections"
    __table_args__ = (
        UniqueConstraint("aamar_id", "class_id", "name", name="uq_sections_class_name"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    class_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=40)

    class_: Mapped[Class] = relationship(back_populates="sections")
    students: Mapped[list["Student"]] = relationship(back_populates="section")


class Subject(Base, TenantMixin, TimestampMixin):
    """A subject taught in a class. Codes are unique per class."""

    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("aamar_id", "class_id", "code", name="uq_subjects_class_code"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False
    )
    class_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    school: Mapped[School] = relationship()
    class_: Mapped[Class] = relationship(back_populates="subjects")
    chapters: Mapped[list["Chapter"]] = relationship(
        back_populates="subject", order_by="Chapter.order_index"
    )
    timetables: Mapped[list["Timetable"]] = relationship(back_populates="subject")


class Chapter(Base, TenantMixin, TimestampMixin):
    """A chapter of a subject."""

    __tablename__ = "chapters"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    subject_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    subject: Mapped[Subject] = relationship(back_populates="chapters")
    lessons: Mapped[list["Lesson"]] = relationship(
        back_populates="chapter", order_by="Lesson.order_index"
    )


class Lesson(Base, TenantMixin, TimestampMixin):
    """A lesson inside a chapter."""

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    chapter_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("chapters.id", ondelete="RESTRICT"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    content: Mapped[str | None] = mapped_column(Text)
    duration: Mapped[int | None] = mapped_column(Integer)
    lesson_type: Mapped[str | None] = mapped_column(String(50))
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    chapter: Mapped[Chapter] = relationship(back_populates="lessons")


class Timetable(Base, TenantMixin, TimestampMixin):
    """One scheduled period.

    Intervals are half-open: [start_time, end_time). Rows for the same
    (class, day) never overlap.
    """

    __tablename__ = "timetables"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    class_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False
    )
    subject_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False
    )
    teacher_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("teachers.id", ondelete="SET NULL")
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    room: Mapped[str | None] = mapped_column(String(50))

    class_: Mapped[Class] = relationship(back_populates="timetables")
    subject: Mapped[Subject] = relationship(back_populates="timetables")
    teacher: Mapped["Teacher | None"] = relationship()


ROUTINE_CLASS_TYPES = ("regular", "special", "break")


class ClassRoutine(Base, TenantMixin, TimestampMixin):
    """Weekly routine grid of a class for one academic year.

    Saving a routine replaces all of its slots.
    """

    __tablename__ = "class_routines"
    __table_args__ = (
        UniqueConstraint(
            "aamar_id",
            "class_id",
            "academic_year",
            name="uq_class_routines_class_year",
        ),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    class_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    branch_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("branches.id", ondelete="RESTRICT"), nullable=False
    )
    school_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("schools.id", ondelete="RESTRICT")
    )
    created_by: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="SET NULL")
    )

    class_: Mapped[Class] = relationship()
    slots: Mapped[list["RoutineSlot"]] = relationship(
        back_populates="routine",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class RoutineSlot(Base, TenantMixin, TimestampMixin):
    """One cell of a routine grid: a weekday and a half-open time range."""

    __tablename__ = "routine_slots"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    routine_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("class_routines.id", ondelete="CASCADE"), nullable=False
    )
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    subject_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("subjects.id", ondelete="SET NULL")
    )
    teacher_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("teachers.id", ondelete="SET NULL")
    )
    class_type: Mapped[str] = mapped_column(String(10), nullable=False, default="regular")

    routine: Mapped[ClassRoutine] = relationship(back_populates="slots")
    subject: Mapped[Subject | None] = relationship()
    teacher: Mapped["Teacher | None"] = relationship()
