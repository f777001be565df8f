# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial school management schema.

Every table except users is partitioned by the aamar_id tenant column;
users.email is unique across tenants.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _fk(name: str, target: str, ondelete: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def _tenant() -> sa.Column:
    return sa.Column("aamar_id", sa.String(40), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create school management tables."""
    # =========================================================================
    # SCHOOL STRUCTURE
    # =========================================================================

    op.create_table(
        "schools",
        _id(),
        _tenant(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_schools_aamar_id", "schools", ["aamar_id"])

    op.create_table(
        "branches",
        _id(),
        _tenant(),
        _fk("school_id", "schools.id", "CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_branches_aamar_id", "branches", ["aamar_id"])

    op.create_table(
        "school_schedules",
        _id(),
        _tenant(),
        _fk("school_id", "schools.id", "CASCADE"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("period_duration", sa.Integer, nullable=False, server_default="45"),
        sa.Column("include_break", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("break_duration", sa.Integer, nullable=False, server_default="15"),
        sa.Column("break_after_period", sa.Integer, nullable=False, server_default="3"),
        sa.Column("include_lunch", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("lunch_duration", sa.Integer, nullable=False, server_default="30"),
        sa.Column("lunch_after_period", sa.Integer, nullable=False, server_default="5"),
        sa.Column("weekly_holidays", postgresql.JSONB, nullable=False, server_default="[]"),
        *_timestamps(),
    )
    op.create_index("ix_school_schedules_aamar_id", "school_schedules", ["aamar_id"])

    op.create_table(
        "school_settings",
        _id(),
        _tenant(),
        _fk("school_id", "schools.id", "CASCADE"),
        sa.Column("weekly_schedule", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("subject_duration", sa.Integer, nullable=False, server_default="45"),
        *_timestamps(),
        sa.UniqueConstraint("school_id", name="uq_school_settings_school_id"),
    )
    op.create_index("ix_school_settings_aamar_id", "school_settings", ["aamar_id"])

    # =========================================================================
    # PEOPLE
    # =========================================================================

    op.create_table(
        "users",
        _id(),
        _tenant(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _fk("school_id", "schools.id", "SET NULL", nullable=True),
        _fk("branch_id", "branches.id", "SET NULL", nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_aamar_id", "users", ["aamar_id"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_branch_id", "users", ["branch_id"])

    op.create_table(
        "profiles",
        _id(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("gender", sa.String(10), nullable=True),
        sa.Column("blood_group", sa.String(5), nullable=True),
        sa.Column("nationality", sa.String(100), nullable=True),
        sa.Column("religion", sa.String(100), nullable=True),
        sa.Column("birth_certificate_no", sa.String(50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_profiles_user_id"),
    )

    op.create_table(
        "teachers",
        _id(),
        _tenant(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("qualification", sa.String(200), nullable=True),
        sa.Column("experience", sa.Integer, nullable=True),
        sa.Column("specialization", sa.String(200), nullable=True),
        sa.Column("subjects", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("joining_date", sa.Date, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_teachers_user_id"),
    )
    op.create_index("ix_teachers_aamar_id", "teachers", ["aamar_id"])

    op.create_table(
        "parents",
        _id(),
        _tenant(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("relation", sa.String(50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_parents_user_id"),
    )
    op.create_index("ix_parents_aamar_id", "parents", ["aamar_id"])

    op.create_table(
        "staff",
        _id(),
        _tenant(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("designation", sa.String(100), nullable=False),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("joining_date", sa.Date, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_staff_user_id"),
    )
    op.create_index("ix_staff_aamar_id", "staff", ["aamar_id"])

    # =========================================================================
    # ACADEMICS
    # =========================================================================

    op.create_table(
        "classes",
        _id(),
        _tenant(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("academic_year", sa.String(20), nullable=False),
        _fk("branch_id", "branches.id", "RESTRICT"),
        _fk("teacher_id", "teachers.id", "SET NULL", nullable=True),
        _fk("schedule_id", "school_schedules.id", "SET NULL", nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "aamar_id",
            "name",
            "branch_id",
            "academic_year",
            name="uq_classes_name_branch_year",
        ),
    )
    op.create_index("ix_classes_aamar_id", "classes", ["aamar_id"])
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])

    op.create_table(
        "sections",
        _id(),
        _tenant(),
        _fk("class_id", "classes.id", "CASCADE"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="40"),
        *_timestamps(),
        sa.UniqueConstraint("aamar_id", "class_id", "name", name="uq_sections_class_name"),
    )
    op.create_index("ix_sections_aamar_id", "sections", ["aamar_id"])

    op.create_table(
        "subjects",
        _id(),
        _tenant(),
        _fk("school_id", "schools.id", "CASCADE"),
        _fk("class_id", "classes.id", "RESTRICT"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("aamar_id", "class_id", "code", name="uq_subjects_class_code"),
    )
    op.create_index("ix_subjects_aamar_id", "subjects", ["aamar_id"])

    op.create_table(
        "chapters",
        _id(),
        _tenant(),
        _fk("subject_id", "subjects.id", "RESTRICT"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_chapters_aamar_id", "chapters", ["aamar_id"])

    op.create_table(
        "lessons",
        _id(),
        _tenant(),
        _fk("chapter_id", "chapters.id", "RESTRICT"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("duration", sa.Integer, nullable=True),
        sa.Column("lesson_type", sa.String(50), nullable=True),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_lessons_aamar_id", "lessons", ["aamar_id"])

    op.create_table(
        "timetables",
        _id(),
        _tenant(),
        _fk("class_id", "classes.id", "RESTRICT"),
        _fk("subject_id", "subjects.id", "RESTRICT"),
        _fk("teacher_id", "teachers.id", "SET NULL", nullable=True),
        sa.Column("day_of_week", sa.Integer, nullable=False),
        sa.Column("start_time", sa.Time, nullable=False),
        sa.Column("end_time", sa.Time, nullable=False),
        sa.Column("room", sa.String(50), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_timetables_day_of_week"),
        sa.CheckConstraint("start_time < end_time", name="ck_timetables_interval"),
    )
    op.create_index("ix_timetables_aamar_id", "timetables", ["aamar_id"])
    op.create_index("ix_timetables_class_day", "timetables", ["class_id", "day_of_week"])

    op.create_table(
        "students",
        _id(),
        _tenant(),
        _fk("user_id", "users.id", "CASCADE"),
        sa.Column("roll_number", sa.String(20), nullable=False),
        sa.Column("admission_date", sa.Date, nullable=True),
        _fk("section_id", "sections.id", "RESTRICT", nullable=True),
        _fk("class_id", "classes.id", "RESTRICT", nullable=True),
        _fk("parent_id", "parents.id", "SET NULL", nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_students_user_id"),
        sa.UniqueConstraint(
            "aamar_id",
            "section_id",
            "roll_number",
            name="uq_students_section_roll_number",
        ),
    )
    op.create_index("ix_students_aamar_id", "students", ["aamar_id"])
    op.create_index("ix_students_section_id", "students", ["section_id"])
    op.create_index("ix_students_class_id", "students", ["class_id"])

    # =========================================================================
    # RECORDS
    # =========================================================================

    op.create_table(
        "attendance",
        _id(),
        _tenant(),
        _fk("student_id", "students.id", "CASCADE"),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )
    op.create_index("ix_attendance_aamar_id", "attendance", ["aamar_id"])

    op.create_table(
        "staff_attendance",
        _id(),
        _tenant(),
        _fk("staff_id", "staff.id", "CASCADE"),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_staff_attendance_aamar_id", "staff_attendance", ["aamar_id"])

    op.create_table(
        "fees",
        _id(),
        _tenant(),
        _fk("student_id", "students.id", "CASCADE"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="PENDING"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_fees_aamar_id", "fees", ["aamar_id"])
    op.create_index("ix_fees_status", "fees", ["status"])


def downgrade() -> None:
    """Drop all school management tables."""
    # Drop in reverse order to handle foreign keys
    op.drop_table("fees")
    op.drop_table("staff_attendance")
    op.drop_table("attendance")
    op.drop_table("students")
    op.drop_table("timetables")
    op.drop_table("lessons")
    op.drop_table("chapters")
    op.drop_table("subjects")
    op.drop_table("sections")
    op.drop_table("classes")
    op.drop_table("staff")
    op.drop_table("parents")
    op.drop_table("teachers")
    op.drop_table("profiles")
    op.drop_table("users")
    op.drop_table("school_settings")
    op.drop_table("school_schedules")
    op.drop_table("branches")
    op.drop_table("schools")
