# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class routine grids.

One routine per (tenant, class, academic year); its slots are replaced as
a whole whenever the routine is saved.

Revision ID: 002_class_routines
Revises: 001_initial
Create Date: 2025-02-10
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "002_class_routines"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid(name: str, target: str, ondelete: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def _common() -> list[sa.Column]:
    return [
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("aamar_id", sa.String(40), nullable=False),
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
    """Create class_routines and routine_slots."""
    op.create_table(
        "class_routines",
        *_common(),
        _uuid("class_id", "classes.id", "CASCADE"),
        sa.Column("academic_year", sa.String(20), nullable=False),
        _uuid("branch_id", "branches.id", "RESTRICT"),
        _uuid("school_id", "schools.id", "RESTRICT", nullable=True),
        _uuid("created_by", "users.id", "SET NULL", nullable=True),
        sa.UniqueConstraint(
            "aamar_id",
            "class_id",
            "academic_year",
            name="uq_class_routines_class_year",
        ),
    )
    op.create_index("ix_class_routines_aamar_id", "class_routines", ["aamar_id"])

    op.create_table(
        "routine_slots",
        *_common(),
        _uuid("routine_id", "class_routines.id", "CASCADE"),
        sa.Column("day", sa.String(10), nullable=False),
        sa.Column("start_time", sa.Time, nullable=False),
        sa.Column("end_time", sa.Time, nullable=False),
        _uuid("subject_id", "subjects.id", "SET NULL", nullable=True),
        _uuid("teacher_id", "teachers.id", "SET NULL", nullable=True),
        sa.Column("class_type", sa.String(10), nullable=False, server_default="regular"),
        sa.CheckConstraint("start_time < end_time", name="ck_routine_slots_interval"),
        sa.CheckConstraint(
            "class_type IN ('regular', 'special', 'break')",
            name="ck_routine_slots_class_type",
        ),
    )
    op.create_index("ix_routine_slots_aamar_id", "routine_slots", ["aamar_id"])
    op.create_index("ix_routine_slots_routine_id", "routine_slots", ["routine_id"])


def downgrade() -> None:
    """Drop class routine tables."""
    op.drop_table("routine_slots")
    op.drop_table("class_routines")
