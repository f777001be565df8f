# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School structure models: schools, branches, schedules and settings."""

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import (
    Base,
    TenantMixin,
    TimestampMixin,
    new_id,
)

if TYPE_CHECKING:
    from src.infrastructure.database.models.academics import Class


class School(Base, TenantMixin, TimestampMixin):
    """A school owned by one tenant."""

    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(30))
    email: Mapped[str | None] = mapped_column(String(255))

    branches: Mapped[list["Branch"]] = relationship(back_populates="school")


class Branch(Base, TenantMixin, TimestampMixin):
    """A campus of a school."""

    __tablename__ = "branches"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(30))
    email: Mapped[str | None] = mapped_column(String(255))

    school: Mapped[School] = relationship(back_populates="branches")
    classes: Mapped[list["Class"]] = relationship(back_populates="branch")


class SchoolSchedule(Base, TenantMixin, TimestampMixin):
    """Daily bell schedule template assigned to classes.

    Times are "HH:MM" strings; durations are minutes.
    """

    __tablename__ = "school_schedules"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    period_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=45)
    include_break: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    break_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    break_after_period: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    include_lunch: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    lunch_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    lunch_after_period: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    weekly_holidays: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)


class SchoolSetting(Base, TenantMixin, TimestampMixin):
    """Per-school settings: weekly schedule layout and subject duration."""

    __tablename__ = "school_settings"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    weekly_schedule: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    subject_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=45)
