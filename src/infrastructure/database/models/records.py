# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Day-to-day records: student attendance, staff attendance and fees."""

import datetime as dt
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
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

if TYPE_CHECKING:
    from src.infrastructure.database.models.people import Staff, Student


ATTENDANCE_STATUSES = ("PRESENT", "ABSENT", "LATE", "EXCUSED")
FEE_STATUSES = ("PENDING", "PAID", "OVERDUE")


class Attendance(Base, TenantMixin, TimestampMixin):
    """Student attendance for one day. One row per (student, date)."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text)

    student: Mapped["Student"] = relationship(back_populates="attendance")


class StaffAttendance(Base, TenantMixin, TimestampMixin):
    """Staff attendance for one day."""

    __tablename__ = "staff_attendance"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    staff_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("staff.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text)

    staff: Mapped["Staff"] = relationship(back_populates="attendance")


class Fee(Base, TenantMixin, TimestampMixin):
    """A fee charged to a student."""

    __tablename__ = "fees"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="PENDING")
    paid_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))

    student: Mapped["Student"] = relationship(back_populates="fees")
