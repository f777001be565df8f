# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""People models: the shared identity row and its role records.

Every person (admin, teacher, student, parent, staff) is a ``User`` with an
optional ``Profile``. Role-specific data lives in a 1:1 role row that points
back at the user. ``users.email`` is unique across all tenants.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    ForeignKey,
    Integer,
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
from src.infrastructure.database.models.school import Branch, School

if TYPE_CHECKING:
    from src.infrastructure.database.models.academics import Class, Section
    from src.infrastructure.database.models.records import (
        Attendance,
        Fee,
        StaffAttendance,
    )


class UserRole:
    """Role codes stored on users.role."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"
    STAFF = "STAFF"


GENDERS = ("MALE", "FEMALE", "OTHER")


class User(Base, TenantMixin, TimestampMixin):
    """Identity row shared by every person-role."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    school_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("schools.id", ondelete="SET NULL")
    )
    branch_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("branches.id", ondelete="SET NULL"), index=True
    )

    profile: Mapped["Profile | None"] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    school: Mapped[School | None] = relationship()
    branch: Mapped[Branch | None] = relationship()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Profile(Base, TimestampMixin):
    """Optional personal details for a user."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    phone: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(Text)
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(10))
    blood_group: Mapped[str | None] = mapped_column(String(5))
    nationality: Mapped[str | None] = mapped_column(String(100))
    religion: Mapped[str | None] = mapped_column(String(100))
    birth_certificate_no: Mapped[str | None] = mapped_column(String(50))

    user: Mapped[User] = relationship(back_populates="profile")


class Teacher(Base, TenantMixin, TimestampMixin):
    """Teacher role record."""

    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    qualification: Mapped[str | None] = mapped_column(String(200))
    experience: Mapped[int | None] = mapped_column(Integer)
    specialization: Mapped[str | None] = mapped_column(String(200))
    # Denormalized list of subject names
    subjects: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    joining_date: Mapped[date | None] = mapped_column(Date)

    user: Mapped[User] = relationship()
    classes: Mapped[list["Class"]] = relationship(back_populates="teacher")


class Parent(Base, TenantMixin, TimestampMixin):
    """Parent/guardian role record."""

    __tablename__ = "parents"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    relation: Mapped[str | None] = mapped_column(String(50))

    user: Mapped[User] = relationship()
    students: Mapped[list["Student"]] = relationship(back_populates="parent")


class Student(Base, TenantMixin, TimestampMixin):
    """Student role record.

    Roll numbers are unique per (tenant, section).
    """

    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint(
            "aamar_id",
            "section_id",
            "roll_number",
            name="uq_students_section_roll_number",
        ),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    roll_number: Mapped[str] = mapped_column(String(20), nullable=False)
    admission_date: Mapped[date | None] = mapped_column(Date)
    section_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("sections.id", ondelete="RESTRICT"), index=True
    )
    class_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("classes.id", ondelete="RESTRICT"), index=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("parents.id", ondelete="SET NULL")
    )

    user: Mapped[User] = relationship()
    section: Mapped["Section | None"] = relationship(back_populates="students")
    class_: Mapped["Class | None"] = relationship()
    parent: Mapped[Parent | None] = relationship(back_populates="students")
    fees: Mapped[list["Fee"]] = relationship(
        back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    attendance: Mapped[list["Attendance"]] = relationship(
        back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )


class Staff(Base, TenantMixin, TimestampMixin):
    """Non-teaching staff role record."""

    __tablename__ = "staff"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    designation: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100))
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    joining_date: Mapped[date | None] = mapped_column(Date)

    user: Mapped[User] = relationship()
    attendance: Mapped[list["StaffAttendance"]] = relationship(back_populates="staff")
