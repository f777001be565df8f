# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests against a real SQLite database.

Each step opens its own session, the way each HTTP request does.
"""

from datetime import time
from typing import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.config.settings import JWTSettings
from src.core.result import ErrorKind
from src.domains.admission.service import AdmissionService
from src.domains.auth.context import TenantContext, TenantContextResolver
from src.domains.auth.jwt import JWTManager
from src.domains.auth.service import AuthService
from src.domains.class_.service import ClassService
from src.domains.parent.service import ParentService
from src.domains.routine.service import RoutineService
from src.domains.school.service import SchoolRegistrationService
from src.domains.section.service import SectionService
from src.domains.student.service import StudentService
from src.infrastructure.database.models import Base, Parent, RoutineSlot, SchoolSchedule, User, new_id
from src.models.admission import AdmissionRequest
from src.models.class_ import ClassCreateRequest
from src.models.parent import ParentCreateRequest
from src.models.routine import RoutineSlotInput, RoutineUpsertRequest
from src.models.school import SchoolRegistrationRequest
from src.models.section import SectionCreateRequest
from src.models.student import StudentCreateRequest

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def sessionmaker(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'school.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, expire_on_commit=False)

    await engine.dispose()


def _registration(school: str, email: str) -> SchoolRegistrationRequest:
    return SchoolRegistrationRequest(
        school_name=school,
        admin_first_name="Head",
        admin_last_name="Master",
        admin_email=email,
        admin_password="secret123",
    )


async def _register(sessionmaker, school: str, email: str) -> TenantContext:
    async with sessionmaker() as db:
        registered = await SchoolRegistrationService(db).register_school_and_admin(
            _registration(school, email)
        )
    assert registered.success
    async with sessionmaker() as db:
        return await TenantContextResolver(db).resolve(registered.data["user_id"])


async def _add_schedule(sessionmaker, context: TenantContext) -> str:
    schedule_id = new_id()
    async with sessionmaker() as db:
        db.add(SchoolSchedule(
            id=schedule_id,
            aamar_id=context.aamar_id,
            school_id=context.school_id,
            name="Regular",
            start_time="08:00",
            end_time="14:00",
        ))
        await db.commit()
    return schedule_id


@pytest.mark.asyncio
async def test_registered_admin_can_log_in(sessionmaker) -> None:
    context = await _register(sessionmaker, "Green Valley School", "head@greenvalley.edu")
    jwt_manager = JWTManager(JWTSettings(secret_key="integration-secret"))

    async with sessionmaker() as db:
        login = await AuthService(db, jwt_manager).authenticate("HEAD@greenvalley.edu", "secret123")
        rejected = await AuthService(db, jwt_manager).authenticate("head@greenvalley.edu", "wrong")

    assert context.role == "ADMIN"
    assert login.success
    assert login.data["aamar_id"] == context.aamar_id
    assert jwt_manager.decode_token(login.data["access_token"]).aamar_id == context.aamar_id
    assert rejected.kind == ErrorKind.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_duplicate_admin_email(sessionmaker) -> None:
    await _register(sessionmaker, "Green Valley School", "head@greenvalley.edu")

    async with sessionmaker() as db:
        result = await SchoolRegistrationService(db).register_school_and_admin(
            _registration("Another School", "Head@GreenValley.edu")
        )

    assert result.kind == ErrorKind.CONFLICT


@pytest.mark.asyncio
async def test_class_and_section_workflow_is_tenant_scoped(sessionmaker) -> None:
    context = await _register(sessionmaker, "Green Valley School", "head@greenvalley.edu")
    other = await _register(sessionmaker, "Riverside School", "head@riverside.edu")
    schedule_id = await _add_schedule(sessionmaker, context)

    async with sessionmaker() as db:
        created = await ClassService(db, context).create_class(ClassCreateRequest(
            name="Class 5",
            branch_id=context.branch_id,
            academic_year="2024",
            schedule_id=schedule_id,
        ))
    assert created.success

    async with sessionmaker() as db:
        duplicate = await ClassService(db, context).create_class(ClassCreateRequest(
            name="Class 5",
            branch_id=context.branch_id,
            academic_year="2024",
            schedule_id=schedule_id,
        ))
    assert duplicate.kind == ErrorKind.CONFLICT

    async with sessionmaker() as db:
        section = await SectionService(db, context).create_section(
            SectionCreateRequest(name="A", class_id=created.data["id"])
        )
    assert section.data["display_name"] == "Class 5 Section A"
    assert section.data["capacity"] == 40

    async with sessionmaker() as db:
        mine = await ClassService(db, context).list_classes()
        theirs = await ClassService(db, other).list_classes()
        foreign = await SectionService(db, other).create_section(
            SectionCreateRequest(name="B", class_id=created.data["id"])
        )

    assert [c["name"] for c in mine.data] == ["Class 5"]
    assert mine.data[0]["sections"][0]["display_name"] == "Class 5 Section A"
    assert mine.data[0]["teacher"] is None
    assert theirs.data == []
    assert foreign.kind == ErrorKind.NOT_FOUND


async def _add_class_and_section(sessionmaker, context: TenantContext) -> tuple[str, str]:
    schedule_id = await _add_schedule(sessionmaker, context)
    async with sessionmaker() as db:
        created = await ClassService(db, context).create_class(ClassCreateRequest(
            name="Class 5",
            branch_id=context.branch_id,
            academic_year="2024",
            schedule_id=schedule_id,
        ))
    async with sessionmaker() as db:
        section = await SectionService(db, context).create_section(
            SectionCreateRequest(name="A", class_id=created.data["id"])
        )
    return created.data["id"], section.data["id"]


@pytest.mark.asyncio
async def test_student_cannot_link_parent_of_another_school(sessionmaker) -> None:
    context = await _register(sessionmaker, "Green Valley School", "head@greenvalley.edu")
    other = await _register(sessionmaker, "Riverside School", "head@riverside.edu")
    _, section_id = await _add_class_and_section(sessionmaker, context)

    async with sessionmaker() as db:
        parent = await ParentService(db, other).create_parent(ParentCreateRequest(
            first_name="Secret",
            last_name="Parent",
            email="secret@riverside.edu",
            phone="555-0100",
        ))
    assert parent.success

    async with sessionmaker() as db:
        linked = await StudentService(db, context).create_student(StudentCreateRequest(
            first_name="Rahim",
            last_name="Uddin",
            email="rahim@greenvalley.edu",
            roll_number="2024001",
            section_id=section_id,
            parent_id=parent.data["id"],
        ))
    async with sessionmaker() as db:
        students = await StudentService(db, context).list_students()

    assert linked.kind == ErrorKind.VALIDATION
    assert linked.error == "Invalid parent"
    assert students.data == []


@pytest.mark.asyncio
async def test_failed_admission_leaves_no_parent_behind(sessionmaker) -> None:
    context = await _register(sessionmaker, "Green Valley School", "head@greenvalley.edu")
    await _register(sessionmaker, "Riverside School", "head@riverside.edu")
    _, section_id = await _add_class_and_section(sessionmaker, context)

    # The student email belongs to another school's admin, so the student
    # insert fails after the parent rows were flushed.
    async with sessionmaker() as db:
        result = await AdmissionService(db, context).create_student_with_parent(AdmissionRequest(
            student_first_name="Rahim",
            student_last_name="Uddin",
            student_email="head@riverside.edu",
            date_of_birth="2015-03-14",
            gender="MALE",
            roll_number="2024001",
            section_id=section_id,
            admission_date="2024-01-10",
            parent_first_name="Karim",
            parent_last_name="Uddin",
            parent_email="karim@greenvalley.edu",
            relation="Father",
        ))

    async with sessionmaker() as db:
        parents = (await db.execute(select(func.count(Parent.id)))).scalar()
        parent_users = (
            await db.execute(select(func.count(User.id)).where(User.email == "karim@greenvalley.edu"))
        ).scalar()

    assert result.kind == ErrorKind.CONFLICT
    assert result.error == "Email already exists"
    assert parents == 0
    assert parent_users == 0


@pytest.mark.asyncio
async def test_saving_routine_replaces_slots(sessionmaker) -> None:
    context = await _register(sessionmaker, "Green Valley School", "head@greenvalley.edu")
    other = await _register(sessionmaker, "Riverside School", "head@riverside.edu")
    class_id, _ = await _add_class_and_section(sessionmaker, context)

    def _routine(*slots: RoutineSlotInput) -> RoutineUpsertRequest:
        return RoutineUpsertRequest(
            class_id=class_id,
            academic_year="2024",
            branch_id=context.branch_id,
            slots=list(slots),
        )

    async with sessionmaker() as db:
        first = await RoutineService(db, context).upsert_class_routine(_routine(
            RoutineSlotInput(day="Sunday", start_time=time(9, 0), end_time=time(10, 0)),
            RoutineSlotInput(day="Monday", start_time=time(9, 0), end_time=time(10, 0)),
        ))
    async with sessionmaker() as db:
        second = await RoutineService(db, context).upsert_class_routine(_routine(
            RoutineSlotInput(day="Tuesday", start_time=time(11, 0), end_time=time(11, 30), class_type="break"),
        ))
    async with sessionmaker() as db:
        fetched = await RoutineService(db, context).get_class_routine(class_id)
        slot_rows = (await db.execute(select(func.count(RoutineSlot.id)))).scalar()
        foreign = await RoutineService(db, other).upsert_class_routine(
            RoutineUpsertRequest(class_id=class_id, academic_year="2024", branch_id=other.branch_id)
        )

    assert first.message == "Class routine created successfully"
    assert second.message == "Class routine updated successfully"
    assert second.data["id"] == first.data["id"]
    assert [(s["day"], s["class_type"]) for s in fetched.data["slots"]] == [("Tuesday", "break")]
    assert fetched.data["class_name"] == "Class 5"
    assert slot_rows == 1
    assert foreign.error == "Invalid class"
