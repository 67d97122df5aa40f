# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for integration tests against a SQLite database file.

Every test gets a fresh database in its own temporary directory. A file
is used instead of :memory: so that the notification dispatcher can
write through a connection of its own.
"""

from dataclasses import dataclass

import pytest_asyncio

from src.infrastructure.database.connection import create_engine_from_url, create_sessionmaker
from src.infrastructure.database.models import Base, Class, Enrollment, User
from src.infrastructure.notifications import NotificationDispatcher


@dataclass
class Seed:
    """Ids of the rows every integration test starts with."""

    teacher_id: int
    other_teacher_id: int
    student_ids: list[int]
    outsider_id: int
    class_id: int


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Create an engine on a fresh database with the full schema."""
    engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'classhub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Session factory bound to the test database."""
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def dispatcher(session_factory):
    """Dispatcher writing notifications through its own sessions."""
    return NotificationDispatcher(session_factory)


@pytest_asyncio.fixture
async def seed(session_factory) -> Seed:
    """Two teachers, three enrolled students, one outsider and an active class."""
    async with session_factory() as db:
        teacher = User(
            username="mfrost", email="mfrost@school.test", role="teacher",
            first_name="Mary", last_name="Frost",
        )
        other_teacher = User(
            username="jreed", email="jreed@school.test", role="teacher",
            first_name="John", last_name="Reed",
        )
        students = [
            User(
                username=f"{first.lower()}{last[0].lower()}",
                email=f"{first.lower()}@school.test",
                role="student",
                first_name=first,
                last_name=last,
            )
            for first, last in (("Alan", "Turing"), ("Ada", "Lovelace"), ("Grace", "Hopper"))
        ]
        outsider = User(
            username="kjohnson", email="katherine@school.test", role="student",
            first_name="Katherine", last_name="Johnson",
        )
        db.add_all([teacher, other_teacher, *students, outsider])
        await db.flush()

        cls = Class(
            title="Physical Geography",
            description="Landforms and climate",
            duration=40,
            difficulty="Intermediate",
            objectives=["Read topographic maps"],
            teacher_id=teacher.id,
            is_active=True,
        )
        db.add(cls)
        await db.flush()

        db.add_all(Enrollment(student_id=s.id, class_id=cls.id) for s in students)
        await db.commit()

        return Seed(
            teacher_id=teacher.id,
            other_teacher_id=other_teacher.id,
            student_ids=[s.id for s in students],
            outsider_id=outsider.id,
            class_id=cls.id,
        )
