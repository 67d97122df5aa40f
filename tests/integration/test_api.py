# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end API tests through the FastAPI application.

The app runs its real lifespan against a SQLite file; users are seeded
directly since they are provisioned outside this service.
"""

import asyncio
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from src.api.app import create_app
from src.core.config import clear_settings_cache
from src.domains.auth import Identity, StaticSessionResolver
from src.infrastructure.database.connection import create_engine_from_url, create_sessionmaker
from src.infrastructure.database.models import Base, User
from src.models.enums import UserRole

pytestmark = pytest.mark.integration


@dataclass
class Users:
    teacher: int
    other_teacher: int
    student: int


async def _seed_users(db_url: str) -> Users:
    engine = create_engine_from_url(db_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with create_sessionmaker(engine)() as db:
            teacher = User(
                username="mfrost", email="mfrost@school.test", role="teacher",
                first_name="Mary", last_name="Frost",
            )
            other = User(
                username="jreed", email="jreed@school.test", role="teacher",
                first_name="John", last_name="Reed",
            )
            student = User(
                username="adal", email="ada@school.test", role="student",
                first_name="Ada", last_name="Lovelace",
            )
            db.add_all([teacher, other, student])
            await db.commit()
            return Users(teacher=teacher.id, other_teacher=other.id, student=student.id)
    finally:
        await engine.dispose()


@pytest.fixture
def api(tmp_path, monkeypatch, test_environment):
    """Running application with seeded users."""
    for name, value in test_environment.items():
        monkeypatch.setenv(name, value)
    db_url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"
    monkeypatch.setenv("DB_URL", db_url)
    clear_settings_cache()

    users = asyncio.run(_seed_users(db_url))

    def auth(user_id: int, role: str) -> dict[str, str]:
        token = jwt.encode(
            {"sub": str(user_id), "role": role},
            test_environment["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        return {"Authorization": f"Bearer {token}"}

    with TestClient(create_app()) as client:
        yield client, users, auth

    clear_settings_cache()


class TestAccessControl:
    """Authentication and role checks."""

    def test_health_is_public(self, api):
        """Test health needs no token."""
        client, _, _ = api

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["components"]["database"]["status"] == "healthy"

    def test_missing_token(self, api):
        """Test protected routes require a token."""
        client, _, _ = api

        assert client.get("/api/v1/classes").status_code == 401

    def test_bad_token(self, api):
        """Test tokens with a wrong signature are ignored."""
        client, _, _ = api
        token = jwt.encode({"sub": "1", "role": "teacher"}, "wrong", algorithm="HS256")

        response = client.get("/api/v1/classes", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_student_cannot_create_class(self, api):
        """Test teacher-only routes reject students."""
        client, users, auth = api

        response = client.post(
            "/api/v1/classes",
            json={"title": "Hacked"},
            headers=auth(users.student, "student"),
        )

        assert response.status_code == 403

    def test_unknown_class(self, api):
        """Test missing ids map to 404 with the error kind."""
        client, users, auth = api

        response = client.get("/api/v1/classes/999", headers=auth(users.teacher, "teacher"))

        assert response.status_code == 404
        assert response.json()["detail"]["kind"] == "not_found"

    def test_other_teacher_forbidden(self, api):
        """Test teachers cannot touch classes they do not own."""
        client, users, auth = api
        created = client.post(
            "/api/v1/classes", json={"title": "Mine"}, headers=auth(users.teacher, "teacher")
        ).json()

        response = client.put(
            f"/api/v1/classes/{created['id']}",
            json={"title": "Theirs"},
            headers=auth(users.other_teacher, "teacher"),
        )

        assert response.status_code == 403
        assert response.json()["detail"]["kind"] == "forbidden"

    def test_static_resolver_injected(self, tmp_path, monkeypatch, test_environment):
        """Test a custom session resolver replaces JWT verification."""
        for name, value in test_environment.items():
            monkeypatch.setenv(name, value)
        db_url = f"sqlite+aiosqlite:///{tmp_path / 'static.db'}"
        monkeypatch.setenv("DB_URL", db_url)
        clear_settings_cache()
        users = asyncio.run(_seed_users(db_url))

        resolver = StaticSessionResolver(
            {"dev-teacher": Identity(user_id=users.teacher, role=UserRole.TEACHER)}
        )
        with TestClient(create_app(resolver=resolver)) as client:
            response = client.get(
                "/api/v1/classes", headers={"Authorization": "Bearer dev-teacher"}
            )

        clear_settings_cache()
        assert response.status_code == 200
        assert response.json() == {"items": [], "total": 0}


class TestDirectories:
    """Teacher-only listings used to find ids."""

    def test_student_directory(self, api):
        """Test teachers list and read students, never teachers."""
        client, users, auth = api
        teacher = auth(users.teacher, "teacher")

        response = client.get("/api/v1/students", headers=teacher)
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["id"] == users.student
        assert "password" not in body["items"][0]

        response = client.get(f"/api/v1/students/{users.student}", headers=teacher)
        assert response.status_code == 200
        assert response.json()["last_name"] == "Lovelace"

        response = client.get(f"/api/v1/students/{users.other_teacher}", headers=teacher)
        assert response.status_code == 404
        assert response.json()["detail"]["kind"] == "not_found"

    def test_student_directory_teacher_only(self, api):
        """Test students cannot browse the directory."""
        client, users, auth = api
        student = auth(users.student, "student")

        assert client.get("/api/v1/students", headers=student).status_code == 403
        assert client.get(f"/api/v1/students/{users.student}", headers=student).status_code == 403

    def test_teacher_assignments_across_classes(self, api):
        """Test a teacher sees their own assignments from every class."""
        client, users, auth = api
        teacher = auth(users.teacher, "teacher")
        other = auth(users.other_teacher, "teacher")

        ids = []
        for title in ("Atlas", "Climate"):
            class_id = client.post("/api/v1/classes", json={"title": title}, headers=teacher).json()["id"]
            response = client.post(
                f"/api/v1/classes/{class_id}/assignments",
                json={"title": f"{title} homework"},
                headers=teacher,
            )
            ids.append(response.json()["id"])
        foreign_class = client.post("/api/v1/classes", json={"title": "Other"}, headers=other).json()["id"]
        client.post(
            f"/api/v1/classes/{foreign_class}/assignments",
            json={"title": "Not yours"},
            headers=other,
        )

        response = client.get("/api/v1/assignments", headers=teacher)

        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == ids
        assert client.get("/api/v1/assignments", headers=auth(users.student, "student")).status_code == 403


class TestClassroomFlow:
    """A full term: class, enrollment, assignment, submission, grade, deletion."""

    def test_full_flow(self, api):
        """Test the main workflow end to end."""
        client, users, auth = api
        teacher = auth(users.teacher, "teacher")
        student = auth(users.student, "student")

        # Class starts inactive
        response = client.post(
            "/api/v1/classes",
            json={"title": "Physical Geography", "difficulty": "Advanced", "duration": 40},
            headers=teacher,
        )
        assert response.status_code == 201
        cls = response.json()
        assert cls["is_active"] is False
        class_id = cls["id"]

        # Enrollment is unique
        response = client.post(
            f"/api/v1/classes/{class_id}/students",
            json={"student_id": users.student},
            headers=teacher,
        )
        assert response.status_code == 201
        response = client.post(
            f"/api/v1/classes/{class_id}/students",
            json={"student_id": users.student},
            headers=teacher,
        )
        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "conflict"

        # Students do not see inactive classes
        assert client.get("/api/v1/classes", headers=student).json()["total"] == 0
        assert client.get(f"/api/v1/classes/{class_id}", headers=student).status_code == 403

        response = client.post(
            f"/api/v1/classes/{class_id}/assignments",
            json={"title": "River Basins", "type": "gis", "points": 10},
            headers=teacher,
        )
        assert response.status_code == 201
        assignment_id = response.json()["id"]

        # Publishing into an inactive class is refused
        response = client.patch(
            f"/api/v1/assignments/{assignment_id}/publish",
            json={"is_published": True},
            headers=teacher,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["kind"] == "invalid_state"

        client.patch(
            f"/api/v1/classes/{class_id}/active", json={"is_active": True}, headers=teacher
        )
        assert client.get("/api/v1/classes", headers=student).json()["total"] == 1
        assert client.get(f"/api/v1/classes/{class_id}/assignments", headers=student).json() == []

        response = client.patch(
            f"/api/v1/assignments/{assignment_id}/publish",
            json={"is_published": True},
            headers=teacher,
        )
        assert response.status_code == 200
        assert response.json()["changed"] is True
        assert response.json()["notified"] == 1

        assert client.get("/api/v1/notifications/count", headers=student).json() == {"count": 1}

        # Hand in the work
        response = client.post(
            f"/api/v1/assignments/{assignment_id}/submissions",
            json={"written_response": "The Amazon basin", "status": "submitted"},
            headers=student,
        )
        assert response.status_code == 200
        submission = response.json()
        assert submission["status"] == "submitted"

        inbox = client.get("/api/v1/notifications", headers=teacher).json()
        assert inbox["unread_count"] == 1
        assert inbox["items"][0]["type"] == "submission_received"

        missing = client.get(f"/api/v1/assignments/{assignment_id}/missing", headers=teacher)
        assert missing.json() == []

        # Grade exactly once
        response = client.post(
            f"/api/v1/submissions/{submission['id']}/grade",
            json={"score": 9, "max_score": 10, "feedback": "Clear map"},
            headers=teacher,
        )
        assert response.status_code == 201
        response = client.post(
            f"/api/v1/submissions/{submission['id']}/grade",
            json={"score": 3, "max_score": 10},
            headers=teacher,
        )
        assert response.status_code == 409

        grade = client.get(f"/api/v1/submissions/{submission['id']}/grade", headers=student)
        assert grade.json()["score"] == 9
        own = client.get(f"/api/v1/submissions/{submission['id']}", headers=student).json()
        assert own["status"] == "graded"

        # Active classes cannot be deleted
        response = client.delete(f"/api/v1/classes/{class_id}", headers=teacher)
        assert response.status_code == 400

        client.patch(
            f"/api/v1/classes/{class_id}/active", json={"is_active": False}, headers=teacher
        )
        response = client.delete(f"/api/v1/classes/{class_id}", headers=teacher)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert client.get(f"/api/v1/classes/{class_id}", headers=teacher).status_code == 404
        assert client.get(f"/api/v1/submissions/{submission['id']}", headers=student).status_code == 404

        # Notification history survives the deletion
        response = client.post("/api/v1/notifications/mark-read", headers=student)
        assert response.json() == {"updated": 2}
