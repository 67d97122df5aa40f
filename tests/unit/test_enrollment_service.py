# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Enrollment service."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    ClassNotFoundError,
    EnrollmentService,
    InvalidStudentTypeError,
    NotEnrolledError,
    StudentNotFoundError,
)
from src.domains.errors import ConflictError


@pytest.fixture
def enrollment_service(mock_db):
    """Create enrollment service with mock database."""
    return EnrollmentService(db=mock_db)


@pytest.fixture
def sample_class():
    """Create a sample class model."""
    cls = MagicMock()
    cls.id = 10
    cls.title = "Cartography"
    cls.description = ""
    cls.duration = 12
    cls.difficulty = "Beginner"
    cls.objectives = []
    cls.teacher_id = 1
    cls.is_active = True
    cls.created_at = datetime(2024, 9, 1, tzinfo=timezone.utc)
    cls.updated_at = datetime(2024, 9, 1, tzinfo=timezone.utc)
    return cls


@pytest.fixture
def sample_student():
    """Create a sample student."""
    user = MagicMock()
    user.id = 3
    user.role = "student"
    user.first_name = "Ada"
    user.last_name = "Lovelace"
    user.email = "ada@example.com"
    return user


@pytest.fixture
def sample_enrollment():
    """Create a sample enrollment."""
    enrollment = MagicMock()
    enrollment.id = 100
    enrollment.student_id = 3
    enrollment.class_id = 10
    enrollment.enrolled_at = datetime(2024, 9, 5, tzinfo=timezone.utc)
    return enrollment


def _result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestEnroll:
    """Tests for enrolling students."""

    @pytest.mark.asyncio
    async def test_enroll_success(self, enrollment_service, mock_db, sample_class, sample_student):
        """Test enrolling a student."""
        mock_db.execute.side_effect = [
            _result(sample_class),
            _result(sample_student),
            _result(None),
        ]

        async def mock_refresh(obj):
            obj.id = 100
            obj.enrolled_at = datetime.now(timezone.utc)

        mock_db.refresh.side_effect = mock_refresh

        result = await enrollment_service.enroll(sample_student.id, sample_class.id)

        assert result.id == 100
        assert result.student_name == "Ada Lovelace"
        assert result.class_id == sample_class.id
        mock_db.add.assert_called_once()
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_enroll_twice_conflicts(
        self, enrollment_service, mock_db, sample_class, sample_student, sample_enrollment
    ):
        """Test a second enrollment of the same pair is a conflict."""
        mock_db.execute.side_effect = [
            _result(sample_class),
            _result(sample_student),
            _result(sample_enrollment),
        ]

        with pytest.raises(AlreadyEnrolledError) as exc_info:
            await enrollment_service.enroll(sample_student.id, sample_class.id)

        assert isinstance(exc_info.value, ConflictError)
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_enroll_race_maps_integrity_error(
        self, enrollment_service, mock_db, sample_class, sample_student
    ):
        """Test a concurrent enrollment caught by the constraint is a conflict."""
        mock_db.execute.side_effect = [
            _result(sample_class),
            _result(sample_student),
            _result(None),
        ]
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

        with pytest.raises(AlreadyEnrolledError):
            await enrollment_service.enroll(sample_student.id, sample_class.id)

        mock_db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_enroll_missing_class(self, enrollment_service, mock_db):
        """Test enrolling in a non-existent class."""
        mock_db.execute.return_value = _result(None)

        with pytest.raises(ClassNotFoundError):
            await enrollment_service.enroll(3, 999)

    @pytest.mark.asyncio
    async def test_enroll_missing_student(self, enrollment_service, mock_db, sample_class):
        """Test enrolling an unknown user."""
        mock_db.execute.side_effect = [_result(sample_class), _result(None)]

        with pytest.raises(StudentNotFoundError):
            await enrollment_service.enroll(404, sample_class.id)

    @pytest.mark.asyncio
    async def test_enroll_teacher_rejected(self, enrollment_service, mock_db, sample_class, sample_student):
        """Test teachers cannot be enrolled as students."""
        sample_student.role = "teacher"
        mock_db.execute.side_effect = [_result(sample_class), _result(sample_student)]

        with pytest.raises(InvalidStudentTypeError):
            await enrollment_service.enroll(sample_student.id, sample_class.id)


class TestUnenroll:
    """Tests for unenrolling students."""

    @pytest.mark.asyncio
    async def test_unenroll_success(self, enrollment_service, mock_db, sample_enrollment):
        """Test unenrolling deletes the enrollment."""
        mock_db.execute.return_value = _result(sample_enrollment)

        await enrollment_service.unenroll(3, 10)

        mock_db.delete.assert_called_once_with(sample_enrollment)
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_unenroll_not_enrolled(self, enrollment_service, mock_db):
        """Test unenrolling a student who is not in the class."""
        mock_db.execute.return_value = _result(None)

        with pytest.raises(NotEnrolledError):
            await enrollment_service.unenroll(3, 10)


class TestListing:
    """Tests for roster and class list queries."""

    @pytest.mark.asyncio
    async def test_list_by_class(
        self, enrollment_service, mock_db, sample_class, sample_student, sample_enrollment
    ):
        """Test roster entries carry student details."""
        roster = MagicMock()
        roster.all.return_value = [(sample_enrollment, sample_student)]
        mock_db.execute.side_effect = [_result(sample_class), roster]

        items = await enrollment_service.list_by_class(sample_class.id)

        assert len(items) == 1
        assert items[0].email == "ada@example.com"
        assert items[0].last_name == "Lovelace"

    @pytest.mark.asyncio
    async def test_list_by_student(self, enrollment_service, mock_db, sample_class, sample_enrollment):
        """Test a student's classes carry enrollment info."""
        rows = MagicMock()
        rows.all.return_value = [(sample_enrollment, sample_class)]
        mock_db.execute.return_value = rows

        items = await enrollment_service.list_by_student(3)

        assert len(items) == 1
        assert items[0].id == sample_class.id
        assert items[0].enrollment_id == sample_enrollment.id
        assert items[0].enrolled_at == sample_enrollment.enrolled_at

    @pytest.mark.asyncio
    async def test_is_enrolled(self, enrollment_service, mock_db, sample_enrollment):
        """Test enrollment check."""
        mock_db.execute.side_effect = [_result(sample_enrollment), _result(None)]

        assert await enrollment_service.is_enrolled(3, 10) is True
        assert await enrollment_service.is_enrolled(4, 10) is False


class TestStudentDirectory:
    """Tests for the teacher's student directory."""

    @pytest.fixture
    def directory_student(self, sample_student):
        sample_student.username = "ada"
        sample_student.created_at = datetime(2024, 8, 1, tzinfo=timezone.utc)
        return sample_student

    @pytest.mark.asyncio
    async def test_list_students(self, enrollment_service, mock_db, directory_student):
        """Test the directory lists students by name and only students."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = [directory_student]
        mock_db.execute.return_value = result

        students = await enrollment_service.list_students()

        assert [s.id for s in students] == [3]
        assert students[0].username == "ada"
        query = str(mock_db.execute.call_args[0][0])
        assert "users.role = " in query
        assert "ORDER BY users.last_name, users.first_name" in query

    @pytest.mark.asyncio
    async def test_get_student(self, enrollment_service, mock_db, directory_student):
        """Test reading one student account."""
        mock_db.execute.return_value = _result(directory_student)

        student = await enrollment_service.get_student(3)

        assert student.email == "ada@example.com"
        assert not hasattr(student, "password")

    @pytest.mark.asyncio
    async def test_get_student_not_a_student(self, enrollment_service, mock_db):
        """Test a teacher id, filtered out by role, reads as not found."""
        mock_db.execute.return_value = _result(None)

        with pytest.raises(StudentNotFoundError):
            await enrollment_service.get_student(1)
