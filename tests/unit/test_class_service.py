# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Class service."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from src.domains.class_.service import (
    ClassAccessDeniedError,
    ClassNotFoundError,
    ClassService,
    NotClassOwnerError,
    UnitNotFoundError,
)
from src.domains.errors import ForbiddenError, NotFoundError
from src.models.class_ import (
    ClassCreateRequest,
    ClassUpdateRequest,
    UnitCreateRequest,
    UnitUpdateRequest,
)
from src.models.enums import Difficulty, UserRole


@pytest.fixture
def class_service(mock_db):
    """Create class service with mock database."""
    return ClassService(db=mock_db)


@pytest.fixture
def sample_class():
    """Create a sample class model."""
    cls = MagicMock()
    cls.id = 10
    cls.title = "Physical Geography"
    cls.description = "Landforms and climate"
    cls.duration = 40
    cls.difficulty = "Intermediate"
    cls.objectives = ["Read topographic maps"]
    cls.teacher_id = 1
    cls.is_active = True
    cls.created_at = datetime(2024, 9, 1, tzinfo=timezone.utc)
    cls.updated_at = datetime(2024, 9, 1, tzinfo=timezone.utc)
    return cls


@pytest.fixture
def sample_unit():
    """Create a sample unit model."""
    unit = MagicMock()
    unit.id = 5
    unit.class_id = 10
    unit.title = "Rivers"
    unit.description = None
    unit.order = 2
    unit.created_at = datetime(2024, 9, 2, tzinfo=timezone.utc)
    return unit


def _result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestClassServiceCreate:
    """Tests for class creation."""

    @pytest.mark.asyncio
    async def test_create_class_starts_inactive(self, class_service, mock_db):
        """Test new classes are inactive and owned by the caller."""
        request = ClassCreateRequest(
            title="Human Geography",
            duration=30,
            difficulty=Difficulty.ADVANCED,
            objectives=["Explain migration"],
        )

        async def mock_refresh(obj):
            obj.id = 42
            obj.created_at = datetime.now(timezone.utc)
            obj.updated_at = datetime.now(timezone.utc)

        mock_db.refresh.side_effect = mock_refresh

        result = await class_service.create_class(request, teacher_id=7)

        assert result.id == 42
        assert result.teacher_id == 7
        assert result.is_active is False
        assert result.difficulty == Difficulty.ADVANCED
        assert result.objectives == ["Explain migration"]
        mock_db.add.assert_called_once()
        mock_db.commit.assert_called_once()

        added = mock_db.add.call_args[0][0]
        assert added.difficulty == "Advanced"


class TestClassServiceGet:
    """Tests for class retrieval."""

    @pytest.mark.asyncio
    async def test_get_class_success(self, class_service, mock_db, sample_class):
        """Test getting class by ID."""
        mock_db.execute.return_value = _result(sample_class)

        result = await class_service.get_class(sample_class.id)

        assert result.id == sample_class.id
        assert result.title == "Physical Geography"
        assert result.difficulty == Difficulty.INTERMEDIATE

    @pytest.mark.asyncio
    async def test_get_class_not_found(self, class_service, mock_db):
        """Test getting non-existent class."""
        mock_db.execute.return_value = _result(None)

        with pytest.raises(ClassNotFoundError) as exc_info:
            await class_service.get_class(999)

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.kind == "not_found"

    @pytest.mark.asyncio
    async def test_teacher_viewer_must_own_class(self, class_service, mock_db, sample_class):
        """Test a teacher cannot read another teacher's class."""
        mock_db.execute.return_value = _result(sample_class)

        with pytest.raises(NotClassOwnerError):
            await class_service.get_class_for_viewer(sample_class.id, 99, UserRole.TEACHER)

    @pytest.mark.asyncio
    async def test_enrolled_student_sees_active_class(self, class_service, mock_db, sample_class):
        """Test an enrolled student can read an active class."""
        mock_db.execute.side_effect = [_result(sample_class), _result(123)]

        result = await class_service.get_class_for_viewer(sample_class.id, 3, UserRole.STUDENT)

        assert result.id == sample_class.id

    @pytest.mark.asyncio
    async def test_student_cannot_see_inactive_class(self, class_service, mock_db, sample_class):
        """Test inactive classes are hidden from enrolled students."""
        sample_class.is_active = False
        mock_db.execute.return_value = _result(sample_class)

        with pytest.raises(ClassAccessDeniedError) as exc_info:
            await class_service.get_class_for_viewer(sample_class.id, 3, UserRole.STUDENT)

        assert isinstance(exc_info.value, ForbiddenError)
        # Enrollment is never queried for an inactive class
        assert mock_db.execute.call_count == 1

    @pytest.mark.asyncio
    async def test_unenrolled_student_denied(self, class_service, mock_db, sample_class):
        """Test students outside the class are denied."""
        mock_db.execute.side_effect = [_result(sample_class), _result(None)]

        with pytest.raises(ClassAccessDeniedError):
            await class_service.get_class_for_viewer(sample_class.id, 3, UserRole.STUDENT)


class TestClassServiceList:
    """Tests for the teacher's class list."""

    @pytest.mark.asyncio
    async def test_list_includes_counts(self, class_service, mock_db, sample_class):
        """Test summaries carry enrollment and assignment counts."""
        result = MagicMock()
        result.all.return_value = [(sample_class, 12, 4)]
        mock_db.execute.return_value = result

        items = await class_service.list_classes_for_teacher(1)

        assert len(items) == 1
        assert items[0].enrollment_count == 12
        assert items[0].assignment_count == 4
        assert items[0].title == sample_class.title

    @pytest.mark.asyncio
    async def test_list_empty(self, class_service, mock_db):
        """Test a teacher without classes gets an empty list."""
        result = MagicMock()
        result.all.return_value = []
        mock_db.execute.return_value = result

        assert await class_service.list_classes_for_teacher(1) == []


class TestClassServiceUpdate:
    """Tests for class updates."""

    @pytest.mark.asyncio
    async def test_update_only_sent_fields(self, class_service, mock_db, sample_class):
        """Test unset fields are left alone."""
        mock_db.execute.return_value = _result(sample_class)

        request = ClassUpdateRequest(title="Updated", difficulty=Difficulty.BEGINNER)
        await class_service.update_class(sample_class.id, request, caller_id=1)

        assert sample_class.title == "Updated"
        assert sample_class.difficulty == "Beginner"
        assert sample_class.duration == 40
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_update_requires_owner(self, class_service, mock_db, sample_class):
        """Test only the owning teacher can update."""
        mock_db.execute.return_value = _result(sample_class)

        with pytest.raises(NotClassOwnerError):
            await class_service.update_class(sample_class.id, ClassUpdateRequest(title="X"), caller_id=2)

        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_deactivate_class(self, class_service, mock_db, sample_class):
        """Test deactivating a class."""
        mock_db.execute.return_value = _result(sample_class)

        result = await class_service.set_class_active(sample_class.id, False, caller_id=1)

        assert sample_class.is_active is False
        assert result.is_active is False
        mock_db.commit.assert_called_once()


class TestClassServiceUnits:
    """Tests for unit management."""

    @pytest.mark.asyncio
    async def test_create_unit(self, class_service, mock_db, sample_class):
        """Test creating a unit in an owned class."""
        mock_db.execute.return_value = _result(sample_class)

        async def mock_refresh(obj):
            obj.id = 8
            obj.created_at = datetime.now(timezone.utc)

        mock_db.refresh.side_effect = mock_refresh

        result = await class_service.create_unit(
            sample_class.id,
            UnitCreateRequest(title="Glaciers", order=3),
            caller_id=1,
        )

        assert result.id == 8
        assert result.class_id == sample_class.id
        assert result.order == 3

    @pytest.mark.asyncio
    async def test_update_unit_clears_description(self, class_service, mock_db, sample_class, sample_unit):
        """Test an explicit null description is applied."""
        sample_unit.description = "Old"
        mock_db.execute.side_effect = [_result(sample_unit), _result(sample_class)]

        await class_service.update_unit(
            sample_unit.id,
            UnitUpdateRequest(description=None, order=1),
            caller_id=1,
        )

        assert sample_unit.description is None
        assert sample_unit.order == 1
        assert sample_unit.title == "Rivers"

    @pytest.mark.asyncio
    async def test_delete_unit_detaches_assignments(self, class_service, mock_db, sample_class, sample_unit):
        """Test assignments are detached before the unit is deleted."""
        mock_db.execute.side_effect = [_result(sample_unit), _result(sample_class), MagicMock()]

        await class_service.delete_unit(sample_unit.id, caller_id=1)

        assert mock_db.execute.call_count == 3
        mock_db.delete.assert_called_once_with(sample_unit)
        mock_db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_delete_missing_unit(self, class_service, mock_db):
        """Test deleting a non-existent unit."""
        mock_db.execute.return_value = _result(None)

        with pytest.raises(UnitNotFoundError):
            await class_service.delete_unit(404, caller_id=1)
