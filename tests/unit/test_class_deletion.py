# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for cascading class deletion."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.domains.class_ import ClassDeletionCoordinator
from src.domains.class_.deletion import ClassStillActiveError
from src.domains.class_.service import ClassNotFoundError
from src.domains.errors import InvalidStateError


@pytest.fixture
def coordinator(mock_db):
    """Create deletion coordinator with mock database."""
    return ClassDeletionCoordinator(db=mock_db)


@pytest.fixture
def inactive_class():
    """Create a deactivated class."""
    cls = MagicMock()
    cls.id = 10
    cls.teacher_id = 1
    cls.is_active = False
    return cls


def _result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestClassDeletion:
    """Tests for ClassDeletionCoordinator.delete_class."""

    @pytest.mark.asyncio
    async def test_delete_inactive_class(self, coordinator, mock_db, inactive_class):
        """Test all dependents and the class are deleted in one commit."""
        mock_db.execute.return_value = _result(inactive_class)

        assert await coordinator.delete_class(10) is True

        # Lock, three submission-tree deletes, five class-level deletes
        assert mock_db.execute.call_count == 9
        mock_db.commit.assert_called_once()
        mock_db.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_active_class_refused(self, coordinator, mock_db, inactive_class):
        """Test active classes must be deactivated first."""
        inactive_class.is_active = True
        mock_db.execute.return_value = _result(inactive_class)

        with pytest.raises(ClassStillActiveError) as exc_info:
            await coordinator.delete_class(10)

        assert isinstance(exc_info.value, InvalidStateError)
        assert mock_db.execute.call_count == 1
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_class(self, coordinator, mock_db):
        """Test deleting a non-existent class."""
        mock_db.execute.return_value = _result(None)

        with pytest.raises(ClassNotFoundError):
            await coordinator.delete_class(404)

    @pytest.mark.asyncio
    async def test_failure_mid_cascade_rolls_back(self, coordinator, mock_db, inactive_class):
        """Test a storage failure rolls back and reports False."""
        mock_db.execute.side_effect = [
            _result(inactive_class),
            MagicMock(),
            MagicMock(),
            MagicMock(),
            MagicMock(),
            OperationalError("DELETE FROM units", {}, Exception("database is locked")),
        ]

        assert await coordinator.delete_class(10) is False

        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_on_commit_rolls_back(self, coordinator, mock_db, inactive_class):
        """Test a failing commit is treated like any other cascade failure."""
        mock_db.execute.return_value = _result(inactive_class)
        mock_db.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk full"))

        assert await coordinator.delete_class(10) is False

        mock_db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_failure_taking_lock_rolls_back(self, coordinator, mock_db):
        """Test a storage failure while locking the class reports False."""
        mock_db.execute.side_effect = OperationalError(
            "SELECT ... FOR UPDATE", {}, Exception("connection lost")
        )

        assert await coordinator.delete_class(10) is False

        assert mock_db.execute.call_count == 1
        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()
