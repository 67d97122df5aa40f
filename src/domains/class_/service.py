# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class service for managing the class catalog.

This module provides the ClassService class for:
- Class CRUD operations for the owning teacher
- Class activation/deactivation
- Unit management within a class
- Enrollment and assignment count tracking

Deleting a class is not handled here: it removes every dependent record
and lives in ClassDeletionCoordinator.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError
from src.infrastructure.database.models import Assignment, Class, Enrollment, Unit
from src.models.class_ import (
    ClassCreateRequest,
    ClassResponse,
    ClassSummary,
    ClassUpdateRequest,
    UnitCreateRequest,
    UnitResponse,
    UnitUpdateRequest,
)
from src.models.enums import Difficulty, UserRole

logger = logging.getLogger(__name__)


class ClassServiceError(Exception):
    """Base exception for class service errors."""

    pass


class ClassNotFoundError(ClassServiceError, NotFoundError):
    """Raised when class is not found."""

    pass


class UnitNotFoundError(ClassServiceError, NotFoundError):
    """Raised when unit is not found."""

    pass


class NotClassOwnerError(ClassServiceError, ForbiddenError):
    """Raised when the caller is not the teacher who owns the class."""

    pass


class ClassAccessDeniedError(ClassServiceError, ForbiddenError):
    """Raised when a student asks for a class they are not part of."""

    pass


class ClassService:
    """Service for managing classes and their units.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize class service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_class(
        self,
        request: ClassCreateRequest,
        teacher_id: int,
    ) -> ClassResponse:
        """Create a new class owned by a teacher.

        Classes start inactive; students only see them once activated.

        Args:
            request: Class creation data.
            teacher_id: Owning teacher.

        Returns:
            Created class response.
        """
        class_ = Class(
            title=request.title,
            description=request.description,
            duration=request.duration,
            difficulty=request.difficulty.value,
            objectives=list(request.objectives),
            teacher_id=teacher_id,
            is_active=False,
        )

        self.db.add(class_)
        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Created class: %s (%s) by teacher %s", class_.title, class_.id, teacher_id)

        return self._to_response(class_)

    async def get_class(self, class_id: int) -> ClassResponse:
        """Get class by ID.

        Args:
            class_id: Class identifier.

        Returns:
            Class details.

        Raises:
            ClassNotFoundError: If class not found.
        """
        class_ = await self._get_by_id(class_id)
        return self._to_response(class_)

    async def get_class_for_viewer(
        self,
        class_id: int,
        viewer_id: int,
        role: UserRole,
    ) -> ClassResponse:
        """Get a class if the viewer may see it.

        Teachers see the classes they own. Students see active classes
        they are enrolled in.

        Raises:
            ClassNotFoundError: If class not found.
            NotClassOwnerError: If a teacher does not own the class.
            ClassAccessDeniedError: If a student is not part of the class.
        """
        if role == UserRole.TEACHER:
            return self._to_response(await self.get_owned_class(class_id, viewer_id))

        class_ = await self._get_by_id(class_id)
        if class_.is_active:
            query = select(Enrollment.id).where(
                Enrollment.class_id == class_id,
                Enrollment.student_id == viewer_id,
            )
            result = await self.db.execute(query)
            if result.scalar_one_or_none() is not None:
                return self._to_response(class_)

        raise ClassAccessDeniedError("You do not have access to this class")

    async def list_classes_for_teacher(self, teacher_id: int) -> list[ClassSummary]:
        """List a teacher's classes, newest first, with counts.

        Args:
            teacher_id: Owning teacher.

        Returns:
            Class summaries with enrollment and assignment counts.
        """
        enrollment_counts = (
            select(Enrollment.class_id, func.count(Enrollment.id).label("n"))
            .group_by(Enrollment.class_id)
            .subquery()
        )
        assignment_counts = (
            select(Assignment.class_id, func.count(Assignment.id).label("n"))
            .group_by(Assignment.class_id)
            .subquery()
        )

        query = (
            select(
                Class,
                func.coalesce(enrollment_counts.c.n, 0),
                func.coalesce(assignment_counts.c.n, 0),
            )
            .outerjoin(enrollment_counts, enrollment_counts.c.class_id == Class.id)
            .outerjoin(assignment_counts, assignment_counts.c.class_id == Class.id)
            .where(Class.teacher_id == teacher_id)
            .order_by(Class.created_at.desc(), Class.id.desc())
        )

        result = await self.db.execute(query)
        return [
            self._to_summary(class_, enrollment_count, assignment_count)
            for class_, enrollment_count, assignment_count in result.all()
        ]

    async def update_class(
        self,
        class_id: int,
        request: ClassUpdateRequest,
        caller_id: int,
    ) -> ClassResponse:
        """Update a class.

        Args:
            class_id: Class identifier.
            request: Fields to change; unset fields are left alone.
            caller_id: Teacher performing the update.

        Returns:
            Updated class.

        Raises:
            ClassNotFoundError: If class not found.
            NotClassOwnerError: If caller does not own the class.
        """
        class_ = await self.get_owned_class(class_id, caller_id)

        changes = request.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None:
                continue
            if isinstance(value, Difficulty):
                value = value.value
            setattr(class_, field, value)

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Updated class: %s", class_id)

        return self._to_response(class_)

    async def set_class_active(
        self,
        class_id: int,
        is_active: bool,
        caller_id: int,
    ) -> ClassResponse:
        """Activate or deactivate a class.

        Deactivation leaves assignments untouched: published assignments
        stay published.

        Args:
            class_id: Class identifier.
            is_active: New activation state.
            caller_id: Teacher performing the change.

        Returns:
            Updated class.

        Raises:
            ClassNotFoundError: If class not found.
            NotClassOwnerError: If caller does not own the class.
        """
        class_ = await self.get_owned_class(class_id, caller_id)
        class_.is_active = is_active

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("%s class: %s", "Activated" if is_active else "Deactivated", class_id)

        return self._to_response(class_)

    # =========================================================================
    # Units
    # =========================================================================

    async def list_units(self, class_id: int) -> list[UnitResponse]:
        """List units of a class ordered by (order, id).

        Raises:
            ClassNotFoundError: If class not found.
        """
        await self._get_by_id(class_id)

        query = (
            select(Unit)
            .where(Unit.class_id == class_id)
            .order_by(Unit.order, Unit.id)
        )
        result = await self.db.execute(query)
        return [self._unit_to_response(unit) for unit in result.scalars().all()]

    async def create_unit(
        self,
        class_id: int,
        request: UnitCreateRequest,
        caller_id: int,
    ) -> UnitResponse:
        """Create a unit in a class.

        Args:
            class_id: Parent class.
            request: Unit data.
            caller_id: Teacher performing the change.

        Returns:
            Created unit.

        Raises:
            ClassNotFoundError: If class not found.
            NotClassOwnerError: If caller does not own the class.
        """
        await self.get_owned_class(class_id, caller_id)

        unit = Unit(
            class_id=class_id,
            title=request.title,
            description=request.description,
            order=request.order,
        )
        self.db.add(unit)
        await self.db.commit()
        await self.db.refresh(unit)

        logger.info("Created unit %s in class %s", unit.id, class_id)

        return self._unit_to_response(unit)

    async def update_unit(
        self,
        unit_id: int,
        request: UnitUpdateRequest,
        caller_id: int,
    ) -> UnitResponse:
        """Update a unit.

        Raises:
            UnitNotFoundError: If unit not found.
            NotClassOwnerError: If caller does not own the unit's class.
        """
        unit = await self._get_unit(unit_id)
        await self.get_owned_class(unit.class_id, caller_id)

        changes = request.model_dump(exclude_unset=True)
        if changes.get("title") is not None:
            unit.title = changes["title"]
        if "description" in changes:
            unit.description = changes["description"]
        if changes.get("order") is not None:
            unit.order = changes["order"]

        await self.db.commit()
        await self.db.refresh(unit)

        logger.info("Updated unit: %s", unit_id)

        return self._unit_to_response(unit)

    async def delete_unit(self, unit_id: int, caller_id: int) -> None:
        """Delete a unit, detaching its assignments.

        Assignments of the unit are kept with unit_id cleared.

        Raises:
            UnitNotFoundError: If unit not found.
            NotClassOwnerError: If caller does not own the unit's class.
        """
        unit = await self._get_unit(unit_id)
        await self.get_owned_class(unit.class_id, caller_id)

        # Cleared explicitly so backends without FK actions behave the same
        await self.db.execute(
            update(Assignment)
            .where(Assignment.unit_id == unit_id)
            .values(unit_id=None)
        )
        await self.db.delete(unit)
        await self.db.commit()

        logger.info("Deleted unit %s from class %s", unit_id, unit.class_id)

    # =========================================================================
    # Lookups shared with other services
    # =========================================================================

    async def get_owned_class(self, class_id: int, caller_id: int) -> Class:
        """Load a class and check the caller owns it.

        Args:
            class_id: Class identifier.
            caller_id: Caller's user id.

        Returns:
            Class model instance.

        Raises:
            ClassNotFoundError: If class not found.
            NotClassOwnerError: If caller does not own the class.
        """
        class_ = await self._get_by_id(class_id)
        if class_.teacher_id != caller_id:
            raise NotClassOwnerError(f"User {caller_id} does not own class {class_id}")
        return class_

    async def _get_by_id(self, class_id: int) -> Class:
        """Get class by ID.

        Raises:
            ClassNotFoundError: If not found.
        """
        query = select(Class).where(Class.id == class_id)
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        return class_

    async def _get_unit(self, unit_id: int) -> Unit:
        query = select(Unit).where(Unit.id == unit_id)
        result = await self.db.execute(query)
        unit = result.scalar_one_or_none()

        if not unit:
            raise UnitNotFoundError(f"Unit {unit_id} not found")

        return unit

    def _to_response(self, class_: Class) -> ClassResponse:
        """Convert class model to response."""
        return ClassResponse(
            id=class_.id,
            title=class_.title,
            description=class_.description,
            duration=class_.duration,
            difficulty=Difficulty(class_.difficulty),
            objectives=list(class_.objectives or []),
            teacher_id=class_.teacher_id,
            is_active=class_.is_active,
            created_at=class_.created_at,
            updated_at=class_.updated_at,
        )

    def _to_summary(
        self,
        class_: Class,
        enrollment_count: int,
        assignment_count: int,
    ) -> ClassSummary:
        """Convert class model to summary with counts."""
        return ClassSummary(
            **self._to_response(class_).model_dump(),
            enrollment_count=enrollment_count,
            assignment_count=assignment_count,
        )

    def _unit_to_response(self, unit: Unit) -> UnitResponse:
        return UnitResponse(
            id=unit.id,
            class_id=unit.class_id,
            title=unit.title,
            description=unit.description,
            order=unit.order,
            created_at=unit.created_at,
        )
