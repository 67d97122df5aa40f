# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment service for the assignment publication lifecycle.

This module provides the AssignmentService class for:
- Assignment CRUD for the owning teacher
- Publishing and unpublishing (unpublished <-> published)
- Moving assignments between units of the same class
- A teacher's assignments across classes and a student's assignment board
- The missing-submission report

Publishing requires an active class. A real unpublished -> published
transition notifies every enrolled student after the commit; publishing
an already published assignment changes nothing and notifies nobody.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.assignment.missing import MissingSubmissionCalculator
from src.domains.class_.deletion import delete_submission_tree
from src.domains.errors import ForbiddenError, InternalError, InvalidStateError, NotFoundError
from src.infrastructure.database.models import (
    Assignment,
    Class,
    Enrollment,
    Grade,
    Submission,
    Unit,
)
from src.infrastructure.notifications import (
    Notifier,
    emit_notifications,
    new_assignment_payloads,
)
from src.models.assignment import (
    AssignmentCreateRequest,
    AssignmentResponse,
    AssignmentUpdateRequest,
    MissingSubmissionResponse,
    PublishResponse,
    StudentAssignmentResponse,
)
from src.models.enums import AssignmentType, SubmissionStatus
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class AssignmentServiceError(Exception):
    """Base exception for assignment service errors."""

    pass


class AssignmentNotFoundError(AssignmentServiceError, NotFoundError):
    """Raised when assignment is not found."""

    pass


class ClassNotFoundError(AssignmentServiceError, NotFoundError):
    """Raised when class is not found."""

    pass


class UnitNotFoundError(AssignmentServiceError, NotFoundError):
    """Raised when unit is not found."""

    pass


class NotAssignmentOwnerError(AssignmentServiceError, ForbiddenError):
    """Raised when the caller does not own the assignment's class."""

    pass


class AssignmentNotVisibleError(AssignmentServiceError, ForbiddenError):
    """Raised when a student asks for an assignment they cannot see."""

    pass


class ClassInactiveError(AssignmentServiceError, InvalidStateError):
    """Raised when publishing into an inactive class."""

    pass


class UnitClassMismatchError(AssignmentServiceError, InvalidStateError):
    """Raised when a unit belongs to a different class than the assignment."""

    pass


class AssignmentDeletionError(AssignmentServiceError, InternalError):
    """Raised when the assignment cascade could not be committed."""

    pass


class AssignmentService:
    """Service for managing assignments and their publication.

    Attributes:
        db: Async database session.
        notifier: Receives notifications after commits; None disables them.
    """

    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        """Initialize assignment service.

        Args:
            db: Async database session.
            notifier: Post-commit notification sink.
        """
        self.db = db
        self.notifier = notifier

    async def create(
        self,
        class_id: int,
        request: AssignmentCreateRequest,
        caller_id: int,
    ) -> AssignmentResponse:
        """Create an unpublished assignment in a class.

        Args:
            class_id: Parent class.
            request: Assignment data.
            caller_id: Teacher creating the assignment.

        Returns:
            Created assignment.

        Raises:
            ClassNotFoundError: If class not found.
            NotAssignmentOwnerError: If caller does not own the class.
            UnitNotFoundError: If the given unit does not exist.
            UnitClassMismatchError: If the unit belongs to another class.
        """
        class_ = await self._get_class(class_id)
        self._check_owner(class_, caller_id)

        if request.unit_id is not None:
            await self._check_unit(request.unit_id, class_id)

        assignment = Assignment(
            class_id=class_id,
            unit_id=request.unit_id,
            title=request.title,
            description=request.description,
            type=request.type.value,
            points=request.points,
            is_graded=request.is_graded,
            due_date=request.due_date,
            attachments=list(request.attachments),
            details=dict(request.details),
            is_active=True,
            is_published=False,
        )
        self.db.add(assignment)
        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Created assignment %s in class %s", assignment.id, class_id)

        return self._to_response(assignment)

    async def get(self, assignment_id: int) -> AssignmentResponse:
        """Get assignment by ID.

        Raises:
            AssignmentNotFoundError: If assignment not found.
        """
        assignment = await self._get_by_id(assignment_id)
        return self._to_response(assignment)

    async def get_for_student(self, assignment_id: int, student_id: int) -> AssignmentResponse:
        """Get an assignment as seen by a student.

        Students only see published assignments of active classes they
        are enrolled in.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            AssignmentNotVisibleError: If the student cannot see it.
        """
        assignment, class_ = await self._get_with_class(assignment_id)

        visible = assignment.is_published and class_.is_active
        if visible:
            enrolled = await self.db.execute(
                select(Enrollment.id).where(
                    Enrollment.class_id == class_.id,
                    Enrollment.student_id == student_id,
                )
            )
            visible = enrolled.scalar_one_or_none() is not None

        if not visible:
            raise AssignmentNotVisibleError("Assignment is not available to this student")

        return self._to_response(assignment)

    async def get_owned(self, assignment_id: int, caller_id: int) -> AssignmentResponse:
        """Get an assignment for its owning teacher.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotAssignmentOwnerError: If caller does not own the class.
        """
        assignment, class_ = await self._get_with_class(assignment_id)
        self._check_owner(class_, caller_id)
        return self._to_response(assignment)

    async def list_by_class(
        self,
        class_id: int,
        published_only: bool = False,
    ) -> list[AssignmentResponse]:
        """List a class's assignments by due date, undated last.

        Args:
            class_id: Class identifier.
            published_only: Only return published, active assignments.

        Raises:
            ClassNotFoundError: If class not found.
        """
        await self._get_class(class_id)

        query = select(Assignment).where(Assignment.class_id == class_id)
        if published_only:
            query = query.where(
                Assignment.is_published.is_(True),
                Assignment.is_active.is_(True),
            )
        query = query.order_by(
            Assignment.due_date.is_(None),
            Assignment.due_date,
            Assignment.id,
        )

        result = await self.db.execute(query)
        return [self._to_response(a) for a in result.scalars().all()]

    async def list_by_teacher(self, teacher_id: int) -> list[AssignmentResponse]:
        """List every assignment across the teacher's classes.

        Ordered by class, then due date with undated last. Unpublished
        assignments are included.
        """
        query = (
            select(Assignment)
            .join(Class, Class.id == Assignment.class_id)
            .where(Class.teacher_id == teacher_id)
            .order_by(
                Assignment.class_id,
                Assignment.due_date.is_(None),
                Assignment.due_date,
                Assignment.id,
            )
        )
        result = await self.db.execute(query)
        return [self._to_response(a) for a in result.scalars().all()]

    async def list_for_student(self, student_id: int) -> list[StudentAssignmentResponse]:
        """Build a student's assignment board.

        Returns published, active assignments of the active classes the
        student is enrolled in, each with the student's own submission
        status and grade when present.

        Args:
            student_id: Student identifier.

        Returns:
            Board entries ordered by due date (undated last), then id.
        """
        query = (
            select(Assignment, Class.title, Submission, Grade)
            .join(Class, Class.id == Assignment.class_id)
            .join(
                Enrollment,
                and_(
                    Enrollment.class_id == Class.id,
                    Enrollment.student_id == student_id,
                ),
            )
            .outerjoin(
                Submission,
                and_(
                    Submission.assignment_id == Assignment.id,
                    Submission.student_id == student_id,
                ),
            )
            .outerjoin(Grade, Grade.submission_id == Submission.id)
            .where(
                Assignment.is_published.is_(True),
                Assignment.is_active.is_(True),
                Class.is_active.is_(True),
            )
            .order_by(
                Assignment.due_date.is_(None),
                Assignment.due_date,
                Assignment.id,
            )
        )
        result = await self.db.execute(query)

        items = []
        for assignment, class_title, submission, grade in result.all():
            items.append(
                StudentAssignmentResponse(
                    **self._to_response(assignment).model_dump(),
                    class_title=class_title,
                    submission_id=submission.id if submission else None,
                    submission_status=SubmissionStatus(submission.status) if submission else None,
                    submitted_at=ensure_utc(submission.submitted_at) if submission else None,
                    score=grade.score if grade else None,
                    max_score=grade.max_score if grade else None,
                )
            )
        return items

    async def update(
        self,
        assignment_id: int,
        request: AssignmentUpdateRequest,
        caller_id: int,
    ) -> AssignmentResponse:
        """Apply a partial update to an assignment.

        Only fields present in the request are changed. Publication is
        not touched here; see set_published().

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotAssignmentOwnerError: If caller does not own the class.
            UnitNotFoundError: If a new unit does not exist.
            UnitClassMismatchError: If a new unit belongs to another class.
        """
        assignment, class_ = await self._get_with_class(assignment_id)
        self._check_owner(class_, caller_id)

        changes = request.model_dump(exclude_unset=True)

        if "unit_id" in changes:
            if changes["unit_id"] is not None:
                await self._check_unit(changes["unit_id"], assignment.class_id)
            assignment.unit_id = changes.pop("unit_id")
        if "due_date" in changes:
            assignment.due_date = changes.pop("due_date")

        for field, value in changes.items():
            if value is None:
                continue
            if isinstance(value, AssignmentType):
                value = value.value
            setattr(assignment, field, value)

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Updated assignment: %s", assignment_id)

        return self._to_response(assignment)

    async def set_published(
        self,
        assignment_id: int,
        is_published: bool,
        caller_id: int,
    ) -> PublishResponse:
        """Publish or unpublish an assignment.

        Publishing requires the class to be active; unpublishing is always
        allowed. Setting the current value again is a no-op.

        The flag is flipped with an update conditioned on the old value, so
        of several concurrent publishers only the one that changed the row
        notifies. Publishing holds the class row lock until commit, so the
        class cannot be deactivated in between.

        Args:
            assignment_id: Assignment identifier.
            is_published: Target publication state.
            caller_id: Teacher performing the change.

        Returns:
            The assignment, whether it changed, and how many students were
            notified.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotAssignmentOwnerError: If caller does not own the class.
            ClassInactiveError: If publishing into an inactive class.
        """
        assignment, class_ = await self._get_with_class(assignment_id)
        self._check_owner(class_, caller_id)

        if is_published and not await self._lock_class_is_active(class_.id):
            raise ClassInactiveError(
                "Cannot publish an assignment in an inactive class. Activate the class first."
            )

        result = await self.db.execute(
            update(Assignment)
            .where(
                Assignment.id == assignment_id,
                Assignment.is_published == (not is_published),
            )
            .values(is_published=is_published)
            .execution_options(synchronize_session=False)
        )
        changed = result.rowcount == 1

        await self.db.commit()
        await self.db.refresh(assignment)

        if not changed:
            logger.debug(
                "Assignment %s already %s",
                assignment_id,
                "published" if is_published else "unpublished",
            )
            return PublishResponse(
                assignment=self._to_response(assignment),
                changed=False,
                notified=0,
            )

        logger.info(
            "%s assignment %s",
            "Published" if is_published else "Unpublished",
            assignment_id,
        )

        notified = 0
        if is_published:
            student_ids = await self._enrolled_student_ids(class_.id)
            notified = await emit_notifications(
                self.notifier,
                new_assignment_payloads(student_ids, assignment.id, assignment.title),
            )

        return PublishResponse(
            assignment=self._to_response(assignment),
            changed=True,
            notified=notified,
        )

    async def reassign_unit(
        self,
        assignment_id: int,
        unit_id: int | None,
        caller_id: int,
    ) -> AssignmentResponse:
        """Move an assignment to another unit of its class, or out of any unit.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotAssignmentOwnerError: If caller does not own the class.
            UnitNotFoundError: If the unit does not exist.
            UnitClassMismatchError: If the unit belongs to another class.
        """
        assignment, class_ = await self._get_with_class(assignment_id)
        self._check_owner(class_, caller_id)

        if unit_id is not None:
            await self._check_unit(unit_id, assignment.class_id)

        assignment.unit_id = unit_id
        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Moved assignment %s to unit %s", assignment_id, unit_id)

        return self._to_response(assignment)

    async def delete(self, assignment_id: int, caller_id: int) -> None:
        """Delete an assignment with its submissions, grades and comments.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotAssignmentOwnerError: If caller does not own the class.
            AssignmentDeletionError: If the cascade failed and was rolled back.
        """
        assignment, class_ = await self._get_with_class(assignment_id)
        self._check_owner(class_, caller_id)

        try:
            await delete_submission_tree(
                self.db,
                select(Assignment.id).where(Assignment.id == assignment_id),
            )
            await self.db.execute(
                delete(Assignment)
                .where(Assignment.id == assignment_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to delete assignment %s, rolled back: %s",
                assignment_id,
                str(e),
                exc_info=True,
            )
            raise AssignmentDeletionError("Failed to delete assignment") from e

        logger.info("Deleted assignment %s", assignment_id)

    async def get_missing_submissions(
        self,
        assignment_id: int,
        caller_id: int,
        now: datetime | None = None,
    ) -> list[MissingSubmissionResponse]:
        """Enrolled students who have not handed in the assignment.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotAssignmentOwnerError: If caller does not own the class.
        """
        assignment, class_ = await self._get_with_class(assignment_id)
        self._check_owner(class_, caller_id)

        calculator = MissingSubmissionCalculator(self.db)
        return await calculator.missing_submissions(assignment, now=now)

    async def _get_by_id(self, assignment_id: int) -> Assignment:
        """Get assignment by ID.

        Raises:
            AssignmentNotFoundError: If not found.
        """
        query = select(Assignment).where(Assignment.id == assignment_id)
        result = await self.db.execute(query)
        assignment = result.scalar_one_or_none()

        if not assignment:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")

        return assignment

    async def _get_with_class(self, assignment_id: int) -> tuple[Assignment, Class]:
        """Get assignment together with its class.

        Raises:
            AssignmentNotFoundError: If not found.
        """
        query = (
            select(Assignment, Class)
            .join(Class, Class.id == Assignment.class_id)
            .where(Assignment.id == assignment_id)
        )
        result = await self.db.execute(query)
        row = result.one_or_none()

        if row is None:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")

        return row[0], row[1]

    async def _get_class(self, class_id: int) -> Class:
        query = select(Class).where(Class.id == class_id)
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        return class_

    async def _check_unit(self, unit_id: int, class_id: int) -> Unit:
        """Check a unit exists and belongs to the class.

        Raises:
            UnitNotFoundError: If unit not found.
            UnitClassMismatchError: If unit belongs to another class.
        """
        query = select(Unit).where(Unit.id == unit_id)
        result = await self.db.execute(query)
        unit = result.scalar_one_or_none()

        if not unit:
            raise UnitNotFoundError(f"Unit {unit_id} not found")
        if unit.class_id != class_id:
            raise UnitClassMismatchError(f"Unit {unit_id} does not belong to class {class_id}")

        return unit

    async def _lock_class_is_active(self, class_id: int) -> bool:
        """Lock the class row until commit and return its current active flag."""
        query = select(Class.is_active).where(Class.id == class_id).with_for_update()
        result = await self.db.execute(query)
        return bool(result.scalar_one())

    async def _enrolled_student_ids(self, class_id: int) -> list[int]:
        query = select(Enrollment.student_id).where(Enrollment.class_id == class_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    def _check_owner(self, class_: Class, caller_id: int) -> None:
        if class_.teacher_id != caller_id:
            raise NotAssignmentOwnerError(f"User {caller_id} does not own class {class_.id}")

    def _to_response(self, assignment: Assignment) -> AssignmentResponse:
        """Convert assignment model to response."""
        return AssignmentResponse(
            id=assignment.id,
            class_id=assignment.class_id,
            unit_id=assignment.unit_id,
            title=assignment.title,
            description=assignment.description,
            type=AssignmentType(assignment.type),
            points=assignment.points,
            is_graded=assignment.is_graded,
            due_date=ensure_utc(assignment.due_date),
            attachments=list(assignment.attachments or []),
            details=dict(assignment.details or {}),
            is_active=assignment.is_active,
            is_published=assignment.is_published,
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
        )
