# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cascading deletion of a class and everything that hangs off it.

Dependents are removed child-first in a single transaction:

    submission comments -> grades -> submissions -> assignments
    -> units -> enrollments -> class comments -> class

Notifications are history and are never deleted; they only hold plain
references to the assignments and submissions they mention.
"""

import logging

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.class_.service import ClassNotFoundError, ClassServiceError
from src.domains.errors import InvalidStateError
from src.infrastructure.database.models import (
    Assignment,
    Class,
    ClassComment,
    Enrollment,
    Grade,
    Submission,
    SubmissionComment,
    Unit,
)

logger = logging.getLogger(__name__)


class ClassStillActiveError(ClassServiceError, InvalidStateError):
    """Raised when deleting a class that is still active."""

    pass


async def delete_submission_tree(db: AsyncSession, assignment_ids: Select) -> None:
    """Delete comments, grades and submissions of the given assignments.

    Does not commit; the caller owns the transaction.

    Args:
        db: Session with an open transaction.
        assignment_ids: Select yielding the assignment ids to clear.
    """
    submission_ids = select(Submission.id).where(Submission.assignment_id.in_(assignment_ids))

    for statement in (
        delete(SubmissionComment).where(SubmissionComment.submission_id.in_(submission_ids)),
        delete(Grade).where(Grade.submission_id.in_(submission_ids)),
        delete(Submission).where(Submission.assignment_id.in_(assignment_ids)),
    ):
        await db.execute(statement.execution_options(synchronize_session=False))


class ClassDeletionCoordinator:
    """Removes an inactive class with all of its dependents.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def delete_class(self, class_id: int) -> bool:
        """Delete a class and all dependent records atomically.

        The class row is locked first so concurrent writers wait for the
        cascade to finish.

        Args:
            class_id: Class identifier.

        Returns:
            True when everything was deleted, False when the transaction
            failed and was rolled back.

        Raises:
            ClassNotFoundError: If class not found.
            ClassStillActiveError: If the class is still active.
        """
        assignment_ids = select(Assignment.id).where(Assignment.class_id == class_id)

        try:
            query = select(Class).where(Class.id == class_id).with_for_update()
            result = await self.db.execute(query)
            class_ = result.scalar_one_or_none()

            if not class_:
                raise ClassNotFoundError(f"Class {class_id} not found")
            if class_.is_active:
                raise ClassStillActiveError(
                    "Cannot delete an active class. Deactivate the class first."
                )

            await delete_submission_tree(self.db, assignment_ids)

            for statement in (
                delete(Assignment).where(Assignment.class_id == class_id),
                delete(Unit).where(Unit.class_id == class_id),
                delete(Enrollment).where(Enrollment.class_id == class_id),
                delete(ClassComment).where(ClassComment.class_id == class_id),
                delete(Class).where(Class.id == class_id),
            ):
                await self.db.execute(statement.execution_options(synchronize_session=False))

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to delete class %s, rolled back: %s",
                class_id,
                str(e),
                exc_info=True,
            )
            return False

        logger.info("Deleted class %s with all dependents", class_id)
        return True
