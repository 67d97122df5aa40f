# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Missing-submission report for an assignment.

A student is missing when they are enrolled in the assignment's class and
have no submission in a handed-in state. Drafts count as missing.
Overdue days are recomputed on every call.
"""

import logging
from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Assignment, Enrollment, Submission, User
from src.models.assignment import MissingSubmissionResponse
from src.models.enums import HANDED_IN_STATUSES, SubmissionStatus
from src.utils.datetime import utc_now, whole_days_between

logger = logging.getLogger(__name__)


def compute_days_overdue(now: datetime, due_date: datetime | None) -> int | None:
    """Whole days past the due date, never negative.

    Args:
        now: Reference time.
        due_date: Assignment due date, or None.

    Returns:
        None without a due date, otherwise max(0, floor(days late)).
    """
    if due_date is None:
        return None
    return max(0, whole_days_between(due_date, now))


class MissingSubmissionCalculator:
    """Computes which enrolled students have not handed in an assignment.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def missing_submissions(
        self,
        assignment: Assignment,
        now: datetime | None = None,
    ) -> list[MissingSubmissionResponse]:
        """List enrolled students without a handed-in submission.

        Args:
            assignment: Assignment to report on.
            now: Reference time for overdue days; defaults to the current time.

        Returns:
            Missing students sorted by (last_name, first_name, student_id).
        """
        now = now or utc_now()
        days_overdue = compute_days_overdue(now, assignment.due_date)

        query = (
            select(User, Submission.status)
            .join(Enrollment, Enrollment.student_id == User.id)
            .outerjoin(
                Submission,
                and_(
                    Submission.student_id == User.id,
                    Submission.assignment_id == assignment.id,
                ),
            )
            .where(
                Enrollment.class_id == assignment.class_id,
                or_(
                    Submission.id.is_(None),
                    Submission.status.not_in(HANDED_IN_STATUSES),
                ),
            )
            .order_by(User.last_name, User.first_name, User.id)
        )
        result = await self.db.execute(query)

        items = [
            MissingSubmissionResponse(
                student_id=student.id,
                first_name=student.first_name,
                last_name=student.last_name,
                email=student.email,
                submission_status=SubmissionStatus(status) if status else None,
                days_overdue=days_overdue,
            )
            for student, status in result.all()
        ]

        logger.debug(
            "Assignment %s has %d missing submissions",
            assignment.id,
            len(items),
        )
        return items
