# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission service for student work and grading.

This module provides the SubmissionService class for:
- Saving drafts and handing in work (one submission per assignment/student)
- Grading handed-in work (one grade per submission)
- Teacher and student views of submissions

Status only moves forward: draft -> submitted -> graded. A submission
is graded exactly when it has a grade; both are written in the same
transaction. Handing in notifies the teacher and grading notifies the
student, each after the commit.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError
from src.infrastructure.database.models import (
    Assignment,
    Class,
    Enrollment,
    Grade,
    Submission,
    User,
)
from src.infrastructure.notifications import (
    Notifier,
    assignment_graded_payload,
    emit_notifications,
    submission_received_payload,
)
from src.models.enums import HANDED_IN_STATUSES, SubmissionStatus
from src.models.submission import (
    GradeCreateRequest,
    GradeResponse,
    SubmissionResponse,
    SubmissionUpsertRequest,
)
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 50


class SubmissionServiceError(Exception):
    """Base exception for submission service errors."""

    pass


class AssignmentNotFoundError(SubmissionServiceError, NotFoundError):
    """Raised when assignment is not found."""

    pass


class SubmissionNotFoundError(SubmissionServiceError, NotFoundError):
    """Raised when submission is not found."""

    pass


class NotEnrolledError(SubmissionServiceError, ForbiddenError):
    """Raised when the student is not enrolled in the assignment's class."""

    pass


class SubmissionAccessDeniedError(SubmissionServiceError, ForbiddenError):
    """Raised when the caller is neither the submitter nor the owning teacher."""

    pass


class AssignmentNotPublishedError(SubmissionServiceError, InvalidStateError):
    """Raised when submitting to an unpublished assignment."""

    pass


class InvalidStatusTransitionError(SubmissionServiceError, InvalidStateError):
    """Raised when a status change would move the submission backwards."""

    pass


class EmptySubmissionError(SubmissionServiceError, InvalidStateError):
    """Raised when handing in a submission without any content."""

    pass


class SubmissionNotGradableError(SubmissionServiceError, InvalidStateError):
    """Raised when grading a submission that is still a draft."""

    pass


class SubmissionAlreadyGradedError(SubmissionServiceError, ConflictError):
    """Raised when editing or regrading a graded submission."""

    pass


class SubmissionService:
    """Service for submissions and grades.

    Attributes:
        db: Async database session.
        notifier: Receives notifications after commits; None disables them.
    """

    def __init__(self, db: AsyncSession, notifier: Notifier | None = None) -> None:
        """Initialize submission service.

        Args:
            db: Async database session.
            notifier: Post-commit notification sink.
        """
        self.db = db
        self.notifier = notifier

    # =========================================================================
    # Student work
    # =========================================================================

    async def upsert_submission(
        self,
        assignment_id: int,
        student_id: int,
        payload: SubmissionUpsertRequest,
    ) -> SubmissionResponse:
        """Create or update the student's submission for an assignment.

        The first call inserts the row; later calls update it in place.
        When two first calls race, the loser's insert hits the unique
        constraint and is retried as an update.

        Args:
            assignment_id: Assignment being worked on.
            student_id: Submitting student.
            payload: Content and target status (draft or submitted).

        Returns:
            The stored submission.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            InvalidStatusTransitionError: If the payload asks for graded, or
                moves a handed-in submission back to draft.
            AssignmentNotPublishedError: If the assignment is not published.
            NotEnrolledError: If the student is not in the class.
            EmptySubmissionError: If handing in without content.
            SubmissionAlreadyGradedError: If the submission is already graded.
        """
        if payload.status == SubmissionStatus.GRADED:
            raise InvalidStatusTransitionError("Only grading can mark a submission as graded")

        assignment, class_ = await self._get_assignment_with_class(assignment_id)

        if not assignment.is_published:
            raise AssignmentNotPublishedError("Assignment is not open for submissions")

        if not await self._is_enrolled(student_id, class_.id):
            raise NotEnrolledError("Student is not enrolled in this class")

        handing_in = payload.status == SubmissionStatus.SUBMITTED
        if handing_in and not self._has_content(payload):
            raise EmptySubmissionError(
                "A written response or at least one attachment is required to submit"
            )

        submission = await self._get_by_assignment_and_student(assignment_id, student_id)
        previous_status = submission.status if submission else None

        if submission is None:
            submission = await self._insert(assignment_id, student_id, payload)
            if submission is None:
                # Lost the insert race; the row now exists
                submission = await self._get_by_assignment_and_student(assignment_id, student_id)
                if submission is None:
                    raise SubmissionNotFoundError("Submission disappeared during upsert")
                previous_status = submission.status
                self._apply(submission, payload)
        else:
            self._apply(submission, payload)

        await self.db.commit()
        await self.db.refresh(submission)

        logger.info(
            "Saved submission %s for assignment %s by student %s (%s -> %s)",
            submission.id,
            assignment_id,
            student_id,
            previous_status,
            submission.status,
        )

        if handing_in and previous_status != SubmissionStatus.SUBMITTED.value:
            student = await self._get_user(student_id)
            await emit_notifications(
                self.notifier,
                [
                    submission_received_payload(
                        teacher_id=class_.teacher_id,
                        student_first_name=student.first_name if student else "",
                        student_last_name=student.last_name if student else "",
                        assignment_id=assignment.id,
                        assignment_title=assignment.title,
                        submission_id=submission.id,
                    )
                ],
            )

        return self._to_response(submission, None, assignment_title=assignment.title)

    async def _insert(
        self,
        assignment_id: int,
        student_id: int,
        payload: SubmissionUpsertRequest,
    ) -> Submission | None:
        """Insert a new submission inside a savepoint.

        Returns:
            The new submission, or None when another writer inserted the
            same (assignment, student) row first.
        """
        submission = Submission(
            assignment_id=assignment_id,
            student_id=student_id,
            written_response=payload.written_response,
            map_data=payload.map_data,
            attachments=list(payload.attachments),
            status=payload.status.value,
            submitted_at=utc_now() if payload.status == SubmissionStatus.SUBMITTED else None,
        )

        try:
            async with self.db.begin_nested():
                self.db.add(submission)
                await self.db.flush()
        except IntegrityError:
            logger.info(
                "Concurrent insert for assignment %s student %s, retrying as update",
                assignment_id,
                student_id,
            )
            return None

        return submission

    def _apply(self, submission: Submission, payload: SubmissionUpsertRequest) -> None:
        """Update an existing submission in place, moving status forward only."""
        if submission.status == SubmissionStatus.GRADED.value:
            raise SubmissionAlreadyGradedError("Graded submissions can no longer be edited")

        if (
            submission.status == SubmissionStatus.SUBMITTED.value
            and payload.status == SubmissionStatus.DRAFT
        ):
            raise InvalidStatusTransitionError("A submitted submission cannot go back to draft")

        submission.written_response = payload.written_response
        submission.map_data = payload.map_data
        submission.attachments = list(payload.attachments)

        if payload.status == SubmissionStatus.SUBMITTED:
            submission.status = SubmissionStatus.SUBMITTED.value
            submission.submitted_at = utc_now()

    # =========================================================================
    # Grading
    # =========================================================================

    async def create_grade(
        self,
        submission_id: int,
        request: GradeCreateRequest,
        grader_id: int,
    ) -> GradeResponse:
        """Grade a handed-in submission.

        The grade row and the graded status are written in one transaction.

        Args:
            submission_id: Submission to grade.
            request: Score, maximum, feedback and rubric.
            grader_id: Teacher grading the work.

        Returns:
            The stored grade.

        Raises:
            SubmissionNotFoundError: If submission not found.
            SubmissionAccessDeniedError: If grader does not own the class.
            SubmissionNotGradableError: If the submission is still a draft.
            SubmissionAlreadyGradedError: If a grade already exists.
        """
        submission, assignment, class_ = await self._get_context(submission_id)

        if class_.teacher_id != grader_id:
            raise SubmissionAccessDeniedError("Only the class teacher can grade this submission")

        if submission.status == SubmissionStatus.DRAFT.value:
            raise SubmissionNotGradableError("Draft submissions cannot be graded")

        if await self._get_grade(submission_id) is not None:
            raise SubmissionAlreadyGradedError("This submission has already been graded")

        grade = Grade(
            submission_id=submission_id,
            score=request.score,
            max_score=request.max_score,
            feedback=request.feedback,
            rubric=request.rubric,
            graded_by=grader_id,
            graded_at=utc_now(),
        )
        self.db.add(grade)
        submission.status = SubmissionStatus.GRADED.value

        # The unique constraint on submission_id decides concurrent graders
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise SubmissionAlreadyGradedError("This submission has already been graded") from e

        await self.db.refresh(grade)

        logger.info(
            "Graded submission %s: %d/%d by %s",
            submission_id,
            grade.score,
            grade.max_score,
            grader_id,
        )

        await emit_notifications(
            self.notifier,
            [
                assignment_graded_payload(
                    student_id=submission.student_id,
                    assignment_id=assignment.id,
                    assignment_title=assignment.title,
                    submission_id=submission_id,
                    score=grade.score,
                    max_score=grade.max_score,
                )
            ],
        )

        return self._grade_to_response(grade)

    async def get_grade_by_submission(self, submission_id: int) -> GradeResponse | None:
        """Get the grade of a submission, if any.

        Raises:
            SubmissionNotFoundError: If submission not found.
        """
        await self._get_by_id(submission_id)
        grade = await self._get_grade(submission_id)
        return self._grade_to_response(grade) if grade else None

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_by_id(self, submission_id: int) -> SubmissionResponse:
        """Get a submission with its grade.

        Raises:
            SubmissionNotFoundError: If submission not found.
        """
        rows = await self._fetch(Submission.id == submission_id)
        if not rows:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")
        return rows[0]

    async def get_by_assignment_and_student(
        self,
        assignment_id: int,
        student_id: int,
    ) -> SubmissionResponse | None:
        """Get a student's submission for an assignment, if any."""
        rows = await self._fetch(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
        )
        return rows[0] if rows else None

    async def list_by_assignment(self, assignment_id: int) -> list[SubmissionResponse]:
        """Handed-in submissions for an assignment, newest first.

        Raises:
            AssignmentNotFoundError: If assignment not found.
        """
        await self._get_assignment_with_class(assignment_id)
        return await self._fetch(
            Submission.assignment_id == assignment_id,
            Submission.status.in_(HANDED_IN_STATUSES),
        )

    async def list_by_student(self, student_id: int) -> list[SubmissionResponse]:
        """All submissions of a student, drafts included, newest first."""
        return await self._fetch(Submission.student_id == student_id)

    async def list_by_teacher(
        self,
        teacher_id: int,
        limit: int = DEFAULT_RECENT_LIMIT,
    ) -> list[SubmissionResponse]:
        """Recent handed-in submissions across all of a teacher's classes."""
        return await self._fetch(
            Class.teacher_id == teacher_id,
            Submission.status.in_(HANDED_IN_STATUSES),
            limit=limit,
        )

    async def check_access(self, submission_id: int, user_id: int) -> Submission:
        """Check the user is the submitting student or the owning teacher.

        Returns:
            The submission.

        Raises:
            SubmissionNotFoundError: If submission not found.
            SubmissionAccessDeniedError: If the user may not see it.
        """
        submission, _, class_ = await self._get_context(submission_id)
        if user_id not in (submission.student_id, class_.teacher_id):
            raise SubmissionAccessDeniedError("You do not have access to this submission")
        return submission

    async def _fetch(self, *conditions, limit: int | None = None) -> list[SubmissionResponse]:
        """Load submissions with grade, student and assignment title."""
        query = (
            select(Submission, Grade, User, Assignment.title)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .join(Class, Class.id == Assignment.class_id)
            .join(User, User.id == Submission.student_id)
            .outerjoin(Grade, Grade.submission_id == Submission.id)
            .where(*conditions)
            .order_by(
                Submission.submitted_at.is_(None),
                Submission.submitted_at.desc(),
                Submission.updated_at.desc(),
                Submission.id.desc(),
            )
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [
            self._to_response(
                submission,
                grade,
                student_name=f"{student.first_name} {student.last_name}",
                assignment_title=title,
            )
            for submission, grade, student, title in result.all()
        ]

    async def _get_by_id(self, submission_id: int) -> Submission:
        query = select(Submission).where(Submission.id == submission_id)
        result = await self.db.execute(query)
        submission = result.scalar_one_or_none()

        if not submission:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")

        return submission

    async def _get_context(self, submission_id: int) -> tuple[Submission, Assignment, Class]:
        """Load a submission with its assignment and class.

        Raises:
            SubmissionNotFoundError: If submission not found.
        """
        query = (
            select(Submission, Assignment, Class)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .join(Class, Class.id == Assignment.class_id)
            .where(Submission.id == submission_id)
        )
        result = await self.db.execute(query)
        row = result.one_or_none()

        if row is None:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")

        return row[0], row[1], row[2]

    async def _get_by_assignment_and_student(
        self,
        assignment_id: int,
        student_id: int,
    ) -> Submission | None:
        query = select(Submission).where(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_assignment_with_class(self, assignment_id: int) -> tuple[Assignment, Class]:
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

    async def _get_grade(self, submission_id: int) -> Grade | None:
        query = select(Grade).where(Grade.submission_id == submission_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_user(self, user_id: int) -> User | None:
        query = select(User).where(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _is_enrolled(self, student_id: int, class_id: int) -> bool:
        query = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.class_id == class_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    @staticmethod
    def _has_content(payload: SubmissionUpsertRequest) -> bool:
        return bool((payload.written_response or "").strip()) or bool(payload.attachments)

    def _grade_to_response(self, grade: Grade) -> GradeResponse:
        """Convert grade model to response."""
        return GradeResponse(
            id=grade.id,
            submission_id=grade.submission_id,
            score=grade.score,
            max_score=grade.max_score,
            feedback=grade.feedback,
            rubric=grade.rubric,
            graded_by=grade.graded_by,
            graded_at=ensure_utc(grade.graded_at),
        )

    def _to_response(
        self,
        submission: Submission,
        grade: Grade | None,
        student_name: str | None = None,
        assignment_title: str | None = None,
    ) -> SubmissionResponse:
        """Convert submission model to response."""
        return SubmissionResponse(
            id=submission.id,
            assignment_id=submission.assignment_id,
            student_id=submission.student_id,
            written_response=submission.written_response,
            map_data=submission.map_data,
            attachments=list(submission.attachments or []),
            status=SubmissionStatus(submission.status),
            submitted_at=ensure_utc(submission.submitted_at),
            created_at=submission.created_at,
            updated_at=submission.updated_at,
            grade=self._grade_to_response(grade) if grade else None,
            student_name=student_name,
            assignment_title=assignment_title,
        )
