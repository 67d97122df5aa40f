# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Discussion service for class boards and submission feedback threads.

Class boards are open to the owning teacher and to students enrolled in
the class while it is active. A submission thread is private to the
submitting student and the owning teacher.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError
from src.infrastructure.database.models import (
    Assignment,
    Class,
    ClassComment,
    Enrollment,
    Submission,
    SubmissionComment,
    User,
)
from src.models.enums import CommentTag
from src.models.submission import CommentResponse

logger = logging.getLogger(__name__)


class DiscussionServiceError(Exception):
    """Base exception for discussion service errors."""

    pass


class ClassNotFoundError(DiscussionServiceError, NotFoundError):
    """Raised when class is not found."""

    pass


class SubmissionNotFoundError(DiscussionServiceError, NotFoundError):
    """Raised when submission is not found."""

    pass


class DiscussionAccessDeniedError(DiscussionServiceError, ForbiddenError):
    """Raised when the caller may not read or post in a thread."""

    pass


class DiscussionService:
    """Service for class and submission comments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add_class_comment(
        self,
        class_id: int,
        user_id: int,
        content: str,
        tag: CommentTag = CommentTag.DISCUSSION,
    ) -> CommentResponse:
        """Post on a class discussion board.

        Raises:
            ClassNotFoundError: If class not found.
            DiscussionAccessDeniedError: If the user may not post here.
        """
        await self._check_class_access(class_id, user_id)

        comment = ClassComment(
            class_id=class_id,
            user_id=user_id,
            content=content.strip(),
            tag=tag.value,
        )
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info("User %s commented on class %s", user_id, class_id)

        author = await self._get_user(user_id)
        return self._to_response(comment, author, tag=CommentTag(comment.tag))

    async def list_class_comments(self, class_id: int, viewer_id: int) -> list[CommentResponse]:
        """List a class board, oldest first.

        Raises:
            ClassNotFoundError: If class not found.
            DiscussionAccessDeniedError: If the viewer may not read it.
        """
        await self._check_class_access(class_id, viewer_id)

        query = (
            select(ClassComment, User)
            .join(User, User.id == ClassComment.user_id)
            .where(ClassComment.class_id == class_id)
            .order_by(ClassComment.created_at, ClassComment.id)
        )
        result = await self.db.execute(query)
        return [
            self._to_response(comment, author, tag=CommentTag(comment.tag))
            for comment, author in result.all()
        ]

    async def add_submission_comment(
        self,
        submission_id: int,
        user_id: int,
        content: str,
    ) -> CommentResponse:
        """Post in a submission's feedback thread.

        Raises:
            SubmissionNotFoundError: If submission not found.
            DiscussionAccessDeniedError: If the user may not post here.
        """
        await self._check_submission_access(submission_id, user_id)

        comment = SubmissionComment(
            submission_id=submission_id,
            user_id=user_id,
            content=content.strip(),
        )
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)

        logger.info("User %s commented on submission %s", user_id, submission_id)

        author = await self._get_user(user_id)
        return self._to_response(comment, author)

    async def list_submission_comments(
        self,
        submission_id: int,
        viewer_id: int,
    ) -> list[CommentResponse]:
        """List a submission's feedback thread, oldest first.

        Raises:
            SubmissionNotFoundError: If submission not found.
            DiscussionAccessDeniedError: If the viewer may not read it.
        """
        await self._check_submission_access(submission_id, viewer_id)

        query = (
            select(SubmissionComment, User)
            .join(User, User.id == SubmissionComment.user_id)
            .where(SubmissionComment.submission_id == submission_id)
            .order_by(SubmissionComment.created_at, SubmissionComment.id)
        )
        result = await self.db.execute(query)
        return [self._to_response(comment, author) for comment, author in result.all()]

    async def _check_class_access(self, class_id: int, user_id: int) -> Class:
        query = select(Class).where(Class.id == class_id)
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        if class_.teacher_id == user_id:
            return class_

        if class_.is_active:
            enrolled = await self.db.execute(
                select(Enrollment.id).where(
                    Enrollment.class_id == class_id,
                    Enrollment.student_id == user_id,
                )
            )
            if enrolled.scalar_one_or_none() is not None:
                return class_

        raise DiscussionAccessDeniedError("You do not have access to this class discussion")

    async def _check_submission_access(self, submission_id: int, user_id: int) -> None:
        query = (
            select(Submission.student_id, Class.teacher_id)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .join(Class, Class.id == Assignment.class_id)
            .where(Submission.id == submission_id)
        )
        result = await self.db.execute(query)
        row = result.one_or_none()

        if row is None:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")

        if user_id not in (row[0], row[1]):
            raise DiscussionAccessDeniedError("You do not have access to this submission")

    async def _get_user(self, user_id: int) -> User | None:
        query = select(User).where(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    def _to_response(
        self,
        comment: ClassComment | SubmissionComment,
        author: User | None,
        tag: CommentTag | None = None,
    ) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            user_id=comment.user_id,
            author_name=f"{author.first_name} {author.last_name}" if author else "",
            author_role=author.role if author else "",
            content=comment.content,
            tag=tag,
            created_at=comment.created_at,
        )
