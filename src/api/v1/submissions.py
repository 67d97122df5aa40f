# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission API endpoints.

This module provides endpoints for:
- GET /recent - Teacher: recent handed-in work; student: own submissions
- GET /{submission_id} - Get submission with its grade
- GET /{submission_id}/grade - Get grade
- POST /{submission_id}/grade - Grade a handed-in submission
- GET /{submission_id}/comments - List the feedback thread
- POST /{submission_id}/comments - Post in the feedback thread

Access is limited to the submitting student and the teacher who owns the class.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from src.api.dependencies import DB, AuthenticatedUser, PostCommitNotifier, TeacherUser
from src.api.errors import error_detail, to_http_exception
from src.domains.discussion import DiscussionService
from src.domains.errors import ClassroomError
from src.domains.submission import DEFAULT_RECENT_LIMIT, SubmissionService
from src.models.submission import (
    CommentCreateRequest,
    CommentResponse,
    GradeCreateRequest,
    GradeResponse,
    SubmissionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/recent",
    response_model=list[SubmissionResponse],
    summary="Recent submissions",
    description="Teachers see handed-in work across their classes; students see their own.",
)
async def list_recent_submissions(
    current_user: AuthenticatedUser,
    db: DB,
    limit: int = Query(default=DEFAULT_RECENT_LIMIT, ge=1, le=200),
) -> list[SubmissionResponse]:
    """List recent submissions for the caller."""
    service = SubmissionService(db)
    if current_user.is_teacher:
        return await service.list_by_teacher(current_user.id, limit=limit)
    return (await service.list_by_student(current_user.id))[:limit]


@router.get(
    "/{submission_id}",
    response_model=SubmissionResponse,
    summary="Get submission",
)
async def get_submission(
    submission_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> SubmissionResponse:
    """Get a submission with its grade."""
    service = SubmissionService(db)
    try:
        await service.check_access(submission_id, current_user.id)
        return await service.get_by_id(submission_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.get(
    "/{submission_id}/grade",
    response_model=GradeResponse,
    summary="Get grade",
)
async def get_grade(
    submission_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> GradeResponse:
    """Get the grade of a submission.

    Raises:
        HTTPException: 404 if the submission has not been graded.
    """
    service = SubmissionService(db)
    try:
        await service.check_access(submission_id, current_user.id)
        grade = await service.get_grade_by_submission(submission_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e

    if grade is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("not_found", f"Submission {submission_id} has no grade"),
        )
    return grade


@router.post(
    "/{submission_id}/grade",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grade submission",
    description="Grades a handed-in submission once and notifies the student.",
)
async def create_grade(
    submission_id: int,
    data: GradeCreateRequest,
    current_user: TeacherUser,
    db: DB,
    notifier: PostCommitNotifier,
) -> GradeResponse:
    """Grade a submission.

    Raises:
        HTTPException: 400 for drafts, 409 if already graded.
    """
    try:
        return await SubmissionService(db, notifier).create_grade(
            submission_id,
            data,
            current_user.id,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.get(
    "/{submission_id}/comments",
    response_model=list[CommentResponse],
    summary="List submission comments",
)
async def list_submission_comments(
    submission_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[CommentResponse]:
    """List the feedback thread of a submission, oldest first."""
    try:
        return await DiscussionService(db).list_submission_comments(submission_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{submission_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on submission",
)
async def add_submission_comment(
    submission_id: int,
    data: CommentCreateRequest,
    current_user: AuthenticatedUser,
    db: DB,
) -> CommentResponse:
    """Post in the feedback thread of a submission."""
    try:
        return await DiscussionService(db).add_submission_comment(
            submission_id,
            current_user.id,
            data.content,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e
