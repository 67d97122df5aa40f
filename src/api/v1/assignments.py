# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment API endpoints.

This module provides assignment endpoints:
- GET / - Teacher: all assignments across own classes
- GET /{assignment_id} - Get assignment (students: published and enrolled)
- PUT /{assignment_id} - Partial update
- DELETE /{assignment_id} - Delete with its submissions and grades
- PATCH /{assignment_id}/publish - Publish or unpublish
- PATCH /{assignment_id}/unit - Move to another unit
- GET /{assignment_id}/missing - Enrolled students who have not handed in

Submission endpoints:
- GET /{assignment_id}/submissions - Teacher: handed-in submissions; student: own
- POST /{assignment_id}/submissions - Student: save draft or hand in

Assignments are created under their class (POST /classes/{class_id}/assignments).
"""

import logging

from fastapi import APIRouter, status

from src.api.dependencies import DB, AuthenticatedUser, PostCommitNotifier, StudentUser, TeacherUser
from src.api.errors import to_http_exception
from src.domains.assignment import AssignmentService
from src.domains.errors import ClassroomError
from src.domains.submission import SubmissionService
from src.models.assignment import (
    AssignmentResponse,
    AssignmentUpdateRequest,
    MissingSubmissionResponse,
    PublishRequest,
    PublishResponse,
    UnitReassignRequest,
)
from src.models.submission import SubmissionResponse, SubmissionUpsertRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=list[AssignmentResponse],
    summary="List teacher's assignments",
    description="Every assignment across the calling teacher's classes, published or not.",
)
async def list_teacher_assignments(
    current_user: TeacherUser,
    db: DB,
) -> list[AssignmentResponse]:
    """List the teacher's assignments."""
    return await AssignmentService(db).list_by_teacher(current_user.id)


@router.get(
    "/{assignment_id}",
    response_model=AssignmentResponse,
    summary="Get assignment",
)
async def get_assignment(
    assignment_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> AssignmentResponse:
    """Get an assignment.

    Teachers must own the class. Students must be enrolled in the active
    class and the assignment must be published.
    """
    service = AssignmentService(db)
    try:
        if current_user.is_teacher:
            return await service.get_owned(assignment_id, current_user.id)
        return await service.get_for_student(assignment_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.put(
    "/{assignment_id}",
    response_model=AssignmentResponse,
    summary="Update assignment",
    description="Only the fields present in the body are changed.",
)
async def update_assignment(
    assignment_id: int,
    data: AssignmentUpdateRequest,
    current_user: TeacherUser,
    db: DB,
) -> AssignmentResponse:
    """Update an assignment."""
    try:
        return await AssignmentService(db).update(assignment_id, data, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.delete(
    "/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete assignment",
)
async def delete_assignment(
    assignment_id: int,
    current_user: TeacherUser,
    db: DB,
) -> None:
    """Delete an assignment with its submissions, grades and comments."""
    try:
        await AssignmentService(db).delete(assignment_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.patch(
    "/{assignment_id}/publish",
    response_model=PublishResponse,
    summary="Publish or unpublish assignment",
    description="Publishing requires an active class and notifies enrolled students. "
    "Repeating the current state changes nothing.",
)
async def set_published(
    assignment_id: int,
    data: PublishRequest,
    current_user: TeacherUser,
    db: DB,
    notifier: PostCommitNotifier,
) -> PublishResponse:
    """Publish or unpublish an assignment.

    Raises:
        HTTPException: 400 when publishing into an inactive class.
    """
    try:
        return await AssignmentService(db, notifier).set_published(
            assignment_id,
            data.is_published,
            current_user.id,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.patch(
    "/{assignment_id}/unit",
    response_model=AssignmentResponse,
    summary="Move assignment to unit",
    description="A null unit_id removes the assignment from its unit.",
)
async def reassign_unit(
    assignment_id: int,
    data: UnitReassignRequest,
    current_user: TeacherUser,
    db: DB,
) -> AssignmentResponse:
    """Move an assignment to another unit of the same class."""
    try:
        return await AssignmentService(db).reassign_unit(
            assignment_id,
            data.unit_id,
            current_user.id,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.get(
    "/{assignment_id}/missing",
    response_model=list[MissingSubmissionResponse],
    summary="List missing submissions",
    description="Enrolled students without a handed-in submission, with days overdue.",
)
async def get_missing_submissions(
    assignment_id: int,
    current_user: TeacherUser,
    db: DB,
) -> list[MissingSubmissionResponse]:
    """List students who have not handed in the assignment."""
    try:
        return await AssignmentService(db).get_missing_submissions(assignment_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


# =============================================================================
# Submissions
# =============================================================================


@router.get(
    "/{assignment_id}/submissions",
    response_model=list[SubmissionResponse],
    summary="List assignment submissions",
    description="Teachers get all handed-in submissions; students get their own.",
)
async def list_assignment_submissions(
    assignment_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[SubmissionResponse]:
    """List submissions for an assignment."""
    try:
        if current_user.is_teacher:
            await AssignmentService(db).get_owned(assignment_id, current_user.id)
            return await SubmissionService(db).list_by_assignment(assignment_id)

        await AssignmentService(db).get_for_student(assignment_id, current_user.id)
        own = await SubmissionService(db).get_by_assignment_and_student(
            assignment_id,
            current_user.id,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e

    return [own] if own else []


@router.post(
    "/{assignment_id}/submissions",
    response_model=SubmissionResponse,
    summary="Save or hand in submission",
    description="Creates the caller's submission on first call and updates it afterwards. "
    "Handing in notifies the class teacher.",
)
async def upsert_submission(
    assignment_id: int,
    data: SubmissionUpsertRequest,
    current_user: StudentUser,
    db: DB,
    notifier: PostCommitNotifier,
) -> SubmissionResponse:
    """Save a draft or hand in a submission.

    Raises:
        HTTPException: 403 if not enrolled, 400 if unpublished or empty,
            409 if already graded.
    """
    try:
        return await SubmissionService(db, notifier).upsert_submission(
            assignment_id,
            current_user.id,
            data,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e
