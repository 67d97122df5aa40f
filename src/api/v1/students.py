# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student-centred API endpoints.

This module provides the teacher's student directory:
- GET / - All student accounts
- GET /{student_id} - One student account

Read endpoints about one student:
- GET /{student_id}/classes - Active classes the student is enrolled in
- GET /{student_id}/assignments - Assignment board with submission state
- GET /{student_id}/submissions - All submissions, drafts included

The directory is teacher-only. A student may only read their own data;
teachers may read any student.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import DB, AuthenticatedUser, TeacherUser
from src.api.errors import error_detail, to_http_exception
from src.api.middleware.auth import CurrentUser
from src.domains.assignment import AssignmentService
from src.domains.enrollment import EnrollmentService
from src.domains.enrollment.service import StudentNotFoundError
from src.domains.submission import SubmissionService
from src.models.assignment import StudentAssignmentResponse
from src.models.enrollment import StudentClassListResponse, StudentListResponse, StudentResponse
from src.models.submission import SubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_self_or_teacher(current_user: CurrentUser, student_id: int) -> None:
    """Allow students to read only their own records.

    Raises:
        HTTPException: 403 for another student's records.
    """
    if current_user.is_teacher or current_user.id == student_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=error_detail("forbidden", "Students can only view their own records"),
    )


@router.get(
    "",
    response_model=StudentListResponse,
    summary="List students",
    description="Student directory for finding the id to enroll.",
)
async def list_students(
    current_user: TeacherUser,
    db: DB,
) -> StudentListResponse:
    """List every student account."""
    items = await EnrollmentService(db).list_students()
    return StudentListResponse(items=items, total=len(items))


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Get student",
)
async def get_student(
    student_id: int,
    current_user: TeacherUser,
    db: DB,
) -> StudentResponse:
    """Get one student account.

    Raises:
        HTTPException: 404 if the id is unknown or not a student.
    """
    try:
        return await EnrollmentService(db).get_student(student_id)
    except StudentNotFoundError as e:
        raise to_http_exception(e) from e


@router.get(
    "/{student_id}/classes",
    response_model=StudentClassListResponse,
    summary="List student's classes",
    description="Active classes the student is enrolled in, most recent enrollment first.",
)
async def list_student_classes(
    student_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> StudentClassListResponse:
    """List a student's active classes."""
    _check_self_or_teacher(current_user, student_id)
    items = await EnrollmentService(db).list_by_student(student_id)
    return StudentClassListResponse(items=items, total=len(items))


@router.get(
    "/{student_id}/assignments",
    response_model=list[StudentAssignmentResponse],
    summary="Student assignment board",
    description="Published assignments of the student's active classes with their submission state.",
)
async def list_student_assignments(
    student_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[StudentAssignmentResponse]:
    """List a student's assignments."""
    _check_self_or_teacher(current_user, student_id)
    return await AssignmentService(db).list_for_student(student_id)


@router.get(
    "/{student_id}/submissions",
    response_model=list[SubmissionResponse],
    summary="List student's submissions",
)
async def list_student_submissions(
    student_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[SubmissionResponse]:
    """List a student's submissions, newest first."""
    _check_self_or_teacher(current_user, student_id)
    return await SubmissionService(db).list_by_student(student_id)
