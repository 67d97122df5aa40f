# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class management API endpoints.

This module provides endpoints for the class catalog:
- GET / - Teacher: own classes with counts; student: active enrolled classes
- POST / - Create a new class
- GET /{class_id} - Get class details
- PUT /{class_id} - Update class
- PATCH /{class_id}/active - Activate or deactivate class
- DELETE /{class_id} - Delete an inactive class with all dependents

Unit endpoints:
- GET /{class_id}/units - List units
- POST /{class_id}/units - Create a unit

Student enrollment endpoints:
- GET /{class_id}/students - List enrolled students
- POST /{class_id}/students - Enroll a student
- DELETE /{class_id}/students/{student_id} - Unenroll a student

Assignment endpoints:
- GET /{class_id}/assignments - List assignments (students: published only)
- POST /{class_id}/assignments - Create an assignment

Discussion endpoints:
- GET /{class_id}/comments - List the class discussion board
- POST /{class_id}/comments - Post on the class discussion board

Mutations require the teacher who owns the class.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import DB, AuthenticatedUser, TeacherUser
from src.api.errors import INTERNAL_MESSAGE, error_detail, to_http_exception
from src.domains.assignment import AssignmentService
from src.domains.class_ import ClassDeletionCoordinator, ClassService
from src.domains.discussion import DiscussionService
from src.domains.enrollment import EnrollmentService
from src.domains.errors import ClassroomError
from src.models.assignment import AssignmentCreateRequest, AssignmentResponse
from src.models.class_ import (
    ClassActivationRequest,
    ClassCreateRequest,
    ClassListResponse,
    ClassResponse,
    ClassUpdateRequest,
    DeleteClassResponse,
    UnitCreateRequest,
    UnitResponse,
)
from src.models.enrollment import (
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollStudentRequest,
    StudentClassListResponse,
)
from src.models.submission import ClassCommentCreateRequest, CommentResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=ClassListResponse | StudentClassListResponse,
    summary="List classes",
    description="Teachers get their own classes with counts; students get their active classes.",
)
async def list_classes(
    current_user: AuthenticatedUser,
    db: DB,
) -> ClassListResponse | StudentClassListResponse:
    """List the caller's classes."""
    if current_user.is_teacher:
        items = await ClassService(db).list_classes_for_teacher(current_user.id)
        return ClassListResponse(items=items, total=len(items))

    student_classes = await EnrollmentService(db).list_by_student(current_user.id)
    return StudentClassListResponse(items=student_classes, total=len(student_classes))


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create class",
    description="Create a new, inactive class owned by the calling teacher.",
)
async def create_class(
    data: ClassCreateRequest,
    current_user: TeacherUser,
    db: DB,
) -> ClassResponse:
    """Create a new class.

    Args:
        data: Class creation request.
        current_user: Authenticated teacher.
        db: Database session.

    Returns:
        Created class response.
    """
    logger.info("Creating class %r by %s", data.title, current_user.id)
    return await ClassService(db).create_class(data, teacher_id=current_user.id)


@router.get(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Get class",
    description="Owning teachers and enrolled students of an active class may read it.",
)
async def get_class(
    class_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> ClassResponse:
    """Get class details."""
    try:
        return await ClassService(db).get_class_for_viewer(
            class_id,
            current_user.id,
            current_user.role,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.put(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Update class",
)
async def update_class(
    class_id: int,
    data: ClassUpdateRequest,
    current_user: TeacherUser,
    db: DB,
) -> ClassResponse:
    """Update class details."""
    try:
        return await ClassService(db).update_class(class_id, data, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.patch(
    "/{class_id}/active",
    response_model=ClassResponse,
    summary="Activate or deactivate class",
    description="Deactivation leaves published assignments published.",
)
async def set_class_active(
    class_id: int,
    data: ClassActivationRequest,
    current_user: TeacherUser,
    db: DB,
) -> ClassResponse:
    """Activate or deactivate a class."""
    try:
        return await ClassService(db).set_class_active(class_id, data.is_active, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.delete(
    "/{class_id}",
    response_model=DeleteClassResponse,
    summary="Delete class",
    description="Delete an inactive class with its units, assignments, submissions, "
    "grades, enrollments and comments in one transaction.",
)
async def delete_class(
    class_id: int,
    current_user: TeacherUser,
    db: DB,
) -> DeleteClassResponse:
    """Delete a class and everything that depends on it.

    Raises:
        HTTPException: 404 if missing, 403 if not owner, 400 if active,
            500 if the cascade was rolled back.
    """
    try:
        await ClassService(db).get_owned_class(class_id, current_user.id)
        deleted = await ClassDeletionCoordinator(db).delete_class(class_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("internal", INTERNAL_MESSAGE),
        )

    return DeleteClassResponse(success=True)


# =============================================================================
# Units
# =============================================================================


@router.get(
    "/{class_id}/units",
    response_model=list[UnitResponse],
    summary="List units",
)
async def list_units(
    class_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[UnitResponse]:
    """List the units of a class ordered by (order, id)."""
    service = ClassService(db)
    try:
        await service.get_class_for_viewer(class_id, current_user.id, current_user.role)
        return await service.list_units(class_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{class_id}/units",
    response_model=UnitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create unit",
)
async def create_unit(
    class_id: int,
    data: UnitCreateRequest,
    current_user: TeacherUser,
    db: DB,
) -> UnitResponse:
    """Create a unit in a class."""
    try:
        return await ClassService(db).create_unit(class_id, data, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


# =============================================================================
# Enrollment
# =============================================================================


@router.get(
    "/{class_id}/students",
    response_model=EnrollmentListResponse,
    summary="List enrolled students",
)
async def list_students(
    class_id: int,
    current_user: TeacherUser,
    db: DB,
) -> EnrollmentListResponse:
    """List a class roster ordered by last name, first name."""
    try:
        await ClassService(db).get_owned_class(class_id, current_user.id)
        items = await EnrollmentService(db).list_by_class(class_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e

    return EnrollmentListResponse(items=items, total=len(items))


@router.post(
    "/{class_id}/students",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
)
async def enroll_student(
    class_id: int,
    data: EnrollStudentRequest,
    current_user: TeacherUser,
    db: DB,
) -> EnrollmentResponse:
    """Enroll a student in a class.

    Raises:
        HTTPException: 409 if the student is already enrolled.
    """
    try:
        await ClassService(db).get_owned_class(class_id, current_user.id)
        return await EnrollmentService(db).enroll(data.student_id, class_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.delete(
    "/{class_id}/students/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unenroll student",
)
async def unenroll_student(
    class_id: int,
    student_id: int,
    current_user: TeacherUser,
    db: DB,
) -> None:
    """Remove a student from a class."""
    try:
        await ClassService(db).get_owned_class(class_id, current_user.id)
        await EnrollmentService(db).unenroll(student_id, class_id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


# =============================================================================
# Assignments
# =============================================================================


@router.get(
    "/{class_id}/assignments",
    response_model=list[AssignmentResponse],
    summary="List class assignments",
    description="Teachers see every assignment; students only published ones.",
)
async def list_class_assignments(
    class_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[AssignmentResponse]:
    """List assignments of a class."""
    try:
        await ClassService(db).get_class_for_viewer(class_id, current_user.id, current_user.role)
        return await AssignmentService(db).list_by_class(
            class_id,
            published_only=not current_user.is_teacher,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{class_id}/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
    description="Create an unpublished assignment in the class.",
)
async def create_assignment(
    class_id: int,
    data: AssignmentCreateRequest,
    current_user: TeacherUser,
    db: DB,
) -> AssignmentResponse:
    """Create an assignment."""
    try:
        return await AssignmentService(db).create(class_id, data, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


# =============================================================================
# Discussion
# =============================================================================


@router.get(
    "/{class_id}/comments",
    response_model=list[CommentResponse],
    summary="List class discussion",
)
async def list_class_comments(
    class_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> list[CommentResponse]:
    """List the class discussion board, oldest first."""
    try:
        return await DiscussionService(db).list_class_comments(class_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{class_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post in class discussion",
)
async def add_class_comment(
    class_id: int,
    data: ClassCommentCreateRequest,
    current_user: AuthenticatedUser,
    db: DB,
) -> CommentResponse:
    """Post on the class discussion board."""
    try:
        return await DiscussionService(db).add_class_comment(
            class_id,
            current_user.id,
            data.content,
            data.tag,
        )
    except ClassroomError as e:
        raise to_http_exception(e) from e
