# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment request/response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.models.enums import AssignmentType, SubmissionStatus


class AssignmentCreateRequest(BaseModel):
    """Request model for creating an assignment.

    Attributes:
        title: Assignment title.
        description: Short description shown in lists.
        type: Kind of work expected.
        unit_id: Optional unit of the same class.
        points: Maximum points.
        is_graded: Whether the assignment counts toward grades.
        due_date: Optional due date.
        attachments: Opaque file references.
        details: Opaque structured extras (instructions, rubric, ...).
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=10000)
    type: AssignmentType = AssignmentType.TEXT
    unit_id: int | None = None
    points: int = Field(default=100, ge=0)
    is_graded: bool = True
    due_date: datetime | None = None
    attachments: list[str] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)


class AssignmentUpdateRequest(BaseModel):
    """Request model for a partial assignment update.

    Only fields present in the request body are applied. Publication is
    changed through the publish endpoint, never here.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    type: AssignmentType | None = None
    unit_id: int | None = None
    points: int | None = Field(default=None, ge=0)
    is_graded: bool | None = None
    due_date: datetime | None = None
    attachments: list[str] | None = None
    details: dict[str, Any] | None = None
    is_active: bool | None = None


class PublishRequest(BaseModel):
    """Request model for publishing or unpublishing an assignment."""

    is_published: bool


class UnitReassignRequest(BaseModel):
    """Request model for moving an assignment to another unit (or none)."""

    unit_id: int | None = None


class AssignmentResponse(BaseModel):
    """Response model for an assignment."""

    id: int
    class_id: int
    unit_id: int | None
    title: str
    description: str
    type: AssignmentType
    points: int
    is_graded: bool
    due_date: datetime | None
    attachments: list[str]
    details: dict[str, Any]
    is_active: bool
    is_published: bool
    created_at: datetime
    updated_at: datetime


class PublishResponse(BaseModel):
    """Result of a publish toggle."""

    assignment: AssignmentResponse
    changed: bool
    notified: int = Field(default=0, description="Notifications queued for students")


class StudentAssignmentResponse(AssignmentResponse):
    """An assignment on a student's board with their own progress."""

    class_title: str
    submission_id: int | None = None
    submission_status: SubmissionStatus | None = None
    submitted_at: datetime | None = None
    score: int | None = None
    max_score: int | None = None


class MissingSubmissionResponse(BaseModel):
    """An enrolled student without a handed-in submission."""

    student_id: int
    first_name: str
    last_name: str
    email: str
    submission_status: SubmissionStatus | None = Field(
        default=None,
        description="Status of an existing draft, or null when nothing was started",
    )
    days_overdue: int | None = Field(
        default=None,
        description="Whole days past the due date; null when there is no due date",
    )
