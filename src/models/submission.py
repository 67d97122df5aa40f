# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission, grade and comment request/response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from src.models.enums import CommentTag, SubmissionStatus


class SubmissionUpsertRequest(BaseModel):
    """Request model for saving a draft or handing in work.

    Attributes:
        written_response: Free-text answer.
        map_data: Opaque map payload for GIS assignments.
        attachments: Opaque file references.
        status: draft or submitted; grading sets graded.
    """

    written_response: str | None = None
    map_data: dict[str, Any] | None = None
    attachments: list[str] = Field(default_factory=list)
    status: SubmissionStatus = SubmissionStatus.DRAFT


class GradeCreateRequest(BaseModel):
    """Request model for grading a submission."""

    score: int = Field(..., ge=0)
    max_score: int = Field(..., gt=0)
    feedback: str | None = Field(default=None, max_length=20000)
    rubric: dict[str, float] | None = None

    @model_validator(mode="after")
    def check_score_range(self) -> "GradeCreateRequest":
        """Reject scores above the maximum."""
        if self.score > self.max_score:
            raise ValueError("score must not exceed max_score")
        return self


class GradeResponse(BaseModel):
    """Response model for a grade."""

    id: int
    submission_id: int
    score: int
    max_score: int
    feedback: str | None
    rubric: dict[str, Any] | None
    graded_by: int
    graded_at: datetime


class SubmissionResponse(BaseModel):
    """A submission joined with its grade, when one exists."""

    id: int
    assignment_id: int
    student_id: int
    written_response: str | None
    map_data: dict[str, Any] | None
    attachments: list[str]
    status: SubmissionStatus
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime
    grade: GradeResponse | None = None
    student_name: str | None = None
    assignment_title: str | None = None


class CommentCreateRequest(BaseModel):
    """Request model for posting a comment."""

    content: str = Field(..., min_length=1, max_length=5000)

    @model_validator(mode="after")
    def check_not_blank(self) -> "CommentCreateRequest":
        """Reject whitespace-only comments."""
        if not self.content.strip():
            raise ValueError("content must not be blank")
        return self


class ClassCommentCreateRequest(CommentCreateRequest):
    """Request model for posting on a class discussion board."""

    tag: CommentTag = CommentTag.DISCUSSION


class CommentResponse(BaseModel):
    """Response model for a class or submission comment."""

    id: int
    user_id: int
    author_name: str
    author_role: str
    content: str
    tag: CommentTag | None = None
    created_at: datetime
