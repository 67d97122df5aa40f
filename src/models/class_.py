# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class and unit request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.models.enums import Difficulty


class ClassCreateRequest(BaseModel):
    """Request model for creating a class.

    Attributes:
        title: Class title.
        description: Free-text description.
        duration: Expected duration in hours.
        difficulty: Difficulty level.
        objectives: Learning objectives.
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=10000)
    duration: int = Field(default=0, ge=0)
    difficulty: Difficulty = Difficulty.BEGINNER
    objectives: list[str] = Field(default_factory=list)


class ClassUpdateRequest(BaseModel):
    """Request model for updating a class. Omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    duration: int | None = Field(default=None, ge=0)
    difficulty: Difficulty | None = None
    objectives: list[str] | None = None


class ClassActivationRequest(BaseModel):
    """Request model for toggling a class's active flag."""

    is_active: bool


class ClassResponse(BaseModel):
    """Response model for a class."""

    id: int
    title: str
    description: str
    duration: int
    difficulty: Difficulty
    objectives: list[str]
    teacher_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClassSummary(ClassResponse):
    """Class with roster and workload counts for the teacher dashboard."""

    enrollment_count: int = 0
    assignment_count: int = 0


class ClassListResponse(BaseModel):
    """Response model for a list of classes."""

    items: list[ClassSummary]
    total: int


class DeleteClassResponse(BaseModel):
    """Result of a cascading class deletion."""

    success: bool


class UnitCreateRequest(BaseModel):
    """Request model for creating a unit."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    order: int = 0


class UnitUpdateRequest(BaseModel):
    """Request model for updating a unit. Omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    order: int | None = None


class UnitResponse(BaseModel):
    """Response model for a unit."""

    id: int
    class_id: int
    title: str
    description: str | None
    order: int
    created_at: datetime
