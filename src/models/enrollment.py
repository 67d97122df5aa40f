# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.models.class_ import ClassResponse


class EnrollStudentRequest(BaseModel):
    """Request model for enrolling a student in a class."""

    student_id: int = Field(..., gt=0)


class EnrollmentResponse(BaseModel):
    """Response model for an enrollment with student details."""

    id: int
    class_id: int
    student_id: int
    student_name: str
    first_name: str
    last_name: str
    email: str
    enrolled_at: datetime


class EnrollmentListResponse(BaseModel):
    """Response model for a class roster."""

    items: list[EnrollmentResponse]
    total: int


class StudentClassResponse(ClassResponse):
    """A class as seen by an enrolled student."""

    enrollment_id: int
    enrolled_at: datetime


class StudentClassListResponse(BaseModel):
    """Response model for the classes a student sees."""

    items: list[StudentClassResponse]
    total: int


class StudentResponse(BaseModel):
    """A student account in the teacher's student directory."""

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime


class StudentListResponse(BaseModel):
    """Response model for the student directory."""

    items: list[StudentResponse]
    total: int
