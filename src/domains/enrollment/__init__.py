# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides student enrollment management functionality including:
- Student enrollment in classes
- Unenrollment
- Membership checks for other domains
"""

from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    ClassNotFoundError,
    EnrollmentService,
    EnrollmentServiceError,
    InvalidStudentTypeError,
    NotEnrolledError,
    StudentNotFoundError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentServiceError",
    "ClassNotFoundError",
    "StudentNotFoundError",
    "AlreadyEnrolledError",
    "NotEnrolledError",
    "InvalidStudentTypeError",
]
