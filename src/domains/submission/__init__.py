# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Submission domain package.

This package provides the submission and grading workflow including:
- Draft saving and handing in
- Grading with a single grade per submission
- Teacher and student submission views
"""

from src.domains.submission.service import (
    DEFAULT_RECENT_LIMIT,
    AssignmentNotFoundError,
    AssignmentNotPublishedError,
    EmptySubmissionError,
    InvalidStatusTransitionError,
    NotEnrolledError,
    SubmissionAccessDeniedError,
    SubmissionAlreadyGradedError,
    SubmissionNotFoundError,
    SubmissionNotGradableError,
    SubmissionService,
    SubmissionServiceError,
)

__all__ = [
    "SubmissionService",
    "SubmissionServiceError",
    "AssignmentNotFoundError",
    "SubmissionNotFoundError",
    "NotEnrolledError",
    "SubmissionAccessDeniedError",
    "AssignmentNotPublishedError",
    "InvalidStatusTransitionError",
    "EmptySubmissionError",
    "SubmissionNotGradableError",
    "SubmissionAlreadyGradedError",
    "DEFAULT_RECENT_LIMIT",
]
