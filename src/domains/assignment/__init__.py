# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment domain package.

This package provides assignment publication functionality including:
- Assignment CRUD within a class
- Publish/unpublish with student notifications
- Unit reassignment
- Student assignment board
- Missing-submission reporting
"""

from src.domains.assignment.missing import (
    MissingSubmissionCalculator,
    compute_days_overdue,
)
from src.domains.assignment.service import (
    AssignmentDeletionError,
    AssignmentNotFoundError,
    AssignmentNotVisibleError,
    AssignmentService,
    AssignmentServiceError,
    ClassInactiveError,
    ClassNotFoundError,
    NotAssignmentOwnerError,
    UnitClassMismatchError,
    UnitNotFoundError,
)

__all__ = [
    "AssignmentService",
    "MissingSubmissionCalculator",
    "compute_days_overdue",
    "AssignmentServiceError",
    "AssignmentNotFoundError",
    "AssignmentNotVisibleError",
    "ClassNotFoundError",
    "UnitNotFoundError",
    "NotAssignmentOwnerError",
    "ClassInactiveError",
    "UnitClassMismatchError",
    "AssignmentDeletionError",
]
