# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database models for ClassHub.

Importing this package registers every table on Base.metadata.
"""

from src.infrastructure.database.models.assignment import Assignment
from src.infrastructure.database.models.base import Base, CreatedAtMixin, TimestampMixin
from src.infrastructure.database.models.catalog import Class, Unit
from src.infrastructure.database.models.comment import ClassComment, SubmissionComment
from src.infrastructure.database.models.enrollment import Enrollment
from src.infrastructure.database.models.notification import Notification
from src.infrastructure.database.models.submission import Grade, Submission
from src.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "User",
    "Class",
    "Unit",
    "Assignment",
    "Enrollment",
    "Submission",
    "Grade",
    "Notification",
    "ClassComment",
    "SubmissionComment",
]
