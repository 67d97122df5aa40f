# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enumerations shared by the database models and API schemas."""

from enum import Enum


class UserRole(str, Enum):
    """Role resolved for a caller by the identity gate."""

    TEACHER = "teacher"
    STUDENT = "student"


class Difficulty(str, Enum):
    """Class difficulty level."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class AssignmentType(str, Enum):
    """Kind of work an assignment expects."""

    TEXT = "text"
    GIS = "gis"
    MIXED = "mixed"


class SubmissionStatus(str, Enum):
    """Submission lifecycle: draft -> submitted -> graded."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    GRADED = "graded"


class NotificationType(str, Enum):
    """Event that produced a notification."""

    NEW_ASSIGNMENT = "new_assignment"
    SUBMISSION_RECEIVED = "submission_received"
    ASSIGNMENT_GRADED = "assignment_graded"


class CommentTag(str, Enum):
    """Category of a class discussion comment."""

    DISCUSSION = "discussion"
    QUESTION = "question"
    ANNOUNCEMENT = "announcement"


# Statuses that count as handed in for the missing-submission report
HANDED_IN_STATUSES = (SubmissionStatus.SUBMITTED.value, SubmissionStatus.GRADED.value)


def sql_in(enum_cls: type[Enum]) -> str:
    """Render enum values as a SQL IN list for check constraints.

    Args:
        enum_cls: Enumeration whose values are allowed.

    Returns:
        String such as "('a', 'b')".
    """
    return "(" + ", ".join(f"'{member.value}'" for member in enum_cls) + ")"
