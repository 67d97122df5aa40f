# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification payload builders for classroom events."""

from collections.abc import Iterable

from src.infrastructure.notifications.channels.base import NotificationPayload
from src.models.enums import NotificationType


def new_assignment_payloads(
    student_ids: Iterable[int],
    assignment_id: int,
    assignment_title: str,
) -> list[NotificationPayload]:
    """One notice per enrolled student when an assignment is published."""
    return [
        NotificationPayload(
            notification_type=NotificationType.NEW_ASSIGNMENT,
            recipient_id=student_id,
            title="New Assignment Available",
            message=f'A new assignment "{assignment_title}" has been published in your class.',
            assignment_id=assignment_id,
        )
        for student_id in student_ids
    ]


def submission_received_payload(
    teacher_id: int,
    student_first_name: str,
    student_last_name: str,
    assignment_id: int,
    assignment_title: str,
    submission_id: int,
) -> NotificationPayload:
    """Notice to the owning teacher when a student hands in work."""
    return NotificationPayload(
        notification_type=NotificationType.SUBMISSION_RECEIVED,
        recipient_id=teacher_id,
        title="New Submission Received",
        message=f'{student_first_name} {student_last_name} has submitted "{assignment_title}".',
        assignment_id=assignment_id,
        submission_id=submission_id,
    )


def assignment_graded_payload(
    student_id: int,
    assignment_id: int,
    assignment_title: str,
    submission_id: int,
    score: int,
    max_score: int,
) -> NotificationPayload:
    """Notice to the student when their submission is graded."""
    return NotificationPayload(
        notification_type=NotificationType.ASSIGNMENT_GRADED,
        recipient_id=student_id,
        title="Assignment Graded",
        message=(
            f'Your assignment "{assignment_title}" has been graded. '
            f"Score: {score}/{max_score}"
        ),
        assignment_id=assignment_id,
        submission_id=submission_id,
    )
