# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification System for ClassHub.

Notifications are emitted after a primary mutation commits:
- new_assignment: to every enrolled student when an assignment is published
- submission_received: to the owning teacher when work is handed in
- assignment_graded: to the student when their submission is graded

Key Components:
- NotificationDispatcher: persists notifications in its own session
- BackgroundNotifier: defers dispatch until after the response
- emit_notifications: the catch-and-log boundary used by services

Usage:
    from src.infrastructure.notifications import (
        NotificationDispatcher,
        emit_notifications,
        new_assignment_payloads,
    )

    dispatcher = NotificationDispatcher(get_sessionmaker())
    await emit_notifications(
        dispatcher,
        new_assignment_payloads(student_ids, assignment.id, assignment.title),
    )
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    InAppChannel,
    NotificationPayload,
)
from src.infrastructure.notifications.messages import (
    assignment_graded_payload,
    new_assignment_payloads,
    submission_received_payload,
)
from src.infrastructure.notifications.service import (
    BackgroundNotifier,
    NotificationDispatcher,
    Notifier,
    emit_notifications,
)

__all__ = [
    # Dispatch
    "Notifier",
    "NotificationDispatcher",
    "BackgroundNotifier",
    "emit_notifications",
    # Payload builders
    "new_assignment_payloads",
    "submission_received_payload",
    "assignment_graded_payload",
    # Channel types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    "InAppChannel",
]
