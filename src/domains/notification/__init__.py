# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification domain package.

Reading and acknowledging notifications. Writing them is the job of
src.infrastructure.notifications.
"""

from src.domains.notification.service import (
    DEFAULT_LIST_LIMIT,
    NotificationNotFoundError,
    NotificationService,
    NotificationServiceError,
    NotNotificationRecipientError,
)

__all__ = [
    "NotificationService",
    "NotificationServiceError",
    "NotificationNotFoundError",
    "NotNotificationRecipientError",
    "DEFAULT_LIST_LIMIT",
]
