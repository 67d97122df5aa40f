# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for reading a user's inbox.

Notifications are written by NotificationDispatcher after other
services commit. This service only reads them and flips is_read; rows
are never deleted.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError
from src.infrastructure.database.models import Notification
from src.models.enums import NotificationType
from src.models.notification import NotificationResponse

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


class NotificationServiceError(Exception):
    """Base exception for notification service errors."""

    pass


class NotificationNotFoundError(NotificationServiceError, NotFoundError):
    """Raised when notification is not found."""

    pass


class NotNotificationRecipientError(NotificationServiceError, ForbiddenError):
    """Raised when marking someone else's notification."""

    pass


class NotificationService:
    """Service for listing and acknowledging notifications.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_notifications(
        self,
        user_id: int,
        unread_only: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[NotificationResponse]:
        """List a user's notifications, newest first.

        Args:
            user_id: Recipient.
            unread_only: Only return unread notifications.
            limit: Maximum results.

        Returns:
            Notifications ordered by creation time descending.
        """
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(
            Notification.created_at.desc(),
            Notification.id.desc(),
        ).limit(limit)

        result = await self.db.execute(query)
        return [self._to_response(n) for n in result.scalars().all()]

    async def unread_count(self, user_id: int) -> int:
        """Count a user's unread notifications."""
        query = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def mark_read(self, notification_id: int, caller_id: int) -> NotificationResponse:
        """Mark one notification as read.

        Args:
            notification_id: Notification identifier.
            caller_id: Must be the recipient.

        Returns:
            The updated notification.

        Raises:
            NotificationNotFoundError: If notification not found.
            NotNotificationRecipientError: If caller is not the recipient.
        """
        query = select(Notification).where(Notification.id == notification_id)
        result = await self.db.execute(query)
        notification = result.scalar_one_or_none()

        if not notification:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        if notification.user_id != caller_id:
            raise NotNotificationRecipientError("Notification belongs to another user")

        if not notification.is_read:
            notification.is_read = True
            await self.db.commit()
            await self.db.refresh(notification)

        return self._to_response(notification)

    async def mark_all_read(self, user_id: int) -> int:
        """Mark all of a user's notifications as read.

        Returns:
            Number of notifications that changed.
        """
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        updated = result.rowcount or 0
        logger.info("Marked %d notifications read for user %s", updated, user_id)
        return updated

    def _to_response(self, notification: Notification) -> NotificationResponse:
        return NotificationResponse(
            id=notification.id,
            user_id=notification.user_id,
            type=NotificationType(notification.type),
            title=notification.title,
            message=notification.message,
            assignment_id=notification.assignment_id,
            submission_id=notification.submission_id,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )
