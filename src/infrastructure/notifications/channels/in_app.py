# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-app notification channel.

This channel creates notification records in the database that are
shown in the application's notification center.
"""

from collections.abc import Sequence

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Notification
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)
from src.utils.datetime import utc_now


class InAppChannel(BaseChannel):
    """In-app notification channel.

    Inserts rows into the notifications table. The channel only flushes;
    committing is the caller's decision.

    This channel requires a database session to be set before sending
    via set_session().
    """

    def __init__(self) -> None:
        """Initialize the in-app channel."""
        super().__init__()
        self._session: AsyncSession | None = None

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.IN_APP

    def set_session(self, session: AsyncSession) -> None:
        """Set the database session for this channel.

        Args:
            session: Async database session.
        """
        self._session = session

    async def send(self, payloads: Sequence[NotificationPayload]) -> ChannelResult:
        """Insert one notification row per payload.

        Args:
            payloads: The notification payloads.

        Returns:
            ChannelResult with the number of rows written.
        """
        if self._session is None:
            return self.create_failure_result(
                "Database session not set. Call set_session() first."
            )

        if not payloads:
            return self.create_skipped_result("No recipients")

        now = utc_now()
        rows = [
            {
                "user_id": payload.recipient_id,
                "type": payload.notification_type.value,
                "title": payload.title,
                "message": payload.message,
                "assignment_id": payload.assignment_id,
                "submission_id": payload.submission_id,
                "is_read": False,
                "created_at": now,
            }
            for payload in payloads
        ]

        try:
            await self._session.execute(insert(Notification), rows)
            await self._session.flush()
        except SQLAlchemyError as e:
            self.logger.error("Failed to write %d in-app notifications: %s", len(rows), e)
            return self.create_failure_result(str(e))

        self.logger.debug("Wrote %d in-app notifications", len(rows))
        return self.create_success_result(delivered=len(rows))
