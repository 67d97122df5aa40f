# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification dispatch for classroom events.

Notifications are a side effect of a primary mutation (publishing an
assignment, handing in work, grading). Services commit their own
transaction first and then hand payloads to a Notifier:

- NotificationDispatcher writes them immediately in a session of its
  own, so a failing notification store never touches the primary
  transaction.
- BackgroundNotifier defers the same write until after the HTTP
  response has been sent.

Failures are logged and never raised to the caller.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.infrastructure.database.models import Notification
from src.infrastructure.notifications.channels import (
    InAppChannel,
    NotificationPayload,
)
from src.models.enums import NotificationType
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


class Notifier(Protocol):
    """Anything that accepts notification payloads after a commit."""

    async def notify(self, payloads: Sequence[NotificationPayload]) -> None:
        """Accept payloads for delivery."""
        ...


class NotificationDispatcher:
    """Persists notifications in an isolated session.

    Attributes:
        batch_size: Maximum rows per insert statement.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            session_factory: Factory for the dispatcher's own sessions.
            batch_size: Maximum rows per insert statement.
        """
        self._session_factory = session_factory
        self.batch_size = batch_size

    async def notify(self, payloads: Sequence[NotificationPayload]) -> None:
        """Deliver payloads; see dispatch()."""
        await self.dispatch(payloads)

    async def dispatch(self, payloads: Sequence[NotificationPayload]) -> int:
        """Write all payloads in a transaction of their own.

        Payloads are inserted in batches and committed together. When a
        batch fails, the transaction is rolled back and every payload is
        written again in its own transaction, so one bad recipient only
        costs its own notification.

        Args:
            payloads: Notifications to persist.

        Returns:
            Number of notifications written; 0 when nothing was written.
        """
        if not payloads:
            return 0

        try:
            async with self._session_factory() as session:
                channel = InAppChannel()
                channel.set_session(session)

                delivered = 0
                for start in range(0, len(payloads), self.batch_size):
                    result = await channel.send(payloads[start:start + self.batch_size])
                    if not result.ok:
                        await session.rollback()
                        logger.warning(
                            "Notification batch failed, writing %d notifications one by one: %s",
                            len(payloads),
                            result.error_message,
                        )
                        delivered = await self._dispatch_individually(session, channel, payloads)
                        break
                    delivered += result.delivered
                else:
                    await session.commit()
        except Exception as e:
            logger.error(
                "Failed to dispatch %d notifications: %s",
                len(payloads),
                str(e),
                exc_info=True,
            )
            return 0

        logger.info(
            "Dispatched %d of %d %s notifications",
            delivered,
            len(payloads),
            payloads[0].notification_type.value,
        )
        return delivered

    async def _dispatch_individually(
        self,
        session: AsyncSession,
        channel: InAppChannel,
        payloads: Sequence[NotificationPayload],
    ) -> int:
        delivered = 0
        for payload in payloads:
            result = await channel.send([payload])
            if not result.ok:
                await session.rollback()
                logger.error(
                    "Dropped %s notification for user %s: %s",
                    payload.notification_type.value,
                    payload.recipient_id,
                    result.error_message,
                )
                continue
            await session.commit()
            delivered += 1
        return delivered

    async def create_notification(
        self,
        user_id: int,
        notification_type: NotificationType,
        title: str,
        message: str,
        assignment_id: int | None = None,
        submission_id: int | None = None,
    ) -> Notification | None:
        """Append a single notification.

        Args:
            user_id: Recipient.
            notification_type: Event type.
            title: Notification title.
            message: Notification body.
            assignment_id: Related assignment, if any.
            submission_id: Related submission, if any.

        Returns:
            The stored notification, or None when the write failed.
        """
        try:
            async with self._session_factory() as session:
                notification = Notification(
                    user_id=user_id,
                    type=notification_type.value,
                    title=title,
                    message=message,
                    assignment_id=assignment_id,
                    submission_id=submission_id,
                    is_read=False,
                    created_at=utc_now(),
                )
                session.add(notification)
                await session.commit()
                await session.refresh(notification)
                return notification
        except Exception as e:
            logger.error(
                "Failed to create %s notification for user %s: %s",
                notification_type.value,
                user_id,
                str(e),
                exc_info=True,
            )
            return None


class BackgroundNotifier:
    """Defers dispatch to FastAPI background tasks.

    The tasks run after the response is sent, so a slow notification
    store cannot delay the request that triggered it.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        background_tasks: BackgroundTasks,
    ) -> None:
        self._dispatcher = dispatcher
        self._background_tasks = background_tasks

    async def notify(self, payloads: Sequence[NotificationPayload]) -> None:
        if payloads:
            self._background_tasks.add_task(self._dispatcher.dispatch, list(payloads))


async def emit_notifications(
    notifier: Notifier | None,
    payloads: Sequence[NotificationPayload],
) -> int:
    """Hand payloads to a notifier without letting failures escape.

    Called by services after their primary transaction has committed.

    Args:
        notifier: Target notifier; None disables notifications.
        payloads: Notifications to emit.

    Returns:
        Number of payloads handed over.
    """
    if notifier is None or not payloads:
        return 0

    try:
        await notifier.notify(payloads)
    except Exception as e:
        logger.error(
            "Notification emission failed for %d payloads: %s",
            len(payloads),
            str(e),
            exc_info=True,
        )
        return 0
    return len(payloads)
