# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base classes for notification channels.

This module defines the abstract base class and shared types for
notification channels. A channel delivers a batch of payloads through
one medium; the in-app channel persists them as notification rows.

Channel implementations must be async and report failures through
ChannelResult instead of raising.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.models.enums import NotificationType
from src.utils.datetime import utc_now


class ChannelType(str, Enum):
    """Available notification channel types."""

    IN_APP = "in_app"


class DeliveryStatus(str, Enum):
    """Delivery status for a channel."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class NotificationPayload:
    """Everything needed to deliver one notification to one user.

    Attributes:
        notification_type: Event that produced the notification.
        recipient_id: User ID of the recipient.
        title: Notification title.
        message: Notification message body.
        assignment_id: Related assignment, if any.
        submission_id: Related submission, if any.
    """

    notification_type: NotificationType
    recipient_id: int
    title: str
    message: str
    assignment_id: int | None = None
    submission_id: int | None = None


@dataclass
class ChannelResult:
    """Result of a channel send operation.

    Attributes:
        channel: Which channel was used.
        status: Delivery status.
        delivered: Number of payloads delivered.
        error_message: Error message if failed.
        sent_at: When the batch was handled.
        metadata: Additional result metadata.
    """

    channel: ChannelType
    status: DeliveryStatus
    delivered: int = 0
    error_message: str | None = None
    sent_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status != DeliveryStatus.FAILED


class BaseChannel(ABC):
    """Abstract base class for notification channels."""

    def __init__(self) -> None:
        """Initialize the channel."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        ...

    @abstractmethod
    async def send(self, payloads: Sequence[NotificationPayload]) -> ChannelResult:
        """Deliver a batch of notifications through this channel.

        Args:
            payloads: The notification payloads to deliver.

        Returns:
            ChannelResult with delivery status.
        """
        ...

    def create_success_result(
        self,
        delivered: int,
        metadata: dict[str, Any] | None = None,
    ) -> ChannelResult:
        """Create a successful channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SENT,
            delivered=delivered,
            sent_at=utc_now(),
            metadata=metadata or {},
        )

    def create_failure_result(self, error_message: str) -> ChannelResult:
        """Create a failed channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.FAILED,
            error_message=error_message,
            sent_at=utc_now(),
        )

    def create_skipped_result(self, reason: str) -> ChannelResult:
        """Create a skipped channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SKIPPED,
            error_message=reason,
            sent_at=utc_now(),
        )
