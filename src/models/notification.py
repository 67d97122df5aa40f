# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification response models."""

from datetime import datetime

from pydantic import BaseModel

from src.models.enums import NotificationType


class NotificationResponse(BaseModel):
    """Response model for a notification."""

    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    assignment_id: int | None
    submission_id: int | None
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    """A page of notifications plus the unread total."""

    items: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    """Unread notification count."""

    count: int


class MarkAllReadResponse(BaseModel):
    """Number of notifications flipped to read."""

    updated: int
