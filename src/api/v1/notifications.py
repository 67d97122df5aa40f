# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification API endpoints.

This module provides endpoints for the caller's own notifications:
- GET / - List notifications with the unread count
- GET /count - Unread count
- PATCH /{notification_id}/read - Mark one notification read
- POST /mark-read - Mark all notifications read
"""

import logging

from fastapi import APIRouter, Query

from src.api.dependencies import DB, AuthenticatedUser
from src.api.errors import to_http_exception
from src.domains.errors import ClassroomError
from src.domains.notification import DEFAULT_LIST_LIMIT, NotificationService
from src.models.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
)
async def list_notifications(
    current_user: AuthenticatedUser,
    db: DB,
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=200),
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    service = NotificationService(db)
    items = await service.list_notifications(
        current_user.id,
        unread_only=unread_only,
        limit=limit,
    )
    return NotificationListResponse(
        items=items,
        unread_count=await service.unread_count(current_user.id),
    )


@router.get(
    "/count",
    response_model=UnreadCountResponse,
    summary="Unread notification count",
)
async def unread_count(
    current_user: AuthenticatedUser,
    db: DB,
) -> UnreadCountResponse:
    """Count the caller's unread notifications."""
    return UnreadCountResponse(count=await NotificationService(db).unread_count(current_user.id))


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark notification read",
)
async def mark_read(
    notification_id: int,
    current_user: AuthenticatedUser,
    db: DB,
) -> NotificationResponse:
    """Mark one of the caller's notifications read."""
    try:
        return await NotificationService(db).mark_read(notification_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.post(
    "/mark-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications read",
)
async def mark_all_read(
    current_user: AuthenticatedUser,
    db: DB,
) -> MarkAllReadResponse:
    """Mark every unread notification of the caller read."""
    updated = await NotificationService(db).mark_all_read(current_user.id)
    return MarkAllReadResponse(updated=updated)
