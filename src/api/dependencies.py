# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated users by role
- Get the post-commit notifier

Example:
    @router.get("/classes")
    async def list_classes(
        db: DB,
        current_user: AuthenticatedUser,
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import CurrentUser, get_current_user
from src.core.config import get_settings
from src.infrastructure.database.connection import (
    close_database,
    create_schema,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.notifications import BackgroundNotifier, NotificationDispatcher, Notifier

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database connection pool.

    SQLite databases get their schema created on startup; PostgreSQL
    deployments are migrated with alembic.
    """
    settings = get_settings()
    await init_database(settings)

    if settings.db.is_sqlite:
        await create_schema()
        logger.info("SQLite schema ensured")


async def close_db() -> None:
    """Close the database connection pool."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for one request.

    Yields:
        AsyncSession for the classroom database.
    """
    async with get_session() as session:
        yield session


def get_notifier(background_tasks: BackgroundTasks) -> Notifier:
    """Get a notifier that writes notifications after the response.

    Args:
        background_tasks: Request-scoped background tasks.

    Returns:
        BackgroundNotifier backed by a dispatcher with its own sessions.
    """
    dispatcher = NotificationDispatcher(
        get_sessionmaker(),
        batch_size=get_settings().notification_batch_size,
    )
    return BackgroundNotifier(dispatcher, background_tasks)


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_teacher(request: Request) -> CurrentUser:
    """Require teacher user.

    Raises:
        HTTPException: If not authenticated or not a teacher.
    """
    user = require_auth(request)
    if not user.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher access required",
        )
    return user


def require_student(request: Request) -> CurrentUser:
    """Require student user.

    Raises:
        HTTPException: If not authenticated or not a student.
    """
    user = require_auth(request)
    if not user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required",
        )
    return user


# =========================================================================
# Type Aliases for Common Dependencies
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
PostCommitNotifier = Annotated[Notifier, Depends(get_notifier)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
TeacherUser = Annotated[CurrentUser, Depends(require_teacher)]
StudentUser = Annotated[CurrentUser, Depends(require_student)]
