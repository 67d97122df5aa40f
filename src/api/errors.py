# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Translation of domain errors into HTTP responses.

Endpoints catch ClassroomError and re-raise the result of
to_http_exception(). The response body is always

    {"detail": {"kind": "<error kind>", "message": "<description>"}}
"""

import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from src.domains.errors import ClassroomError
from src.infrastructure.database.connection import DatabaseError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "invalid_state": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INTERNAL_MESSAGE = "An internal error occurred. Please try again later."


def error_detail(kind: str, message: str) -> dict[str, str]:
    """Build the error body shared by all endpoints."""
    return {"kind": kind, "message": message}


def to_http_exception(error: ClassroomError) -> HTTPException:
    """Map a domain error to an HTTPException.

    Internal errors never expose their message.

    Args:
        error: Domain error raised by a service.

    Returns:
        HTTPException with the status code for the error's kind.
    """
    status_code = STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    message = error.message
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Internal error: %s", error.message)
        message = INTERNAL_MESSAGE
    return HTTPException(status_code=status_code, detail=error_detail(error.kind, message))


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Return a generic 500 for storage failures that escaped a service."""
    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": error_detail("internal", INTERNAL_MESSAGE)},
    )
