# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit API endpoints.

Units are created under their class (POST /classes/{class_id}/units);
this module covers the unit itself:
- PUT /{unit_id} - Update a unit
- DELETE /{unit_id} - Delete a unit, keeping its assignments
"""

import logging

from fastapi import APIRouter, status

from src.api.dependencies import DB, TeacherUser
from src.api.errors import to_http_exception
from src.domains.class_ import ClassService
from src.domains.errors import ClassroomError
from src.models.class_ import UnitResponse, UnitUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put(
    "/{unit_id}",
    response_model=UnitResponse,
    summary="Update unit",
)
async def update_unit(
    unit_id: int,
    data: UnitUpdateRequest,
    current_user: TeacherUser,
    db: DB,
) -> UnitResponse:
    """Update a unit's title, description or order."""
    try:
        return await ClassService(db).update_unit(unit_id, data, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e


@router.delete(
    "/{unit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete unit",
    description="Assignments in the unit are kept and detached from it.",
)
async def delete_unit(
    unit_id: int,
    current_user: TeacherUser,
    db: DB,
) -> None:
    """Delete a unit."""
    try:
        await ClassService(db).delete_unit(unit_id, current_user.id)
    except ClassroomError as e:
        raise to_http_exception(e) from e
