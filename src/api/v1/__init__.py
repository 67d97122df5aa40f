# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    classes: Class catalog, units, roster, assignments and discussion per class.
    units: Unit update and deletion.
    assignments: Assignment lifecycle, publication and submissions.
    submissions: Submission reads, grading and feedback comments.
    students: Per-student classes, assignment board and submissions.
    notifications: In-app notification inbox.
"""

from fastapi import APIRouter

from src.api.v1 import assignments, classes, notifications, students, submissions, units

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(classes.router, prefix="/classes", tags=["Classes"])
router.include_router(units.router, prefix="/units", tags=["Units"])
router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
router.include_router(submissions.router, prefix="/submissions", tags=["Submissions"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

__all__ = ["router"]
