# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class domain package.

This package provides class catalog functionality including:
- Class CRUD operations
- Class activation/deactivation
- Unit management
- Cascading class deletion
"""

from src.domains.class_.deletion import (
    ClassDeletionCoordinator,
    ClassStillActiveError,
    delete_submission_tree,
)
from src.domains.class_.service import (
    ClassNotFoundError,
    ClassService,
    ClassServiceError,
    ClassAccessDeniedError,
    NotClassOwnerError,
    UnitNotFoundError,
)

__all__ = [
    "ClassService",
    "ClassDeletionCoordinator",
    "delete_submission_tree",
    "ClassServiceError",
    "ClassNotFoundError",
    "UnitNotFoundError",
    "NotClassOwnerError",
    "ClassAccessDeniedError",
    "ClassStillActiveError",
]
