# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by all classroom domain services.

Every domain service raises its own specific exceptions (for example
``AlreadyEnrolledError``), and each of those also derives from exactly one
of the kinds below. The API layer only needs the kind to pick a status code:

- NotFoundError: an id does not resolve
- ForbiddenError: caller role or ownership mismatch
- InvalidStateError: the operation violates a lifecycle rule
- ConflictError: a uniqueness rule would be broken
- InternalError: storage or transaction failure
"""

from __future__ import annotations


class ClassroomError(Exception):
    """Base exception for classroom domain errors.

    Attributes:
        kind: Machine-readable error kind.
        message: Human-readable error description.
    """

    kind: str = "internal"

    def __init__(self, message: str = "") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.kind


class NotFoundError(ClassroomError):
    """Requested entity does not exist."""

    kind = "not_found"


class ForbiddenError(ClassroomError):
    """Caller is not allowed to perform this operation."""

    kind = "forbidden"


class InvalidStateError(ClassroomError):
    """Operation is not allowed in the entity's current state."""

    kind = "invalid_state"


class ConflictError(ClassroomError):
    """Operation would violate a uniqueness rule."""

    kind = "conflict"


class InternalError(ClassroomError):
    """Storage or transaction failure."""

    kind = "internal"
