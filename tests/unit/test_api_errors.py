# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for domain error to HTTP mapping."""

import pytest

from src.api.errors import INTERNAL_MESSAGE, to_http_exception
from src.domains.assignment.service import AssignmentDeletionError
from src.domains.enrollment.service import AlreadyEnrolledError
from src.domains.errors import (
    ClassroomError,
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidStateError,
    NotFoundError,
)


class TestToHttpException:
    """Tests for to_http_exception."""

    @pytest.mark.parametrize(
        ("error", "status_code", "kind"),
        [
            (NotFoundError("Class 9 not found"), 404, "not_found"),
            (ForbiddenError("Not yours"), 403, "forbidden"),
            (InvalidStateError("Still active"), 400, "invalid_state"),
            (ConflictError("Already there"), 409, "conflict"),
        ],
    )
    def test_kind_to_status(self, error, status_code, kind):
        """Test each error kind maps to its status and keeps the message."""
        exc = to_http_exception(error)

        assert exc.status_code == status_code
        assert exc.detail == {"kind": kind, "message": error.message}

    def test_internal_message_hidden(self):
        """Test internal errors do not leak storage details."""
        exc = to_http_exception(InternalError("deadlock detected on relation grades"))

        assert exc.status_code == 500
        assert exc.detail == {"kind": "internal", "message": INTERNAL_MESSAGE}

    def test_domain_subclass_uses_kind(self):
        """Test service-specific errors map through their kind."""
        assert to_http_exception(AlreadyEnrolledError("dup")).status_code == 409
        assert to_http_exception(AssignmentDeletionError("boom")).status_code == 500

    def test_default_message_from_docstring(self):
        """Test errors raised without a message still describe themselves."""
        assert NotFoundError().message == "Requested entity does not exist."
        assert ClassroomError().kind == "internal"
