# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for bearer token resolution."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from pydantic import SecretStr

from src.core.config.settings import JWTSettings
from src.domains.auth import Identity, JWTSessionResolver, StaticSessionResolver
from src.models.enums import UserRole

SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def resolver():
    """Create a resolver with a known secret."""
    return JWTSessionResolver(JWTSettings(secret_key=SecretStr(SECRET)))


def _token(claims: dict, secret: str = SECRET) -> str:
    return jwt.encode(claims, secret, algorithm="HS256")


class TestJWTSessionResolver:
    """Tests for JWTSessionResolver."""

    def test_valid_teacher_token(self, resolver):
        """Test a signed token resolves to its identity."""
        identity = resolver.resolve(_token({"sub": "7", "role": "teacher"}))

        assert identity == Identity(user_id=7, role=UserRole.TEACHER)

    def test_valid_student_token(self, resolver):
        """Test student tokens resolve with the student role."""
        identity = resolver.resolve(_token({"sub": "3", "role": "student"}))

        assert identity.role == UserRole.STUDENT

    def test_expired_token(self, resolver):
        """Test expired tokens resolve to None."""
        expired = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = _token({"sub": "7", "role": "teacher", "exp": expired})

        assert resolver.resolve(token) is None

    def test_wrong_signature(self, resolver):
        """Test tokens signed with another key are rejected."""
        assert resolver.resolve(_token({"sub": "7", "role": "teacher"}, secret="other")) is None

    def test_garbage_token(self, resolver):
        """Test malformed tokens are rejected."""
        assert resolver.resolve("not-a-jwt") is None

    def test_unknown_role(self, resolver):
        """Test roles outside teacher and student are rejected."""
        assert resolver.resolve(_token({"sub": "7", "role": "admin"})) is None

    def test_missing_subject(self, resolver):
        """Test tokens without a subject are rejected."""
        assert resolver.resolve(_token({"role": "teacher"})) is None

    def test_non_numeric_subject(self, resolver):
        """Test subjects that are not user ids are rejected."""
        assert resolver.resolve(_token({"sub": "abc", "role": "teacher"})) is None


class TestStaticSessionResolver:
    """Tests for StaticSessionResolver."""

    def test_known_and_unknown_tokens(self):
        """Test only mapped tokens resolve."""
        identity = Identity(user_id=1, role=UserRole.TEACHER)
        resolver = StaticSessionResolver({"t1": identity})

        assert resolver.resolve("t1") is identity
        assert resolver.resolve("t2") is None
