# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Caller identity resolution.

The service does not issue credentials. An identity provider in front
of it hands out bearer tokens, and a SessionResolver turns a token into
an Identity (user id and role). Resolvers are injected into the auth
middleware; nothing here keeps process-wide state.

Example:
    >>> resolver = JWTSessionResolver(get_settings().jwt)
    >>> identity = resolver.resolve(token)
    >>> identity.role
    'teacher'
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from jose import ExpiredSignatureError, JWTError, jwt

from src.core.config.settings import JWTSettings
from src.models.enums import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """A resolved caller.

    Attributes:
        user_id: Caller's user id.
        role: Caller's role.
    """

    user_id: int
    role: UserRole


class SessionResolver(Protocol):
    """Resolves a bearer token to an identity."""

    def resolve(self, token: str) -> Identity | None:
        """Return the caller's identity, or None when the token is not valid."""
        ...


class JWTSessionResolver:
    """Resolves signed JWT bearer tokens.

    Expects the user id in ``sub`` and the role in the configured role
    claim. Expired, malformed or unsigned tokens resolve to None.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the resolver.

        Args:
            settings: JWT verification settings.
        """
        self._settings = settings

    def resolve(self, token: str) -> Identity | None:
        try:
            claims = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            logger.info("Rejected expired token")
            return None
        except JWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            return None

        try:
            return Identity(
                user_id=int(claims["sub"]),
                role=UserRole(claims[self._settings.role_claim]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Token carries unusable claims: %s", str(e))
            return None


class StaticSessionResolver:
    """Resolves tokens from a fixed mapping.

    Useful for local development and tests where no identity provider
    is running.
    """

    def __init__(self, sessions: Mapping[str, Identity]) -> None:
        self._sessions = dict(sessions)

    def resolve(self, token: str) -> Identity | None:
        return self._sessions.get(token)
