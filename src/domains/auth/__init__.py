# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain.

Resolves bearer tokens issued by an external identity provider into a
caller identity (user id and role). Token issuance is not handled here.

Exports:
    Identity: Resolved caller.
    SessionResolver: Protocol implemented by all resolvers.
    JWTSessionResolver: Verifies signed JWTs with python-jose.
    StaticSessionResolver: Fixed token map for development and tests.
"""

from src.domains.auth.session import (
    Identity,
    JWTSessionResolver,
    SessionResolver,
    StaticSessionResolver,
)

__all__ = [
    "Identity",
    "SessionResolver",
    "JWTSessionResolver",
    "StaticSessionResolver",
]
