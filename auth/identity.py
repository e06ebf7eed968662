"""
auth/identity.py -- Resolve the request's Authorization header to an Identity.

Two outcomes per request:
    Unauthenticated -> Authenticated (Identity)
    Unauthenticated -> Rejected      (AuthError.MISSING_TOKEN | INVALID_TOKEN)

Every TokenError kind collapses to INVALID_TOKEN for the caller. The kind is
logged at debug level; the token itself is never logged.

This module is framework-free so it can be unit tested without a request.
auth/dependencies.py wires it into FastAPI.
"""

from __future__ import annotations

import logging

from auth.errors import AuthError, TokenError
from auth.models import Identity
from auth.tokens import verify_token

logger = logging.getLogger("skylark.auth")

_SCHEME = "bearer"


def extract_bearer(authorization: str | None) -> str | None:
    """Return the token from a "Bearer <token>" header value, or None.

    The scheme name is case-insensitive (RFC 7235); the token must be a
    single non-empty segment.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != _SCHEME:
        return None
    return parts[1]


def resolve_identity(authorization: str | None, secret: str | None = None) -> Identity | AuthError:
    token = extract_bearer(authorization)
    if token is None:
        return AuthError.MISSING_TOKEN
    result = verify_token(token, secret)
    if isinstance(result, TokenError):
        logger.debug("Rejected bearer token (%s)", result.value)
        return AuthError.INVALID_TOKEN
    return Identity(user_id=result.user_id, username=result.username)
