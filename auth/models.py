"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and flows do
the work; these only own the shape.

Layer rule: no imports from api/ or cameras/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A stored credential.

    hashed_password is a bcrypt hash with salt and cost embedded. It never
    leaves the auth package: routes only ever see PublicUser.
    """

    username: str
    hashed_password: str
    id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class PublicUser:
    """The client-visible view of a user. Carries no credential material."""

    id: str
    username: str


@dataclass(frozen=True)
class TokenClaims:
    """The signed claim set carried inside a session token."""

    user_id: str
    username: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class Identity:
    """The authenticated principal for a single request.

    Built from verified TokenClaims by auth.identity.resolve_identity() and
    discarded when the request ends. Never persisted.
    """

    user_id: str
    username: str


@dataclass(frozen=True)
class AuthSession:
    """Result of a successful register or login."""

    token: str
    user: PublicUser
