"""
auth/flows.py -- Registration and login.

Both flows return an AuthSession on success or an AuthError member on an
expected failure. Storage failures other than a duplicate username are not
expected failures: they propagate and become a generic 500.

Timing: login always runs one bcrypt verify, against DUMMY_HASH when the
username is unknown. An unknown user and a wrong password therefore cost the
same and return the same INVALID_CREDENTIALS.

bcrypt runs through the *_async helpers, and store calls through
run_in_threadpool, so neither the hash nor the database round trip blocks the
event loop while other requests are waiting.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from auth.errors import AuthError
from auth.models import AuthSession, PublicUser, User
from auth.passwords import DUMMY_HASH, hash_password_async, verify_password_async
from auth.store import UserStore
from auth.tokens import issue_token

logger = logging.getLogger("skylark.auth")


def _session_for(user_id: str, username: str) -> AuthSession:
    return AuthSession(
        token=issue_token(user_id, username),
        user=PublicUser(id=user_id, username=username),
    )


async def register(store: UserStore, username: str, password: str) -> AuthSession | AuthError:
    """Create a credential and return a session for it.

    Uniqueness is decided by the database's UNIQUE(username) constraint. An
    IntegrityError is only reported as USERNAME_TAKEN once the username is
    confirmed to exist; any other constraint failure is re-raised.
    """
    hashed = await hash_password_async(password)
    try:
        user_id = await run_in_threadpool(store.create_user, User(username=username, hashed_password=hashed))
    except IntegrityError:
        if await run_in_threadpool(store.get_by_username, username) is not None:
            logger.info("Registration rejected: username taken")
            return AuthError.USERNAME_TAKEN
        raise
    logger.info("Registered user %s", user_id)
    return _session_for(user_id, username)


async def login(store: UserStore, username: str, password: str) -> AuthSession | AuthError:
    """Verify a username/password pair and return a fresh session."""
    user = await run_in_threadpool(store.get_by_username, username)
    if user is None:
        await verify_password_async(password, DUMMY_HASH)
        logger.info("Login failed")
        return AuthError.INVALID_CREDENTIALS
    if not await verify_password_async(password, user.hashed_password):
        logger.info("Login failed")
        return AuthError.INVALID_CREDENTIALS
    logger.info("Login succeeded for user %s", user.id)
    return _session_for(user.id, user.username)
