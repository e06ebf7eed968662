"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than a passlib wrapper: passlib's wrap-bug
detection feeds bcrypt 4.x a >72 byte password, which it rejects.

Cost factor comes from Settings.bcrypt_rounds (default 10, which keeps a
verify in the tens of milliseconds on commodity hardware). The generated hash
embeds salt and cost, so stored hashes stay verifiable after the setting
changes.

bcrypt is CPU-bound and releases the GIL, so the *_async variants hand it to
Starlette's worker thread pool. Request handlers on the event loop must use
those; the sync functions are for scripts, tests, and threadpool routes.
"""

from __future__ import annotations

import bcrypt
from starlette.concurrency import run_in_threadpool

from core.config import get_settings

# bcrypt only reads the first 72 bytes of input. The API layer rejects longer
# passwords instead of letting them be truncated.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext matches the hash.

    Never raises: a malformed stored hash counts as a mismatch. Input past
    MAX_PASSWORD_BYTES never matches; no stored hash was made from one.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        return False


async def hash_password_async(plain: str) -> str:
    return await run_in_threadpool(hash_password, plain)


async def verify_password_async(plain: str, hashed: str) -> bool:
    return await run_in_threadpool(verify_password, plain, hashed)


# Verified against when the username does not exist, so an unknown user costs
# the same bcrypt work as a wrong password. Computed once at import so the
# first login is not measurably slower.
DUMMY_HASH: str = hash_password("skylark_timing_dummy")
