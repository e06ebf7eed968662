"""
auth/errors.py -- Failure kinds returned (not raised) by the auth core.

Token verification, identity resolution, and the register/login flows return
one of these enum members in place of a success value. Callers branch with
isinstance(); nothing in the auth core throws for an expected failure.

The AuthError values double as the machine-stable reason string in API error
bodies, so they must not change once clients depend on them.

Merged categories:
  INVALID_CREDENTIALS covers unknown username AND wrong password.
  INVALID_TOKEN covers every TokenError kind.
  NOT_FOUND covers a missing resource AND one owned by someone else.
"""

from enum import Enum


class TokenError(str, Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"


class AuthError(str, Enum):
    USERNAME_TAKEN = "username_taken"
    INVALID_CREDENTIALS = "invalid_credentials"
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
