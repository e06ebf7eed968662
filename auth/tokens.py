"""
auth/tokens.py -- Session token issue and verification.

Tokens are HS256 JWTs (python-jose) signed with SECRET_KEY. They are
stateless: validity is a function of signature and expiry alone, there is no
server-side session table and no revocation. Rotating SECRET_KEY invalidates
every outstanding token at once.

Payload:
    userId    opaque user id (str)
    username  username at issue time (str)
    iat, exp  integer epoch seconds
    jti       random nonce, so two tokens issued in the same second differ

Consumers ignore any other keys. A payload missing a required key, or
carrying one with the wrong type, is rejected as MALFORMED even when the
signature is valid.

verify_token() returns TokenClaims or a TokenError; it never raises for a bad
token. Classification order:
    unparseable structure                  -> MALFORMED
    signature / algorithm mismatch         -> SIGNATURE_INVALID
    valid signature, now > exp             -> EXPIRED
    valid signature, non-conforming claims -> MALFORMED

Layer rule: no imports from api/ or cameras/.
"""

from __future__ import annotations

import secrets
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from auth.errors import TokenError
from auth.models import TokenClaims
from core.config import get_settings

_ALGORITHM = "HS256"

# Registered claims this service never issues are not checked, so a token
# carrying aud, iss, sub or a foreign jti still verifies on its own claims.
_DECODE_OPTIONS = {
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


def issue_token(
    user_id: str,
    username: str,
    *,
    secret: str | None = None,
    ttl: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Encode a signed token for the given identity.

    Args:
        user_id:  Stable user id (the "userId" claim).
        username: Username copied into the claim for display.
        secret:   Signing key. Defaults to Settings.secret_key.
        ttl:      Validity window. Defaults to Settings.token_expire_seconds
                  (7 days).
        now:      Issue time. Defaults to the current UTC time; tests pass a
                  past time to mint already-expired tokens.
    """
    settings = get_settings()
    if ttl is None:
        ttl = timedelta(seconds=settings.token_expire_seconds)
    issued = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "username": username,
        "iat": int(issued.timestamp()),
        "exp": int((issued + ttl).timestamp()),
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, secret or settings.secret_key, algorithm=_ALGORITHM)


def verify_token(token: str, secret: str | None = None) -> TokenClaims | TokenError:
    """Verify a token's structure, signature, and expiry and return its claims."""
    try:
        jwt.get_unverified_claims(token)
    except JWTError:
        return TokenError.MALFORMED

    try:
        payload = jwt.decode(
            token,
            secret or get_settings().secret_key,
            algorithms=[_ALGORITHM],
            options=_DECODE_OPTIONS,
        )
    except ExpiredSignatureError:
        return TokenError.EXPIRED
    except JWTClaimsError:
        # iat, exp or nbf present but of the wrong type
        return TokenError.MALFORMED
    except JWTError:
        return TokenError.SIGNATURE_INVALID

    claims = _claims_from_payload(payload)
    if claims is None:
        return TokenError.MALFORMED
    return claims


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _claims_from_payload(payload: Mapping) -> TokenClaims | None:
    user_id = payload.get("userId")
    username = payload.get("username")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not isinstance(user_id, str) or not user_id:
        return None
    if not isinstance(username, str) or not username:
        return None
    if not _is_int(iat) or not _is_int(exp):
        return None
    return TokenClaims(
        user_id=user_id,
        username=username,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
