"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_current_identity() is the request gate for every protected route. Apply
it at router level so no handler on the router can skip it:

    router = APIRouter(dependencies=[Depends(get_current_identity)])

Handlers that need the identity declare it again as a parameter; FastAPI
caches dependency results per request, so the token is verified once.

On success the Identity is also stored on request.state.identity for
middleware and exception handlers further down the stack. On failure the
request is rejected with 401 before the handler runs.

Layer rule: auth/dependencies.py may import from fastapi because it is part
of the FastAPI dependency injection system. No imports from api/ or cameras/.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.errors import AuthError
from auth.identity import resolve_identity
from auth.models import Identity

_MESSAGES = {
    AuthError.MISSING_TOKEN: "No token provided.",
    AuthError.INVALID_TOKEN: "Invalid token.",
}


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises HTTP 401 otherwise."""
    result = resolve_identity(request.headers.get("Authorization"))
    if isinstance(result, AuthError):
        raise HTTPException(
            status_code=401,
            detail={"error": result.value, "message": _MESSAGES[result]},
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.identity = result
    return result
