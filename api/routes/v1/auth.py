"""
api/routes/v1/auth.py -- Registration, login, and identity endpoints.

Routes:
  POST /api/v1/auth/register   -- create account; returns token + user (201)
  POST /api/v1/auth/login      -- password login; returns token + user (200)
  GET  /api/v1/auth/me         -- identity carried by the bearer token

Security:
  POST /login is rate-limited per IP (Settings.login_rate_limit).
  login() in auth/flows.py equalizes timing between unknown usernames and
  wrong passwords; both produce the same 401 body.
  Cache-Control: no-store on every response that carries a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import ErrorResponse, LoginRequest, RegisterRequest, SessionResponse, UserResponse
from auth import flows
from auth.dependencies import get_current_identity
from auth.errors import AuthError
from auth.models import AuthSession, Identity
from auth.store import UserStore
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/register: public, unless SELF_REGISTRATION_ENABLED=false
# - POST /api/v1/auth/login:    public
# - GET  /api/v1/auth/me:       requires bearer token (get_current_identity)
router = APIRouter()

_settings = get_settings()


def _session_response(session: AuthSession, status_code: int) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=SessionResponse(
            token=session.token,
            user=UserResponse(id=session.user.id, username=session.user.username),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=SessionResponse, status_code=201)
@limiter.limit("5/minute")
async def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and return a session token for it.

    409 username_taken if the username already exists. Two concurrent
    registrations of the same name are resolved by the database UNIQUE
    constraint: exactly one gets 201.
    """
    if not get_settings().self_registration_enabled:
        raise HTTPException(
            status_code=403,
            detail=ErrorResponse(error="registration_disabled", message="Self-registration is disabled.").model_dump(),
        )
    user_store: UserStore = request.app.state.user_store
    result = await flows.register(user_store, body.username, body.password)
    if isinstance(result, AuthError):
        raise HTTPException(
            status_code=409,
            detail=ErrorResponse(error=result.value, message="Username is already taken.").model_dump(),
        )
    return _session_response(result, 201)


@router.post("/auth/login", response_model=SessionResponse)
@limiter.limit(_settings.login_rate_limit)
async def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password and return a new session token.

    Unknown username and wrong password return the identical 401 body.
    """
    user_store: UserStore = request.app.state.user_store
    result = await flows.login(user_store, body.username, body.password)
    if isinstance(result, AuthError):
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(error=result.value, message="Invalid username or password.").model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp
    return _session_response(result, 200)


@router.get("/auth/me", response_model=UserResponse)
async def me(identity: Identity = Depends(get_current_identity)) -> UserResponse:
    """Return the identity carried by the caller's token."""
    return UserResponse(id=identity.user_id, username=identity.username)
