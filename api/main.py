"""
api/main.py -- FastAPI application entry point for Skylark.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware  -- enforces per-route rate limits from api.limiter
  3. log_requests       -- method, path, status, latency for every request

Authentication is not middleware: protected routers declare
Depends(get_current_identity) at router level, and the public routes
(register, login, health) simply don't. Lifespan creates the stores on
startup and disposes their engines on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.v1.alerts import router as alerts_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.cameras import router as cameras_router
from auth.store import UserStore
from cameras.store import CameraStore
from core.config import get_settings

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("skylark.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create stores on startup, dispose them on shutdown."""
    logger.info("Skylark API starting up")
    app.state.user_store = UserStore()
    app.state.cameras = CameraStore()
    logger.info("Stores initialized")

    yield

    app.state.cameras.close()
    app.state.user_store.close()
    logger.info("Skylark API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Skylark API",
    description="Camera monitoring with per-user ownership of cameras and alerts.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(cameras_router, prefix="/api/v1", tags=["Cameras"])
app.include_router(alerts_router, prefix="/api/v1", tags=["Alerts"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every handler returns the same {"error": code, "message": text} envelope.
# ---------------------------------------------------------------------------


def _error(status_code: int, error: str, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
        headers=headers,
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    return _error(429, "rate_limited", "Too many requests.", headers={"Retry-After": str(retry_after)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the request body or params fail validation.

    Field locations are included; submitted values are not, so a rejected
    password is never echoed back.
    """
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    return _error(422, "validation_error", f"Request validation failed: {fields}")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPExceptions in the error envelope.

    Route handlers raise HTTPException with detail=ErrorResponse(...).model_dump().
    Anything else (e.g. Starlette's own 404/405) gets a generic http_<status> code.
    """
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail), headers=exc.headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors (storage outages and the like).

    The exception is logged server-side only; the client gets a generic body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint -- public, not rate limited
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return liveness, version, and database reachability."""
    db_ok = request.app.state.user_store.ping() and request.app.state.cameras.ping()
    return HealthResponse(
        status="healthy",
        version=VERSION,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
