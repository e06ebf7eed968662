"""
tests/conftest.py -- Shared test fixtures for Skylark.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for users and cameras
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - user_store / camera_store: fresh stores for unit tests
  - api_client: TestClient backed by isolated stores
  - register_user(): helper that registers through the API and returns (token, user)

Named shared-memory SQLite URIs (not plain :memory:) are required because
TestClient runs sync route handlers in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

DEBUG, BCRYPT_ROUNDS and WORKER_API_KEY must be set before any project
import so get_settings() picks them up when it is first called.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("WORKER_API_KEY", "test-worker-key")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.store import UserStore
from cameras.store import CameraStore

WORKER_KEY = "test-worker-key"


def _make_test_stores(db_suffix: str) -> tuple[UserStore, CameraStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so tests don't share state.
    """
    auth_url = f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true"
    cameras_url = f"sqlite:///file:test_cameras_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=auth_url), CameraStore(db_url=cameras_url)


def _patch_lifespan(user_store: UserStore, cameras: CameraStore):
    """Return a lifespan that installs pre-built test stores on app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.cameras = cameras
        yield

    return test_lifespan


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store, cameras = _make_test_stores(uuid.uuid4().hex)
    cameras.close()
    yield store
    store.close()


@pytest.fixture
def camera_store() -> Generator[CameraStore, None, None]:
    users, store = _make_test_stores(uuid.uuid4().hex)
    users.close()
    yield store
    store.close()


@pytest.fixture
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient whose app uses fresh in-memory stores.

    Rate limiting is disabled here so tests can log in repeatedly; the
    rate-limit test re-enables it explicitly.
    """
    user_store, cameras = _make_test_stores(uuid.uuid4().hex)
    app.router.lifespan_context = _patch_lifespan(user_store, cameras)
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    limiter.enabled = True
    limiter.reset()
    user_store.close()
    cameras.close()


def register_user(client: TestClient, username: str, password: str = "correct-horse") -> tuple[str, dict]:
    """Register through the API and return (token, user)."""
    resp = client.post("/api/v1/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return data["token"], data["user"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
