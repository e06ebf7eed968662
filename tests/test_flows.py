"""
tests/test_flows.py -- Registration and login flows (auth/flows.py).

Flows are coroutines; each test drives one with asyncio.run().
"""

from __future__ import annotations

import asyncio
import threading
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from auth import flows
from auth.errors import AuthError
from auth.models import AuthSession, TokenClaims
from auth.store import UserStore
from auth.tokens import verify_token


def _run(coro):
    return asyncio.run(coro)


class TestRegister:
    def test_register_returns_token_and_public_user(self, user_store: UserStore) -> None:
        result = _run(flows.register(user_store, "alice", "secret123"))
        assert isinstance(result, AuthSession)
        assert result.user.username == "alice"
        assert not hasattr(result.user, "hashed_password")
        claims = verify_token(result.token)
        assert isinstance(claims, TokenClaims)
        assert claims.user_id == result.user.id
        assert claims.username == "alice"

    def test_password_is_stored_hashed(self, user_store: UserStore) -> None:
        _run(flows.register(user_store, "alice", "secret123"))
        stored = user_store.get_by_username("alice")
        assert stored.hashed_password != "secret123"
        assert stored.hashed_password.startswith("$2b$")

    def test_duplicate_username_is_rejected(self, user_store: UserStore) -> None:
        first = _run(flows.register(user_store, "alice", "secret123"))
        second = _run(flows.register(user_store, "alice", "another-password"))
        assert second is AuthError.USERNAME_TAKEN
        # The first credential still works; the second password does not.
        assert isinstance(_run(flows.login(user_store, "alice", "secret123")), AuthSession)
        assert _run(flows.login(user_store, "alice", "another-password")) is AuthError.INVALID_CREDENTIALS
        assert first.user.id == user_store.get_by_username("alice").id

    def test_usernames_are_case_sensitive(self, user_store: UserStore) -> None:
        assert isinstance(_run(flows.register(user_store, "alice", "secret123")), AuthSession)
        assert isinstance(_run(flows.register(user_store, "Alice", "secret123")), AuthSession)

    def test_unrelated_integrity_error_propagates(self, user_store: UserStore) -> None:
        """Only a genuinely taken username maps to USERNAME_TAKEN."""
        with patch.object(user_store, "create_user", side_effect=IntegrityError("INSERT", {}, Exception("boom"))):
            with pytest.raises(IntegrityError):
                _run(flows.register(user_store, "alice", "secret123"))


class TestLogin:
    def test_register_then_login(self, user_store: UserStore) -> None:
        registered = _run(flows.register(user_store, "alice", "secret1"))
        logged_in = _run(flows.login(user_store, "alice", "secret1"))
        assert isinstance(logged_in, AuthSession)
        assert logged_in.token != registered.token
        assert logged_in.user == registered.user
        assert verify_token(logged_in.token).username == "alice"

    def test_wrong_password_and_unknown_user_are_identical(self, user_store: UserStore) -> None:
        _run(flows.register(user_store, "alice", "secret1"))
        wrong_password = _run(flows.login(user_store, "alice", "wrongpass"))
        unknown_user = _run(flows.login(user_store, "mallory", "secret1"))
        assert wrong_password is AuthError.INVALID_CREDENTIALS
        assert unknown_user is AuthError.INVALID_CREDENTIALS

    def test_unknown_user_still_runs_bcrypt(self, user_store: UserStore) -> None:
        with patch("auth.flows.verify_password_async", wraps=flows.verify_password_async) as spy:
            _run(flows.login(user_store, "nobody", "secret1"))
        spy.assert_called_once()


class TestEventLoop:
    """Store calls are synchronous SQLAlchemy; the flows must not run them on the loop thread."""

    def _record_threads(self, user_store: UserStore, method: str, seen: list[int]):
        real = getattr(user_store, method)

        def spy(*args):
            seen.append(threading.get_ident())
            return real(*args)

        return patch.object(user_store, method, side_effect=spy)

    def test_register_runs_store_calls_in_worker_threads(self, user_store: UserStore) -> None:
        seen: list[int] = []

        async def scenario() -> int:
            with self._record_threads(user_store, "create_user", seen):
                await flows.register(user_store, "alice", "secret1")
            return threading.get_ident()

        loop_thread = _run(scenario())
        assert seen
        assert loop_thread not in seen

    def test_login_runs_store_calls_in_worker_threads(self, user_store: UserStore) -> None:
        _run(flows.register(user_store, "alice", "secret1"))
        seen: list[int] = []

        async def scenario() -> int:
            with self._record_threads(user_store, "get_by_username", seen):
                await flows.login(user_store, "alice", "secret1")
                await flows.login(user_store, "nobody", "secret1")
            return threading.get_ident()

        loop_thread = _run(scenario())
        assert len(seen) == 2
        assert loop_thread not in seen
