"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Flow and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(username) is the authoritative guard against duplicate accounts.
  create_user() lets IntegrityError propagate so two concurrent registrations
  of the same name cannot both succeed; there is no check-then-insert.

Layer rule: no imports from api/ or cameras/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import get_settings
from core.database import create_db_engine, ping

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    # Case-sensitive: "Alice" and "alice" are different accounts.
    Column("username", String(32), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User credentials.

    Usage:
        store = UserStore()
        user_id = store.create_user(User(username="alice", hashed_password=hash_password("secret")))
        user = store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = create_db_engine(db_url or get_settings().database_url)
        metadata.create_all(self.engine)

    def create_user(self, user: User) -> str:
        """Insert a new user and return its assigned id.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        user_id = str(uuid.uuid4())
        with self.engine.connect() as conn:
            conn.execute(
                users.insert().values(
                    id=user_id,
                    username=user.username,
                    hashed_password=user.hashed_password,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        return user_id

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def ping(self) -> bool:
        return ping(self.engine)

    def close(self) -> None:
        self.engine.dispose()


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
