"""
core/ownership.py -- Ownership gate for per-user resource tables.

Every resource a user creates is exclusively theirs. Rather than repeating
"AND owner_id = :user_id" in each store method (and eventually forgetting it
in one), stores wrap their table in OwnedTable and do all reads and writes
through an OwnerScope. A scope is bound to one owner id at construction and
injects the ownership predicate into every statement it builds.

Rules enforced here:
  - insert() always writes the scope's owner_id. Client-supplied owner_id or
    id values are dropped.
  - select_one / update / delete filter on (id, owner_id). A row owned by
    someone else is indistinguishable from a row that does not exist: both
    yield None / False.
  - select_all only ever returns the scope owner's rows.

Usage:
    cameras = OwnedTable(engine, _cameras)
    scope = cameras.scope(identity.user_id)
    camera_id = scope.insert({"name": "Front door", ...})
    scope.delete(camera_id)        # True
    cameras.scope(other_id).delete(camera_id)  # False -- not theirs

Layer rule: core/ imports only stdlib + third-party libraries.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Table, select
from sqlalchemy.engine import Engine, Row

# Columns a caller may never set directly through a scope.
_PROTECTED_COLUMNS = frozenset({"id", "owner_id"})


class OwnedTable:
    """A table whose rows each belong to exactly one owner.

    The table must have a string primary key column named "id" and a
    non-nullable "owner_id" column.
    """

    def __init__(self, engine: Engine, table: Table) -> None:
        if "id" not in table.c or "owner_id" not in table.c:
            raise ValueError(f"Table {table.name!r} needs 'id' and 'owner_id' columns to be ownership-gated.")
        self.engine = engine
        self.table = table

    def scope(self, owner_id: str) -> OwnerScope:
        """Return a view of the table restricted to rows owned by owner_id."""
        if not owner_id:
            raise ValueError("owner_id is required")
        return OwnerScope(self, owner_id)


class OwnerScope:
    """All operations on an OwnedTable for a single owner."""

    def __init__(self, owned: OwnedTable, owner_id: str) -> None:
        self._engine = owned.engine
        self._table = owned.table
        self.owner_id = owner_id

    def _owned(self, resource_id: str):
        t = self._table
        return (t.c.id == resource_id) & (t.c.owner_id == self.owner_id)

    def _clean(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in values.items() if k not in _PROTECTED_COLUMNS and k in self._table.c}

    def insert(self, values: Mapping[str, Any]) -> str:
        """Insert a row owned by this scope and return its new id."""
        row = self._clean(values)
        row["id"] = str(uuid.uuid4())
        row["owner_id"] = self.owner_id
        with self._engine.connect() as conn:
            conn.execute(self._table.insert().values(**row))
            conn.commit()
        return row["id"]

    def select_all(self, order_by: Sequence | None = None) -> list[Row]:
        stmt = select(self._table).where(self._table.c.owner_id == self.owner_id)
        if order_by is not None:
            stmt = stmt.order_by(*order_by)
        with self._engine.connect() as conn:
            return list(conn.execute(stmt).fetchall())

    def select_one(self, resource_id: str) -> Row | None:
        """Return the row if it exists AND belongs to this owner, else None."""
        with self._engine.connect() as conn:
            return conn.execute(select(self._table).where(self._owned(resource_id))).fetchone()

    def owns(self, resource_id: str) -> bool:
        return self.select_one(resource_id) is not None

    def update(self, resource_id: str, values: Mapping[str, Any]) -> bool:
        """Apply values to an owned row. Returns False if not found or not owned."""
        changes = self._clean(values)
        if not changes:
            return self.owns(resource_id)
        with self._engine.connect() as conn:
            result = conn.execute(self._table.update().where(self._owned(resource_id)).values(**changes))
            conn.commit()
        return result.rowcount > 0

    def delete(self, resource_id: str) -> bool:
        """Delete an owned row. Returns False if not found or not owned."""
        with self._engine.connect() as conn:
            result = conn.execute(self._table.delete().where(self._owned(resource_id)))
            conn.commit()
        return result.rowcount > 0
