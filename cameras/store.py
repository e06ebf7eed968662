"""
cameras/store.py -- SQLAlchemy-backed persistence for cameras and alerts.

Pattern: Repository + Data Mapper, with every user-facing read and write
going through the ownership gate in core/ownership.py.

Route handlers never get an unscoped camera query. They call
CameraStore.for_owner(identity.user_id) and work with the returned
CameraScope, whose methods can only see that owner's cameras. A camera that
belongs to someone else looks exactly like one that does not exist.

The one unscoped write is record_alert(), used by the detection worker. The
worker authenticates with its own shared key rather than a user token, and
can only append alerts -- it cannot read anything back.

Usage:
    store = CameraStore()
    cameras = store.for_owner(identity.user_id)
    camera_id = cameras.create(Camera(name="Front door", rtsp_url="rtsp://..."))
    cameras.update(camera_id, is_enabled=False)   # True
    store.for_owner(other_id).delete(camera_id)    # False
    store.close()
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, MetaData, String, Table, Text, select

from cameras.models import Alert, Camera
from core.config import get_settings
from core.database import create_db_engine, ping
from core.ownership import OwnedTable, OwnerScope

# Number of alerts embedded in each camera of a list response.
RECENT_ALERTS = 5

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_cameras = Table(
    "cameras",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("owner_id", String(36), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("rtsp_url", Text, nullable=False),
    Column("location", String(255)),
    Column("is_enabled", Boolean, nullable=False, default=True),
    Column("created_at", String(32), nullable=False),
)

_alerts = Table(
    "alerts",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("camera_id", String(36), ForeignKey("cameras.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("image_url", Text),
    Column("confidence", Float, nullable=False),
    Column("face_count", Integer),
    Column("timestamp", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CameraStore:
    """Repository for cameras and their alerts."""

    def __init__(self, db_url: Optional[str] = None) -> None:
        self.engine = create_db_engine(db_url or get_settings().database_url)
        metadata.create_all(self.engine)
        self._owned = OwnedTable(self.engine, _cameras)

    def for_owner(self, owner_id: str) -> CameraScope:
        """Return the camera operations available to one user."""
        return CameraScope(self, self._owned.scope(owner_id))

    def record_alert(self, alert: Alert) -> Optional[str]:
        """Insert an alert for any existing camera. Returns None if the camera does not exist."""
        with self.engine.connect() as conn:
            exists = conn.execute(select(_cameras.c.id).where(_cameras.c.id == alert.camera_id)).fetchone()
            if exists is None:
                return None
            alert_id = str(uuid.uuid4())
            conn.execute(
                _alerts.insert().values(
                    id=alert_id,
                    camera_id=alert.camera_id,
                    image_url=alert.image_url,
                    confidence=alert.confidence,
                    face_count=alert.face_count,
                    timestamp=alert.timestamp or _now_iso(),
                )
            )
            conn.commit()
        return alert_id

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self.engine.connect() as conn:
            row = conn.execute(_alerts.select().where(_alerts.c.id == alert_id)).fetchone()
        return _row_to_alert(row) if row is not None else None

    def _alerts_for(self, camera_id: str, limit: Optional[int]) -> list[Alert]:
        stmt = _alerts.select().where(_alerts.c.camera_id == camera_id).order_by(_alerts.c.timestamp.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_alert(r) for r in rows]

    def ping(self) -> bool:
        return ping(self.engine)

    def close(self) -> None:
        self.engine.dispose()


class CameraScope:
    """Camera operations for a single owner. Obtain via CameraStore.for_owner()."""

    def __init__(self, store: CameraStore, scope: OwnerScope) -> None:
        self._store = store
        self._scope = scope

    @property
    def owner_id(self) -> str:
        return self._scope.owner_id

    def create(self, camera: Camera) -> str:
        """Insert a camera owned by this scope. camera.owner_id is ignored."""
        return self._scope.insert(
            {
                "name": camera.name,
                "rtsp_url": camera.rtsp_url,
                "location": camera.location,
                "is_enabled": camera.is_enabled,
                "created_at": _now_iso(),
            }
        )

    def list_all(self) -> list[Camera]:
        rows = self._scope.select_all(order_by=[_cameras.c.created_at, _cameras.c.id])
        return [_row_to_camera(r) for r in rows]

    def get(self, camera_id: str) -> Optional[Camera]:
        row = self._scope.select_one(camera_id)
        return _row_to_camera(row) if row is not None else None

    def update(self, camera_id: str, **fields) -> bool:
        """Update name, rtsp_url, location and/or is_enabled.

        Returns False if the camera does not exist or is not owned.
        """
        allowed = {"name", "rtsp_url", "location", "is_enabled"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown camera fields: {sorted(unknown)!r}")
        return self._scope.update(camera_id, fields)

    def delete(self, camera_id: str) -> bool:
        """Delete a camera and its alerts. Returns False if not found or not owned."""
        return self._scope.delete(camera_id)

    def alerts(self, camera_id: str, limit: Optional[int] = None) -> Optional[list[Alert]]:
        """Return a camera's alerts, newest first, or None if the camera is not owned."""
        if not self._scope.owns(camera_id):
            return None
        return self._store._alerts_for(camera_id, limit)


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_camera(row) -> Camera:
    return Camera(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        rtsp_url=row.rtsp_url,
        location=row.location,
        is_enabled=bool(row.is_enabled),
        created_at=row.created_at,
    )


def _row_to_alert(row) -> Alert:
    return Alert(
        id=row.id,
        camera_id=row.camera_id,
        image_url=row.image_url,
        confidence=row.confidence,
        face_count=row.face_count,
        timestamp=row.timestamp,
    )
