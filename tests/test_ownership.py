"""
tests/test_ownership.py -- Ownership gate (core/ownership.py) via CameraStore.

Two owners, A and B, each with one camera. Every read and write A makes must
leave B's camera untouched and invisible, and B's camera id must behave
exactly like an id that does not exist.
"""

from __future__ import annotations

import pytest
from sqlalchemy import Column, MetaData, String, Table

from cameras.models import Alert, Camera
from cameras.store import CameraStore
from core.ownership import OwnedTable

MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture
def two_owners(camera_store: CameraStore):
    a = camera_store.for_owner("owner-a")
    b = camera_store.for_owner("owner-b")
    a_cam = a.create(Camera(name="A porch", rtsp_url="rtsp://a/1"))
    b_cam = b.create(Camera(name="B garage", rtsp_url="rtsp://b/1"))
    return camera_store, a, b, a_cam, b_cam


class TestScopedReads:
    def test_list_only_returns_own(self, two_owners) -> None:
        _, a, b, a_cam, b_cam = two_owners
        assert [c.id for c in a.list_all()] == [a_cam]
        assert [c.id for c in b.list_all()] == [b_cam]

    def test_get_other_owner_is_none(self, two_owners) -> None:
        _, a, _, _, b_cam = two_owners
        assert a.get(b_cam) is None
        assert a.get(MISSING_ID) is None

    def test_alerts_of_other_owner_camera_are_hidden(self, two_owners) -> None:
        store, a, b, _, b_cam = two_owners
        store.record_alert(Alert(camera_id=b_cam, confidence=0.9))
        assert a.alerts(b_cam) is None
        assert a.alerts(MISSING_ID) is None
        assert len(b.alerts(b_cam)) == 1


class TestScopedWrites:
    def test_create_sets_owner_from_scope(self, camera_store: CameraStore) -> None:
        scope = camera_store.for_owner("owner-a")
        camera_id = scope.create(Camera(name="x", rtsp_url="rtsp://x", owner_id="owner-b"))
        assert scope.get(camera_id).owner_id == "owner-a"
        assert camera_store.for_owner("owner-b").get(camera_id) is None

    def test_update_other_owner_same_as_missing(self, two_owners) -> None:
        _, a, b, _, b_cam = two_owners
        assert a.update(b_cam, name="hijacked") is False
        assert a.update(MISSING_ID, name="hijacked") is False
        assert b.get(b_cam).name == "B garage"

    def test_delete_other_owner_same_as_missing(self, two_owners) -> None:
        _, a, b, _, b_cam = two_owners
        assert a.delete(b_cam) is False
        assert a.delete(MISSING_ID) is False
        assert b.get(b_cam) is not None

    def test_owner_can_update_and_delete(self, two_owners) -> None:
        _, a, _, a_cam, _ = two_owners
        assert a.update(a_cam, name="A front", is_enabled=False) is True
        cam = a.get(a_cam)
        assert cam.name == "A front"
        assert cam.is_enabled is False
        assert a.delete(a_cam) is True
        assert a.get(a_cam) is None

    def test_delete_cascades_alerts(self, two_owners) -> None:
        store, a, _, a_cam, _ = two_owners
        alert_id = store.record_alert(Alert(camera_id=a_cam, confidence=0.5))
        assert a.delete(a_cam) is True
        assert store.get_alert(alert_id) is None

    def test_update_rejects_unknown_fields(self, two_owners) -> None:
        _, a, _, a_cam, _ = two_owners
        with pytest.raises(ValueError):
            a.update(a_cam, owner_id="owner-b")


class TestOwnedTable:
    def test_insert_ignores_supplied_id_and_owner(self, camera_store: CameraStore) -> None:
        owned = OwnedTable(camera_store.engine, camera_store._owned.table)
        scope = owned.scope("owner-a")
        new_id = scope.insert(
            {"id": "chosen", "owner_id": "owner-b", "name": "n", "rtsp_url": "r", "created_at": "2024-01-01"}
        )
        assert new_id != "chosen"
        assert scope.select_one(new_id).owner_id == "owner-a"

    def test_update_cannot_reassign_owner(self, two_owners) -> None:
        store, a, b, a_cam, _ = two_owners
        scope = store._owned.scope("owner-a")
        assert scope.update(a_cam, {"owner_id": "owner-b"}) is True
        assert a.get(a_cam) is not None
        assert b.get(a_cam) is None

    def test_table_without_owner_column_is_rejected(self) -> None:
        table = Table("plain", MetaData(), Column("id", String, primary_key=True))
        with pytest.raises(ValueError):
            OwnedTable(None, table)

    def test_empty_owner_is_rejected(self, camera_store: CameraStore) -> None:
        with pytest.raises(ValueError):
            camera_store.for_owner("")


def test_recent_alerts_newest_first_and_limited(camera_store: CameraStore) -> None:
    scope = camera_store.for_owner("owner-a")
    cam = scope.create(Camera(name="c", rtsp_url="rtsp://c"))
    for day in range(1, 8):
        camera_store.record_alert(Alert(camera_id=cam, confidence=0.1 * day, timestamp=f"2024-01-0{day}T00:00:00+00:00"))
    recent = scope.alerts(cam, limit=5)
    assert [a.timestamp[:10] for a in recent] == [f"2024-01-0{d}" for d in range(7, 2, -1)]


def test_record_alert_for_unknown_camera(camera_store: CameraStore) -> None:
    assert camera_store.record_alert(Alert(camera_id=MISSING_ID, confidence=0.5)) is None
