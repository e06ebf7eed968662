"""
cameras/models.py -- Domain dataclasses for cameras and detection alerts.

Pure data containers. Ownership rules live in core/ownership.py and are
applied by cameras/store.py; nothing here enforces them.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Camera:
    """A camera stream registered by one user.

    owner_id is always the id of the user who created the record. It is set
    by the store from the authenticated identity, never from request input.

    id is None before the record is written to the database.
    """

    name: str
    rtsp_url: str
    owner_id: str = ""
    location: Optional[str] = None
    is_enabled: bool = True
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Alert:
    """A detection event the worker reported for a camera.

    Alerts have no owner column of their own: they are visible to whoever
    owns camera_id.
    """

    camera_id: str
    confidence: float
    image_url: Optional[str] = None
    face_count: Optional[int] = None
    timestamp: str = ""  # ISO 8601, defaults to insert time
    id: Optional[str] = None
