"""
api/routes/v1/alerts.py -- Alert ingestion from the detection worker.

Routes:
  POST /api/v1/alerts -- record a detection event for a camera

The worker is a service, not a user, so it does not hold a session token. It
authenticates with the shared WORKER_API_KEY in the X-Worker-Key header,
compared in constant time. With no key configured, ingestion is refused.

The worker can only append. Reading alerts back goes through the
owner-scoped camera routes.
"""

from __future__ import annotations

import hmac
import logging
from datetime import timezone

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import AlertCreate, AlertResponse, ErrorResponse
from cameras.models import Alert
from cameras.store import CameraStore
from core.config import get_settings

logger = logging.getLogger("skylark.cameras")


def require_worker_key(request: Request) -> None:
    """Reject the request with 401 unless X-Worker-Key matches WORKER_API_KEY."""
    expected = get_settings().worker_api_key
    supplied = request.headers.get("X-Worker-Key", "")
    if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=401,
            detail=ErrorResponse(error="invalid_worker_key", message="Worker authentication required.").model_dump(),
        )


router = APIRouter(dependencies=[Depends(require_worker_key)])


@router.post("/alerts", response_model=AlertResponse, status_code=201)
def create_alert(request: Request, body: AlertCreate) -> AlertResponse:
    """Record an alert. 404 if camera_id does not exist."""
    store: CameraStore = request.app.state.cameras
    timestamp = ""
    if body.timestamp is not None:
        ts = body.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        timestamp = ts.astimezone(timezone.utc).isoformat()
    alert_id = store.record_alert(
        Alert(
            camera_id=body.camera_id,
            confidence=body.confidence,
            image_url=body.image_url,
            face_count=body.face_count,
            timestamp=timestamp,
        )
    )
    if alert_id is None:
        raise HTTPException(
            status_code=404,
            detail=ErrorResponse(error="not_found", message="Camera not found.").model_dump(),
        )
    logger.info("Alert %s recorded for camera %s", alert_id, body.camera_id)
    return AlertResponse.from_alert(store.get_alert(alert_id))
