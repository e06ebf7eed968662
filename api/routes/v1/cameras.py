"""
api/routes/v1/cameras.py -- Camera routes. Every route requires a bearer token.

Routes:
  GET    /cameras                 -- caller's cameras, each with its newest alerts
  POST   /cameras                 -- create camera owned by the caller
  GET    /cameras/{camera_id}     -- one camera
  PUT    /cameras/{camera_id}     -- partial update
  DELETE /cameras/{camera_id}     -- delete camera and its alerts
  GET    /cameras/{camera_id}/alerts -- all alerts for one camera, newest first

Ownership:
  Handlers only ever touch cameras through _scope(), which binds the store to
  the caller's identity. A camera id that exists but belongs to another user
  gets the same 404 not_found as an id that does not exist.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import AlertResponse, CameraCreate, CameraResponse, CameraUpdate, ErrorResponse, MessageResponse
from auth.dependencies import get_current_identity
from auth.errors import AuthError
from auth.models import Identity
from cameras.models import Alert, Camera
from cameras.store import RECENT_ALERTS, CameraScope, CameraStore

# Router-level dependency: no handler on this router runs without a valid token.
router = APIRouter(dependencies=[Depends(get_current_identity)])


def _scope(request: Request, identity: Identity = Depends(get_current_identity)) -> CameraScope:
    store: CameraStore = request.app.state.cameras
    return store.for_owner(identity.user_id)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorResponse(error=AuthError.NOT_FOUND.value, message="Camera not found.").model_dump(),
    )


def _camera_to_response(camera: Camera, alerts: list[Alert] | None = None) -> CameraResponse:
    return CameraResponse(
        id=camera.id,
        owner_id=camera.owner_id,
        name=camera.name,
        rtsp_url=camera.rtsp_url,
        location=camera.location,
        is_enabled=camera.is_enabled,
        created_at=camera.created_at,
        alerts=[AlertResponse.from_alert(a) for a in alerts or []],
    )


@router.get("/cameras", response_model=list[CameraResponse])
@limiter.limit("60/minute")
def list_cameras(request: Request, cameras: CameraScope = Depends(_scope)) -> list[CameraResponse]:
    """Return the caller's cameras, each with its most recent alerts."""
    return [_camera_to_response(c, cameras.alerts(c.id, limit=RECENT_ALERTS)) for c in cameras.list_all()]


@router.post("/cameras", response_model=CameraResponse, status_code=201)
@limiter.limit("30/minute")
def create_camera(request: Request, body: CameraCreate, cameras: CameraScope = Depends(_scope)) -> CameraResponse:
    """Register a camera. The owner is always the caller."""
    camera_id = cameras.create(
        Camera(
            name=body.name,
            rtsp_url=body.rtsp_url,
            location=body.location,
            is_enabled=body.is_enabled,
        )
    )
    return _camera_to_response(cameras.get(camera_id))


@router.get("/cameras/{camera_id}", response_model=CameraResponse)
def get_camera(camera_id: str, cameras: CameraScope = Depends(_scope)) -> CameraResponse:
    camera = cameras.get(camera_id)
    if camera is None:
        raise _not_found()
    return _camera_to_response(camera, cameras.alerts(camera_id, limit=RECENT_ALERTS))


@router.put("/cameras/{camera_id}", response_model=CameraResponse)
def update_camera(camera_id: str, body: CameraUpdate, cameras: CameraScope = Depends(_scope)) -> CameraResponse:
    """Update any subset of name, rtsp_url, location, is_enabled."""
    # location may be cleared with null; the other columns are NOT NULL.
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "location"}
    if not changes:
        raise HTTPException(
            status_code=400,
            detail=ErrorResponse(error="no_changes", message="No fields to update.").model_dump(),
        )
    if not cameras.update(camera_id, **changes):
        raise _not_found()
    camera = cameras.get(camera_id)
    if camera is None:
        raise _not_found()
    return _camera_to_response(camera, cameras.alerts(camera_id, limit=RECENT_ALERTS))


@router.delete("/cameras/{camera_id}", response_model=MessageResponse)
def delete_camera(camera_id: str, cameras: CameraScope = Depends(_scope)) -> MessageResponse:
    if not cameras.delete(camera_id):
        raise _not_found()
    return MessageResponse(message="Camera deleted.")


@router.get("/cameras/{camera_id}/alerts", response_model=list[AlertResponse])
def list_camera_alerts(camera_id: str, cameras: CameraScope = Depends(_scope)) -> list[AlertResponse]:
    alerts = cameras.alerts(camera_id)
    if alerts is None:
        raise _not_found()
    return [AlertResponse.from_alert(a) for a in alerts]
