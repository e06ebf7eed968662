"""
API request and response models for Skylark REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
cameras/models.py, which own the internal domain representation. Route
handlers map between the two.

No response model has an owner_id-style field that a client can set, and no
model carries a password hash.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.passwords import MAX_PASSWORD_BYTES
from cameras.models import Alert

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"
MIN_PASSWORD_LENGTH = 6

# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Envelope returned on every 4xx/5xx response.

    error is a short machine-stable code ("invalid_credentials", "not_found",
    ...). message is human-readable and may change between releases.
    """

    model_config = ConfigDict(frozen=True)

    error: str
    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    username: str = Field(min_length=3, max_length=32, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """bcrypt ignores bytes past 72; reject instead of silently truncating."""
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /auth/login.

    Only presence is checked here. A username or password that registration
    would never have accepted simply fails to match, so the caller gets the
    same 401 invalid_credentials as any other wrong pair.
    """

    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=1024)


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    username: str


class SessionResponse(BaseModel):
    """Response for a successful register or login."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: UserResponse


# ---------------------------------------------------------------------------
# Cameras
# ---------------------------------------------------------------------------


class CameraCreate(BaseModel):
    """Request body for POST /cameras.

    extra="ignore" drops client-supplied owner_id / id fields; the owner is
    always the authenticated caller.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(min_length=1, max_length=255)
    rtsp_url: str = Field(min_length=1, max_length=2048)
    location: Optional[str] = Field(default=None, max_length=255)
    is_enabled: bool = True


class CameraUpdate(BaseModel):
    """Request body for PUT /cameras/{id}. Only fields present are changed."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    rtsp_url: Optional[str] = Field(default=None, min_length=1, max_length=2048)
    location: Optional[str] = Field(default=None, max_length=255)
    is_enabled: Optional[bool] = None


class AlertCreate(BaseModel):
    """Request body for POST /alerts, sent by the detection worker."""

    camera_id: str = Field(min_length=1, max_length=36)
    confidence: float = Field(ge=0.0, le=1.0)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    face_count: Optional[int] = Field(default=None, ge=0)
    timestamp: Optional[datetime] = None


class AlertResponse(BaseModel):
    id: str
    camera_id: str
    confidence: float
    image_url: Optional[str] = None
    face_count: Optional[int] = None
    timestamp: str

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertResponse":
        return cls(
            id=alert.id,
            camera_id=alert.camera_id,
            confidence=alert.confidence,
            image_url=alert.image_url,
            face_count=alert.face_count,
            timestamp=alert.timestamp,
        )


class CameraResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    rtsp_url: str
    location: Optional[str] = None
    is_enabled: bool
    created_at: str
    alerts: list[AlertResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
