"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Skylark happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Singleton via lru_cache: get_settings() instantiates Settings once at first
call and returns the cached instance on every subsequent call. Settings are
read-only after startup, so request handlers can share them freely.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. JWT signing relies
  on key entropy -- a short key makes offline brute-force of the HMAC viable.

  In production mode (DEBUG not set or false), a missing SECRET_KEY is a hard
  startup failure. Rotating SECRET_KEY invalidates every issued token; there
  is no grace window.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or cameras/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("skylark.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'skylark.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. Field names map to upper-cased
    env var names (secret_key -> SECRET_KEY).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=7 * 24 * 3600, gt=0)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    login_rate_limit: str = "10/minute"
    self_registration_enabled: bool = True

    # ------------------------------------------------------------------
    # Detection worker
    # ------------------------------------------------------------------

    # Shared secret the detection worker sends as X-Worker-Key when posting
    # alerts. Empty disables alert ingestion entirely.
    worker_api_key: str = ""

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive a restart -- acceptable for local dev.

        Production mode: refuse to start if SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
