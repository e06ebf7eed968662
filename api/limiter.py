"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in api/main.py (to mount as middleware) and in route modules (to
apply per-route limits with @limiter.limit()).

@limiter.limit() goes directly on the handler, below @router.get/post. In the
other order FastAPI registers the undecorated function, SlowAPIMiddleware
skips the route as decorator-limited, and no limit is enforced.

A single shared instance means all routes share one in-memory counter store.
Instantiating it per module would give each module its own counters.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
