"""Rate limiter singleton: import from here to avoid circular deps.

Production shares counters across gunicorn workers through Redis; every other
environment keeps them in process memory.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from travel_portal.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.REDIS_URL if settings.APP_ENV == "production" else "memory://",
)
