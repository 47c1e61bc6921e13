"""In-process guard against double submissions.

A fingerprint (SHA-256 over user, operation and the submitted fields) is held
for DEDUP_WINDOW_SECONDS. A second identical submission inside the window is
refused with the seconds left. The store lives in this process only; with
several gunicorn workers each keeps its own, which is acceptable for a
double-click guard.
"""
import hashlib
import json
import logging
import threading
import time
from collections.abc import Mapping
from typing import Any

from travel_portal.core.config import settings

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_entries: dict[str, float] = {}  # fingerprint -> monotonic expiry


def generate_fingerprint(user_id: Any, operation: str, payload: Mapping[str, Any], fields: tuple[str, ...] | None = None) -> str:
    """Hash the submission; `fields` limits which payload keys count."""
    if fields is not None:
        payload = {key: payload.get(key) for key in fields}
    canonical = json.dumps(
        {"user": str(user_id), "operation": operation, "payload": payload},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(canonical.encode()).hexdigest()


def _purge(now: float) -> None:
    for key in [k for k, expiry in _entries.items() if expiry <= now]:
        del _entries[key]


def check_and_mark(fingerprint: str, window_seconds: int | None = None) -> tuple[bool, int]:
    """Return (is_duplicate, retry_after_seconds) and reserve the fingerprint when new."""
    window = window_seconds if window_seconds is not None else settings.DEDUP_WINDOW_SECONDS
    now = time.monotonic()
    with _lock:
        _purge(now)
        expiry = _entries.get(fingerprint)
        if expiry is not None:
            remaining = max(1, int(expiry - now + 0.999))
            logger.info("Duplicate submission %s… blocked for %ss", fingerprint[:12], remaining)
            return True, remaining
        _entries[fingerprint] = now + window
        return False, 0


def release(fingerprint: str) -> None:
    """Forget a fingerprint so a failed submission can be retried at once."""
    with _lock:
        _entries.pop(fingerprint, None)


def pending_count() -> int:
    with _lock:
        _purge(time.monotonic())
        return len(_entries)


def clear() -> None:
    with _lock:
        _entries.clear()
