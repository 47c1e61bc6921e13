"""Structured JSON logging configuration."""
import logging
import sys
from pythonjsonlogger import jsonlogger
from travel_portal.core.config import settings


def setup_logging() -> None:
    """Configure JSON structured logging for production, human-readable for dev."""
    if getattr(settings, 'APP_ENV', 'development') == "production":
        handler = logging.StreamHandler(sys.stdout)
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(request_id)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        logging.root.handlers = [handler]
        logging.root.setLevel(logging.INFO)
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


class RequestIdFilter(logging.Filter):
    """Attach the current X-Request-ID (or '-') to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        from travel_portal.middleware.request_id import get_request_id

        record.request_id = get_request_id() or "-"
        return True
