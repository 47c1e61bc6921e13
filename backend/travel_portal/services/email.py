"""Email notification service: console mock (MAIL_ENABLED=False).

When MAIL_ENABLED is False, email content is written to the log instead of
being sent. No SMTP transport ships with the portal.
"""
import logging

from travel_portal.core.config import settings

logger = logging.getLogger(__name__)


# ─── Status change email ───

def send_status_email(
    to: str | None,
    subject: str,
    body: str,
    link: str | None = None,
) -> bool:
    """Send (or mock-log) one notification email. Returns False when skipped."""
    if not to:
        logger.debug("No recipient address for '%s'; email skipped.", subject)
        return False

    if not settings.MAIL_ENABLED:
        logger.info(
            "\n"
            "=== NOTIFICATION EMAIL ===\n"
            "From: %s <%s>\n"
            "To: %s\n"
            "Subject: %s\n"
            "%s\n"
            "Link: %s\n"
            "==========================",
            settings.MAIL_FROM_NAME,
            settings.MAIL_FROM,
            to,
            subject,
            body,
            link or "-",
        )
        return True

    logger.warning(
        "MAIL_ENABLED=True but no SMTP transport is configured. "
        "Email to %s ('%s') was not sent.",
        to,
        subject,
    )
    return False


def request_link(module: str, request_id: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/{module}/view/{request_id}"
