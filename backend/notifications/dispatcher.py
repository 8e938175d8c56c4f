"""
Delivery of composed notifications.

Broadcasts go out as one email addressed to the site with every subscriber
in BCC. Welcome emails go to the single new subscriber.
"""

import logging
from typing import Any

from models.notification import EmailPayload, NotificationResult
from notifications.composer import compose_welcome
from notifications.email_sender import send_email
from notifications.subscribers import list_subscriber_emails

logger = logging.getLogger(__name__)

NO_SUBSCRIBERS_REASON = "No subscribers to notify"


def dispatch_broadcast(payload: EmailPayload, supabase: Any = None) -> NotificationResult:
    """
    Send a payload to every subscriber.

    Never raises on delivery problems: failures come back as
    NotificationResult(sent=False, error=...) so callers can move on.
    """
    bcc = list_subscriber_emails(supabase)
    if not bcc:
        return NotificationResult(sent=False, reason=NO_SUBSCRIBERS_REASON)

    try:
        send_email(payload.subject, payload.html, payload.text, bcc=bcc)
    except Exception as e:
        logger.error("Failed to send newsletter email %r: %s", payload.subject, e)
        return NotificationResult(sent=False, error=str(e))

    return NotificationResult(sent=True, count=len(bcc))


def dispatch_welcome(email: str, payload: EmailPayload) -> dict[str, Any]:
    """Send a payload to a single address. Delivery errors propagate."""
    return send_email(payload.subject, payload.html, payload.text, to=email)


def notify_subscription(email: str) -> dict[str, Any]:
    """Compose and send the welcome email for a subscriber."""
    return dispatch_welcome(email, compose_welcome(email))


def notify_subscription_in_background(email: str) -> None:
    """
    Best-effort welcome email, meant to run as a background task.

    Failures are logged and never reach the request that scheduled it.
    """
    try:
        notify_subscription(email)
    except Exception as e:
        logger.error("Welcome email failed for %s: %s", email, e)
    else:
        logger.info("Welcome email sent to %s", email)
