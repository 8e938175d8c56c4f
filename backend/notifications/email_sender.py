"""
Email transport for the notification system.

Sends through the Resend API when RESEND_API_KEY is configured, otherwise
through SMTP. Every call makes exactly one outbound request and never retries.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Any

import resend
from resend.exceptions import ResendError

from notifications.errors import EmailConfigError, EmailDeliveryError
from shared.settings import EmailSettings

logger = logging.getLogger(__name__)


def send_email(
    subject: str,
    html: str,
    text: str,
    to: str | None = None,
    bcc: list[str] | None = None,
    settings: EmailSettings | None = None,
) -> dict[str, Any]:
    """
    Send one email.

    Args:
        subject: Subject line
        html: HTML body
        text: Plain text body
        to: Recipient address (defaults to the configured sender, used for broadcasts)
        bcc: Blind copy recipients
        settings: Transport settings (defaults to values from the environment)

    Returns:
        Delivery receipt with 'id' and 'provider'

    Raises:
        EmailConfigError: Transport configuration is incomplete
        EmailDeliveryError: The provider failed the send
    """
    if settings is None:
        settings = EmailSettings.from_env()

    _ensure_config(settings)

    recipient = to or settings.smtp_from
    blind_copies = list(bcc or [])

    if settings.uses_resend:
        return _send_via_resend(settings, subject, html, text, recipient, blind_copies)
    return _send_via_smtp(settings, subject, html, text, recipient, blind_copies)


def _ensure_config(settings: EmailSettings) -> None:
    if settings.uses_resend:
        # Resend still needs a verified sender address
        if not settings.smtp_from:
            raise EmailConfigError(
                "SMTP_FROM is required when using Resend to set the sender address."
            )
        return

    missing = settings.missing_smtp_fields()
    if missing:
        raise EmailConfigError(
            f"SMTP configuration is incomplete. Missing: {', '.join(missing)}"
        )


def _send_via_resend(
    settings: EmailSettings,
    subject: str,
    html: str,
    text: str,
    recipient: str,
    bcc: list[str],
) -> dict[str, Any]:
    resend.api_key = settings.resend_api_key

    params: dict[str, Any] = {
        "from": settings.smtp_from,
        "to": recipient,
        "subject": subject,
        "html": html,
        "text": text,
    }
    if bcc:
        params["bcc"] = bcc

    try:
        response = resend.Emails.send(params)
    except ResendError as e:
        raise EmailDeliveryError(
            f"Resend API error: {getattr(e, 'message', e)}",
            status=getattr(e, "code", None),
        ) from e
    except Exception as e:
        raise EmailDeliveryError(f"Resend API error: {e}") from e

    email_id = response.get("id") if response else None
    logger.info("Sent email via Resend id=%s bcc=%d", email_id, len(bcc))
    return {"id": email_id, "provider": "resend"}


def _send_via_smtp(
    settings: EmailSettings,
    subject: str,
    html: str,
    text: str,
    recipient: str,
    bcc: list[str],
) -> dict[str, Any]:
    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = recipient
    message["Subject"] = subject
    message["Message-ID"] = make_msgid()
    message.set_content(text)
    message.add_alternative(html, subtype="html")

    # BCC addresses go to the envelope only, never to the headers
    envelope = [recipient] + bcc

    # Port 465 is implicit TLS, everything else upgrades with STARTTLS
    use_ssl = settings.smtp_port == 465
    smtp_class = smtplib.SMTP_SSL if use_ssl else smtplib.SMTP

    try:
        with smtp_class(
            settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout
        ) as server:
            if not use_ssl:
                server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            refused = server.send_message(message, to_addrs=envelope)
    except smtplib.SMTPResponseException as e:
        raise EmailDeliveryError(
            f"SMTP error: {_decode(e.smtp_error)}", status=e.smtp_code
        ) from e
    except (smtplib.SMTPException, OSError) as e:
        raise EmailDeliveryError(f"SMTP error: {e}") from e

    if refused:
        logger.warning("SMTP server refused %d recipient(s)", len(refused))

    logger.info(
        "Sent email via SMTP message_id=%s bcc=%d", message["Message-ID"], len(bcc)
    )
    return {"id": message["Message-ID"], "provider": "smtp"}


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
