"""Environment-backed settings for email delivery and notifications."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from models.types import DeliveryMode

load_dotenv()

DEFAULT_FRONTEND_BASE_URL = "https://divanjapones.com"

SMTP_ENV_VARS = {
    "smtp_host": "SMTP_HOST",
    "smtp_port": "SMTP_PORT",
    "smtp_user": "SMTP_USER",
    "smtp_password": "SMTP_PASS",
    "smtp_from": "SMTP_FROM",
}


class EmailSettings(BaseModel):
    """Transport configuration. Resend is used whenever an API key is present."""

    model_config = ConfigDict(str_strip_whitespace=True)

    resend_api_key: str | None = None
    smtp_host: str | None = None
    smtp_port: int | None = None
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str | None = None
    smtp_timeout: float = 30.0

    @property
    def uses_resend(self) -> bool:
        return bool(self.resend_api_key)

    def missing_smtp_fields(self) -> list[str]:
        """Names of the environment variables an SMTP send still needs."""
        return [env for field, env in SMTP_ENV_VARS.items() if not getattr(self, field)]

    @classmethod
    def from_env(cls) -> "EmailSettings":
        port = os.getenv("SMTP_PORT")
        return cls(
            resend_api_key=os.getenv("RESEND_API_KEY") or None,
            smtp_host=os.getenv("SMTP_HOST") or None,
            smtp_port=int(port) if port else None,
            smtp_user=os.getenv("SMTP_USER") or None,
            smtp_password=os.getenv("SMTP_PASS") or None,
            smtp_from=os.getenv("SMTP_FROM") or None,
            smtp_timeout=float(os.getenv("SMTP_TIMEOUT", "30")),
        )


class NotificationSettings(BaseModel):
    """Flush job and scheduler configuration."""

    frontend_base_url: str = DEFAULT_FRONTEND_BASE_URL
    delivery_mode: DeliveryMode = "at_least_once"
    initial_delay_seconds: float = Field(15.0, ge=0)
    interval_seconds: float = Field(300.0, gt=0)

    @classmethod
    def from_env(cls) -> "NotificationSettings":
        return cls(
            frontend_base_url=os.getenv(
                "FRONTEND_BASE_URL", DEFAULT_FRONTEND_BASE_URL
            ).rstrip("/"),
            delivery_mode=os.getenv("NOTIFICATION_DELIVERY_MODE", "at_least_once"),
            initial_delay_seconds=float(
                os.getenv("NOTIFICATION_INITIAL_DELAY_SECONDS", "15")
            ),
            interval_seconds=float(os.getenv("NOTIFICATION_INTERVAL_SECONDS", "300")),
        )
