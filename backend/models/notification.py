"""Pydantic models for notification payloads and results."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EmailPayload(BaseModel):
    """Composed email ready to be handed to the dispatcher."""

    subject: str
    text: str
    html: str


class NotificationResult(BaseModel):
    """Outcome of a single broadcast. Never persisted."""

    sent: bool
    count: int | None = None
    reason: str | None = None
    error: str | None = None


class FlushSummary(BaseModel):
    """Counts for one flush run, serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sent: int = 0
    magazines_sent: int = 0
    skipped: int = 0
    checked_at: datetime
