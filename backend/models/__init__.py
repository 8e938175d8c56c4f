"""Pydantic models for data validation and type checking."""

from models.content import PendingArticle, PendingMagazine
from models.notification import EmailPayload, FlushSummary, NotificationResult
from models.subscriber import SubscribeRequest, Subscriber

__all__ = [
    "PendingArticle",
    "PendingMagazine",
    "EmailPayload",
    "NotificationResult",
    "FlushSummary",
    "Subscriber",
    "SubscribeRequest",
]
