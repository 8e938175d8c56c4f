"""Pydantic models for content rows awaiting a "new content" email.

Rows come from the store in snake_case and from API clients in camelCase,
sometimes under legacy names (``image``, ``coverUrl``, ``hasActivity``).
Every accepted alias is declared here so the rest of the code only ever
sees the canonical attribute names.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from models.types import ArticleID, MagazineID

SITE_TIMEZONE = ZoneInfo("America/Santiago")


class ContentRow(BaseModel):
    """Base config shared by content rows."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        populate_by_name=True,
        extra="ignore",
    )


class PendingArticle(ContentRow):
    """Article or activity that may need a broadcast notification."""

    id: ArticleID
    title: str = ""
    category: str | None = None
    author: str | None = None
    excerpt: str | None = None
    image_url: str | None = Field(
        None, validation_alias=AliasChoices("image_url", "imageUrl", "image")
    )
    is_activity: bool = Field(
        False, validation_alias=AliasChoices("is_activity", "isActivity", "hasActivity")
    )
    type: str | None = None
    slug: str | None = None
    scheduled_at: datetime | None = Field(
        None, validation_alias=AliasChoices("scheduled_at", "scheduledAt")
    )
    published_at: datetime | None = Field(
        None, validation_alias=AliasChoices("published_at", "publishedAt")
    )
    location: str | None = None
    price: str | None = None
    notify_sent: bool = Field(
        False, validation_alias=AliasChoices("notify_sent", "notifySent")
    )

    @field_validator("is_activity", "notify_sent", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    @field_validator("scheduled_at", "published_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps from the store are UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def activity(self) -> bool:
        return self.is_activity or self.type == "activity"

    @property
    def due_at(self) -> datetime | None:
        """
        Schedule time for activities, publish time for everything else.

        The store query in notifications.pending_content applies the same rule
        as a PostgREST filter; this is the in-Python form used to check rows.
        """
        if self.activity and self.scheduled_at is not None:
            return self.scheduled_at
        return self.published_at


class PendingMagazine(ContentRow):
    """Magazine issue that may need a broadcast notification."""

    id: MagazineID
    title: str | None = None
    description: str | None = None
    cover_image: str | None = Field(
        None,
        validation_alias=AliasChoices("cover_image", "coverImage", "coverUrl"),
    )
    release_date: date | None = Field(
        None, validation_alias=AliasChoices("release_date", "releaseDate")
    )
    notify_sent: bool = Field(
        False, validation_alias=AliasChoices("notify_sent", "notifySent")
    )

    @field_validator("notify_sent", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    @field_validator("release_date", mode="before")
    @classmethod
    def _timestamp_to_local_date(cls, value):
        """Accept full timestamps and keep the calendar day as seen in Chile."""
        if isinstance(value, str) and "T" in value:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.date()
            return value.astimezone(SITE_TIMEZONE).date()
        if value == "":
            return None
        return value
