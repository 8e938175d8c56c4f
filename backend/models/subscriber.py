"""Pydantic models for newsletter subscribers."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.types import SubscriberID


class Subscriber(BaseModel):
    """Newsletter subscriber row."""

    model_config = ConfigDict(
        str_strip_whitespace=True, populate_by_name=True, alias_generator=to_camel
    )

    id: SubscriberID | None = None
    email: str = Field(..., min_length=3)
    created_at: datetime | None = Field(
        None, validation_alias=AliasChoices("created_at", "createdAt")
    )


class SubscribeRequest(BaseModel):
    """Body accepted by the subscribe endpoint."""

    email: str | None = None

    @field_validator("email")
    @classmethod
    def _normalize(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value
