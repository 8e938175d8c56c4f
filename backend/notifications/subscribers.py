"""
Newsletter subscriber access.

Reads the subscriber list for broadcasts and records new sign-ups.
"""

import uuid
from typing import Any, cast

from models.subscriber import Subscriber
from shared.db import get_optional_supabase_client

SUBSCRIBERS_TABLE = "newsletter_subscribers"


def list_subscribers(supabase: Any = None) -> list[Subscriber]:
    """
    Get all subscribers, newest first.

    Returns an empty list when the store is not configured.
    """
    if supabase is None:
        supabase = get_optional_supabase_client()
    if supabase is None:
        return []

    response = (
        supabase.table(SUBSCRIBERS_TABLE)
        .select("email, created_at")
        .order("created_at", desc=True)
        .execute()
    )

    return [Subscriber.model_validate(row) for row in response.data or []]


def list_subscriber_emails(supabase: Any = None) -> list[str]:
    """Distinct subscriber addresses, in list order."""
    emails: list[str] = []
    seen: set[str] = set()
    for subscriber in list_subscribers(supabase):
        if subscriber.email not in seen:
            seen.add(subscriber.email)
            emails.append(subscriber.email)
    return emails


def subscribe(email: str | None, supabase: Any) -> tuple[Subscriber, bool]:
    """
    Record a newsletter subscription.

    Inserting an address that already exists is not an error: the existing
    row is returned instead.

    Args:
        email: Address as submitted (trimmed and lower-cased here)
        supabase: Store client

    Returns:
        Tuple of (subscriber, created)

    Raises:
        ValueError: The email is blank
    """
    normalized = (email or "").strip().lower()
    if not normalized:
        raise ValueError('El campo "email" es requerido')

    response = (
        supabase.table(SUBSCRIBERS_TABLE)
        .upsert(
            {"id": str(uuid.uuid4()), "email": normalized},
            on_conflict="email",
            ignore_duplicates=True,
        )
        .execute()
    )

    if response.data:
        return Subscriber.model_validate(response.data[0]), True

    existing = (
        supabase.table(SUBSCRIBERS_TABLE)
        .select("*")
        .eq("email", normalized)
        .limit(1)
        .execute()
    )
    if not existing.data:
        raise LookupError(f"Subscriber {normalized} was neither inserted nor found")

    row = cast(dict[str, Any], existing.data[0])
    return Subscriber.model_validate(row), False
