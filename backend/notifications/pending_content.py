"""
Content store queries for the flush job.

Equivalent SQL for each query is noted on the function; all filters are
passed as parameters through the Supabase query builder.
"""

from datetime import date, datetime, timezone
from typing import Any

from models.content import PendingArticle, PendingMagazine

ARTICLES_TABLE = "articles"
MAGAZINES_TABLE = "magazines"
BATCH_LIMIT = 20


def fetch_due_articles(
    supabase: Any, now: datetime, limit: int = BATCH_LIMIT
) -> list[PendingArticle]:
    """
    Unsent articles whose effective due time has passed, oldest first.

    SELECT * FROM articles WHERE notify_sent = false AND (due) ORDER BY published_at ASC LIMIT 20

    An activity is due at its scheduled time, anything else at its publish
    time. Activities without a schedule fall back to the publish time.
    """
    cutoff = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    due = ",".join(
        [
            f"and(is_activity.is.true,scheduled_at.lte.{cutoff})",
            f"and(type.eq.activity,scheduled_at.lte.{cutoff})",
            f"and(scheduled_at.is.null,published_at.lte.{cutoff})",
            f"and(is_activity.not.is.true,or(type.is.null,type.neq.activity),published_at.lte.{cutoff})",
        ]
    )

    response = (
        supabase.table(ARTICLES_TABLE)
        .select("*")
        .eq("notify_sent", False)
        .or_(due)
        .order("published_at", desc=False)
        .limit(limit)
        .execute()
    )

    return [PendingArticle.model_validate(row) for row in response.data or []]


def fetch_due_magazines(
    supabase: Any, today: date, limit: int = BATCH_LIMIT
) -> list[PendingMagazine]:
    """
    Unsent magazines released today or earlier (or undated), oldest first.

    SELECT * FROM magazines WHERE notify_sent = false
      AND (release_date IS NULL OR release_date <= CURRENT_DATE)
      ORDER BY release_date ASC NULLS FIRST LIMIT 20
    """
    response = (
        supabase.table(MAGAZINES_TABLE)
        .select("*")
        .eq("notify_sent", False)
        .or_(f"release_date.is.null,release_date.lte.{today.isoformat()}")
        .order("release_date", desc=False, nullsfirst=True)
        .limit(limit)
        .execute()
    )

    return [PendingMagazine.model_validate(row) for row in response.data or []]


def mark_sent(supabase: Any, table: str, row_id: str) -> None:
    """UPDATE <table> SET notify_sent = true WHERE id = $1"""
    supabase.table(table).update({"notify_sent": True}).eq("id", row_id).execute()


def claim(supabase: Any, table: str, row_id: str) -> bool:
    """
    Mark a row sent only if nobody else has.

    UPDATE <table> SET notify_sent = true WHERE id = $1 AND notify_sent = false

    Returns:
        True if this call flipped the flag
    """
    response = (
        supabase.table(table)
        .update({"notify_sent": True})
        .eq("id", row_id)
        .eq("notify_sent", False)
        .execute()
    )
    return bool(response.data)


def release(supabase: Any, table: str, row_id: str) -> None:
    """Undo a claim so the row is picked up by the next flush."""
    supabase.table(table).update({"notify_sent": False}).eq("id", row_id).execute()
