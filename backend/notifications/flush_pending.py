"""
Flush pending content notifications.

Finds articles, activities and magazines that are due but not yet announced,
broadcasts one email per row to all subscribers and marks the row notified.

Usage:
    # Run one flush
    uv run python -m notifications.flush_pending

    # Dry run (compose but don't send or mark anything)
    uv run python -m notifications.flush_pending --dry-run

    # Claim rows before sending instead of marking after
    uv run python -m notifications.flush_pending --mode at_most_once
"""

import argparse
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from models.content import SITE_TIMEZONE
from models.notification import EmailPayload, FlushSummary, NotificationResult
from models.types import DeliveryMode
from notifications import pending_content
from notifications.composer import compose_article, compose_magazine
from notifications.dispatcher import dispatch_broadcast
from notifications.error_logger import log_notification_error
from shared.db import get_optional_supabase_client
from shared.settings import NotificationSettings
from shared.utils import print_summary

logger = logging.getLogger(__name__)


def flush_pending_notifications(
    supabase: Any = None,
    now: datetime | None = None,
    dry_run: bool = False,
    delivery_mode: DeliveryMode | None = None,
    base_url: str | None = None,
) -> FlushSummary:
    """
    Run one scan-dispatch-mark cycle.

    Rows are handled one at a time. A failure on one row is logged, counted as
    skipped and leaves the row unmarked so the next flush picks it up again.
    Errors from the content store queries themselves propagate.

    Args:
        supabase: Store client (defaults to the configured client, if any)
        now: Reference time for due checks (defaults to the current UTC time)
        dry_run: Compose and count, but don't send or mark
        delivery_mode: 'at_least_once' marks after sending, 'at_most_once'
            claims the row before sending (defaults to NOTIFICATION_DELIVERY_MODE)
        base_url: Public site URL for permalinks (defaults to FRONTEND_BASE_URL)

    Returns:
        FlushSummary with sent, magazines_sent, skipped and checked_at
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if supabase is None:
        supabase = get_optional_supabase_client()
    if supabase is None:
        logger.warning("Content store not configured, nothing to flush")
        return FlushSummary(checked_at=now)

    if delivery_mode is None or base_url is None:
        settings = NotificationSettings.from_env()
        delivery_mode = delivery_mode or settings.delivery_mode
        base_url = base_url or settings.frontend_base_url

    summary = FlushSummary(checked_at=now)

    articles = pending_content.fetch_due_articles(supabase, now)
    logger.info("Found %d pending article(s)", len(articles))

    for article in articles:
        delivered = _process_row(
            supabase,
            table=pending_content.ARTICLES_TABLE,
            row_id=article.id,
            compose=lambda: compose_article(article, base_url),
            delivery_mode=delivery_mode,
            dry_run=dry_run,
        )
        if delivered:
            summary.sent += 1
        else:
            summary.skipped += 1

    today = now.astimezone(SITE_TIMEZONE).date()
    magazines = pending_content.fetch_due_magazines(supabase, today)
    logger.info("Found %d pending magazine(s)", len(magazines))

    for magazine in magazines:
        delivered = _process_row(
            supabase,
            table=pending_content.MAGAZINES_TABLE,
            row_id=magazine.id,
            compose=lambda: compose_magazine(magazine, base_url),
            delivery_mode=delivery_mode,
            dry_run=dry_run,
        )
        if delivered:
            summary.magazines_sent += 1
        else:
            summary.skipped += 1

    logger.info(
        "Flush complete: sent=%d magazines_sent=%d skipped=%d",
        summary.sent,
        summary.magazines_sent,
        summary.skipped,
    )
    return summary


def _process_row(
    supabase: Any,
    table: str,
    row_id: str,
    compose: Callable[[], EmailPayload],
    delivery_mode: DeliveryMode,
    dry_run: bool,
) -> bool:
    """Notify subscribers about one row. Returns True if the row was handled."""
    context = {"table": table, "row_id": row_id, "delivery_mode": delivery_mode}

    try:
        payload = compose()
    except Exception as e:
        _report("composing", f"Could not compose email: {e}", context)
        return False

    if dry_run:
        logger.info("[DRY RUN] Would send %r for %s %s", payload.subject, table, row_id)
        return True

    if delivery_mode == "at_most_once":
        return _claim_then_send(supabase, table, row_id, payload, context)
    return _send_then_mark(supabase, table, row_id, payload, context)


def _send_then_mark(
    supabase: Any, table: str, row_id: str, payload: EmailPayload, context: dict
) -> bool:
    try:
        result = dispatch_broadcast(payload, supabase)
    except Exception as e:
        _report("broadcast", str(e), context)
        return False

    if not result.sent:
        _not_sent(result, context)
        return False

    # A crash or error here means the row is sent again next run
    try:
        pending_content.mark_sent(supabase, table, row_id)
    except Exception as e:
        _report("marking", f"Sent to {result.count} subscriber(s) but not marked: {e}", context)
        return False

    logger.info("Notified %d subscriber(s) about %s %s", result.count, table, row_id)
    return True


def _claim_then_send(
    supabase: Any, table: str, row_id: str, payload: EmailPayload, context: dict
) -> bool:
    try:
        claimed = pending_content.claim(supabase, table, row_id)
    except Exception as e:
        _report("claiming", str(e), context)
        return False

    if not claimed:
        logger.info("%s %s already claimed by another flush", table, row_id)
        return False

    try:
        result = dispatch_broadcast(payload, supabase)
    except Exception as e:
        _report("broadcast", str(e), context)
    else:
        if result.sent:
            logger.info("Notified %d subscriber(s) about %s %s", result.count, table, row_id)
            return True
        _not_sent(result, context)

    try:
        pending_content.release(supabase, table, row_id)
    except Exception as e:
        _report("releasing", f"Claim on undelivered row not released: {e}", context)
    return False


def _not_sent(result: NotificationResult, context: dict[str, Any]) -> None:
    if result.error:
        _report("broadcast", result.error, context)
        return

    # No subscribers is routine, the row waits for the first one
    logger.info(
        "Skipping %s %s: %s", context["table"], context["row_id"], result.reason or "Not sent"
    )


def _report(error_type: str, message: str, context: dict[str, Any]) -> None:
    logger.warning(
        "Skipping %s %s (%s): %s", context["table"], context["row_id"], error_type, message
    )
    try:
        error_file = log_notification_error(
            error_type=error_type, error_message=message, context=context
        )
    except OSError:
        logger.exception("Could not write notification error report")
        return
    logger.debug("Error details logged to: %s", error_file)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send pending article and magazine notifications"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails or mark rows)",
    )

    parser.add_argument(
        "--mode",
        choices=["at_least_once", "at_most_once"],
        help="Delivery mode (defaults to NOTIFICATION_DELIVERY_MODE)",
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    summary = flush_pending_notifications(dry_run=args.dry_run, delivery_mode=args.mode)
    print_summary(summary.sent, summary.magazines_sent, summary.skipped)


if __name__ == "__main__":
    main()
