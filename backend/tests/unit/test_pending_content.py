"""
Unit tests for notifications/pending_content.py

Checks the filters, ordering and limits sent through the query builder.
"""

import unittest
from datetime import date, datetime, timezone

from notifications.pending_content import (
    BATCH_LIMIT,
    claim,
    fetch_due_articles,
    fetch_due_magazines,
    mark_sent,
    release,
)
from tests.fixtures.content_factory import create_test_article, create_test_magazine
from tests.fixtures.mock_helpers import create_mock_supabase

NOW = datetime(2025, 3, 1, 20, 0, tzinfo=timezone.utc)


class TestFetchDueArticles(unittest.TestCase):
    """Tests for fetch_due_articles()."""

    def test_query_shape(self):
        supabase = create_mock_supabase([create_test_article(article_id="a1")])

        articles = fetch_due_articles(supabase, NOW)

        self.assertEqual([a.id for a in articles], ["a1"])
        supabase.table.assert_called_with("articles")
        supabase.eq.assert_called_with("notify_sent", False)
        supabase.order.assert_called_with("published_at", desc=False)
        supabase.limit.assert_called_with(BATCH_LIMIT)
        self.assertEqual(BATCH_LIMIT, 20)

    def test_due_filter_uses_utc_cutoff(self):
        supabase = create_mock_supabase()

        fetch_due_articles(supabase, NOW)

        due_filter = supabase.or_.call_args[0][0]
        self.assertIn("scheduled_at.lte.2025-03-01T20:00:00Z", due_filter)
        self.assertIn("published_at.lte.2025-03-01T20:00:00Z", due_filter)
        self.assertIn("is_activity.is.true", due_filter)

    def test_due_filter_expression(self):
        """Activities are due at their schedule; publish time only for the rest."""
        supabase = create_mock_supabase()

        fetch_due_articles(supabase, NOW)

        cutoff = "2025-03-01T20:00:00Z"
        supabase.or_.assert_called_once_with(
            f"and(is_activity.is.true,scheduled_at.lte.{cutoff}),"
            f"and(type.eq.activity,scheduled_at.lte.{cutoff}),"
            f"and(scheduled_at.is.null,published_at.lte.{cutoff}),"
            f"and(is_activity.not.is.true,or(type.is.null,type.neq.activity),published_at.lte.{cutoff})"
        )

    def test_scheduled_activity_not_matched_by_publish_time(self):
        supabase = create_mock_supabase()

        fetch_due_articles(supabase, NOW)

        clauses = supabase.or_.call_args[0][0].split(",and(")
        publish_clauses = [c for c in clauses if "published_at.lte" in c]
        self.assertEqual(len(publish_clauses), 2)
        for clause in publish_clauses:
            self.assertTrue(
                "scheduled_at.is.null" in clause or "is_activity.not.is.true" in clause
            )
            if "is_activity.not.is.true" in clause:
                self.assertIn("or(type.is.null,type.neq.activity)", clause)

    def test_empty_result(self):
        self.assertEqual(fetch_due_articles(create_mock_supabase(), NOW), [])


class TestFetchDueMagazines(unittest.TestCase):
    """Tests for fetch_due_magazines()."""

    def test_query_shape(self):
        supabase = create_mock_supabase([create_test_magazine(magazine_id="m1", release_date=None)])

        magazines = fetch_due_magazines(supabase, date(2025, 3, 1))

        self.assertEqual(magazines[0].id, "m1")
        self.assertIsNone(magazines[0].release_date)
        supabase.table.assert_called_with("magazines")
        supabase.or_.assert_called_with("release_date.is.null,release_date.lte.2025-03-01")
        supabase.order.assert_called_with("release_date", desc=False, nullsfirst=True)
        supabase.limit.assert_called_with(20)


class TestMarking(unittest.TestCase):
    """Tests for mark_sent(), claim() and release()."""

    def test_mark_sent(self):
        supabase = create_mock_supabase()

        mark_sent(supabase, "articles", "a1")

        supabase.update.assert_called_with({"notify_sent": True})
        supabase.eq.assert_called_with("id", "a1")
        supabase.execute.assert_called_once()

    def test_claim_succeeds_when_row_updated(self):
        supabase = create_mock_supabase([{"id": "a1", "notify_sent": True}])

        self.assertTrue(claim(supabase, "articles", "a1"))
        supabase.eq.assert_any_call("id", "a1")
        supabase.eq.assert_any_call("notify_sent", False)

    def test_claim_fails_when_already_claimed(self):
        supabase = create_mock_supabase([])

        self.assertFalse(claim(supabase, "magazines", "m1"))

    def test_release(self):
        supabase = create_mock_supabase()

        release(supabase, "magazines", "m1")

        supabase.update.assert_called_with({"notify_sent": False})


if __name__ == "__main__":
    unittest.main()
