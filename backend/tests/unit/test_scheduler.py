"""Unit tests for notifications/scheduler.py"""

import threading
import time
import unittest
from datetime import datetime, timezone
from unittest.mock import Mock

from models import FlushSummary
from notifications.scheduler import NotificationScheduler
from shared.settings import NotificationSettings


def _summary(**counts) -> FlushSummary:
    return FlushSummary(checked_at=datetime.now(timezone.utc), **counts)


class TestNotificationScheduler(unittest.TestCase):
    """Tests for NotificationScheduler."""

    def test_start_is_idempotent(self):
        scheduler = NotificationScheduler(flush=Mock(), initial_delay=60, interval=60)
        self.addCleanup(scheduler.stop, 1)

        self.assertTrue(scheduler.start())
        self.assertFalse(scheduler.start())
        self.assertTrue(scheduler.started)

    def test_stop_cancels_pending_ticks(self):
        flush = Mock(return_value=_summary())
        scheduler = NotificationScheduler(flush=flush, initial_delay=60, interval=60)

        scheduler.start()
        scheduler.stop(timeout=1)

        self.assertFalse(scheduler.started)
        flush.assert_not_called()

    def test_stop_waits_for_running_flush(self):
        entered = threading.Event()
        finished = []

        def slow_flush():
            entered.set()
            time.sleep(0.2)
            finished.append(1)
            return _summary()

        scheduler = NotificationScheduler(flush=slow_flush, initial_delay=0.01, interval=60)
        scheduler.start()
        self.assertTrue(entered.wait(5))

        scheduler.stop(timeout=5)

        self.assertEqual(finished, [1])
        self.assertFalse(scheduler.running)

    def test_restart_does_not_revive_old_loop(self):
        scheduler = NotificationScheduler(flush=Mock(), initial_delay=60, interval=60)
        self.addCleanup(scheduler.stop, 1)

        scheduler.start()
        first_event = scheduler._stop_event
        scheduler.stop(timeout=1)
        scheduler.start()

        self.assertTrue(first_event.is_set())
        self.assertIsNot(scheduler._stop_event, first_event)
        self.assertFalse(scheduler._stop_event.is_set())

    def test_runs_periodically(self):
        ran_twice = threading.Event()
        calls = []

        def flush():
            calls.append(1)
            if len(calls) >= 2:
                ran_twice.set()
            return _summary()

        scheduler = NotificationScheduler(flush=flush, initial_delay=0.01, interval=0.01)
        self.addCleanup(scheduler.stop, 1)
        scheduler.start()

        self.assertTrue(ran_twice.wait(5))

    def test_overlapping_tick_is_skipped(self):
        entered = threading.Event()
        release = threading.Event()
        calls = []

        def slow_flush():
            calls.append(1)
            entered.set()
            release.wait(5)
            return _summary(sent=1)

        scheduler = NotificationScheduler(flush=slow_flush)
        worker = threading.Thread(target=scheduler.tick)
        worker.start()
        self.assertTrue(entered.wait(5))

        self.assertTrue(scheduler.running)
        self.assertIsNone(scheduler.tick())

        release.set()
        worker.join(5)
        self.assertEqual(len(calls), 1)
        self.assertFalse(scheduler.running)

    def test_tick_survives_flush_errors(self):
        flush = Mock(side_effect=[RuntimeError("database unavailable"), _summary(sent=2)])
        scheduler = NotificationScheduler(flush=flush)

        with self.assertLogs("notifications.scheduler", level="ERROR"):
            self.assertIsNone(scheduler.tick())

        summary = scheduler.tick()

        self.assertEqual(summary.sent, 2)
        self.assertFalse(scheduler.running)

    def test_run_now_returns_summary(self):
        scheduler = NotificationScheduler(flush=Mock(return_value=_summary(magazines_sent=1)))

        self.assertEqual(scheduler.run_now().magazines_sent, 1)

    def test_run_now_propagates_errors(self):
        scheduler = NotificationScheduler(flush=Mock(side_effect=RuntimeError("boom")))

        with self.assertRaises(RuntimeError):
            scheduler.run_now()

        self.assertFalse(scheduler.running)

    def test_run_now_waits_for_scheduled_flush(self):
        entered = threading.Event()
        release = threading.Event()
        order = []

        def flush():
            if not entered.is_set():
                entered.set()
                release.wait(5)
                order.append("scheduled")
            else:
                order.append("manual")
            return _summary()

        scheduler = NotificationScheduler(flush=flush)
        ticker = threading.Thread(target=scheduler.tick)
        ticker.start()
        self.assertTrue(entered.wait(5))

        manual = threading.Thread(target=scheduler.run_now)
        manual.start()
        release.set()
        ticker.join(5)
        manual.join(5)

        self.assertEqual(order, ["scheduled", "manual"])

    def test_from_settings(self):
        settings = NotificationSettings(initial_delay_seconds=5, interval_seconds=120)

        scheduler = NotificationScheduler.from_settings(settings, flush=Mock())

        self.assertEqual(scheduler.initial_delay, 5)
        self.assertEqual(scheduler.interval, 120)


if __name__ == "__main__":
    unittest.main()
