"""In-process timer that flushes pending notifications periodically."""

import logging
import threading
from collections.abc import Callable

from models.notification import FlushSummary
from notifications.flush_pending import flush_pending_notifications
from shared.settings import NotificationSettings

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """
    Runs the flush job every ``interval`` seconds after an ``initial_delay``.

    At most one flush runs at a time. A tick that fires while a flush is still
    in progress is skipped, not queued. Manual flushes go through ``run_now``
    and share the same lock, waiting for any in-flight run to finish first.
    """

    def __init__(
        self,
        flush: Callable[[], FlushSummary] = flush_pending_notifications,
        initial_delay: float = 15.0,
        interval: float = 300.0,
    ):
        self.flush = flush
        self.initial_delay = initial_delay
        self.interval = interval

        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._tick_threads: list[threading.Thread] = []

    @classmethod
    def from_settings(
        cls,
        settings: NotificationSettings,
        flush: Callable[[], FlushSummary] = flush_pending_notifications,
    ) -> "NotificationScheduler":
        return cls(
            flush=flush,
            initial_delay=settings.initial_delay_seconds,
            interval=settings.interval_seconds,
        )

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def running(self) -> bool:
        """True while a flush is in progress."""
        return self._run_lock.locked()

    def start(self) -> bool:
        """
        Start the timer. Calling it again is a no-op.

        Returns:
            True if this call started the timer
        """
        with self._state_lock:
            if self._thread is not None:
                return False

            # One event per start; a loop outliving stop() keeps its own, already set
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._loop,
                args=(self._stop_event,),
                name="notification-scheduler",
                daemon=True,
            )
            self._thread.start()

        logger.info(
            "Notification scheduler started (first run in %ss, then every %ss)",
            self.initial_delay,
            self.interval,
        )
        return True

    def stop(self, timeout: float | None = None) -> None:
        """Cancel future ticks and wait for a flush already in progress."""
        with self._state_lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
            tick_threads = self._tick_threads
            self._tick_threads = []

        if thread is not None:
            thread.join(timeout)
        for tick_thread in tick_threads:
            tick_thread.join(timeout)

        if thread is not None:
            logger.info("Notification scheduler stopped")

    def run_now(self) -> FlushSummary:
        """Flush immediately, after any in-flight run. Errors propagate."""
        with self._run_lock:
            return self.flush()

    def tick(self) -> FlushSummary | None:
        """
        Run one scheduled flush unless another is in progress.

        Returns:
            The summary, or None if the tick was skipped or the flush failed
        """
        if not self._run_lock.acquire(blocking=False):
            logger.info("Previous flush still running, skipping this tick")
            return None

        try:
            summary = self.flush()
        except Exception:
            logger.exception("Scheduled notification flush failed")
            return None
        finally:
            self._run_lock.release()

        if summary.sent or summary.magazines_sent or summary.skipped:
            logger.info(
                "Scheduled flush: sent=%d magazines_sent=%d skipped=%d",
                summary.sent,
                summary.magazines_sent,
                summary.skipped,
            )
        return summary

    def _loop(self, stop_event: threading.Event) -> None:
        delay = self.initial_delay
        while not stop_event.wait(delay):
            # Each tick gets its own thread so a slow flush doesn't shift the period
            tick_thread = threading.Thread(
                target=self.tick, name="notification-flush", daemon=True
            )
            with self._state_lock:
                if stop_event.is_set():
                    break
                self._tick_threads = [t for t in self._tick_threads if t.is_alive()]
                self._tick_threads.append(tick_thread)
                tick_thread.start()
            delay = self.interval
