"""
Background epoch reset on window boundaries (daily by default)
"""
from datetime import datetime, timezone
from threading import Event, Lock, Thread
from typing import Callable, Optional
import logging

from toptalkers.core.listener import RequestListener
from toptalkers.utils.time_windows import TimeWindow, TimeWindowBucketer

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class EpochScheduler:
    """
    Calls listener.reset_epoch() whenever the clock enters a new window

    The listener itself has no notion of time; this is the external
    scheduler that drives its resets.
    """

    def __init__(
        self,
        listener: RequestListener,
        window: TimeWindow = TimeWindow.DAY,
        poll_interval: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize scheduler

        Args:
            listener: Listener to reset
            window: Reset period
            poll_interval: Longest sleep between clock checks, in seconds
            clock: Returns the current time (injected for tests)
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        self.listener = listener
        self.window = window
        self.poll_interval = poll_interval
        self.clock = clock
        self.bucketer = TimeWindowBucketer()

        self._bucket: Optional[str] = None
        self._check_lock = Lock()
        self._stop = Event()
        self._thread: Optional[Thread] = None

    def check(self, now: Optional[datetime] = None) -> bool:
        """
        Reset the listener if `now` falls in a later bucket than last seen

        The first call only records the current bucket. A clock that steps
        back into an earlier bucket is ignored until it passes the latest
        bucket seen. Bucket strings are zero-padded, so they order like
        the times they stand for.

        Returns:
            True if a reset happened
        """
        now = now or self.clock()
        bucket = self.bucketer.bucket_timestamp(now, self.window)

        with self._check_lock:
            if self._bucket is None:
                self._bucket = bucket
                return False
            if bucket <= self._bucket:
                return False
            previous = self._bucket
            self._bucket = bucket

        logger.info(f"Window {self.window.value} rolled over from {previous} to {bucket}")
        self.listener.reset_epoch()
        return True

    def seconds_until_reset(self, now: Optional[datetime] = None) -> float:
        """Seconds until the next window boundary"""
        now = now or self.clock()
        boundary = self.bucketer.get_next_boundary(now, self.window)
        return (boundary - now).total_seconds()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread (no-op if already running)"""
        if self.running:
            return

        self._stop.clear()
        self.check()
        self._thread = Thread(target=self._run, name="epoch-scheduler", daemon=True)
        self._thread.start()
        logger.info(
            f"Epoch scheduler started: window={self.window.value}, "
            f"next reset in {self.seconds_until_reset():.0f}s"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the background thread and wait for it to exit"""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("Epoch scheduler stopped")

    def _run(self) -> None:
        while True:
            timeout = max(min(self.poll_interval, self.seconds_until_reset()), 0.01)
            if self._stop.wait(timeout):
                return
            try:
                self.check()
            except Exception as e:
                logger.error(f"Epoch reset failed: {e}", exc_info=True)
