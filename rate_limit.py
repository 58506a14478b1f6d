# rate_limit.py
#
# Purpose:
# Bound how often RepoGrade calls the LLM provider: at most N calls per
# rolling 60-second window.
#
# How the window works:
# - There is no background timer. The counter is reset lazily, the next time
#   someone asks after more than 60 seconds have passed since the last reset.
# - Over quota is a hard stop for that attempt. Nothing is queued or retried.
#
# The limiter is shared by all concurrent analyses in one process and uses a
# plain read-then-write counter, so it is advisory under concurrent load.

import logging
import math
import time

import config

logger = logging.getLogger(__name__)


class RateLimitError(Exception):
    """Raised when the per-minute call budget is used up."""

    def __init__(self, wait_seconds):
        self.wait_seconds = wait_seconds
        super().__init__(
            f"Rate limit exceeded. Please wait {wait_seconds} seconds before trying again."
        )


class RateLimiter:
    """
    At most max_calls calls per window_seconds.

    calls counts what the current window has used; last_reset is when that
    window started. Both are public so callers and tests can inspect them.
    """

    def __init__(self, max_calls=None, window_seconds=None, clock=time.time):
        self.max_calls = config.MAX_CALLS_PER_MINUTE if max_calls is None else max_calls
        self.window_seconds = (
            config.RATE_LIMIT_WINDOW_SECONDS if window_seconds is None else window_seconds
        )
        self._clock = clock
        self.calls = 0
        self.last_reset = clock()

    def _maybe_reset(self, now):
        if now - self.last_reset > self.window_seconds:
            self.calls = 0
            self.last_reset = now

    def remaining(self):
        self._maybe_reset(self._clock())
        return max(self.max_calls - self.calls, 0)

    def wait_seconds(self):
        """Whole seconds until the current window resets."""
        now = self._clock()
        return max(math.ceil(self.window_seconds - (now - self.last_reset)), 0)

    def try_acquire(self):
        """Take one call from the budget. Returns False (and takes nothing) when empty."""
        now = self._clock()
        self._maybe_reset(now)
        if self.calls >= self.max_calls:
            return False
        self.calls += 1
        logger.debug("Rate limiter: %d/%d calls used in this window", self.calls, self.max_calls)
        return True

    def acquire(self):
        """Like try_acquire(), but raises RateLimitError with a wait-time hint."""
        if not self.try_acquire():
            raise RateLimitError(self.wait_seconds())
