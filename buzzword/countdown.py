"""
countdown.py — Pausable round countdown.

The countdown reads a monotonic clock instead of being advanced frame by
frame, so the round machine can poll it from any coroutine. Time spent
paused is excluded from elapsed time.

Usage:
    countdown = Countdown()
    countdown.start(60.0)
    ...
    if countdown.expired:
        # decide the round as a timeout
"""

import time
from typing import Callable, Optional


class Countdown:
    """Countdown with pause/resume.

    Attributes:
        _limit:         Seconds allowed for the current round.
        _started_at:    Clock reading at start(), or None when never started.
        _paused_at:     Clock reading when paused, or None when running.
        _paused_total:  Seconds spent paused since start().
        _stopped_at:    Elapsed seconds frozen by stop(), or None.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._limit: float = 0.0
        self._started_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._paused_total: float = 0.0
        self._stopped_at: Optional[float] = None

    def start(self, limit_seconds: float) -> None:
        """Start (or restart) counting down from limit_seconds."""
        self._limit = max(0.0, float(limit_seconds))
        self._started_at = self._clock()
        self._paused_at = None
        self._paused_total = 0.0
        self._stopped_at = None

    def stop(self) -> None:
        """Freeze elapsed time. Used once the round is decided."""
        if self._started_at is not None and self._stopped_at is None:
            self._stopped_at = self.elapsed

    def pause(self) -> bool:
        """Returns False if not running or already paused."""
        if not self.running or self._paused_at is not None:
            return False
        self._paused_at = self._clock()
        return True

    def resume(self) -> bool:
        if self._paused_at is None:
            return False
        self._paused_total += self._clock() - self._paused_at
        self._paused_at = None
        return True

    @property
    def running(self) -> bool:
        return self._started_at is not None and self._stopped_at is None

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    @property
    def limit(self) -> float:
        return self._limit

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        if self._stopped_at is not None:
            return self._stopped_at
        now = self._paused_at if self._paused_at is not None else self._clock()
        return max(0.0, now - self._started_at - self._paused_total)

    @property
    def remaining(self) -> float:
        return max(0.0, self._limit - self.elapsed)

    @property
    def expired(self) -> bool:
        return self._started_at is not None and self.elapsed >= self._limit
