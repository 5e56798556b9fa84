"""Time sources shared by the instability engine.

Wall-clock timestamps are naive UTC datetimes, matching what the log
formatter and score records carry.  Elapsed-time checks use a monotonic
clock that tests can swap for a ``ManualClock``.
"""

import time
from datetime import datetime, timezone
from typing import Callable

MonotonicClock = Callable[[], float]


def utcnow() -> datetime:
    """Return the current UTC time as a naive (tzinfo=None) datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def monotonic() -> float:
    return time.monotonic()


class ManualClock:
    """Monotonic clock advanced explicitly by the caller."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0.0, *, minutes: float = 0.0) -> float:
        self.now += float(seconds) + float(minutes) * 60.0
        return self.now
