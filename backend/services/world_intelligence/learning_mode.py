"""Startup warm-up gate for instability scores.

Scores computed in the first minutes after start-up rest on too little
data and are treated as provisional.  The window is skipped outright when
a cached score snapshot exists elsewhere.  Once complete, learning never
restarts.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from config import settings
from utils.clock import MonotonicClock, monotonic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LearningProgress:
    in_learning: bool
    remaining_minutes: int
    progress: int  # 0-100

    def to_dict(self) -> dict[str, Any]:
        return {
            "inLearning": self.in_learning,
            "remainingMinutes": self.remaining_minutes,
            "progress": self.progress,
        }


class LearningMode:
    def __init__(
        self,
        duration_minutes: Optional[float] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        if duration_minutes is None:
            duration_minutes = settings.CII_LEARNING_DURATION_MINUTES
        self._duration_seconds = max(0.0, float(duration_minutes)) * 60.0
        self._clock = clock or monotonic
        self._started_at: Optional[float] = None
        self._complete = False
        self._has_cached_scores = False

    @property
    def duration_minutes(self) -> float:
        return self._duration_seconds / 60.0

    @property
    def has_cached_scores(self) -> bool:
        return self._has_cached_scores

    def start(self) -> None:
        """Begin the warm-up window; later calls keep the first start time."""
        if self._started_at is None:
            self._started_at = self._clock()
            logger.info("CII learning mode started (%.0f min window)", self.duration_minutes)

    def set_has_cached_scores(self, has_scores: bool) -> None:
        self._has_cached_scores = bool(has_scores)
        if has_scores and not self._complete:
            self._complete = True
            logger.info("CII learning mode bypassed: cached scores available")

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._started_at)

    def is_in_learning_mode(self) -> bool:
        if self._has_cached_scores or self._complete:
            return False
        if self._started_at is None:
            return True
        if self._elapsed() >= self._duration_seconds:
            self._complete = True
            logger.info("CII learning mode complete")
            return False
        return True

    def get_progress(self) -> LearningProgress:
        if self._has_cached_scores or self._complete:
            return LearningProgress(in_learning=False, remaining_minutes=0, progress=100)
        if self._started_at is None:
            return LearningProgress(
                in_learning=True,
                remaining_minutes=math.ceil(self.duration_minutes),
                progress=0,
            )

        elapsed = self._elapsed()
        remaining = max(0.0, self._duration_seconds - elapsed)
        if self._duration_seconds <= 0:
            progress = 100.0
        else:
            progress = min(100.0, elapsed / self._duration_seconds * 100.0)
        if remaining <= 0:
            self._complete = True
        return LearningProgress(
            in_learning=remaining > 0,
            remaining_minutes=math.ceil(remaining / 60.0),
            progress=int(math.floor(progress + 0.5)),
        )
