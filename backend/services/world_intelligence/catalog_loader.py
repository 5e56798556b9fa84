"""Shared JSON catalog loader for world-intelligence data files."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from config import settings
from utils.clock import MonotonicClock, monotonic

logger = logging.getLogger(__name__)


def data_root() -> Path:
    return Path(settings.WORLD_INTEL_DATA_DIR)


class WorldIntelJsonCatalog:
    """Loads a world-intelligence JSON file with mtime-aware caching.

    The file is stat'ed at most once per ``check_interval_seconds``; lookups
    in between reuse the cached payload.  A missing or malformed file falls
    back to ``default_payload`` so the scorer keeps running on built-in data.
    """

    def __init__(
        self,
        filename: str,
        default_payload: dict[str, Any],
        *,
        path: Optional[Path] = None,
        check_interval_seconds: Optional[float] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self._path = Path(path) if path is not None else data_root() / filename
        self._default = deepcopy(default_payload)
        self._payload: dict[str, Any] = deepcopy(default_payload)
        self._loaded = False
        self._mtime_ns: int | None = None
        if check_interval_seconds is None:
            check_interval_seconds = settings.WORLD_INTEL_CATALOG_CHECK_SECONDS
        self._check_interval = max(0.0, float(check_interval_seconds))
        self._clock = clock or monotonic
        self._checked_at: float | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _is_fresh(self) -> bool:
        if not self._loaded or self._checked_at is None:
            return False
        return (self._clock() - self._checked_at) < self._check_interval

    def _reload_if_needed(self) -> None:
        if self._is_fresh():
            return
        self._checked_at = self._clock()

        if not self._path.exists():
            if not self._loaded:
                logger.warning("World-intel catalog missing, using defaults: %s", self._path)
                self._payload = deepcopy(self._default)
                self._loaded = True
            return

        try:
            mtime_ns = int(self._path.stat().st_mtime_ns)
        except OSError as exc:
            logger.warning("Failed to stat catalog %s: %s", self._path, exc)
            if not self._loaded:
                self._payload = deepcopy(self._default)
                self._loaded = True
            return

        if self._loaded and self._mtime_ns == mtime_ns:
            return

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("catalog root must be an object")
            self._payload = raw
        except (OSError, ValueError) as exc:
            logger.error("Failed loading world-intel catalog %s: %s", self._path, exc)
            self._payload = deepcopy(self._default)
        self._mtime_ns = mtime_ns
        self._loaded = True

    def payload(self) -> dict[str, Any]:
        self._reload_if_needed()
        return deepcopy(self._payload)

    def revision(self) -> int | None:
        """File mtime of the loaded payload; None while running on defaults."""
        self._reload_if_needed()
        return self._mtime_ns
