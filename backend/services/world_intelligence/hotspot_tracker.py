"""Proximity-weighted hotspot activity per country.

Every ingested event with coordinates is measured against the static
registries in the region catalog.  Countries mapped to a nearby registry
entry accrue ``weight x registry multiplier``.  The resulting boost is
dampened and capped so proximity nudges a score without dominating it.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Callable, Optional

from .region_catalog import RegionAnchor, RegionCatalog, region_catalog as default_region_catalog

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0

HOTSPOT_RADIUS_KM = 150.0
CONFLICT_ZONE_RADIUS_KM = 300.0
WATERWAY_RADIUS_KM = 200.0

HOTSPOT_MULTIPLIER = 1.0
CONFLICT_ZONE_MULTIPLIER = 2.0
WATERWAY_MULTIPLIER = 1.5

BOOST_SCALE = 1.5
BOOST_CAP = 10.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class HotspotActivityTracker:
    """Accumulates activity per country code; cleared only via ``clear()``."""

    def __init__(
        self,
        regions: Optional[RegionCatalog] = None,
        is_tracked: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._regions = regions or default_region_catalog
        self._is_tracked = is_tracked or (lambda _code: True)
        self._activity: dict[str, float] = defaultdict(float)

    def _registries(self) -> list[tuple[list[RegionAnchor], float, float]]:
        return [
            (self._regions.hotspots(), HOTSPOT_RADIUS_KM, HOTSPOT_MULTIPLIER),
            (self._regions.conflict_zones(), CONFLICT_ZONE_RADIUS_KM, CONFLICT_ZONE_MULTIPLIER),
            (self._regions.waterways(), WATERWAY_RADIUS_KM, WATERWAY_MULTIPLIER),
        ]

    def track_activity(self, lat: Optional[float], lon: Optional[float], weight: float = 1.0) -> None:
        if lat is None or lon is None:
            return
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return
        for anchors, radius_km, multiplier in self._registries():
            for anchor in anchors:
                if haversine_km(lat, lon, anchor.latitude, anchor.longitude) >= radius_km:
                    continue
                for code in anchor.countries:
                    if self._is_tracked(code):
                        self._activity[code] += weight * multiplier

    def activity(self, code: str) -> float:
        return self._activity.get(code, 0.0)

    def get_boost(self, code: str) -> float:
        return min(BOOST_CAP, self.activity(code) * BOOST_SCALE)

    def snapshot(self) -> dict[str, float]:
        return dict(self._activity)

    def clear(self) -> None:
        self._activity.clear()
