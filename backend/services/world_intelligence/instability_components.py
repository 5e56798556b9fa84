"""Per-country signal store and the four CII component scorers.

Each scorer maps accumulated country data plus the country's event
multiplier to a 0-100 sub-score.  Every sub-term is capped on its own
before summation, which bounds the worst case of each component.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from .signal_records import (
    ClusteredEvent,
    ConflictEvent,
    HapiConflictSummary,
    InternetOutage,
    MilitaryFlight,
    MilitaryVessel,
    SocialUnrestEvent,
    UcdpConflictStatus,
)

# Multipliers below this mark open, media-saturated countries whose raw
# event counts are log-compressed.
HIGH_VOLUME_MULTIPLIER = 0.7

# ACLED publishes plural, spaced labels; the dashboard feeds use tokens.
_CONFLICT_TYPE_ALIASES = {
    "battles": "battle",
    "explosions/remote violence": "explosion",
    "explosions": "explosion",
    "remote violence": "remote_violence",
    "violence against civilians": "violence_against_civilians",
}


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class CountryData:
    """Everything ingested for one tier-1 country since the last clear."""

    protests: list[SocialUnrestEvent] = field(default_factory=list)
    conflicts: list[ConflictEvent] = field(default_factory=list)
    ucdp_status: Optional[UcdpConflictStatus] = None
    hapi_summary: Optional[HapiConflictSummary] = None
    military_flights: list[MilitaryFlight] = field(default_factory=list)
    military_vessels: list[MilitaryVessel] = field(default_factory=list)
    # Foreign presence over this country's territory, already doubled.
    foreign_flight_weight: int = 0
    foreign_vessel_weight: int = 0
    news_events: list[ClusteredEvent] = field(default_factory=list)
    outages: list[InternetOutage] = field(default_factory=list)
    displacement_outflow: int = 0
    climate_stress: float = 0.0

    @property
    def flight_count(self) -> int:
        return len(self.military_flights) + self.foreign_flight_weight

    @property
    def vessel_count(self) -> int:
        return len(self.military_vessels) + self.foreign_vessel_weight


def is_high_volume(multiplier: float) -> bool:
    return multiplier < HIGH_VOLUME_MULTIPLIER


def normalize_conflict_type(event_type: str) -> str:
    text = str(event_type or "").strip().lower()
    return _CONFLICT_TYPE_ALIASES.get(text, text)


# ---------------------------------------------------------------------------
# Component scorers
# ---------------------------------------------------------------------------


def unrest_volume(count: int, multiplier: float) -> float:
    """Multiplier-adjusted protest count before the x8 scale and cap."""
    if is_high_volume(multiplier):
        return math.log2(count + 1) * multiplier * 5
    return count * multiplier


def unrest_component(data: CountryData, multiplier: float) -> float:
    """Unrest sub-score from protests and internet outages.

    Outages count even without protests: governments cut connectivity
    during crackdowns, coups and offensives.
    """
    base = 0.0
    fatality_boost = 0.0
    severity_boost = 0.0

    protest_count = len(data.protests)
    if protest_count > 0:
        fatalities = sum(p.fatalities or 0 for p in data.protests)
        high_severity = sum(1 for p in data.protests if p.severity == "high")
        base = min(50.0, unrest_volume(protest_count, multiplier) * 8)
        fatality_boost = min(30.0, fatalities * 5 * multiplier)
        severity_boost = min(20.0, high_severity * 10 * multiplier)

    outage_boost = 0.0
    if data.outages:
        total = sum(1 for o in data.outages if o.severity == "total")
        major = sum(1 for o in data.outages if o.severity == "major")
        partial = sum(1 for o in data.outages if o.severity == "partial")
        outage_boost = min(50.0, total * 30 + major * 15 + partial * 5)

    return min(100.0, base + fatality_boost + severity_boost + outage_boost)


def conflict_component(data: CountryData, multiplier: float) -> float:
    """Conflict sub-score from armed-conflict events.

    Weighted: civilian targeting (5), explosions (4), battles (3).  With no
    event rows, a conflict summary still yields a capped fallback score.
    """
    events = data.conflicts
    if not events and data.hapi_summary is None:
        return 0.0

    battles = explosions = civilian = 0
    for event in events:
        kind = normalize_conflict_type(event.event_type)
        if kind == "battle":
            battles += 1
        elif kind in ("explosion", "remote_violence"):
            explosions += 1
        elif kind == "violence_against_civilians":
            civilian += 1
    total_fatalities = sum(max(0, e.fatalities or 0) for e in events)

    event_score = min(50.0, (battles * 3 + explosions * 4 + civilian * 5) * multiplier)
    fatality_score = min(40.0, math.sqrt(total_fatalities) * 5 * multiplier)
    civilian_boost = min(10.0, civilian * 3) if civilian > 0 else 0.0

    fallback = 0.0
    if not events and data.hapi_summary is not None:
        summary = data.hapi_summary
        fallback = min(
            60.0,
            (summary.events_political_violence * 2 + summary.events_civilian_targeting * 3)
            * multiplier,
        )

    return min(100.0, max(event_score + fatality_score + civilian_boost, fallback))


def security_component(data: CountryData) -> float:
    """Security sub-score from military flights (3 each) and vessels (5 each)."""
    flight_score = min(50.0, data.flight_count * 3.0)
    vessel_score = min(30.0, data.vessel_count * 5.0)
    return min(100.0, flight_score + vessel_score)


def information_component(data: CountryData, multiplier: float) -> float:
    """Information sub-score from news-cluster volume, velocity and alerts."""
    count = len(data.news_events)
    if count == 0:
        return 0.0

    high_volume = is_high_volume(multiplier)
    velocity_sum = sum(e.sources_per_hour or 0.0 for e in data.news_events)
    avg_velocity = velocity_sum / count

    if high_volume:
        adjusted = math.log2(count + 1) * multiplier * 3
    else:
        adjusted = count * multiplier
    base = min(40.0, adjusted * 5)

    # Only breaking-news velocity counts.
    threshold = 5.0 if high_volume else 2.0
    velocity_boost = 0.0
    if avg_velocity > threshold:
        velocity_boost = min(40.0, (avg_velocity - threshold) * 10 * multiplier)

    alert_boost = 20 * multiplier if any(e.is_alert for e in data.news_events) else 0.0

    return min(100.0, base + velocity_boost + alert_boost)
