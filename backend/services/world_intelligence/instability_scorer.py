"""Country Instability Index (CII).

Composite 0-100 instability score per tier-1 country.  Blends structural
baseline risk with live signals (unrest, armed conflict, military
presence, news velocity) and additive boosts (hotspot proximity, news
urgency, focal-point urgency, displacement, climate stress), then applies
the conflict-intensity floor.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, TypeVar, Union

from config import settings
from interfaces.world_signals import CountryGeometryLookup, FocalPointSource
from utils.clock import MonotonicClock, utcnow
from utils.logger import ingest_logger
from .country_attribution import CountryAttributor
from .country_catalog import CountryCatalog, country_catalog as default_country_catalog
from .hotspot_tracker import HotspotActivityTracker
from .instability_components import (
    CountryData,
    conflict_component,
    information_component,
    security_component,
    unrest_component,
)
from .learning_mode import LearningMode, LearningProgress
from .region_catalog import RegionCatalog, region_catalog as default_region_catalog
from .signal_records import (
    ClimateAnomaly,
    ClusteredEvent,
    ConflictEvent,
    CountryDisplacement,
    HapiConflictSummary,
    InternetOutage,
    MilitaryFlight,
    MilitaryVessel,
    SocialUnrestEvent,
    UcdpConflictStatus,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Structural constants
# ---------------------------------------------------------------------------

COMPONENT_WEIGHTS: dict[str, float] = {
    "unrest": 0.25,
    "conflict": 0.30,
    "security": 0.20,
    "information": 0.25,
}
BASELINE_WEIGHT = 0.4
EVENT_WEIGHT = 0.6

# Conflict-intensity floors: a classified war never reads below "high".
CONFLICT_FLOORS: dict[str, float] = {
    "war": 70.0,
    "minor": 50.0,
    "none": 0.0,
}

# Lower bounds of each severity level, highest first.
LEVEL_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (81, "critical"),
    (66, "high"),
    (51, "elevated"),
    (31, "normal"),
)

TREND_THRESHOLD = 5

DISPLACEMENT_MAJOR = 1_000_000
DISPLACEMENT_SIGNIFICANT = 100_000

CLIMATE_STRESS_EXTREME = 15.0
CLIMATE_STRESS_MODERATE = 8.0

_Record = TypeVar("_Record")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ComponentScores:
    unrest: float
    conflict: float
    security: float
    information: float

    def rounded(self) -> ComponentScores:
        return ComponentScores(
            unrest=round_half_up(self.unrest),
            conflict=round_half_up(self.conflict),
            security=round_half_up(self.security),
            information=round_half_up(self.information),
        )

    def event_score(self) -> float:
        return (
            self.unrest * COMPONENT_WEIGHTS["unrest"]
            + self.conflict * COMPONENT_WEIGHTS["conflict"]
            + self.security * COMPONENT_WEIGHTS["security"]
            + self.information * COMPONENT_WEIGHTS["information"]
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "unrest": self.unrest,
            "conflict": self.conflict,
            "security": self.security,
            "information": self.information,
        }


@dataclass
class CountryInstabilityScore:
    """Instability score for a single country."""

    code: str
    name: str
    score: int  # 0-100
    level: str  # "low" | "normal" | "elevated" | "high" | "critical"
    trend: str  # "rising" | "falling" | "stable"
    change_24h: int
    components: ComponentScores
    last_updated: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "score": self.score,
            "level": self.level,
            "trend": self.trend,
            "change24h": self.change_24h,
            "components": self.components.to_dict(),
            "lastUpdated": self.last_updated.isoformat() + "Z",
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def level_for_score(score: float) -> str:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return "low"


def trend_for_delta(delta: Optional[float]) -> str:
    if delta is None:
        return "stable"
    if delta >= TREND_THRESHOLD:
        return "rising"
    if delta <= -TREND_THRESHOLD:
        return "falling"
    return "stable"


def news_urgency_boost(information: float) -> float:
    if information >= 70:
        return 5.0
    if information >= 50:
        return 3.0
    return 0.0


def focal_boost(urgency: Optional[str]) -> float:
    if urgency == "critical":
        return 8.0
    if urgency == "elevated":
        return 4.0
    return 0.0


def displacement_boost(outflow: float) -> float:
    if outflow >= DISPLACEMENT_MAJOR:
        return 8.0
    if outflow >= DISPLACEMENT_SIGNIFICANT:
        return 4.0
    return 0.0


def _coerce_records(rows: Optional[Iterable[Any]], record_type: type[_Record]) -> list[_Record]:
    out: list[_Record] = []
    for row in rows or []:
        if isinstance(row, record_type):
            out.append(row)
        elif isinstance(row, Mapping):
            out.append(record_type.from_dict(dict(row)))
    return out


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------


class InstabilityScorer:
    """Owns every piece of mutable CII state for one scoring session.

    Score formula:
        event   = unrest*0.25 + conflict*0.30 + security*0.20 + information*0.25
        blended = baseline*0.4 + event*0.6 + hotspot + news_urgency + focal
                  + displacement + climate
        final   = round(min(100, max(conflict_floor, blended)))

    Not thread-safe: one caller ingests and scores between polling cycles.
    """

    def __init__(
        self,
        countries: Optional[CountryCatalog] = None,
        regions: Optional[RegionCatalog] = None,
        geometry: Optional[CountryGeometryLookup] = None,
        focal_points: Optional[FocalPointSource] = None,
        learning_duration_minutes: Optional[float] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self._countries = countries or default_country_catalog
        self._regions = regions or default_region_catalog
        self._attributor = CountryAttributor(self._countries, geometry)
        self._hotspots = HotspotActivityTracker(self._regions, is_tracked=self._countries.is_tier1)
        self._focal_points = focal_points
        self._learning = LearningMode(learning_duration_minutes, clock)
        self._country_data: dict[str, CountryData] = {}
        self._previous_scores: dict[str, int] = {}
        self._warned_intensities: set[str] = set()

    # -- Collaborators ---------------------------------------------------------

    @property
    def hotspots(self) -> HotspotActivityTracker:
        return self._hotspots

    def set_focal_point_source(self, source: Optional[FocalPointSource]) -> None:
        self._focal_points = source

    def _data_for(self, code: str) -> CountryData:
        data = self._country_data.get(code)
        if data is None:
            data = CountryData()
            self._country_data[code] = data
        return data

    def _normalize_code(self, code: Any) -> Optional[str]:
        text = str(code or "").strip().upper()
        if len(text) == 3:
            text = self._countries.iso3_to_code().get(text, "")
        return text if self._countries.is_tier1(text) else None

    # -- Ingestion -------------------------------------------------------------

    def ingest_protests(self, events: Iterable[SocialUnrestEvent | Mapping]) -> int:
        records = _coerce_records(events, SocialUnrestEvent)
        attributed = 0
        for event in records:
            code = self._attributor.resolve_text(event.country)
            if code is None:
                continue
            self._data_for(code).protests.append(event)
            self._hotspots.track_activity(event.lat, event.lon, 2.0 if event.severity == "high" else 1.0)
            attributed += 1
        ingest_logger.debug("Protests ingested", attributed=attributed, dropped=len(records) - attributed)
        return attributed

    def ingest_conflicts(self, events: Iterable[ConflictEvent | Mapping]) -> int:
        records = _coerce_records(events, ConflictEvent)
        attributed = 0
        for event in records:
            code = self._attributor.resolve_text(event.country)
            if code is None:
                continue
            self._data_for(code).conflicts.append(event)
            self._hotspots.track_activity(event.lat, event.lon, 3.0 if event.fatalities > 0 else 2.0)
            attributed += 1
        ingest_logger.debug("Conflicts ingested", attributed=attributed, dropped=len(records) - attributed)
        return attributed

    def ingest_ucdp(
        self, classifications: Mapping[str, Union[UcdpConflictStatus, Mapping, str]]
    ) -> int:
        attributed = 0
        for raw_code, status in (classifications or {}).items():
            code = self._normalize_code(raw_code)
            if code is None:
                continue
            if isinstance(status, str):
                status = UcdpConflictStatus(intensity=status.strip().lower())
            elif isinstance(status, Mapping):
                status = UcdpConflictStatus.from_dict(dict(status))
            self._data_for(code).ucdp_status = status
            attributed += 1
        ingest_logger.debug("Conflict intensity ingested", attributed=attributed)
        return attributed

    def ingest_hapi(self, summaries: Mapping[str, Union[HapiConflictSummary, Mapping]]) -> int:
        attributed = 0
        for raw_code, summary in (summaries or {}).items():
            code = self._normalize_code(raw_code)
            if code is None:
                continue
            if isinstance(summary, Mapping):
                summary = HapiConflictSummary.from_dict(dict(summary))
            self._data_for(code).hapi_summary = summary
            attributed += 1
        return attributed

    def ingest_displacement(self, countries: Iterable[CountryDisplacement | Mapping]) -> int:
        """Replace displacement outflow: reset every country, then rewrite."""
        for data in self._country_data.values():
            data.displacement_outflow = 0

        attributed = 0
        for row in _coerce_records(countries, CountryDisplacement):
            code = self._attributor.resolve_displacement(row.code, row.name)
            if code is None:
                continue
            self._data_for(code).displacement_outflow = row.outflow
            attributed += 1
        ingest_logger.debug("Displacement ingested", attributed=attributed)
        return attributed

    def ingest_climate(self, anomalies: Iterable[ClimateAnomaly | Mapping]) -> int:
        """Replace climate stress: reset every country, then rewrite."""
        for data in self._country_data.values():
            data.climate_stress = 0.0

        attributed = 0
        for anomaly in _coerce_records(anomalies, ClimateAnomaly):
            if anomaly.severity == "normal":
                continue
            stress = CLIMATE_STRESS_EXTREME if anomaly.severity == "extreme" else CLIMATE_STRESS_MODERATE
            for code in self._countries_for_zone(anomaly.zone):
                data = self._data_for(code)
                data.climate_stress = max(data.climate_stress, stress)
                attributed += 1
        return attributed

    def _countries_for_zone(self, zone: str) -> list[str]:
        codes = self._regions.climate_zone_countries(zone)
        return [code for code in codes if self._countries.is_tier1(code)]

    def ingest_military(
        self,
        flights: Iterable[MilitaryFlight | Mapping],
        vessels: Iterable[MilitaryVessel | Mapping],
    ) -> int:
        """Credit operators with their own assets and locations with foreign presence.

        Foreign aircraft or ships over a tier-1 country count double against
        that country's security component.
        """
        foreign_flights: dict[str, int] = {}
        foreign_vessels: dict[str, int] = {}
        attributed = 0

        for flight in _coerce_records(flights, MilitaryFlight):
            operator = self._attributor.resolve_text(flight.operator_country)
            if operator is not None:
                self._data_for(operator).military_flights.append(flight)
                attributed += 1
            location = self._attributor.resolve_location(flight.lat, flight.lon)
            if location is not None and location != operator:
                foreign_flights[location] = foreign_flights.get(location, 0) + 1
            self._hotspots.track_activity(flight.lat, flight.lon, 1.5)

        for vessel in _coerce_records(vessels, MilitaryVessel):
            operator = self._attributor.resolve_text(vessel.operator_country)
            if operator is not None:
                self._data_for(operator).military_vessels.append(vessel)
                attributed += 1
            location = self._attributor.resolve_location(vessel.lat, vessel.lon)
            if location is not None and location != operator:
                foreign_vessels[location] = foreign_vessels.get(location, 0) + 1
            self._hotspots.track_activity(vessel.lat, vessel.lon, 2.0)

        for code, count in foreign_flights.items():
            self._data_for(code).foreign_flight_weight += count * 2
        for code, count in foreign_vessels.items():
            self._data_for(code).foreign_vessel_weight += count * 2

        ingest_logger.debug(
            "Military ingested",
            attributed=attributed,
            foreign_flight_countries=sorted(foreign_flights),
            foreign_vessel_countries=sorted(foreign_vessels),
        )
        return attributed

    def ingest_news(self, events: Iterable[ClusteredEvent | Mapping]) -> int:
        """Credit each cluster to every tier-1 country whose keywords its title matches."""
        attributed = 0
        for event in _coerce_records(events, ClusteredEvent):
            for code in self._attributor.match_keywords(event.primary_title):
                self._data_for(code).news_events.append(event)
                attributed += 1
        ingest_logger.debug("News clusters ingested", attributed=attributed)
        return attributed

    def ingest_outages(self, outages: Iterable[InternetOutage | Mapping]) -> int:
        attributed = 0
        for outage in _coerce_records(outages, InternetOutage):
            code = self._attributor.resolve_text(outage.country)
            if code is None:
                continue
            self._data_for(code).outages.append(outage)
            attributed += 1
        ingest_logger.debug("Outages ingested", attributed=attributed)
        return attributed

    # -- Scoring ---------------------------------------------------------------

    def _conflict_floor(self, data: CountryData) -> float:
        status = data.ucdp_status
        if status is None:
            return 0.0
        intensity = str(status.intensity or "none").strip().lower()
        floor = CONFLICT_FLOORS.get(intensity)
        if floor is None:
            if intensity not in self._warned_intensities:
                self._warned_intensities.add(intensity)
                logger.warning("Unrecognized conflict intensity %r treated as none", intensity)
            return 0.0
        return floor

    def _focal_urgencies(self) -> Mapping[str, str]:
        if self._focal_points is None:
            return {}
        try:
            return self._focal_points.get_country_urgency_map() or {}
        except Exception as exc:
            logger.warning("Focal-point urgency unavailable: %s", exc)
            return {}

    def _components(self, code: str, data: CountryData) -> ComponentScores:
        multiplier = self._countries.event_multiplier(code)
        return ComponentScores(
            unrest=unrest_component(data, multiplier),
            conflict=conflict_component(data, multiplier),
            security=security_component(data),
            information=information_component(data, multiplier),
        )

    def _composite(
        self,
        code: str,
        data: CountryData,
        components: ComponentScores,
        urgency: Optional[str],
    ) -> int:
        baseline = self._countries.baseline_risk(code)
        blended = (
            baseline * BASELINE_WEIGHT
            + components.event_score() * EVENT_WEIGHT
            + self._hotspots.get_boost(code)
            + news_urgency_boost(components.information)
            + focal_boost(urgency)
            + displacement_boost(data.displacement_outflow)
            + data.climate_stress
        )
        floor = self._conflict_floor(data)
        return round_half_up(min(100.0, max(floor, blended)))

    def calculate(self) -> list[CountryInstabilityScore]:
        """Score every tier-1 country, ranked highest first.

        Updates the previous-score snapshot used for trend and delta.
        """
        urgencies = self._focal_urgencies()
        results: list[CountryInstabilityScore] = []

        for country in self._countries.countries():
            code = country.code
            data = self._country_data.get(code) or CountryData()
            components = self._components(code, data).rounded()
            score = self._composite(code, data, components, urgencies.get(code))

            previous = self._previous_scores.get(code)
            delta = score - previous if previous is not None else None
            results.append(
                CountryInstabilityScore(
                    code=code,
                    name=country.name,
                    score=score,
                    level=level_for_score(score),
                    trend=trend_for_delta(delta),
                    change_24h=delta or 0,
                    components=components,
                )
            )
            self._previous_scores[code] = score

        results.sort(key=lambda r: r.score, reverse=True)
        logger.info(
            "Instability scores computed for %d countries (top: %s = %d)",
            len(results),
            results[0].code if results else "-",
            results[0].score if results else 0,
        )
        return results

    def get_top_unstable(self, limit: Optional[int] = None) -> list[CountryInstabilityScore]:
        if limit is None:
            limit = settings.CII_TOP_N_DEFAULT
        return self.calculate()[: max(0, int(limit))]

    def get_country_score(self, code: str) -> Optional[int]:
        """Score one country from unrounded components; None without ingested data.

        Leaves the previous-score snapshot untouched.
        """
        code = str(code or "").strip().upper()
        data = self._country_data.get(code)
        if data is None:
            return None
        components = self._components(code, data)
        return self._composite(code, data, components, self._focal_urgencies().get(code))

    def get_country_data(self, code: str) -> Optional[CountryData]:
        return self._country_data.get(str(code or "").strip().upper())

    def get_previous_scores(self) -> dict[str, int]:
        return dict(self._previous_scores)

    def clear(self) -> None:
        """Drop all ingested data and hotspot activity.

        Previous scores and learning state survive so trends stay continuous.
        """
        self._country_data.clear()
        self._hotspots.clear()

    # -- Learning mode ---------------------------------------------------------

    def start_learning(self) -> None:
        self._learning.start()

    def set_has_cached_scores(self, has_scores: bool) -> None:
        self._learning.set_has_cached_scores(has_scores)

    def is_in_learning_mode(self) -> bool:
        return self._learning.is_in_learning_mode()

    def get_learning_progress(self) -> LearningProgress:
        return self._learning.get_progress()


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

instability_scorer = InstabilityScorer()
