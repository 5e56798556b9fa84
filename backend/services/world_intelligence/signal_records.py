"""Upstream signal records consumed by the instability scorer.

Collectors live outside this package; these dataclasses are the shapes
the scorer ingests.  ``from_dict`` accepts both the snake_case field names
and the camelCase keys emitted by the dashboard feeds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional


def _pick(row: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return default


def _as_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _as_int(value: Any, default: int = 0) -> int:
    number = _as_float(value, None)
    return int(number) if number is not None else default


def _as_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


_TRUE_TEXT = {"true", "1", "yes", "y", "on"}
_FALSE_TEXT = {"false", "0", "no", "n", "off", ""}


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
        return default
    if isinstance(value, (int, float)):
        return value != 0
    return default


# ---------------------------------------------------------------------------
# Event records
# ---------------------------------------------------------------------------


@dataclass
class SocialUnrestEvent:
    """A protest or riot report."""

    country: str
    lat: Optional[float]
    lon: Optional[float]
    severity: str = "low"  # "low" | "medium" | "high"
    fatalities: int = 0
    event_type: str = "protest"
    title: str = ""

    @classmethod
    def from_dict(cls, row: dict) -> SocialUnrestEvent:
        return cls(
            country=_as_text(_pick(row, "country")),
            lat=_as_float(_pick(row, "lat", "latitude"), None),
            lon=_as_float(_pick(row, "lon", "longitude"), None),
            severity=_as_text(_pick(row, "severity", default="low")).lower(),
            fatalities=_as_int(_pick(row, "fatalities")),
            event_type=_as_text(_pick(row, "event_type", "eventType", default="protest")).lower(),
            title=_as_text(_pick(row, "title")),
        )


@dataclass
class ConflictEvent:
    """A single armed-conflict event (ACLED-style)."""

    country: str
    lat: Optional[float]
    lon: Optional[float]
    event_type: str  # "battle" | "explosion" | "remote_violence" | "violence_against_civilians"
    fatalities: int = 0
    event_id: str = ""

    @classmethod
    def from_dict(cls, row: dict) -> ConflictEvent:
        return cls(
            country=_as_text(_pick(row, "country")),
            lat=_as_float(_pick(row, "lat", "latitude"), None),
            lon=_as_float(_pick(row, "lon", "longitude"), None),
            event_type=_as_text(_pick(row, "event_type", "eventType")).lower(),
            fatalities=_as_int(_pick(row, "fatalities")),
            event_id=_as_text(_pick(row, "event_id", "eventId", "id")),
        )


@dataclass
class UcdpConflictStatus:
    """Conflict-intensity classification for one country."""

    intensity: str  # "war" | "minor" | "none"
    conflict_name: str = ""
    year: Optional[int] = None

    @classmethod
    def from_dict(cls, row: dict) -> UcdpConflictStatus:
        year = _pick(row, "year")
        return cls(
            intensity=_as_text(_pick(row, "intensity", default="none")).lower(),
            conflict_name=_as_text(_pick(row, "conflict_name", "conflictName")),
            year=_as_int(year) if year is not None else None,
        )


@dataclass
class HapiConflictSummary:
    """Aggregated political-violence counts used when no event rows exist."""

    events_political_violence: int = 0
    events_civilian_targeting: int = 0
    fatalities_political_violence: int = 0

    @classmethod
    def from_dict(cls, row: dict) -> HapiConflictSummary:
        return cls(
            events_political_violence=_as_int(
                _pick(row, "events_political_violence", "eventsPoliticalViolence")
            ),
            events_civilian_targeting=_as_int(
                _pick(row, "events_civilian_targeting", "eventsCivilianTargeting")
            ),
            fatalities_political_violence=_as_int(
                _pick(row, "fatalities_political_violence", "fatalitiesPoliticalViolence")
            ),
        )


@dataclass
class MilitaryFlight:
    operator_country: str
    lat: Optional[float]
    lon: Optional[float]
    callsign: str = ""

    @classmethod
    def from_dict(cls, row: dict) -> MilitaryFlight:
        return cls(
            operator_country=_as_text(_pick(row, "operator_country", "operatorCountry")),
            lat=_as_float(_pick(row, "lat", "latitude"), None),
            lon=_as_float(_pick(row, "lon", "longitude"), None),
            callsign=_as_text(_pick(row, "callsign")),
        )


@dataclass
class MilitaryVessel:
    operator_country: str
    lat: Optional[float]
    lon: Optional[float]
    name: str = ""

    @classmethod
    def from_dict(cls, row: dict) -> MilitaryVessel:
        return cls(
            operator_country=_as_text(_pick(row, "operator_country", "operatorCountry")),
            lat=_as_float(_pick(row, "lat", "latitude"), None),
            lon=_as_float(_pick(row, "lon", "longitude"), None),
            name=_as_text(_pick(row, "name")),
        )


@dataclass
class ClusteredEvent:
    """A news cluster: several sources reporting the same story."""

    primary_title: str
    sources_per_hour: float = 0.0  # velocity; 0 when the clusterer has none
    is_alert: bool = False

    @classmethod
    def from_dict(cls, row: dict) -> ClusteredEvent:
        velocity = _pick(row, "velocity")
        if isinstance(velocity, dict):
            sources_per_hour = _pick(velocity, "sources_per_hour", "sourcesPerHour", default=0.0)
        else:
            sources_per_hour = _pick(row, "sources_per_hour", "sourcesPerHour", default=0.0)
        return cls(
            primary_title=_as_text(_pick(row, "primary_title", "primaryTitle", "title")),
            sources_per_hour=_as_float(sources_per_hour) or 0.0,
            is_alert=_as_bool(_pick(row, "is_alert", "isAlert")),
        )


@dataclass
class InternetOutage:
    country: str
    severity: str  # "total" | "major" | "partial"
    title: str = ""

    @classmethod
    def from_dict(cls, row: dict) -> InternetOutage:
        return cls(
            country=_as_text(_pick(row, "country")),
            severity=_as_text(_pick(row, "severity")).lower(),
            title=_as_text(_pick(row, "title")),
        )


@dataclass
class CountryDisplacement:
    """UNHCR-style displacement figures for a country of origin."""

    code: str  # ISO2 or ISO3
    name: str
    refugees: int = 0
    asylum_seekers: int = 0

    @property
    def outflow(self) -> int:
        return self.refugees + self.asylum_seekers

    @classmethod
    def from_dict(cls, row: dict) -> CountryDisplacement:
        return cls(
            code=_as_text(_pick(row, "code", "iso3", "iso")).upper(),
            name=_as_text(_pick(row, "name")),
            refugees=_as_int(_pick(row, "refugees")),
            asylum_seekers=_as_int(_pick(row, "asylum_seekers", "asylumSeekers")),
        )


@dataclass
class ClimateAnomaly:
    zone: str
    severity: str  # "normal" | "moderate" | "extreme"

    @classmethod
    def from_dict(cls, row: dict) -> ClimateAnomaly:
        return cls(
            zone=_as_text(_pick(row, "zone")),
            severity=_as_text(_pick(row, "severity", default="normal")).lower(),
        )
