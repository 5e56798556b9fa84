"""Tier-1 country catalog for the Country Instability Index.

Only countries listed here are ever attributed, stored, or scored.  Each
row carries the static inputs the scorer needs: display name, attribution
keywords, a coarse bounding box, structural baseline risk, and the event
multiplier (>1 for closed states where each reported event matters more,
<0.7 for open, media-saturated states whose raw counts get log-compressed).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from config import settings
from utils.clock import MonotonicClock
from .catalog_loader import WorldIntelJsonCatalog

logger = logging.getLogger(__name__)

# Used when tier1_countries.json is missing or unreadable.
_DEFAULT = {
    "version": 0,
    "updated_at": None,
    "countries": [
        {
            "code": "ID",
            "name": "Indonesia",
            "iso3": "IDN",
            "keywords": [
                "indonesia", "jakarta", "jokowi", "prabowo", "tni", "indonesian",
                "java", "sumatra", "kalimantan", "sulawesi", "papua", "bali",
                "nkri", "dpr ri", "kemhan",
            ],
            "exclusions": ["javascript", "sputnik", "cannibal"],
            "bounds": [-11, 6, 95, 141],
            "baseline_risk": 20,
            "event_multiplier": 1.2,
        },
    ],
    "iso3_aliases": {"IDN": "ID"},
    "name_aliases": {"Indonesia": "ID"},
}


@dataclass(frozen=True)
class Tier1Country:
    code: str  # ISO 3166-1 alpha-2
    name: str
    iso3: str = ""
    keywords: tuple[str, ...] = ()
    bounds: Optional[tuple[float, float, float, float]] = None  # min_lat, max_lat, min_lon, max_lon
    baseline_risk: Optional[float] = None
    event_multiplier: Optional[float] = None
    # Words that embed a keyword or the name ("tirana" holds "iran").
    exclusions: tuple[str, ...] = ()

    def _scrub(self, text: str) -> str:
        for phrase in self.exclusions:
            text = text.replace(phrase, " ")
        return text

    def matches_keyword(self, lower_text: str) -> bool:
        text = self._scrub(lower_text)
        return any(kw in text for kw in self.keywords)

    def matches_name(self, lower_text: str) -> bool:
        return self.name.lower() in self._scrub(lower_text)

    def contains(self, lat: float, lon: float) -> bool:
        if self.bounds is None:
            return False
        min_lat, max_lat, min_lon, max_lon = self.bounds
        return min_lat <= lat <= max_lat and min_lon <= lon <= max_lon


def _parse_bounds(raw: Any) -> Optional[tuple[float, float, float, float]]:
    if raw is None:
        return None
    if isinstance(raw, dict):
        raw = [raw.get("min_lat"), raw.get("max_lat"), raw.get("min_lon"), raw.get("max_lon")]
    values = [float(v) for v in raw]
    if len(values) != 4:
        raise ValueError("bounds needs four values")
    min_lat, max_lat, min_lon, max_lon = values
    if min_lat > max_lat or min_lon > max_lon:
        raise ValueError("bounds minimum exceeds maximum")
    return (min_lat, max_lat, min_lon, max_lon)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _phrases(raw: Any) -> tuple[str, ...]:
    return tuple(str(p).strip().lower() for p in (raw or []) if str(p).strip())


def _parse_country(row: dict[str, Any]) -> Tier1Country:
    code = str(row["code"]).strip().upper()
    if len(code) != 2:
        raise ValueError(f"country code must be alpha-2: {code!r}")
    name = str(row.get("name") or "").strip()
    if not name:
        raise ValueError("country name is required")
    keywords = _phrases(row.get("keywords"))
    return Tier1Country(
        code=code,
        name=name,
        iso3=str(row.get("iso3") or "").strip().upper(),
        keywords=keywords,
        bounds=_parse_bounds(row.get("bounds")),
        baseline_risk=_optional_float(row.get("baseline_risk")),
        event_multiplier=_optional_float(row.get("event_multiplier")),
        exclusions=_phrases(row.get("exclusions")),
    )


class CountryCatalog:
    """Whitelist of tier-1 countries, in attribution precedence order."""

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        check_interval_seconds: Optional[float] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self._catalog = WorldIntelJsonCatalog(
            "tier1_countries.json",
            _DEFAULT,
            path=path,
            check_interval_seconds=check_interval_seconds,
            clock=clock,
        )
        self._cache_revision: int | None = None
        self._cache_valid = False
        self._countries: list[Tier1Country] = []
        self._by_code: dict[str, Tier1Country] = {}
        self._iso3: dict[str, str] = {}
        self._names: dict[str, str] = {}

    def _refresh(self) -> None:
        revision = self._catalog.revision()
        if self._cache_valid and revision == self._cache_revision:
            return
        payload = self._catalog.payload()

        countries: list[Tier1Country] = []
        seen: set[str] = set()
        for row in payload.get("countries", []) or []:
            if not isinstance(row, dict):
                continue
            try:
                country = _parse_country(row)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid tier-1 country row %s: %s", row, exc)
                continue
            if country.code in seen:
                logger.warning("Duplicate tier-1 country %s ignored", country.code)
                continue
            seen.add(country.code)
            countries.append(country)

        iso3: dict[str, str] = {}
        raw_iso3 = payload.get("iso3_aliases") or {}
        if isinstance(raw_iso3, dict):
            for key, value in raw_iso3.items():
                k = str(key).strip().upper()
                v = str(value).strip().upper()
                if len(k) == 3 and len(v) == 2:
                    iso3[k] = v
        for country in countries:
            if country.iso3:
                iso3.setdefault(country.iso3, country.code)

        names: dict[str, str] = {}
        raw_names = payload.get("name_aliases") or {}
        if isinstance(raw_names, dict):
            for key, value in raw_names.items():
                k = str(key).strip()
                v = str(value).strip().upper()
                if k and len(v) == 2:
                    names[k] = v
        for country in countries:
            names.setdefault(country.name, country.code)

        self._countries = countries
        self._by_code = {c.code: c for c in countries}
        self._iso3 = iso3
        self._names = names
        self._cache_revision = revision
        self._cache_valid = True

    def countries(self) -> list[Tier1Country]:
        self._refresh()
        return list(self._countries)

    def codes(self) -> list[str]:
        self._refresh()
        return [c.code for c in self._countries]

    def get(self, code: str | None) -> Optional[Tier1Country]:
        self._refresh()
        return self._by_code.get(str(code or "").strip().upper())

    def is_tier1(self, code: str | None) -> bool:
        return self.get(code) is not None

    def country_name(self, code: str) -> str:
        country = self.get(code)
        return country.name if country else str(code)

    def baseline_risk(self, code: str) -> float:
        country = self.get(code)
        if country is not None and country.baseline_risk is not None:
            return country.baseline_risk
        return float(settings.CII_DEFAULT_BASELINE_RISK)

    def event_multiplier(self, code: str) -> float:
        country = self.get(code)
        if country is not None and country.event_multiplier is not None:
            return country.event_multiplier
        return float(settings.CII_DEFAULT_EVENT_MULTIPLIER)

    def iso3_to_code(self) -> dict[str, str]:
        """ISO3 -> alpha-2 lookup; covers non-tier-1 countries too."""
        self._refresh()
        return dict(self._iso3)

    def name_to_code(self) -> dict[str, str]:
        """Display-name -> alpha-2 lookup used by displacement feeds."""
        self._refresh()
        return dict(self._names)


country_catalog = CountryCatalog()
