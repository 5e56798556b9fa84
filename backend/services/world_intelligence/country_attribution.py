"""Country attribution for free-text mentions and coordinates.

Resolves upstream records to tier-1 country codes.  Anything that does
not resolve to a whitelisted code returns ``None``; callers drop the
record without treating it as an error.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from interfaces.world_signals import CountryGeometryLookup
from .country_catalog import CountryCatalog, country_catalog as default_country_catalog

logger = logging.getLogger(__name__)


class CountryAttributor:
    def __init__(
        self,
        catalog: Optional[CountryCatalog] = None,
        geometry: Optional[CountryGeometryLookup] = None,
    ) -> None:
        self._catalog = catalog or default_country_catalog
        self._geometry = geometry

    def resolve_text(self, text: Optional[str]) -> Optional[str]:
        """Keyword match first, then full country name; case-insensitive substring."""
        lower = str(text or "").lower()
        if not lower.strip():
            return None
        countries = self._catalog.countries()
        for country in countries:
            if country.matches_keyword(lower):
                return country.code
        for country in countries:
            if country.matches_name(lower):
                return country.code
        return None

    def match_keywords(self, text: Optional[str]) -> list[str]:
        """Every tier-1 code whose keyword list matches *text*."""
        lower = str(text or "").lower()
        if not lower.strip():
            return []
        return [
            country.code
            for country in self._catalog.countries()
            if country.matches_keyword(lower)
        ]

    def resolve_location(self, lat: Optional[float], lon: Optional[float]) -> Optional[str]:
        """Precise geometry lookup first, bounding boxes as fallback."""
        if lat is None or lon is None:
            return None
        try:
            lat_f = float(lat)
            lon_f = float(lon)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
            return None

        countries = self._catalog.countries()
        if self._geometry is not None:
            candidates = [c.code for c in countries]
            try:
                precise = self._geometry.country_at(lat_f, lon_f, candidates)
            except Exception as exc:
                logger.debug("Geometry lookup failed at (%.3f, %.3f): %s", lat_f, lon_f, exc)
                precise = None
            if precise and self._catalog.is_tier1(precise):
                return str(precise).strip().upper()

        for country in countries:
            if country.contains(lat_f, lon_f):
                return country.code
        return None

    def resolve_displacement(self, code: Optional[str], name: Optional[str]) -> Optional[str]:
        """Map a displacement row's ISO3/ISO2 code or country name to a tier-1 code."""
        raw_code = str(code or "").strip().upper()
        if len(raw_code) == 3:
            resolved = self._catalog.iso3_to_code().get(raw_code) or raw_code[:2]
        else:
            resolved = self._catalog.name_to_code().get(str(name or "").strip()) or raw_code
        if not resolved or not self._catalog.is_tier1(resolved):
            return None
        return resolved
