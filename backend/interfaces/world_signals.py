"""World-signal collaborator contracts.

These protocols describe the external services the instability scorer
consults without owning: precise country geometry and the focal-point
urgency detector.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence


class CountryGeometryLookup(Protocol):
    """Point-in-polygon country resolution."""

    def country_at(
        self, lat: float, lon: float, candidates: Sequence[str]
    ) -> Optional[str]:
        """Return the alpha-2 code of the candidate country containing the point."""


class FocalPointSource(Protocol):
    """Per-country urgency reported by the focal-point detector."""

    def get_country_urgency_map(self) -> Mapping[str, str]:
        """Return alpha-2 code -> urgency ("critical" | "elevated" | other)."""
