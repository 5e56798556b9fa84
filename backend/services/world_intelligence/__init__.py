"""World Intelligence: Country Instability Index engine.

Attributes conflict, unrest, military, news, outage, displacement and
climate signals to tier-1 countries and scores each 0-100.
"""

from .country_catalog import country_catalog, CountryCatalog, Tier1Country
from .region_catalog import region_catalog, RegionCatalog, RegionAnchor
from .country_attribution import CountryAttributor
from .hotspot_tracker import HotspotActivityTracker, haversine_km
from .instability_components import (
    CountryData,
    unrest_component,
    conflict_component,
    security_component,
    information_component,
)
from .learning_mode import LearningMode, LearningProgress
from .instability_scorer import (
    instability_scorer,
    InstabilityScorer,
    CountryInstabilityScore,
    ComponentScores,
)
from .signal_records import (
    SocialUnrestEvent,
    ConflictEvent,
    UcdpConflictStatus,
    HapiConflictSummary,
    MilitaryFlight,
    MilitaryVessel,
    ClusteredEvent,
    InternetOutage,
    CountryDisplacement,
    ClimateAnomaly,
)

__all__ = [
    "country_catalog", "CountryCatalog", "Tier1Country",
    "region_catalog", "RegionCatalog", "RegionAnchor",
    "CountryAttributor",
    "HotspotActivityTracker", "haversine_km",
    "CountryData",
    "unrest_component", "conflict_component", "security_component", "information_component",
    "LearningMode", "LearningProgress",
    "instability_scorer", "InstabilityScorer", "CountryInstabilityScore", "ComponentScores",
    "SocialUnrestEvent", "ConflictEvent", "UcdpConflictStatus", "HapiConflictSummary",
    "MilitaryFlight", "MilitaryVessel", "ClusteredEvent", "InternetOutage",
    "CountryDisplacement", "ClimateAnomaly",
]
