"""Shared fixtures for Country Instability Index tests."""

import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import json

import pytest

from services.world_intelligence.country_catalog import CountryCatalog
from services.world_intelligence.instability_scorer import InstabilityScorer
from services.world_intelligence.region_catalog import RegionCatalog
from utils.clock import ManualClock


# ---------------------------------------------------------------------------
# Catalog payloads
# ---------------------------------------------------------------------------


TIER1_PAYLOAD = {
    "version": 1,
    "countries": [
        {
            "code": "ID",
            "name": "Indonesia",
            "iso3": "IDN",
            "keywords": ["indonesia", "jakarta", "papua"],
            "bounds": [-11, 6, 95, 141],
            "baseline_risk": 20,
            "event_multiplier": 1.2,
        },
        {
            "code": "US",
            "name": "United States",
            "iso3": "USA",
            "keywords": ["washington", "pentagon"],
            "bounds": [24.5, 49.4, -124.8, -66.9],
            "baseline_risk": 5,
            "event_multiplier": 0.3,
        },
        {
            "code": "UA",
            "name": "Ukraine",
            "iso3": "UKR",
            "keywords": ["ukraine", "kyiv"],
            "bounds": [44.4, 52.4, 22.1, 40.2],
            "baseline_risk": 50,
            "event_multiplier": 0.8,
        },
        {
            "code": "RU",
            "name": "Russia",
            "iso3": "RUS",
            "keywords": ["russia", "moscow", "kremlin"],
            "bounds": [41.2, 81.9, 19.6, 180.0],
            "baseline_risk": 35,
            "event_multiplier": 2.0,
        },
        {
            # No keywords, bounds or priors: exercises name fallback and defaults.
            "code": "FR",
            "name": "France",
        },
    ],
    "iso3_aliases": {"IDN": "ID", "UKR": "UA", "USA": "US", "RUS": "RU", "SYR": "SY"},
    "name_aliases": {"Indonesia": "ID", "Ukraine": "UA", "Syria": "SY"},
}

REGIONS_PAYLOAD = {
    "version": 1,
    "hotspots": [
        {"id": "jakarta", "name": "Jakarta", "latitude": -6.2088, "longitude": 106.8456, "countries": ["ID"]},
        {"id": "kyiv", "name": "Kyiv", "latitude": 50.4501, "longitude": 30.5234, "countries": ["UA"]},
    ],
    "conflict_zones": [
        {"id": "ukraine", "name": "Ukraine front", "latitude": 48.0, "longitude": 37.5, "countries": ["UA", "RU"]},
    ],
    "waterways": [
        {"id": "kerch_strait", "name": "Kerch Strait", "latitude": 45.3, "longitude": 36.5, "countries": ["UA", "RU"]},
        {"id": "taiwan_strait", "name": "Taiwan Strait", "latitude": 24.0, "longitude": 119.5, "countries": ["TW", "CN"]},
    ],
    "climate_zones": {
        "Ukraine": ["UA"],
        "Eastern Europe": ["UA", "RU", "PL"],
    },
}


def write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tier1_path(tmp_path):
    return write_json(tmp_path / "tier1_countries.json", TIER1_PAYLOAD)


@pytest.fixture
def regions_path(tmp_path):
    return write_json(tmp_path / "cii_regions.json", REGIONS_PAYLOAD)


@pytest.fixture
def countries(tier1_path):
    return CountryCatalog(path=tier1_path)


@pytest.fixture
def regions(regions_path):
    return RegionCatalog(path=regions_path)


@pytest.fixture
def clock():
    return ManualClock(start=1000.0)


@pytest.fixture
def scorer(countries, regions, clock):
    """A fresh scorer with isolated state and a manual clock."""
    return InstabilityScorer(
        countries=countries,
        regions=regions,
        learning_duration_minutes=15,
        clock=clock,
    )


