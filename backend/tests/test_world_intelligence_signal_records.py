import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.world_intelligence.signal_records import (
    ClimateAnomaly,
    ClusteredEvent,
    ConflictEvent,
    CountryDisplacement,
    HapiConflictSummary,
    InternetOutage,
    MilitaryFlight,
    SocialUnrestEvent,
    UcdpConflictStatus,
)


def test_unrest_event_from_feed_row():
    event = SocialUnrestEvent.from_dict(
        {"country": " Indonesia ", "latitude": "-6.2", "longitude": 106.8, "severity": "HIGH", "fatalities": "3"}
    )

    assert event.country == "Indonesia"
    assert event.lat == -6.2
    assert event.lon == 106.8
    assert event.severity == "high"
    assert event.fatalities == 3
    assert event.event_type == "protest"


def test_non_finite_coordinates_become_none():
    event = ConflictEvent.from_dict({"country": "Ukraine", "lat": "nan", "lon": float("inf"), "eventType": "battle"})

    assert event.lat is None
    assert event.lon is None
    assert event.fatalities == 0


def test_ucdp_and_hapi_accept_camel_case():
    status = UcdpConflictStatus.from_dict({"intensity": "War", "conflictName": "Donbas", "year": 2024})
    assert status.intensity == "war"
    assert status.conflict_name == "Donbas"
    assert status.year == 2024
    assert UcdpConflictStatus.from_dict({}).intensity == "none"

    summary = HapiConflictSummary.from_dict(
        {"eventsPoliticalViolence": "12", "events_civilian_targeting": 3, "fatalitiesPoliticalViolence": None}
    )
    assert summary.events_political_violence == 12
    assert summary.events_civilian_targeting == 3
    assert summary.fatalities_political_violence == 0


def test_clustered_event_reads_nested_velocity():
    nested = ClusteredEvent.from_dict({"primaryTitle": "Kyiv", "velocity": {"sourcesPerHour": 6.5}, "isAlert": 1})
    assert nested.primary_title == "Kyiv"
    assert nested.sources_per_hour == 6.5
    assert nested.is_alert is True

    flat = ClusteredEvent.from_dict({"title": "Kyiv", "sources_per_hour": "bogus"})
    assert flat.sources_per_hour == 0
    assert flat.is_alert is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("false", False),
        ("False", False),
        ("0", False),
        ("no", False),
        ("", False),
        ("true", True),
        (" TRUE ", True),
        ("1", True),
        (1, True),
        (0, False),
        (True, True),
        ("maybe", False),
    ],
)
def test_clustered_event_alert_flag_parses_text(raw, expected):
    event = ClusteredEvent.from_dict({"title": "Kyiv", "isAlert": raw})
    assert event.is_alert is expected


def test_displacement_outflow_sums_refugees_and_asylum_seekers():
    row = CountryDisplacement.from_dict({"iso3": "ukr", "name": "Ukraine", "refugees": 100, "asylumSeekers": 25})

    assert row.code == "UKR"
    assert row.outflow == 125


def test_simple_records():
    flight = MilitaryFlight.from_dict({"operatorCountry": "Russia", "latitude": 55.0, "longitude": 37.0, "callsign": "RFF123"})
    assert (flight.operator_country, flight.lat, flight.lon, flight.callsign) == ("Russia", 55.0, 37.0, "RFF123")

    outage = InternetOutage.from_dict({"country": "Iran", "severity": "Total"})
    assert outage.severity == "total"

    anomaly = ClimateAnomaly.from_dict({"zone": "South Asia"})
    assert anomaly.severity == "normal"
