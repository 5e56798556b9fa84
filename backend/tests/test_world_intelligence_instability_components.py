import sys
import math
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.world_intelligence.instability_components import (
    CountryData,
    conflict_component,
    information_component,
    is_high_volume,
    normalize_conflict_type,
    security_component,
    unrest_component,
    unrest_volume,
)
from services.world_intelligence.signal_records import (
    ClusteredEvent,
    ConflictEvent,
    HapiConflictSummary,
    InternetOutage,
    MilitaryFlight,
    MilitaryVessel,
    SocialUnrestEvent,
)


def _conflict(event_type, fatalities=0):
    return ConflictEvent(country="X", lat=None, lon=None, event_type=event_type, fatalities=fatalities)


def _protest(severity="low", fatalities=0):
    return SocialUnrestEvent(country="X", lat=None, lon=None, severity=severity, fatalities=fatalities)


def test_empty_country_scores_zero_everywhere():
    data = CountryData()
    assert unrest_component(data, 1.0) == 0
    assert conflict_component(data, 1.0) == 0
    assert security_component(data) == 0
    assert information_component(data, 1.0) == 0


def test_high_volume_threshold():
    assert is_high_volume(0.3)
    assert is_high_volume(0.69)
    assert not is_high_volume(0.7)
    assert not is_high_volume(1.2)


# ---------------------------------------------------------------------------
# Unrest
# ---------------------------------------------------------------------------


def test_unrest_volume_log_compresses_high_volume_countries():
    # log2(8) * 0.3 * 5
    assert unrest_volume(7, 0.3) == pytest.approx(4.5)
    assert unrest_volume(7, 1.2) == pytest.approx(8.4)


def test_log_compression_grows_slower_than_linear_on_doubling():
    compressed = unrest_volume(20, 0.3) / unrest_volume(10, 0.3)
    linear = unrest_volume(20, 1.0) / unrest_volume(10, 1.0)

    assert linear == pytest.approx(2.0)
    assert compressed < linear


def test_unrest_combines_volume_fatalities_and_severity():
    data = CountryData(protests=[_protest("high", 2), _protest("low", 1)])
    # base 2*8=16, fatalities 3*5=15, severity 1*10=10
    assert unrest_component(data, 1.0) == pytest.approx(41)


def test_unrest_sub_terms_are_capped():
    data = CountryData(protests=[_protest("high", 10) for _ in range(10)])
    assert unrest_component(data, 2.0) == pytest.approx(100)

    data = CountryData(protests=[_protest("low") for _ in range(10)])
    assert unrest_component(data, 1.0) == pytest.approx(50)


def test_outage_boost_weights_and_cap():
    data = CountryData(outages=[InternetOutage(country="X", severity="major"), InternetOutage(country="X", severity="partial")])
    assert unrest_component(data, 1.0) == pytest.approx(20)

    data = CountryData(outages=[InternetOutage(country="X", severity="total") for _ in range(3)])
    assert unrest_component(data, 1.0) == pytest.approx(50)


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------


def test_conflict_weights_event_types_and_fatalities():
    data = CountryData(
        conflicts=[
            _conflict("battle", 4),
            _conflict("battle", 4),
            _conflict("explosion", 4),
            _conflict("violence_against_civilians", 4),
        ]
    )
    # events 3+3+4+5=15, fatalities sqrt(16)*5=20, civilian boost 3
    assert conflict_component(data, 1.0) == pytest.approx(38)


def test_conflict_accepts_acled_labels():
    assert normalize_conflict_type("Battles") == "battle"
    assert normalize_conflict_type("Explosions/Remote violence") == "explosion"
    assert normalize_conflict_type("Violence against civilians") == "violence_against_civilians"
    assert normalize_conflict_type("remote_violence") == "remote_violence"

    data = CountryData(
        conflicts=[_conflict("Battles"), _conflict("Explosions/Remote violence"), _conflict("Remote violence")]
    )
    assert conflict_component(data, 1.0) == pytest.approx(11)


def test_conflict_ignores_unknown_types_but_counts_their_fatalities():
    data = CountryData(conflicts=[_conflict("strategic_development", 25)])
    assert conflict_component(data, 1.0) == pytest.approx(25)


def test_conflict_summary_fallback_and_cap():
    data = CountryData(hapi_summary=HapiConflictSummary(events_political_violence=15, events_civilian_targeting=4))
    assert conflict_component(data, 1.0) == pytest.approx(42)

    data = CountryData(hapi_summary=HapiConflictSummary(events_political_violence=40))
    assert conflict_component(data, 1.0) == pytest.approx(60)


def test_conflict_summary_ignored_when_events_exist():
    data = CountryData(
        conflicts=[_conflict("battle")],
        hapi_summary=HapiConflictSummary(events_political_violence=40),
    )
    assert conflict_component(data, 1.0) == pytest.approx(3)


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


def test_security_counts_own_and_foreign_assets():
    data = CountryData(
        military_flights=[MilitaryFlight(operator_country="X", lat=None, lon=None)],
        military_vessels=[MilitaryVessel(operator_country="X", lat=None, lon=None)],
        foreign_flight_weight=2,
        foreign_vessel_weight=2,
    )
    assert data.flight_count == 3
    assert data.vessel_count == 3
    assert security_component(data) == pytest.approx(9 + 15)


def test_security_caps_flights_and_vessels():
    data = CountryData(foreign_flight_weight=20, foreign_vessel_weight=10)
    assert security_component(data) == pytest.approx(80)


# ---------------------------------------------------------------------------
# Information
# ---------------------------------------------------------------------------


def test_information_single_event_with_alert():
    quiet = CountryData(news_events=[ClusteredEvent(primary_title="x")])
    assert information_component(quiet, 1.2) == pytest.approx(6)

    alert = CountryData(news_events=[ClusteredEvent(primary_title="x", is_alert=True)])
    assert information_component(alert, 1.2) == pytest.approx(30)


def test_information_high_volume_velocity_threshold():
    data = CountryData(
        news_events=[ClusteredEvent(primary_title="x", sources_per_hour=8) for _ in range(3)]
    )
    # log2(4) * 0.3 * 3 * 5 = 9 base; (8 - 5) * 10 * 0.3 = 9 velocity
    assert information_component(data, 0.3) == pytest.approx(18)

    slow = CountryData(
        news_events=[ClusteredEvent(primary_title="x", sources_per_hour=5) for _ in range(3)]
    )
    assert information_component(slow, 0.3) == pytest.approx(9)


def test_information_low_volume_velocity_and_cap():
    data = CountryData(
        news_events=[ClusteredEvent(primary_title="x", sources_per_hour=3) for _ in range(2)]
    )
    # base 2*5=10, velocity (3-2)*10=10
    assert information_component(data, 1.0) == pytest.approx(20)

    flood = CountryData(
        news_events=[ClusteredEvent(primary_title="x", sources_per_hour=20, is_alert=True) for _ in range(20)]
    )
    assert information_component(flood, 2.0) == pytest.approx(100)


def test_components_stay_in_range_for_extreme_inputs():
    data = CountryData(
        protests=[_protest("high", 50) for _ in range(200)],
        conflicts=[_conflict("violence_against_civilians", 1000) for _ in range(200)],
        foreign_flight_weight=500,
        foreign_vessel_weight=500,
        news_events=[ClusteredEvent(primary_title="x", sources_per_hour=100, is_alert=True) for _ in range(200)],
        outages=[InternetOutage(country="X", severity="total") for _ in range(10)],
    )
    for multiplier in (0.3, 1.0, 2.0):
        for value in (
            unrest_component(data, multiplier),
            conflict_component(data, multiplier),
            security_component(data),
            information_component(data, multiplier),
        ):
            assert 0 <= value <= 100
            assert math.isfinite(value)
