"""
Tests for the fitness-metric compatibility tiers.

Covers each tier on its own, the fallback order between them, inclusive
tolerance bounds, requester-relative (asymmetric) bands, and rounding.
"""
from types import SimpleNamespace

import pytest

from app.services.metric_tiers import (
    MatchTolerances,
    MetricSnapshot,
    location_floor,
    match_avg_speed,
    match_ftp_wkg,
    match_ftp_watts,
    match_weekly_hours,
    resolve_compatibility,
    resolve_wkg,
    round_score,
)

DEFAULTS = MatchTolerances(ftp_tolerance_pct=20, hours_tolerance_pct=25, speed_tolerance_mph=1.5)


def rider(**fields):
    """Stand-in for a stored rider row."""
    values = dict(
        ftp_wkg=None, ftp_watts=None, weight_kg=None,
        weekly_hours=None, avg_speed=None, ftp_tolerance_pct=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


class TestPowerToWeightTier:
    """Tier 1: w/kg within the requester's percentage band"""

    def test_reference_example(self):
        """3.5 w/kg vs 3.7 w/kg at 20% -> ~5.71% off -> 94"""
        requester = MetricSnapshot(ftp_wkg=3.5, ftp_tolerance_pct=20)
        candidate = MetricSnapshot(ftp_wkg=3.7)

        match = resolve_compatibility(requester, candidate, DEFAULTS)

        assert match.metric_used == "ftp_wkg"
        assert match.score == pytest.approx(94.2857, abs=1e-3)
        assert round_score(match.score) == 94
        assert match.reason == "FTP match ±0.2 w/kg (20% range)"

    def test_identical_wkg_scores_100(self):
        requester = MetricSnapshot(ftp_wkg=4.0)
        match = resolve_compatibility(requester, MetricSnapshot(ftp_wkg=4.0), DEFAULTS)
        assert round_score(match.score) == 100

    def test_wkg_derived_from_watts_and_weight(self):
        """280 W at 80 kg resolves to 3.5 w/kg"""
        snapshot = MetricSnapshot.from_rider(rider(ftp_watts=280, weight_kg=80))
        assert snapshot.ftp_wkg == pytest.approx(3.5)

    def test_explicit_wkg_wins_over_derived(self):
        snapshot = MetricSnapshot.from_rider(rider(ftp_wkg=4.1, ftp_watts=280, weight_kg=80))
        assert snapshot.ftp_wkg == pytest.approx(4.1)

    def test_zero_weight_means_no_wkg(self):
        """A zero weight is treated as missing rather than divided by"""
        assert resolve_wkg(None, 250, 0) is None
        assert MetricSnapshot.from_rider(rider(ftp_watts=250, weight_kg=0)).ftp_wkg is None

    def test_tolerance_is_requester_relative(self):
        """Same 20% tolerance, different outcome depending on who asks"""
        low = MetricSnapshot(ftp_wkg=3.0, ftp_tolerance_pct=20)   # band 2.4 - 3.6
        high = MetricSnapshot(ftp_wkg=3.7, ftp_tolerance_pct=20)  # band 2.96 - 4.44

        assert resolve_compatibility(low, high, DEFAULTS) is None
        reverse = resolve_compatibility(high, low, DEFAULTS)
        assert reverse is not None
        assert reverse.metric_used == "ftp_wkg"

    def test_band_edges_are_inclusive(self):
        """3.5 w/kg at 20% admits exactly 2.8 and 4.2"""
        requester = MetricSnapshot(ftp_wkg=3.5)

        lower = match_ftp_wkg(requester, MetricSnapshot(ftp_wkg=2.8), DEFAULTS)
        upper = match_ftp_wkg(requester, MetricSnapshot(ftp_wkg=4.2), DEFAULTS)

        assert lower is not None
        assert upper is not None
        assert round_score(lower.score) == 80
        assert match_ftp_wkg(requester, MetricSnapshot(ftp_wkg=2.79), DEFAULTS) is None

    def test_requester_tolerance_overrides_default(self):
        requester = MetricSnapshot(ftp_wkg=3.0, ftp_tolerance_pct=30)
        match = resolve_compatibility(requester, MetricSnapshot(ftp_wkg=3.8), DEFAULTS)
        assert match.metric_used == "ftp_wkg"
        assert "(30% range)" in match.reason


class TestPowerTier:
    """Tier 2: absolute watts"""

    def test_used_when_candidate_has_no_weight(self):
        requester = MetricSnapshot.from_rider(rider(ftp_watts=200, weight_kg=80))
        candidate = MetricSnapshot.from_rider(rider(ftp_watts=220))

        match = resolve_compatibility(requester, candidate, DEFAULTS)

        assert match.metric_used == "ftp_watts"
        assert round_score(match.score) == 90
        assert match.reason == "FTP match ±20w (20% range)"

    def test_upper_bound_is_inclusive(self):
        requester = MetricSnapshot(ftp_watts=200)
        at_bound = match_ftp_watts(requester, MetricSnapshot(ftp_watts=240), DEFAULTS)
        assert at_bound is not None
        assert round_score(at_bound.score) == 80

    def test_lower_bound_is_inclusive(self):
        """270 W at 10% has a lower edge of 243 W"""
        tight = MatchTolerances(ftp_tolerance_pct=10, hours_tolerance_pct=25, speed_tolerance_mph=1.5)
        at_bound = match_ftp_watts(MetricSnapshot(ftp_watts=270), MetricSnapshot(ftp_watts=243), tight)
        assert at_bound is not None

    def test_outside_band_rejected(self):
        requester = MetricSnapshot(ftp_watts=200)
        assert match_ftp_watts(requester, MetricSnapshot(ftp_watts=241), DEFAULTS) is None
        assert match_ftp_watts(requester, MetricSnapshot(ftp_watts=159), DEFAULTS) is None

    def test_wkg_miss_falls_through_to_watts(self):
        """Same watts, very different body weight: w/kg misses, watts hits"""
        requester = MetricSnapshot.from_rider(rider(ftp_watts=250, weight_kg=70))
        candidate = MetricSnapshot.from_rider(rider(ftp_watts=250, weight_kg=100))

        match = resolve_compatibility(requester, candidate, DEFAULTS)

        assert match.metric_used == "ftp_watts"
        assert round_score(match.score) == 100

    def test_default_tolerance_used_when_requester_has_none(self):
        tight = MatchTolerances(ftp_tolerance_pct=10, hours_tolerance_pct=25, speed_tolerance_mph=1.5)
        requester = MetricSnapshot(ftp_watts=200)

        assert match_ftp_watts(requester, MetricSnapshot(ftp_watts=215), tight) is not None
        assert match_ftp_watts(requester, MetricSnapshot(ftp_watts=225), tight) is None


class TestTrainingVolumeTier:
    """Tier 3: weekly hours within +/-25%"""

    def test_close_volume(self):
        match = match_weekly_hours(MetricSnapshot(weekly_hours=8), MetricSnapshot(weekly_hours=9), DEFAULTS)
        assert match.metric_used == "weekly_hours"
        assert round_score(match.score) == 88  # 87.5 rounds half up
        assert match.reason == "Training volume ±1.0 hrs/week"

    def test_band_edge_is_inclusive(self):
        match = match_weekly_hours(MetricSnapshot(weekly_hours=8), MetricSnapshot(weekly_hours=10), DEFAULTS)
        assert round_score(match.score) == 75

    def test_beyond_band(self):
        assert match_weekly_hours(MetricSnapshot(weekly_hours=8), MetricSnapshot(weekly_hours=10.5), DEFAULTS) is None


class TestAverageSpeedTier:
    """Tier 4: absolute mph band"""

    def test_reference_example(self):
        """18.0 vs 19.0 mph at 1.5 mph -> 90"""
        requester = MetricSnapshot(avg_speed_mph=18.0)
        match = resolve_compatibility(requester, MetricSnapshot(avg_speed_mph=19.0), DEFAULTS)

        assert match.metric_used == "avg_speed_mph"
        assert round_score(match.score) == 90
        assert match.reason == "Pace band ±1.0 mph, same city"

    def test_band_edge_is_inclusive(self):
        match = match_avg_speed(MetricSnapshot(avg_speed_mph=18.0), MetricSnapshot(avg_speed_mph=19.5), DEFAULTS)
        assert round_score(match.score) == 85

    def test_configured_speed_tolerance(self):
        requester = MetricSnapshot(avg_speed_mph=18.0)
        candidate = MetricSnapshot(avg_speed_mph=19.8)

        assert match_avg_speed(requester, candidate, DEFAULTS) is None
        assert match_avg_speed(requester, candidate, DEFAULTS.with_speed(2.0)) is not None


class TestTierResolution:
    """Fallback order and exclusion"""

    def test_first_matching_tier_wins(self):
        """Both riders have every metric; w/kg is reported"""
        requester = MetricSnapshot(ftp_wkg=3.5, ftp_watts=250, weekly_hours=8, avg_speed_mph=18)
        candidate = MetricSnapshot(ftp_wkg=3.6, ftp_watts=260, weekly_hours=8, avg_speed_mph=18)
        assert resolve_compatibility(requester, candidate, DEFAULTS).metric_used == "ftp_wkg"

    def test_zero_score_tier_is_skipped(self):
        """A 150% band can admit a candidate at >=100% off; that zero score falls through"""
        requester = MetricSnapshot(ftp_watts=100, avg_speed_mph=18, ftp_tolerance_pct=150)
        candidate = MetricSnapshot(ftp_watts=220, avg_speed_mph=18.5)

        match = resolve_compatibility(requester, candidate, DEFAULTS)

        assert match.metric_used == "avg_speed_mph"
        assert round_score(match.score) == 95

    def test_no_shared_metric(self):
        requester = MetricSnapshot(ftp_watts=250)
        candidate = MetricSnapshot(avg_speed_mph=18)
        assert resolve_compatibility(requester, candidate, DEFAULTS) is None

    def test_rider_without_metrics(self):
        empty = MetricSnapshot.from_rider(rider())
        assert not empty.has_any_metric
        assert resolve_compatibility(empty, MetricSnapshot(avg_speed_mph=18), DEFAULTS) is None

    def test_simulation_params_only_derive_wkg(self):
        params = SimpleNamespace(
            ftp_watts=280, weight_kg=80, weekly_hours=None,
            avg_speed_mph=None, ftp_tolerance_pct=None,
        )
        snapshot = MetricSnapshot.from_params(params)
        assert snapshot.ftp_wkg == pytest.approx(3.5)
        assert snapshot.ftp_tolerance_pct is None


class TestScoreRounding:

    def test_half_rounds_up(self):
        assert round_score(94.5) == 95
        assert round_score(87.49) == 87

    def test_clamped_to_percentage(self):
        assert round_score(100.0) == 100
        assert round_score(-3) == 0

    def test_location_floor(self):
        floor = location_floor(50)
        assert floor.metric_used == "location"
        assert floor.reason == "Same location"
        assert floor.score == 50
