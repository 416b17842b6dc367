"""
Fitness-metric compatibility tiers.

Each tier evaluator compares one metric of the requester against the same
metric of a candidate and returns a TierMatch, or None when either side lacks
the metric or the candidate falls outside the requester's tolerance band.
`resolve_compatibility` tries the tiers in order:

    ftp_wkg -> ftp_watts -> weekly_hours -> avg_speed_mph

and keeps the first one with a nonzero score. Bands are built around the
requester's value only, so A matching B does not imply B matches A.

Scores stay unrounded here; callers round once with `round_score` when they
build the response.
"""
import math
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from app.core.config import settings

METRIC_FTP_WKG = "ftp_wkg"
METRIC_FTP_WATTS = "ftp_watts"
METRIC_WEEKLY_HOURS = "weekly_hours"
METRIC_AVG_SPEED = "avg_speed_mph"
METRIC_LOCATION = "location"

BAND_EPSILON = 1e-9


@dataclass(frozen=True)
class MatchTolerances:
    ftp_tolerance_pct: float = 20.0  # used when the requester has none of their own
    hours_tolerance_pct: float = 25.0
    speed_tolerance_mph: float = 1.5

    @classmethod
    def from_settings(cls, speed_tolerance_mph: Optional[float] = None) -> "MatchTolerances":
        return cls(
            ftp_tolerance_pct=settings.FTP_TOLERANCE_PCT,
            hours_tolerance_pct=settings.HOURS_TOLERANCE_PCT,
            speed_tolerance_mph=(
                settings.SENSOR_SPEED_TOLERANCE_MPH if speed_tolerance_mph is None else speed_tolerance_mph
            ),
        )

    def with_speed(self, speed_tolerance_mph: Optional[float]) -> "MatchTolerances":
        if speed_tolerance_mph is None:
            return self
        return replace(self, speed_tolerance_mph=speed_tolerance_mph)


@dataclass(frozen=True)
class MetricSnapshot:
    """The metrics one rider brings to a comparison, already cleaned."""
    ftp_wkg: Optional[float] = None
    ftp_watts: Optional[float] = None
    weekly_hours: Optional[float] = None
    avg_speed_mph: Optional[float] = None
    ftp_tolerance_pct: Optional[float] = None

    @property
    def has_any_metric(self) -> bool:
        return any(
            value is not None
            for value in (self.ftp_wkg, self.ftp_watts, self.weekly_hours, self.avg_speed_mph)
        )

    @classmethod
    def from_rider(cls, rider) -> "MetricSnapshot":
        ftp_watts = _positive(rider.ftp_watts)
        return cls(
            ftp_wkg=resolve_wkg(rider.ftp_wkg, ftp_watts, rider.weight_kg),
            ftp_watts=ftp_watts,
            weekly_hours=_positive(rider.weekly_hours),
            avg_speed_mph=_positive(rider.avg_speed),
            ftp_tolerance_pct=_positive(rider.ftp_tolerance_pct),
        )

    @classmethod
    def from_params(cls, params) -> "MetricSnapshot":
        # Ad-hoc parameters carry no explicit w/kg; it can only be derived.
        ftp_watts = _positive(params.ftp_watts)
        return cls(
            ftp_wkg=resolve_wkg(None, ftp_watts, params.weight_kg),
            ftp_watts=ftp_watts,
            weekly_hours=_positive(params.weekly_hours),
            avg_speed_mph=_positive(params.avg_speed_mph),
            ftp_tolerance_pct=_positive(params.ftp_tolerance_pct),
        )


@dataclass(frozen=True)
class TierMatch:
    score: float
    metric_used: str
    reason: str


TierEvaluator = Callable[[MetricSnapshot, MetricSnapshot, MatchTolerances], Optional[TierMatch]]


def _positive(value) -> Optional[float]:
    """Zero and negative readings count as missing."""
    if value is None:
        return None
    value = float(value)
    return value if value > 0 else None


def resolve_wkg(ftp_wkg, ftp_watts, weight_kg) -> Optional[float]:
    explicit = _positive(ftp_wkg)
    if explicit is not None:
        return explicit

    watts = _positive(ftp_watts)
    weight = _positive(weight_kg)
    if watts is None or weight is None:
        return None
    return watts / weight


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_score(score: float) -> int:
    return max(0, min(100, round_half_up(score)))


def _pct_label(pct: float) -> str:
    return f"{pct:g}%"


def _requester_pct(requester: MetricSnapshot, tolerances: MatchTolerances) -> float:
    return requester.ftp_tolerance_pct or tolerances.ftp_tolerance_pct


def _within(delta: float, allowed: float) -> bool:
    # Inclusive band, with slack for float error at the edge (2.8 vs 3.5 at 20%).
    return delta <= allowed + BAND_EPSILON


def _pct_band_delta(requester_value: float, candidate_value: float, pct: float) -> Optional[float]:
    """Percent deviation of the candidate, or None outside requester +/- pct."""
    delta = abs(candidate_value - requester_value)
    if not _within(delta, requester_value * pct / 100):
        return None
    return delta / requester_value * 100


def match_ftp_wkg(requester: MetricSnapshot, candidate: MetricSnapshot,
                  tolerances: MatchTolerances) -> Optional[TierMatch]:
    if requester.ftp_wkg is None or candidate.ftp_wkg is None:
        return None

    pct = _requester_pct(requester, tolerances)
    delta_pct = _pct_band_delta(requester.ftp_wkg, candidate.ftp_wkg, pct)
    if delta_pct is None:
        return None

    delta = abs(candidate.ftp_wkg - requester.ftp_wkg)
    return TierMatch(
        score=max(0.0, 100 - delta_pct),
        metric_used=METRIC_FTP_WKG,
        reason=f"FTP match ±{delta:.1f} w/kg ({_pct_label(pct)} range)",
    )


def match_ftp_watts(requester: MetricSnapshot, candidate: MetricSnapshot,
                    tolerances: MatchTolerances) -> Optional[TierMatch]:
    if requester.ftp_watts is None or candidate.ftp_watts is None:
        return None

    pct = _requester_pct(requester, tolerances)
    delta_pct = _pct_band_delta(requester.ftp_watts, candidate.ftp_watts, pct)
    if delta_pct is None:
        return None

    delta = abs(candidate.ftp_watts - requester.ftp_watts)
    return TierMatch(
        score=max(0.0, 100 - delta_pct),
        metric_used=METRIC_FTP_WATTS,
        reason=f"FTP match ±{round_half_up(delta)}w ({_pct_label(pct)} range)",
    )


def match_weekly_hours(requester: MetricSnapshot, candidate: MetricSnapshot,
                       tolerances: MatchTolerances) -> Optional[TierMatch]:
    if requester.weekly_hours is None or candidate.weekly_hours is None:
        return None

    delta = abs(candidate.weekly_hours - requester.weekly_hours)
    if not _within(delta, requester.weekly_hours * tolerances.hours_tolerance_pct / 100):
        return None

    return TierMatch(
        score=max(0.0, 100 - (delta / requester.weekly_hours) * 100),
        metric_used=METRIC_WEEKLY_HOURS,
        reason=f"Training volume ±{delta:.1f} hrs/week",
    )


def match_avg_speed(requester: MetricSnapshot, candidate: MetricSnapshot,
                    tolerances: MatchTolerances) -> Optional[TierMatch]:
    if requester.avg_speed_mph is None or candidate.avg_speed_mph is None:
        return None

    delta = abs(candidate.avg_speed_mph - requester.avg_speed_mph)
    if not _within(delta, tolerances.speed_tolerance_mph):
        return None

    return TierMatch(
        score=max(0.0, 100 - delta * 10),
        metric_used=METRIC_AVG_SPEED,
        reason=f"Pace band ±{delta:.1f} mph, same city",
    )


TIER_EVALUATORS: Sequence[TierEvaluator] = (
    match_ftp_wkg,
    match_ftp_watts,
    match_weekly_hours,
    match_avg_speed,
)


def resolve_compatibility(
    requester: MetricSnapshot,
    candidate: MetricSnapshot,
    tolerances: MatchTolerances,
    evaluators: Sequence[TierEvaluator] = TIER_EVALUATORS,
) -> Optional[TierMatch]:
    for evaluator in evaluators:
        match = evaluator(requester, candidate, tolerances)
        if match is not None and match.score > 0:
            return match
    return None


def location_floor(score: float) -> TierMatch:
    return TierMatch(score=score, metric_used=METRIC_LOCATION, reason="Same location")
