"""
Buddy matching engine.

Two independent scoring strategies live here:

* the 4-tier metric hierarchy (see metric_tiers) behind the sensor match,
  simulation and buddy-finder searches;
* the legacy weighted blend of speed, tier, FTP and location behind the
  swipe-card "potential matches" feed.

They answer different questions and are intentionally not merged. The
module also owns the like/pass decision flow between two riders.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.match_db.match_crud import (
    find_existing_decision_pair_ids,
    get_or_create_decision_record,
    get_mutual_matches,
    set_match_score,
    update_decision_record,
)
from app.models.match_db.match_db import BuddyMatch
from app.models.rider_db.rider_db import Rider
from app.models.rider_db.rider_db_crud import (
    find_candidates_by_exact_location,
    find_candidates_by_location,
    get_rider_by_id,
)
from app.schemas.match.match_base import (
    BuddySearchFilters,
    BuddySearchResult,
    CompatibilityResult,
    LegacyMatchCandidate,
    SimulateParams,
)
from app.services.locality import coarse_location
from app.services.metric_tiers import (
    MatchTolerances,
    MetricSnapshot,
    TierMatch,
    location_floor,
    resolve_compatibility,
    round_half_up,
    round_score,
)
from app.services.preferences import SUBMITTABLE_DECISIONS, SensorClass

logger = logging.getLogger(__name__)

# Legacy blend weights
SPEED_WEIGHT = 0.4
TIER_WEIGHT = 0.3
FTP_WEIGHT = 0.2
LOCATION_WEIGHT = 0.1


def _load_rider(db: Session, rider_id: UUID) -> Rider:
    rider = get_rider_by_id(db, rider_id)
    if not rider:
        raise NotFoundError("Rider", rider_id)
    return rider


def _to_result(candidate: Rider, match: TierMatch) -> CompatibilityResult:
    return CompatibilityResult(
        id=candidate.id,
        name=candidate.display_name,
        ftp_watts=candidate.ftp_watts,
        weight_kg=candidate.weight_kg,
        avg_speed_mph=candidate.avg_speed,
        location=candidate.location,
        sensor_class=candidate.sensor_class or SensorClass.non_sensor.value,
        compatibility=round_score(match.score),
        match_reason=match.reason,
        metric_used=match.metric_used,
    )


def _to_search_result(candidate: Rider, match: TierMatch) -> CompatibilityResult:
    return _to_result(candidate, match).model_copy(update={
        "first_name": candidate.first_name,
        "last_name": candidate.last_name,
        "is_active": bool(candidate.active_buddy_search),
        "pace_zone": candidate.pace_zone,
        "elevation_pref": candidate.elevation_pref,
        "ride_type_pref": candidate.ride_type_pref,
        "max_distance_mi": candidate.max_distance_mi,
        "social_pref": candidate.social_pref,
    })


def sort_by_compatibility(results: Iterable[CompatibilityResult]) -> List[CompatibilityResult]:
    # sorted() is stable, so equal scores keep retrieval order
    return sorted(results, key=lambda r: r.compatibility, reverse=True)


def rank_top_n(results: Iterable[CompatibilityResult], top_n: int) -> List[CompatibilityResult]:
    return sort_by_compatibility(r for r in results if r.compatibility > 0)[:top_n]


def partition_pools(results: Iterable[CompatibilityResult]) -> BuddySearchResult:
    ranked = sort_by_compatibility(results)
    active = [r for r in ranked if r.is_active]
    passive = [r for r in ranked if not r.is_active]
    return BuddySearchResult(active=active, passive=passive, total=len(ranked))


def _score_tiered(
    requester: MetricSnapshot,
    candidates: Iterable[Rider],
    tolerances: MatchTolerances,
) -> List[Tuple[Rider, Optional[TierMatch]]]:
    scored = []
    for candidate in candidates:
        match = resolve_compatibility(requester, MetricSnapshot.from_rider(candidate), tolerances)
        if match:
            logger.debug(f"Candidate {candidate.id}: {match.metric_used} {match.score:.2f}")
        else:
            logger.debug(f"Candidate {candidate.id}: no tier matched")
        scored.append((candidate, match))
    return scored


def _rank_tiered(
    requester: MetricSnapshot,
    candidates: List[Rider],
    tolerances: MatchTolerances,
) -> List[CompatibilityResult]:
    results = [
        _to_result(candidate, match)
        for candidate, match in _score_tiered(requester, candidates, tolerances)
        if match is not None
    ]
    return rank_top_n(results, settings.MATCH_TOP_N)


def compute_sensor_matches(
    db: Session,
    requester_id: UUID,
    speed_tolerance: Optional[float] = None,
    tolerances: Optional[MatchTolerances] = None,
) -> List[CompatibilityResult]:
    """Top matches for a stored rider using the 4-tier metric hierarchy."""
    requester = _load_rider(db, requester_id)
    tolerances = (tolerances or MatchTolerances.from_settings()).with_speed(speed_tolerance)

    candidates = find_candidates_by_location(
        db, requester.id, requester.location_key, settings.SIMPLE_CANDIDATE_LIMIT
    )
    ranked = _rank_tiered(MetricSnapshot.from_rider(requester), candidates, tolerances)

    logger.info(
        f"Sensor match for {requester.id}: {len(candidates)} candidates in "
        f"{requester.location_key!r}, {len(ranked)} ranked"
    )
    return ranked


def simulate_matches(
    db: Session,
    params: SimulateParams,
    speed_tolerance: Optional[float] = None,
    tolerances: Optional[MatchTolerances] = None,
) -> List[CompatibilityResult]:
    """Same ranking as compute_sensor_matches, for hypothetical metrics."""
    tolerances = (tolerances or MatchTolerances.from_settings()).with_speed(speed_tolerance)
    location = params.location or settings.DEFAULT_SIMULATION_LOCATION
    location_key = coarse_location(location)

    candidates = find_candidates_by_location(db, None, location_key, settings.SIMPLE_CANDIDATE_LIMIT)
    ranked = _rank_tiered(MetricSnapshot.from_params(params), candidates, tolerances)

    logger.info(
        f"Simulated match in {location_key!r}: {len(candidates)} candidates, {len(ranked)} ranked"
    )
    return ranked


def search_buddies(
    db: Session,
    requester_id: UUID,
    filters: Optional[BuddySearchFilters] = None,
    tolerances: Optional[MatchTolerances] = None,
) -> BuddySearchResult:
    """Every same-city rider passing the filters, split into active and passive pools.

    Nobody is dropped for lack of a metric match: those riders get the
    location floor score instead.
    """
    requester = _load_rider(db, requester_id)
    tolerances = tolerances or MatchTolerances.from_settings()
    filters = filters or BuddySearchFilters()

    if filters.max_distance_mi is not None:
        logger.debug(f"max_distance_mi={filters.max_distance_mi} accepted but not applied")

    candidates = find_candidates_by_location(
        db, requester.id, requester.location_key, settings.SEARCH_CANDIDATE_LIMIT, filters
    )
    requester_metrics = MetricSnapshot.from_rider(requester)
    if not requester_metrics.has_any_metric:
        logger.debug(f"Rider {requester.id} has no fitness metrics, all results use the location floor")

    floor = location_floor(settings.LOCATION_FLOOR_COMPATIBILITY)
    results = [
        _to_search_result(candidate, match or floor)
        for candidate, match in _score_tiered(requester_metrics, candidates, tolerances)
    ]
    pools = partition_pools(results)

    logger.info(
        f"Buddy search for {requester.id}: {pools.total} riders "
        f"({len(pools.active)} active, {len(pools.passive)} passive)"
    )
    return pools


def legacy_blend_score(requester: Rider, candidate: Rider, speed_tolerance: float) -> Optional[int]:
    """Weighted discovery score, or None when the speed gap is too wide."""
    requester_speed = float(requester.avg_speed or 0)
    candidate_speed = float(candidate.avg_speed or 0)
    speed_delta = abs(candidate_speed - requester_speed)
    if speed_delta > speed_tolerance:
        return None

    speed_score = max(0.0, 100 - speed_delta * 10)
    location_score = 100 if candidate.location == requester.location else 0
    tier_score = 100 if candidate.tier == requester.tier else 50

    ftp_score = 50.0
    if requester.ftp_watts and candidate.ftp_watts:
        ftp_delta = abs(candidate.ftp_watts - requester.ftp_watts)
        ftp_score = max(0.0, 100 - ftp_delta / 2)

    return round_half_up(
        speed_score * SPEED_WEIGHT
        + tier_score * TIER_WEIGHT
        + ftp_score * FTP_WEIGHT
        + location_score * LOCATION_WEIGHT
    )


def compute_ranked_matches(
    db: Session,
    requester_id: UUID,
    speed_tolerance: Optional[float] = None,
) -> List[LegacyMatchCandidate]:
    """Swipe-card feed: legacy blend over riders not yet liked or passed."""
    requester = _load_rider(db, requester_id)
    if speed_tolerance is None:
        speed_tolerance = settings.LEGACY_SPEED_TOLERANCE_MPH

    decided_ids = find_existing_decision_pair_ids(db, requester.id)
    candidates = find_candidates_by_exact_location(
        db, requester.id, requester.location, decided_ids, settings.SIMPLE_CANDIDATE_LIMIT
    )

    scored = []
    for candidate in candidates:
        score = legacy_blend_score(requester, candidate, speed_tolerance)
        if score is None:
            continue
        scored.append(
            LegacyMatchCandidate(
                id=candidate.id,
                email=candidate.email,
                first_name=candidate.first_name,
                last_name=candidate.last_name,
                profile_image_url=candidate.profile_image_url,
                location=candidate.location,
                avg_speed=candidate.avg_speed,
                weekly_mileage=candidate.weekly_mileage,
                ftp_watts=candidate.ftp_watts,
                tier=candidate.tier,
                match_score=score,
            )
        )

    ranked = sorted(scored, key=lambda c: c.match_score, reverse=True)[:settings.MATCH_TOP_N]
    logger.info(
        f"Potential matches for {requester.id}: {len(candidates)} candidates, "
        f"{len(decided_ids)} already decided, {len(ranked)} returned"
    )
    return ranked


def record_decision(db: Session, requester_id: UUID, target_id: UUID, decision: str) -> BuddyMatch:
    if decision not in SUBMITTABLE_DECISIONS:
        raise InvalidInputError(f"Invalid decision: {decision}", field="decision")
    if requester_id == target_id:
        raise InvalidInputError("Cannot decide on yourself", field="target")

    _load_rider(db, requester_id)
    _load_rider(db, target_id)

    record, created = get_or_create_decision_record(db, requester_id, target_id)
    record = update_decision_record(db, record, requester_id, decision)

    logger.info(
        f"Rider {requester_id} chose {decision} on {target_id} "
        f"({'new' if created else 'existing'} record, is_match={record.is_match})"
    )
    return record


def list_mutual_matches(db: Session, rider_id: UUID) -> List[Rider]:
    _load_rider(db, rider_id)
    return get_mutual_matches(db, rider_id)


def save_match_score(
    db: Session,
    rider_id: UUID,
    buddy_id: UUID,
    match_score: float,
    scheduled_time: Optional[datetime] = None,
) -> BuddyMatch:
    """Attach a score and optional ride time to a pair, creating the record if needed."""
    if rider_id == buddy_id:
        raise InvalidInputError("Cannot score a match with yourself", field="buddy")

    _load_rider(db, rider_id)
    _load_rider(db, buddy_id)

    record, _ = get_or_create_decision_record(db, rider_id, buddy_id)
    return set_match_score(db, record, match_score, scheduled_time)
