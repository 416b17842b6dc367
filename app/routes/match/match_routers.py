from uuid import UUID
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import get_current_rider
from app.models.rider_db.rider_db import Rider
from app.schemas.match.match_base import (
    BuddyMatchOut,
    BuddySearchFilters,
    BuddySearchResult,
    CompatibilityResult,
    LegacyMatchCandidate,
    MatchScoreIn,
    SimulateParams,
)
from app.schemas.rider.rider_base import RiderOut
from app.services.buddy_match import (
    compute_ranked_matches,
    compute_sensor_matches,
    list_mutual_matches,
    record_decision,
    save_match_score,
    search_buddies,
    simulate_matches,
)
from app.services.preferences import PaceZone, ElevationPref, RideTypePref


match_router = APIRouter(prefix="/api", tags=["Matching"])


@match_router.get("/matches/potential", response_model=List[LegacyMatchCandidate])
def get_potential_matches(
    speed_tolerance: Optional[float] = Query(None, gt=0),
    db: Session = Depends(get_db),
    current_rider: Rider = Depends(get_current_rider)
):
    return compute_ranked_matches(db, current_rider.id, speed_tolerance)


@match_router.get("/matches", response_model=List[RiderOut])
def get_my_matches(db: Session = Depends(get_db), current_rider: Rider = Depends(get_current_rider)):
    return list_mutual_matches(db, current_rider.id)


@match_router.post("/matches/{buddy_id}/score", response_model=BuddyMatchOut)
def score_match(
    buddy_id: UUID,
    payload: MatchScoreIn,
    db: Session = Depends(get_db),
    current_rider: Rider = Depends(get_current_rider)
):
    return save_match_score(db, current_rider.id, buddy_id, payload.match_score, payload.scheduled_time)


@match_router.post("/matches/{target_id}/{decision}", response_model=BuddyMatchOut)
def decide_match(
    target_id: UUID,
    decision: str,
    db: Session = Depends(get_db),
    current_rider: Rider = Depends(get_current_rider)
):
    return record_decision(db, current_rider.id, target_id, decision)


@match_router.get("/match", response_model=List[CompatibilityResult])
def get_sensor_matches(
    speed_tolerance: Optional[float] = Query(None, gt=0),
    db: Session = Depends(get_db),
    current_rider: Rider = Depends(get_current_rider)
):
    return compute_sensor_matches(db, current_rider.id, speed_tolerance)


@match_router.post("/match/simulate", response_model=List[CompatibilityResult])
def simulate(
    params: SimulateParams,
    speed_tolerance: Optional[float] = Query(None, gt=0),
    db: Session = Depends(get_db)
):
    return simulate_matches(db, params, speed_tolerance)


@match_router.get("/buddies/search", response_model=BuddySearchResult)
def search(
    pace_zone: Optional[PaceZone] = Query(None),
    elevation_pref: Optional[ElevationPref] = Query(None),
    ride_type: Optional[RideTypePref] = Query(None),
    max_distance_mi: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
    current_rider: Rider = Depends(get_current_rider)
):
    filters = BuddySearchFilters(
        pace_zone=pace_zone,
        elevation_pref=elevation_pref,
        ride_type_pref=ride_type,
        max_distance_mi=max_distance_mi,
    )
    return search_buddies(db, current_rider.id, filters)
