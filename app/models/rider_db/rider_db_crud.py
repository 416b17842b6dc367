import logging
from uuid import UUID
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreFailureError
from app.models.rider_db.rider_db import Rider
from app.schemas.match.match_base import BuddySearchFilters
from app.schemas.rider.rider_base import RiderCreate, RiderUpdate
from app.services.preferences import PaceZone, ElevationPref, RideTypePref

logger = logging.getLogger(__name__)

# (filter field, rider column, wildcard value a rider may hold instead)
_PREFERENCE_FILTERS = (
    ("pace_zone", Rider.pace_zone, PaceZone.no_pref.value),
    ("elevation_pref", Rider.elevation_pref, ElevationPref.no_pref.value),
    ("ride_type_pref", Rider.ride_type_pref, RideTypePref.any.value),
)


def create_rider(db: Session, rider: RiderCreate) -> Rider:
    db_rider = Rider(**rider.model_dump(mode="json"))
    try:
        db.add(db_rider)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create rider: {e}")
        raise StoreFailureError("create rider") from e
    db.refresh(db_rider)
    return db_rider


def get_rider_by_id(db: Session, rider_id: UUID) -> Optional[Rider]:
    try:
        return db.query(Rider).filter(Rider.id == rider_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load rider {rider_id}: {e}")
        raise StoreFailureError("load rider profile") from e


def get_rider_by_email(db: Session, email: str) -> Optional[Rider]:
    return db.query(Rider).filter(Rider.email == email).first()


def count_riders(db: Session) -> int:
    return db.query(Rider).count()


def get_riders_page(db: Session, skip: int = 0, limit: int = 100) -> List[Rider]:
    return db.query(Rider).order_by(Rider.created_at, Rider.id).offset(skip).limit(limit).all()


def update_rider(db: Session, rider: Rider, updates: RiderUpdate) -> Rider:
    for field, value in updates.model_dump(mode="json", exclude_unset=True).items():
        setattr(rider, field, value)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update rider {rider.id}: {e}")
        raise StoreFailureError("update rider profile") from e
    db.refresh(rider)
    return rider


def _preference_clauses(filters: Optional[BuddySearchFilters]):
    if filters is None:
        return []

    clauses = []
    for field, column, wildcard in _PREFERENCE_FILTERS:
        wanted = getattr(filters, field)
        if wanted is None or wanted.value == wildcard:
            continue
        clauses.append(or_(column == wanted.value, column == wildcard))
    return clauses


def find_candidates_by_location(
    db: Session,
    exclude_id: Optional[UUID],
    coarse_location: Optional[str],
    limit: int,
    filters: Optional[BuddySearchFilters] = None,
) -> List[Rider]:
    """Riders sharing `coarse_location`, oldest profiles first."""
    if coarse_location is None:
        return []

    query = db.query(Rider).filter(Rider.location_key == coarse_location)
    if exclude_id is not None:
        query = query.filter(Rider.id != exclude_id)
    for clause in _preference_clauses(filters):
        query = query.filter(clause)

    try:
        return query.order_by(Rider.created_at, Rider.id).limit(limit).all()
    except SQLAlchemyError as e:
        logger.error(f"Candidate lookup failed for location {coarse_location!r}: {e}")
        raise StoreFailureError("load match candidates") from e


def find_candidates_by_exact_location(
    db: Session,
    exclude_id: UUID,
    location: Optional[str],
    exclude_ids: Iterable[UUID],
    limit: int,
) -> List[Rider]:
    """Discovery-feed candidates: exact location string, minus decided riders.

    A requester without a location is not restricted by location at all.
    """
    query = db.query(Rider).filter(Rider.id != exclude_id)
    if location:
        query = query.filter(Rider.location == location)

    exclude_ids = list(exclude_ids)
    if exclude_ids:
        query = query.filter(Rider.id.notin_(exclude_ids))

    try:
        return query.order_by(Rider.created_at, Rider.id).limit(limit).all()
    except SQLAlchemyError as e:
        logger.error(f"Discovery candidate lookup failed for {exclude_id}: {e}")
        raise StoreFailureError("load match candidates") from e
