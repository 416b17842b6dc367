import logging
from datetime import datetime
from typing import List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreFailureError
from app.models.match_db.match_db import BuddyMatch, pair_key
from app.models.rider_db.rider_db import Rider
from app.services.preferences import Decision

logger = logging.getLogger(__name__)


def find_existing_decision_pair_ids(db: Session, rider_id: UUID) -> Set[UUID]:
    """Ids of every rider that already shares a decision record with `rider_id`."""
    try:
        records = (
            db.query(BuddyMatch)
            .filter(or_(BuddyMatch.user1 == rider_id, BuddyMatch.user2 == rider_id))
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load decision records for {rider_id}: {e}")
        raise StoreFailureError("load match decisions") from e

    other_ids = {record.other_rider(rider_id) for record in records}
    other_ids.discard(rider_id)
    return other_ids


def get_decision_record(db: Session, rider_a: UUID, rider_b: UUID) -> Optional[BuddyMatch]:
    return db.query(BuddyMatch).filter(BuddyMatch.pair_key == pair_key(rider_a, rider_b)).first()


def get_or_create_decision_record(db: Session, rider_a: UUID, rider_b: UUID) -> Tuple[BuddyMatch, bool]:
    """Return the record for the pair, creating it with `rider_a` as user1.

    The unique pair key is the serialization point: if another request
    inserted the pair first, our insert fails and we use theirs.
    """
    try:
        existing = get_decision_record(db, rider_a, rider_b)
        if existing:
            return existing, False

        record = BuddyMatch(
            user1=rider_a,
            user2=rider_b,
            pair_key=pair_key(rider_a, rider_b),
            user1_decision=Decision.pending.value,
            user2_decision=Decision.pending.value,
            is_match=False,
        )
        db.add(record)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.info(f"Decision record for {rider_a}/{rider_b} created concurrently, reusing it")
            return get_decision_record(db, rider_a, rider_b), False
        return record, True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to load or create decision record for {rider_a}/{rider_b}: {e}")
        raise StoreFailureError("record match decision") from e


def update_decision_record(db: Session, record: BuddyMatch, rider_id: UUID, decision: str) -> BuddyMatch:
    """Store one rider's decision on the pair.

    The other side's decision is read by the UPDATE itself rather than from
    `record`, so two likes committed concurrently still produce a match.
    """
    if record.user1 == rider_id:
        own, other = BuddyMatch.user1_decision, BuddyMatch.user2_decision
    else:
        own, other = BuddyMatch.user2_decision, BuddyMatch.user1_decision

    values = {own.key: decision}
    if decision == Decision.like.value:
        # A match is never undone by a later decision.
        values["is_match"] = or_(BuddyMatch.is_match, other == Decision.like.value)

    statement = (
        update(BuddyMatch)
        .where(BuddyMatch.id == record.id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    try:
        db.execute(statement)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update decision record {record.id}: {e}")
        raise StoreFailureError("record match decision") from e
    db.refresh(record)
    return record


def set_match_score(
    db: Session,
    record: BuddyMatch,
    match_score: float,
    scheduled_time: Optional[datetime] = None,
) -> BuddyMatch:
    record.match_score = match_score
    record.scheduled_time = scheduled_time

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save match score on {record.id}: {e}")
        raise StoreFailureError("save match score") from e
    db.refresh(record)
    return record


def get_mutual_matches(db: Session, rider_id: UUID) -> List[Rider]:
    try:
        return (
            db.query(Rider)
            .join(
                BuddyMatch,
                or_(
                    and_(BuddyMatch.user1 == rider_id, BuddyMatch.user2 == Rider.id),
                    and_(BuddyMatch.user2 == rider_id, BuddyMatch.user1 == Rider.id),
                ),
            )
            .filter(BuddyMatch.is_match.is_(True))
            .order_by(BuddyMatch.created_at)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load mutual matches for {rider_id}: {e}")
        raise StoreFailureError("load matches") from e
