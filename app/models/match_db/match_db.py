import uuid
from datetime import datetime
from sqlalchemy import Column, ForeignKey, Float, String, Boolean, DateTime, Uuid, UniqueConstraint

from app.core.database import Base


def pair_key(rider_a: uuid.UUID, rider_b: uuid.UUID) -> str:
    """Order-independent key for a pair of riders."""
    low, high = sorted((str(rider_a), str(rider_b)))
    return f"{low}:{high}"


class BuddyMatch(Base):
    __tablename__ = "buddy_matches"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, unique=True, index=True)
    user1 = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    user2 = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    pair_key = Column(String, nullable=False)

    user1_decision = Column(String, nullable=False, default="pending")  # like | pass | pending
    user2_decision = Column(String, nullable=False, default="pending")
    is_match = Column(Boolean, nullable=False, default=False)

    match_score = Column(Float, nullable=True)
    scheduled_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("pair_key", name="unique_buddy_pair"),
    )

    def other_rider(self, rider_id: uuid.UUID) -> uuid.UUID:
        return self.user2 if self.user1 == rider_id else self.user1
