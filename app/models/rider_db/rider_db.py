import uuid
from sqlalchemy import Column, String, Boolean, Integer, Float, DateTime, Text, Uuid
from sqlalchemy.orm import validates
from app.core.database import Base
from app.services.locality import coarse_location
from datetime import datetime


class Rider(Base):
    __tablename__ = "users"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    bio = Column(Text, nullable=True)

    location = Column(String, nullable=True)  # free text, e.g. "San Jose, CA"
    location_key = Column(String, nullable=True, index=True)  # "San Jose"

    # Fitness metrics
    avg_speed = Column(Float, nullable=True)  # mph
    weekly_mileage = Column(Integer, nullable=True)
    ftp_watts = Column(Integer, nullable=True)
    weight_kg = Column(Float, nullable=True)
    ftp_wkg = Column(Float, nullable=True)
    weekly_hours = Column(Float, nullable=True)
    sensor_class = Column(String, nullable=True)
    ftp_tolerance_pct = Column(Integer, default=20)
    tier = Column(String(1), nullable=True)

    total_rides = Column(Integer, default=0)
    kudos_received = Column(Integer, default=0)

    # Buddy preferences
    pace_zone = Column(String, nullable=True)
    elevation_pref = Column(String, nullable=True)
    ride_type_pref = Column(String, nullable=True)
    max_distance_mi = Column(Integer, nullable=True)
    social_pref = Column(String, nullable=True)
    active_buddy_search = Column(Boolean, default=False)
    visible_in_passive_pool = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @validates("location")
    def _sync_location_key(self, key, value):
        self.location_key = coarse_location(value)
        return value

    @property
    def display_name(self) -> str:
        return " ".join(name for name in (self.first_name, self.last_name) if name)
