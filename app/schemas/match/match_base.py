from datetime import datetime
from pydantic import BaseModel, Field
from uuid import UUID
from typing import List, Optional

from app.services.preferences import PaceZone, ElevationPref, RideTypePref


class SimulateParams(BaseModel):
    ftp_watts: Optional[float] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, ge=0)
    weekly_hours: Optional[float] = Field(default=None, ge=0)
    avg_speed_mph: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = None
    ftp_tolerance_pct: Optional[float] = Field(default=None, ge=0)


class BuddySearchFilters(BaseModel):
    """Soft filters for the buddy finder.

    Each preference accepts candidates with the same value or with their own
    wildcard ("NoPref" / "any"). A filter left unset, or set to the wildcard,
    constrains nothing. `max_distance_mi` is carried through but there is no
    inter-rider distance to compare it against, so it does not filter.
    """
    pace_zone: Optional[PaceZone] = None
    elevation_pref: Optional[ElevationPref] = None
    ride_type_pref: Optional[RideTypePref] = None
    max_distance_mi: Optional[int] = Field(default=None, ge=0)


class CompatibilityResult(BaseModel):
    id: UUID
    name: Optional[str] = None
    ftp_watts: Optional[float] = None
    weight_kg: Optional[float] = None
    avg_speed_mph: Optional[float] = None
    location: Optional[str] = None
    sensor_class: str = "non-sensor"
    compatibility: int
    match_reason: str
    metric_used: str

    # Only populated by the buddy finder
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: Optional[bool] = None
    pace_zone: Optional[str] = None
    elevation_pref: Optional[str] = None
    ride_type_pref: Optional[str] = None
    max_distance_mi: Optional[int] = None
    social_pref: Optional[str] = None


class BuddySearchResult(BaseModel):
    active: List[CompatibilityResult]
    passive: List[CompatibilityResult]
    total: int


class LegacyMatchCandidate(BaseModel):
    id: UUID
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    location: Optional[str] = None
    avg_speed: Optional[float] = None
    weekly_mileage: Optional[int] = None
    ftp_watts: Optional[int] = None
    tier: Optional[str] = None
    match_score: int


class BuddyMatchOut(BaseModel):
    id: UUID
    user1: UUID
    user2: UUID
    user1_decision: str
    user2_decision: str
    is_match: bool
    match_score: Optional[float] = None
    scheduled_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MatchScoreIn(BaseModel):
    match_score: float = Field(ge=0, le=100)
    scheduled_time: Optional[datetime] = None
