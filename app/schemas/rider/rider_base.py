from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from app.services.preferences import (
    PaceZone,
    ElevationPref,
    RideTypePref,
    SocialPref,
    RiderTier,
    SensorClass,
)


class RiderBase(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None

    avg_speed: Optional[float] = Field(default=None, ge=0)
    weekly_mileage: Optional[int] = Field(default=None, ge=0)
    ftp_watts: Optional[int] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, ge=0)
    ftp_wkg: Optional[float] = Field(default=None, ge=0)
    weekly_hours: Optional[float] = Field(default=None, ge=0)
    sensor_class: Optional[SensorClass] = None
    ftp_tolerance_pct: Optional[int] = Field(default=20, ge=0)
    tier: Optional[RiderTier] = None

    pace_zone: Optional[PaceZone] = None
    elevation_pref: Optional[ElevationPref] = None
    ride_type_pref: Optional[RideTypePref] = None
    max_distance_mi: Optional[int] = Field(default=None, ge=0)
    social_pref: Optional[SocialPref] = None
    active_buddy_search: Optional[bool] = False
    visible_in_passive_pool: Optional[bool] = False


class RiderCreate(RiderBase):
    pass


class RiderUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None

    avg_speed: Optional[float] = Field(default=None, ge=0)
    weekly_mileage: Optional[int] = Field(default=None, ge=0)
    ftp_watts: Optional[int] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, ge=0)
    ftp_wkg: Optional[float] = Field(default=None, ge=0)
    weekly_hours: Optional[float] = Field(default=None, ge=0)
    sensor_class: Optional[SensorClass] = None
    ftp_tolerance_pct: Optional[int] = Field(default=None, ge=0)
    tier: Optional[RiderTier] = None

    pace_zone: Optional[PaceZone] = None
    elevation_pref: Optional[ElevationPref] = None
    ride_type_pref: Optional[RideTypePref] = None
    max_distance_mi: Optional[int] = Field(default=None, ge=0)
    social_pref: Optional[SocialPref] = None
    active_buddy_search: Optional[bool] = None
    visible_in_passive_pool: Optional[bool] = None


class RiderOut(RiderBase):
    id: UUID
    total_rides: Optional[int] = 0
    kudos_received: Optional[int] = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
