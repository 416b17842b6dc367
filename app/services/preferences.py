from enum import Enum


class PaceZone(str, Enum):
    no_pref = "NoPref"
    z1 = "Z1"
    z2 = "Z2"
    z3 = "Z3"
    z4 = "Z4"


class ElevationPref(str, Enum):
    no_pref = "NoPref"
    flat = "flat"
    rolling = "rolling"
    hilly = "hilly"


class RideTypePref(str, Enum):
    any = "any"
    road = "road"
    gravel = "gravel"
    mtb = "mtb"


class SocialPref(str, Enum):
    social = "social"
    solo = "solo"
    flexible = "flexible"


class RiderTier(str, Enum):
    a = "A"
    b = "B"
    c = "C"


class SensorClass(str, Enum):
    power_meter = "power-meter"
    non_sensor = "non-sensor"


class Decision(str, Enum):
    like = "like"
    pass_ = "pass"
    pending = "pending"


# Values a rider can submit; "pending" is only ever a stored default.
SUBMITTABLE_DECISIONS = {Decision.like.value, Decision.pass_.value}
